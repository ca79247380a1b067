"""
Katalog okuma: `products/<slug>/items` alt koleksiyonlarından güvenilir ürün kaydı.

Ürün dokümanlarında `id` (UUID), opsiyonel `legacy_id` (int), `title`/`name`, `price` alanları bulunur.
Soft-delete edilmiş ürünler (`is_deleted=True`) bulunamamış sayılır.
"""
from typing import Any, Dict, Optional

from google.cloud.firestore_v1.base_query import FieldFilter

from storefront.config import Settings, get_db
from storefront.schemas.catalog import CartReference, LegacyId, ProductRecord

COL_GROUP = "items"


def doc_to_product(doc_id: str, src: Dict[str, Any]) -> ProductRecord:
    legacy = src.get("legacy_id")
    return ProductRecord(
        id=str(src.get("id") or doc_id),
        legacy_id=int(legacy) if legacy not in (None, "") else None,
        name=src.get("title") or src.get("name") or "",
        price=str(src.get("price", 0)),
    )


class FirestoreCatalog:
    """Legacy ID veya UUID ile tek ürün döndürür; bulunamazsa None."""

    def __init__(self, db=None, settings: Optional[Settings] = None):
        self._db = db
        self._settings = settings

    @property
    def db(self):
        # Firestore ilk sorguda başlatılır
        if self._db is None:
            self._db = get_db(self._settings)
        return self._db

    def _first(self, field: str, value: Any) -> Optional[ProductRecord]:
        snap = next(
            self.db.collection_group(COL_GROUP)
                .where(filter=FieldFilter(field, "==", value))
                .limit(1)
                .stream(),
            None,
        )
        if not snap:
            return None
        src = snap.to_dict() or {}
        if src.get("is_deleted"):
            return None
        return doc_to_product(snap.id, src)

    def get_by_legacy_id(self, legacy_id: int) -> Optional[ProductRecord]:
        return self._first("legacy_id", legacy_id)

    def get_by_uuid(self, product_id: str) -> Optional[ProductRecord]:
        return self._first("id", product_id)

    def find(self, reference: CartReference) -> Optional[ProductRecord]:
        if isinstance(reference, LegacyId):
            return self.get_by_legacy_id(reference.value)
        return self.get_by_uuid(reference.value)
