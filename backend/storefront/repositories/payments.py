"""
Ödeme başlatma kayıtları: `payment_transactions` ve `orders` koleksiyonları.

İki yazım birbirinden bağımsızdır (batch/transaction yok).
"""
from typing import Any, Dict, Optional

from google.cloud import firestore as gcf

from storefront.config import Settings, get_db

TRANSACTIONS_COL = "payment_transactions"
ORDERS_COL = "orders"


class FirestorePaymentStore:

    def __init__(self, db=None, settings: Optional[Settings] = None):
        self._db = db
        self._settings = settings

    @property
    def db(self):
        if self._db is None:
            self._db = get_db(self._settings)
        return self._db

    def _insert(self, collection: str, doc: Dict[str, Any]) -> str:
        ref = self.db.collection(collection).document()
        ref.set({**doc, "created_at": gcf.SERVER_TIMESTAMP, "updated_at": gcf.SERVER_TIMESTAMP})
        return ref.id

    def insert_transaction(self, doc: Dict[str, Any]) -> str:
        return self._insert(TRANSACTIONS_COL, doc)

    def insert_order(self, doc: Dict[str, Any]) -> str:
        return self._insert(ORDERS_COL, doc)
