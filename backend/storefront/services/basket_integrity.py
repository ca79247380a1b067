# storefront/services/basket_integrity.py
"""
Sepet bütünlük kontrolü.

İstemciden gelen sepet fiyatları sadece bilgi amaçlıdır. Ödeme geçidine gitmeden önce her satır
katalogdan yeniden fiyatlanır ve toplam tutar sunucuda hesaplanır.

- `parse_cart_reference`: sepet satırı ID'sini `LegacyId` / `ProductUuid` referansına çözer.
- `validate_basket`: satırları sırayla doğrular, ilk hatada durur.
- `check_total`: istemci toplamını doğrulanmış toplamla karşılaştırır.

Toleranslar politika sabitleridir: satır başına katalog fiyatının %1'i (göreli),
toplamda 0.01 para birimi (mutlak).
"""
from __future__ import annotations

import logging
import re
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable, List, Optional

from storefront.core.errors import BasketValidationError, CartReferenceError
from storefront.schemas.catalog import CartReference, LegacyId, ProductRecord, ProductUuid
from storefront.schemas.payment import BasketItem, ValidatedBasket, ValidatedBasketItem

log = logging.getLogger(__name__)

__all__ = [
    "PRICE_TOLERANCE_RATIO",
    "TOTAL_TOLERANCE",
    "parse_cart_reference",
    "validate_basket",
    "check_total",
]

PRICE_TOLERANCE_RATIO = Decimal("0.01")
TOTAL_TOLERANCE = Decimal("0.01")
CENT = Decimal("0.01")
# Firestore tamsayıları int64; 18 hane her zaman sığar
LEGACY_ID_MAX_DIGITS = 18

CART_ID_PREFIX = "cart_"
UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE
)
_DIGITS = re.compile(r"^[0-9]+$")


def _positive_int(value: str, raw_id: str) -> Optional[int]:
    if not _DIGITS.fullmatch(value):
        return None
    if len(value) > LEGACY_ID_MAX_DIGITS:
        log.warning("Cart item id has an oversized numeric product segment (%d digits)", len(value))
        raise CartReferenceError(raw_id)
    number = int(value, 10)
    return number if number > 0 else None


def to_decimal(value: Any) -> Decimal:
    """float/str/Decimal → Decimal (float'ın ikili gösterimi taşınmaz)."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def parse_cart_reference(raw_id: str) -> CartReference:
    """
    Sepet satırı ID'sinden ürün referansını çıkarır.

    Format: `cart_<productId>_<variantId>_<timestamp>_<random>` (sadece productId kullanılır),
    ya da doğrudan legacy sayısal ID / UUID.
    Çözülemezse `CartReferenceError`.
    """
    if raw_id.startswith(CART_ID_PREFIX):
        candidate = raw_id.split("_")[1]
        legacy = _positive_int(candidate, raw_id)
        if legacy is not None:
            return LegacyId(legacy)
        if candidate:
            return ProductUuid(candidate)
        log.warning("Cart item id has an empty product segment: %r", raw_id)
        raise CartReferenceError(raw_id)

    legacy = _positive_int(raw_id, raw_id)
    if legacy is not None:
        return LegacyId(legacy)

    if UUID_PATTERN.fullmatch(raw_id):
        return ProductUuid(raw_id)

    log.warning("Cart item id could not be parsed: %r", raw_id)
    raise CartReferenceError(raw_id)


def _describe(reference: CartReference) -> str:
    return str(reference.value)


def validate_basket(items: Iterable[BasketItem], catalog) -> ValidatedBasket:
    """
    Sepeti katalog fiyatlarıyla yeniden kurar.

    `catalog.find(reference)` → `ProductRecord | None`. Satırlar giriş sırasıyla, tek tek doğrulanır;
    ilk hatalı satırda `BasketValidationError` fırlatılır ve sonraki satırlar hiç sorgulanmaz.
    """
    items = list(items)
    log.info("[SECURITY] Starting price validation for basket items (count=%d)", len(items))

    validated: List[ValidatedBasketItem] = []
    total = Decimal("0")

    for item in items:
        try:
            reference = parse_cart_reference(item.id)
        except CartReferenceError:
            log.error(
                "[SECURITY_BREACH] Invalid cart item id format! cart_item_id=%s name=%s client_price=%s",
                item.id, item.name, item.price,
            )
            raise BasketValidationError(
                BasketValidationError.INVALID_PRODUCT_ID,
                f"Geçersiz ürün ID formatı: {item.id}",
                item=item,
            )

        log.debug("[SECURITY] Parsed product reference %r from cart item %s", reference, item.id)

        try:
            product: Optional[ProductRecord] = catalog.find(reference)
        except Exception:
            log.exception("[SECURITY] Catalog lookup failed during price validation (cart_item_id=%s)", item.id)
            raise BasketValidationError(
                BasketValidationError.VALIDATION_ERROR,
                "Fiyat doğrulama sırasında hata oluştu",
                item=item,
            )

        if product is None:
            log.error(
                "[SECURITY_BREACH] Product not found in catalog! cart_item_id=%s product_ref=%s name=%s client_price=%s",
                item.id, _describe(reference), item.name, item.price,
            )
            raise BasketValidationError(
                BasketValidationError.PRODUCT_NOT_FOUND,
                f"Ürün bulunamadı: {item.name} (Cart ID: {item.id}, Product ID: {_describe(reference)})",
                item=item,
            )

        catalog_price = to_decimal(product.price)
        client_price = to_decimal(item.price)
        difference = abs(catalog_price - client_price)
        threshold = catalog_price * PRICE_TOLERANCE_RATIO

        if difference > threshold:
            log.error(
                "[SECURITY_BREACH] Price manipulation detected! product_id=%s name=%s catalog_price=%s "
                "client_price=%s difference=%s threshold=%s",
                product.id, product.name, catalog_price, client_price, difference, threshold,
            )
            raise BasketValidationError(
                BasketValidationError.PRICE_MISMATCH,
                f"Fiyat manipülasyonu tespit edildi! Ürün: {product.name}. "
                f"Gerçek fiyat: {catalog_price} TL, Gönderilen: {client_price} TL",
                item=item,
                catalog_price=catalog_price,
                client_price=client_price,
            )

        # Kuruşa yuvarlanmış katalog fiyatı; toplam bu satırların toplamıdır
        unit_price = catalog_price.quantize(CENT, rounding=ROUND_HALF_UP)
        validated.append(ValidatedBasketItem(
            id=product.id,
            name=product.name,
            category=item.category,
            price=unit_price,
        ))
        total += unit_price

    log.info("[SECURITY] All basket items validated (count=%d, total=%s)", len(validated), total)
    return ValidatedBasket(items=validated, total=total)


def check_total(validated_total: Decimal, client_total: Any) -> None:
    """İstemci toplamı, doğrulanmış toplamdan 0.01'den fazla saparsa `BasketValidationError`."""
    validated_total = to_decimal(validated_total)
    client_total = to_decimal(client_total)
    difference = abs(validated_total - client_total)

    if difference > TOTAL_TOLERANCE:
        log.error(
            "[SECURITY_BREACH] Total amount manipulation detected! validated_total=%s client_total=%s difference=%s",
            validated_total, client_total, difference,
        )
        raise BasketValidationError(
            BasketValidationError.TOTAL_MISMATCH,
            f"Toplam tutar manipülasyonu tespit edildi! Gerçek tutar: {validated_total:.2f} TL, "
            f"Gönderilen: {client_total:.2f} TL",
            validated_total=validated_total,
            client_total=client_total,
        )
