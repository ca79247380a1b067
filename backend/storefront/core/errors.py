"""
core/errors.py - Domain exceptions and the JSON error envelope.

Routers translate these into HTTP responses; services only raise them.
"""
from decimal import Decimal
from typing import Any, Dict, List, Optional

from fastapi import status
from fastapi.responses import JSONResponse


class StorefrontError(Exception):
    """Base class for errors raised by storefront services."""


class CartReferenceError(StorefrontError, ValueError):
    """Sepet satırı ID'si ürün referansına çözülemedi."""

    def __init__(self, raw_id: str):
        super().__init__(f"Unparseable cart item id: {raw_id!r}")
        self.raw_id = raw_id


class BasketValidationError(StorefrontError):
    """
    Sepet bütünlük kontrolü başarısız.

    `code` ayrımı:
    - INVALID_PRODUCT_ID: satır ID'si çözülemedi
    - PRODUCT_NOT_FOUND: katalogda ürün yok
    - PRICE_MISMATCH: satır fiyatı %1 toleransın dışında
    - TOTAL_MISMATCH: toplam tutar 0.01 toleransın dışında
    - VALIDATION_ERROR: doğrulama sırasında beklenmeyen hata
    """
    INVALID_PRODUCT_ID = "INVALID_PRODUCT_ID"
    PRODUCT_NOT_FOUND = "PRODUCT_NOT_FOUND"
    PRICE_MISMATCH = "PRICE_MISMATCH"
    TOTAL_MISMATCH = "TOTAL_MISMATCH"
    VALIDATION_ERROR = "VALIDATION_ERROR"

    def __init__(
        self,
        code: str,
        message: str,
        item: Any = None,
        catalog_price: Optional[Decimal] = None,
        client_price: Optional[Decimal] = None,
        validated_total: Optional[Decimal] = None,
        client_total: Optional[Decimal] = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.item = item
        self.catalog_price = catalog_price
        self.client_price = client_price
        self.validated_total = validated_total
        self.client_total = client_total


def format_validation_errors(errors: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """pydantic hata listesini JSON'a güvenli `{loc, msg, type}` listesine indirger."""
    return [
        {
            "loc": [str(part) for part in err.get("loc", ())],
            "msg": str(err.get("msg", "")),
            "type": str(err.get("type", "")),
        }
        for err in errors
    ]


def error_response(
    message: str,
    status_code: int = status.HTTP_400_BAD_REQUEST,
    details: Optional[List[Dict[str, Any]]] = None,
    error_code: Optional[str] = None,
) -> JSONResponse:
    content: Dict[str, Any] = {"success": False, "error": message}
    if details is not None:
        content["details"] = details
    if error_code is not None:
        content["errorCode"] = error_code
    return JSONResponse(status_code=status_code, content=content)
