# storefront/services/checkout.py
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from storefront.integrations.payment import GatewayResult
from storefront.schemas.payment import (
    PaymentInitializeRequest,
    SanitizedPaymentRequest,
    ValidatedBasket,
)

log = logging.getLogger(__name__)

__all__ = [
    "sanitize",
    "callback_url",
    "client_ip",
    "build_transaction_doc",
    "build_order_doc",
    "persist_initiated_payment",
]


def sanitize(
    request: PaymentInitializeRequest,
    basket: ValidatedBasket,
    callback_url: str,
    ip_address: str,
    user_agent: str,
) -> SanitizedPaymentRequest:
    """
    İstemci isteğinden ödeme geçidine gidecek isteği üretir.
    `amount` ve `basketItems` daima doğrulanmış sepetten gelir; orijinal istek değiştirilmez.
    """
    data = request.model_dump(exclude={"amount", "basketItems"})
    return SanitizedPaymentRequest(
        **data,
        amount=basket.total,
        basketItems=basket.items,
        callbackUrl=callback_url,
        ipAddress=ip_address,
        userAgent=user_agent,
    )


def callback_url(base_url: str, path: str) -> str:
    if not path.startswith("/"):
        path = "/" + path
    return f"{base_url.rstrip('/')}{path}"


def client_ip(headers, client_host: Optional[str]) -> str:
    """X-Forwarded-For (ilk adres) → bağlantı adresi → 127.0.0.1"""
    forwarded = headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    return client_host or "127.0.0.1"


def build_transaction_doc(request: SanitizedPaymentRequest, result: GatewayResult) -> Dict[str, Any]:
    amount = float(request.amount)
    return {
        "order_number": request.orderNumber,
        "conversation_id": result.conversation_id,
        "status": "PENDING",
        "amount": amount,
        "paid_price": amount,
        "currency": request.currency or "TRY",
        "installment": request.installment or 1,
        "payment_channel": "WEB",
        "payment_group": "PRODUCT",
        "payment_source": "IYZICO_3DS",
        "is_3d_secure": True,
        "iyzico_payment_id": result.payment_id,
    }


def build_order_doc(request: SanitizedPaymentRequest, result: GatewayResult) -> Dict[str, Any]:
    amount = float(request.amount)
    return {
        "order_number": request.orderNumber,
        "user_id": None,  # misafir sipariş
        "email": request.buyer.email,
        "phone": request.buyer.phone or None,
        "status": "PENDING",
        "payment_status": "PENDING",
        "fulfillment_status": "UNFULFILLED",
        "total_amount": amount,
        "subtotal_amount": amount,
        "tax_amount": 0,
        "shipping_amount": 0,
        "discount_amount": 0,
        "currency": request.currency or "TRY",
        "items": [
            {"product_id": it.id, "name": it.name, "category": it.category, "price": float(it.price)}
            for it in request.basketItems
        ],
        "billing_address": request.billingAddress.model_dump(),
        "shipping_address": request.shippingAddress.model_dump(),
        "notes": f"3D Secure payment - Conversation ID: {result.conversation_id}",
    }


def persist_initiated_payment(store, request: SanitizedPaymentRequest, result: GatewayResult) -> None:
    """
    Başlatılan ödeme için transaction + order kaydı yazar.
    İki yazım bağımsızdır; hatalar loglanır, yanıtı değiştirmez.
    """
    try:
        store.insert_transaction(build_transaction_doc(request, result))
    except Exception:
        log.exception(
            "Payment transaction could not be saved (order=%s, conversation=%s)",
            request.orderNumber, result.conversation_id,
        )
    else:
        log.info(
            "Payment transaction saved (order=%s, conversation=%s, status=PENDING)",
            request.orderNumber, result.conversation_id,
        )

    try:
        store.insert_order(build_order_doc(request, result))
    except Exception:
        log.exception(
            "Order could not be saved (order=%s, conversation=%s)",
            request.orderNumber, result.conversation_id,
        )
    else:
        log.info(
            "Order saved (order=%s, conversation=%s, status=PENDING)",
            request.orderNumber, result.conversation_id,
        )
