"""
storefront/integrations/payment.py - Payment gateway (iyzico) integration.

Starts a 3-D Secure payment via iyzico's `ThreedsInitialize` API using the iyzipay SDK.
Only `SanitizedPaymentRequest` (katalog fiyatlı, doğrulanmış istek) is accepted, so client-asserted
prices can never reach the gateway.
"""
import base64
import binascii
import json
import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Optional

import iyzipay

from storefront.config import Settings
from storefront.core.errors import StorefrontError
from storefront.schemas.payment import SanitizedPaymentRequest

log = logging.getLogger(__name__)


class PaymentGatewayError(StorefrontError):
    """iyzico SDK çağrısı yanıt alamadan başarısız oldu."""


@dataclass(frozen=True)
class IyzicoSettings:
    api_key: str
    secret_key: str
    base_url: str

    def options(self) -> Dict[str, str]:
        return {
            "api_key": self.api_key,
            "secret_key": self.secret_key,
            "base_url": self.base_url,
        }


@dataclass
class GatewayResult:
    success: bool
    payment_id: Optional[str] = None
    conversation_id: Optional[str] = None
    html_content: Optional[str] = None
    three_ds_html_content: Optional[str] = None
    error_message: Optional[str] = None
    error_code: Optional[str] = None


def get_iyzico_settings(settings: Settings) -> Optional[IyzicoSettings]:
    """API anahtarları yoksa None (ödeme sistemi aktif değil)."""
    if not settings.iyzico_api_key or not settings.iyzico_secret_key:
        return None
    # SDK, şemasız host bekler (ör. sandbox-api.iyzipay.com)
    host = settings.iyzico_base_url.strip()
    for scheme in ("https://", "http://"):
        if host.startswith(scheme):
            host = host[len(scheme):]
    return IyzicoSettings(
        api_key=settings.iyzico_api_key,
        secret_key=settings.iyzico_secret_key,
        base_url=host.rstrip("/"),
    )


def _cents(value: Decimal) -> Decimal:
    return Decimal(value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def _money(value: Decimal) -> str:
    return str(_cents(value))


def _address(addr) -> Dict[str, Any]:
    out = {
        "contactName": addr.contactName,
        "city": addr.city,
        "country": addr.country,
        "address": addr.address,
    }
    if addr.zipCode:
        out["zipCode"] = addr.zipCode
    return out


def build_threeds_request(request: SanitizedPaymentRequest) -> Dict[str, Any]:
    """iyzico `ThreedsInitialize` gövdesini hazırlar."""
    buyer = request.buyer
    buyer_payload = {
        "id": request.userId or f"guest_{buyer.email}",
        "name": buyer.name,
        "surname": buyer.surname,
        "email": buyer.email,
        "identityNumber": buyer.identityNumber,
        "registrationAddress": buyer.address,
        "ip": request.ipAddress,
        "city": buyer.city,
        "country": buyer.country,
    }
    if buyer.phone:
        buyer_payload["gsmNumber"] = buyer.phone
    if buyer.zipCode:
        buyer_payload["zipCode"] = buyer.zipCode

    card = request.card
    card_payload = {
        "cardHolderName": card.cardHolderName,
        "cardNumber": card.cardNumber,
        "expireMonth": card.expireMonth,
        "expireYear": card.expireYear,
        "cvc": card.cvc,
        "registerCard": "1" if card.saveCard else "0",
    }
    if card.saveCard and card.cardAlias:
        card_payload["cardAlias"] = card.cardAlias

    basket_items = [
        {
            "id": item.id,
            "name": item.name,
            "category1": item.category,
            "itemType": "PHYSICAL",
            "price": _money(item.price),
        }
        for item in request.basketItems
    ]

    # iyzico, `price` değerinin sepet satırları toplamına eşit olmasını ister
    total = _money(sum((_cents(item.price) for item in request.basketItems), Decimal("0")))
    return {
        "locale": "tr",
        "conversationId": request.orderNumber,
        "price": total,
        "paidPrice": total,
        "currency": request.currency,
        "installment": str(request.installment),
        "basketId": request.orderNumber,
        "paymentChannel": "WEB",
        "paymentGroup": "PRODUCT",
        "callbackUrl": request.callbackUrl,
        "paymentCard": card_payload,
        "buyer": buyer_payload,
        "shippingAddress": _address(request.shippingAddress),
        "billingAddress": _address(request.billingAddress),
        "basketItems": basket_items,
    }


def _read_response(raw: Any) -> Dict[str, Any]:
    # SDK http.client.HTTPResponse döndürür; testlerde dict de gelebilir
    if isinstance(raw, dict):
        return raw
    if hasattr(raw, "read"):
        raw = raw.read()
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8")
    return json.loads(raw)


def _decode_html(encoded: Optional[str]) -> Optional[str]:
    if not encoded:
        return None
    try:
        return base64.b64decode(encoded).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        log.warning("threeDSHtmlContent is not base64; passing it through unchanged")
        return encoded


class IyzicoGateway:

    def __init__(self, iyzico_settings: IyzicoSettings):
        self.settings = iyzico_settings

    def initiate_3ds_payment(self, request: SanitizedPaymentRequest) -> GatewayResult:
        """
        3-D Secure ödeme başlatır.

        Dönüş: `GatewayResult`. iyzico `status=success` ise 3DS HTML içeriği (`htmlContent` çözülmüş,
        `threeDSHtmlContent` ham base64) döner; aksi halde hata mesajı/kodu.
        SDK çağrısı yanıt alamadan patlarsa `PaymentGatewayError`.
        """
        if not isinstance(request, SanitizedPaymentRequest):
            raise TypeError("initiate_3ds_payment requires a SanitizedPaymentRequest")

        payload = build_threeds_request(request)
        try:
            raw = iyzipay.ThreedsInitialize().create(payload, self.settings.options())
            response = _read_response(raw)
        except Exception as e:
            log.error("iyzico ThreedsInitialize call failed (order=%s): %s", request.orderNumber, e)
            raise PaymentGatewayError(str(e)) from e

        conversation_id = response.get("conversationId") or request.orderNumber
        if response.get("status") == "success":
            encoded = response.get("threeDSHtmlContent")
            payment_id = response.get("paymentId")
            return GatewayResult(
                success=True,
                payment_id=str(payment_id) if payment_id is not None else None,
                conversation_id=conversation_id,
                html_content=_decode_html(encoded),
                three_ds_html_content=encoded,
            )

        error_code = response.get("errorCode")
        return GatewayResult(
            success=False,
            conversation_id=conversation_id,
            error_message=response.get("errorMessage") or "Ödeme başlatılamadı",
            error_code=str(error_code) if error_code is not None else None,
        )
