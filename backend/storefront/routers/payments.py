"""
# storefront/routers/payments.py — 3D Secure Ödeme Başlatma Dokümantasyonu

## Genel Bilgi
Bu dosya, iyzico üzerinden 3D Secure ödeme başlatmayı yönetir. İstemciden gelen sepet fiyatlarına
güvenilmez: her satır katalogdan yeniden fiyatlanır, toplam sunucuda hesaplanır.

---

## Endpoint’ler

### POST /payment/initialize
Amaç: 3D Secure ödeme akışını başlatmak ve iyzico'nun döndürdüğü 3DS HTML içeriğini istemciye iletmek.

İşleyiş:
1. Gövde şemaya göre doğrulanır (taksit 1–12, TC kimlik 11 karakter, kart no 16–19 karakter...); hatalıysa 400.
2. Sepet satırları katalogla doğrulanır (satır başına %1 tolerans); ilk hatalı satırda 400.
3. İstemci toplamı doğrulanmış toplamla karşılaştırılır (0.01 tolerans); sapma varsa 400.
4. iyzico ayarları yoksa 503.
5. Temizlenmiş istek (katalog fiyatları + callback URL + IP + user-agent) iyzico'ya gönderilir.
6. Başarılıysa `payment_transactions` ve `orders` kayıtları yazılır (hatalar sadece loglanır) ve 200 döner.
7. iyzico hata dönerse 400 (`error`, `errorCode`); beklenmeyen hatada 500.

Her çağrının toplam süresi loglanır.

"""
import logging
import time
from typing import Any

from fastapi import APIRouter, Body, Depends, Request, status
from pydantic import ValidationError

from storefront.config import Settings, get_settings
from storefront.core.deps import (
    get_catalog,
    get_payment_gateway_factory,
    get_payment_store,
)
from storefront.core.errors import BasketValidationError, error_response, format_validation_errors
from storefront.integrations.payment import get_iyzico_settings
from storefront.schemas.payment import PaymentInitData, PaymentInitializeRequest, PaymentInitResponse
from storefront.services.basket_integrity import check_total, validate_basket
from storefront.services.checkout import callback_url, client_ip, persist_initiated_payment, sanitize

log = logging.getLogger(__name__)

router = APIRouter(prefix="/payment", tags=["Payments"])


@router.post(
    "/initialize",
    response_model=PaymentInitResponse,
    summary="iyzico 3D Secure ödeme başlat",
)
def initialize_payment(
    request: Request,
    body: Any = Body(..., description="Checkout payload"),
    settings: Settings = Depends(get_settings),
    catalog=Depends(get_catalog),
    store=Depends(get_payment_store),
    gateway_factory=Depends(get_payment_gateway_factory),
):
    started = time.monotonic()
    log.info("POST /payment/initialize started")
    try:
        try:
            payment_request = PaymentInitializeRequest.model_validate(body)
        except ValidationError as exc:
            # Girdi loglanmaz (kart bilgisi)
            details = format_validation_errors(exc.errors())
            log.error("Payment request validation error: %s", details)
            return error_response("Geçersiz veri formatı", status.HTTP_400_BAD_REQUEST, details=details)
        order_number = payment_request.orderNumber
        log.info("Payment request validated (order=%s)", order_number)

        try:
            basket = validate_basket(payment_request.basketItems, catalog)
        except BasketValidationError as exc:
            log.error(
                "[SECURITY_BREACH] Price validation failed! order=%s code=%s error=%s",
                order_number, exc.code, exc.message,
            )
            return error_response(
                "Güvenlik kontrolü başarısız: " + exc.message,
                status.HTTP_400_BAD_REQUEST,
                error_code=exc.code,
            )

        try:
            check_total(basket.total, payment_request.amount)
        except BasketValidationError as exc:
            log.error("[SECURITY_BREACH] Total check failed! order=%s", order_number)
            return error_response(exc.message, status.HTTP_400_BAD_REQUEST, error_code=exc.code)

        log.info(
            "[SECURITY] Price validation passed (order=%s, total=%s, items=%d)",
            order_number, basket.total, len(basket.items),
        )

        iyzico_settings = get_iyzico_settings(settings)
        if iyzico_settings is None:
            log.error("iyzico settings are not configured (IYZICO_API_KEY / IYZICO_SECRET_KEY)")
            return error_response("İyzico ödeme sistemi aktif değil", status.HTTP_503_SERVICE_UNAVAILABLE)

        sanitized = sanitize(
            payment_request,
            basket,
            callback_url=callback_url(settings.base_url, settings.payment_callback_path),
            ip_address=client_ip(request.headers, request.client.host if request.client else None),
            user_agent=request.headers.get("user-agent") or "Unknown",
        )
        log.info(
            "Starting 3DS payment (order=%s, callback=%s, ip=%s)",
            order_number, sanitized.callbackUrl, sanitized.ipAddress,
        )

        gateway = gateway_factory(iyzico_settings)
        result = gateway.initiate_3ds_payment(sanitized)
        log.info("3DS initialize finished (success=%s, conversation=%s)", result.success, result.conversation_id)

        if not result.success:
            log.error(
                "3DS initialize rejected by gateway (order=%s, code=%s): %s",
                order_number, result.error_code, result.error_message,
            )
            return error_response(
                result.error_message or "Ödeme başlatılamadı",
                status.HTTP_400_BAD_REQUEST,
                error_code=result.error_code,
            )

        persist_initiated_payment(store, sanitized, result)

        log.info("3DS initialize succeeded (payment=%s, conversation=%s)", result.payment_id, result.conversation_id)
        return PaymentInitResponse(
            data=PaymentInitData(
                paymentId=result.payment_id,
                conversationId=result.conversation_id,
                htmlContent=result.html_content,
                threeDSHtmlContent=result.three_ds_html_content,
            )
        )
    except Exception:
        log.exception("Unexpected error in POST /payment/initialize")
        return error_response(
            "Sunucu tarafında beklenmeyen bir hata oluştu.",
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    finally:
        duration_ms = int((time.monotonic() - started) * 1000)
        log.info("POST /payment/initialize finished in %dms", duration_ms)
