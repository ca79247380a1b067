"""
# storefront/routers/auth.py — Şifresiz Giriş (Magic Link) Dokümantasyonu

## Genel Bilgi
Bu dosya, müşterilerin e-posta adresine tek kullanımlık giriş linki gönderilmesini yönetir.
Link Firebase Authentication (email link sign-in) ile üretilir, SMTP ile gönderilir.

---

## Endpoint’ler

### POST /magic-login
Amaç: E-posta adresine giriş linki göndermek.

Gövde (JSON):
- email: E-posta adresi

İşleyiş:
1. E-posta biçimi doğrulanır; geçersizse 400 ve tüm hatalar `details` altında döner.
2. Firebase ile `APP_URL` tabanlı giriş linki üretilir; başarısızsa 500.
3. Link e-posta ile gönderilir; gönderilemezse 500 (link yanıtta yer almaz).
4. Başarılıysa 200 döner. `ENVIRONMENT=development` ise üretilen link `loginUrl` olarak yanıta eklenir.

"""
import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, status
from pydantic import ValidationError

from storefront.config import Settings, get_settings
from storefront.core.deps import get_login_link_issuer, get_magic_login_mailer
from storefront.core.errors import error_response, format_validation_errors
from storefront.schemas.auth import MagicLoginRequest, MagicLoginResponse

log = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])


@router.post(
    "/magic-login",
    response_model=MagicLoginResponse,
    response_model_exclude_none=True,
    summary="E-posta ile şifresiz giriş linki gönder",
)
async def request_magic_login(
    body: Any = Body(..., description='{"email": "..."}'),
    settings: Settings = Depends(get_settings),
    issuer=Depends(get_login_link_issuer),
    mailer=Depends(get_magic_login_mailer),
):
    try:
        try:
            payload = MagicLoginRequest.model_validate(body)
        except ValidationError as exc:
            return error_response(
                "Geçersiz e-mail adresi",
                status.HTTP_400_BAD_REQUEST,
                details=format_validation_errors(exc.errors()),
            )

        email = payload.email
        log.info("Magic login link requested for %s", email)

        result = issuer.generate_login_link(email, settings.base_url)
        if not result.success:
            log.error("Magic login link could not be generated for %s: %s", email, result.error)
            return error_response(
                result.error or "Giriş linki oluşturulamadı. Lütfen tekrar deneyin.",
                status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

        sent = await mailer.send_magic_login_email(email, result.login_url)
        if not sent:
            log.error("Magic login e-mail could not be delivered to %s", email)
            return error_response(
                "E-mail gönderilemedi. Lütfen tekrar deneyin.",
                status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

        log.info("Magic login e-mail sent to %s", email)
        return MagicLoginResponse(
            message="Giriş linki oluşturuldu ve e-mail gönderildi. E-mail kutunuzu kontrol edin.",
            # Sadece yerel geliştirme için
            loginUrl=result.login_url if settings.is_development else None,
        )
    except Exception:
        log.exception("Magic login error")
        return error_response("Sunucu hatası. Lütfen tekrar deneyin.", status.HTTP_500_INTERNAL_SERVER_ERROR)
