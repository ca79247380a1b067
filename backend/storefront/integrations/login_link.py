"""
storefront/integrations/login_link.py - Passwordless login links via Firebase Authentication.

Firebase'in e-mail link ile giriş (email link sign-in) akışı kullanılır: Admin SDK tek kullanımlık,
süreli bir giriş linki üretir; link storefront'taki doğrulama sayfasına (`continue URL`) döner.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from firebase_admin import auth as firebase_auth
from firebase_admin import exceptions as firebase_exceptions

from storefront.config import Settings, get_firebase_app

log = logging.getLogger(__name__)


@dataclass
class LoginLinkResult:
    success: bool
    login_url: Optional[str] = None
    error: Optional[str] = None


class FirebaseLoginLinkIssuer:

    def __init__(self, settings: Settings):
        self.settings = settings

    def continue_url(self, base_url: str) -> str:
        path = self.settings.magic_login_continue_path
        if not path.startswith("/"):
            path = "/" + path
        return f"{base_url.rstrip('/')}{path}"

    def generate_login_link(self, email: str, base_url: str) -> LoginLinkResult:
        action_code_settings = firebase_auth.ActionCodeSettings(
            url=self.continue_url(base_url),
            handle_code_in_app=True,
        )
        try:
            link = firebase_auth.generate_sign_in_with_email_link(
                email,
                action_code_settings,
                app=get_firebase_app(self.settings),
            )
        except (firebase_exceptions.FirebaseError, ValueError) as exc:
            log.error("Firebase sign-in link generation failed for %s: %s", email, exc)
            return LoginLinkResult(success=False, error="Giriş linki oluşturulamadı. Lütfen tekrar deneyin.")
        return LoginLinkResult(success=True, login_url=link)
