"""
storefront/config.py - Application configuration and lazy Firebase initialization.

This module defines a Pydantic BaseSettings class to load configuration from environment
(and `.env`). Handlers receive the settings through the `get_settings` dependency instead of
reading process state themselves.

Firebase Admin SDK is initialized on first use (`get_firebase_app`, `get_db`), so importing the
application never requires credentials.
"""
from functools import lru_cache
from typing import Literal, Optional

import firebase_admin
from firebase_admin import credentials, firestore
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""
    environment: Literal["development", "test", "production"] = Field(
        "production", description="development ortamında giriş linki yanıtta döner"
    )
    app_url: str = Field("http://localhost:3000", description="Public storefront base URL")
    allowed_origins: str = Field("*", description="Comma-separated list or '*' for all")
    debug: bool = False
    log_level: str = "INFO"

    # Firebase (Firestore katalog/siparişler + Authentication e-mail link)
    firebase_cred_file: str = "firebase_service_account.json"
    firebase_project_id: Optional[str] = None
    # Cloud Run için ortam değişkenlerinden servis hesabı
    firebase_private_key_id: Optional[str] = None
    firebase_private_key: Optional[str] = None
    firebase_client_email: Optional[str] = None
    firebase_client_id: Optional[str] = None
    firebase_auth_uri: Optional[str] = None
    firebase_token_uri: Optional[str] = None
    firebase_auth_provider_x509_cert_url: Optional[str] = None
    firebase_client_x509_cert_url: Optional[str] = None

    magic_login_continue_path: str = "/auth/magic-login/verify"

    iyzico_api_key: str = ""
    iyzico_secret_key: str = ""
    iyzico_base_url: str = "sandbox-api.iyzipay.com"
    payment_callback_path: str = "/api/payment/iyzico/callback"

    smtp_host: str = "localhost"
    smtp_port: int = 465
    smtp_user: Optional[str] = None
    smtp_password: Optional[str] = None
    smtp_from: Optional[str] = None
    smtp_use_starttls: bool = False  # 587 için true
    smtp_sender_name: Optional[str] = None

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def base_url(self) -> str:
        return self.app_url.rstrip("/")

    def origins(self) -> list:
        if not self.allowed_origins:
            return ["*"]
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """FastAPI dependency; testlerde dependency_overrides ile değiştirilir."""
    return Settings()


def _credential(settings: Settings):
    # Cloud Run: servis hesabı ortam değişkenlerinden gelir
    if all([
        settings.firebase_private_key_id,
        settings.firebase_private_key,
        settings.firebase_client_email,
        settings.firebase_client_id,
        settings.firebase_auth_uri,
        settings.firebase_token_uri,
        settings.firebase_auth_provider_x509_cert_url,
        settings.firebase_client_x509_cert_url,
    ]):
        return credentials.Certificate({
            "type": "service_account",
            "project_id": settings.firebase_project_id,
            "private_key_id": settings.firebase_private_key_id,
            "private_key": settings.firebase_private_key.replace("\\n", "\n"),
            "client_email": settings.firebase_client_email,
            "client_id": settings.firebase_client_id,
            "auth_uri": settings.firebase_auth_uri,
            "token_uri": settings.firebase_token_uri,
            "auth_provider_x509_cert_url": settings.firebase_auth_provider_x509_cert_url,
            "client_x509_cert_url": settings.firebase_client_x509_cert_url,
        })
    # Yerel geliştirme: servis hesabı dosyası
    return credentials.Certificate(settings.firebase_cred_file)


def get_firebase_app(settings: Optional[Settings] = None) -> firebase_admin.App:
    """Default Firebase app'i döndürür; yoksa ilk çağrıda başlatır."""
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass

    settings = settings or get_settings()
    options = {}
    if settings.firebase_project_id:
        options["projectId"] = settings.firebase_project_id
    try:
        return firebase_admin.initialize_app(_credential(settings), options)
    except ValueError as e:
        if "already exists" in str(e):
            return firebase_admin.get_app()
        raise


def get_db(settings: Optional[Settings] = None):
    """Firestore client (lazy)."""
    return firestore.client(app=get_firebase_app(settings))
