# storefront/core/deps.py
"""
FastAPI bağımlılıkları: dış servis istemcileri.

Testlerde `app.dependency_overrides[...]` ile sahte (fake) uygulamalar verilir.
"""
from typing import Callable

from fastapi import Depends

from storefront.config import Settings, get_settings
from storefront.core.email_utils import MagicLoginMailer
from storefront.integrations.login_link import FirebaseLoginLinkIssuer
from storefront.integrations.payment import IyzicoGateway, IyzicoSettings
from storefront.repositories.payments import FirestorePaymentStore
from storefront.repositories.products import FirestoreCatalog


def get_login_link_issuer(settings: Settings = Depends(get_settings)) -> FirebaseLoginLinkIssuer:
    return FirebaseLoginLinkIssuer(settings)


def get_magic_login_mailer(settings: Settings = Depends(get_settings)) -> MagicLoginMailer:
    return MagicLoginMailer(settings)


def get_catalog(settings: Settings = Depends(get_settings)) -> FirestoreCatalog:
    return FirestoreCatalog(settings=settings)


def get_payment_store(settings: Settings = Depends(get_settings)) -> FirestorePaymentStore:
    return FirestorePaymentStore(settings=settings)


def get_payment_gateway_factory() -> Callable[[IyzicoSettings], IyzicoGateway]:
    return IyzicoGateway
