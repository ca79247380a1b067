"""Root conftest — shared fakes and a FastAPI test client with external services overridden.

Invariants:
    - No test talks to Firebase, SMTP or iyzico
    - Every test gets fresh fakes; dependency overrides are cleared afterwards
"""

import os

# Import-time settings must never pick up real credentials
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("IYZICO_API_KEY", "")
os.environ.setdefault("IYZICO_SECRET_KEY", "")

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from storefront.config import Settings, get_settings
from storefront.core.deps import (
    get_catalog,
    get_login_link_issuer,
    get_magic_login_mailer,
    get_payment_gateway_factory,
    get_payment_store,
)
from storefront.integrations.login_link import LoginLinkResult
from storefront.integrations.payment import GatewayResult
from storefront.main import app
from storefront.schemas.catalog import LegacyId, ProductRecord

MUG_UUID = "11111111-1111-4111-8111-111111111111"
SHIRT_UUID = "3fa85f64-5717-4562-b3fc-2c963f66afa6"


class FakeCatalog:
    """In-memory catalog; records every lookup in order."""

    def __init__(self, products=()):
        self.by_legacy = {}
        self.by_uuid = {}
        self.lookups = []
        self.error = None
        for product in products:
            self.add(product)

    def add(self, product: ProductRecord):
        self.by_uuid[product.id] = product
        if product.legacy_id is not None:
            self.by_legacy[product.legacy_id] = product

    def find(self, reference):
        self.lookups.append(reference)
        if self.error is not None:
            raise self.error
        if isinstance(reference, LegacyId):
            return self.by_legacy.get(reference.value)
        return self.by_uuid.get(reference.value)


class FakeStore:
    def __init__(self):
        self.transactions = []
        self.orders = []
        self.transaction_error = None
        self.order_error = None

    def insert_transaction(self, doc):
        if self.transaction_error is not None:
            raise self.transaction_error
        self.transactions.append(doc)
        return f"tx-{len(self.transactions)}"

    def insert_order(self, doc):
        if self.order_error is not None:
            raise self.order_error
        self.orders.append(doc)
        return f"order-{len(self.orders)}"


class FakeGateway:
    def __init__(self):
        self.result = GatewayResult(
            success=True,
            payment_id="pay-1",
            conversation_id="ORD-1001",
            html_content="<html>3ds</html>",
            three_ds_html_content="PGh0bWw+M2RzPC9odG1sPg==",
        )
        self.error = None
        self.requests = []
        self.settings = []

    def factory(self, iyzico_settings):
        self.settings.append(iyzico_settings)
        return self

    def initiate_3ds_payment(self, request):
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.result


class FakeLinkIssuer:
    def __init__(self):
        self.result = LoginLinkResult(success=True, login_url="https://shop.example.com/auth/magic-login/verify?oobCode=abc")
        self.error = None
        self.calls = []

    def generate_login_link(self, email, base_url):
        self.calls.append((email, base_url))
        if self.error is not None:
            raise self.error
        return self.result


class FakeMailer:
    def __init__(self):
        self.delivered = True
        self.sent = []

    async def send_magic_login_email(self, email, login_url):
        self.sent.append((email, login_url))
        return self.delivered


def make_settings(**overrides) -> Settings:
    values = dict(
        environment="production",
        app_url="https://shop.example.com",
        iyzico_api_key="sandbox-key",
        iyzico_secret_key="sandbox-secret",
    )
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def use_settings():
    """Swap the settings dependency mid-test (after `client` installed its overrides)."""
    def _use(**overrides):
        app.dependency_overrides[get_settings] = lambda: make_settings(**overrides)
    return _use


@pytest.fixture
def catalog():
    return FakeCatalog([
        ProductRecord(id=MUG_UUID, legacy_id=1, name="Seramik Kupa", price=Decimal("100.00")),
        ProductRecord(id=SHIRT_UUID, legacy_id=None, name="Basic Tişört", price=Decimal("50.00")),
    ])


@pytest.fixture
def make_catalog():
    return FakeCatalog


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def issuer():
    return FakeLinkIssuer()


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def client(settings, catalog, store, gateway, issuer, mailer):
    """FastAPI test client with every external collaborator overridden."""
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_catalog] = lambda: catalog
    app.dependency_overrides[get_payment_store] = lambda: store
    app.dependency_overrides[get_payment_gateway_factory] = lambda: gateway.factory
    app.dependency_overrides[get_login_link_issuer] = lambda: issuer
    app.dependency_overrides[get_magic_login_mailer] = lambda: mailer
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def payment_payload():
    """Valid checkout body matching the `catalog` fixture prices."""
    return {
        "orderNumber": "ORD-1001",
        "amount": 150.0,
        "currency": "TRY",
        "installment": 1,
        "basketItems": [
            {"id": "cart_1_default_1718000000_ab12", "name": "Kupa", "category": "Ev", "price": 100.0},
            {"id": SHIRT_UUID, "name": "Tişört", "category": "Giyim", "price": 50.0},
        ],
        "buyer": {
            "name": "Ayşe",
            "surname": "Yılmaz",
            "email": "ayse@example.com",
            "phone": "+905551234567",
            "identityNumber": "74300864791",
            "address": "Moda Cad. No:1 Kadıköy",
            "city": "Istanbul",
            "zipCode": "34710",
        },
        "billingAddress": {
            "contactName": "Ayşe Yılmaz",
            "address": "Moda Cad. No:1 Kadıköy",
            "city": "Istanbul",
        },
        "shippingAddress": {
            "contactName": "Ayşe Yılmaz",
            "address": "Moda Cad. No:1 Kadıköy",
            "city": "Istanbul",
        },
        "card": {
            "cardHolderName": "Ayse Yilmaz",
            "cardNumber": "5528790000000008",
            "expireMonth": "12",
            "expireYear": "2030",
            "cvc": "123",
        },
    }
