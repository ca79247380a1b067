"""iyzico adapter — ThreedsInitialize payload, response mapping and failure modes.

Invariants:
    - only a SanitizedPaymentRequest reaches the SDK
    - prices are sent as two-decimal strings taken from the validated basket
    - an SDK exception surfaces as PaymentGatewayError, a declined request as a failed GatewayResult
"""

import io
import json
from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from storefront.integrations import payment as payment_module
from storefront.integrations.payment import (
    IyzicoGateway,
    IyzicoSettings,
    PaymentGatewayError,
    build_threeds_request,
    get_iyzico_settings,
)
from storefront.schemas.catalog import ProductRecord
from storefront.schemas.payment import PaymentInitializeRequest
from storefront.services.basket_integrity import validate_basket
from storefront.services.checkout import sanitize

SETTINGS = IyzicoSettings(api_key="k", secret_key="s", base_url="sandbox-api.iyzipay.com")


@pytest.fixture
def request_pair(payment_payload, catalog):
    payment_payload["card"]["saveCard"] = True
    payment_payload["card"]["cardAlias"] = "Maaş kartı"
    request = PaymentInitializeRequest.model_validate(payment_payload)
    basket = validate_basket(request.basketItems, catalog)
    clean = sanitize(
        request,
        basket,
        callback_url="https://shop.example.com/api/payment/iyzico/callback",
        ip_address="203.0.113.7",
        user_agent="pytest",
    )
    return request, clean


@pytest.fixture
def sdk(monkeypatch):
    """Replaces iyzipay.ThreedsInitialize; set `sdk.response` to the JSON iyzico would return."""
    fake = MagicMock()
    fake.response = {"status": "success"}
    fake.return_value.create.side_effect = lambda payload, options: io.BytesIO(
        json.dumps(fake.response).encode("utf-8")
    )
    monkeypatch.setattr(payment_module.iyzipay, "ThreedsInitialize", fake)
    return fake


def test_payload_uses_validated_prices_and_order_number(request_pair):
    _, clean = request_pair
    payload = build_threeds_request(clean)

    assert payload["price"] == "150.00"
    assert payload["paidPrice"] == "150.00"
    assert payload["conversationId"] == "ORD-1001"
    assert payload["basketId"] == "ORD-1001"
    assert payload["installment"] == "1"
    assert payload["callbackUrl"] == "https://shop.example.com/api/payment/iyzico/callback"
    assert [it["price"] for it in payload["basketItems"]] == ["100.00", "50.00"]
    assert payload["basketItems"][0]["category1"] == "Ev"
    assert payload["basketItems"][0]["itemType"] == "PHYSICAL"


def test_payload_buyer_and_card(request_pair):
    _, clean = request_pair
    payload = build_threeds_request(clean)

    assert payload["buyer"]["id"] == "guest_ayse@example.com"
    assert payload["buyer"]["ip"] == "203.0.113.7"
    assert payload["buyer"]["gsmNumber"] == "+905551234567"
    assert payload["paymentCard"]["registerCard"] == "1"
    assert payload["paymentCard"]["cardAlias"] == "Maaş kartı"


def test_success_returns_decoded_and_raw_html(request_pair, sdk):
    _, clean = request_pair
    sdk.response = {
        "status": "success",
        "paymentId": 12345,
        "conversationId": "ORD-1001",
        "threeDSHtmlContent": "PGh0bWw+M2RzPC9odG1sPg==",
    }

    result = IyzicoGateway(SETTINGS).initiate_3ds_payment(clean)

    assert result.success is True
    assert result.payment_id == "12345"
    assert result.html_content == "<html>3ds</html>"
    assert result.three_ds_html_content == "PGh0bWw+M2RzPC9odG1sPg=="
    payload, options = sdk.return_value.create.call_args.args
    assert payload["price"] == "150.00"
    assert options == SETTINGS.options()


def test_declined_request_returns_error_fields(request_pair, sdk):
    _, clean = request_pair
    sdk.response = {"status": "failure", "errorCode": 10051, "errorMessage": "Kart limiti yetersiz"}

    result = IyzicoGateway(SETTINGS).initiate_3ds_payment(clean)

    assert result.success is False
    assert result.error_code == "10051"
    assert result.error_message == "Kart limiti yetersiz"
    assert result.conversation_id == "ORD-1001"


def test_declined_request_without_message_gets_default(request_pair, sdk):
    _, clean = request_pair
    sdk.response = {"status": "failure"}

    result = IyzicoGateway(SETTINGS).initiate_3ds_payment(clean)

    assert result.error_message == "Ödeme başlatılamadı"
    assert result.error_code is None


def test_sdk_exception_raises_gateway_error(request_pair, sdk):
    _, clean = request_pair
    sdk.return_value.create.side_effect = ConnectionResetError("connection reset by peer")

    with pytest.raises(PaymentGatewayError):
        IyzicoGateway(SETTINGS).initiate_3ds_payment(clean)


def test_unsanitized_request_is_refused(request_pair, sdk):
    original, _ = request_pair

    with pytest.raises(TypeError):
        IyzicoGateway(SETTINGS).initiate_3ds_payment(original)
    sdk.assert_not_called()


def test_settings_absent_without_keys(settings):
    assert get_iyzico_settings(settings.model_copy(update={"iyzico_api_key": ""})) is None


def test_settings_strip_scheme_from_base_url(settings):
    configured = settings.model_copy(update={"iyzico_base_url": "https://api.iyzipay.com/"})
    assert get_iyzico_settings(configured).base_url == "api.iyzipay.com"


def test_payload_price_equals_sum_of_item_prices(payment_payload, make_catalog):
    catalog = make_catalog([
        ProductRecord(id="00000000-0000-4000-8000-000000000001", legacy_id=1, name="Kalem", price=Decimal("10.005")),
        ProductRecord(id="00000000-0000-4000-8000-000000000002", legacy_id=2, name="Silgi", price=Decimal("10.005")),
    ])
    payment_payload["basketItems"] = [
        {"id": "cart_1_v_1_1", "name": "Kalem", "category": "Kırtasiye", "price": 10.0},
        {"id": "cart_2_v_1_1", "name": "Silgi", "category": "Kırtasiye", "price": 10.0},
    ]
    payment_payload["amount"] = 20.02
    request = PaymentInitializeRequest.model_validate(payment_payload)
    clean = sanitize(
        request,
        validate_basket(request.basketItems, catalog),
        callback_url="https://shop.example.com/api/payment/iyzico/callback",
        ip_address="203.0.113.7",
        user_agent="pytest",
    )

    payload = build_threeds_request(clean)

    item_sum = sum(Decimal(it["price"]) for it in payload["basketItems"])
    assert Decimal(payload["price"]) == item_sum
    assert payload["paidPrice"] == payload["price"] == "20.02"
