"""
# `storefront/schemas/payment.py` — Ödeme Şema Dokümantasyonu

## Genel Bilgi
`POST /payment/initialize` gövdesi ve ödeme geçidine giden temizlenmiş (sanitized) istek modelleri.
Alan adları istemci sözleşmesiyle birebir aynı tutulur (camelCase).

---

## Girdi Şemaları (Input)

### `PaymentInitializeRequest`
| Alan | Tip | Zorunlu | Açıklama |
|------|-----|---------|----------|
| orderNumber | `str` | ✔ | Sipariş numarası (min 1) |
| amount | `float` | ✔ | İstemcinin iddia ettiği toplam (>0), sunucuda yeniden hesaplanır |
| currency | `TRY/USD/EUR/GBP` | ✖ | Varsayılan `TRY` |
| installment | `int` | ✖ | 1–12, varsayılan 1 |
| userId | `str` | ✖ | Giriş yapmış müşteri |
| basketItems | `list[BasketItem]` | ✔ | En az 1 satır, fiyatlar sadece bilgi amaçlı |
| buyer | `Buyer` | ✔ | TC kimlik no tam 11 karakter |
| billingAddress / shippingAddress | `Address` | ✔ | |
| card | `Card` | ✔ | Kart no 16–19 karakter |

---

## Çıktı / Dahili Şemalar

- `ValidatedBasketItem`, `ValidatedBasket`: sadece sepet doğrulayıcısının ürettiği, katalog fiyatlı sepet.
- `SanitizedPaymentRequest`: `sanitize(...)` çıktısı; ödeme geçidi sadece bu tipi kabul eder.
"""
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, EmailStr, Field

Currency = Literal["TRY", "USD", "EUR", "GBP"]


class BasketItem(BaseModel):
    id: str = Field(..., description="Sepet satırı ID'si (cart_<productId>_..., legacy ID veya UUID)")
    name: str
    category: str
    price: float = Field(..., gt=0, description="İstemci fiyatı (güvenilmez)")


class Buyer(BaseModel):
    name: str = Field(..., min_length=1)
    surname: str = Field(..., min_length=1)
    email: EmailStr
    phone: Optional[str] = None
    identityNumber: str = Field(..., min_length=11, max_length=11)
    address: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    country: str = "Turkey"
    zipCode: Optional[str] = None


class Address(BaseModel):
    contactName: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    country: str = "Turkey"
    zipCode: Optional[str] = None


class Card(BaseModel):
    cardHolderName: str = Field(..., min_length=1)
    cardNumber: str = Field(..., min_length=16, max_length=19)
    expireMonth: str = Field(..., min_length=2, max_length=2)
    expireYear: str = Field(..., min_length=4, max_length=4)
    cvc: str = Field(..., min_length=3, max_length=4)
    saveCard: bool = False
    cardAlias: Optional[str] = None


class PaymentInitializeRequest(BaseModel):
    orderNumber: str = Field(..., min_length=1)
    amount: float = Field(..., gt=0)
    currency: Currency = "TRY"
    installment: int = Field(1, ge=1, le=12)
    userId: Optional[str] = None
    basketItems: List[BasketItem] = Field(..., min_length=1)
    buyer: Buyer
    billingAddress: Address
    shippingAddress: Address
    card: Card


class ValidatedBasketItem(BaseModel):
    id: str = Field(..., description="Katalog ürün ID'si (UUID)")
    name: str = Field(..., description="Katalogdaki ürün adı")
    category: str = Field(..., description="İstemcinin gönderdiği kategori")
    price: Decimal = Field(..., description="Katalog fiyatı")


class ValidatedBasket(BaseModel):
    items: List[ValidatedBasketItem]
    total: Decimal


class SanitizedPaymentRequest(BaseModel):
    """Fiyat taşıyan alanları katalogdan gelen, ödeme geçidine gönderilebilir istek."""
    orderNumber: str
    amount: Decimal
    currency: Currency
    installment: int
    userId: Optional[str] = None
    basketItems: List[ValidatedBasketItem]
    buyer: Buyer
    billingAddress: Address
    shippingAddress: Address
    card: Card
    callbackUrl: str
    ipAddress: str
    userAgent: str

    model_config = {"frozen": True}


class PaymentInitData(BaseModel):
    paymentId: Optional[str] = None
    conversationId: Optional[str] = None
    htmlContent: Optional[str] = None
    threeDSHtmlContent: Optional[str] = None


class PaymentInitResponse(BaseModel):
    success: bool = True
    data: PaymentInitData
