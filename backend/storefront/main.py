"""
# `storefront/main.py` — Ana Uygulama Dokümantasyonu

## Genel Bilgi
Bu dosya, FastAPI uygulamasının başlangıç noktasıdır.
Router’lar eklenir, CORS ayarları yapılır, istek doğrulama hataları ortak hata zarfına çevrilir.

---

## Router Dahil Etme
- `POST /magic-login`
- `POST /payment/initialize`
- `GET /health`

## Hata Zarfı
Tüm hata yanıtları `{"success": false, "error": "...", "details"?: [...], "errorCode"?: "..."}` biçimindedir.
Bozuk JSON gövdeler de 400 ile bu zarfta döner.

"""
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from storefront.config import get_settings
from storefront.core.errors import error_response, format_validation_errors
from storefront.core.logging_config import setup_logging
from storefront.routers import auth, payments

settings = get_settings()
setup_logging(settings.log_level)

# Initialize FastAPI app
app = FastAPI(
    title="Storefront Checkout API",
    description="Passwordless login links and iyzico 3D Secure payment initialization.",
    version="1.0.0",
    redirect_slashes=False,
    debug=settings.debug,
)

# Configure CORS (allow front-end domain or all origins as specified)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(payments.router)


@app.exception_handler(RequestValidationError)
async def _request_validation_handler(request: Request, exc: RequestValidationError):
    return error_response(
        "Geçersiz veri formatı",
        status.HTTP_400_BAD_REQUEST,
        details=format_validation_errors(exc.errors()),
    )


@app.get("/health")
def health_check():
    """Liveness probe (Cloud Run / Kubernetes)."""
    return {"status": "ok"}


# Run the app directly with uvicorn (for development)
if __name__ == "__main__":
    import uvicorn
    uvicorn.run("storefront.main:app", host="0.0.0.0", port=8000, reload=True)
