import asyncio, ssl, smtplib
import logging
from email.message import EmailMessage
from html import escape
from typing import Optional

from storefront.config import Settings

log = logging.getLogger(__name__)


async def send_email(settings: Settings, to: str, subject: str, html: str, sender_name: Optional[str] = None):
    """
    Basit ve güvenli SMTP gönderici.
    - 465 ise SSL başlar; 587 ve smtp_use_starttls=True ise STARTTLS yapar.
    - Async uyumlu: bloklayan işlemi thread'e offload eder.
    """
    from_addr = settings.smtp_from or settings.smtp_user
    if not (settings.smtp_host and settings.smtp_port and settings.smtp_user and settings.smtp_password and from_addr):
        raise RuntimeError("SMTP config eksik: host/port/user/password/from kontrol edin")

    msg = EmailMessage()
    msg["To"] = to
    msg["From"] = f"{sender_name} <{from_addr}>" if sender_name else from_addr
    msg["Subject"] = subject
    msg.set_content("HTML içerik için e-postayı HTML olarak görüntüleyin.")
    msg.add_alternative(html, subtype="html")

    def _send_blocking():
        context = ssl.create_default_context()
        if settings.smtp_use_starttls:
            # 587 / STARTTLS
            with smtplib.SMTP(settings.smtp_host, settings.smtp_port) as server:
                server.ehlo()
                server.starttls(context=context)
                server.ehlo()
                server.login(settings.smtp_user, settings.smtp_password)
                server.send_message(msg)
        else:
            # 465 / SSL
            with smtplib.SMTP_SSL(settings.smtp_host, settings.smtp_port, context=context) as server:
                server.login(settings.smtp_user, settings.smtp_password)
                server.send_message(msg)

    loop = asyncio.get_event_loop()
    await loop.run_in_executor(None, _send_blocking)


def magic_login_html(login_url: str) -> str:
    url = escape(login_url, quote=True)
    return f"""<div style="font-family:Arial,sans-serif">
      <h2>Giriş linkin hazır</h2>
      <p>Hesabına şifresiz giriş yapmak için aşağıdaki bağlantıya tıkla:</p>
      <p><a href="{url}" style="font-size:16px;font-weight:bold">Giriş yap</a></p>
      <p>Bu bağlantı kısa süre geçerlidir ve tek kullanımlıktır. Paylaşmayın.</p>
      <p>Bu isteği sen yapmadıysan e-postayı yok sayabilirsin.</p>
    </div>"""


class MagicLoginMailer:
    """Giriş linki e-postası; sadece teslim edildi/edilmedi bilgisi döner."""

    def __init__(self, settings: Settings):
        self.settings = settings

    async def send_magic_login_email(self, email: str, login_url: str) -> bool:
        try:
            await send_email(
                self.settings,
                email,
                "Giriş Linkin",
                magic_login_html(login_url),
                sender_name=self.settings.smtp_sender_name,
            )
        except (RuntimeError, OSError, smtplib.SMTPException) as e:
            log.error("Magic login e-mail could not be sent to %s: %s", email, e)
            return False
        return True
