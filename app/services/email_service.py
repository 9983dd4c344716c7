"""Email service for transactional emails (Resend).

To send to any recipient, verify a domain at resend.com/domains and set
EMAIL_FROM to an address at that domain.
"""

import asyncio
import logging

from app.config import settings

logger = logging.getLogger(__name__)


def _should_skip_email(to_email: str) -> bool:
    """Skip sending in test env or to test domains (Resend sandbox restricts recipients)."""
    if settings.ENVIRONMENT == "test":
        return True
    test_domains = ("@test.com", "@test.example.com", "@resend.dev")
    return any(to_email.lower().endswith(d) for d in test_domains)


def absolute_url(url: str) -> str:
    """Prefix app-relative links with PUBLIC_BASE_URL so they work from a mail client"""
    if url.startswith("/") and settings.PUBLIC_BASE_URL:
        return f"{settings.PUBLIC_BASE_URL.rstrip('/')}{url}"
    return url


def _send(payload: dict) -> None:
    import resend

    resend.api_key = settings.RESEND_API_KEY
    resend.Emails.send(payload)


def send_bill_receipt(to_email: str, bill_id: str, filename: str, content: bytes, download_url: str) -> bool:
    """
    Email a receipt PDF as an attachment, with the download link in the body.
    Returns True if sent, False if skipped (no API key) or failed.
    """
    if not settings.RESEND_API_KEY:
        logger.info("Email skipped (RESEND_API_KEY not set): bill %s to %s", bill_id, to_email)
        return False
    if _should_skip_email(to_email):
        logger.info("Email skipped (test env or test domain): bill %s to %s", bill_id, to_email)
        return True

    try:
        _send(
            {
                "from": settings.EMAIL_FROM,
                "to": [to_email],
                "subject": f"Your Bill from {settings.SHOP_NAME}",
                "text": (
                    "Thank you for your purchase. "
                    f"You can download your bill here: {absolute_url(download_url)}"
                ),
                "attachments": [{"filename": filename, "content": list(content)}],
            }
        )
        logger.info("Bill %s emailed to %s", bill_id, to_email)
        return True
    except Exception as e:
        logger.exception("Failed to email bill %s to %s: %s", bill_id, to_email, e)
        return False


def send_low_stock_alert(to_email: str, body: str) -> bool:
    """
    Send the low-stock summary.
    Returns True if sent, False if skipped (no API key) or failed.
    """
    if not settings.RESEND_API_KEY:
        logger.info("Email skipped (RESEND_API_KEY not set): low-stock alert to %s", to_email)
        return False
    if _should_skip_email(to_email):
        logger.info("Email skipped (test env or test domain): low-stock alert to %s", to_email)
        return True

    try:
        _send(
            {
                "from": settings.EMAIL_FROM,
                "to": [to_email],
                "subject": f"Low Stock Alert - {settings.SHOP_NAME}",
                "text": body,
            }
        )
        logger.info("Low-stock alert sent to %s", to_email)
        return True
    except Exception as e:
        logger.exception("Failed to send low-stock alert to %s: %s", to_email, e)
        return False


class EmailNotifier:
    """Async facade over the Resend helpers; the SDK call runs in a worker thread"""

    async def send_receipt(self, to_email: str, bill_id, filename: str, content: bytes, download_url: str) -> bool:
        return await asyncio.to_thread(
            send_bill_receipt, to_email, str(bill_id), filename, content, download_url
        )

    async def send_low_stock_alert(self, to_email: str, body: str) -> bool:
        return await asyncio.to_thread(send_low_stock_alert, to_email, body)
