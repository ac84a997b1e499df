"""Outbound email: an HTTP mail API client and a log-only mailer for local development."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

import httpx

if TYPE_CHECKING:
    from storefront.core.config import Settings

logger = logging.getLogger(__name__)


class MailDeliveryError(Exception):
    """Raised when an email could not be handed to the delivery provider."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class Mailer(Protocol):
    def send(self, to: str, subject: str, html: str) -> None:
        """Deliver one HTML email. Raises MailDeliveryError on failure."""
        ...


class HttpMailer:
    """
    Send mail through a Resend-compatible HTTP API (POST {api_url}/emails).

    transport is only set by tests (httpx.MockTransport).
    """

    def __init__(
        self,
        api_url: str,
        api_key: str,
        sender: str,
        timeout: float = 15.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self.api_key = api_key
        self.sender = sender
        self.timeout = timeout
        self._transport = transport

    def send(self, to: str, subject: str, html: str) -> None:
        url = f"{self.api_url}/emails"
        payload = {"from": self.sender, "to": [to], "subject": subject, "html": html}
        headers = {"Authorization": f"Bearer {self.api_key}"}
        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                resp = client.post(url, json=payload, headers=headers)
        except httpx.TimeoutException as e:
            logger.error("Mail delivery timed out", extra={"mail_status": "timeout"})
            raise MailDeliveryError("Mail provider request timed out.", 504) from e
        except httpx.ConnectError as e:
            logger.error("Mail provider unreachable", extra={"mail_status": "unreachable"})
            raise MailDeliveryError("Mail provider is unreachable.", 503) from e
        except httpx.HTTPError as e:
            logger.error("Mail delivery failed", extra={"mail_status": "error"})
            raise MailDeliveryError("Mail provider request failed.", 502) from e

        if resp.status_code == 401 or resp.status_code == 403:
            raise MailDeliveryError(
                "Mail provider rejected the API key.", resp.status_code
            )
        if resp.status_code >= 400:
            detail = resp.text[:500] if resp.text else "Unknown error"
            raise MailDeliveryError(
                f"Mail provider returned {resp.status_code}: {detail}", resp.status_code
            )
        logger.info("Email sent", extra={"mail_status": "sent", "subject": subject})


class LoggingMailer:
    """Dev-only mailer: writes the message to the log instead of sending it."""

    def send(self, to: str, subject: str, html: str) -> None:
        logger.info("Email (not sent, dev mailer) to=%s subject=%s\n%s", to, subject, html)


class UnconfiguredMailer:
    """Used in prod when MAIL_API_KEY is missing: every send fails."""

    def send(self, to: str, subject: str, html: str) -> None:
        raise MailDeliveryError("Mail delivery is not configured; set MAIL_API_KEY.", 503)


def mail_transport(settings: Settings) -> str:
    """Which outbound path the settings select: "api", "log" (dev only) or "unconfigured"."""
    api_key = (
        settings.MAIL_API_KEY.get_secret_value().strip()
        if settings.MAIL_API_KEY is not None
        else ""
    )
    if api_key:
        return "api"
    return "log" if settings.APP_ENV == "dev" else "unconfigured"


def build_mailer(settings: Settings) -> Mailer:
    """Return the HTTP mailer when configured; fall back to logging in dev only."""
    transport = mail_transport(settings)
    if transport == "api":
        return HttpMailer(
            api_url=settings.MAIL_API_URL,
            api_key=settings.MAIL_API_KEY.get_secret_value().strip(),
            sender=settings.MAIL_FROM,
            timeout=settings.MAIL_REQUEST_TIMEOUT_SEC,
        )
    if transport == "log":
        return LoggingMailer()
    logger.warning("MAIL_API_KEY is not set; outgoing email will fail.")
    return UnconfiguredMailer()
