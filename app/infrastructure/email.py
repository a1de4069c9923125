"""SendGrid client used to deliver transactional supplier emails."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

logger = logging.getLogger(__name__)


class EmailDeliveryError(RuntimeError):
    """Raised when SendGrid rejects or fails to accept a message."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass
class OutgoingEmail:
    """Message handed to the provider.

    With ``template_id`` the provider renders its dynamic template from
    ``template_data``; otherwise ``plain_text`` is sent as is.
    """

    recipient: str
    subject: str
    plain_text: str
    template_id: str | None = None
    template_data: dict[str, str | int | float] = field(default_factory=dict)


def extract_sendgrid_error_details(body: Any) -> str | None:
    """Return a human readable description for a SendGrid error payload."""

    if body in (None, ""):
        return None

    if isinstance(body, bytes):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError:
            return None

    if isinstance(body, str):
        body = body.strip()
        if not body:
            return None
        try:
            parsed = json.loads(body)
        except json.JSONDecodeError:
            return body
    else:
        parsed = body

    if isinstance(parsed, dict):
        errors = parsed.get("errors")
        if isinstance(errors, list):
            messages = [
                f"{item['message']} (field: {item['field']})"
                if item.get("field")
                else str(item["message"])
                for item in errors
                if isinstance(item, dict) and item.get("message")
            ]
            if messages:
                return "; ".join(messages)
        try:
            return json.dumps(parsed)
        except (TypeError, ValueError):
            return None

    if isinstance(parsed, list):
        return "; ".join(str(item) for item in parsed)

    return None


class SendGridEmailClient:
    """Thin wrapper around :class:`SendGridAPIClient` bound to one sender."""

    def __init__(self, api_key: str, sender: str) -> None:
        if not api_key or not sender:
            raise ValueError("SendGrid API key and sender are required")
        self._client = SendGridAPIClient(api_key)
        self._sender = sender

    @property
    def sender(self) -> str:
        return self._sender

    def send(self, email: OutgoingEmail) -> Any:
        """Send ``email`` and return the provider response.

        Raises :class:`EmailDeliveryError` for transport errors and non-2xx
        responses.
        """

        if email.template_id:
            message = Mail(from_email=self._sender, to_emails=email.recipient)
            message.template_id = email.template_id
            message.dynamic_template_data = dict(email.template_data)
        else:
            message = Mail(
                from_email=self._sender,
                to_emails=email.recipient,
                subject=email.subject,
                plain_text_content=email.plain_text,
            )

        try:
            response = self._client.send(message)
        except Exception as exc:
            status_code = getattr(exc, "status_code", None)
            details = extract_sendgrid_error_details(getattr(exc, "body", None))
            if status_code and details:
                logger.error("SendGrid API request failed with status %s: %s", status_code, details)
            elif status_code:
                logger.error("SendGrid API request failed with status %s", status_code)
            else:
                logger.error("SendGrid API request failed: %s", details or exc)
            raise EmailDeliveryError(details or str(exc), status_code=status_code) from exc

        status_code = getattr(response, "status_code", None)
        if not isinstance(status_code, int) or not 200 <= status_code < 300:
            details = extract_sendgrid_error_details(getattr(response, "body", None))
            if details:
                logger.error("SendGrid API responded with status %s: %s", status_code, details)
            else:
                logger.error("SendGrid API responded with status %s", status_code)
            raise EmailDeliveryError(
                details or f"Unexpected SendGrid status {status_code}", status_code=status_code
            )
        return response


__all__ = [
    "EmailDeliveryError",
    "OutgoingEmail",
    "SendGridEmailClient",
    "extract_sendgrid_error_details",
]
