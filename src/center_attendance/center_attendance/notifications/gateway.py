from __future__ import annotations

import hashlib
import hmac
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

import requests

from ..common.validators import phone_digits
from ..core.constants import SMS_TIMEOUT_SECONDS
from .credentials import SmsCredentials

logger = logging.getLogger(__name__)

DEFAULT_SMS_API_URL = "https://api.solapi.com/messages/v4/send"


@dataclass(frozen=True)
class SendResult:
    success: bool
    error: Optional[str] = None


def sign_request(api_key: str, api_secret: str, *, date: str, salt: str) -> str:
    """HMAC-SHA256 Authorization header value for the SMS API."""
    signature = hmac.new(
        api_secret.encode("utf-8"),
        (date + salt).encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()
    return f"HMAC-SHA256 apiKey={api_key}, date={date}, salt={salt}, signature={signature}"


class SmsGateway:
    """Outbound SMS over HTTP. Never raises: every outcome is a SendResult."""

    def __init__(self, *, api_url: str = DEFAULT_SMS_API_URL, timeout: float = SMS_TIMEOUT_SECONDS, http=None):
        self._api_url = api_url
        self._timeout = float(timeout)
        self._http = http or requests

    def send(self, credentials: SmsCredentials, *, to: str, text: str) -> SendResult:
        date = datetime.now(timezone.utc).isoformat()
        salt = secrets.token_hex(16)
        headers = {
            "Authorization": sign_request(credentials.api_key, credentials.api_secret, date=date, salt=salt),
            "Content-Type": "application/json",
        }
        payload = {
            "message": {
                "to": phone_digits(to),
                "from": phone_digits(credentials.sender_number),
                "text": text,
            }
        }

        try:
            response = self._http.post(self._api_url, json=payload, headers=headers, timeout=self._timeout)
        except requests.exceptions.Timeout:
            logger.warning("SMS gateway timeout after %.1fs", self._timeout)
            return SendResult(False, "SMS gateway timeout")
        except requests.exceptions.RequestException as e:
            logger.error("SMS gateway request failed: %s", e)
            return SendResult(False, f"SMS gateway request failed: {e}")

        if response.status_code >= 400:
            detail = (response.text or "")[:500]
            logger.error("SMS gateway rejected message (%s): %s", response.status_code, detail)
            return SendResult(False, f"HTTP {response.status_code}: {detail}")

        return SendResult(True)
