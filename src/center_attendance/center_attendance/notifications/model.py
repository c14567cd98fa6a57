from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import DeliveryStatus, MessageType, RecipientRole


@dataclass(frozen=True)
class NotificationLogEntry:
    """One gateway attempt. Append only."""

    log_id: int
    attendance_record_id: Optional[int]
    center_id: Optional[int]
    recipient_phone: str
    recipient_role: RecipientRole
    message_type: MessageType
    status: DeliveryStatus
    sent_at: datetime
    error_message: Optional[str] = None
    channel: str = "sms"


@dataclass(frozen=True)
class StoredCredentials:
    """SMS gateway credentials as stored: key and secret are Fernet tokens."""

    center_id: int
    api_key: str
    api_secret: str
    sender_number: str
