from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import DeliveryStatus, MessageType, RecipientRole
from .model import NotificationLogEntry, StoredCredentials


class NotificationLogRepository(Protocol):
    def append(
        self,
        *,
        attendance_record_id: Optional[int],
        center_id: Optional[int],
        recipient_phone: str,
        recipient_role: RecipientRole,
        message_type: MessageType,
        status: DeliveryStatus,
        error_message: Optional[str],
        sent_at: datetime,
    ) -> int:
        raise NotImplementedError

    def list_for_record(self, attendance_record_id: int) -> Sequence[NotificationLogEntry]:
        raise NotImplementedError


class MessageTemplateRepository(Protocol):
    def get_active_body(self, center_id: int, template_type: str) -> Optional[str]:
        """Body of the center's active template of this type, if any."""
        raise NotImplementedError


class SmsCredentialRepository(Protocol):
    def get(self, center_id: int) -> Optional[StoredCredentials]:
        raise NotImplementedError
