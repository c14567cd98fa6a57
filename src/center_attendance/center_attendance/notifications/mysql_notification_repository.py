from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import DeliveryStatus, MessageType, RecipientRole
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import NotificationLogEntry, StoredCredentials
from .repository import MessageTemplateRepository, NotificationLogRepository, SmsCredentialRepository


class MySQLNotificationLogRepository(NotificationLogRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO notification_logs(attendance_record_id, center_id, recipient_phone,
                    recipient_role, message_type, channel, status, error_message, sent_at)
                VALUES(%s,%s,%s,%s,%s,'sms',%s,%s,%s)
                """,
                (
                    attendance_record_id,
                    center_id,
                    recipient_phone,
                    RecipientRole(recipient_role).value,
                    MessageType(message_type).value,
                    DeliveryStatus(status).value,
                    error_message,
                    sent_at,
                ),
            )
            return int(cur.lastrowid)

    def list_for_record(self, attendance_record_id: int) -> Sequence[NotificationLogEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT log_id, attendance_record_id, center_id, recipient_phone, recipient_role,
                       message_type, channel, status, error_message, sent_at
                FROM notification_logs
                WHERE attendance_record_id=%s
                ORDER BY sent_at DESC, log_id DESC
                """,
                (attendance_record_id,),
            )
            return [
                NotificationLogEntry(
                    log_id=int(r["log_id"]),
                    attendance_record_id=r.get("attendance_record_id"),
                    center_id=r.get("center_id"),
                    recipient_phone=r["recipient_phone"],
                    recipient_role=RecipientRole(r["recipient_role"]),
                    message_type=MessageType(r["message_type"]),
                    status=DeliveryStatus(r["status"]),
                    sent_at=r["sent_at"],
                    error_message=r.get("error_message"),
                    channel=r.get("channel") or "sms",
                )
                for r in fetchall(cur)
            ]


class MySQLMessageTemplateRepository(MessageTemplateRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_active_body(self, center_id: int, template_type: str) -> Optional[str]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT body FROM message_templates
                WHERE center_id=%s AND type=%s AND is_active=1
                ORDER BY template_id DESC
                LIMIT 1
                """,
                (center_id, template_type),
            )
            row = fetchone(cur)
            return row["body"] if row else None


class MySQLSmsCredentialRepository(SmsCredentialRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, center_id: int) -> Optional[StoredCredentials]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT center_id, api_key, api_secret, sender_number FROM sms_credentials WHERE center_id=%s",
                (center_id,),
            )
            row = fetchone(cur)
            if not row:
                return None
            return StoredCredentials(
                center_id=int(row["center_id"]),
                api_key=row["api_key"],
                api_secret=row["api_secret"],
                sender_number=row["sender_number"],
            )
