from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional

from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.pad_service import AttendancePadService
from .attendance.service import AttendanceService
from .classes.mysql_class_repository import MySQLClassRepository
from .codes.mysql_code_repository import MySQLAttendanceCodeRepository
from .codes.registry import CodeRegistry
from .codes.resolver import IdentityResolver
from .core import constants
from .database.connection import DBConfig, DatabaseConnection
from .maintenance.mysql_maintenance_repository import MySQLMaintenanceRepository
from .maintenance.scheduler import MaintenanceScheduler
from .maintenance.service import MaintenanceService
from .notifications.cache import TTLCache
from .notifications.credentials import CredentialResolver
from .notifications.dispatcher import NotificationDispatcher
from .notifications.gateway import DEFAULT_SMS_API_URL, SmsGateway
from .notifications.mysql_notification_repository import (
    MySQLMessageTemplateRepository,
    MySQLNotificationLogRepository,
    MySQLSmsCredentialRepository,
)
from .staff.mysql_staff_repository import MySQLStaffSettingsRepository, MySQLWorkRecordRepository
from .staff.service import StaffService
from .users.mysql_center_repository import MySQLCenterRepository
from .users.mysql_user_repository import MySQLUserRepository
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection
    tz_name: str

    users_repo: MySQLUserRepository
    centers_repo: MySQLCenterRepository
    codes_repo: MySQLAttendanceCodeRepository
    classes_repo: MySQLClassRepository
    attendance_repo: MySQLAttendanceRepository
    staff_settings_repo: MySQLStaffSettingsRepository
    work_records_repo: MySQLWorkRecordRepository
    notification_logs_repo: MySQLNotificationLogRepository

    auth_service: AuthService
    user_service: UserService
    code_registry: CodeRegistry
    resolver: IdentityResolver
    dispatcher: NotificationDispatcher
    attendance_service: AttendanceService
    pad_service: AttendancePadService
    staff_service: StaffService
    maintenance_service: MaintenanceService
    scheduler: MaintenanceScheduler


def build_container(
    *,
    db_config: dict,
    tz_name: str = constants.DEFAULT_CENTER_TIMEZONE,
    sms_api_url: str = DEFAULT_SMS_API_URL,
    sms_timeout_seconds: float = constants.SMS_TIMEOUT_SECONDS,
    sms_env_credentials: Optional[Mapping[str, Mapping[str, Optional[str]]]] = None,
    credentials_encryption_key: Optional[str] = None,
    credentials_cache_ttl_seconds: float = constants.CREDENTIALS_CACHE_TTL_SECONDS,
    credentials_cache_max_entries: int = constants.CREDENTIALS_CACHE_MAX_ENTRIES,
    attendance_retention_days: int = constants.ATTENDANCE_RETENTION_DAYS,
    work_record_retention_years: int = constants.WORK_RECORD_RETENTION_YEARS,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    users_repo = MySQLUserRepository(conn)
    centers_repo = MySQLCenterRepository(conn)
    codes_repo = MySQLAttendanceCodeRepository(conn)
    classes_repo = MySQLClassRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    staff_settings_repo = MySQLStaffSettingsRepository(conn)
    work_records_repo = MySQLWorkRecordRepository(conn)
    notification_logs_repo = MySQLNotificationLogRepository(conn)

    code_registry = CodeRegistry(codes_repo, users_repo)
    resolver = IdentityResolver(codes_repo, users_repo)

    credentials = CredentialResolver(
        MySQLSmsCredentialRepository(conn),
        centers_repo,
        env_credentials=sms_env_credentials,
        encryption_key=credentials_encryption_key,
        cache=TTLCache(ttl_seconds=credentials_cache_ttl_seconds, max_entries=credentials_cache_max_entries),
    )
    dispatcher = NotificationDispatcher(
        SmsGateway(api_url=sms_api_url, timeout=sms_timeout_seconds),
        credentials,
        MySQLMessageTemplateRepository(conn),
        notification_logs_repo,
        attendance_repo,
        centers_repo,
        tz_name=tz_name,
    )

    attendance_service = AttendanceService(
        attendance_repo,
        users_repo,
        dispatcher,
        notification_logs_repo,
        strategy_factory=AttendanceStrategyFactory(),
        tz_name=tz_name,
    )
    pad_service = AttendancePadService(
        resolver,
        attendance_service,
        users_repo,
        classes_repo,
        staff_settings_repo,
        dispatcher,
        tz_name=tz_name,
    )
    staff_service = StaffService(staff_settings_repo, work_records_repo, code_registry, users_repo, tz_name=tz_name)
    auth_service = AuthService(users_repo)
    user_service = UserService(users_repo, centers_repo, code_registry, staff_service)

    maintenance_service = MaintenanceService(
        attendance_repo,
        work_records_repo,
        MySQLMaintenanceRepository(conn),
        attendance_retention_days=attendance_retention_days,
        work_record_retention_years=work_record_retention_years,
        tz_name=tz_name,
    )

    return Container(
        conn=conn,
        tz_name=tz_name,
        users_repo=users_repo,
        centers_repo=centers_repo,
        codes_repo=codes_repo,
        classes_repo=classes_repo,
        attendance_repo=attendance_repo,
        staff_settings_repo=staff_settings_repo,
        work_records_repo=work_records_repo,
        notification_logs_repo=notification_logs_repo,
        auth_service=auth_service,
        user_service=user_service,
        code_registry=code_registry,
        resolver=resolver,
        dispatcher=dispatcher,
        attendance_service=attendance_service,
        pad_service=pad_service,
        staff_service=staff_service,
        maintenance_service=maintenance_service,
        scheduler=MaintenanceScheduler(maintenance_service),
    )
