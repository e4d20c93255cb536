from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .clock.authority import ClockAuthority, HttpClockAuthority
from .common.datetime_utils import get_zone
from .core.constants import (
    DEFAULT_CLOCK_TIMEOUT_SECONDS,
    DEFAULT_DB_TIMEOUT_SECONDS,
    DEFAULT_SETTINGS_CACHE_TTL_SECONDS,
    DEFAULT_TIME_SOURCES,
    DEFAULT_TIMEZONE,
)
from .database.connection import DBConfig, DatabaseConnection
from .interns.mysql_intern_repository import MySQLInternRepository
from .leaves.mysql_leave_repository import MySQLLeaveRepository
from .leaves.service import LeaveService
from .settings.mysql_settings_repository import MySQLSettingsRepository
from .settings.service import SettingsService
from .summary.service import SummaryService
from .tasks.mysql_task_repository import MySQLTaskRepository


@dataclass(frozen=True)
class Container:
    clock: ClockAuthority

    settings_service: SettingsService
    attendance_service: AttendanceService
    leave_service: LeaveService
    summary_service: SummaryService


def build_container(
    *,
    db_config: dict,
    timezone: str = DEFAULT_TIMEZONE,
    time_sources: Sequence[str] = DEFAULT_TIME_SOURCES,
    clock_timeout: float = DEFAULT_CLOCK_TIMEOUT_SECONDS,
    settings_cache_ttl: float = DEFAULT_SETTINGS_CACHE_TTL_SECONDS,
) -> Container:
    config = DBConfig(
        host=str(db_config["host"]),
        port=int(db_config.get("port", 3306)),
        user=str(db_config["user"]),
        password=str(db_config["password"]),
        database=str(db_config["database"]),
        connection_timeout=int(db_config.get("connection_timeout", DEFAULT_DB_TIMEOUT_SECONDS)),
    )
    conn = DatabaseConnection.get_instance(config)
    zone = get_zone(timezone)

    clock = HttpClockAuthority(timezone=timezone, sources=time_sources, timeout=clock_timeout)

    settings_repo = MySQLSettingsRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn, zone=zone)
    leaves_repo = MySQLLeaveRepository(conn, zone=zone)
    tasks_repo = MySQLTaskRepository(conn)
    interns_repo = MySQLInternRepository(conn)

    settings_service = SettingsService(settings_repo, ttl_seconds=settings_cache_ttl)
    attendance_service = AttendanceService(
        attendance_repo, leaves_repo, settings_service, clock, tasks=tasks_repo, interns=interns_repo
    )
    leave_service = LeaveService(leaves_repo, attendance_repo, clock)
    summary_service = SummaryService(attendance_repo, settings_service)

    return Container(
        clock=clock,
        settings_service=settings_service,
        attendance_service=attendance_service,
        leave_service=leave_service,
        summary_service=summary_service,
    )
