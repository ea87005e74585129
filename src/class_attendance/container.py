from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .core.constants import DEFAULT_REPORT_DAYS, DEFAULT_REPORT_MAX_WORKERS
from .database.connection import DBConfig, DatabaseConnection
from .reports.service import ReportComposer
from .roster.mysql_roster_repository import MySQLClassRoster, MySQLTeacherDirectory
from .roster.repository import ClassRoster, TeacherDirectory
from .sessions.factory import FillPolicyFactory
from .sessions.finalization import FinalizationGate
from .sessions.leave import LeaveDayHandler
from .sessions.locking import KeyedLock
from .sessions.marking import MarkingEngine
from .sessions.mysql_session_repository import MySQLSessionRepository
from .sessions.repository import SessionRepository
from .sessions.service import ReconciliationService
from .statistics.service import StatisticsAggregator


@dataclass(frozen=True)
class Container:
    roster: ClassRoster
    teachers: TeacherDirectory
    sessions_repo: SessionRepository

    reconciliation_service: ReconciliationService
    finalization_gate: FinalizationGate
    statistics: StatisticsAggregator
    report_composer: ReportComposer

    default_report_days: int = DEFAULT_REPORT_DAYS
    conn: Optional[DatabaseConnection] = None


def wire_container(
    *,
    roster: ClassRoster,
    teachers: TeacherDirectory,
    sessions_repo: SessionRepository,
    report_max_workers: int = DEFAULT_REPORT_MAX_WORKERS,
    default_report_days: int = DEFAULT_REPORT_DAYS,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    # Marking and finalization must share one lock table.
    locks = KeyedLock()
    reconciliation_service = ReconciliationService(
        sessions_repo,
        roster,
        LeaveDayHandler(teachers),
        marking=MarkingEngine(),
        policy_factory=FillPolicyFactory(),
        locks=locks,
    )
    finalization_gate = FinalizationGate(sessions_repo, roster, locks)
    statistics = StatisticsAggregator(sessions_repo, roster)
    report_composer = ReportComposer(statistics, roster, max_workers=report_max_workers)

    return Container(
        roster=roster,
        teachers=teachers,
        sessions_repo=sessions_repo,
        reconciliation_service=reconciliation_service,
        finalization_gate=finalization_gate,
        statistics=statistics,
        report_composer=report_composer,
        default_report_days=int(default_report_days),
        conn=conn,
    )


def build_container(
    *,
    db_config: dict,
    report_max_workers: int = DEFAULT_REPORT_MAX_WORKERS,
    default_report_days: int = DEFAULT_REPORT_DAYS,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    return wire_container(
        roster=MySQLClassRoster(conn),
        teachers=MySQLTeacherDirectory(conn),
        sessions_repo=MySQLSessionRepository(conn),
        report_max_workers=report_max_workers,
        default_report_days=default_report_days,
        conn=conn,
    )
