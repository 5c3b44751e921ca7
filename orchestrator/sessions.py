"""
Session registry — holds the reports produced by each CSV upload.

`InMemorySessionStore` keeps everything in process memory for the
lifetime of the server; a restart loses all sessions.  Production use
needs an external store with expiry implementing `SessionStore`.
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from abc import ABC, abstractmethod
from typing import Callable, Dict, List

from agents.errors import NotFoundError
from agents.report import GeneratedReport

logger = logging.getLogger(__name__)

ReportMutation = Callable[[GeneratedReport], GeneratedReport]


def new_session_id() -> str:
    return f"session_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


class SessionStore(ABC):
    """Storage contract for generated report sessions."""

    @abstractmethod
    def put(self, session_id: str, reports: List[GeneratedReport]) -> None:
        ...

    @abstractmethod
    def get(self, session_id: str) -> List[GeneratedReport]:
        """Reports of a session; raises NotFoundError for unknown ids."""
        ...

    @abstractmethod
    def update_report(
        self, session_id: str, report_id: str, mutation: ReportMutation
    ) -> GeneratedReport:
        """Atomically replace one report with ``mutation(report)``."""
        ...

    @abstractmethod
    def clear(self) -> None:
        ...

    def get_report(self, session_id: str, report_id: str) -> GeneratedReport:
        for report in self.get(session_id):
            if report.id == report_id:
                return report
        raise NotFoundError("Report not found", details=report_id)


class InMemorySessionStore(SessionStore):
    """Thread-safe dict of session id → list of reports."""

    def __init__(self) -> None:
        self._sessions: Dict[str, List[GeneratedReport]] = {}
        self._lock = threading.Lock()

    def put(self, session_id: str, reports: List[GeneratedReport]) -> None:
        with self._lock:
            self._sessions[session_id] = list(reports)
        logger.info("Stored %d report(s) under %s", len(reports), session_id)

    def get(self, session_id: str) -> List[GeneratedReport]:
        with self._lock:
            reports = self._sessions.get(session_id)
            if reports is None:
                raise NotFoundError("Session not found", details=session_id)
            return list(reports)

    def update_report(
        self, session_id: str, report_id: str, mutation: ReportMutation
    ) -> GeneratedReport:
        with self._lock:
            reports = self._sessions.get(session_id)
            if reports is None:
                raise NotFoundError("Session not found", details=session_id)
            for index, report in enumerate(reports):
                if report.id == report_id:
                    updated = mutation(report)
                    reports[index] = updated
                    return updated
        raise NotFoundError("Report not found", details=report_id)

    def clear(self) -> None:
        with self._lock:
            count = len(self._sessions)
            self._sessions.clear()
        logger.info("Cleared %d session(s)", count)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._sessions
