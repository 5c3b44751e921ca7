"""
BaseAgent — shared run wrapper for the report pipeline stages.

Subclasses implement ``_execute``.  ``run`` times the call and keeps an
``AgentLog`` that the orchestrator copies into its result.  Expected
failures (``DocWriterError``) are logged as warnings, anything else with
its traceback; both propagate to the caller.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from agents.errors import DocWriterError

logger = logging.getLogger(__name__)


@dataclass
class AgentLog:
    agent_name: str = ""
    status: str = "idle"             # idle | running | success | error
    duration_seconds: float = 0.0
    messages: List[str] = field(default_factory=list)
    error: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "agent": self.agent_name,
            "status": self.status,
            "duration": self.duration_seconds,
            "messages": list(self.messages),
            "error": self.error,
            "metadata": dict(self.metadata),
        }


class BaseAgent(ABC):

    name: str = "BaseAgent"

    def __init__(self) -> None:
        self.log = AgentLog(agent_name=self.name)

    def run(self, input_data: Any) -> Any:
        self.log = AgentLog(agent_name=self.name, status="running")
        started = time.perf_counter()
        try:
            result = self._execute(input_data)
        except DocWriterError as exc:
            self._fail(exc.message)
            logger.warning("[%s] %s", self.name, exc.message)
            raise
        except Exception as exc:
            self._fail(str(exc))
            logger.exception("[%s] unexpected failure", self.name)
            raise
        else:
            self.log.status = "success"
            return result
        finally:
            self.log.duration_seconds = round(time.perf_counter() - started, 3)

    @abstractmethod
    def _execute(self, input_data: Any) -> Any:
        ...

    # ── helpers ──────────────────────────────────────────────────────
    def _fail(self, message: str) -> None:
        self.log.status = "error"
        self.log.error = message

    def _log(self, message: str) -> None:
        self.log.messages.append(message)
        logger.info("[%s] %s", self.name, message)

    def _record(self, key: str, value: Any) -> None:
        self.log.metadata[key] = value
