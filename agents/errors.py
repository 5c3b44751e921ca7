"""
Error taxonomy shared by the core agents and the HTTP surface.

Each error carries a human-readable message, optional details and the
HTTP status the API layer answers with.
"""

from __future__ import annotations

from typing import Any, Optional


class DocWriterError(Exception):
    """Base class for every expected failure in the report pipeline."""

    status_code: int = 500

    def __init__(self, message: str, details: Optional[Any] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        body = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class IngestError(DocWriterError):
    """The uploaded CSV could not be read or is not valid delimited text."""

    status_code = 400


class ValidationError(DocWriterError):
    """A required request field is missing or has an unsupported value."""

    status_code = 400


class NotFoundError(DocWriterError):
    """Unknown session, report or template."""

    status_code = 404


class TemplateNotFound(NotFoundError):
    pass


class TemplateMalformed(DocWriterError):
    """A stored template is not valid JSON or lacks required fields."""

    status_code = 500


class ExportError(DocWriterError):
    """The PDF/DOCX rendering library failed."""

    status_code = 500


class UpstreamError(DocWriterError):
    """The external AI service is unavailable or misconfigured."""

    status_code = 502

    def __init__(
        self,
        message: str,
        details: Optional[Any] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message, details)
        if status_code is not None:
            self.status_code = status_code
