from __future__ import annotations

from datetime import datetime, UTC
from uuid import uuid4

from retakes.contracts import IntegrityReport


class QueueConfigError(ValueError):
    pass


class ReentrantUpdateError(RuntimeError):
    pass


class RosterIntegrityError(RuntimeError):
    def __init__(self, report: IntegrityReport) -> None:
        super().__init__(report.message)
        self.report = report


def build_integrity_report(
    error_code: str,
    message: str,
    state_snapshot: dict[str, object],
    context: dict[str, object],
) -> IntegrityReport:
    return IntegrityReport(
        report_id=str(uuid4()),
        timestamp=datetime.now(UTC),
        error_code=error_code,
        message=message,
        state_snapshot=state_snapshot,
        context=context,
    )
