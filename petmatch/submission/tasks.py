"""Side effects that run after a report has been persisted."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from petmatch.data.schemas import AnimalReport, ReportStatus

logger = logging.getLogger(__name__)

REPORT_PET_POINTS = 10


class Notifier(Protocol):
    def notify(self, user_id: str, message: str, report_id: str) -> None: ...


class ActivityLog(Protocol):
    def record(self, user_id: str, action: str, points: int, metadata: dict) -> None: ...


class AlertService(Protocol):
    def create_saved_search(self, user_id: str, name: str, filters: dict) -> None: ...


@dataclass(frozen=True)
class PostCommitTask:
    """A named side effect of publishing a report."""

    name: str
    run: Callable[[AnimalReport], None]


def run_post_commit_tasks(tasks: list[PostCommitTask], report: AnimalReport) -> list[str]:
    """Run *tasks* in order; a failing task is logged and the rest still run.

    Returns:
        Names of the tasks that failed.
    """
    failed = []
    for task in tasks:
        try:
            task.run(report)
        except Exception:
            logger.exception(
                "Post-commit task '%s' failed for report %s", task.name, report.report_id
            )
            failed.append(task.name)
    return failed


def alert_area(location: str) -> str:
    """Last comma-separated component of a location, e.g. the department."""
    parts = [part.strip() for part in location.split(",")]
    return parts[-1] or "All"


def build_post_commit_tasks(
    notifier: Notifier | None = None,
    activity_log: ActivityLog | None = None,
    alerts: AlertService | None = None,
) -> list[PostCommitTask]:
    """Build the ordered task list for whichever collaborators are wired in."""
    tasks: list[PostCommitTask] = []

    if notifier is not None:

        def notify_reporter(report: AnimalReport) -> None:
            notifier.notify(
                report.user_id,
                f'You have successfully published the report for "{report.name}".',
                report.report_id,
            )

        tasks.append(PostCommitTask("notify_reporter", notify_reporter))

    if activity_log is not None:

        def log_activity(report: AnimalReport) -> None:
            activity_log.record(
                report.user_id,
                "report_pet",
                REPORT_PET_POINTS,
                {"report_id": report.report_id, "status": report.status.value},
            )

        tasks.append(PostCommitTask("log_activity", log_activity))

    if alerts is not None:

        def create_saved_search_alert(report: AnimalReport) -> None:
            if not report.create_alert or report.status is not ReportStatus.LOST:
                return
            alerts.create_saved_search(
                report.user_id,
                f"Alert: {report.breed} ({report.color})",
                {
                    "status": "All",
                    "species": report.species.value,
                    "breed": report.breed,
                    "area": alert_area(report.location),
                },
            )

        tasks.append(PostCommitTask("create_saved_search_alert", create_saved_search_alert))

    return tasks


class LoggingNotifier:
    """Notifier that only writes to the application log."""

    def notify(self, user_id: str, message: str, report_id: str) -> None:
        logger.info("Notify user=%s report=%s: %s", user_id, report_id, message)


class LoggingActivityLog:
    """Activity log that records point awards in the application log."""

    def record(self, user_id: str, action: str, points: int, metadata: dict) -> None:
        logger.info("Activity user=%s action=%s points=%d %s", user_id, action, points, metadata)
