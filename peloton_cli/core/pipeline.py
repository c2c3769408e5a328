"""Export pipeline: authenticate, list, then fetch and write each workout."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional

from peloton_cli.core.api import AuthenticationError, AuthErrorKind, NetworkError, PelotonError
from peloton_cli.core.auth import authenticate
from peloton_cli.core.constants import API_BASE, AUTH_BASE, DEFAULT_TIMEOUT_SECONDS, WORKOUT_LIST_FILE
from peloton_cli.core.listing import list_workouts
from peloton_cli.core.metrics import fetch_metrics, fetch_workout_details
from peloton_cli.core.models import (
    Credentials,
    ExportResult,
    LogEvent,
    RunOutcome,
    Session,
    Severity,
    WorkoutSummary,
)
from peloton_cli.core.naming import details_path, display_label, metrics_path, raw_metrics_path
from peloton_cli.core.throttle import Throttle
from peloton_cli.exporters.csv_export import FileSystemError, write_details_csv, write_metrics_csv
from peloton_cli.exporters.json_export import write_json

logger = logging.getLogger(__name__)

LogSink = Callable[[LogEvent], None]
ProgressSink = Callable[[float], None]

AUTH_PROGRESS = 5.0
LISTING_PROGRESS = 10.0


def describe_error(exc: BaseException) -> str:
    """Operator-facing description of a pipeline failure."""
    if isinstance(exc, AuthenticationError):
        if exc.kind is AuthErrorKind.UNAUTHORIZED:
            return (
                'Received response "Unauthorized" from Peloton server. '
                "Please check your username and password"
            )
        return f'Received protocol error from Peloton server: {exc.status} "{exc.description}"'
    if isinstance(exc, NetworkError):
        return f"Received network error from Peloton server: {exc}"
    if isinstance(exc, PelotonError):
        return str(exc)
    return f"Error during execution: {exc}"


def _safe_label(summary: WorkoutSummary) -> str:
    try:
        return display_label(summary)
    except (ValueError, OverflowError, OSError):
        return f"{summary.title} ({summary.workout_id})"


class ExportPipeline:
    """Sequences one export run and reports events to ``sink``."""

    def __init__(
        self,
        sink: LogSink,
        throttle: Optional[Throttle] = None,
        progress: Optional[ProgressSink] = None,
        api_base: str = API_BASE,
        auth_base: str = AUTH_BASE,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        save_raw: bool = False,
        include_details: bool = False,
    ) -> None:
        self.sink = sink
        self.throttle = throttle or Throttle()
        self.progress = progress
        self.api_base = api_base
        self.auth_base = auth_base
        self.timeout = timeout
        self.save_raw = save_raw
        self.include_details = include_details

    def _info(self, message: str) -> None:
        self.sink(LogEvent(Severity.INFORMATION, message))

    def _error(self, exc: BaseException) -> None:
        logger.debug("Pipeline error", exc_info=exc)
        self.sink(LogEvent(Severity.ERROR, describe_error(exc), exc))

    def _report(self, percent: float) -> None:
        if self.progress is not None:
            self.progress(min(percent, 100.0))

    def run(self, credentials: Credentials, output_dir: Path, overwrite: bool = False) -> ExportResult:
        if not output_dir.is_dir():
            raise FileSystemError(f"The output directory does not exist: {output_dir}")

        self._report(0.0)
        self._info("Authenticating")
        try:
            session = authenticate(credentials, base_url=self.auth_base, timeout=self.timeout)
        except PelotonError as exc:
            self._error(exc)
            self._info("Aborting...")
            return ExportResult(outcome=RunOutcome.ABORTED_DURING_AUTH)
        self._info(f"Authenticated as user {session.user_id}")
        self._report(AUTH_PROGRESS)

        self._info("Getting list of workouts")
        try:
            workouts = list_workouts(session, self.throttle, base_url=self.api_base, timeout=self.timeout)
        except PelotonError as exc:
            self._error(exc)
            self._info("Aborting...")
            return ExportResult(outcome=RunOutcome.ABORTED_DURING_LISTING)
        self._info(f"Received {len(workouts)} workouts")
        self._report(LISTING_PROGRESS)

        if self.save_raw:
            list_path = output_dir / WORKOUT_LIST_FILE
            try:
                write_json(list_path, [summary.extra for summary in workouts])
            except OSError as exc:
                self._error(FileSystemError(f"Failed to write {list_path}: {exc}"))

        result = ExportResult(outcome=RunOutcome.COMPLETED_FULLY, total=len(workouts))
        step = (100.0 - LISTING_PROGRESS) / len(workouts) if workouts else 0.0
        progress = LISTING_PROGRESS

        self._info("Downloading data for each workout")
        for summary in workouts:
            label = _safe_label(summary)
            try:
                self._export_workout(session, summary, label, output_dir, overwrite, result)
            except Exception as exc:
                self._error(exc)
                self._info(f"Skipping workout: {label}")
                result.failed_ids.append(summary.workout_id)
            progress += step
            self._report(progress)
            self.throttle.wait()

        self._report(100.0)
        if result.failed_ids:
            result.outcome = RunOutcome.COMPLETED_WITH_SKIPPED_ITEMS
            self._info(f"Completed data download with {result.failed} failed workouts")
        else:
            self._info("Successfully completed data download!")
        return result

    def _export_workout(
        self,
        session: Session,
        summary: WorkoutSummary,
        label: str,
        output_dir: Path,
        overwrite: bool,
        result: ExportResult,
    ) -> None:
        """Export one workout; counters change only once every step succeeded."""
        target = metrics_path(output_dir, summary)
        fetched = False
        if target.exists() and not overwrite:
            self._info(f"Already have workout metrics, skipping: {label}")
        else:
            self._info(f"Downloading metrics for {label}")
            raw_path = raw_metrics_path(output_dir, summary) if self.save_raw else None
            document = fetch_metrics(
                session,
                summary.workout_id,
                base_url=self.api_base,
                timeout=self.timeout,
                raw_path=raw_path,
            )
            fetched = True
            self._info(f"Writing data to {target}")
            write_metrics_csv(document, target)

        if self.include_details:
            details_target = details_path(output_dir, summary)
            if details_target.exists() and not overwrite:
                self._info(f"Already have user details for workout, skipping: {label}")
            else:
                if fetched:
                    self.throttle.wait()
                details = fetch_workout_details(
                    session,
                    summary.workout_id,
                    base_url=self.api_base,
                    timeout=self.timeout,
                )
                self._info(f"Writing details to {details_target}")
                write_details_csv(details, details_target)

        if fetched:
            result.written += 1
        else:
            result.skipped += 1


def run_export(
    credentials: Credentials,
    output_dir: Path,
    overwrite: bool = False,
    *,
    sink: LogSink,
    throttle: Optional[Throttle] = None,
    progress: Optional[ProgressSink] = None,
    api_base: str = API_BASE,
    auth_base: str = AUTH_BASE,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    save_raw: bool = False,
    include_details: bool = False,
) -> ExportResult:
    """Run one export with a fresh pipeline."""
    pipeline = ExportPipeline(
        sink=sink,
        throttle=throttle,
        progress=progress,
        api_base=api_base,
        auth_base=auth_base,
        timeout=timeout,
        save_raw=save_raw,
        include_details=include_details,
    )
    return pipeline.run(credentials, output_dir, overwrite=overwrite)
