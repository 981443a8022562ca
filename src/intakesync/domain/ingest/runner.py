"""Sequential batch runner shared by both import pipelines."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from intakesync.domain.ingest.errors import MarkerError
from intakesync.domain.ingest.results import SubmissionResult, SyncRunResult

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from intakesync.domain.ingest.submissions import Submission
    from intakesync.domain.model import SubmissionSource
    from intakesync.domain.ports import SubmissionTracker

log = getLogger(__name__)


def run_sync[TSubmission: Submission](
    submissions: Iterable[TSubmission],
    *,
    source: SubmissionSource,
    tracker: SubmissionTracker,
    importer: Callable[[TSubmission], SubmissionResult],
) -> SyncRunResult:
    """Import submissions one at a time, in fetch order.

    A failing submission never stops the batch. Only successful imports are
    marked processed, and a failed mark is logged rather than escalated.
    """

    run = SyncRunResult()
    for submission in submissions:
        submission_id = submission.submission_id
        if tracker.is_processed(submission_id):
            run.skipped += 1
            log.debug("Skipping already processed %s submission %s", source, submission_id)
            continue

        try:
            result = importer(submission)
        except Exception as exc:
            log.exception("Unexpected failure importing %s submission %s", source, submission_id)
            result = SubmissionResult(source=source, submission_id=submission_id).fail(exc)

        if result.success:
            try:
                tracker.mark_processed(submission_id)
            except MarkerError as exc:
                result.warn(exc)
        else:
            log.warning(
                "Import of %s submission %s failed (%s): %s",
                source,
                submission_id,
                result.error_kind,
                result.error,
            )
        run.results.append(result)

    log.info(
        "Finished %s sync: total=%s, successful=%s, failed=%s, skipped=%s",
        source,
        run.total,
        run.successful,
        run.failed,
        run.skipped,
    )
    return run
