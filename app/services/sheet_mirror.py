"""Best-effort replication of persisted registrations to a spreadsheet.

`SheetMirror.mirror` returns immediately. The row is built on the caller's
thread (so no ORM state crosses threads) and appended elsewhere: on a small
thread pool owned by the mirror, or by the Celery worker. Failures are logged
and dropped; nothing is retried and nothing reaches the registration response.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Optional

from app.models.registration import Registration
from app.services.sheets_client import SheetsClient, build_sheets_client, sheets_configured

logger = logging.getLogger(__name__)

SHEET_COLUMNS = (
    "ticketId", "shortTicketId", "fullName", "email", "phone", "college", "branch",
    "year", "gender", "accommodation", "foodPreference", "ieeeStatus",
    "ieeeMembershipId", "ticketType", "transactionScreenshotUrl", "status", "createdAt",
)


def sheet_row(r: Registration) -> list[str]:
    return [
        r.ticket_id,
        r.short_ticket_id,
        r.full_name,
        r.email,
        r.phone,
        r.college,
        r.branch,
        r.year,
        r.gender,
        r.accommodation,
        r.food_preference,
        r.ieee_status,
        r.ieee_membership_id or "",
        r.ticket_type,
        r.transaction_screenshot_url,
        r.status,
        r.created_at.isoformat() if r.created_at else "",
    ]


def append_row_safely(client: SheetsClient, row: list[str]) -> bool:
    short_id = row[1] if len(row) > 1 else "?"
    try:
        client.append_row(row)
    except Exception as e:
        logger.error("Failed to sync to Google Sheets for %s: %s", short_id, e)
        return False
    logger.info("Synced to Google Sheets: %s", short_id)
    return True


class SheetMirror:
    def __init__(self, client: Optional[SheetsClient] = None, *, dispatch: Optional[Callable[[list[str]], None]] = None,
                 workers: int = 2):
        self._client = client
        self._executor: ThreadPoolExecutor | None = None
        if dispatch is not None:
            self._dispatch = dispatch
        elif client is not None:
            self._executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="sheet-mirror")
            self._dispatch = self._submit
        else:
            self._dispatch = None

    @property
    def enabled(self) -> bool:
        return self._dispatch is not None

    def _submit(self, row: list[str]) -> None:
        self._executor.submit(append_row_safely, self._client, row)

    def mirror(self, registration: Registration) -> None:
        if not self.enabled:
            logger.debug("Skipping Google Sheets sync (not configured)")
            return
        try:
            row = sheet_row(registration)
            self._dispatch(row)
        except Exception as e:
            logger.error("Could not schedule Google Sheets sync for %s: %s", registration.short_ticket_id, e)

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None


def celery_dispatch(row: list[str]) -> None:
    from app.tasks.jobs import append_sheet_row

    append_sheet_row.apply_async(args=[row], retry=False, ignore_result=True)


def build_sheet_mirror(backend: str, workers: int = 2) -> SheetMirror:
    """thread: append in-process from a pool. celery: hand the row to the worker, which owns credentials."""
    if backend == "celery":
        if not sheets_configured():
            logger.warning("Google Sheets credentials not configured. Sheet sync will be disabled.")
            return SheetMirror()
        return SheetMirror(dispatch=celery_dispatch)
    return SheetMirror(build_sheets_client(), workers=workers)
