import logging

from app.services.sheet_mirror import append_row_safely
from app.services.sheets_client import SheetsClient, build_sheets_client

logger = logging.getLogger(__name__)

_client: SheetsClient | None = None


def _sheets_client() -> SheetsClient | None:
    global _client
    if _client is None:
        _client = build_sheets_client()
    return _client


def append_sheet_row(row: list[str]) -> dict:
    """Append one mirrored registration row. Runs on the Celery worker; never raises."""
    client = _sheets_client()
    if client is None:
        logger.info("Skipping Google Sheets sync (not configured)")
        return {"skipped": True, "reason": "not_configured"}
    return {"ok": append_row_safely(client, row)}
