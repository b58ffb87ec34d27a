import json
import logging
from typing import Callable, Optional

from app.core.config import settings

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]


class SheetsClient:
    """Appends rows to one Google Sheet through the Sheets v4 API.

    `http_factory` returns a fresh authorized transport for each append.
    httplib2.Http is not thread-safe and appends run on several mirror threads.
    """

    def __init__(self, service, spreadsheet_id: str, range_: str, http_factory: Optional[Callable[[], object]] = None):
        self._service = service
        self.spreadsheet_id = spreadsheet_id
        self.range = range_
        self._http_factory = http_factory

    def append_row(self, row: list[str]) -> dict:
        request = (
            self._service.spreadsheets()
            .values()
            .append(
                spreadsheetId=self.spreadsheet_id,
                range=self.range,
                valueInputOption="RAW",
                insertDataOption="INSERT_ROWS",
                body={"values": [row]},
            )
        )
        http = self._http_factory() if self._http_factory is not None else None
        return request.execute(http=http)


def sheets_configured() -> bool:
    return bool(settings.GOOGLE_SHEET_ID and settings.GOOGLE_SERVICE_ACCOUNT_KEY)


def build_sheets_client() -> SheetsClient | None:
    """Return a client, or None when the sheet or credentials are not configured or unusable."""
    if not sheets_configured():
        logger.warning("Google Sheets credentials not configured. Sheet sync will be disabled.")
        return None
    try:
        info = json.loads(settings.GOOGLE_SERVICE_ACCOUNT_KEY)
    except ValueError:
        logger.error("GOOGLE_SERVICE_ACCOUNT_KEY is not valid JSON. Sheet sync will be disabled.")
        return None
    if not info.get("client_email"):
        logger.warning("GOOGLE_SERVICE_ACCOUNT_KEY has no client_email. Sheet sync will be disabled.")
        return None

    import httplib2
    from google.oauth2.service_account import Credentials
    from google_auth_httplib2 import AuthorizedHttp
    from googleapiclient.discovery import build

    try:
        creds = Credentials.from_service_account_info(info, scopes=SCOPES)
        service = build("sheets", "v4", credentials=creds, cache_discovery=False)
    except Exception as e:
        logger.error("Failed to initialize Google Sheets: %s", e)
        return None
    logger.info("Google Sheets API initialized")
    return SheetsClient(
        service,
        settings.GOOGLE_SHEET_ID,
        settings.GOOGLE_SHEET_RANGE,
        http_factory=lambda: AuthorizedHttp(creds, http=httplib2.Http()),
    )
