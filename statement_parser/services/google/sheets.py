"""
Google Sheets Export

DESIGN DECISION: Each export creates a NEW spreadsheet in the user's Drive
rather than appending to an existing one:
1. The user never has to pick or share a sheet
2. The drive.file scope is enough - we only touch files we created
3. A bad extraction can never corrupt earlier exports

Steps, in order:
1. Create "Bank Transactions - YYYY-MM-DD", rename its first worksheet
   to "Transactions" and size it to the data
2. Write the header and rows in one RAW update
3. Colour the header row

TRADEOFFS:
- Creation is never retried (a retry could leave duplicate spreadsheets)
- Every later call (worksheet lookup, resize, write, format) is retried
  on transient errors (429/5xx, dropped connections)
- A formatting failure is logged, not raised; the data is already there
"""

from datetime import date
from typing import Any, Callable, Optional, Sequence

import gspread
import requests
import structlog
from gspread.utils import ValueInputOption
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential

from statement_parser.config import AppSettings, get_settings
from statement_parser.models.transaction import SheetsExportResult, Transaction
from statement_parser.services.export.csv_export import EXPORT_HEADERS, transaction_to_row


logger = structlog.get_logger(__name__)

SPREADSHEET_URL = "https://docs.google.com/spreadsheets/d/{spreadsheet_id}"
HEADER_BACKGROUND = {"red": 0.2, "green": 0.5, "blue": 0.8}
HEADER_TEXT_COLOR = {"red": 1, "green": 1, "blue": 1}
TRANSIENT_STATUS_CODES = {429, 500, 502, 503, 504}


class SheetsExportError(Exception):
    """Base exception for Google Sheets export errors."""
    pass


class SheetsAuthError(SheetsExportError):
    """The spreadsheet could not be created - usually an expired sign-in."""
    pass


def _is_transient(exc: BaseException) -> bool:
    """Retry rate limits, server errors and dropped connections only."""
    if isinstance(exc, gspread.exceptions.APIError):
        response = getattr(exc, "response", None)
        return getattr(response, "status_code", None) in TRANSIENT_STATUS_CODES
    return isinstance(exc, (requests.ConnectionError, requests.Timeout))


_retry_transient = retry(
    retry=retry_if_exception(_is_transient),
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    reraise=True,
)


def build_sheet_values(transactions: Sequence[Transaction]) -> list[list]:
    """Header row followed by one row per transaction (empty cell for no balance)."""
    return [list(EXPORT_HEADERS)] + [transaction_to_row(t) for t in transactions]


def values_range(row_count: int) -> str:
    """A1 range covering the header plus row_count data rows."""
    last_column = chr(ord("A") + len(EXPORT_HEADERS) - 1)
    return f"A1:{last_column}{row_count + 1}"


def sheet_properties_request(sheet_id: int, title: str, row_count: int) -> dict:
    """Rename the worksheet and size it to the header plus row_count rows."""
    return {
        "updateSheetProperties": {
            "properties": {
                "sheetId": sheet_id,
                "title": title,
                "gridProperties": {
                    "rowCount": row_count + 1,
                    "columnCount": len(EXPORT_HEADERS),
                },
            },
            "fields": "title,gridProperties(rowCount,columnCount)",
        }
    }


def header_format_request(sheet_id: int) -> dict:
    """Blue background, bold white text on the first row."""
    return {
        "repeatCell": {
            "range": {
                "sheetId": sheet_id,
                "startRowIndex": 0,
                "endRowIndex": 1,
            },
            "cell": {
                "userEnteredFormat": {
                    "backgroundColor": HEADER_BACKGROUND,
                    "textFormat": {
                        "foregroundColor": HEADER_TEXT_COLOR,
                        "bold": True,
                    },
                }
            },
            "fields": "userEnteredFormat(backgroundColor,textFormat)",
        }
    }


class GoogleSheetsExporter:
    """
    Exports transactions to a new Google Sheet using the user's credentials.

    The gspread client factory is injectable so tests can avoid the network.
    """

    def __init__(
        self,
        settings: Optional[AppSettings] = None,
        client_factory: Callable[[Any], gspread.Client] = gspread.authorize,
    ):
        self._settings = settings or get_settings().app
        self._client_factory = client_factory

    def spreadsheet_title(self, today: Optional[date] = None) -> str:
        today = today or date.today()
        return f"{self._settings.sheet_title_prefix} - {today.isoformat()}"

    def _create_spreadsheet(self, client: gspread.Client, title: str) -> gspread.Spreadsheet:
        try:
            return client.create(title)
        except Exception as e:
            raise SheetsAuthError(
                "Failed to create spreadsheet. You may need to sign in again."
            ) from e

    @_retry_transient
    def _first_worksheet(self, spreadsheet: gspread.Spreadsheet) -> gspread.Worksheet:
        # sheet1 fetches the spreadsheet metadata
        return spreadsheet.sheet1

    @_retry_transient
    def _prepare_worksheet(
        self,
        spreadsheet: gspread.Spreadsheet,
        worksheet: gspread.Worksheet,
        row_count: int,
    ) -> None:
        spreadsheet.batch_update({
            "requests": [
                sheet_properties_request(worksheet.id, self._settings.worksheet_title, row_count)
            ]
        })

    @_retry_transient
    def _write_values(self, worksheet: gspread.Worksheet, values: list[list]) -> None:
        worksheet.update(
            values=values,
            range_name=values_range(len(values) - 1),
            value_input_option=ValueInputOption.raw,
        )

    @_retry_transient
    def _format_header(self, spreadsheet: gspread.Spreadsheet, sheet_id: int) -> None:
        spreadsheet.batch_update({"requests": [header_format_request(sheet_id)]})

    def export(
        self,
        transactions: Sequence[Transaction],
        credentials: Any,
        today: Optional[date] = None,
    ) -> SheetsExportResult:
        """
        Create a spreadsheet holding the transactions.

        Raises:
            SheetsAuthError: The spreadsheet could not be created
            SheetsExportError: Created, but the data could not be written
        """
        if not transactions:
            raise SheetsExportError("There are no transactions to export")

        title = self.spreadsheet_title(today)
        client = self._client_factory(credentials)
        spreadsheet = self._create_spreadsheet(client, title)
        values = build_sheet_values(transactions)

        try:
            worksheet = self._first_worksheet(spreadsheet)
            self._prepare_worksheet(spreadsheet, worksheet, len(transactions))
            self._write_values(worksheet, values)
        except Exception as e:
            raise SheetsExportError(
                f"Spreadsheet created but transactions could not be written: {e}"
            ) from e

        try:
            self._format_header(spreadsheet, worksheet.id)
        except Exception as e:
            logger.warning(
                "header_format_failed",
                spreadsheet_id=spreadsheet.id,
                error=str(e),
            )

        return SheetsExportResult(
            spreadsheet_id=spreadsheet.id,
            spreadsheet_url=SPREADSHEET_URL.format(spreadsheet_id=spreadsheet.id),
            title=title,
            row_count=len(transactions),
        )
