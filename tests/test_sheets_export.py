"""
Tests for the Google Sheets export.

gspread is replaced by mocks. Tests that exercise retries use the
no_retry_wait fixture so tenacity does not sleep between attempts.
"""

from datetime import date
from unittest.mock import MagicMock, PropertyMock

import gspread
import pytest
import requests
from gspread.utils import ValueInputOption

from statement_parser.config import AppSettings
from statement_parser.services.google import (
    GoogleSheetsExporter,
    SheetsAuthError,
    SheetsExportError,
)
from statement_parser.services.google.sheets import (
    HEADER_BACKGROUND,
    _is_transient,
    build_sheet_values,
    header_format_request,
    sheet_properties_request,
    values_range,
)


def api_error(status_code: int) -> gspread.exceptions.APIError:
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = {
        "error": {"code": status_code, "message": "boom", "status": "ERROR"}
    }
    return gspread.exceptions.APIError(response)


RETRIED_METHODS = ("_first_worksheet", "_prepare_worksheet", "_write_values", "_format_header")


@pytest.fixture
def no_retry_wait(monkeypatch):
    """Keep tenacity from sleeping between attempts."""
    for name in RETRIED_METHODS:
        retrying = getattr(GoogleSheetsExporter, name).retry
        monkeypatch.setattr(retrying, "sleep", lambda seconds: None)


@pytest.fixture
def spreadsheet():
    spreadsheet = MagicMock()
    spreadsheet.id = "sheet-123"
    spreadsheet.sheet1.id = 42
    return spreadsheet


@pytest.fixture
def client(spreadsheet):
    client = MagicMock()
    client.create.return_value = spreadsheet
    return client


@pytest.fixture
def exporter(client):
    return GoogleSheetsExporter(settings=AppSettings(), client_factory=lambda credentials: client)


class TestSheetHelpers:

    def test_values_range(self):
        assert values_range(3) == "A1:E4"
        assert values_range(0) == "A1:E1"

    def test_build_sheet_values(self, sample_transactions):
        values = build_sheet_values(sample_transactions)
        assert values[0] == ["Date", "Description", "Amount", "Balance", "Type"]
        assert values[3] == ["2024-03-05", "Rent", -1200.0, "", "debit"]

    def test_sheet_properties_request(self):
        request = sheet_properties_request(7, "Transactions", 3)
        properties = request["updateSheetProperties"]["properties"]
        assert properties["sheetId"] == 7
        assert properties["title"] == "Transactions"
        assert properties["gridProperties"] == {"rowCount": 4, "columnCount": 5}

    def test_header_format_request(self):
        request = header_format_request(7)["repeatCell"]
        assert request["range"] == {"sheetId": 7, "startRowIndex": 0, "endRowIndex": 1}
        cell_format = request["cell"]["userEnteredFormat"]
        assert cell_format["backgroundColor"] == HEADER_BACKGROUND
        assert cell_format["textFormat"]["bold"] is True

    @pytest.mark.parametrize("error, expected", [
        (requests.ConnectionError("reset"), True),
        (requests.Timeout("slow"), True),
        (RuntimeError("bad"), False),
        (ValueError("bad"), False),
    ])
    def test_is_transient(self, error, expected):
        assert _is_transient(error) is expected

    @pytest.mark.parametrize("status_code, expected", [
        (429, True),
        (503, True),
        (400, False),
        (403, False),
    ])
    def test_is_transient_api_error(self, status_code, expected):
        assert _is_transient(api_error(status_code)) is expected


class TestGoogleSheetsExporter:

    def test_spreadsheet_title(self, exporter):
        assert exporter.spreadsheet_title(date(2024, 3, 9)) == "Bank Transactions - 2024-03-09"

    def test_export(self, exporter, client, spreadsheet, sample_transactions):
        result = exporter.export(sample_transactions, credentials=object(), today=date(2024, 3, 9))

        client.create.assert_called_once_with("Bank Transactions - 2024-03-09")
        spreadsheet.sheet1.update.assert_called_once_with(
            values=build_sheet_values(sample_transactions),
            range_name="A1:E4",
            value_input_option=ValueInputOption.raw,
        )

        batch_calls = spreadsheet.batch_update.call_args_list
        assert len(batch_calls) == 2
        rename = batch_calls[0].args[0]["requests"][0]["updateSheetProperties"]
        assert rename["properties"]["sheetId"] == 42
        assert rename["properties"]["title"] == "Transactions"
        assert "repeatCell" in batch_calls[1].args[0]["requests"][0]

        assert result.spreadsheet_id == "sheet-123"
        assert result.spreadsheet_url == "https://docs.google.com/spreadsheets/d/sheet-123"
        assert result.title == "Bank Transactions - 2024-03-09"
        assert result.row_count == 3

    def test_credentials_passed_to_client_factory(self, spreadsheet, sample_transactions):
        seen = []

        def factory(credentials):
            seen.append(credentials)
            client = MagicMock()
            client.create.return_value = spreadsheet
            return client

        credentials = object()
        GoogleSheetsExporter(settings=AppSettings(), client_factory=factory).export(
            sample_transactions, credentials
        )
        assert seen == [credentials]

    def test_no_transactions(self, exporter, client):
        with pytest.raises(SheetsExportError, match="no transactions"):
            exporter.export([], credentials=object())
        client.create.assert_not_called()

    def test_create_failure_is_auth_error(self, exporter, client, sample_transactions):
        """Creation failures usually mean an expired sign-in."""
        client.create.side_effect = RuntimeError("invalid_grant")

        with pytest.raises(SheetsAuthError, match="sign in again") as excinfo:
            exporter.export(sample_transactions, credentials=object())
        assert isinstance(excinfo.value.__cause__, RuntimeError)
        assert client.create.call_count == 1

    def test_write_failure(self, exporter, spreadsheet, sample_transactions):
        spreadsheet.sheet1.update.side_effect = api_error(400)

        with pytest.raises(SheetsExportError) as excinfo:
            exporter.export(sample_transactions, credentials=object())
        assert not isinstance(excinfo.value, SheetsAuthError)
        assert "could not be written" in str(excinfo.value)
        assert spreadsheet.sheet1.update.call_count == 1

    def test_format_failure_does_not_fail_export(self, exporter, spreadsheet, sample_transactions):
        spreadsheet.batch_update.side_effect = [None, RuntimeError("format")]

        result = exporter.export(sample_transactions, credentials=object())

        assert result.row_count == 3
        spreadsheet.sheet1.update.assert_called_once()

    def test_worksheet_lookup_failure(self, exporter, spreadsheet, sample_transactions, no_retry_wait):
        """Fetching sheet1 is a metadata request; its failure is an export error."""
        sheet1 = PropertyMock(side_effect=api_error(503))
        type(spreadsheet).sheet1 = sheet1

        with pytest.raises(SheetsExportError) as excinfo:
            exporter.export(sample_transactions, credentials=object())
        assert not isinstance(excinfo.value, SheetsAuthError)
        assert isinstance(excinfo.value.__cause__, gspread.exceptions.APIError)
        assert sheet1.call_count == 3


class TestTransientRetries:
    """Calls after creation retry up to three times on 429/5xx."""

    def test_write_retried_then_succeeds(self, exporter, spreadsheet, sample_transactions, no_retry_wait):
        spreadsheet.sheet1.update.side_effect = [api_error(503), None]

        result = exporter.export(sample_transactions, credentials=object())

        assert result.row_count == 3
        assert spreadsheet.sheet1.update.call_count == 2

    def test_write_gives_up_after_three_attempts(
        self, exporter, spreadsheet, sample_transactions, no_retry_wait
    ):
        spreadsheet.sheet1.update.side_effect = api_error(503)

        with pytest.raises(SheetsExportError, match="could not be written"):
            exporter.export(sample_transactions, credentials=object())
        assert spreadsheet.sheet1.update.call_count == 3

    def test_rate_limited_resize_is_retried(
        self, exporter, spreadsheet, sample_transactions, no_retry_wait
    ):
        spreadsheet.batch_update.side_effect = [api_error(429), None, None]

        exporter.export(sample_transactions, credentials=object())

        assert spreadsheet.batch_update.call_count == 3
        spreadsheet.sheet1.update.assert_called_once()

    def test_create_is_not_retried(self, exporter, client, sample_transactions, no_retry_wait):
        client.create.side_effect = api_error(503)

        with pytest.raises(SheetsAuthError):
            exporter.export(sample_transactions, credentials=object())
        assert client.create.call_count == 1


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
