"""
Shared fixtures.

Settings are read from the environment, so every test gets a known,
fake configuration and a fresh settings cache.
"""

import pytest

from statement_parser.config import get_settings
from statement_parser.models.transaction import Transaction, TransactionType


@pytest.fixture(autouse=True)
def fake_environment(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "test-gemini-key")
    monkeypatch.setenv("GOOGLE_OAUTH_CLIENT_ID", "test-client-id.apps.googleusercontent.com")
    monkeypatch.setenv("GOOGLE_OAUTH_CLIENT_SECRET", "test-client-secret")
    monkeypatch.setenv("GOOGLE_OAUTH_REDIRECT_URI", "http://localhost:8501")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def sample_transactions() -> list[Transaction]:
    return [
        Transaction(
            date="2024-03-01",
            description="Salary ACME Corp",
            amount=2500.00,
            balance=3500.00,
            type=TransactionType.CREDIT,
        ),
        Transaction(
            date="2024-03-02",
            description='Coffee "Bean", Main St',
            amount=-4.50,
            balance=3495.50,
            type=TransactionType.DEBIT,
        ),
        Transaction(
            date="2024-03-05",
            description="Rent",
            amount=-1200.00,
            balance=None,
            type=TransactionType.DEBIT,
        ),
    ]
