"""
Shared fixtures.

Test strategy:
1. Unit tests for models, storage and each service
2. Flow tests through HouseholdApp on an in-memory medium
3. No real API calls in tests (fake models stand in for Gemini)
"""

from datetime import date
from decimal import Decimal
from typing import Optional

import pytest

from naira_power.audit import AuditLogger
from naira_power.config import AppSettings
from naira_power.models.household import User, UtilityLog
from naira_power.orchestrator import create_app_components
from naira_power.services.family import FamilyService
from naira_power.services.identity import IdentityService
from naira_power.services.logs import LogService
from naira_power.services.session import SessionHolder
from naira_power.services.storage import (
    InMemoryMedium,
    KeyValueAuditStorage,
    KeyValueFamilyStorage,
    KeyValueLogStorage,
    KeyValueSessionStorage,
    KeyValueUserStorage,
    RecordStore,
)


class FakeResponse:
    def __init__(self, text: Optional[str]):
        self.text = text


class FakeModel:
    """Stands in for a Gemini GenerativeModel."""

    def __init__(self, text: Optional[str] = None, error: Optional[Exception] = None):
        self._text = text
        self._error = error
        self.prompts: list[str] = []

    async def generate_content_async(self, prompt: str) -> FakeResponse:
        self.prompts.append(prompt)
        if self._error:
            raise self._error
        return FakeResponse(self._text)


@pytest.fixture
def medium():
    return InMemoryMedium()


@pytest.fixture
def store(medium):
    return RecordStore(medium)


@pytest.fixture
def user_storage(store):
    return KeyValueUserStorage(store)


@pytest.fixture
def family_storage(store):
    return KeyValueFamilyStorage(store)


@pytest.fixture
def log_storage(store):
    return KeyValueLogStorage(store)


@pytest.fixture
def session_storage(store):
    return KeyValueSessionStorage(store)


@pytest.fixture
def audit_storage(store):
    return KeyValueAuditStorage(store)


@pytest.fixture
def audit_logger(audit_storage):
    return AuditLogger(audit_storage)


@pytest.fixture
def identity(user_storage, family_storage, log_storage, audit_logger):
    return IdentityService(
        users=user_storage,
        families=family_storage,
        logs=log_storage,
        audit_logger=audit_logger,
    )


@pytest.fixture
def family_service(family_storage, user_storage, audit_logger):
    return FamilyService(
        families=family_storage,
        users=user_storage,
        audit_logger=audit_logger,
    )


@pytest.fixture
def session_holder(session_storage, user_storage, audit_logger):
    return SessionHolder(
        storage=session_storage,
        users=user_storage,
        audit_logger=audit_logger,
    )


@pytest.fixture
def log_service(log_storage, audit_logger):
    return LogService(log_storage, audit_logger=audit_logger)


@pytest.fixture
def fake_model():
    return FakeModel(
        text='{"summary": "Spending is stable.", '
             '"tips": ["Unplug chargers", "Use LED bulbs", "Iron in batches"]}'
    )


@pytest.fixture
def app(medium, fake_model):
    from naira_power.agents import UsageInsightAgent

    settings = AppSettings(storage_backend="memory")
    return create_app_components(
        settings=settings,
        medium=medium,
        insight_agent=UsageInsightAgent(model=fake_model),
    )


def make_user(email: str = "ada@example.com", name: str = "Ada") -> User:
    return User(id=email.lower(), name=name, email=email.lower())


def make_log(
    family_id: str = "fam-1",
    user_id: str = "ada@example.com",
    amount: str = "5000",
    units: float = 50,
    log_date: date = date(2024, 1, 10),
    **kwargs,
) -> UtilityLog:
    return UtilityLog(
        family_id=family_id,
        user_id=user_id,
        user_name="Ada",
        date=log_date,
        units=units,
        amount=Decimal(amount),
        previous_reading=1000,
        **kwargs,
    )
