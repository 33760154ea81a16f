"""Shared fixtures: controllable clock, SQLite journal, in-memory read-side stores."""

import json
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from orchestrator.domain.errors import DomainError, DomainErrorKind
from orchestrator.events import EventJournal, EventRepository, RetryPolicy
from orchestrator.events.models import Event, EventState


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class InMemoryAccounts:
    """Account read side keyed by account id. Raises DomainError like a real store."""

    def __init__(self) -> None:
        self.accounts: dict[str, dict] = {}
        self.create_calls = 0

    async def create_account(self, account_id, data) -> None:
        self.create_calls += 1
        if account_id in self.accounts:
            raise DomainError(DomainErrorKind.ALREADY_EXISTS)
        self.accounts[account_id] = {
            "balance": data.initial_balance,
            "currency": data.currency,
            "blocked": False,
        }

    async def withdraw_funds(self, account_id, data) -> None:
        account = self._get(account_id)
        if account["balance"] < data.amount:
            raise DomainError(DomainErrorKind.INSUFFICIENT_FUNDS)
        account["balance"] -= data.amount

    async def deposit_funds(self, account_id, data) -> None:
        self._get(account_id)["balance"] += data.amount

    async def block_account(self, account_id, data) -> None:
        self._get(account_id)["blocked"] = True

    async def unblock_account(self, account_id, data) -> None:
        self._get(account_id)["blocked"] = False

    async def find_by_id(self, account_id):
        return self.accounts.get(account_id)

    def _get(self, account_id: str) -> dict:
        if account_id not in self.accounts:
            raise DomainError(DomainErrorKind.NOT_FOUND)
        return self.accounts[account_id]


class InMemoryCustomers:
    def __init__(self) -> None:
        self.customers: dict[str, dict] = {}

    async def create_customer(self, customer_id, data) -> None:
        if customer_id in self.customers:
            raise DomainError(DomainErrorKind.ALREADY_EXISTS)
        self.customers[customer_id] = {"name": f"{data.first_name} {data.last_name}", "active": False}

    async def activate_customer(self, customer_id, data) -> None:
        self._get(customer_id)["active"] = True

    async def deactivate_customer(self, customer_id, data) -> None:
        self._get(customer_id)["active"] = False

    async def block_customer(self, customer_id, data) -> None:
        self._get(customer_id)["blocked"] = True

    async def unblock_customer(self, customer_id, data) -> None:
        self._get(customer_id)["blocked"] = False

    def _get(self, customer_id: str) -> dict:
        if customer_id not in self.customers:
            raise DomainError(DomainErrorKind.NOT_FOUND)
        return self.customers[customer_id]


def make_event(
    event_type: str,
    data: dict | bytes | None = None,
    *,
    origin: str | None = None,
    event_id: str = "evt-1",
    context_id: str = "ctx-1",
    retry: int = 0,
    max_retry: int = 3,
    state: EventState = EventState.PROCESSING,
) -> Event:
    """Build an in-flight Event without touching a database."""
    if isinstance(data, dict):
        raw = json.dumps(data).encode("utf-8")
    else:
        raw = data or b""
    return Event(
        id=event_id,
        context_id=context_id,
        origin=origin or event_type.split(".", 1)[0],
        type=event_type,
        type_version="1.0.0",
        state=state,
        created_at=1_700_000_000.0,
        scheduled_at=1_700_000_000.0,
        started_at=1_700_000_000.0,
        retry=retry,
        max_retry=max_retry,
        data=raw,
    )


def make_gateway() -> AsyncMock:
    gateway = AsyncMock()
    gateway.mark_completed = AsyncMock()
    gateway.mark_retry = AsyncMock()
    gateway.force_state = AsyncMock()
    return gateway


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "event_journal.db"


@pytest.fixture
async def journal(db_path: Path, clock: FakeClock) -> EventJournal:
    j = EventJournal(db_path, clock=clock)
    yield j
    await j.close()


@pytest.fixture
def repository(journal: EventJournal) -> EventRepository:
    return EventRepository(journal, RetryPolicy(base_delay=5.0, max_delay=60.0))


@pytest.fixture
def gateway() -> AsyncMock:
    return make_gateway()


@pytest.fixture
def accounts() -> InMemoryAccounts:
    return InMemoryAccounts()


@pytest.fixture
def customers() -> InMemoryCustomers:
    return InMemoryCustomers()
