"""Tests for CustomerProcessor."""

from unittest.mock import AsyncMock

import pytest

from orchestrator.domain.errors import DomainError, DomainErrorKind
from orchestrator.events.models import EventState
from orchestrator.processors import CustomerProcessor, Outcome

from conftest import make_event

_CREATED = {
    "firstName": "Jan",
    "lastName": "Kowalski",
    "email": "jan@example.com",
    "address": {"city": "Warsaw", "country": "PL"},
}


@pytest.fixture
def customer_repo() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def processor(gateway: AsyncMock, customer_repo: AsyncMock) -> CustomerProcessor:
    return CustomerProcessor(gateway, customer_repo)


@pytest.mark.asyncio
async def test_created_success(
    processor: CustomerProcessor, gateway: AsyncMock, customer_repo: AsyncMock
) -> None:
    event = make_event("customer.created", _CREATED, context_id="cust-1")

    assert await processor.process(event) is Outcome.COMPLETED
    customer_id, payload = customer_repo.create_customer.await_args.args
    assert customer_id == "cust-1"
    assert payload.first_name == "Jan"
    assert payload.address.city == "Warsaw"
    gateway.mark_completed.assert_awaited_once_with(event.id)


@pytest.mark.asyncio
async def test_created_duplicate_completes(
    processor: CustomerProcessor, gateway: AsyncMock, customer_repo: AsyncMock
) -> None:
    customer_repo.create_customer.side_effect = DomainError(DomainErrorKind.ALREADY_EXISTS)
    event = make_event("customer.created", _CREATED)

    assert await processor.process(event) is Outcome.COMPLETED
    gateway.mark_completed.assert_awaited_once_with(event.id)
    gateway.force_state.assert_not_awaited()


@pytest.mark.asyncio
async def test_created_transient_failure_retries(
    processor: CustomerProcessor, gateway: AsyncMock, customer_repo: AsyncMock
) -> None:
    customer_repo.create_customer.side_effect = OSError("disk")
    event = make_event("customer.created", _CREATED)

    assert await processor.process(event) is Outcome.RETRY
    gateway.mark_retry.assert_awaited_once_with(event.id)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("event_type", "method"),
    [
        ("customer.activated", "activate_customer"),
        ("customer.deactivated", "deactivate_customer"),
        ("customer.blocked", "block_customer"),
        ("customer.unblocked", "unblock_customer"),
    ],
)
async def test_status_events_route_to_repository(
    processor: CustomerProcessor,
    gateway: AsyncMock,
    customer_repo: AsyncMock,
    event_type: str,
    method: str,
) -> None:
    event = make_event(event_type, {})

    assert await processor.process(event) is Outcome.COMPLETED
    getattr(customer_repo, method).assert_awaited_once()
    gateway.mark_completed.assert_awaited_once_with(event.id)


@pytest.mark.asyncio
async def test_activate_missing_customer_fails(
    processor: CustomerProcessor, gateway: AsyncMock, customer_repo: AsyncMock
) -> None:
    customer_repo.activate_customer.side_effect = DomainError(DomainErrorKind.NOT_FOUND)
    event = make_event("customer.activated", {})

    assert await processor.process(event) is Outcome.FAILED
    gateway.force_state.assert_awaited_once_with(event.id, EventState.FAILED)


@pytest.mark.asyncio
async def test_unknown_customer_event_unprocessable(
    processor: CustomerProcessor, gateway: AsyncMock, customer_repo: AsyncMock
) -> None:
    event = make_event("customer.updated.name", {"firstName": "X"})

    assert await processor.process(event) is Outcome.UNPROCESSABLE
    gateway.force_state.assert_awaited_once_with(event.id, EventState.UNPROCESSABLE)
    assert customer_repo.mock_calls == []
