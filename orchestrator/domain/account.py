"""Account bounded context: event payloads and the read-side repository contract."""

from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

ORIGIN = "account"

ACCOUNT_CREATED = "account.created"
ACCOUNT_FUNDS_WITHDRAWN = "account.funds.withdrawn"
ACCOUNT_FUNDS_DEPOSITED = "account.funds.deposited"
ACCOUNT_BLOCKED = "account.blocked"
ACCOUNT_UNBLOCKED = "account.unblocked"


class AccountPayload(BaseModel):
    """Payload base: camelCase on the wire, snake_case accepted, unknown keys ignored."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class AccountCreated(AccountPayload):
    initial_balance: float = Field(ge=0)
    currency: str = Field(min_length=1)
    customer_id: str | None = None
    account_number: str | None = None


class AccountFundsWithdrawn(AccountPayload):
    amount: float = Field(gt=0)
    currency: str | None = None
    balance: float | None = None


class AccountFundsDeposited(AccountPayload):
    amount: float = Field(gt=0)
    currency: str | None = None
    balance: float | None = None


class AccountBlocked(AccountPayload):
    reason: str | None = None


class AccountUnblocked(AccountPayload):
    pass


@runtime_checkable
class AccountRepository(Protocol):
    """Read-side account store. Raises DomainError for domain refusals.

    account_id is the event's context_id.
    """

    async def create_account(self, account_id: str, data: AccountCreated) -> None: ...

    async def withdraw_funds(self, account_id: str, data: AccountFundsWithdrawn) -> None: ...

    async def deposit_funds(self, account_id: str, data: AccountFundsDeposited) -> None: ...

    async def block_account(self, account_id: str, data: AccountBlocked) -> None: ...

    async def unblock_account(self, account_id: str, data: AccountUnblocked) -> None: ...

    async def find_by_id(self, account_id: str) -> object | None: ...
