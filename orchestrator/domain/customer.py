"""Customer bounded context: event payloads and the read-side repository contract."""

from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

ORIGIN = "customer"

CUSTOMER_CREATED = "customer.created"
CUSTOMER_ACTIVATED = "customer.activated"
CUSTOMER_DEACTIVATED = "customer.deactivated"
CUSTOMER_BLOCKED = "customer.blocked"
CUSTOMER_UNBLOCKED = "customer.unblocked"


class CustomerPayload(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class Address(CustomerPayload):
    street: str = ""
    city: str = ""
    state: str = ""
    postal_code: str = ""
    country: str = ""


class CustomerCreated(CustomerPayload):
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    email: str = ""
    phone: str = ""
    date_of_birth: str = ""
    address: Address = Field(default_factory=Address)


class CustomerActivated(CustomerPayload):
    pass


class CustomerDeactivated(CustomerPayload):
    pass


class CustomerBlocked(CustomerPayload):
    reason: str | None = None


class CustomerUnblocked(CustomerPayload):
    pass


@runtime_checkable
class CustomerRepository(Protocol):
    """Read-side customer store. Raises DomainError for domain refusals.

    customer_id is the event's context_id.
    """

    async def create_customer(self, customer_id: str, data: CustomerCreated) -> None: ...

    async def activate_customer(self, customer_id: str, data: CustomerActivated) -> None: ...

    async def deactivate_customer(
        self, customer_id: str, data: CustomerDeactivated
    ) -> None: ...

    async def block_customer(self, customer_id: str, data: CustomerBlocked) -> None: ...

    async def unblock_customer(self, customer_id: str, data: CustomerUnblocked) -> None: ...
