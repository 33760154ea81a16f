"""Customer event processor."""

from orchestrator.domain import customer
from orchestrator.domain.customer import CustomerRepository
from orchestrator.events.codec import EventCodec
from orchestrator.events.repository import EventGateway
from orchestrator.processors.base import EventProcessor


class CustomerProcessor(EventProcessor):
    """Applies customer.* events to the customer read side."""

    origin = customer.ORIGIN

    def __init__(
        self,
        gateway: EventGateway,
        customer_repository: CustomerRepository,
        codec: EventCodec | None = None,
    ) -> None:
        self._customers = customer_repository
        super().__init__(gateway, codec)

    def register_routes(self) -> None:
        self.route(
            customer.CUSTOMER_CREATED,
            customer.CustomerCreated,
            self._customers.create_customer,
            creates=True,
        )
        self.route(
            customer.CUSTOMER_ACTIVATED,
            customer.CustomerActivated,
            self._customers.activate_customer,
        )
        self.route(
            customer.CUSTOMER_DEACTIVATED,
            customer.CustomerDeactivated,
            self._customers.deactivate_customer,
        )
        self.route(
            customer.CUSTOMER_BLOCKED,
            customer.CustomerBlocked,
            self._customers.block_customer,
        )
        self.route(
            customer.CUSTOMER_UNBLOCKED,
            customer.CustomerUnblocked,
            self._customers.unblock_customer,
        )
