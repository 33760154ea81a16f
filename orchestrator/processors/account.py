"""Account event processor."""

from orchestrator.domain import account
from orchestrator.domain.account import AccountRepository
from orchestrator.events.codec import EventCodec
from orchestrator.events.repository import EventGateway
from orchestrator.processors.base import EventProcessor


class AccountProcessor(EventProcessor):
    """Applies account.* events to the account read side."""

    origin = account.ORIGIN

    def __init__(
        self,
        gateway: EventGateway,
        account_repository: AccountRepository,
        codec: EventCodec | None = None,
    ) -> None:
        self._accounts = account_repository
        super().__init__(gateway, codec)

    def register_routes(self) -> None:
        self.route(
            account.ACCOUNT_CREATED,
            account.AccountCreated,
            self._accounts.create_account,
            creates=True,
        )
        self.route(
            account.ACCOUNT_FUNDS_WITHDRAWN,
            account.AccountFundsWithdrawn,
            self._accounts.withdraw_funds,
        )
        self.route(
            account.ACCOUNT_FUNDS_DEPOSITED,
            account.AccountFundsDeposited,
            self._accounts.deposit_funds,
        )
        self.route(
            account.ACCOUNT_BLOCKED,
            account.AccountBlocked,
            self._accounts.block_account,
        )
        self.route(
            account.ACCOUNT_UNBLOCKED,
            account.AccountUnblocked,
            self._accounts.unblock_account,
        )
