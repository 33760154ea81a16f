"""Wiring: journal -> gateway -> processors -> registry -> dispatcher.

The read-side repositories belong to the host application, which passes them in.
"""

import asyncio
import logging
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from orchestrator.dispatcher import Dispatcher
from orchestrator.domain.account import AccountRepository
from orchestrator.domain.customer import CustomerRepository
from orchestrator.events import EventCodec, EventJournal, EventRepository, RetryPolicy
from orchestrator.logging_config import setup_logging
from orchestrator.processors import AccountProcessor, CustomerProcessor, ProcessorRegistry
from orchestrator.settings import get_setting, load_settings

logger = logging.getLogger(__name__)

_PROJECT_ROOT = Path(__file__).resolve().parent.parent


def build_repository(settings: dict, project_root: Path = _PROJECT_ROOT) -> EventRepository:
    cfg = settings.get("orchestrator", {})
    db_path = Path(cfg.get("db_path", "data/event_journal.db"))
    if not db_path.is_absolute():
        db_path = project_root / db_path
    db_path.parent.mkdir(parents=True, exist_ok=True)
    journal = EventJournal(
        db_path,
        busy_timeout=int(cfg.get("busy_timeout", 5000)),
        default_max_retry=int(cfg.get("max_retry", 3)),
    )
    return EventRepository(journal, RetryPolicy.from_settings(cfg.get("backoff", {})))


def build_registry(
    repository: EventRepository,
    account_repository: AccountRepository,
    customer_repository: CustomerRepository,
) -> ProcessorRegistry:
    codec = EventCodec()
    registry = ProcessorRegistry(repository)
    registry.register(AccountProcessor(repository, account_repository, codec))
    registry.register(CustomerProcessor(repository, customer_repository, codec))
    return registry


def build_dispatcher(
    settings: dict,
    account_repository: AccountRepository,
    customer_repository: CustomerRepository,
    project_root: Path = _PROJECT_ROOT,
) -> Dispatcher:
    repository = build_repository(settings, project_root)
    registry = build_registry(repository, account_repository, customer_repository)
    return Dispatcher(
        repository,
        registry,
        worker_id=get_setting(settings, "orchestrator.worker_id"),
        poll_interval=float(get_setting(settings, "orchestrator.poll_interval", 5.0)),
        batch_size=int(get_setting(settings, "orchestrator.batch_size", 3)),
        stale_timeout=float(get_setting(settings, "orchestrator.stale_timeout", 300)),
        watchdog_interval=float(get_setting(settings, "orchestrator.watchdog_interval", 30.0)),
        shutdown_timeout=float(get_setting(settings, "orchestrator.shutdown_timeout", 30.0)),
    )


async def main_async(
    account_repository: AccountRepository,
    customer_repository: CustomerRepository,
    shutdown_event: asyncio.Event,
    settings: dict[str, Any] | None = None,
) -> None:
    """Bootstrap: settings -> logging -> dispatcher -> recover -> start -> wait for shutdown."""
    settings = settings or load_settings()
    setup_logging(_PROJECT_ROOT, settings)
    dispatcher = build_dispatcher(settings, account_repository, customer_repository)
    await dispatcher.recover_stale()
    await dispatcher.start()
    try:
        await shutdown_event.wait()
    except asyncio.CancelledError:
        pass
    finally:
        await dispatcher.stop()
        await dispatcher.repository.journal.close()


def run(
    account_repository: AccountRepository,
    customer_repository: CustomerRepository,
) -> None:
    """Synchronous entry for a host process. Runs until interrupted."""
    load_dotenv(_PROJECT_ROOT / ".env")
    try:
        asyncio.run(main_async(account_repository, customer_repository, asyncio.Event()))
    except KeyboardInterrupt:
        pass


__all__ = ["build_dispatcher", "build_registry", "build_repository", "main_async", "run"]
