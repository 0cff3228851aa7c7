"""
Wires stores, locks and the event bus into one set of services per application.

Nothing here is module-level state: ``build_services`` returns a fresh
container every call, so each app (and each test) gets its own stores.
"""
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from mistock.core.config import Settings
from mistock.repositories.ledger_repo import LedgerRepository
from mistock.repositories.memory import (
    MemoryLedgerStore,
    MemoryObligationStore,
    MemoryRequestStore,
    MemoryTransactionStore,
)
from mistock.repositories.obligation_repo import ObligationRepository
from mistock.repositories.request_repo import PurchaseRequestRepository
from mistock.repositories.transaction_repo import TransactionRepository
from mistock.services.events import EventBus
from mistock.services.ledger_service import LedgerService
from mistock.services.purchase_request_service import PurchaseRequestService
from mistock.services.report_service import ReportService
from mistock.services.settlement_service import SettlementService
from mistock.utils.locks import KeyedLock


class Services:

    def __init__(self, ledgers, requests, obligations, transactions, settings: Settings):
        self.settings = settings
        self.events = EventBus()
        locks = KeyedLock(timeout=settings.LOCK_TIMEOUT_SECONDS)

        self.ledger = LedgerService(
            ledgers,
            transactions,
            self.events,
            locks,
            default_tax_rate_percent=settings.DEFAULT_TAX_RATE_PERCENT
        )
        self.purchase_requests = PurchaseRequestService(
            ledgers, requests, transactions, self.events, locks
        )
        self.settlements = SettlementService(
            obligations, locks, overpayment_policy=settings.OVERPAYMENT_POLICY
        )
        self.settlements.subscribe(self.events)
        self.reports = ReportService(
            ledgers, obligations, transactions, currency_symbol=settings.CURRENCY_SYMBOL
        )


def build_services(settings: Settings, db: Optional[AsyncIOMotorDatabase] = None) -> Services:
    """Memory stores unless a Mongo database is passed in."""
    if db is None:
        return Services(
            MemoryLedgerStore(),
            MemoryRequestStore(),
            MemoryObligationStore(),
            MemoryTransactionStore(),
            settings
        )
    return Services(
        LedgerRepository(db),
        PurchaseRequestRepository(db),
        ObligationRepository(db),
        TransactionRepository(db),
        settings
    )
