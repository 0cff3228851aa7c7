"""
PurchaseRequestService - submit, approve (unlock) and pay purchase requests.

    pending ──unlock──► unlocked ──complete_payment──► paid

Unlocking and setting charges are privileged. Unlocking an unlocked request
is a no-op: nothing is written and no event or info log is produced.
"""
import logging
from typing import List, Optional

from mistock.core.errors import EmptyLedger, NotFoundError, PermissionDenied
from mistock.models.base import new_id
from mistock.models.purchase_request import PaymentMethod, PurchaseRequest, RequestStatus
from mistock.models.transaction import FinalizedTransaction, TransactionSource
from mistock.models.user import Actor, can_set_charges, can_unlock
from mistock.repositories.base import LedgerStore, RequestStore, TransactionStore
from mistock.services.events import EventBus
from mistock.utils.locks import KeyedLock

logger = logging.getLogger(__name__)


class PurchaseRequestService:

    def __init__(
        self,
        ledgers: LedgerStore,
        requests: RequestStore,
        transactions: TransactionStore,
        events: EventBus,
        locks: KeyedLock
    ):
        self.ledgers = ledgers
        self.requests = requests
        self.transactions = transactions
        self.events = events
        self.locks = locks

    async def get_request(self, request_id: str) -> PurchaseRequest:
        request = await self.requests.get(request_id)
        if request is None:
            raise NotFoundError(f"Purchase request {request_id} not found")
        return request

    async def list_requests(self, status: Optional[RequestStatus] = None) -> List[PurchaseRequest]:
        return await self.requests.list(status)

    async def submit(
        self,
        ledger_id: str,
        actor: Actor,
        customer_name: Optional[str] = None
    ) -> PurchaseRequest:
        """
        Snapshot a ledger into a new pending request.

        The source ledger is finalized so it cannot drift from the snapshot.
        """
        async with self.locks.hold(ledger_id):
            ledger = await self.ledgers.get(ledger_id)
            if ledger is None:
                raise NotFoundError(f"Ledger {ledger_id} not found")
            if not ledger.active_lines:
                raise EmptyLedger(f"Ledger {ledger.id} has no active lines to submit")

            finalized = ledger.finalize()
            request = PurchaseRequest(
                ledger_snapshot=finalized.snapshot(),
                customer_name=customer_name,
                submitted_by=actor.display_name,
            )

            await self.ledgers.replace(finalized, expected_version=ledger.version)
            await self.requests.insert(request)

        logger.info(
            "Submitted purchase request %s from ledger %s (subtotal %d)",
            request.id, ledger.id, request.subtotal_cents
        )
        return request

    async def set_charges(self, request_id: str, amount_cents: int, actor: Actor) -> PurchaseRequest:
        if not can_set_charges(actor.role):
            raise PermissionDenied(f"{actor.display_name} may not set charges")

        async with self.locks.hold(request_id):
            request = await self.get_request(request_id)
            updated = request.with_charges(amount_cents)
            stored = await self.requests.replace(updated, expected_version=request.version)

        logger.info("Set charges on purchase request %s to %d", request_id, amount_cents)
        return stored

    async def unlock(self, request_id: str, actor: Actor) -> PurchaseRequest:
        if not can_unlock(actor.role):
            raise PermissionDenied(f"{actor.display_name} may not unlock purchase requests")

        async with self.locks.hold(request_id):
            request = await self.get_request(request_id)
            if request.status == RequestStatus.UNLOCKED:
                logger.debug("Purchase request %s already unlocked", request_id)
                return request
            updated = request.unlocked(actor.display_name)
            stored = await self.requests.replace(updated, expected_version=request.version)

        logger.info("Purchase request %s unlocked by %s", request_id, actor.display_name)
        return stored

    async def complete_payment(
        self,
        request_id: str,
        payment_method: PaymentMethod,
        actor: Actor,
        reference: Optional[str] = None,
        notes: Optional[str] = None
    ) -> FinalizedTransaction:
        """Pay an unlocked request. Subscribers run before the request is marked paid."""
        async with self.locks.hold(request_id):
            request = await self.get_request(request_id)
            transaction_id = new_id()
            paid = request.paid(payment_method, actor.display_name, transaction_id)

            snapshot = request.ledger_snapshot
            transaction = FinalizedTransaction(
                id=transaction_id,
                source=TransactionSource.PURCHASE_REQUEST,
                ledger_id=snapshot.id,
                request_id=request.id,
                lines=snapshot.lines,
                subtotal_cents=snapshot.subtotal_cents,
                discount_cents=snapshot.discount_cents,
                tax_cents=snapshot.tax_cents,
                charges_cents=request.charges_cents,
                total_cents=request.payable_cents,
                payment_method=payment_method,
                customer_name=request.customer_name,
                reference=reference,
                notes=notes,
                recorded_by=actor.display_name,
            )

            await self.events.publish(transaction)
            await self.requests.replace(paid, expected_version=request.version)
            await self.transactions.insert(transaction)

        logger.info(
            "Purchase request %s paid: %d via %s",
            request_id, transaction.total_cents, payment_method.value
        )
        return transaction
