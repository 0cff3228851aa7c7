"""
LedgerService - sale, posting and requisition ledgers.

Every mutation follows the same path:
1. Take the per-ledger lock (bounded wait)
2. Load the current ledger
3. Compute the new ledger on a copy (validation errors leave nothing behind)
4. Commit with a compare-and-swap on the version it was loaded at
"""
import logging
from decimal import Decimal
from typing import Callable, List, Optional

from mistock.core.errors import EmptyLedger, InsufficientPayment, InvalidTransition, NotFoundError
from mistock.models.ledger import Ledger, LedgerKind
from mistock.models.line_item import AvailableItem
from mistock.models.purchase_request import PaymentMethod
from mistock.models.transaction import FinalizedTransaction, TransactionSource
from mistock.models.user import Actor
from mistock.repositories.base import LedgerStore, TransactionStore
from mistock.services.events import EventBus
from mistock.utils.locks import KeyedLock
from mistock.utils.money import Number
from mistock.utils.validation import validate_non_negative_amount, validate_tax_rate

logger = logging.getLogger(__name__)


class LedgerService:

    def __init__(
        self,
        ledgers: LedgerStore,
        transactions: TransactionStore,
        events: EventBus,
        locks: KeyedLock,
        default_tax_rate_percent: Number = Decimal("0")
    ):
        self.ledgers = ledgers
        self.transactions = transactions
        self.events = events
        self.locks = locks
        self.default_tax_rate_percent = default_tax_rate_percent

    # ===== READS =====

    async def get_ledger(self, ledger_id: str) -> Ledger:
        ledger = await self.ledgers.get(ledger_id)
        if ledger is None:
            raise NotFoundError(f"Ledger {ledger_id} not found")
        return ledger

    async def list_ledgers(self, kind: Optional[LedgerKind] = None) -> List[Ledger]:
        return await self.ledgers.list(kind)

    # ===== WRITES =====

    async def open_ledger(
        self,
        kind: LedgerKind = LedgerKind.SALE,
        tax_rate_percent: Optional[Number] = None,
        notes: Optional[str] = None
    ) -> Ledger:
        if tax_rate_percent is None:
            tax_rate_percent = self.default_tax_rate_percent
        ledger = Ledger(
            kind=kind,
            tax_rate_percent=validate_tax_rate(tax_rate_percent),
            notes=notes
        )
        await self.ledgers.insert(ledger)
        logger.info("Opened %s ledger %s", kind.value, ledger.id)
        return ledger

    async def _mutate(self, ledger_id: str, change: Callable[[Ledger], Ledger]) -> Ledger:
        async with self.locks.hold(ledger_id):
            ledger = await self.get_ledger(ledger_id)
            updated = change(ledger)
            return await self.ledgers.replace(updated, expected_version=ledger.version)

    async def add_line(self, ledger_id: str, item: AvailableItem, quantity: int) -> Ledger:
        return await self._mutate(ledger_id, lambda ledger: ledger.add_line(item, quantity))

    async def set_quantity(self, ledger_id: str, line_id: str, quantity: int) -> Ledger:
        return await self._mutate(ledger_id, lambda ledger: ledger.set_quantity(line_id, quantity))

    async def remove_line(self, ledger_id: str, line_id: str) -> Ledger:
        return await self._mutate(ledger_id, lambda ledger: ledger.remove_line(line_id))

    async def void_line(self, ledger_id: str, line_id: str, reason: Optional[str]) -> Ledger:
        ledger = await self._mutate(ledger_id, lambda ledger: ledger.void_line(line_id, reason))
        logger.info("Voided line %s on ledger %s", line_id, ledger_id)
        return ledger

    async def cancel_line(self, ledger_id: str, line_id: str, reason: Optional[str]) -> Ledger:
        ledger = await self._mutate(ledger_id, lambda ledger: ledger.cancel_line(line_id, reason))
        logger.info("Cancelled line %s on ledger %s", line_id, ledger_id)
        return ledger

    async def mark_complimentary(self, ledger_id: str, line_id: str, reason: Optional[str]) -> Ledger:
        ledger = await self._mutate(ledger_id, lambda ledger: ledger.mark_complimentary(line_id, reason))
        logger.info("Marked line %s on ledger %s complimentary", line_id, ledger_id)
        return ledger

    async def apply_discount(self, ledger_id: str, line_id: str, percent: Number) -> Ledger:
        return await self._mutate(ledger_id, lambda ledger: ledger.apply_discount(line_id, percent))

    async def set_discount(self, ledger_id: str, amount_cents: int) -> Ledger:
        return await self._mutate(ledger_id, lambda ledger: ledger.set_discount(amount_cents))

    async def finalize(self, ledger_id: str) -> Ledger:
        ledger = await self._mutate(ledger_id, lambda ledger: ledger.finalize())
        logger.info("Finalized ledger %s (total %d)", ledger.id, ledger.total_cents)
        return ledger

    async def complete_sale(
        self,
        ledger_id: str,
        payment_method: PaymentMethod,
        actor: Actor,
        customer_name: Optional[str] = None,
        amount_received_cents: Optional[int] = None,
        reference: Optional[str] = None,
        notes: Optional[str] = None
    ) -> FinalizedTransaction:
        """
        POS checkout: finalize a sale ledger and emit its transaction.

        Cash payments may pass the amount handed over; it must cover the
        total and the change is recorded on the transaction.

        The transaction is published before anything is committed, so a
        failing subscriber (e.g. the credit receivable) leaves the ledger open.
        """
        async with self.locks.hold(ledger_id):
            ledger = await self.get_ledger(ledger_id)
            if ledger.kind != LedgerKind.SALE:
                raise InvalidTransition(
                    f"Ledger {ledger.id} is a {ledger.kind.value} ledger; only sales are checked out"
                )
            if not ledger.active_lines:
                raise EmptyLedger(f"Ledger {ledger.id} has no active lines")

            change_cents = None
            if payment_method == PaymentMethod.CASH and amount_received_cents is not None:
                validate_non_negative_amount(amount_received_cents, "Amount received")
                if amount_received_cents < ledger.total_cents:
                    raise InsufficientPayment(
                        f"Received {amount_received_cents}, total is {ledger.total_cents}"
                    )
                change_cents = amount_received_cents - ledger.total_cents

            finalized = ledger.finalize()
            transaction = FinalizedTransaction(
                source=TransactionSource.DIRECT_SALE,
                ledger_id=ledger.id,
                lines=finalized.lines,
                subtotal_cents=finalized.subtotal_cents,
                discount_cents=finalized.discount_cents,
                tax_cents=finalized.tax_cents,
                total_cents=finalized.total_cents,
                payment_method=payment_method,
                customer_name=customer_name,
                amount_received_cents=amount_received_cents if change_cents is not None else None,
                change_cents=change_cents,
                reference=reference,
                notes=notes,
                recorded_by=actor.display_name,
            )

            await self.events.publish(transaction)
            await self.ledgers.replace(finalized, expected_version=ledger.version)
            await self.transactions.insert(transaction)

        logger.info(
            "Completed sale %s on ledger %s: %d via %s",
            transaction.id, ledger.id, transaction.total_cents, payment_method.value
        )
        return transaction
