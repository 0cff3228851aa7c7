"""
SettlementService - receivables and creditor balances settled over time.

Core algorithm for recording a payment:
1. Reject when the obligation is already fully paid
2. Compare the amount with the remaining balance
3. Apply the over-payment policy to any excess ("clamp" or "reject")
4. Append one immutable SettlementRecord (CAS on version)
5. Remaining balance and status follow from the records
"""
import logging
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from mistock.core.errors import NotFoundError, ObligationSettled, Overpayment, ValidationError
from mistock.models.obligation import (
    ObligationKind,
    SettlementHistory,
    SettlementMethod,
    SettlementObligation,
    SettlementRecord,
)
from mistock.models.transaction import FinalizedTransaction
from mistock.repositories.base import ObligationStore
from mistock.services.events import EventBus
from mistock.utils.locks import KeyedLock
from mistock.utils.validation import validate_positive_amount

logger = logging.getLogger(__name__)

CLAMP = "clamp"
REJECT = "reject"

WALK_IN_CUSTOMER = "Walk-in customer"


class SettlementResult(BaseModel):
    """Outcome of one recorded payment. ``excess_cents`` is what the balance could not absorb."""
    obligation: SettlementObligation
    record: SettlementRecord
    excess_cents: int = 0

    model_config = ConfigDict(frozen=True)


class SettlementService:

    def __init__(
        self,
        obligations: ObligationStore,
        locks: KeyedLock,
        overpayment_policy: str = CLAMP
    ):
        if overpayment_policy not in (CLAMP, REJECT):
            raise ValueError(f"Unknown over-payment policy: {overpayment_policy}")
        self.obligations = obligations
        self.locks = locks
        self.overpayment_policy = overpayment_policy

    def subscribe(self, events: EventBus) -> None:
        events.subscribe(FinalizedTransaction, self.on_transaction_finalized)

    async def get_obligation(self, obligation_id: str) -> SettlementObligation:
        obligation = await self.obligations.get(obligation_id)
        if obligation is None:
            raise NotFoundError(f"Obligation {obligation_id} not found")
        return obligation

    async def list_obligations(self, kind: Optional[ObligationKind] = None) -> List[SettlementObligation]:
        return await self.obligations.list(kind)

    async def open_obligation(
        self,
        kind: ObligationKind,
        counterparty_name: str,
        original_amount_cents: int,
        cashier_name: Optional[str] = None,
        description: str = "",
        source_transaction_id: Optional[str] = None
    ) -> SettlementObligation:
        validate_positive_amount(original_amount_cents, "Original amount")
        if not counterparty_name or not counterparty_name.strip():
            raise ValidationError("Counterparty name is required")

        obligation = SettlementObligation(
            kind=kind,
            counterparty_name=counterparty_name.strip(),
            cashier_name=cashier_name,
            original_amount_cents=original_amount_cents,
            description=description,
            source_transaction_id=source_transaction_id,
        )
        await self.obligations.insert(obligation)
        logger.info(
            "Opened %s %s for %s: %d",
            kind.value, obligation.id, obligation.counterparty_name, original_amount_cents
        )
        return obligation

    async def record_settlement(
        self,
        obligation_id: str,
        amount_cents: int,
        method: SettlementMethod,
        recorded_by: str,
        reference: Optional[str] = None,
        notes: Optional[str] = None
    ) -> SettlementResult:
        validate_positive_amount(amount_cents, "Settlement amount")

        async with self.locks.hold(obligation_id):
            obligation = await self.get_obligation(obligation_id)
            if obligation.is_fully_paid:
                raise ObligationSettled(f"Obligation {obligation_id} is already fully paid")

            excess_cents = max(0, amount_cents - obligation.remaining_balance_cents)
            if excess_cents and self.overpayment_policy == REJECT:
                raise Overpayment(
                    f"Settlement of {amount_cents} exceeds remaining balance "
                    f"{obligation.remaining_balance_cents}"
                )

            record = SettlementRecord(
                amount_cents=amount_cents,
                method=method,
                reference=reference,
                notes=notes,
                recorded_by=recorded_by,
            )
            updated = await self.obligations.append_settlement(
                obligation_id, record, expected_version=obligation.version
            )

        if excess_cents:
            logger.warning(
                "Settlement on %s exceeded the balance by %d; balance floored at 0",
                obligation_id, excess_cents
            )
        logger.info(
            "Recorded %d %s settlement on %s, remaining %d (%s)",
            amount_cents, method.value, obligation_id,
            updated.remaining_balance_cents, updated.status.value
        )
        return SettlementResult(obligation=updated, record=record, excess_cents=excess_cents)

    async def get_history(self, obligation_id: str) -> SettlementHistory:
        obligation = await self.get_obligation(obligation_id)
        return obligation.history()

    async def on_transaction_finalized(self, transaction: FinalizedTransaction) -> None:
        """Credit payments leave the total outstanding as a receivable."""
        if not transaction.payment_method.is_deferred or transaction.total_cents <= 0:
            return
        await self.open_obligation(
            kind=ObligationKind.RECEIVABLE,
            counterparty_name=transaction.customer_name or WALK_IN_CUSTOMER,
            original_amount_cents=transaction.total_cents,
            cashier_name=transaction.recorded_by,
            description=f"Credit {transaction.source.value.replace('_', ' ')}",
            source_transaction_id=transaction.id,
        )
