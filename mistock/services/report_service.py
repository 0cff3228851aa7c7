"""
ReportService - read-only views over obligations, transactions and ledgers.

Nothing here writes. Audit views (voided, discounted, complimentary) only
look at finalized ledgers, i.e. lines that are part of history.
"""
from typing import Callable, List, Optional

from mistock.models.ledger import Ledger
from mistock.models.line_item import LineItem, LineStatus
from mistock.models.obligation import ObligationKind, ObligationStatus, SettlementObligation
from mistock.repositories.base import LedgerStore, ObligationStore, TransactionStore
from mistock.schemas.ledger import LineView
from mistock.schemas.report import LineAuditEntry, ObligationSummary, SalesSummary
from mistock.utils.money import format_amount


def line_view(line: LineItem) -> LineView:
    return LineView.from_line(line)


def matches_search(obligation: SettlementObligation, search: Optional[str]) -> bool:
    """Case-insensitive substring match on counterparty and cashier names."""
    if not search or not search.strip():
        return True
    needle = search.strip().lower()
    names = (obligation.counterparty_name, obligation.cashier_name or "")
    return any(needle in name.lower() for name in names)


def audit_entry(ledger: Ledger, line: LineItem) -> LineAuditEntry:
    return LineAuditEntry(
        ledger_id=ledger.id,
        line_id=line.id,
        sku=line.sku,
        name=line.name,
        status=line.status,
        quantity=line.quantity,
        unit_price_cents=line.unit_price_cents,
        value_cents=line.line_total_cents,
        reason=line.reason,
        discount_percent=line.discount_percent,
        discount_amount_cents=line.discount_amount_cents,
        cost_cents=line.cost_cents,
    )


class ReportService:

    def __init__(
        self,
        ledgers: LedgerStore,
        obligations: ObligationStore,
        transactions: TransactionStore,
        currency_symbol: str = "₦"
    ):
        self.ledgers = ledgers
        self.obligations = obligations
        self.transactions = transactions
        self.currency_symbol = currency_symbol

    # ===== OBLIGATIONS =====

    async def list_obligations(
        self,
        kind: Optional[ObligationKind] = None,
        search: Optional[str] = None,
        status: Optional[ObligationStatus] = None
    ) -> List[SettlementObligation]:
        obligations = await self.obligations.list(kind)
        return [
            o for o in obligations
            if matches_search(o, search) and (status is None or o.status == status)
        ]

    async def obligation_summary(self, kind: Optional[ObligationKind] = None) -> ObligationSummary:
        obligations = await self.obligations.list(kind)

        outstanding = sum(o.remaining_balance_cents for o in obligations)
        counts = {status.value: 0 for status in ObligationStatus}
        for obligation in obligations:
            counts[obligation.status.value] += 1

        return ObligationSummary(
            count=len(obligations),
            counts_by_status=counts,
            original_cents=sum(o.original_amount_cents for o in obligations),
            paid_cents=sum(o.total_paid_cents for o in obligations),
            outstanding_cents=outstanding,
            outstanding_display=format_amount(outstanding, self.currency_symbol),
        )

    # ===== SALES =====

    async def sales_summary(self) -> SalesSummary:
        transactions = await self.transactions.list()

        total = sum(t.total_cents for t in transactions)
        by_method = {}
        for transaction in transactions:
            method = transaction.payment_method.value
            by_method[method] = by_method.get(method, 0) + transaction.total_cents

        return SalesSummary(
            transaction_count=len(transactions),
            gross_cents=sum(t.subtotal_cents for t in transactions),
            discount_cents=sum(t.discount_cents for t in transactions),
            tax_cents=sum(t.tax_cents for t in transactions),
            charges_cents=sum(t.charges_cents for t in transactions),
            total_cents=total,
            totals_by_method=by_method,
            total_display=format_amount(total, self.currency_symbol),
        )

    # ===== LINE AUDIT =====

    async def _audit(self, keep: Callable[[LineItem], bool]) -> List[LineAuditEntry]:
        entries = []
        for ledger in await self.ledgers.list():
            if not ledger.finalized:
                continue
            entries.extend(audit_entry(ledger, line) for line in ledger.lines if keep(line))
        return entries

    async def voided_items(self) -> List[LineAuditEntry]:
        return await self._audit(lambda line: line.status == LineStatus.VOIDED)

    async def cancelled_items(self) -> List[LineAuditEntry]:
        return await self._audit(lambda line: line.status == LineStatus.CANCELLED)

    async def discounted_items(self) -> List[LineAuditEntry]:
        return await self._audit(lambda line: line.is_active and line.discount_percent is not None)

    async def complimentary_items(self) -> List[LineAuditEntry]:
        return await self._audit(lambda line: line.status == LineStatus.COMPLIMENTARY)
