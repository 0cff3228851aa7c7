"""
In-memory stores.

Each store instance owns its own dict, so state lives exactly as long as the
application (or test) that created it.
"""
from typing import Dict, Generic, List, Optional, TypeVar

from mistock.core.errors import ConcurrencyConflict, NotFoundError
from mistock.models.base import DocumentModel, utcnow
from mistock.models.ledger import Ledger, LedgerKind
from mistock.models.obligation import ObligationKind, SettlementObligation, SettlementRecord
from mistock.models.purchase_request import PurchaseRequest, RequestStatus
from mistock.models.transaction import FinalizedTransaction
from mistock.repositories.base import LedgerStore, ObligationStore, RequestStore, TransactionStore

T = TypeVar("T", bound=DocumentModel)


class _VersionedDocs(Generic[T]):
    """Dict of aggregates keyed by id with compare-and-swap writes."""

    def __init__(self, label: str):
        self.label = label
        self._docs: Dict[str, T] = {}
        self._order: List[str] = []

    def insert(self, doc: T) -> T:
        if doc.id in self._docs:
            raise ConcurrencyConflict(f"{self.label} {doc.id} already exists")
        self._docs[doc.id] = doc
        self._order.append(doc.id)
        return doc

    def get(self, doc_id: str) -> Optional[T]:
        return self._docs.get(doc_id)

    def replace(self, doc: T, expected_version: int) -> T:
        current = self._docs.get(doc.id)
        if current is None:
            raise NotFoundError(f"{self.label} {doc.id} not found")
        if current.version != expected_version:
            raise ConcurrencyConflict(
                f"{self.label} {doc.id} changed: expected version {expected_version}, "
                f"found {current.version}"
            )
        stored = doc.model_copy(update={"version": expected_version + 1, "updated_at": utcnow()})
        self._docs[doc.id] = stored
        return stored

    def values(self) -> List[T]:
        return [self._docs[doc_id] for doc_id in self._order]


class MemoryLedgerStore(LedgerStore):

    def __init__(self):
        self._docs: _VersionedDocs[Ledger] = _VersionedDocs("Ledger")

    async def insert(self, ledger: Ledger) -> Ledger:
        return self._docs.insert(ledger)

    async def get(self, ledger_id: str) -> Optional[Ledger]:
        return self._docs.get(ledger_id)

    async def replace(self, ledger: Ledger, expected_version: int) -> Ledger:
        return self._docs.replace(ledger, expected_version)

    async def list(self, kind: Optional[LedgerKind] = None) -> List[Ledger]:
        return [l for l in self._docs.values() if kind is None or l.kind == kind]


class MemoryRequestStore(RequestStore):

    def __init__(self):
        self._docs: _VersionedDocs[PurchaseRequest] = _VersionedDocs("Purchase request")

    async def insert(self, request: PurchaseRequest) -> PurchaseRequest:
        return self._docs.insert(request)

    async def get(self, request_id: str) -> Optional[PurchaseRequest]:
        return self._docs.get(request_id)

    async def replace(self, request: PurchaseRequest, expected_version: int) -> PurchaseRequest:
        return self._docs.replace(request, expected_version)

    async def list(self, status: Optional[RequestStatus] = None) -> List[PurchaseRequest]:
        requests = [r for r in self._docs.values() if status is None or r.status == status]
        return list(reversed(requests))


class MemoryObligationStore(ObligationStore):

    def __init__(self):
        self._docs: _VersionedDocs[SettlementObligation] = _VersionedDocs("Obligation")

    async def insert(self, obligation: SettlementObligation) -> SettlementObligation:
        return self._docs.insert(obligation)

    async def get(self, obligation_id: str) -> Optional[SettlementObligation]:
        return self._docs.get(obligation_id)

    async def append_settlement(
        self,
        obligation_id: str,
        record: SettlementRecord,
        expected_version: int
    ) -> SettlementObligation:
        current = self._docs.get(obligation_id)
        if current is None:
            raise NotFoundError(f"Obligation {obligation_id} not found")
        return self._docs.replace(current.with_settlement(record), expected_version)

    async def list(self, kind: Optional[ObligationKind] = None) -> List[SettlementObligation]:
        return [o for o in self._docs.values() if kind is None or o.kind == kind]


class MemoryTransactionStore(TransactionStore):

    def __init__(self):
        self._docs: Dict[str, FinalizedTransaction] = {}

    async def insert(self, transaction: FinalizedTransaction) -> FinalizedTransaction:
        self._docs[transaction.id] = transaction
        return transaction

    async def get(self, transaction_id: str) -> Optional[FinalizedTransaction]:
        return self._docs.get(transaction_id)

    async def list(self) -> List[FinalizedTransaction]:
        return list(self._docs.values())
