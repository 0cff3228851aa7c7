"""
Store interfaces the services depend on.

A store persists whole aggregates and enforces optimistic concurrency:
every write names the version it was computed from, and a write against a
newer stored version fails with ConcurrencyConflict instead of silently
overwriting it. Stored versions go up by one per successful write.
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, TypeAdapter

from mistock.models.ledger import Ledger, LedgerKind
from mistock.models.obligation import ObligationKind, SettlementObligation, SettlementRecord
from mistock.models.purchase_request import PurchaseRequest, RequestStatus
from mistock.models.transaction import FinalizedTransaction

_DATETIME = TypeAdapter(datetime)


class LedgerStore(ABC):

    @abstractmethod
    async def insert(self, ledger: Ledger) -> Ledger: ...

    @abstractmethod
    async def get(self, ledger_id: str) -> Optional[Ledger]: ...

    @abstractmethod
    async def replace(self, ledger: Ledger, expected_version: int) -> Ledger: ...

    @abstractmethod
    async def list(self, kind: Optional[LedgerKind] = None) -> List[Ledger]: ...


class RequestStore(ABC):

    @abstractmethod
    async def insert(self, request: PurchaseRequest) -> PurchaseRequest: ...

    @abstractmethod
    async def get(self, request_id: str) -> Optional[PurchaseRequest]: ...

    @abstractmethod
    async def replace(self, request: PurchaseRequest, expected_version: int) -> PurchaseRequest: ...

    @abstractmethod
    async def list(self, status: Optional[RequestStatus] = None) -> List[PurchaseRequest]:
        """Newest first."""


class ObligationStore(ABC):

    @abstractmethod
    async def insert(self, obligation: SettlementObligation) -> SettlementObligation: ...

    @abstractmethod
    async def get(self, obligation_id: str) -> Optional[SettlementObligation]: ...

    @abstractmethod
    async def append_settlement(
        self,
        obligation_id: str,
        record: SettlementRecord,
        expected_version: int
    ) -> SettlementObligation:
        """Append ``record`` if the stored version still equals ``expected_version``."""

    @abstractmethod
    async def list(self, kind: Optional[ObligationKind] = None) -> List[SettlementObligation]: ...


class TransactionStore(ABC):

    @abstractmethod
    async def insert(self, transaction: FinalizedTransaction) -> FinalizedTransaction: ...

    @abstractmethod
    async def get(self, transaction_id: str) -> Optional[FinalizedTransaction]: ...

    @abstractmethod
    async def list(self) -> List[FinalizedTransaction]: ...


def to_document(model: BaseModel) -> dict:
    """
    Mongo document for an aggregate.

    Derived fields (totals, status, balances) are left out at every level,
    including nested snapshots and line items, so the stored document only
    carries source data; they recompute on load.
    """
    doc = model.model_dump(mode="json", by_alias=True)
    return _drop_computed(model, doc)


def _drop_computed(model: BaseModel, doc: dict) -> dict:
    model_type = type(model)
    for name in model_type.model_computed_fields:
        doc.pop(name, None)

    for name, field in model_type.model_fields.items():
        key = field.alias if field.alias in doc else name
        value = getattr(model, name)
        if isinstance(value, BaseModel):
            _drop_computed(value, doc[key])
        elif isinstance(value, (list, tuple)):
            for item, item_doc in zip(value, doc[key]):
                if isinstance(item, BaseModel):
                    _drop_computed(item, item_doc)
    return doc


def json_timestamp(value: datetime) -> str:
    """The same string pydantic writes for datetimes in ``to_document``."""
    return _DATETIME.dump_python(value, mode="json")
