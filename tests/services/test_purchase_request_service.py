import logging
from unittest.mock import AsyncMock

import pytest

from mistock.core.errors import (
    EmptyLedger,
    InvalidTransition,
    LedgerFinalized,
    NotUnlocked,
    PermissionDenied,
)
from mistock.models.ledger import LedgerKind
from mistock.models.obligation import ObligationKind
from mistock.models.purchase_request import PaymentMethod, RequestStatus
from mistock.models.transaction import TransactionSource
from mistock.models.user import Actor, LoginResult


@pytest.mark.asyncio
async def test_submit_unlock_pay(services, requisition_ledger, cashier, admin):
    request = await services.purchase_requests.submit(requisition_ledger.id, cashier)
    assert request.status == RequestStatus.PENDING
    assert request.subtotal_cents == 450
    assert request.submitted_by == "Chidi Okeke"

    with pytest.raises(PermissionDenied):
        await services.purchase_requests.unlock(request.id, cashier)

    request = await services.purchase_requests.set_charges(request.id, 50, admin)
    request = await services.purchase_requests.unlock(request.id, admin)
    assert request.status == RequestStatus.UNLOCKED
    assert request.unlocked_by == "Amaka Obi"
    assert request.payable_cents == 500

    transaction = await services.purchase_requests.complete_payment(request.id, PaymentMethod.CASH, cashier)
    assert transaction.source == TransactionSource.PURCHASE_REQUEST
    assert transaction.total_cents == 500
    assert transaction.charges_cents == 50

    paid = await services.purchase_requests.get_request(request.id)
    assert paid.status == RequestStatus.PAID
    assert paid.transaction_id == transaction.id


@pytest.mark.asyncio
async def test_submit_finalizes_source_ledger(services, requisition_ledger, cashier, item_a):
    request = await services.purchase_requests.submit(requisition_ledger.id, cashier)

    with pytest.raises(LedgerFinalized):
        await services.ledger.add_line(requisition_ledger.id, item_a, 1)
    with pytest.raises(LedgerFinalized):
        await services.purchase_requests.submit(requisition_ledger.id, cashier)
    assert request.ledger_snapshot.finalized


@pytest.mark.asyncio
async def test_submit_empty_ledger(services, cashier):
    ledger = await services.ledger.open_ledger(LedgerKind.REQUISITION)

    with pytest.raises(EmptyLedger):
        await services.purchase_requests.submit(ledger.id, cashier)
    assert not (await services.ledger.get_ledger(ledger.id)).finalized


@pytest.mark.asyncio
async def test_unlock_is_idempotent(services, requisition_ledger, cashier, admin, caplog):
    request = await services.purchase_requests.submit(requisition_ledger.id, cashier)
    first = await services.purchase_requests.unlock(request.id, admin)

    caplog.clear()
    with caplog.at_level(logging.DEBUG, logger="mistock.services.purchase_request_service"):
        second = await services.purchase_requests.unlock(request.id, admin)

    assert second.version == first.version
    assert second.unlocked_at == first.unlocked_at
    assert not [r for r in caplog.records if r.levelno >= logging.INFO]
    assert any("already unlocked" in r.getMessage() for r in caplog.records)


@pytest.mark.asyncio
async def test_payment_requires_unlock(services, requisition_ledger, cashier, admin):
    request = await services.purchase_requests.submit(requisition_ledger.id, cashier)

    with pytest.raises(NotUnlocked):
        await services.purchase_requests.complete_payment(request.id, PaymentMethod.CASH, cashier)

    await services.purchase_requests.unlock(request.id, admin)
    await services.purchase_requests.complete_payment(request.id, PaymentMethod.CASH, cashier)

    with pytest.raises(InvalidTransition):
        await services.purchase_requests.complete_payment(request.id, PaymentMethod.CASH, cashier)
    with pytest.raises(InvalidTransition):
        await services.purchase_requests.unlock(request.id, admin)
    with pytest.raises(InvalidTransition):
        await services.purchase_requests.set_charges(request.id, 10, admin)


@pytest.mark.asyncio
async def test_charges_are_privileged(services, requisition_ledger, cashier):
    request = await services.purchase_requests.submit(requisition_ledger.id, cashier)

    with pytest.raises(PermissionDenied):
        await services.purchase_requests.set_charges(request.id, 50, cashier)


@pytest.mark.asyncio
async def test_credit_payment_opens_receivable_for_payable(services, requisition_ledger, cashier, admin):
    request = await services.purchase_requests.submit(requisition_ledger.id, cashier, customer_name="Ada Foods")
    await services.purchase_requests.set_charges(request.id, 50, admin)
    await services.purchase_requests.unlock(request.id, admin)

    transaction = await services.purchase_requests.complete_payment(request.id, PaymentMethod.CREDIT, cashier)

    [receivable] = await services.settlements.list_obligations(ObligationKind.RECEIVABLE)
    assert receivable.original_amount_cents == 500
    assert receivable.counterparty_name == "Ada Foods"
    assert receivable.source_transaction_id == transaction.id


@pytest.mark.asyncio
async def test_list_newest_first(services, cashier, item_a, admin):
    ids = []
    for _ in range(2):
        ledger = await services.ledger.open_ledger(LedgerKind.REQUISITION)
        await services.ledger.add_line(ledger.id, item_a, 1)
        ids.append((await services.purchase_requests.submit(ledger.id, cashier)).id)

    assert [r.id for r in await services.purchase_requests.list_requests()] == ids[::-1]

    await services.purchase_requests.unlock(ids[0], admin)
    unlocked = await services.purchase_requests.list_requests(RequestStatus.UNLOCKED)
    assert [r.id for r in unlocked] == [ids[0]]


@pytest.mark.asyncio
async def test_supervisor_cannot_unlock(services, requisition_ledger, cashier):
    supervisor = Actor.from_login(
        LoginResult(email="sam@example.com", full_name="Sam", designation="Supervisor")
    )
    request = await services.purchase_requests.submit(requisition_ledger.id, cashier)

    with pytest.raises(PermissionDenied):
        await services.purchase_requests.unlock(request.id, supervisor)
    with pytest.raises(PermissionDenied):
        await services.purchase_requests.set_charges(request.id, 50, supervisor)
    assert (await services.purchase_requests.get_request(request.id)).status == RequestStatus.PENDING


@pytest.mark.asyncio
async def test_failed_receivable_leaves_request_unlocked(services, requisition_ledger, cashier, admin):
    request = await services.purchase_requests.submit(requisition_ledger.id, cashier)
    await services.purchase_requests.unlock(request.id, admin)
    services.settlements.obligations.insert = AsyncMock(side_effect=RuntimeError("store down"))

    with pytest.raises(RuntimeError):
        await services.purchase_requests.complete_payment(request.id, PaymentMethod.CREDIT, cashier)

    stored = await services.purchase_requests.get_request(request.id)
    assert stored.status == RequestStatus.UNLOCKED
    assert stored.transaction_id is None
    assert await services.purchase_requests.transactions.list() == []


@pytest.mark.asyncio
async def test_payment_reference_and_notes(services, requisition_ledger, cashier, admin):
    request = await services.purchase_requests.submit(requisition_ledger.id, cashier)
    await services.purchase_requests.unlock(request.id, admin)

    transaction = await services.purchase_requests.complete_payment(
        request.id, PaymentMethod.TRANSFER, cashier, reference="TRF-2231", notes="GTBank"
    )

    assert transaction.reference == "TRF-2231"
    assert transaction.notes == "GTBank"
