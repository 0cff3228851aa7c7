"""Tests for the obligation model: derived balance, status and history."""
from mistock.models.obligation import (
    ObligationKind,
    ObligationStatus,
    SettlementMethod,
    SettlementObligation,
    SettlementRecord,
    derive_status,
)


def record(amount_cents: int) -> SettlementRecord:
    return SettlementRecord(amount_cents=amount_cents, method=SettlementMethod.CASH, recorded_by="Chidi")


def test_derive_status():
    assert derive_status(15000, 15000) == ObligationStatus.UNSETTLED
    assert derive_status(15000, 10000) == ObligationStatus.PARTIALLY_PAID
    assert derive_status(15000, 0) == ObligationStatus.FULLY_PAID


def test_balance_follows_settlements():
    obligation = SettlementObligation(
        kind=ObligationKind.RECEIVABLE,
        counterparty_name="Ada",
        original_amount_cents=15000
    )
    assert obligation.status == ObligationStatus.UNSETTLED
    assert obligation.status_label == "Unsettled"

    partly = obligation.with_settlement(record(5000))
    assert partly.remaining_balance_cents == 10000
    assert partly.total_paid_cents == 5000
    assert partly.status == ObligationStatus.PARTIALLY_PAID

    over = partly.with_settlement(record(12000))
    assert over.remaining_balance_cents == 0
    assert over.is_fully_paid

    # original untouched
    assert obligation.settlements == []


def test_creditor_label():
    obligation = SettlementObligation(
        kind=ObligationKind.CREDITOR,
        counterparty_name="Dangote Flour Mills",
        original_amount_cents=50000
    )
    assert obligation.status_label == "Unpaid"
    assert obligation.with_settlement(record(100)).status_label == "Partially Paid"


def test_history_is_restartable():
    obligation = SettlementObligation(
        kind=ObligationKind.RECEIVABLE,
        counterparty_name="Ada",
        original_amount_cents=1000
    ).with_settlement(record(100)).with_settlement(record(200))

    history = obligation.history()

    assert len(history) == 2
    assert [r.amount_cents for r in history] == [100, 200]
    assert [r.amount_cents for r in history] == [100, 200]
