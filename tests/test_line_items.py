"""Tests for the line status state machine."""
import pytest

from mistock.core.errors import InvalidDiscount, InvalidTransition, MissingReason
from mistock.models import line_item as line_ops
from mistock.models.line_item import ALLOWED_TRANSITIONS, AvailableItem, LineStatus


@pytest.fixture
def line():
    item = AvailableItem(sku="A", name="Rice", available_quantity=10, unit_price_cents=100, cost_price_cents=40)
    return line_ops.new_line(item, 2)


def test_new_line_is_active(line):
    assert line.status == LineStatus.ACTIVE
    assert line.line_total_cents == 200
    assert line.available_quantity == 10
    assert line.cost_cents == 80


@pytest.mark.parametrize("operation, status", [
    (line_ops.void, LineStatus.VOIDED),
    (line_ops.cancel, LineStatus.CANCELLED),
    (line_ops.mark_complimentary, LineStatus.COMPLIMENTARY),
])
def test_transition_out_of_active(line, operation, status):
    updated = operation(line, "Customer changed mind")

    assert updated.status == status
    assert updated.reason == "Customer changed mind"
    # input untouched
    assert line.status == LineStatus.ACTIVE


def test_reason_is_mandatory(line):
    with pytest.raises(MissingReason):
        line_ops.void(line, None)
    with pytest.raises(MissingReason):
        line_ops.mark_complimentary(line, "  ")


@pytest.mark.parametrize("terminal", [LineStatus.VOIDED, LineStatus.CANCELLED, LineStatus.COMPLIMENTARY])
def test_terminal_lines_are_immutable(line, terminal):
    done = line_ops.transition(line, terminal, "Other")

    assert ALLOWED_TRANSITIONS[terminal] == frozenset()
    for target in (LineStatus.VOIDED, LineStatus.CANCELLED, LineStatus.COMPLIMENTARY):
        with pytest.raises(InvalidTransition):
            line_ops.transition(done, target, "Other")
    with pytest.raises(InvalidTransition):
        line_ops.with_quantity(done, 5)
    with pytest.raises(InvalidTransition):
        line_ops.apply_discount(done, 10)


def test_apply_discount(line):
    discounted = line_ops.apply_discount(line, 10)

    assert discounted.line_total_cents == 180
    assert discounted.discount_amount_cents == 20
    assert discounted.gross_cents == 200

    with pytest.raises(InvalidDiscount):
        line_ops.apply_discount(line, 0)
    with pytest.raises(InvalidDiscount):
        line_ops.apply_discount(line, 150)


def test_exceeds_stock(line):
    assert not line_ops.exceeds_stock(line_ops.with_quantity(line, 10))
    assert line_ops.exceeds_stock(line_ops.with_quantity(line, 11))
