from datetime import datetime
from decimal import Decimal

from orderdesk.dashboard.board import OrderBoard
from orderdesk.data.models import Order, OrderStatus


def local(*args):
    return datetime(*args).astimezone()


NOW = local(2026, 3, 14, 21, 0)  # a Saturday


def order(key, status, created, paid_at=None, amount=None):
    return Order(
        documentId=key,
        orderStatus=status,
        createdAt=created,
        paymentDaytime=paid_at,
        paidAmount=amount,
    )


def make_board():
    return OrderBoard([
        order("p1", OrderStatus.PENDING, local(2026, 3, 14, 19, 0)),
        order("p2", OrderStatus.PENDING, local(2026, 3, 14, 20, 0)),
        order("s1", OrderStatus.SERVED, local(2026, 3, 14, 18, 30)),
        order("paid-today", OrderStatus.PAID, local(2026, 3, 14, 18, 0), local(2026, 3, 14, 20, 30), Decimal("12.5")),
        order("paid-late", OrderStatus.PAID, local(2026, 3, 14, 23, 0), local(2026, 3, 15, 1, 0), Decimal("4")),
        order("paid-yesterday", OrderStatus.PAID, local(2026, 3, 13, 18, 0), local(2026, 3, 13, 22, 0), Decimal("9")),
        order("merged", OrderStatus.MERGED, local(2026, 3, 14, 17, 0)),
    ], now=NOW)


def test_lists_latest_first():
    board = make_board()
    assert [o.key for o in board.pending()] == ["p2", "p1"]
    assert [o.key for o in board.served()] == ["s1"]


def test_paid_today_uses_business_day():
    board = OrderBoard(make_board().orders, now=local(2026, 3, 15, 2, 0))
    assert [o.key for o in board.paid_today()] == ["paid-late", "paid-today"]
    assert board.paid_total() == Decimal("16.5")


def test_paid_today_excludes_other_days():
    assert [o.key for o in make_board().paid_today()] == ["paid-late", "paid-today"]


def test_hourly_counts():
    counts = make_board().hourly_counts()
    assert list(counts.columns) == ["hour", "orders"]
    assert len(counts) == 24
    by_hour = dict(zip(counts["hour"], counts["orders"]))
    assert by_hour[18] == 3
    assert by_hour[3] == 0


def test_daily_counts_shift_after_midnight():
    board = OrderBoard([
        order("fri-night", OrderStatus.PAID, local(2026, 3, 14, 1, 30)),
        order("sat", OrderStatus.SERVED, local(2026, 3, 14, 12, 0)),
    ])
    counts = dict(zip(*[board.daily_counts()[c] for c in ("weekday", "orders")]))
    assert counts["Friday"] == 1
    assert counts["Saturday"] == 1
    assert counts["Monday"] == 0


def test_empty_board():
    board = OrderBoard([], now=NOW)
    assert board.pending() == []
    assert board.paid_today() == []
    assert board.hourly_counts()["orders"].sum() == 0
    assert board.daily_counts()["orders"].sum() == 0


def test_snapshot_is_not_mutated_by_new_polls():
    first = make_board()
    second = OrderBoard(first.orders[:1], now=NOW)
    assert len(first.pending()) == 2
    assert len(second.pending()) == 1
    assert second.frame is not first.frame
