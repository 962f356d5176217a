from decimal import Decimal

import pytest

from orderdesk.data.models import OrderRowStatus, OrderStatus, PaymentMethod
from orderdesk.lifecycle.checkout import CheckoutSession
from orderdesk.lifecycle.errors import CheckoutError, ValidationError

S = OrderRowStatus


@pytest.fixture
def order(make_order):
    return make_order([
        ("draft-lager", "beer", 2, S.SERVED),
        ("water", "soft-drinks", 1, S.SERVED),
        ("craft-ipa", "beer", 1, S.CANCELLED),
    ], status=OrderStatus.SERVED)


def test_starts_without_discounts(store, order):
    session = CheckoutSession(order, store)
    assert session.discount_summary() == "No discounts applied"
    totals = session.totals()
    assert totals.base_grand_total == Decimal("7")
    assert totals.refined_secondary == Decimal("28000")


def test_summary_in_catalog_order(store, order):
    session = CheckoutSession(order, store)
    session.toggle("kandal_village_friend")
    session.toggle("khmer_customer")
    session.set_custom_discount(2, "dollar")
    assert session.discount_summary() == (
        "Khmer Customer Discount (Beer prices adjusted); "
        "Kandal Village Friend Discount (15% off total order row); "
        "Custom Discount: -$2.00"
    )
    session.toggle("khmer_customer", False)
    session.set_custom_discount(12.5, "percentage")
    assert session.discount_summary().endswith("; Custom Discount: 12.5% off")
    session.clear_custom_discount()
    assert "Custom" not in session.discount_summary()


def test_category_rules_use_category_names(store, order):
    session = CheckoutSession(order, store)
    session.toggle("khmer_customer")
    # lager 3 -> 1.75, water untouched
    assert session.totals().base_grand_total == Decimal("4.50")
    assert store.count("get_category", "beer") == 1


def test_rejects_bad_input(store, order):
    session = CheckoutSession(order, store)
    with pytest.raises(ValidationError):
        session.toggle("birthday")
    with pytest.raises(ValidationError):
        session.set_custom_discount(-1, "dollar")
    with pytest.raises(ValidationError):
        session.set_custom_discount(150, "percentage")
    with pytest.raises(ValidationError):
        session.pay("card")


def test_pay_commits_order_then_rows(store, order):
    session = CheckoutSession(order, store)
    session.toggle("kandal_village_friend")
    result = session.pay(PaymentMethod.CASH)

    stored = store.get_order(order.key)
    assert stored.order_status == OrderStatus.PAID
    assert stored.payment_method == PaymentMethod.CASH
    assert stored.paid_amount == Decimal("6.0")
    assert stored.applied_discount == "Kandal Village Friend Discount (15% off total order row)"
    assert stored.payment_daytime is not None

    statuses = {r.product_doc_id: r.order_row_status for r in store.list_order_rows(order.key)}
    assert statuses == {"draft-lager": S.PAID, "water": S.PAID, "craft-ipa": S.CANCELLED}
    assert store.count("update_order_row") == 2
    assert store.calls.index(("update_order", order.key)) < store.calls.index(
        ("update_order_row", order.order_rows[0].document_id)
    )
    assert result.failed_rows == []
    assert result.order.order_status == OrderStatus.PAID
    assert result.totals.refined_primary == Decimal("6.0")
    assert result.source_finalized is None


def test_row_failures_are_reported_not_fatal(store, order):
    failing = order.order_rows[1]
    store.fail_next("update_order_row", failing.document_id)
    result = CheckoutSession(order, store).pay("QR")

    assert [r.document_id for r in result.failed_rows] == [failing.document_id]
    assert store.get_order(order.key).order_status == OrderStatus.PAID
    assert store.list_order_rows(order.key)[0].order_row_status == S.PAID
    row_states = {r.document_id: r.order_row_status for r in result.order.order_rows}
    assert row_states[failing.document_id] == S.SERVED


def test_order_failure_aborts(store, order):
    store.fail_next("update_order", order.key)
    session = CheckoutSession(order, store)
    with pytest.raises(CheckoutError):
        session.pay("cash")
    assert store.count("update_order_row") == 0
    assert store.get_order(order.key).order_status == OrderStatus.SERVED
    assert session.can_pay()


def test_cannot_pay_twice(store, order):
    session = CheckoutSession(order, store)
    session.pay("cash")
    assert not session.can_pay()
    with pytest.raises(ValidationError):
        session.pay("cash")
    assert store.count("update_order", order.key) == 1


def test_nothing_to_pay(store, make_order):
    order = make_order([("water", "soft-drinks", 1, S.CANCELLED)], status=OrderStatus.CANCELLED)
    session = CheckoutSession(order, store)
    assert not session.can_pay()
    with pytest.raises(ValidationError):
        session.pay("cash")
    assert store.count("update_order") == 0


def test_merged_order_cannot_be_paid(store, make_order):
    order = make_order([("draft-lager", "beer", 1, S.SERVED)], status=OrderStatus.MERGED)
    session = CheckoutSession(order, store)
    assert not session.can_pay()
    with pytest.raises(ValidationError):
        session.pay("cash")
    assert store.count("update_order") == 0
    assert store.count("update_order_row") == 0


def test_merge_destination_reasserts_source(store, make_order):
    source = make_order(status=OrderStatus.MERGED, table_name="S")
    destination = make_order([("water", "soft-drinks", 1, S.SERVED)], status=OrderStatus.SERVED,
                             mergedWithOrderDocId=source.key)
    result = CheckoutSession(destination, store).pay("cash")
    assert result.source_finalized is True
    assert store.count("update_order", source.key) == 1
    assert store.get_order(source.key).order_status == OrderStatus.MERGED
