from __future__ import annotations

from typing import Dict, FrozenSet

from orderdesk.data.interface import OrderStore
from orderdesk.data.models import OrderRow, OrderRowStatus
from orderdesk.logging import get_logger

from .errors import IllegalTransitionError

# cancelled and paid have no outgoing transitions
LEGAL_TRANSITIONS: Dict[OrderRowStatus, FrozenSet[OrderRowStatus]] = {
    OrderRowStatus.PENDING: frozenset({OrderRowStatus.SERVED, OrderRowStatus.CANCELLED}),
    OrderRowStatus.SERVED: frozenset({OrderRowStatus.PAID, OrderRowStatus.CANCELLED}),
    OrderRowStatus.PAID: frozenset(),
    OrderRowStatus.CANCELLED: frozenset(),
}


def can_transition(current: OrderRowStatus, target: OrderRowStatus) -> bool:
    return OrderRowStatus(target) in LEGAL_TRANSITIONS[OrderRowStatus(current)]


def selectable_statuses(current: OrderRowStatus, show_paid: bool = True) -> FrozenSet[OrderRowStatus]:
    """Targets an operator may pick from `current`; `paid` is hidden outside checkout."""
    targets = LEGAL_TRANSITIONS[OrderRowStatus(current)]
    if not show_paid:
        targets = targets - {OrderRowStatus.PAID}
    return targets


class RowStatusSwitcher:
    """Applies row status transitions, one confirmed store write per legal move."""

    def __init__(self, store: OrderStore) -> None:
        self.store = store
        self.logger = get_logger(__name__)

    def switch(self, row: OrderRow, target: OrderRowStatus) -> OrderRow:
        """Move `row` to `target` and return the row as the store confirmed it.

        Raises:
            IllegalTransitionError: the move is not allowed; nothing is written.
            StoreError: the write failed; `row` is left as it was.
        """
        target = OrderRowStatus(target)
        current = row.order_row_status
        if not can_transition(current, target):
            self.logger.warning(f"Rejected row {row.document_id} transition {current.value} -> {target.value}")
            raise IllegalTransitionError(current.value, target.value)

        updated = self.store.update_order_row(row.document_id, {"orderRowStatus": target.value})
        self.logger.info(f"Row {row.document_id}: {current.value} -> {target.value}")
        return row.model_copy(update={
            "order_row_status": updated.order_row_status,
            "updated_at": updated.updated_at or row.updated_at,
        })
