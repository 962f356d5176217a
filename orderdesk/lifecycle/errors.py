from __future__ import annotations

from typing import List, Optional

from orderdesk.data.models import OrderRow


class ValidationError(ValueError):
    """Input rejected locally, before any store call."""


class IllegalTransitionError(ValueError):
    """A row status change the state machine does not allow."""

    def __init__(self, current: str, target: str) -> None:
        super().__init__(f"Cannot move order row from '{current}' to '{target}'")
        self.current = current
        self.target = target


class CheckoutError(RuntimeError):
    """Payment could not be committed on the order record."""


class MergeError(RuntimeError):
    """A merge stopped part-way; `step` names where, `created_rows` what was already written."""

    def __init__(self, message: str, step: str, created_rows: Optional[List[OrderRow]] = None) -> None:
        super().__init__(message)
        self.step = step
        self.created_rows = created_rows or []
