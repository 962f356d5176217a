"""
Order board and order-count analytics.

The board is rebuilt wholesale from each polled order list. Orders are
flattened into a pandas frame once; the lists and counts below are
filter/groupby passes over that frame, with business-day membership
evaluated in local time.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Sequence

import pandas as pd

from orderdesk.config import get_config
from orderdesk.data.models import Order, OrderStatus
from orderdesk.lifecycle.business_day import business_day_bounds

WEEKDAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]

_COLUMNS = [
    "position", "document_id", "table_name", "customer_name", "order_status",
    "created_at", "payment_daytime", "paid_amount", "rows",
]


def _local_tz():
    return datetime.now().astimezone().tzinfo


def orders_frame(orders: Sequence[Order]) -> pd.DataFrame:
    """One row per order; timestamps as tz-aware UTC, missing ones as NaT."""
    records = [
        {
            "position": i,
            "document_id": order.key,
            "table_name": order.table_name,
            "customer_name": order.customer_name,
            "order_status": order.order_status.value,
            "created_at": order.created_at,
            "payment_daytime": order.payment_daytime,
            "paid_amount": float(order.paid_amount) if order.paid_amount is not None else 0.0,
            "rows": len(order.active_rows),
        }
        for i, order in enumerate(orders)
    ]
    df = pd.DataFrame.from_records(records, columns=_COLUMNS)
    for col in ("created_at", "payment_daytime"):
        df[col] = pd.to_datetime(df[col], utc=True)
    return df


class OrderBoard:
    """Pending, served and paid-today views over one snapshot of orders."""

    def __init__(self, orders: Sequence[Order], now: Optional[datetime] = None, start_hour: Optional[int] = None) -> None:
        self.orders = list(orders)
        self.now = now
        self.start_hour = start_hour if start_hour is not None else get_config().business_day_start_hour
        self.frame = orders_frame(self.orders)

    def _pick(self, df: pd.DataFrame) -> List[Order]:
        return [self.orders[i] for i in df["position"]]

    def _with_status(self, status: OrderStatus, sort_by: str = "created_at") -> pd.DataFrame:
        df = self.frame
        return df.loc[df["order_status"] == status.value].sort_values(sort_by, ascending=False)

    def pending(self) -> List[Order]:
        return self._pick(self._with_status(OrderStatus.PENDING))

    def served(self) -> List[Order]:
        return self._pick(self._with_status(OrderStatus.SERVED))

    def paid_today(self) -> List[Order]:
        """Paid orders whose payment time falls in the current business day, latest first."""
        start, end = business_day_bounds(self.now, self.start_hour)
        df = self._with_status(OrderStatus.PAID, sort_by="payment_daytime")
        paid_at = df["payment_daytime"]
        mask = (paid_at >= pd.Timestamp(start)) & (paid_at < pd.Timestamp(end))
        return self._pick(df.loc[mask])

    def paid_total(self) -> Decimal:
        """Sum of paid amounts for today's paid orders."""
        return sum((order.paid_amount or Decimal("0") for order in self.paid_today()), Decimal("0"))

    # ---- Analytics ----

    def _created_local(self) -> pd.Series:
        return self.frame["created_at"].dropna().dt.tz_convert(_local_tz())

    def hourly_counts(self) -> pd.DataFrame:
        """Orders created per local hour of day, all 24 hours present."""
        created = self._created_local()
        return (
            created.dt.hour.value_counts()
                   .reindex(range(24), fill_value=0)
                   .rename_axis("hour")
                   .reset_index(name="orders")
        )

    def daily_counts(self) -> pd.DataFrame:
        """Orders per weekday of their business day (after-midnight orders count for the previous day)."""
        shifted = self._created_local() - pd.Timedelta(hours=self.start_hour)
        return (
            shifted.dt.day_name().value_counts()
                   .reindex(WEEKDAYS, fill_value=0)
                   .rename_axis("weekday")
                   .reset_index(name="orders")
        )
