from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import requests

from ..errors import NotAuthenticatedError, NotFoundError, StoreError, StoreUnavailableError
from ..interface import OrderStore
from ..models import Category, Order, OrderFilters, OrderRow, Product
from ...config import get_config
from ...logging import get_logger
from ...session.auth import StoreAuthentication


PAGE_SIZE = 100


def _iso(ts: datetime) -> str:
    """UTC ISO-8601 with a trailing Z, the form the store filters on."""
    if ts.tzinfo is None:
        ts = ts.astimezone()
    return ts.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _product_from_wire(item: Dict[str, Any]) -> Product:
    image = item.get("image") or {}
    thumbnail = ((image.get("formats") or {}).get("thumbnail") or {}).get("url")
    return Product.model_validate({**item, "imageUrl": item.get("imageUrl") or thumbnail})


def _row_from_wire(item: Dict[str, Any]) -> OrderRow:
    data = dict(item)
    data.setdefault("documentId", str(item.get("id")))
    product = data.get("product")
    if isinstance(product, dict) and product:
        data["product"] = _product_from_wire(product)
    else:
        data.pop("product", None)
    for money_field in ("subtotal", "taxesSubtotal"):
        if data.get(money_field) in (None, ""):
            data[money_field] = 0
    return OrderRow.model_validate(data)


def _order_from_wire(item: Dict[str, Any]) -> Order:
    data = dict(item)
    data.setdefault("documentId", str(item.get("id")))
    rows = data.pop("order_rows", None)
    if isinstance(rows, dict):
        rows = rows.get("data")
    order = Order.model_validate(data)
    if rows:
        order.order_rows = [_row_from_wire(row) for row in rows]
    return order


class HttpOrderStore(OrderStore):
    """
    REST-backed implementation talking to a Strapi-style JSON API.
    - Bodies are wrapped as {"data": {...}} and responses unwrapped the same way.
    - 401/403 clears the session token and raises NotAuthenticatedError.
    - Every call hits the network; nothing is cached here.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        auth: Optional[StoreAuthentication] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        config = get_config()
        self.base_url = (base_url or config.store_url).rstrip("/")
        self.auth = auth or StoreAuthentication()
        self.timeout = timeout if timeout is not None else config.store_timeout_seconds
        self.session = session or self.auth.get_session()
        self.logger = get_logger(__name__)

    # ---------- transport ----------

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        url = f"{self.base_url}/api/{path}"
        try:
            response = self.session.request(
                method=method,
                url=url,
                headers=self.auth.get_headers(),
                params=params,
                json={"data": data} if data is not None else None,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            self.logger.error(f"Store request failed: {method} {url} - {e}")
            raise StoreUnavailableError(f"Store unreachable: {e}") from e

        if response.status_code in (401, 403):
            self.auth.clear_session()
            self.session.headers.pop("Authorization", None)
            raise NotAuthenticatedError("Session expired or unauthorized", response.status_code)
        if response.status_code == 404:
            raise NotFoundError(f"Not found: {path}", 404)
        if not response.ok:
            message = response.reason or "request failed"
            try:
                message = response.json().get("error", {}).get("message") or message
            except ValueError:
                pass
            self.logger.error(f"Store error {response.status_code}: {method} {url} - {message}")
            raise StoreError(message, response.status_code)

        if response.status_code == 204 or not response.content:
            return {}
        return response.json()

    def _get_one(self, path: str, params: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
        try:
            body = self._request("GET", path, params=params)
        except NotFoundError:
            self.logger.warning(f"Record not found: {path}")
            return None
        return body.get("data") or None

    def _list(self, path: str, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        items: List[Dict[str, Any]] = []
        page = 1
        while True:
            body = self._request(
                "GET", path,
                params={**params, "pagination[page]": page, "pagination[pageSize]": PAGE_SIZE},
            )
            data = body.get("data") or []
            items.extend(data)
            page_count = ((body.get("meta") or {}).get("pagination") or {}).get("pageCount", 1)
            if page >= page_count or not data:
                return items
            page += 1

    # ---------- orders ----------

    def get_order(self, document_id: str) -> Optional[Order]:
        item = self._get_one(f"orders/{document_id}")
        return _order_from_wire(item) if item else None

    def list_orders(self, filters: Optional[OrderFilters] = None) -> List[Order]:
        filters = filters or OrderFilters()
        params: Dict[str, Any] = {"sort": "createdAt:desc"}
        statuses = filters.statuses()
        if len(statuses) == 1:
            params["filters[orderStatus][$eq]"] = statuses[0].value
        for i, status in enumerate(statuses if len(statuses) > 1 else []):
            params[f"filters[orderStatus][$in][{i}]"] = status.value
        if filters.created_from:
            params["filters[createdAt][$gte]"] = _iso(filters.created_from)
        if filters.created_to:
            params["filters[createdAt][$lt]"] = _iso(filters.created_to)
        if filters.paid_from:
            params["filters[paymentDaytime][$gte]"] = _iso(filters.paid_from)
        if filters.paid_to:
            params["filters[paymentDaytime][$lt]"] = _iso(filters.paid_to)
        if filters.exclude_document_id:
            params["filters[documentId][$ne]"] = filters.exclude_document_id
        return [_order_from_wire(item) for item in self._list("orders", params)]

    def create_order(self, fields: Dict[str, Any]) -> Order:
        body = self._request("POST", "orders", data=fields)
        self.logger.info(f"Created order {body.get('data', {}).get('documentId')}")
        return _order_from_wire(body["data"])

    def update_order(self, document_id: str, fields: Dict[str, Any]) -> Order:
        body = self._request("PUT", f"orders/{document_id}", data=fields)
        self.logger.info(f"Updated order {document_id}: {sorted(fields)}")
        return _order_from_wire(body["data"])

    # ---------- order rows ----------

    def list_order_rows(self, order_doc_id: str) -> List[OrderRow]:
        params = {"filters[order_doc_id][$eq]": order_doc_id, "populate": "*"}
        return [_row_from_wire(item) for item in self._list("order-rows", params)]

    def create_order_row(self, fields: Dict[str, Any]) -> OrderRow:
        body = self._request("POST", "order-rows", data=fields)
        self.logger.info(f"Created order row for order {fields.get('order_doc_id')}")
        return _row_from_wire(body["data"])

    def update_order_row(self, document_id: str, fields: Dict[str, Any]) -> OrderRow:
        body = self._request("PUT", f"order-rows/{document_id}", data=fields)
        self.logger.info(f"Updated order row {document_id}: {sorted(fields)}")
        return _row_from_wire(body["data"])

    # ---------- catalog ----------

    def get_product(self, document_id: str) -> Optional[Product]:
        item = self._get_one(f"products/{document_id}", params={"populate": "*"})
        return _product_from_wire(item) if item else None

    def get_category(self, document_id: str) -> Optional[Category]:
        item = self._get_one(f"categories/{document_id}")
        return Category.model_validate(item) if item else None

    def list_categories(self) -> List[Category]:
        items = self._list("categories", {"populate[products][populate]": "*"})
        categories = []
        for item in items:
            products = [_product_from_wire(p) for p in item.get("products") or []]
            category = Category.model_validate({**item, "products": []})
            category.products = products
            categories.append(category)
        return categories
