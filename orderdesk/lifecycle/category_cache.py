from __future__ import annotations

import threading
from typing import Dict, Optional

from orderdesk.data.errors import NotFoundError
from orderdesk.data.interface import OrderStore
from orderdesk.logging import get_logger


class CategoryNameCache:
    """
    Category-name lookup keyed by category documentId.

    Owned by whoever needs it (a checkout session, a pricing pass) and passed in
    as a collaborator. Entries are never evicted automatically: catalog data is
    read-only for the lifetime of a session.
    """

    def __init__(self, store: OrderStore) -> None:
        self.store = store
        self._names: Dict[str, str] = {}
        self._lock = threading.Lock()
        self.logger = get_logger(__name__)

    def get(self, category_doc_id: Optional[str]) -> Optional[str]:
        """Return the category name, fetching it on a miss. None when unknown."""
        if not category_doc_id:
            return None
        with self._lock:
            if category_doc_id in self._names:
                return self._names[category_doc_id]
        try:
            category = self.store.get_category(category_doc_id)
        except NotFoundError:
            category = None
        if category is None:
            self.logger.warning(f"No category found for {category_doc_id}")
            return None
        self.populate(category_doc_id, category.name)
        return category.name

    def populate(self, category_doc_id: str, name: str) -> None:
        with self._lock:
            self._names[category_doc_id] = name

    def evict(self, category_doc_id: Optional[str] = None) -> None:
        """Drop one entry, or everything when no key is given."""
        with self._lock:
            if category_doc_id is None:
                self._names.clear()
            else:
                self._names.pop(category_doc_id, None)

    def __contains__(self, category_doc_id: str) -> bool:
        with self._lock:
            return category_doc_id in self._names
