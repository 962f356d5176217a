from __future__ import annotations

from typing import Literal, Optional

from .backends.http_backend import HttpOrderStore
from .backends.memory_backend import InMemoryOrderStore
from .interface import OrderStore
from ..config import get_config


def get_order_store(kind: Optional[Literal["http", "memory"]] = None) -> OrderStore:
    kind = kind or get_config().default_store_kind
    if kind == "http":
        # Talks to the configured store_url with the configured token
        return HttpOrderStore()
    if kind == "memory":
        return InMemoryOrderStore()
    raise ValueError(f"Unknown order store kind: {kind}")
