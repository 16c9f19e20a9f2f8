"""Simple span helper for recording call timings."""
from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional


@contextmanager
def span(name: str, events: Optional[List[Dict[str, Any]]] = None) -> Iterator[Dict[str, Any]]:
    record: Dict[str, Any] = {"span": name}
    start = time.perf_counter()
    try:
        yield record
    finally:
        record["ms"] = int((time.perf_counter() - start) * 1000)
        if events is not None:
            events.append(record)


__all__ = ["span"]
