"""
Pagination and batched lookups against the Spotify Web API.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Iterator, List, Optional, Sequence

from tqdm import tqdm

from .upstream import upstream_call
from .utils import chunks

logger = logging.getLogger(__name__)


class PagedFetcher:
    """Walks a cursor-paginated collection, following each page's `next` link.

    Usage:
        first = sp.playlist_items(playlist_id, limit=100)
        for track in PagedFetcher(sp).fetch_all(first):
            ...

    With `unwrap` set (default "track"), each entry's inner resource is
    yielded instead of the wrapper, and entries whose inner resource is null
    are skipped.
    """

    def __init__(self, sp, item_key: str = "items", unwrap: Optional[str] = "track"):
        self.sp = sp
        self.item_key = item_key
        self.unwrap = unwrap

    def fetch_all(self, first_page: dict) -> Iterator[dict]:
        page = first_page
        pages = 0
        while page is not None:
            pages += 1
            for item in page.get(self.item_key) or []:
                if item is None:
                    continue
                if self.unwrap is None:
                    yield item
                    continue
                inner = item.get(self.unwrap)
                if not inner:
                    continue
                yield inner
            if not page.get("next"):
                break
            page = upstream_call(self.sp.next, page)
        logger.debug("Paged through %d page(s)", pages)


class BatchResolver:
    """Resolves ids to records with chunked lookups.

    `lookup` receives at most `batch_size` ids and returns the list of
    records for them. Null records, and records without an id, are dropped
    from the result: absence means "no data available".
    """

    def __init__(self, lookup: Callable[[List[str]], Sequence[Optional[dict]]],
                 batch_size: int, progress: bool = False, desc: Optional[str] = None):
        if batch_size < 1:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        self.lookup = lookup
        self.batch_size = batch_size
        self.progress = progress
        self.desc = desc

    def resolve(self, ids: Sequence[str]) -> Dict[str, dict]:
        resolved: Dict[str, dict] = {}
        iterator = list(chunks(ids, self.batch_size))
        if self.progress and iterator:
            iterator = tqdm(iterator, desc=self.desc or "Resolving", unit="chunk")

        for chunk in iterator:
            records = upstream_call(self.lookup, chunk)
            for rec in records or []:
                if not rec or not rec.get("id"):
                    continue
                resolved[rec["id"]] = rec
        logger.debug("Resolved %d of %d id(s)", len(resolved), len(ids))
        return resolved
