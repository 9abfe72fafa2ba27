"""Cursor-based listing driven one page at a time."""
import logging
import threading
from typing import Any, Dict, Iterator, Optional

from botocore.exceptions import BotoCoreError, ClientError


class PageEnumerator:
    """Iterates the identifiers returned by a paginated list operation.

    Every identifier on a page is yielded before the next page is
    requested. A page-fetch error ends iteration and is kept on ``error``;
    identifiers yielded before it stay with the caller.
    """

    def __init__(self, client, operation: str, result_key: str, id_key: str, page_size: int,
                 params: Optional[Dict[str, Any]] = None, cancel_event: Optional[threading.Event] = None,
                 region: Optional[str] = None):
        self.client = client
        self.operation = operation
        self.result_key = result_key
        self.id_key = id_key
        self.page_size = page_size
        self.params = params or {}
        self.cancel_event = cancel_event
        self.region = region
        self.error: Optional[Exception] = None
        self.pages = 0
        self.count = 0

    def __iter__(self) -> Iterator[str]:
        self.error = None
        paginator = self.client.get_paginator(self.operation)
        pages = iter(paginator.paginate(PaginationConfig={'PageSize': self.page_size}, **self.params))
        while not self._cancelled():
            try:
                page = next(pages)
            except StopIteration:
                return
            except (ClientError, BotoCoreError) as e:
                logging.debug(f"[{self.region}] {self.operation} failed after {self.pages} page(s): {e}")
                self.error = e
                return
            self.pages += 1
            for item in page.get(self.result_key, []):
                identifier = item.get(self.id_key)
                if identifier:
                    self.count += 1
                    yield identifier

    def _cancelled(self) -> bool:
        return self.cancel_event is not None and self.cancel_event.is_set()
