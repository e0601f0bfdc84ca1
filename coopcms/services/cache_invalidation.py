"""
Deferred page cache invalidation.

Listings are dropped only once the transaction that changed them has
committed; a rolled back transaction leaves the cache as it was.
"""
import logging
from typing import Optional

from sqlalchemy import event
from sqlalchemy.orm import Session

from coopcms.utils.cache import PageCache

logger = logging.getLogger(__name__)

PENDING_KEY = "stale_page_listings"


def invalidate_on_commit(session: Session, cache: Optional[PageCache], page_id: Optional[int]) -> None:
    if cache is None or page_id is None:
        return
    session.info.setdefault(PENDING_KEY, []).append((cache, page_id))


@event.listens_for(Session, "after_commit")
def _drop_stale_listings(session: Session) -> None:
    for cache, page_id in session.info.pop(PENDING_KEY, []):
        if cache.invalidate_page(page_id):
            logger.debug(f"[Cache] Cleared cached components of page {page_id}")


@event.listens_for(Session, "after_rollback")
def _forget_stale_listings(session: Session) -> None:
    session.info.pop(PENDING_KEY, None)
