"""Background liveness probe for the relational store.

Runs for the lifetime of the API process, independent of request traffic.
A failed ping is logged and nothing else; in-flight requests never see it.
"""
import asyncio
import logging

from horplus.core.database import Store

logger = logging.getLogger(__name__)


async def probe_store(store: Store) -> bool:
    """Ping the store once. Returns False (and logs) on failure."""
    try:
        await store.ping()
    except Exception:
        logger.exception("Store ping failed")
        return False
    logger.debug("Store ping ok (connection alive)")
    return True


async def _probe_forever(store: Store, interval_seconds: float) -> None:
    while True:
        await asyncio.sleep(interval_seconds)
        await probe_store(store)


def start_liveness_probe(store: Store, interval_seconds: float) -> asyncio.Task:
    logger.info("Store liveness probe every %ss", interval_seconds)
    return asyncio.create_task(_probe_forever(store, interval_seconds), name="store-liveness-probe")
