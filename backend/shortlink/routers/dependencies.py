"""
Shared dependencies for routers.
Provides binding and service initialization.
"""
from pathlib import Path
from typing import Optional, Union

from ..services.binding import BindingFactory, BindingInterface
from ..services.link_service import LinkService
from ..core.config import (
    DATA_FILE,
    RECONCILE_DELAY,
    STORE_TABLE,
    STORE_TYPE,
    WATCH_POLL_INTERVAL,
)
from ..core.logging_config import get_logger

logger = get_logger(__name__)

# Global services (initialized on startup, shared across request handlers)
binding: Optional[BindingInterface] = None
link_service: Optional[LinkService] = None


async def initialize_binding(
    data_file: Optional[Union[str, Path]] = None,
    store_type: Optional[str] = None,
    table_name: Optional[str] = None
) -> BindingInterface:
    """Open the configured binding. Arguments override the environment."""
    global binding, link_service

    path = Path(data_file) if data_file else DATA_FILE
    store_type = (store_type or STORE_TYPE or BindingFactory.detect_store_type(path)).lower()

    logger.info(f"Initializing binding: {store_type}")
    logger.debug(f"  → Backing store: {path}")

    if store_type == "json":
        binding = await BindingFactory.create_and_initialize(
            "json",
            path=path,
            reconcile_delay=RECONCILE_DELAY,
            poll_interval=WATCH_POLL_INTERVAL
        )
    else:
        binding = await BindingFactory.create_and_initialize(
            store_type,
            path=path,
            table_name=table_name or STORE_TABLE
        )

    link_service = LinkService(binding)
    logger.info(f"  ✅ {type(binding).__name__} initialized")
    return binding


async def close_binding() -> None:
    """Flush and close the binding."""
    global binding, link_service
    if binding is None:
        return
    try:
        await binding.close()
    finally:
        binding = None
        link_service = None


def get_link_service() -> LinkService:
    """Get link service (dependency injection)."""
    if link_service is None:
        raise RuntimeError("Link service not initialized")
    return link_service
