"""
Link Service - Business logic for short links.
Stores {fulllink, expiry} records through whichever binding is configured.
"""
from datetime import datetime, timezone
from typing import Optional

from .binding import BindingInterface, CoercionError
from .binding.coercion import coerce
from ..api.dto import LinkRecordDTO
from ..api.exceptions import (
    InvalidLinkError,
    LinkConflictError,
    LinkExpiredError,
    LinkNotFoundError,
)
from ..core.config import GENERATED_ID_LENGTH, MAX_LINK_ID_LENGTH
from ..core.logging_config import get_logger
from ..utils import generate_link_id, validate_link_id, validate_url

logger = get_logger(__name__)


def parse_expiry(expiry: Optional[str]) -> Optional[datetime]:
    """Parse a stored expiry. Missing or unparsable values never expire."""
    if not expiry:
        return None
    try:
        normalized = coerce(expiry, "DATETIME")
    except CoercionError:
        return None
    return datetime.fromisoformat(normalized.replace("Z", "+00:00"))


class LinkService:
    """
    Service for short link business logic.
    Handles validation, id allocation and expiry on top of a binding.
    """

    def __init__(self, binding: BindingInterface):
        """
        Initialize link service.

        Args:
            binding: Open persistence binding (dependency injection)
        """
        self._binding = binding

    async def shorten(
        self,
        url: str,
        link_id: Optional[str] = None,
        expiry: Optional[str] = None
    ) -> str:
        """
        Store a new short link.

        Returns:
            The short id the link is stored under
        """
        try:
            validate_url(url)
            if link_id:
                validate_link_id(link_id, MAX_LINK_ID_LENGTH)
        except ValueError as e:
            raise InvalidLinkError(str(e)) from e

        if not link_id:
            link_id = await self._allocate_id()
        elif await self._binding.has(link_id):
            raise LinkConflictError(f"{link_id} was already taken.")

        record = LinkRecordDTO(fulllink=url.strip(), expiry=expiry or None)
        await self._binding.set(link_id, record.model_dump())
        logger.info(f"Shortened {url} as {link_id}")
        return link_id

    async def resolve(self, link_id: str, now: Optional[datetime] = None) -> str:
        """
        Return the full URL for link_id.

        Expired links are deleted before LinkExpiredError is raised.
        """
        record = await self._binding.get(link_id)
        full_link = record.get("fulllink") if isinstance(record, dict) else None
        if not full_link:
            raise LinkNotFoundError(f"No link stored for {link_id}")

        expires_at = parse_expiry(record.get("expiry"))
        now = now or datetime.now(timezone.utc)
        if expires_at is not None and now > expires_at:
            await self._binding.delete(link_id)
            logger.info(f"Link {link_id} expired at {expires_at.isoformat()}, removed")
            raise LinkExpiredError(f"Link {link_id} has expired")

        return full_link

    async def _allocate_id(self) -> str:
        while True:
            candidate = generate_link_id(GENERATED_ID_LENGTH)
            if not await self._binding.has(candidate):
                return candidate
