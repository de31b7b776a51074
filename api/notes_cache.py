"""
Per-member cache of note lists, owned by the HTTP layer.

Keys embed a per-organization generation counter. Any mutation in an
organization bumps the counter, which orphans every member's cached list in
that organization at once (a shared note change is visible to all of them).
Orphaned keys expire on their own TTL.

Valkey outages degrade to store reads: a failed lookup is a miss and a failed
write or invalidation is logged. A failed invalidation can leave a stale list
for at most one TTL.
"""

import logging

import redis

from auth.types import IdentityContext
from clients.valkey_client import ValkeyClient
from core.models import Note

logger = logging.getLogger(__name__)


class NotesListCache:
    """Cache capability: key_for, get, set, invalidate."""

    KEY_PREFIX = "notes:"

    def __init__(self, valkey: ValkeyClient, ttl_seconds: int):
        self._valkey = valkey
        self._ttl_seconds = ttl_seconds

    def _generation_key(self, organization_id: str) -> str:
        return f"{self.KEY_PREFIX}generation:{organization_id}"

    def key_for(self, identity: IdentityContext) -> str | None:
        """
        List key for this member at the organization's current generation.

        Resolve it once, before the store read, and use it for both get and
        set: a list read ahead of an invalidation must land under the old
        generation. None when Valkey is down.
        """
        try:
            generation = self._valkey.get(self._generation_key(identity.organization_id)) or "0"
        except redis.RedisError as e:
            logger.warning(f"Notes list cache unavailable, falling back to store: {e}")
            return None
        return f"{self.KEY_PREFIX}list:{identity.organization_id}:{generation}:{identity.member_id}"

    def get(self, key: str) -> list[Note] | None:
        """Cached list at key, or None on miss."""
        try:
            cached = self._valkey.get_json(key)
            if cached is None:
                return None
            return [Note.model_validate(item) for item in cached]
        except (redis.RedisError, ValueError, TypeError) as e:
            logger.warning(f"Notes list cache read failed, falling back to store: {e}")
            return None

    def set(self, key: str, notes: list[Note]) -> None:
        try:
            self._valkey.set_json(
                key,
                [note.model_dump(mode="json") for note in notes],
                expire_seconds=self._ttl_seconds,
            )
        except redis.RedisError as e:
            logger.warning(f"Notes list cache write failed: {e}")

    def invalidate(self, organization_id: str) -> None:
        """Drop every cached list in the organization."""
        try:
            generation = self._valkey.incr(self._generation_key(organization_id))
        except redis.RedisError as e:
            logger.warning(f"Notes list cache invalidation failed for organization {organization_id}: {e}")
            return
        logger.debug(f"Notes list cache for organization {organization_id} at generation {generation}")
