"""Local cache of server-confirmed shoot records."""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol

from shoot_workflow.domain.shoots import ShootRecord


class ShootStore(Protocol):
    """Cache interface for shoot records."""

    def get(self, shoot_id: str) -> ShootRecord | None:
        """Return a cached shoot if present and not stale."""

    def put(self, shoot: ShootRecord) -> None:
        """Store a server-confirmed shoot."""

    def values(self) -> list[ShootRecord]:
        """Return all fresh cached shoots."""


@dataclass
class _StoreEntry:
    shoot: ShootRecord
    expires_at: datetime


@dataclass
class InMemoryShootStore(ShootStore):
    """In-memory shoot cache; stale entries force a re-fetch."""

    ttl_seconds: int
    _entries: dict[str, _StoreEntry]

    def __init__(self, ttl_seconds: int = 60) -> None:
        self.ttl_seconds = ttl_seconds
        self._entries = {}

    def get(self, shoot_id: str) -> ShootRecord | None:
        """Return a cached shoot if it hasn't expired."""
        entry = self._entries.get(shoot_id)
        if entry is None:
            return None
        if datetime.now(tz=UTC) >= entry.expires_at:
            self._entries.pop(shoot_id, None)
            return None
        return entry.shoot

    def put(self, shoot: ShootRecord) -> None:
        """Store a shoot with the configured TTL."""
        expires_at = datetime.now(tz=UTC) + timedelta(seconds=self.ttl_seconds)
        self._entries[shoot.id] = _StoreEntry(shoot=shoot, expires_at=expires_at)

    def values(self) -> list[ShootRecord]:
        """Return all shoots that are still fresh."""
        shoots = []
        for shoot_id in list(self._entries):
            shoot = self.get(shoot_id)
            if shoot is not None:
                shoots.append(shoot)
        return shoots
