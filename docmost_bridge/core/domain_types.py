"""Domain Types — value types shared by the session, executor, cache and gateway layers.

Invariants:
    - RetryPolicy delay sequence is non-decreasing and capped at max_delay_ms
    - RemoteCall is immutable — the same description is safe to re-issue on retry
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - Frozen dataclasses for call descriptions: the executor re-sends the
      description, never re-invokes a side-effecting closure
    - str Enums: serialize to JSON without custom encoders (debug/health payloads)
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, NewType


# ─── Identity Types ──────────────────────────────────────────────

SpaceId = NewType("SpaceId", str)
PageId = NewType("PageId", str)
AttachmentId = NewType("AttachmentId", str)


# ─── Enums ───────────────────────────────────────────────────────

class SessionPhase(str, Enum):
    """Authentication state machine for the remote session."""
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"
    REAUTHENTICATING = "reauthenticating"


class CacheTier(str, Enum):
    """Independently configured cache partitions."""
    SPACES = "spaces"
    SEARCH = "search"
    ALL_PAGES = "all-pages"


# ─── Value Types ─────────────────────────────────────────────────

@dataclass(frozen=True)
class RetryPolicy:
    """Generic retry budget for network/server failures."""
    max_attempts: int = 3
    min_delay_ms: int = 1000
    max_delay_ms: int = 30_000
    factor: float = 2

    def delay_ms(self, attempt: int) -> float:
        """Sleep before the attempt following `attempt` (1-based)."""
        return min(self.max_delay_ms, self.min_delay_ms * self.factor ** (attempt - 1))


@dataclass(frozen=True)
class RemoteCall:
    """Description of one outbound call to the remote service."""
    method: str
    path: str
    body: Any = None
    raw: bool = False

    @classmethod
    def post(cls, path: str, body: dict | None = None) -> "RemoteCall":
        return cls("POST", path, body if body is not None else {})

    @classmethod
    def get(cls, path: str, raw: bool = False) -> "RemoteCall":
        return cls("GET", path, None, raw)


@dataclass(frozen=True)
class Attachment:
    """Raw file fetched from the remote file endpoint."""
    file_name: str
    content_type: str
    content: bytes
