"""Rate limit counter storage."""

from dataclasses import dataclass
from typing import Iterator, Protocol


@dataclass
class RateLimitEntry:
    """Counter for one (endpoint, user) key.
    
    Attributes:
        count: Requests admitted in the current window.
        window_start: Unix timestamp the current window is anchored at.
        window_seconds: Length of that window, so cleanup never drops an open one.
    """
    
    count: int
    window_start: float
    window_seconds: float = 0.0


class RateLimitStore(Protocol):
    """Keyed storage for rate limit entries.
    
    The limiter holds its own lock around read-modify-write, so a store only
    needs plain get/set semantics. A shared store (e.g. a key-value server
    with TTLs) must provide its own atomic increment instead.
    """
    
    def get(self, key: str) -> RateLimitEntry | None: ...
    
    def set(self, key: str, entry: RateLimitEntry) -> None: ...
    
    def delete(self, key: str) -> None: ...
    
    def items(self) -> Iterator[tuple[str, RateLimitEntry]]: ...


class InMemoryRateLimitStore:
    """Process-local store. Reset whenever the process restarts."""
    
    def __init__(self) -> None:
        self._entries: dict[str, RateLimitEntry] = {}
    
    def get(self, key: str) -> RateLimitEntry | None:
        return self._entries.get(key)
    
    def set(self, key: str, entry: RateLimitEntry) -> None:
        self._entries[key] = entry
    
    def delete(self, key: str) -> None:
        self._entries.pop(key, None)
    
    def items(self) -> Iterator[tuple[str, RateLimitEntry]]:
        # Snapshot so callers may delete while iterating
        return iter(list(self._entries.items()))
    
    def __len__(self) -> int:
        return len(self._entries)
