from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import UUID, uuid4


@dataclass(frozen=True, slots=True)
class AdRequest:
    """Request descriptor for a single load attempt.

    The slot never inspects these fields; they are handed to the network client as-is.
    A new instance must be built for every attempt.
    """

    request_id: UUID
    created_at: datetime
    keywords: tuple[str, ...] = ()
    extras: Mapping[str, str] = field(default_factory=dict)

    @staticmethod
    def new(*, keywords: tuple[str, ...] = (), extras: Mapping[str, str] | None = None) -> "AdRequest":
        return AdRequest(
            request_id=uuid4(),
            created_at=datetime.now(timezone.utc),
            keywords=tuple(keywords),
            extras=dict(extras or {}),
        )


RequestFactory = Callable[[], AdRequest]


def request_factory(*, keywords: tuple[str, ...] = (), extras: Mapping[str, str] | None = None) -> RequestFactory:
    """Build a factory that stamps a fresh request id on every call."""

    frozen_extras = dict(extras or {})

    def _make() -> AdRequest:
        return AdRequest.new(keywords=keywords, extras=frozen_extras)

    return _make
