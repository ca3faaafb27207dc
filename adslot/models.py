from __future__ import annotations

from enum import StrEnum


class AdEnvironment(StrEnum):
    development = "development"
    production = "production"


class AdKind(StrEnum):
    interstitial = "interstitial"
    rewarded = "rewarded"
    rewarded_interstitial = "rewarded_interstitial"

    @property
    def is_rewarded(self) -> bool:
        return self in (AdKind.rewarded, AdKind.rewarded_interstitial)


class AdSlotPhase(StrEnum):
    empty = "empty"
    loading = "loading"
    ready = "ready"
    presenting = "presenting"
