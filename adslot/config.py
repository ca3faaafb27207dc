from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from adslot.models import AdEnvironment, AdKind

# Public test ad units published by the ad network; safe to request in development.
TEST_AD_UNIT_IDS: dict[AdKind, str] = {
    AdKind.interstitial: "ca-app-pub-3940256099942544/4411468910",
    AdKind.rewarded: "ca-app-pub-3940256099942544/1712485313",
    AdKind.rewarded_interstitial: "ca-app-pub-3940256099942544/6978759866",
}

ENV_PREFIX = "ADSLOT_"


class ConfigurationError(RuntimeError):
    pass


class AdsConfiguration(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    interstitial_ad_unit_id: str | None = Field(default=None, min_length=1)
    rewarded_ad_unit_id: str | None = Field(default=None, min_length=1)
    rewarded_interstitial_ad_unit_id: str | None = Field(default=None, min_length=1)

    environment: AdEnvironment = AdEnvironment.production

    # Default for AdsManager.show_interstitial(after_interval=...).
    interstitial_interval: int | None = Field(default=None, ge=1)

    def ad_unit_ids(self) -> dict[AdKind, str]:
        """Configured ad unit ids keyed by kind; unconfigured kinds are omitted."""

        ids = {
            AdKind.interstitial: self.interstitial_ad_unit_id,
            AdKind.rewarded: self.rewarded_ad_unit_id,
            AdKind.rewarded_interstitial: self.rewarded_interstitial_ad_unit_id,
        }
        return {kind: unit_id for kind, unit_id in ids.items() if unit_id}

    @classmethod
    def debug(cls, *, interstitial_interval: int | None = None) -> "AdsConfiguration":
        return cls(
            interstitial_ad_unit_id=TEST_AD_UNIT_IDS[AdKind.interstitial],
            rewarded_ad_unit_id=TEST_AD_UNIT_IDS[AdKind.rewarded],
            rewarded_interstitial_ad_unit_id=TEST_AD_UNIT_IDS[AdKind.rewarded_interstitial],
            environment=AdEnvironment.development,
            interstitial_interval=interstitial_interval,
        )


def configuration_from_env(*, dotenv_path: Path | None = None) -> AdsConfiguration:
    """Build configuration from `ADSLOT_*` environment variables.

    If `dotenv_path` exists it is loaded first; variables already set in the
    environment win over the file.

    Variables:
        ADSLOT_INTERSTITIAL_AD_UNIT_ID
        ADSLOT_REWARDED_AD_UNIT_ID
        ADSLOT_REWARDED_INTERSTITIAL_AD_UNIT_ID
        ADSLOT_ENVIRONMENT (development|production)
        ADSLOT_INTERSTITIAL_INTERVAL
    """

    if dotenv_path is not None and dotenv_path.exists():
        from dotenv import load_dotenv

        load_dotenv(dotenv_path=dotenv_path, override=False)

    raw: dict[str, str] = {}
    for field_name in AdsConfiguration.model_fields:
        value = os.environ.get(f"{ENV_PREFIX}{field_name.upper()}")
        # Empty strings mean "unset" so a blank line in .env doesn't fail validation.
        if value is not None and value.strip():
            raw[field_name] = value.strip()

    try:
        return AdsConfiguration.model_validate(raw)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid ads configuration in environment: {e}") from e


def load_configuration(path: Path) -> AdsConfiguration:
    """Load configuration from a JSON file.

    Example file:
        {"interstitial_ad_unit_id": "ca-app-pub-.../123", "environment": "development"}
    """

    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ConfigurationError(f"Ads configuration not found: {path}") from e

    try:
        return AdsConfiguration.model_validate_json(text)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid ads configuration in {path}: {e}") from e
