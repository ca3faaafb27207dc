from __future__ import annotations


class AdSlotError(RuntimeError):
    """Base class for failures surfaced by an ad slot."""

    def __init__(self, ad_unit_id: str, message: str) -> None:
        super().__init__(message)
        self.ad_unit_id = ad_unit_id


class LoadFailed(AdSlotError):
    """The network could not supply an ad for this load attempt."""

    def __init__(self, ad_unit_id: str, cause: BaseException) -> None:
        super().__init__(ad_unit_id, f"Failed to load ad for unit '{ad_unit_id}': {cause}")
        self.cause = cause


class AdNotLoaded(AdSlotError):
    def __init__(self, ad_unit_id: str) -> None:
        super().__init__(ad_unit_id, f"No ad loaded for unit '{ad_unit_id}'")


class PresentationValidationFailed(AdSlotError):
    """A loaded ad refused the presentation context at show time."""

    def __init__(self, ad_unit_id: str, cause: BaseException) -> None:
        super().__init__(ad_unit_id, f"Ad for unit '{ad_unit_id}' cannot be presented: {cause}")
        self.cause = cause


class PresentationFailed(AdSlotError):
    """Presentation started but the SDK reported a failure.

    Only ever delivered through the `on_error` callback, never raised.
    """

    def __init__(self, ad_unit_id: str, cause: BaseException) -> None:
        super().__init__(ad_unit_id, f"Ad for unit '{ad_unit_id}' failed to present: {cause}")
        self.cause = cause
