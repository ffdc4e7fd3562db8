from __future__ import annotations

from typing import Any, Sequence


class FillerError(Exception):
    """Base class for every error raised by the automation engine."""


class ConfigurationError(FillerError):
    """Invalid graph references, missing credentials or settings.

    Raised before any browser interaction happens.
    """


class UnknownNodeError(ConfigurationError):
    def __init__(self, ref: Any) -> None:
        super().__init__(f"Node not found in the graph: {ref!r}")
        self.ref = ref


class LinearizationError(FillerError):
    """Required data is missing; carries every invalid field at once."""

    def __init__(self, invalid_fields: Sequence[tuple[Any, Any]]) -> None:
        self.invalid_fields = list(invalid_fields)
        names = ", ".join(f"{name} ({key})" for name, key in self.invalid_fields)
        super().__init__(f"Missing or invalid data for: {names}")


class ActionFailedError(FillerError):
    """A single browser action failed. Bundles the action and a screenshot."""

    def __init__(
        self,
        *,
        kind: str,
        selector: str | None,
        option: str | None,
        value: Any,
        cause: BaseException,
        screenshot_path: str | None = None,
    ) -> None:
        self.kind = kind
        self.selector = selector
        self.option = option
        self.value = value
        self.cause = cause
        self.screenshot_path = screenshot_path
        super().__init__(
            f"Error with action ({kind}), locator ({selector}), option ({option}), "
            f"data ({value}), error: {cause}, screenshot: ({screenshot_path})"
        )


class OptionNotFoundError(FillerError):
    def __init__(self, wanted: str, available: Sequence[str]) -> None:
        self.wanted = wanted
        self.available = list(available)
        super().__init__(f"Option ({wanted}) not found in {self.available}")


class CampaignError(FillerError):
    """Failure inside an invitation campaign.

    ``permanent`` failures are never retried.
    """

    def __init__(self, message: str, *, permanent: bool = False) -> None:
        super().__init__(message)
        self.permanent = permanent


class PermanentCampaignError(CampaignError):
    def __init__(self, message: str) -> None:
        super().__init__(message, permanent=True)


class JobNotFoundError(PermanentCampaignError):
    """The portal silently redirected away from the requested job."""

    def __init__(self, job_id: str) -> None:
        super().__init__(
            f"Job post {job_id} not found or Job post is pending. Please check it in Job Posts."
        )
        self.job_id = job_id


__all__ = [
    "FillerError",
    "ConfigurationError",
    "UnknownNodeError",
    "LinearizationError",
    "ActionFailedError",
    "OptionNotFoundError",
    "CampaignError",
    "PermanentCampaignError",
    "JobNotFoundError",
]
