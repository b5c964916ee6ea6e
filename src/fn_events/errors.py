"""Errors raised while translating event-source specs."""

from __future__ import annotations

from typing import Any


class TranslationError(Exception):
    """Base class for all translation failures."""


class ScaleValidationError(TranslationError):
    """Raised when a scale option cannot be turned into autoscaler triggers."""


class DurableNameRequiredError(ScaleValidationError):
    """Raised when a NATS Streaming scale option has no durable subscription name."""

    def __init__(self) -> None:
        super().__init__("durable subscription name required to use the scale feature")


class NoTriggerError(ScaleValidationError):
    """Raised when a scale option is present but no trigger was produced."""

    def __init__(self) -> None:
        super().__init__("no trigger produced")


class MetadataEncodingError(TranslationError):
    """Raised when a metadata value has no canonical textual form."""

    def __init__(self, name: str, value: Any) -> None:
        self.name = name
        self.value = value
        super().__init__(
            f"Cannot encode metadata '{name}': unsupported value "
            f"{value!r} ({type(value).__name__})"
        )
