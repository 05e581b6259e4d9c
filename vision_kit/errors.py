"""
Error kinds raised by the pre/post-processing core.

Each concrete error also derives from the builtin that callers would naturally
catch (ValueError, KeyError, RuntimeError), so existing `except ValueError`
handlers keep working.
"""

from __future__ import annotations


class VisionKitError(Exception):
    """Base class for all vision_kit errors."""


class InvalidInputError(VisionKitError, ValueError):
    """Empty image set, unsupported pixel format, or otherwise unusable input."""


class ShapeMismatchError(VisionKitError, ValueError):
    """Tensor rank/dimensions inconsistent with the expected layout."""


class MissingOutputError(VisionKitError, KeyError):
    """A named tensor is absent from the inference response."""

    def __init__(self, name: str, available=()) -> None:
        self.name = name
        self.available = tuple(available)
        super().__init__(name)

    def __str__(self) -> str:
        return f"Expected output tensor {self.name!r} not found. Available: {list(self.available)}"


class InferenceFailureError(VisionKitError, RuntimeError):
    """The inference engine raised; the original exception is chained."""
