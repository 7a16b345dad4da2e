"""Custom exceptions used across the design QA inspector."""

__all__ = [
    "DesignQAError",
    "LoadError",
    "AnalysisSkipped",
    "InvalidRasterError",
    "VisionAnalysisError",
]


class DesignQAError(Exception):
    """Base class for every error raised by :mod:`designqa`."""

    pass


class LoadError(DesignQAError):
    """Raised when a reference or candidate image cannot be decoded."""

    def __init__(self, source: str, reason: str = "") -> None:
        self.source = source
        self.reason = reason
        message = f"Could not load image {source}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class AnalysisSkipped(DesignQAError):
    """Raised when analysis is requested before its inputs are available."""

    pass


class InvalidRasterError(DesignQAError):
    """Raised when a pixel buffer has an unusable shape or size."""

    pass


class VisionAnalysisError(DesignQAError):
    """Raised when the vision model does not return a usable answer."""

    pass
