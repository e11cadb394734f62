"""Caller-level errors raised at the import boundary."""


class PressIngestError(ValueError):
    """Base class for errors rejected before the import core runs."""


class UnsupportedSourceError(PressIngestError):
    """The declared or detected source kind is not supported."""

    def __init__(self, kind: str):
        self.kind = kind
        super().__init__(f"Unsupported source kind: {kind}")


class DocumentTooLargeError(PressIngestError):
    """The buffer exceeds the configured size ceiling."""

    def __init__(self, size_bytes: int, limit_mb: float):
        self.size_bytes = size_bytes
        self.limit_mb = limit_mb
        super().__init__(
            f"File too large: {size_bytes / 1024 / 1024:.1f}MB "
            f"(maximum is {limit_mb:g}MB)"
        )


class DocumentTooLongError(PressIngestError):
    """The document is estimated to exceed the configured page ceiling."""

    def __init__(self, pages: int, limit: int):
        self.pages = pages
        self.limit = limit
        super().__init__(
            f"Document too long: estimated {pages} pages (maximum is {limit}). "
            "Consider splitting it into smaller parts."
        )


class UnknownDeviceError(PressIngestError):
    """No pagination profile is registered under the requested name."""

    def __init__(self, name: str, available: list[str]):
        self.name = name
        super().__init__(
            f"Unknown device profile: {name}. Available: {', '.join(available)}"
        )
