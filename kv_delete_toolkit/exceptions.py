"""Exceptions for secret delete operations."""

from typing import Optional


class DeleteToolkitError(Exception):
    """Base exception for the delete toolkit."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        super().__init__(message)


class CompositeIdError(DeleteToolkitError):
    """Raised when a composite secret identifier cannot be parsed."""

    def __init__(self, raw_id: object, reason: str):
        self.raw_id = raw_id
        super().__init__(f"Invalid composite secret id {raw_id!r}: {reason}")


class CapabilityFetchError(DeleteToolkitError):
    """Raised by a store when a capability query fails."""

    def __init__(self, path: str, reason: str):
        super().__init__(
            f"Capability query for {path} failed: {reason}",
            path=path,
        )


class DeleteTransportError(DeleteToolkitError):
    """Raised by a store when destroying a whole secret fails."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Failed to destroy {path}: {reason}", path=path)


class UnsupportedVariantError(DeleteToolkitError):
    """Raised when an unknown delete variant is requested."""

    def __init__(self, variant: str):
        self.variant = variant
        super().__init__(f"Unsupported delete variant: {variant!r}")
