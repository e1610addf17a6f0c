"""Shared error types for the core layer."""


class CoreError(Exception):
    """Base error for all core-layer failures."""


class IdentityError(CoreError):
    """A value could not be serialized into a resource identifier."""


class ConstructError(CoreError):
    """The construct tree was used incorrectly (e.g. duplicate ids)."""

    def __init__(self, detail: str, *, path: str = "") -> None:
        self.detail = detail
        self.path = path
        super().__init__(detail + (f" (at {path!r})" if path else ""))
