"""Exceptions for catalog loading and lookups."""


class CatalogError(Exception):
    """Base exception for the catalog layer."""


class CatalogLoadError(CatalogError):
    """Raised when the catalog file is missing or is not valid JSON."""


class CatalogValidationError(CatalogError):
    """Raised when catalog content fails structural validation."""


class UnknownCatalogId(CatalogError, KeyError):
    """Raised when an id is looked up that the catalog does not define."""

    def __init__(self, kind: str, entry_id: str) -> None:
        super().__init__(f"unknown {kind} id '{entry_id}'")
        self.kind = kind
        self.entry_id = entry_id

    def __str__(self) -> str:
        return f"unknown {self.kind} id '{self.entry_id}'"
