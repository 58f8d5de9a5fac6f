"""Exceptions raised while building the docset."""


class DocsetError(Exception):
    """Base class for every error that should abort a build."""


class UnsupportedTableError(DocsetError):
    """A table row looks like a known layout but is missing columns."""

    def __init__(self, path: str, row: dict) -> None:
        super().__init__(f"Unsupported table: {path}: {row!r}")
        self.path = path
        self.row = row


class InvalidReferenceError(DocsetError):
    """A link or asset reference could not be parsed as a URL."""

    def __init__(self, reference: str, reason: str) -> None:
        super().__init__(f"bad URI(is not URI?): {reference!r} ({reason})")
        self.reference = reference


class SanityCheckError(DocsetError):
    """An entry known to exist on the site is missing from the index."""

    def __init__(self, entry_type: str, name: str) -> None:
        super().__init__(f"{{type: {entry_type!r}, name: {name!r}}} not found in index!")
        self.entry_type = entry_type
        self.name = name


class VersionNotFoundError(DocsetError):
    """A version (site version, build id or previous build) could not be determined."""
