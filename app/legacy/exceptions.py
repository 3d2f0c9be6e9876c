"""Exceptions for the legacy data import."""


class LegacyImportError(Exception):
    """Base class for errors that abort a legacy import job."""

    pass


class DecodeError(LegacyImportError):
    """Raised when a DBF file header or record cannot be decoded."""

    def __init__(self, path, reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Cannot decode legacy table {self.path}: {reason}")


class MissingLegacyFileError(LegacyImportError):
    """Raised when required legacy files are absent after extraction."""

    def __init__(self, missing: list[str]):
        self.missing = list(missing)
        names = ", ".join(self.missing)
        noun = "file" if len(self.missing) == 1 else "files"
        super().__init__(f"Required legacy {noun} {names} missing after extraction")


class LegacyArchiveError(LegacyImportError):
    """Raised when an uploaded zip archive is corrupt or unsafe to extract."""

    pass
