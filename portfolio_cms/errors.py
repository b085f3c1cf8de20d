"""Exceptions raised by the CMS."""


class CMSError(Exception):
    """Base class for errors the CLI reports to the operator."""
    pass


class ConfigError(CMSError):
    """Raised when the configuration file cannot be used."""
    pass


class DuplicateIdError(CMSError):
    """Raised when a mutation would leave two items with the same id."""
    pass


class StorageError(CMSError):
    """Raised when the storage backend cannot read or write a slot."""
    pass


class QuotaExceededError(StorageError):
    """Raised when a write would push the storage past its byte quota."""

    def __init__(self, needed: int, quota: int):
        super().__init__(
            f"Storage limit exceeded: {needed} bytes needed, quota is {quota} bytes. "
            "Delete some projects or images and try again."
        )
        self.needed = needed
        self.quota = quota


class BackupError(CMSError):
    """Raised when a backup file cannot be imported."""
    pass
