"""Custom exceptions for lockkeeper."""


class LockkeeperError(Exception):
    """Base exception for all lockkeeper errors."""


class TemporaryError(LockkeeperError):
    """Transient infrastructure failure; the whole run may be retried later."""


class ExecError(LockkeeperError):
    """Raised when an external command exits non-zero or times out."""

    def __init__(self, command: str, returncode: int | None, stderr: str):
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        detail = stderr.strip() or "no output"
        super().__init__(f"Command failed (rc={returncode}): {command}\n{detail}")


class LockFileReadError(LockkeeperError):
    """Raised when a lock file exists on disk but cannot be read."""

    def __init__(self, lock_file: str, message: str | None = None):
        self.lock_file = lock_file
        super().__init__(message or f"Error reading {lock_file}")


class PathOutsideRepositoryError(LockkeeperError):
    """Raised when a path would resolve outside the local repository."""


class ExtractorRegistrationError(LockkeeperError):
    """Raised when an extractor descriptor is inconsistent with its mode."""


class UnknownEcosystemError(LockkeeperError):
    """Raised when no artifact ecosystem is registered under a name."""


class RegistryNotSupportedError(LockkeeperError):
    """Raised when an ecosystem has no private registry organizations."""
