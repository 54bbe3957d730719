"""Exception hierarchy shared by the resolver, the sync layer and the Forge clients."""


class ForgeSyncError(Exception):
    """Base exception for all forgesync errors."""


class InvalidIdentityError(ForgeSyncError, ValueError):
    """Raised when a module title is not of the form owner/name."""

    def __init__(self, title: str):
        self.title = title
        super().__init__(f"Forge module names must match 'owner/modulename', got '{title}'")


class MalformedVersionError(ForgeSyncError, ValueError):
    """Raised when a version string is not major.minor.revision."""

    def __init__(self, version_string: str):
        self.version_string = version_string
        super().__init__(
            f"Invalid version format: '{version_string}'. Expected format: x.y.z"
        )


class UnresolvableVersionError(ForgeSyncError):
    """Raised when an install is requested but no version satisfies the constraint."""

    def __init__(self, title: str, requested: str, reason: str = ""):
        self.title = title
        self.requested = requested
        message = f"No version of {title} satisfies '{requested}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class CatalogError(ForgeSyncError):
    """Raised when the Forge catalog cannot be queried."""


class ModuleNotFoundOnForgeError(CatalogError):
    """Raised when the Forge has no module with the requested slug."""

    def __init__(self, slug: str):
        self.slug = slug
        super().__init__(f"Module {slug} not found on the Forge")


class ReleaseInstallError(ForgeSyncError):
    """Raised when a release cannot be fetched or unpacked."""


class ChecksumMismatchError(ReleaseInstallError):
    """Raised when a downloaded archive does not match its published digest."""

    def __init__(self, filename: str, algorithm: str, expected: str, actual: str):
        self.filename = filename
        self.algorithm = algorithm
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"{algorithm} mismatch for {filename}: expected {expected}, got {actual}"
        )
