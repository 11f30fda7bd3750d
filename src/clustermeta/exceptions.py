"""Exception hierarchy.

Only PersistenceError is ever surfaced as a sync failure. Source and
credential lookup failures are recovered where they happen.
"""


class ClusterMetaError(Exception):
    """Base class for clustermeta errors."""


class SourceUnavailableError(ClusterMetaError):
    """A discovery source failed or timed out while listing clusters."""

    def __init__(self, source: str, message: str):
        self.source = source
        super().__init__(f"{source}: {message}")


class SourceConfigurationError(ClusterMetaError):
    """A discovery source could not be built from its configuration."""


class CredentialLookupError(ClusterMetaError):
    """Checking a credential resolver's health failed."""


class PersistenceError(ClusterMetaError):
    """A snapshot or config document could not be loaded or saved."""
