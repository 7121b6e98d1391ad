"""Exception types raised by the decay-graph pipeline.

Resolution misses and empty histories are not exceptions: they are logged
and the offending token or catalog number is skipped.
"""


class SatDecayError(Exception):
    """Base class for all satdecay errors."""


class SourceUnavailable(SatDecayError, ConnectionError):
    """A remote source could not be reached or returned unusable data."""


class CredentialFailure(SatDecayError, ValueError):
    """Space-Track credentials are missing or were rejected."""
