"""Exception hierarchy for proofline."""


class ProoflineError(Exception):
    """Base class for all proofline errors."""


class InvalidInput(ProoflineError, ValueError):
    """A required argument was missing or unusable."""


class TransportFailure(ProoflineError):
    """The analysis service could not be reached or answered garbage."""


class StaleResponse(ProoflineError):
    """An analysis response arrived for a superseded document version."""

    def __init__(self, dispatched: int, current: int):
        super().__init__(
            f"response for version {dispatched} is stale (current version {current})"
        )
        self.dispatched = dispatched
        self.current = current


class ConfigError(ProoflineError):
    """Configuration is missing a required value or holds an invalid one."""
