"""
Exceptions raised by the rate manager services.

Calculation problems (guardrail clamps, undefined inversions) are not
exceptions: the enforcer flags them and the calculator returns 0.
Feed and submission problems are raised to the caller, which reports
them to the operator.
"""


class RateManagerError(Exception):
    """Base class for rate manager errors."""


class FeedFailure(RateManagerError):
    """One or more calendar feeds failed or timed out."""
    
    def __init__(self, failures):
        # failures: dict of source name -> exception
        self.failures = dict(failures)
        sources = ', '.join(sorted(self.failures))
        super().__init__(f"Failed to load rate calendar ({sources})")
    
    @property
    def sources(self):
        return sorted(self.failures)


class PmsGatewayError(RateManagerError):
    """The PMS rate API rejected or failed a request."""


class SubmissionFailure(RateManagerError):
    """A batch of overrides could not be pushed; pending state was restored."""
    
    def __init__(self, message, dates=None):
        super().__init__(message)
        self.dates = list(dates or [])


class ConcurrentSubmission(RateManagerError):
    """A submission for the property is already in flight."""


class FrozenDateError(RateManagerError):
    """The date is frozen (or outside the loaded calendar) and cannot be overridden."""


class InvalidOverrideError(RateManagerError):
    """The override value cannot be used as a base rate."""
