"""
Custom exceptions for the synthetics canary component.

Expected "not found" conditions from AWS are not exceptions here; the
gateway functions turn them into None/False. Anything else from botocore
propagates unchanged.
"""


class CanaryError(Exception):
    """Base exception for canary component errors."""


class ValidationError(CanaryError):
    """Desired configuration is incomplete or refers to missing resources."""


class ImmutableFieldError(CanaryError):
    """An identity-defining field differs from the deployed canary."""

    def __init__(self, field_name: str, old_value, new_value):
        self.field_name = field_name
        self.old_value = old_value
        self.new_value = new_value
        super().__init__(
            f"Changing the {field_name} from '{old_value}' to '{new_value}' will delete "
            f"the AWS Synthetics Canary. Please remove it manually, change the {field_name}, "
            "then re-deploy."
        )


class ConvergenceTimeoutError(CanaryError):
    """A resource stayed in a transitional state longer than allowed."""

    def __init__(self, resource: str, last_status, waited_seconds: float):
        self.resource = resource
        self.last_status = last_status
        self.waited_seconds = waited_seconds
        super().__init__(
            f"Timed out after {waited_seconds:.0f}s waiting for {resource} "
            f"to leave status {last_status}"
        )


class CanaryNotFoundError(CanaryError):
    """The canary disappeared while waiting for it to converge."""
