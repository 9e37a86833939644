"""Synthetics Canary

Provisions and manages an AWS CloudWatch Synthetics Canary together with
its execution role, Lambda function and layer.
"""

from synthetics_canary import constants
from synthetics_canary.component import CanaryComponent
from synthetics_canary.config import PollSettings, prepare_inputs
from synthetics_canary.exceptions import (
    CanaryError,
    ConvergenceTimeoutError,
    ImmutableFieldError,
    ValidationError,
)
from synthetics_canary.state_store import JsonStateStore

__all__ = [
    "CanaryComponent",
    "CanaryError",
    "ConvergenceTimeoutError",
    "ImmutableFieldError",
    "JsonStateStore",
    "PollSettings",
    "ValidationError",
    "constants",
    "prepare_inputs",
]
