"""Configuration handling for the synthetics canary component.

Desired configuration arrives as a loosely-shaped mapping (from a manifest
or a JSON file). prepare_inputs() merges it with the recorded state and the
defaults in constants.py into an explicit CanaryConfig. It has no side
effects and performs no AWS calls, so all validation that needs AWS lives in
the reconciler.

Process-level knobs (poll interval, maximum wait, IAM grace period) come
from environment variables via PollSettings.from_env().
"""

import logging
import os
import random
import string
from dataclasses import dataclass
from typing import Any, Dict, Optional

from synthetics_canary import constants
from synthetics_canary.models import CanaryConfig, CanaryState, Retention, Schedule, VpcConfig

logger = logging.getLogger(__name__)


def random_id(length: int = constants.GENERATED_NAME_SUFFIX_LENGTH) -> str:
    """Generate a random lowercase alphanumeric suffix for generated names."""
    return "".join(random.choices(string.ascii_lowercase + string.digits, k=length))


def _section(inputs: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = inputs.get(key)
    return value if isinstance(value, dict) else {}


def prepare_inputs(
    inputs: Optional[Dict[str, Any]],
    state: Optional[CanaryState] = None,
    instance_name: str = "canary",
) -> CanaryConfig:
    """
    Apply defaults to a desired-configuration mapping.

    Args:
        inputs: Desired configuration as declared by the user
        state: Recorded state of the previous deployment, if any
        instance_name: Component instance name, used to generate a canary
                       name when neither inputs nor state provide one

    Returns:
        CanaryConfig with every omitted field defaulted
    """
    inputs = inputs or {}
    state = state or CanaryState()

    schedule = _section(inputs, "schedule")
    retention = _section(inputs, "retention")
    vpc = _section(inputs, "vpc")

    return CanaryConfig(
        name=inputs.get("name") or state.name or f"{instance_name}-{random_id()}",
        artifact_bucket=inputs.get("artifactBucket") or None,
        src=inputs.get("src") or None,
        handler=inputs.get("handler") or constants.DEFAULT_HANDLER,
        runtime=inputs.get("runtime") or constants.DEFAULT_RUNTIME,
        region=inputs.get("region") or constants.DEFAULT_REGION,
        role_arn=inputs.get("roleArn") or None,
        env=dict(inputs.get("env") or {}),
        tracing=inputs.get("tracing") is True,
        schedule=Schedule(
            expression=schedule.get("expression") if schedule else None,
            duration=int(schedule.get("duration") or constants.DEFAULT_SCHEDULE_DURATION),
        ),
        timeout=int(inputs.get("timeout") or constants.DEFAULT_TIMEOUT_SECONDS),
        memory=int(inputs["memory"]) if inputs.get("memory") else None,
        retention=Retention(
            failure=int(retention.get("failure") or constants.DEFAULT_FAILURE_RETENTION_DAYS),
            success=int(retention.get("success") or constants.DEFAULT_SUCCESS_RETENTION_DAYS),
        ),
        vpc=VpcConfig(
            security_groups=list(vpc.get("securityGroups") or []),
            subnets=list(vpc.get("subnets") or []),
        ),
        tags=inputs.get("tags") or None,
    )


@dataclass(frozen=True)
class PollSettings:
    """
    Timing used by convergence waits.

    Attributes:
        interval_seconds: Delay between status fetches
        max_wait_seconds: Upper bound for a single wait
        iam_grace_seconds: Pause after attaching a freshly created policy or role
    """

    interval_seconds: float = constants.POLL_INTERVAL_SECONDS
    max_wait_seconds: float = constants.MAX_WAIT_SECONDS
    iam_grace_seconds: float = constants.IAM_PROPAGATION_SECONDS

    @classmethod
    def from_env(cls) -> "PollSettings":
        """
        Read settings from environment variables.

        Reads CANARY_POLL_INTERVAL_SECONDS, CANARY_MAX_WAIT_SECONDS and
        CANARY_IAM_GRACE_SECONDS, falling back to the defaults.

        Raises:
            ValueError: If a variable is set but not a non-negative number
        """
        settings = cls(
            interval_seconds=_read_float(
                "CANARY_POLL_INTERVAL_SECONDS", constants.POLL_INTERVAL_SECONDS
            ),
            max_wait_seconds=_read_float("CANARY_MAX_WAIT_SECONDS", constants.MAX_WAIT_SECONDS),
            iam_grace_seconds=_read_float(
                "CANARY_IAM_GRACE_SECONDS", constants.IAM_PROPAGATION_SECONDS
            ),
        )
        logger.debug(f"Poll settings: {settings}")
        return settings


def _read_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got '{raw}'") from None
    if value < 0:
        raise ValueError(f"{name} must not be negative, got {value}")
    return value
