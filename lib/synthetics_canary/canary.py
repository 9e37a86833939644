"""
CloudWatch Synthetics operations.

Thin wrappers around the synthetics client. Each mutating call is followed
by a convergence wait, so callers always get back a canary in a stable
state. A canary that does not exist is reported as None.
"""

import logging
from pathlib import Path
from typing import Any

from botocore.exceptions import ClientError

from synthetics_canary.clients import error_code
from synthetics_canary.config import PollSettings
from synthetics_canary.exceptions import CanaryNotFoundError
from synthetics_canary.models import (
    TRANSITIONAL_STATES,
    CanaryConfig,
    CanaryRun,
    CanaryState,
    CanaryStatus,
)
from synthetics_canary.poller import wait_for_state

logger = logging.getLogger(__name__)

_NOT_FOUND = "ResourceNotFoundException"


def get_canary(synthetics, canary_name: str | None) -> CanaryState | None:
    """
    Fetch a canary by name.

    Args:
        synthetics: Synthetics client
        canary_name: Canary name

    Returns:
        CanaryState built from the service response, or None if it doesn't exist
    """
    if not canary_name:
        return None

    try:
        response = synthetics.get_canary(Name=canary_name)
    except ClientError as e:
        if error_code(e) == _NOT_FOUND:
            return None
        logger.error(f"Failed to get canary {canary_name}: {e}")
        raise

    canary = response["Canary"]
    status = canary.get("Status", {})
    return CanaryState(
        id=canary.get("Id"),
        name=canary.get("Name"),
        artifact_bucket_arn=canary.get("ArtifactS3Location"),
        runtime=canary.get("RuntimeVersion"),
        status=status.get("State"),
        status_reason=status.get("StateReason") or "",
    )


def get_canary_status(synthetics, canary_name: str) -> str | None:
    canary = get_canary(synthetics, canary_name)
    return canary.status if canary else None


def build_canary_request(
    config: CanaryConfig, execution_role_arn: str, code_zip: bytes, for_create: bool
) -> dict[str, Any]:
    """
    Build the CreateCanary/UpdateCanary parameters.

    Artifact location and tags can only be set on creation.
    """
    run_config: dict[str, Any] = {
        "TimeoutInSeconds": config.timeout,
        "EnvironmentVariables": config.env,
        "ActiveTracing": config.tracing,
    }
    if config.memory:
        run_config["MemoryInMB"] = config.memory

    request: dict[str, Any] = {
        "Name": config.name,
        "RuntimeVersion": config.runtime,
        "ExecutionRoleArn": execution_role_arn,
        "Schedule": config.schedule.to_api(),
        "Code": {"Handler": config.handler, "ZipFile": code_zip},
        "RunConfig": run_config,
        "FailureRetentionPeriodInDays": config.retention.failure,
        "SuccessRetentionPeriodInDays": config.retention.success,
    }
    if config.vpc.is_set:
        request["VpcConfig"] = config.vpc.to_api()

    if for_create:
        request["ArtifactS3Location"] = config.artifact_location
        if config.tags:
            request["Tags"] = config.tags

    return request


def _wait_for_status(synthetics, canary_name: str, settings: PollSettings) -> str | None:
    return wait_for_state(
        lambda: get_canary_status(synthetics, canary_name),
        TRANSITIONAL_STATES,
        interval_seconds=settings.interval_seconds,
        max_wait_seconds=settings.max_wait_seconds,
        resource=f"canary {canary_name}",
    )


def _wait_until_settled(synthetics, canary_name: str, settings: PollSettings) -> CanaryState:
    status = _wait_for_status(synthetics, canary_name, settings)
    if status is None:
        raise CanaryNotFoundError(f"Canary {canary_name} disappeared while waiting")
    return get_canary(synthetics, canary_name)


def create_canary(
    synthetics,
    config: CanaryConfig,
    execution_role_arn: str,
    code_path: str,
    settings: PollSettings | None = None,
) -> CanaryState:
    """Create a canary and wait until it leaves CREATING."""
    settings = settings or PollSettings()
    request = build_canary_request(
        config, execution_role_arn, Path(code_path).read_bytes(), for_create=True
    )
    synthetics.create_canary(**request)
    return _wait_until_settled(synthetics, config.name, settings)


def update_canary(
    synthetics,
    config: CanaryConfig,
    execution_role_arn: str,
    code_path: str,
    settings: PollSettings | None = None,
) -> CanaryState:
    """Update a canary and wait until it leaves UPDATING."""
    settings = settings or PollSettings()
    request = build_canary_request(
        config, execution_role_arn, Path(code_path).read_bytes(), for_create=False
    )
    synthetics.update_canary(**request)
    return _wait_until_settled(synthetics, config.name, settings)


def start_canary(synthetics, canary_name: str, settings: PollSettings | None = None) -> CanaryState:
    """Start a canary and wait until it leaves STARTING."""
    settings = settings or PollSettings()
    synthetics.start_canary(Name=canary_name)
    return _wait_until_settled(synthetics, canary_name, settings)


def stop_canary(synthetics, canary_name: str, settings: PollSettings | None = None) -> CanaryState:
    """Stop a canary and wait until it leaves STOPPING."""
    settings = settings or PollSettings()
    synthetics.stop_canary(Name=canary_name)
    return _wait_until_settled(synthetics, canary_name, settings)


def _completion_sort_key(run: CanaryRun):
    # Runs that have not completed yet sort after completed ones
    return (run.completed_at is not None, run.completed_at.timestamp() if run.completed_at else 0)


def get_canary_runs(synthetics, canary_name: str) -> list[CanaryRun]:
    """
    Fetch all runs of a canary, most recently completed first.

    Returns:
        List of CanaryRun, empty if the canary has no runs
    """
    runs = []
    next_token = None
    while True:
        params = {"Name": canary_name}
        if next_token:
            params["NextToken"] = next_token
        response = synthetics.get_canary_runs(**params)
        runs.extend(CanaryRun.from_api(run) for run in response.get("CanaryRuns") or [])
        next_token = response.get("NextToken")
        if not next_token:
            break

    runs.sort(key=_completion_sort_key, reverse=True)
    logger.info(f"Found {len(runs)} runs for canary {canary_name}")
    return runs


def delete_canary(synthetics, canary_name: str, settings: PollSettings | None = None) -> None:
    """
    Delete a canary once it has settled, stopping it first if it is running.

    Waits until the canary is gone. Deleting a canary that does not exist
    is a no-op.
    """
    settings = settings or PollSettings()
    # A canary mid-transition rejects DeleteCanary, so let it settle first
    status = _wait_for_status(synthetics, canary_name, settings)
    if status is None:
        logger.info(f"Canary {canary_name} does not exist, nothing to delete")
        return

    if status == CanaryStatus.RUNNING.value:
        logger.info(f"Stopping running canary {canary_name} before deletion")
        stop_canary(synthetics, canary_name, settings)

    synthetics.delete_canary(Name=canary_name)

    _wait_for_status(synthetics, canary_name, settings)
    logger.info(f"Deleted canary {canary_name}")
