"""
Canary reconciliation.

Drives one deploy: validate the desired configuration against the recorded
state, package the source, make sure the execution role exists, then create
or update the canary and wait for it to settle. Every check that can fail
without side effects runs before the first AWS mutation.
"""

import logging
import tempfile
import time
from collections.abc import Callable
from dataclasses import dataclass

from synthetics_canary import canary, iam, packaging, storage
from synthetics_canary.clients import AwsClients, get_caller_account
from synthetics_canary.config import PollSettings
from synthetics_canary.exceptions import ImmutableFieldError, ValidationError
from synthetics_canary.logging_utils import masked_config
from synthetics_canary.models import CanaryConfig, CanaryState

logger = logging.getLogger(__name__)


@dataclass
class ExecutionRole:
    """Role the canary runs as, plus the IAM names the component owns (if any)."""

    arn: str
    policy_name: str | None = None
    role_name: str | None = None


def check_immutable_fields(config: CanaryConfig, prior_state: CanaryState) -> None:
    """
    Reject changes to fields that would force the canary to be replaced.

    Raises:
        ImmutableFieldError: If name, region or artifact bucket changed
    """
    if prior_state.name and config.name != prior_state.name:
        raise ImmutableFieldError("name", prior_state.name, config.name)
    if prior_state.region and config.region != prior_state.region:
        raise ImmutableFieldError("region", prior_state.region, config.region)
    if prior_state.artifact_bucket and config.artifact_bucket != prior_state.artifact_bucket:
        raise ImmutableFieldError(
            "artifact bucket", prior_state.artifact_bucket, config.artifact_bucket
        )


def validate_config(config: CanaryConfig, clients: AwsClients) -> None:
    """
    Check required fields and that the artifact bucket exists.

    Raises:
        ValidationError: If a required field is missing or the bucket doesn't exist
    """
    if not config.artifact_bucket:
        raise ValidationError("required artifactBucket not set")
    if not config.schedule.expression:
        raise ValidationError("required schedule.expression not set")
    if not config.src:
        raise ValidationError("required src not set")

    logger.info(f"Checking if AWS S3 Bucket {config.artifact_bucket} exists")
    if not storage.bucket_exists(clients.s3, config.artifact_bucket):
        raise ValidationError(f"AWS Bucket '{config.artifact_bucket}' does not exist")


def resolve_execution_role(
    config: CanaryConfig,
    prior_state: CanaryState,
    clients: AwsClients,
    settings: PollSettings,
    sleep: Callable[[float], None] | None = None,
) -> ExecutionRole:
    """
    Return the role the canary should run as.

    An explicit role ARN is used verbatim. Otherwise a policy and role named
    after the canary are ensured (reusing the names from the recorded state)
    and attached. When either was just created, waits for IAM to propagate.
    """
    if config.role_arn and config.role_arn.strip():
        logger.info("Using configured execution role")
        return ExecutionRole(arn=config.role_arn)

    account_id = get_caller_account(clients.sts)

    logger.info("Checking if IAM Policy exists")
    policy = iam.ensure_policy(
        clients.iam,
        prior_state.policy_name or iam.default_policy_name(config.name),
        config.artifact_bucket,
        config.region,
        account_id,
        config.name,
    )

    logger.info("Checking if IAM Role exists")
    role = iam.ensure_role(clients.iam, prior_state.role_name or iam.default_role_name(config.name))

    if policy.is_new or role.is_new:
        iam.attach_role_policy(clients.iam, policy.name, role.name, account_id)
        # "The role defined for the function cannot be assumed by Lambda" otherwise
        logger.info(f"Waiting {settings.iam_grace_seconds}s for IAM propagation")
        (sleep or time.sleep)(settings.iam_grace_seconds)

    return ExecutionRole(arn=role.arn, policy_name=policy.name, role_name=role.name)


def reconcile(
    config: CanaryConfig,
    prior_state: CanaryState,
    clients: AwsClients,
    settings: PollSettings | None = None,
    work_dir: str | None = None,
    sleep: Callable[[float], None] | None = None,
) -> CanaryState:
    """
    Bring the deployed canary in line with the desired configuration.

    Args:
        config: Desired configuration with defaults applied
        prior_state: Recorded state from the previous deploy (empty if none)
        clients: AWS clients for config.region
        settings: Poll timing
        work_dir: Scratch directory for source packaging, a temporary one when omitted
        sleep: Sleep function for the IAM grace period, replaceable in tests

    Returns:
        New recorded state

    Raises:
        ImmutableFieldError: If name, region or artifact bucket changed
        ValidationError: If the configuration is incomplete or the bucket is missing
        ConvergenceTimeoutError: If the canary does not settle in time
    """
    settings = settings or PollSettings()
    logger.info(f"Reconciling canary: {masked_config(config)}")

    check_immutable_fields(config, prior_state)
    validate_config(config, clients)

    with tempfile.TemporaryDirectory(prefix="canary-") as scratch_dir:
        # Packaging touches only local files, so a bad source fails before IAM changes
        code_path = packaging.prepare_source_code(config.src, work_dir or scratch_dir)

        role = resolve_execution_role(config, prior_state, clients, settings, sleep)
        state = _create_or_update(config, clients, role.arn, str(code_path), settings)

    state.artifact_bucket = config.artifact_bucket
    state.region = config.region
    state.policy_name = role.policy_name
    state.role_name = role.role_name
    return state


def _create_or_update(
    config: CanaryConfig, clients: AwsClients, role_arn: str, code_path: str, settings: PollSettings
) -> CanaryState:
    logger.info(f"Checking if an AWS Synthetics Canary named {config.name} exists")
    existing = canary.get_canary(clients.synthetics, config.name)

    if existing is None:
        logger.info("Creating new Synthetics Canary")
        state = canary.create_canary(clients.synthetics, config, role_arn, code_path, settings)
        logger.info("Synthetics Canary created")
    else:
        logger.info("Updating existing Synthetics Canary")
        state = canary.update_canary(clients.synthetics, config, role_arn, code_path, settings)
        logger.info("Synthetics Canary updated")
    return state
