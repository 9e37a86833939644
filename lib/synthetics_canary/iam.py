"""
IAM provisioning for the canary execution role.

When no explicit role ARN is configured, the component owns one policy and
one role per canary. Both are looked up by name first and only created if
absent; existing documents are never rewritten. Removal treats an already
missing entity as success so a partial cleanup can simply be re-run.
"""

import json
import logging

from botocore.exceptions import ClientError

from synthetics_canary import constants
from synthetics_canary.clients import error_code
from synthetics_canary.models import IamResource

logger = logging.getLogger(__name__)

_NOT_FOUND = "NoSuchEntity"


def default_policy_name(canary_name: str) -> str:
    return f"{constants.POLICY_NAME_PREFIX}{canary_name}"


def default_role_name(canary_name: str) -> str:
    return f"{constants.ROLE_NAME_PREFIX}{canary_name}"


def policy_arn(policy_name: str, account_id: str) -> str:
    return f"arn:aws:iam::{account_id}:policy/{policy_name}"


def build_policy_document(bucket: str, region: str, account_id: str, canary_name: str) -> dict:
    """
    Build the execution policy for a canary.

    Grants artifact writes to the bucket, logging to the canary's own
    Lambda log groups, bucket listing, and metric publication restricted to
    the Synthetics namespace.
    """
    return {
        "Version": "2012-10-17",
        "Statement": [
            {
                "Effect": "Allow",
                "Action": ["s3:PutObject", "s3:GetBucketLocation"],
                "Resource": [f"arn:aws:s3:::{bucket}", f"arn:aws:s3:::{bucket}/*"],
            },
            {
                "Effect": "Allow",
                "Action": ["logs:CreateLogStream", "logs:PutLogEvents", "logs:CreateLogGroup"],
                "Resource": [
                    f"arn:aws:logs:{region}:{account_id}:log-group:/aws/lambda/"
                    f"{constants.LAMBDA_NAME_PREFIX}{canary_name}-*"
                ],
            },
            {
                "Effect": "Allow",
                "Action": ["s3:ListAllMyBuckets"],
                "Resource": ["*"],
            },
            {
                "Effect": "Allow",
                "Resource": "*",
                "Action": "cloudwatch:PutMetricData",
                "Condition": {
                    "StringEquals": {"cloudwatch:namespace": constants.METRIC_NAMESPACE}
                },
            },
        ],
    }


def build_trust_document() -> dict:
    """Trust policy letting Lambda assume the canary role."""
    return {
        "Version": "2012-10-17",
        "Statement": [
            {
                "Effect": "Allow",
                "Principal": {"Service": [constants.LAMBDA_SERVICE_PRINCIPAL]},
                "Action": ["sts:AssumeRole"],
            }
        ],
    }


def ensure_policy(
    iam, policy_name: str, bucket: str, region: str, account_id: str, canary_name: str
) -> IamResource:
    """
    Get the canary policy, creating it when missing.

    Args:
        iam: IAM client
        policy_name: Policy name to look up or create
        bucket: Artifact bucket name
        region: Canary region
        account_id: Caller account id
        canary_name: Canary name, scopes the log group permission

    Returns:
        IamResource with is_new=True if the policy was created
    """
    arn = policy_arn(policy_name, account_id)
    try:
        response = iam.get_policy(PolicyArn=arn)
        logger.info(f"IAM Policy {policy_name} already exists")
        return IamResource(name=policy_name, arn=response["Policy"]["Arn"], is_new=False)
    except ClientError as e:
        if error_code(e) != _NOT_FOUND:
            logger.error(f"Failed to look up IAM Policy {policy_name}: {e}")
            raise

    logger.info(f"Creating IAM Policy {policy_name}")
    document = build_policy_document(bucket, region, account_id, canary_name)
    response = iam.create_policy(PolicyName=policy_name, PolicyDocument=json.dumps(document))
    return IamResource(name=policy_name, arn=response["Policy"]["Arn"], is_new=True)


def ensure_role(iam, role_name: str) -> IamResource:
    """
    Get the canary role, creating it when missing.

    Returns:
        IamResource with is_new=True if the role was created
    """
    try:
        response = iam.get_role(RoleName=role_name)
        logger.info(f"IAM Role {role_name} already exists")
        return IamResource(name=role_name, arn=response["Role"]["Arn"], is_new=False)
    except ClientError as e:
        if error_code(e) != _NOT_FOUND:
            logger.error(f"Failed to look up IAM Role {role_name}: {e}")
            raise

    logger.info(f"Creating IAM Role {role_name}")
    response = iam.create_role(
        RoleName=role_name,
        AssumeRolePolicyDocument=json.dumps(build_trust_document()),
    )
    return IamResource(name=role_name, arn=response["Role"]["Arn"], is_new=True)


def attach_role_policy(iam, policy_name: str, role_name: str, account_id: str) -> None:
    logger.info(f"Attaching IAM Policy {policy_name} to IAM Role {role_name}")
    iam.attach_role_policy(PolicyArn=policy_arn(policy_name, account_id), RoleName=role_name)


def detach_role_policy(iam, policy_name: str, role_name: str, account_id: str) -> None:
    """Detach the policy from the role, ignoring entities that are already gone."""
    try:
        iam.detach_role_policy(PolicyArn=policy_arn(policy_name, account_id), RoleName=role_name)
    except ClientError as e:
        if error_code(e) != _NOT_FOUND:
            raise
        logger.warning(f"IAM Policy {policy_name} was not attached to {role_name}")


def delete_policy(iam, policy_name: str, account_id: str) -> None:
    try:
        iam.delete_policy(PolicyArn=policy_arn(policy_name, account_id))
    except ClientError as e:
        if error_code(e) != _NOT_FOUND:
            raise
        logger.warning(f"IAM Policy {policy_name} already removed")


def delete_role(iam, role_name: str) -> None:
    try:
        iam.delete_role(RoleName=role_name)
    except ClientError as e:
        if error_code(e) != _NOT_FOUND:
            raise
        logger.warning(f"IAM Role {role_name} already removed")
