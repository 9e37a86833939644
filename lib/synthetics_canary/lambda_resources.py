"""
Cleanup of the Lambda function and layer Synthetics creates for a canary.

The service names both "cwsyn-<canary name>-<canary id>" and leaves them
behind when the canary itself is deleted.
"""

import logging

from botocore.exceptions import ClientError

from synthetics_canary import constants
from synthetics_canary.clients import error_code

logger = logging.getLogger(__name__)

_NOT_FOUND = "ResourceNotFoundException"


def function_name(canary_name: str, canary_id: str) -> str:
    return f"{constants.LAMBDA_NAME_PREFIX}{canary_name}-{canary_id}"


def delete_function(lambda_client, canary_name: str, canary_id: str) -> None:
    """Delete the canary's Lambda function if it still exists."""
    name = function_name(canary_name, canary_id)
    try:
        lambda_client.delete_function(FunctionName=name)
        logger.info(f"Deleted Lambda function {name}")
    except ClientError as e:
        if error_code(e) != _NOT_FOUND:
            raise
        logger.warning(f"Lambda function {name} already removed")


def delete_layer_versions(lambda_client, canary_name: str, canary_id: str) -> int:
    """
    Delete every version of the canary's Lambda layer.

    Returns:
        Number of layer versions deleted
    """
    layer_name = function_name(canary_name, canary_id)
    versions = []
    paginator = lambda_client.get_paginator("list_layer_versions")
    try:
        for page in paginator.paginate(LayerName=layer_name):
            versions.extend(v["Version"] for v in page.get("LayerVersions", []))
    except ClientError as e:
        if error_code(e) == _NOT_FOUND:
            logger.warning(f"Lambda layer {layer_name} not found")
            return 0
        raise

    for version in versions:
        lambda_client.delete_layer_version(LayerName=layer_name, VersionNumber=version)
        logger.info(f"Deleted Lambda layer {layer_name} version {version}")

    return len(versions)
