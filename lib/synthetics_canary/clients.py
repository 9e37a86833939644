"""
AWS client construction for the synthetics canary component.

Clients are built from an explicit boto3 Session per operation, so the
credentials and region of one canary never leak into another through the
default session.
"""

import logging
from dataclasses import dataclass
from typing import Any

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)

_client_config = Config(
    connect_timeout=10,
    read_timeout=60,
    retries={"max_attempts": 5, "mode": "standard"},
)


def error_code(error: ClientError) -> str:
    """Return the vendor error code of a botocore ClientError."""
    return error.response.get("Error", {}).get("Code", "")


@dataclass(frozen=True)
class AwsClients:
    """The five service clients used by the component, bound to one region."""

    region: str
    synthetics: Any
    iam: Any
    s3: Any
    sts: Any
    lambda_: Any

    @classmethod
    def create(
        cls,
        region: str,
        credentials: dict[str, str] | None = None,
        session: boto3.Session | None = None,
    ) -> "AwsClients":
        """
        Build clients for a region.

        Args:
            region: AWS region for every client
            credentials: Optional mapping with aws_access_key_id,
                         aws_secret_access_key and aws_session_token. When
                         omitted the default credential chain is used.
            session: Pre-built session, mainly for tests

        Returns:
            AwsClients bound to the region
        """
        if session is None:
            session = boto3.Session(region_name=region, **(credentials or {}))

        logger.debug(f"Creating AWS clients for region {region}")

        def client(service_name):
            return session.client(service_name, region_name=region, config=_client_config)

        return cls(
            region=region,
            synthetics=client("synthetics"),
            iam=client("iam"),
            s3=client("s3"),
            sts=client("sts"),
            lambda_=client("lambda"),
        )


def get_caller_account(sts) -> str:
    """Return the account id of the current credentials."""
    return sts.get_caller_identity()["Account"]
