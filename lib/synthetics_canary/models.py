"""
Core data models for the synthetics canary component.

These models represent a canary as it moves through its lifecycle:
desired configuration -> provisioned canary -> recorded state -> runs
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class CanaryStatus(str, Enum):
    """Canary states reported by CloudWatch Synthetics."""

    CREATING = "CREATING"
    READY = "READY"
    STARTING = "STARTING"
    RUNNING = "RUNNING"
    UPDATING = "UPDATING"
    STOPPING = "STOPPING"
    STOPPED = "STOPPED"
    ERROR = "ERROR"
    DELETING = "DELETING"

    @property
    def is_transitional(self) -> bool:
        """True for states that are expected to resolve on their own."""
        return self.value.endswith("ING") and self is not CanaryStatus.RUNNING


# Status values a canary passes through on its own after a mutating call
TRANSITIONAL_STATES = frozenset(s.value for s in CanaryStatus if s.is_transitional)


@dataclass
class Schedule:
    """
    Canary schedule.

    Attributes:
        expression: cron() or rate() expression
        duration: Seconds the canary keeps running after a start, 0 for once per start
    """

    expression: str | None = None
    duration: int = 0

    def to_api(self) -> dict[str, Any]:
        return {"Expression": self.expression, "DurationInSeconds": self.duration}


@dataclass
class Retention:
    """Artifact retention in days for failed and successful runs."""

    failure: int
    success: int


@dataclass
class VpcConfig:
    """Optional VPC placement for the canary Lambda."""

    security_groups: list[str] = field(default_factory=list)
    subnets: list[str] = field(default_factory=list)

    @property
    def is_set(self) -> bool:
        return bool(self.security_groups or self.subnets)

    def to_api(self) -> dict[str, Any]:
        return {"SecurityGroupIds": self.security_groups, "SubnetIds": self.subnets}


@dataclass
class CanaryConfig:
    """
    Desired configuration for one canary, with every default applied.

    Attributes:
        name: Canary name (immutable once deployed)
        artifact_bucket: S3 bucket for run artifacts (immutable once deployed)
        src: Path to the canary source bundle (zip archive or directory)
        handler: Entry point, e.g. "index.handler"
        runtime: Synthetics runtime version
        region: AWS region (immutable once deployed)
        role_arn: Explicit execution role; when set no IAM resources are managed
        env: Environment variables passed to the canary
        tracing: Enable X-Ray active tracing
        schedule: Schedule expression and duration
        timeout: Run timeout in seconds
        memory: Memory in MB, None for the service default
        retention: Artifact retention periods
        vpc: Optional VPC configuration
        tags: Tags applied on creation
    """

    name: str
    artifact_bucket: str | None
    src: str | None
    handler: str
    runtime: str
    region: str
    role_arn: str | None
    env: dict[str, str]
    tracing: bool
    schedule: Schedule
    timeout: int
    memory: int | None
    retention: Retention
    vpc: VpcConfig = field(default_factory=VpcConfig)
    tags: dict[str, str] | None = None

    @property
    def artifact_location(self) -> str:
        return f"s3://{self.artifact_bucket}/{self.name}/"

    def to_dict(self) -> dict[str, Any]:
        """Plain representation for logging."""
        return {
            "name": self.name,
            "artifact_bucket": self.artifact_bucket,
            "src": self.src,
            "handler": self.handler,
            "runtime": self.runtime,
            "region": self.region,
            "role_arn": self.role_arn,
            "env": self.env,
            "tracing": self.tracing,
            "schedule": {"expression": self.schedule.expression, "duration": self.schedule.duration},
            "timeout": self.timeout,
            "memory": self.memory,
            "retention": {"failure": self.retention.failure, "success": self.retention.success},
            "vpc": {"security_groups": self.vpc.security_groups, "subnets": self.vpc.subnets},
            "tags": self.tags,
        }


@dataclass
class IamResource:
    """IAM policy or role ensured during a single reconciliation."""

    name: str | None
    arn: str
    is_new: bool = False


@dataclass
class CanaryState:
    """
    Recorded state of a deployed canary, persisted between invocations.

    An empty state (no name) means nothing is deployed.
    """

    name: str | None = None
    id: str | None = None
    artifact_bucket: str | None = None
    artifact_bucket_arn: str | None = None
    runtime: str | None = None
    status: str | None = None
    status_reason: str = ""
    region: str | None = None
    policy_name: str | None = None
    role_name: str | None = None

    @property
    def is_deployed(self) -> bool:
        return bool(self.name)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for the state store."""
        if not self.is_deployed:
            return {}

        data = {
            "name": self.name,
            "id": self.id,
            "artifact_bucket": self.artifact_bucket,
            "artifact_bucket_arn": self.artifact_bucket_arn,
            "runtime": self.runtime,
            "status": self.status,
            "status_reason": self.status_reason,
            "region": self.region,
        }

        # IAM names only exist when the component created the role itself
        if self.policy_name:
            data["policy_name"] = self.policy_name
        if self.role_name:
            data["role_name"] = self.role_name

        return data

    @classmethod
    def from_dict(cls, data: dict | None) -> "CanaryState":
        """Create CanaryState from a stored record."""
        data = data or {}
        return cls(
            name=data.get("name"),
            id=data.get("id"),
            artifact_bucket=data.get("artifact_bucket"),
            artifact_bucket_arn=data.get("artifact_bucket_arn"),
            runtime=data.get("runtime"),
            status=data.get("status"),
            status_reason=data.get("status_reason", ""),
            region=data.get("region"),
            policy_name=data.get("policy_name"),
            role_name=data.get("role_name"),
        )


@dataclass
class CanaryRun:
    """
    A single canary run as reported by GetCanaryRuns.

    Attributes:
        id: Run identifier
        name: Canary name
        status: Run state (PASSED, FAILED, RUNNING)
        status_reason: Failure reason, if any
        started_at: Run start time
        completed_at: Run completion time, None while running
        artifact_location: "bucket/prefix" where run artifacts are stored
    """

    id: str | None
    name: str | None
    status: str | None
    status_reason: str = ""
    started_at: datetime | None = None
    completed_at: datetime | None = None
    artifact_location: str | None = None

    @classmethod
    def from_api(cls, run: dict) -> "CanaryRun":
        status = run.get("Status", {})
        timeline = run.get("Timeline", {})
        return cls(
            id=run.get("Id"),
            name=run.get("Name"),
            status=status.get("State"),
            status_reason=status.get("StateReason", ""),
            started_at=timeline.get("Started"),
            completed_at=timeline.get("Completed"),
            artifact_location=run.get("ArtifactS3Location"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "status": self.status,
            "status_reason": self.status_reason,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "artifact_location": self.artifact_location,
        }
