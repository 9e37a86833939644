"""
Synthetics canary component.

Exposes the lifecycle verbs a deployment tool calls: deploy, remove, start,
stop, results and logs. The component owns loading and persisting recorded
state; the AWS work is delegated to the reconciler and gateway modules.
"""

import logging
import time
from collections.abc import Callable
from typing import Any

from synthetics_canary import canary, constants, iam, lambda_resources, storage
from synthetics_canary.clients import AwsClients, get_caller_account
from synthetics_canary.config import PollSettings, prepare_inputs
from synthetics_canary.logging_utils import log_summary
from synthetics_canary.models import CanaryState
from synthetics_canary.reconciler import reconcile
from synthetics_canary.state_store import JsonStateStore

logger = logging.getLogger(__name__)


class CanaryComponent:
    """
    One declared canary and its recorded state.

    Usage:
        component = CanaryComponent("web-check", JsonStateStore(".canary/web-check.json"))
        outputs = component.deploy({"artifactBucket": "my-bucket", "src": "canary.zip",
                                    "schedule": {"expression": "rate(5 minutes)"}})
    """

    def __init__(
        self,
        instance_name: str,
        state_store: JsonStateStore,
        credentials: dict[str, str] | None = None,
        settings: PollSettings | None = None,
        clients_factory: Callable[..., AwsClients] = AwsClients.create,
    ):
        self.instance_name = instance_name
        self.state_store = state_store
        self.credentials = credentials
        self.settings = settings or PollSettings.from_env()
        self.clients_factory = clients_factory
        self.state = state_store.load()

    def _clients(self, region: str | None) -> AwsClients:
        return self.clients_factory(region or constants.DEFAULT_REGION, self.credentials)

    def _save(self, state: CanaryState) -> None:
        self.state = state
        self.state_store.save(state)

    def _not_deployed(self, operation: str) -> dict:
        logger.info(f"No canary found, nothing to {operation}. It does not seem to be deployed yet.")
        return {}

    def deploy(self, inputs: dict[str, Any] | None = None) -> dict[str, Any]:
        """
        Create or update the canary.

        Returns:
            The new recorded state as a dictionary
        """
        start_time = time.time()
        config = prepare_inputs(inputs, self.state, self.instance_name)
        clients = self._clients(config.region)

        try:
            new_state = reconcile(config, self.state, clients, self.settings)
        except Exception as e:
            logger.error(log_summary("deploy", success=False, error=str(e), canary_name=config.name))
            raise

        self._save(new_state)
        logger.info(
            log_summary(
                "deploy",
                duration_ms=(time.time() - start_time) * 1000,
                canary_name=new_state.name,
                status=new_state.status,
            )
        )
        return new_state.to_dict()

    def remove(self) -> dict:
        """
        Delete the canary and everything the component created for it.

        Each step tolerates resources that are already gone, so a failed
        removal can be retried.
        """
        state = self.state
        if not state.is_deployed:
            logger.info("No canary found. Components seem already removed.")
            return {}

        start_time = time.time()
        clients = self._clients(state.region)

        logger.info("Removing AWS Synthetics Canary")
        canary.delete_canary(clients.synthetics, state.name, self.settings)

        account_id = None
        if state.policy_name or state.role_name:
            account_id = get_caller_account(clients.sts)

        if state.policy_name and state.role_name:
            iam.detach_role_policy(clients.iam, state.policy_name, state.role_name, account_id)

        if state.policy_name:
            logger.info("Removing AWS IAM Policy")
            iam.delete_policy(clients.iam, state.policy_name, account_id)

        if state.role_name:
            logger.info("Removing AWS IAM Role")
            iam.delete_role(clients.iam, state.role_name)

        if state.id:
            logger.info("Removing AWS Lambda function and layer")
            lambda_resources.delete_function(clients.lambda_, state.name, state.id)
            lambda_resources.delete_layer_versions(clients.lambda_, state.name, state.id)

        self.state = CanaryState()
        self.state_store.clear()
        logger.info(
            log_summary("remove", duration_ms=(time.time() - start_time) * 1000, canary_name=state.name)
        )
        return {}

    def start(self) -> dict:
        """Start the canary and wait until it has started."""
        if not self.state.is_deployed:
            return self._not_deployed("start")

        clients = self._clients(self.state.region)
        logger.info("Starting Synthetics Canary")
        current = canary.start_canary(clients.synthetics, self.state.name, self.settings)
        self._record_status(current)
        logger.info("Synthetics Canary started")
        return {}

    def stop(self) -> dict:
        """Stop the canary and wait until it has stopped."""
        if not self.state.is_deployed:
            return self._not_deployed("stop")

        clients = self._clients(self.state.region)
        logger.info("Stopping Synthetics Canary")
        current = canary.stop_canary(clients.synthetics, self.state.name, self.settings)
        self._record_status(current)
        logger.info("Synthetics Canary stopped")
        return {}

    def _record_status(self, current: CanaryState) -> None:
        self.state.status = current.status
        self.state.status_reason = current.status_reason
        self._save(self.state)

    def results(self) -> dict[str, Any]:
        """
        Return the most recent runs.

        Returns:
            {"outputs": [...]} with at most RESULTS_LIMIT runs, newest first
        """
        if not self.state.is_deployed:
            return self._not_deployed("report")

        clients = self._clients(self.state.region)
        runs = canary.get_canary_runs(clients.synthetics, self.state.name)
        outputs = [run.to_dict() for run in runs[: constants.RESULTS_LIMIT]]
        logger.info(log_summary("results", item_count=len(outputs), canary_name=self.state.name))
        return {"outputs": outputs}

    def logs(self) -> dict[str, Any]:
        """
        Return the most recent run together with its text log.

        Returns:
            {"outputs": {...run, "log": text}}, or {} when there is no run or no log
        """
        if not self.state.is_deployed:
            return self._not_deployed("show")

        clients = self._clients(self.state.region)
        runs = canary.get_canary_runs(clients.synthetics, self.state.name)
        if not runs:
            logger.info("No Canary runs found.")
            return {}

        last_run = runs[0]
        if not last_run.artifact_location:
            logger.info("Last Canary run has no artifact location.")
            return {}

        bucket, prefix = storage.parse_artifact_location(last_run.artifact_location)
        keys = storage.list_object_keys(clients.s3, bucket, prefix)
        log_key = next((k for k in keys if k.endswith(constants.LOG_FILE_SUFFIX)), None)
        if not log_key:
            logger.info("No txt log found in artifact bucket location.")
            return {}

        text = storage.read_object_text(clients.s3, bucket, log_key)
        return {"outputs": {**last_run.to_dict(), "log": text}}
