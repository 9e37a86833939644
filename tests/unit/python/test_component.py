"""Tests for the CanaryComponent lifecycle verbs."""

import zipfile
from datetime import UTC, datetime
from unittest.mock import MagicMock, call

import pytest
from botocore.exceptions import ClientError

from synthetics_canary.clients import AwsClients
from synthetics_canary.component import CanaryComponent
from synthetics_canary.config import PollSettings
from synthetics_canary.exceptions import ImmutableFieldError
from synthetics_canary.models import CanaryState
from synthetics_canary.state_store import JsonStateStore

ACCOUNT_ID = "123456789012"
FAST = PollSettings(interval_seconds=0, max_wait_seconds=60, iam_grace_seconds=0)


def client_error(code):
    return ClientError({"Error": {"Code": code, "Message": code}}, "Operation")


def canary_response(state, name="c1"):
    return {
        "Canary": {
            "Id": "abc-123",
            "Name": name,
            "ArtifactS3Location": f"s3://b1/{name}/",
            "RuntimeVersion": "syn-nodejs-puppeteer-3.0",
            "Status": {"State": state},
        }
    }


def run(run_id, day):
    return {
        "Id": run_id,
        "Name": "c1",
        "Status": {"State": "PASSED"},
        "Timeline": {"Completed": datetime(2024, 1, day, tzinfo=UTC)},
        "ArtifactS3Location": f"b1/canary/us-east-1/c1/{run_id}",
    }


@pytest.fixture
def clients():
    mock_clients = AwsClients(
        region="us-east-1",
        synthetics=MagicMock(),
        iam=MagicMock(),
        s3=MagicMock(),
        sts=MagicMock(),
        lambda_=MagicMock(),
    )
    mock_clients.sts.get_caller_identity.return_value = {"Account": ACCOUNT_ID}
    return mock_clients


@pytest.fixture
def factory(clients):
    return MagicMock(return_value=clients)


@pytest.fixture
def store(tmp_path):
    return JsonStateStore(tmp_path / "state" / "c1.json")


def deployed_state(**overrides):
    data = {
        "name": "c1",
        "id": "abc-123",
        "artifact_bucket": "b1",
        "region": "us-east-1",
        "status": "READY",
        "policy_name": "CloudWatchSyntheticsPolicy-c1",
        "role_name": "CloudWatchSyntheticsRole-c1",
    }
    data.update(overrides)
    return CanaryState.from_dict(data)


def make_component(store, factory):
    return CanaryComponent("c1", store, settings=FAST, clients_factory=factory)


class TestDeploy:
    """Tests for deploy."""

    def test_first_deploy_persists_state(self, store, factory, clients, tmp_path):
        src = tmp_path / "src.zip"
        with zipfile.ZipFile(src, "w") as zipf:
            zipf.writestr("index.js", "")
        clients.iam.get_policy.return_value = {"Policy": {"Arn": "arn:policy"}}
        clients.iam.get_role.return_value = {"Role": {"Arn": "arn:role"}}
        clients.synthetics.get_canary.side_effect = [
            client_error("ResourceNotFoundException"),
            canary_response("CREATING"),
            canary_response("READY"),
            canary_response("READY"),
        ]
        component = make_component(store, factory)

        outputs = component.deploy(
            {
                "name": "c1",
                "artifactBucket": "b1",
                "src": str(src),
                "region": "eu-west-1",
                "schedule": {"expression": "rate(5 minutes)"},
            }
        )

        assert outputs["name"] == "c1"
        assert outputs["region"] == "eu-west-1"
        assert store.load().name == "c1"
        factory.assert_called_once_with("eu-west-1", None)

    def test_failed_deploy_keeps_previous_state(self, store, factory, clients):
        store.save(deployed_state())
        component = make_component(store, factory)

        with pytest.raises(ImmutableFieldError):
            component.deploy({"name": "c2", "artifactBucket": "b1"})

        assert store.load().name == "c1"
        clients.synthetics.create_canary.assert_not_called()


class TestRemove:
    """Tests for remove."""

    def test_empty_state_is_noop(self, store, factory):
        component = make_component(store, factory)

        assert component.remove() == {}
        factory.assert_not_called()

    def test_removes_everything_in_order(self, store, factory, clients):
        store.save(deployed_state())
        manager = MagicMock()
        manager.attach_mock(clients.synthetics, "synthetics")
        manager.attach_mock(clients.iam, "iam")
        manager.attach_mock(clients.lambda_, "lambda_")
        clients.synthetics.get_canary.side_effect = [
            canary_response("READY"),
            client_error("ResourceNotFoundException"),
        ]
        clients.lambda_.get_paginator.return_value.paginate.return_value = [
            {"LayerVersions": [{"Version": 1}]}
        ]
        component = make_component(store, factory)

        assert component.remove() == {}

        policy_arn = f"arn:aws:iam::{ACCOUNT_ID}:policy/CloudWatchSyntheticsPolicy-c1"
        removal_calls = [
            c for c in manager.mock_calls if c[0].split(".")[-1].startswith(("delete", "detach"))
        ]
        assert removal_calls == [
            call.synthetics.delete_canary(Name="c1"),
            call.iam.detach_role_policy(PolicyArn=policy_arn, RoleName="CloudWatchSyntheticsRole-c1"),
            call.iam.delete_policy(PolicyArn=policy_arn),
            call.iam.delete_role(RoleName="CloudWatchSyntheticsRole-c1"),
            call.lambda_.delete_function(FunctionName="cwsyn-c1-abc-123"),
            call.lambda_.delete_layer_version(LayerName="cwsyn-c1-abc-123", VersionNumber=1),
        ]
        assert not store.path.exists()
        assert component.state.is_deployed is False

    def test_explicit_role_skips_iam_cleanup(self, store, factory, clients):
        store.save(deployed_state(policy_name=None, role_name=None))
        clients.synthetics.get_canary.side_effect = client_error("ResourceNotFoundException")
        clients.lambda_.get_paginator.return_value.paginate.return_value = []
        component = make_component(store, factory)

        component.remove()

        clients.iam.detach_role_policy.assert_not_called()
        clients.iam.delete_policy.assert_not_called()
        clients.iam.delete_role.assert_not_called()
        clients.sts.get_caller_identity.assert_not_called()

    def test_failure_keeps_state_for_retry(self, store, factory, clients):
        store.save(deployed_state())
        clients.synthetics.get_canary.side_effect = client_error("ResourceNotFoundException")
        clients.iam.delete_role.side_effect = client_error("DeleteConflict")
        component = make_component(store, factory)

        with pytest.raises(ClientError):
            component.remove()

        assert store.load().name == "c1"
        clients.lambda_.delete_function.assert_not_called()


class TestStartStop:
    """Tests for start and stop."""

    def test_not_deployed(self, store, factory):
        component = make_component(store, factory)

        assert component.start() == {}
        assert component.stop() == {}
        factory.assert_not_called()

    def test_start_records_status(self, store, factory, clients):
        store.save(deployed_state())
        clients.synthetics.get_canary.side_effect = [
            canary_response("STARTING"),
            canary_response("RUNNING"),
            canary_response("RUNNING"),
        ]
        component = make_component(store, factory)

        assert component.start() == {}

        clients.synthetics.start_canary.assert_called_once_with(Name="c1")
        assert store.load().status == "RUNNING"

    def test_stop_records_status(self, store, factory, clients):
        store.save(deployed_state(status="RUNNING"))
        clients.synthetics.get_canary.side_effect = [
            canary_response("STOPPING"),
            canary_response("STOPPED"),
            canary_response("STOPPED"),
        ]
        component = make_component(store, factory)

        assert component.stop() == {}

        assert store.load().status == "STOPPED"


class TestResults:
    """Tests for results."""

    def test_returns_five_most_recent(self, store, factory, clients):
        store.save(deployed_state())
        clients.synthetics.get_canary_runs.return_value = {
            "CanaryRuns": [run(f"run-{day}", day) for day in range(1, 9)]
        }
        component = make_component(store, factory)

        outputs = component.results()["outputs"]

        assert [r["id"] for r in outputs] == ["run-8", "run-7", "run-6", "run-5", "run-4"]
        assert outputs[0]["completed_at"] == "2024-01-08T00:00:00+00:00"

    def test_not_deployed(self, store, factory):
        assert make_component(store, factory).results() == {}


class TestLogs:
    """Tests for logs."""

    def test_returns_last_run_with_log(self, store, factory, clients):
        store.save(deployed_state())
        clients.synthetics.get_canary_runs.return_value = {
            "CanaryRuns": [run("run-1", 1), run("run-2", 2)]
        }
        clients.s3.get_paginator.return_value.paginate.return_value = [
            {
                "Contents": [
                    {"Key": "canary/us-east-1/c1/run-2/screenshot.png"},
                    {"Key": "canary/us-east-1/c1/run-2/log.txt"},
                ]
            }
        ]
        body = MagicMock()
        body.read.return_value = b"INFO: Canary passed"
        clients.s3.get_object.return_value = {"Body": body}
        component = make_component(store, factory)

        outputs = component.logs()["outputs"]

        assert outputs["id"] == "run-2"
        assert outputs["log"] == "INFO: Canary passed"
        clients.s3.get_paginator.return_value.paginate.assert_called_once_with(
            Bucket="b1", Prefix="canary/us-east-1/c1/run-2"
        )
        clients.s3.get_object.assert_called_once_with(
            Bucket="b1", Key="canary/us-east-1/c1/run-2/log.txt"
        )

    def test_no_runs_returns_empty(self, store, factory, clients):
        store.save(deployed_state())
        clients.synthetics.get_canary_runs.return_value = {"CanaryRuns": []}

        assert make_component(store, factory).logs() == {}

    def test_no_text_log_returns_empty(self, store, factory, clients):
        store.save(deployed_state())
        clients.synthetics.get_canary_runs.return_value = {"CanaryRuns": [run("run-1", 1)]}
        clients.s3.get_paginator.return_value.paginate.return_value = [
            {"Contents": [{"Key": "canary/us-east-1/c1/run-1/screenshot.png"}]}
        ]

        assert make_component(store, factory).logs() == {}
        clients.s3.get_object.assert_not_called()
