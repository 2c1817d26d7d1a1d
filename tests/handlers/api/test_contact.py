"""Tests for the public contact API handler."""

import json
from unittest.mock import MagicMock

import pytest

from contactflow.channels.dynamodb import DynamoDBPersistenceChannel
from contactflow.repositories.submission import SubmissionRepository
from contactflow.services.reconciliation import ReconciliationEngine
from contactflow.services.status_probe import StatusProbe

CONTACT_PATH = "/public/contact"
STATUS_PATH = "/public/contact/status"


@pytest.fixture
def simulated_delivery(monkeypatch):
    """Enable simulated delivery with no added latency."""
    monkeypatch.setenv("CONTACT_SIMULATE_DELIVERY", "true")
    monkeypatch.setenv("CONTACT_SIMULATED_LATENCY", "0")


@pytest.fixture
def fake_engine(monkeypatch, persistence_channel, notification_channel, settings):
    """Route submissions through the scripted channels."""
    import api.contact

    monkeypatch.setattr(
        api.contact,
        "build_engine",
        lambda _settings: ReconciliationEngine(persistence_channel, notification_channel, settings),
    )


def _post(handler, api_gateway_event, body, **kwargs) -> tuple[int, dict]:
    event = api_gateway_event(method="POST", path=CONTACT_PATH, body=body, **kwargs)
    response = handler(event, None)
    return response["statusCode"], json.loads(response["body"])


class TestSubmitContact:
    """Tests for POST /public/contact."""

    def test_simulated_submission(
        self, dynamodb_table, api_gateway_event, simulated_delivery, valid_submission
    ):
        """Simulated delivery returns a synthetic success."""
        from api.contact import handler

        status, body = _post(handler, api_gateway_event, valid_submission)

        assert status == 200
        assert body["success"] is True
        assert body["data"]["submissionId"].startswith("dev-")
        assert body["data"]["notificationsSent"] == 2
        assert "error" not in body

    def test_submission_persisted(
        self,
        dynamodb_table,
        api_gateway_event,
        monkeypatch,
        notification_channel,
        settings,
        valid_submission,
    ):
        """A real DynamoDB write is reported back with its ID."""
        import api.contact
        from api.contact import handler

        repo = SubmissionRepository(table_name="contactflow-test", region_name="us-east-1")
        monkeypatch.setattr(
            api.contact,
            "build_engine",
            lambda _settings: ReconciliationEngine(
                DynamoDBPersistenceChannel(repo), notification_channel, settings
            ),
        )

        status, body = _post(handler, api_gateway_event, valid_submission)

        assert status == 200
        assert body["data"]["persisted"] is True
        assert body["data"]["fallbackUsed"] is False
        stored = repo.get_by_id(body["data"]["submissionId"])
        assert stored.name == "Jane Doe"
        assert notification_channel.calls == 1

    def test_validation_failure(
        self, dynamodb_table, api_gateway_event, fake_engine, persistence_channel, valid_submission
    ):
        """Invalid input returns 422 with every error."""
        from api.contact import handler

        status, body = _post(
            handler,
            api_gateway_event,
            {**valid_submission, "name": "", "message": "hi"},
        )

        assert status == 422
        assert body["success"] is False
        assert "Name is required" in body["error"]
        assert "Message must be at least 10 characters" in body["error"]
        assert persistence_channel.calls == 0

    def test_total_failure_is_503(
        self,
        dynamodb_table,
        api_gateway_event,
        fake_engine,
        persistence_channel,
        notification_channel,
        valid_submission,
    ):
        """When nothing could be delivered the caller gets a direct contact."""
        from api.contact import handler

        persistence_channel.error = "Database connection failed"
        notification_channel.script = ["Email sending failed", "Email sending failed"]

        status, body = _post(handler, api_gateway_event, valid_submission)

        assert status == 503
        assert body["success"] is False
        assert body["error"] == "Email sending failed"
        assert "help@example.com" in body["message"]

    def test_degraded_success_is_200(
        self,
        dynamodb_table,
        api_gateway_event,
        fake_engine,
        persistence_channel,
        valid_submission,
    ):
        """A partial success is still a success for the caller."""
        from api.contact import handler

        persistence_channel.error = "Database connection failed"

        status, body = _post(handler, api_gateway_event, valid_submission)

        assert status == 200
        assert body["data"]["persisted"] is False
        assert body["error"] == "Database connection failed"

    def test_invalid_json(self, dynamodb_table, api_gateway_event):
        """A malformed body is a 400."""
        from api.contact import handler

        status, body = _post(handler, api_gateway_event, "{not json")

        assert status == 400
        assert body["error"] is True

    def test_non_object_body(self, dynamodb_table, api_gateway_event):
        """A JSON array is not a submission."""
        from api.contact import handler

        status, _ = _post(handler, api_gateway_event, "[1, 2]")

        assert status == 400

    def test_honeypot(self, api_gateway_event, monkeypatch, valid_submission):
        """Bots get a fake success and nothing is processed."""
        import api.contact
        from api.contact import handler

        build = MagicMock()
        monkeypatch.setattr(api.contact, "build_engine", build)

        status, body = _post(
            handler, api_gateway_event, {**valid_submission, "website": "http://spam.example"}
        )

        assert status == 200
        assert body["success"] is True
        build.assert_not_called()

    def test_rate_limited(self, dynamodb_table, api_gateway_event, simulated_delivery, valid_submission):
        """The sixth submission in a minute from one IP is refused."""
        from api.contact import handler

        for _ in range(5):
            status, _ = _post(handler, api_gateway_event, valid_submission)
            assert status == 200

        event = api_gateway_event(method="POST", path=CONTACT_PATH, body=valid_submission)
        response = handler(event, None)

        assert response["statusCode"] == 429
        assert "Retry-After" in response["headers"]

    def test_simulation_in_production_is_misconfiguration(
        self, dynamodb_table, api_gateway_event, simulated_delivery, monkeypatch, valid_submission
    ):
        """Production refuses to start with simulated delivery."""
        from api.contact import handler

        monkeypatch.setenv("STAGE", "prod")

        status, body = _post(handler, api_gateway_event, valid_submission)

        assert status == 500
        assert body["error_code"] == "CONFIGURATION_ERROR"

    def test_malformed_timeout_is_misconfiguration(
        self, dynamodb_table, api_gateway_event, monkeypatch, valid_submission
    ):
        """A bad deployment value is a server error, not a client error."""
        from api.contact import handler

        monkeypatch.setenv("CONTACT_CHANNEL_TIMEOUT", "abc")

        status, body = _post(handler, api_gateway_event, valid_submission)

        assert status == 500
        assert body["error_code"] == "CONFIGURATION_ERROR"
        assert body["message"] == "Service misconfigured"


class TestContactStatus:
    """Tests for GET /public/contact/status."""

    @pytest.fixture
    def fake_probe(self, monkeypatch, persistence_channel, notification_channel):
        import api.contact

        monkeypatch.setattr(
            api.contact,
            "build_status_probe",
            lambda _settings: StatusProbe(persistence_channel, notification_channel),
        )

    def _get(self, api_gateway_event) -> tuple[int, dict]:
        from api.contact import handler

        response = handler(api_gateway_event(method="GET", path=STATUS_PATH), None)
        return response["statusCode"], json.loads(response["body"])

    def test_healthy(self, api_gateway_event, fake_probe):
        """Both channels up is healthy."""
        status, body = self._get(api_gateway_event)

        assert status == 200
        assert body["overall"] == "healthy"
        assert body["persistenceUp"] is True

    def test_degraded_is_still_200(self, api_gateway_event, fake_probe, notification_channel):
        """One channel down still accepts submissions."""
        notification_channel.healthy = RuntimeError("relay unreachable")

        status, body = self._get(api_gateway_event)

        assert status == 200
        assert body["overall"] == "degraded"
        assert body["notificationUp"] is False

    def test_down_is_503(self, api_gateway_event, fake_probe, persistence_channel, notification_channel):
        """Both channels down is a 503."""
        persistence_channel.healthy = False
        notification_channel.healthy = False

        status, body = self._get(api_gateway_event)

        assert status == 503
        assert body["overall"] == "down"

    def test_malformed_setting_is_500(self, api_gateway_event, fake_probe, monkeypatch):
        """Status checks report bad deployment values as misconfiguration."""
        monkeypatch.setenv("CONTACT_CHANNEL_TIMEOUT", "ten")

        status, body = self._get(api_gateway_event)

        assert status == 500
        assert body["error_code"] == "CONFIGURATION_ERROR"


class TestRouting:
    """Tests for request routing."""

    def test_unknown_route(self, api_gateway_event):
        """Unknown paths are a 404."""
        from api.contact import handler

        response = handler(api_gateway_event(method="DELETE", path=CONTACT_PATH), None)

        assert response["statusCode"] == 404
