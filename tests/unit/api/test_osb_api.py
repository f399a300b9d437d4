"""Tests for the OSB HTTP surface."""

import pytest
from fastapi.testclient import TestClient

from chartbroker.api.server import create_fastapi_app
from chartbroker.application.services.broker_service import ServiceBroker
from chartbroker.infrastructure.monitoring.metrics import MetricsCollector

HEADERS = {"X-Broker-API-Version": "2.14"}
PROVISION_BODY = {
    "service_id": "redis",
    "plan_id": "redis-5-0-7",
    "context": {"namespace": "ns"},
    "organization_guid": "ignored",
}
BIND_BODY = {"service_id": "redis", "plan_id": "redis-5-0-7"}


@pytest.fixture
def metrics():
    return MetricsCollector()


@pytest.fixture
def client(lifecycle, catalog_service, metrics):
    app = create_fastapi_app(ServiceBroker(lifecycle, catalog_service), metrics)
    return TestClient(app, raise_server_exceptions=False)


@pytest.mark.api
class TestOSBApi:
    """Test status codes and bodies of the broker endpoints."""

    def test_version_header_is_required(self, client):
        response = client.get("/v2/catalog")

        assert response.status_code == 412
        assert "X-Broker-API-Version" in response.json()["description"]

    def test_catalog(self, client):
        response = client.get("/v2/catalog", headers=HEADERS)

        assert response.status_code == 200
        redis = next(s for s in response.json()["services"] if s["id"] == "redis")
        assert [p["name"] for p in redis["plans"]] == ["5-0-7", "5-0-5"]
        assert "chart_name" not in redis["plans"][0]

    def test_provision_lifecycle(self, client, background_runner):
        created = client.put("/v2/service_instances/i1", json=PROVISION_BODY, headers=HEADERS)
        assert created.status_code == 201
        assert created.json() == {}

        conflict = client.put("/v2/service_instances/i1", json=PROVISION_BODY, headers=HEADERS)
        assert conflict.status_code == 409
        assert conflict.json()["error"] == "ConcurrencyError"

        polled = client.get("/v2/service_instances/i1/last_operation", headers=HEADERS)
        assert polled.status_code == 200
        assert polled.json()["state"] == "succeeded"

        deleted = client.delete(
            "/v2/service_instances/i1", params={"service_id": "redis", "plan_id": "redis-5-0-7"}, headers=HEADERS
        )
        assert deleted.status_code == 200
        assert deleted.json() == {}

        gone = client.delete("/v2/service_instances/i1", headers=HEADERS)
        assert gone.status_code == 410

    def test_async_provision_and_stale_token(self, client, background_runner):
        accepted = client.put(
            "/v2/service_instances/i1", params={"accepts_incomplete": "true"}, json=PROVISION_BODY, headers=HEADERS
        )
        assert accepted.status_code == 202
        token = accepted.json()["operation"]
        background_runner.wait("i1", 5)

        ok = client.get("/v2/service_instances/i1/last_operation", params={"operation": token}, headers=HEADERS)
        assert ok.json()["state"] == "succeeded"

        stale = client.get(
            "/v2/service_instances/i1/last_operation", params={"operation": "provision-stale"}, headers=HEADERS
        )
        assert stale.status_code == 409

    def test_provision_validation(self, client):
        missing_plan = client.put("/v2/service_instances/i1", json={"service_id": "redis"}, headers=HEADERS)
        assert missing_plan.status_code == 400

        unknown_plan = client.put(
            "/v2/service_instances/i1", json={**PROVISION_BODY, "plan_id": "nope"}, headers=HEADERS
        )
        assert unknown_plan.status_code == 400
        assert "unknown plan" in unknown_plan.json()["description"]

        no_namespace = client.put("/v2/service_instances/i1", json={**PROVISION_BODY, "context": {}}, headers=HEADERS)
        assert no_namespace.status_code == 400

    def test_update_is_a_no_op(self, client):
        response = client.patch("/v2/service_instances/i1", json={"service_id": "redis"}, headers=HEADERS)

        assert response.status_code == 200
        assert response.json() == {}

    def test_binding_lifecycle(self, client):
        client.put("/v2/service_instances/i1", json=PROVISION_BODY, headers=HEADERS)
        url = "/v2/service_instances/i1/service_bindings/b1"

        created = client.put(url, json=BIND_BODY, headers=HEADERS)
        assert created.status_code == 201
        assert created.json()["credentials"]["password"] == "pw123"

        replayed = client.put(url, json=BIND_BODY, headers=HEADERS)
        assert replayed.status_code == 200

        changed = client.put(url, json={**BIND_BODY, "parameters": {"x": "y"}}, headers=HEADERS)
        assert changed.status_code == 409

        fetched = client.get(url, headers=HEADERS)
        assert fetched.status_code == 200
        assert fetched.json()["parameters"] == {}

        state = client.get(f"{url}/last_operation", headers=HEADERS)
        assert state.json() == {"state": "succeeded"}

        removed = client.delete(url, headers=HEADERS)
        assert (removed.status_code, removed.json()) == (200, {})
        assert client.get(url, headers=HEADERS).status_code == 404
        assert client.delete(url, headers=HEADERS).status_code == 410

    def test_async_bind(self, client, background_runner):
        client.put("/v2/service_instances/i1", json=PROVISION_BODY, headers=HEADERS)
        url = "/v2/service_instances/i1/service_bindings/b1"

        accepted = client.put(url, params={"accepts_incomplete": "true"}, json=BIND_BODY, headers=HEADERS)
        assert accepted.status_code == 202
        assert accepted.json()["operation"].startswith("bind-")
        background_runner.wait("i1/b1", 5)

        assert client.get(f"{url}/last_operation", headers=HEADERS).json()["state"] == "succeeded"

    def test_bind_to_unknown_instance(self, client):
        response = client.put("/v2/service_instances/nope/service_bindings/b1", json=BIND_BODY, headers=HEADERS)

        assert response.status_code == 404

    def test_health_and_metrics(self, client, metrics):
        assert client.get("/healthz").json()["status"] == "ok"
        client.get("/v2/catalog", headers=HEADERS)

        response = client.get("/metrics")

        assert response.status_code == 200
        assert "chartbroker_http_request_seconds" in response.text
        assert metrics.counter_value("http.get_200_total") >= 1
