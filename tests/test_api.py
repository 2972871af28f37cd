import json

import yaml

from log_ingestor.app import create_app
from log_ingestor.config import Config


class TestHealthEndpoint:
    def test_health_returns_ok(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        data = resp.get_json()
        assert data["status"] == "ok"
        assert data["total_logs"] == 0
        assert "validation_stats" in data

    def test_health_counts_ingested(self, client, sample_log):
        for _ in range(3):
            client.post("/ingest", json=sample_log)
        assert client.get("/health").get_json()["total_logs"] == 3


class TestIngest:
    def test_valid_log_accepted(self, client, store, sample_log):
        resp = client.post("/ingest", json=sample_log)
        assert resp.status_code == 200
        assert resp.data == b""
        assert store.count == 1

    def test_body_without_content_type(self, client, store):
        resp = client.post("/ingest", data='{"level": "info"}')
        assert resp.status_code == 200
        assert store.count == 1

    def test_malformed_json_rejected(self, client, store):
        resp = client.post("/ingest", data="{not json", content_type="application/json")
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "Error decoding JSON"
        assert store.count == 0

    def test_empty_body_rejected(self, client):
        resp = client.post("/ingest", data="", content_type="application/json")
        assert resp.status_code == 400

    def test_bad_timestamp_rejected(self, client, store, sample_log):
        sample_log["timestamp"] = "15/09/2023"
        resp = client.post("/ingest", json=sample_log)
        assert resp.status_code == 400
        assert "timestamp" in resp.get_json()["error"]
        assert store.count == 0

    def test_wrong_type_rejected(self, client, store, sample_log):
        sample_log["spanId"] = 456
        resp = client.post("/ingest", json=sample_log)
        assert resp.status_code == 400
        data = resp.get_json()
        assert data["status"] == "error"
        assert len(data["errors"]) == 1
        assert store.count == 0

    def test_get_not_allowed(self, client):
        assert client.get("/ingest").status_code == 405


class TestQuery:
    def _ingest_all(self, client, logs):
        for log in logs:
            assert client.post("/ingest", json=log).status_code == 200

    def test_empty_store_returns_empty_list(self, client):
        resp = client.post("/query", json={})
        assert resp.status_code == 200
        assert resp.get_json() == []

    def test_round_trip_preserves_fields(self, client, sample_log):
        client.post("/ingest", json=sample_log)
        resp = client.post("/query", json={"traceId": "abc-xyz-123"})
        assert resp.get_json() == [sample_log]

    def test_scenario(self, client, scenario_logs):
        self._ingest_all(client, scenario_logs)

        def messages(filters):
            return [r["message"] for r in client.post("/query", json=filters).get_json()]

        assert messages({}) == ["disk full", "ok", "Failed to connect"]
        assert messages({"level": "error"}) == ["disk full", "Failed to connect"]
        assert messages({"message": "Failed to connect"}) == ["Failed to connect"]
        assert messages({"resourceId": "r1"}) == ["disk full", "ok"]
        assert messages({"timestamp": "2023-09-10T00:00:00Z"}) == ["disk full", "ok"]
        assert messages({"bogus": "v"}) == messages({})

    def test_nested_key(self, client, sample_log):
        client.post("/ingest", json=sample_log)
        hit = client.post("/query", json={"metadata.parentResourceId": "server-0987"})
        miss = client.post("/query", json={"metadata.parentResourceId": "server-1234"})
        assert len(hit.get_json()) == 1
        assert miss.get_json() == []

    def test_missing_fields_serialised_as_zero_values(self, client):
        client.post("/ingest", json={"message": "bare"})
        record = client.post("/query", json={}).get_json()[0]
        assert record["level"] == ""
        assert record["timestamp"] == "0001-01-01T00:00:00Z"
        assert record["metadata"] == {"parentResourceId": ""}

    def test_non_string_filter_rejected(self, client):
        resp = client.post("/query", json={"level": 1})
        assert resp.status_code == 400

    def test_malformed_json_rejected(self, client):
        resp = client.post("/query", data="[", content_type="application/json")
        assert resp.status_code == 400

    def test_get_not_allowed(self, client):
        assert client.get("/query").status_code == 405


class TestNullValues:
    def test_null_fields_stored_as_zero_values(self, client, store):
        resp = client.post("/ingest", json={"level": None, "message": "x", "timestamp": None})
        assert resp.status_code == 200
        record = client.post("/query", json={}).get_json()[0]
        assert record["level"] == ""
        assert record["message"] == "x"
        assert record["timestamp"] == "0001-01-01T00:00:00Z"

    def test_null_metadata(self, client, store):
        resp = client.post("/ingest", json={"message": "x", "metadata": None})
        assert resp.status_code == 200
        assert store.count == 1
        record = client.post("/query", json={}).get_json()[0]
        assert record["metadata"] == {"parentResourceId": ""}

    def test_null_parent_resource_id(self, client, store):
        resp = client.post("/ingest", json={"metadata": {"parentResourceId": None}})
        assert resp.status_code == 200
        assert store.count == 1

    def test_null_body_ingests_empty_record(self, client, store):
        resp = client.post("/ingest", data="null", content_type="application/json")
        assert resp.status_code == 200
        assert store.count == 1
        assert client.post("/query", json={}).get_json()[0]["message"] == ""

    def test_null_filter_value_matches_empty_field(self, client):
        client.post("/ingest", json={"message": "no level"})
        client.post("/ingest", json={"level": "error", "message": "has level"})
        resp = client.post("/query", json={"level": None})
        assert resp.status_code == 200
        assert [r["message"] for r in resp.get_json()] == ["no level"]

    def test_null_query_body_returns_everything(self, client, scenario_logs):
        for log in scenario_logs:
            client.post("/ingest", json=log)
        resp = client.post("/query", data="null", content_type="application/json")
        assert resp.status_code == 200
        assert len(resp.get_json()) == 3


class TestSchemaPaths:
    def test_custom_record_schema(self, tmp_path, store):
        schema = {"type": "object", "required": ["level"]}
        schema_path = tmp_path / "strict.json"
        schema_path.write_text(json.dumps(schema))
        config_path = tmp_path / "config.yaml"
        config_path.write_text(yaml.dump({"schema": {"record_path": str(schema_path)}}))

        app = create_app(config=Config(str(config_path), environ={}), store=store)
        client = app.test_client()

        assert client.post("/ingest", json={"message": "x"}).status_code == 400
        assert client.post("/ingest", json={"level": "info"}).status_code == 200
        assert store.count == 1
