"""
Unit tests for API Server router endpoints.
"""

import json
import os
import pytest

from tfbackend.api_server import LOCK_OPERATIONS, STATE_OPERATIONS


def lock_body(lock_id, **fields):
    data = {
        "ID": lock_id,
        "Operation": "OperationTypePlan",
        "Info": "",
        "Who": f"{lock_id}@host",
        "Version": "1.6.0",
        "Created": "2023-10-10T00:00:00Z",
        "Path": "",
    }
    data.update(fields)
    return json.dumps(data)


class TestHealthEndpoint:
    """Tests for GET /health endpoint."""

    @pytest.mark.p0
    def test_health_returns_ok(self, client):
        """Test health endpoint returns status healthy."""
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestOperationTables:
    """Tests for the verb-to-operation tables."""

    @pytest.mark.p1
    def test_state_verbs(self):
        assert set(STATE_OPERATIONS) == {"GET", "POST", "PUT", "DELETE"}
        assert STATE_OPERATIONS["POST"] is STATE_OPERATIONS["PUT"]

    @pytest.mark.p1
    def test_lock_verbs(self):
        assert set(LOCK_OPERATIONS) == {"LOCK", "POST", "PUT", "UNLOCK", "DELETE"}
        assert LOCK_OPERATIONS["LOCK"] is LOCK_OPERATIONS["POST"] is LOCK_OPERATIONS["PUT"]
        assert LOCK_OPERATIONS["UNLOCK"] is LOCK_OPERATIONS["DELETE"]


class TestStatesEndpoint:
    """Tests for /states/{path}."""

    @pytest.mark.p0
    def test_get_missing_state(self, client):
        response = client.get("/states/missing.tfstate")

        assert response.status_code == 404

    @pytest.mark.p0
    @pytest.mark.parametrize("method", ["POST", "PUT"])
    def test_write_then_read(self, client, method):
        response = client.request(method, "/states/a.tfstate", content=b'{"version":1}')
        assert response.status_code == 200

        response = client.get("/states/a.tfstate")
        assert response.status_code == 200
        assert response.content == b'{"version":1}'

    @pytest.mark.p0
    def test_write_stores_under_states_dir(self, client, temp_dir):
        client.put("/states/env/prod.tfstate", content=b"data")

        with open(f"{temp_dir}/states/env/prod.tfstate", "rb") as f:
            assert f.read() == b"data"

    @pytest.mark.p0
    def test_delete_state(self, client):
        client.put("/states/a.tfstate", content=b"data")

        assert client.delete("/states/a.tfstate").status_code == 200
        assert client.delete("/states/a.tfstate").status_code == 404
        assert client.get("/states/a.tfstate").status_code == 404

    @pytest.mark.p1
    def test_write_ignores_locks(self, client):
        """State writes do not check lock ownership."""
        client.request("LOCK", "/locks/a.tfstate", content=lock_body("x"))

        assert client.put("/states/a.tfstate", content=b"data").status_code == 200

    @pytest.mark.p1
    def test_read_directory_is_server_error(self, client):
        client.put("/states/env/a.tfstate", content=b"data")

        response = client.get("/states/env")

        assert response.status_code == 500

    @pytest.mark.p1
    def test_empty_path_rejected(self, client):
        response = client.put("/states/", content=b"data")

        assert response.status_code == 400

    @pytest.mark.p1
    @pytest.mark.parametrize("method", ["GET", "PUT", "DELETE"])
    def test_nul_byte_path_rejected(self, client, method):
        response = client.request(method, "/states/a%00b", content=b"data")

        assert response.status_code == 400

    @pytest.mark.p0
    @pytest.mark.parametrize("method", ["PATCH", "LOCK", "UNLOCK", "OPTIONS", "HEAD"])
    def test_method_not_allowed(self, client, method):
        response = client.request(method, "/states/a.tfstate")

        assert response.status_code == 405


class TestLocksEndpoint:
    """Tests for /locks/{path}."""

    @pytest.mark.p0
    @pytest.mark.parametrize("method", ["LOCK", "POST", "PUT"])
    def test_acquire(self, client, temp_dir, method):
        response = client.request(method, "/locks/a.tfstate", content=lock_body("x"))

        assert response.status_code == 200
        with open(f"{temp_dir}/locks/a.tfstate") as f:
            assert json.load(f)["ID"] == "x"

    @pytest.mark.p0
    def test_acquire_conflict(self, client):
        client.request("LOCK", "/locks/a.tfstate", content=lock_body("x"))

        response = client.request("LOCK", "/locks/a.tfstate", content=lock_body("y"))

        assert response.status_code == 423
        assert response.headers["content-type"].startswith("application/json")
        assert '"ID":"x"' in response.text
        assert response.json()["Who"] == "x@host"

    @pytest.mark.p0
    @pytest.mark.parametrize("method", ["UNLOCK", "DELETE"])
    def test_release(self, client, method):
        client.request("LOCK", "/locks/a.tfstate", content=lock_body("x"))

        response = client.request(method, "/locks/a.tfstate", content=lock_body("x"))

        assert response.status_code == 200
        assert client.request("LOCK", "/locks/a.tfstate", content=lock_body("y")).status_code == 200

    @pytest.mark.p0
    def test_release_mismatch(self, client):
        client.request("LOCK", "/locks/a.tfstate", content=lock_body("x"))

        response = client.request("UNLOCK", "/locks/a.tfstate", content=lock_body("y"))

        assert response.status_code == 409
        assert response.json()["ID"] == "x"

    @pytest.mark.p0
    def test_release_not_locked(self, client):
        response = client.request("UNLOCK", "/locks/a.tfstate", content=lock_body("x"))

        assert response.status_code == 404

    @pytest.mark.p0
    @pytest.mark.parametrize("method", ["LOCK", "UNLOCK"])
    def test_malformed_body(self, client, temp_dir, method):
        response = client.request(method, "/locks/a.tfstate", content=b"{not json")

        assert response.status_code == 500
        assert response.headers["content-type"].startswith("text/plain")
        assert "lock info" in response.text
        assert not os.path.exists(f"{temp_dir}/locks/a.tfstate")

    @pytest.mark.p1
    def test_malformed_body_on_held_lock_is_decode_error(self, client):
        """Decoding happens before the lock state is consulted."""
        client.request("LOCK", "/locks/a.tfstate", content=lock_body("x"))

        response = client.request("LOCK", "/locks/a.tfstate", content=b"")

        assert response.status_code == 500
        assert "lock info" in response.text
        response = client.request("LOCK", "/locks/a.tfstate", content=lock_body("y"))
        assert response.json()["ID"] == "x"

    @pytest.mark.p1
    @pytest.mark.parametrize("method", ["LOCK", "UNLOCK"])
    def test_nul_byte_path_rejected(self, client, method):
        response = client.request(method, "/locks/a%00b", content=lock_body("x"))

        assert response.status_code == 400

    @pytest.mark.p0
    @pytest.mark.parametrize("method", ["GET", "PATCH", "OPTIONS"])
    def test_method_not_allowed(self, client, method):
        response = client.request(method, "/locks/a.tfstate")

        assert response.status_code == 405
        assert response.text == "Method not allowed"

    @pytest.mark.p1
    def test_lock_cannot_reach_state_tree(self, client, temp_dir):
        """Dot segments are resolved inside the locks namespace."""
        response = client.request("LOCK", "/locks/..%2Fstates%2Fa.tfstate", content=lock_body("x"))

        assert response.status_code == 200
        assert client.get("/states/a.tfstate").status_code == 404
