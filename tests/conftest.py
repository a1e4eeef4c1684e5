"""
Pytest configuration and fixtures for tfbackend tests.
"""

import os
import sys
import tempfile
import shutil
import pytest

# Add python directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'python'))


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    tmp = tempfile.mkdtemp(prefix="tfbackend-test-")
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def object_store(temp_dir):
    """Create an ObjectStore rooted at <temp_dir>/states."""
    from tfbackend.objects import ObjectStore
    return ObjectStore(os.path.join(temp_dir, "states"))


@pytest.fixture
def lock_manager(temp_dir):
    """Create a LockManager rooted at <temp_dir>/locks."""
    from tfbackend.locks import LockManager
    return LockManager(os.path.join(temp_dir, "locks"))


@pytest.fixture
def backend_config(temp_dir):
    """Config with auth disabled, storing data in temp_dir."""
    from tfbackend.config import BackendConfig
    return BackendConfig(data_dir=temp_dir)


@pytest.fixture
def client(backend_config):
    """Create a test client for the API server."""
    from fastapi.testclient import TestClient
    from tfbackend.api_server import create_app
    return TestClient(create_app(backend_config))


@pytest.fixture
def sample_lock_info():
    """Sample lock record as Terraform sends it."""
    return {
        "ID": "test-lock-id",
        "Operation": "OperationTypeApply",
        "Info": "",
        "Who": "tester@host",
        "Version": "1.6.0",
        "Created": "2023-10-10T00:00:00Z",
        "Path": "env/prod.tfstate",
    }


@pytest.fixture
def make_lock():
    """Factory building a LockInfo with the given ID."""
    from tfbackend.locks import LockInfo

    def _make(lock_id, **fields):
        data = {
            "ID": lock_id,
            "Operation": "OperationTypePlan",
            "Info": "",
            "Who": f"{lock_id}@host",
            "Version": "1.6.0",
            "Created": "2023-10-10T00:00:00Z",
            "Path": "a.tfstate",
        }
        data.update(fields)
        return LockInfo.model_validate(data)

    return _make


# Pytest markers
def pytest_configure(config):
    config.addinivalue_line("markers", "p0: Priority 0 (critical) tests")
    config.addinivalue_line("markers", "p1: Priority 1 (high) tests")
    config.addinivalue_line("markers", "p2: Priority 2 (medium) tests")
    config.addinivalue_line("markers", "slow: Slow running tests")
    config.addinivalue_line("markers", "integration: Integration tests")
