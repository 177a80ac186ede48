"""Runs the smoke-test checks in-process against the app."""

import importlib.util
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from runway.web.app import create_app

SCRIPT = Path(__file__).resolve().parents[1] / "scripts" / "smoke_test.py"


@pytest.fixture(scope="module")
def smoke():
    spec = importlib.util.spec_from_file_location("runway_smoke_test", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings)) as c:
        yield c


class TestSmokeChecks:
    def test_all_checks_pass(self, smoke, client):
        failures = [(name, reason) for name, reason in smoke.run_all(client) if reason]
        assert failures == []

    def test_status_mismatch_reported(self, smoke, client):
        check = smoke.Check("wrong status", "/api/v1/health", status=404)
        assert smoke.run_check(client, check) == "got 200, expected 404"

    def test_malformed_body_reported(self, smoke, client):
        check = smoke.Check("missing key", "/api/v1/health", verify=lambda body: body["nope"])
        assert smoke.run_check(client, check).startswith("unexpected body")

    def test_decline_consistency(self, smoke, client):
        assert smoke.check_decline_consistency(client, 6.0) is None
        assert smoke.check_decline_consistency(client, 9.0) is None
