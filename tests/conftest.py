"""
Shared fixtures for the bridge script tests
"""

import json
from unittest.mock import Mock

import pytest
import requests

from bridge_engine import BridgeContext, Company, Config, RunReport, RunState
from hudu_client import HuduClient


def make_response(status_code=200, json_data=None, url="https://example.test/api"):
    """Build a real requests.Response so raise_for_status behaves as in production"""
    response = requests.Response()
    response.status_code = status_code
    response.url = url
    response._content = json.dumps(json_data).encode() if json_data is not None else b""
    return response


@pytest.fixture
def hudu():
    """Hudu client double with nothing found and every create succeeding"""
    client = Mock(spec=HuduClient)
    client.find_asset_layout.return_value = None
    client.find_assets.return_value = []
    client.find_folders.return_value = []
    return client


@pytest.fixture
def company():
    return Company(id=7, name="Acme Corp", id_number="4821")


@pytest.fixture
def executing_report():
    """Report already advanced to Executing, as run_bridge hands it to executors"""
    report = RunReport("test run")
    for state in (RunState.CREDENTIALS_ACQUIRED, RunState.ORG_RESOLVED,
                  RunState.SESSION_CONFIGURED, RunState.EXECUTING):
        report.transition(state)
    return report


@pytest.fixture
def context(hudu, company):
    return BridgeContext(config=Config(), company=company, hudu=hudu)
