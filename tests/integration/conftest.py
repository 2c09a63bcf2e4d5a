"""Integration fixtures — 전체 API를 respx로 흉내낸다."""

import pytest
import respx

from gvgwatch.infra.api_client import BattleApiClient


@pytest.fixture(autouse=True)
def _no_sleep(monkeypatch):
    monkeypatch.setattr("gvgwatch.infra.api_client.time.sleep", lambda _: None)
    monkeypatch.setattr("gvgwatch.services.work_queue.time.sleep", lambda _: None)
    monkeypatch.setattr("gvgwatch.services.orchestrator.time.sleep", lambda _: None)


@pytest.fixture
def api(test_config):
    with respx.mock(base_url=test_config.api_base_url, assert_all_called=False) as mock:
        yield mock


@pytest.fixture
def client(test_config):
    with BattleApiClient(
        test_config.api_base_url,
        max_retries=test_config.max_retries,
        retry_backoff=test_config.retry_backoff,
    ) as c:
        yield c
