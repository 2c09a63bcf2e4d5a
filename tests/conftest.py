from pathlib import Path
from unittest.mock import MagicMock

import pytest

from gvgwatch.config import AppConfig
from gvgwatch.exceptions import FetchError
from gvgwatch.infra.api_client import grand_latest_path, local_latest_path

BASE_URL = "https://api.example.com"


@pytest.fixture(autouse=True)
def _use_test_env(monkeypatch):
    """모든 테스트에서 .env 대신 .env.test를 사용하도록 강제."""
    monkeypatch.setattr(
        AppConfig, "model_config", {**AppConfig.model_config, "env_file": ".env.test"}
    )


@pytest.fixture
def tmp_data_dir(tmp_path: Path) -> Path:
    """테스트용 격리된 data 디렉토리."""
    return tmp_path / "data"


@pytest.fixture
def test_config(tmp_data_dir: Path) -> AppConfig:
    """테스트용 AppConfig. 대기 시간은 모두 0."""
    return AppConfig(
        api_base_url=BASE_URL,
        server_id="1",
        concurrency=3,
        request_delay=0,
        max_retries=3,
        retry_backoff=0,
        mode_pause=0,
        data_dir=tmp_data_dir,
    )


@pytest.fixture
def fake_client():
    """path → body(dict) 또는 Exception 매핑으로 BattleApiClient 엔드포인트를 흉내낸다.

    매핑에 없는 path는 FetchError, callable 값은 path를 받아 body를 돌려준다.
    """

    def _make(responses: dict | None = None, default=None) -> MagicMock:
        responses = responses or {}

        def get_json(path, max_retries=None):
            value = responses.get(path, default)
            if callable(value):
                value = value(path)
            if value is None:
                value = FetchError(f"not mocked: {path}")
            if isinstance(value, Exception):
                raise value
            return value

        client = MagicMock()
        client.get_json.side_effect = get_json
        client.get_worlds.side_effect = lambda: get_json("/worlds")
        client.get_world_groups.side_effect = lambda: get_json("/wgroups")
        client.get_local_latest.side_effect = lambda wid: get_json(local_latest_path(wid))
        client.get_grand_latest.side_effect = lambda gid, cls, blk: get_json(
            grand_latest_path(gid, cls, blk)
        )
        return client

    return _make
