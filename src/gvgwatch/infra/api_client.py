"""Battle statistics API HTTP client with linear-backoff retry."""

import logging
import time

import httpx

from gvgwatch.exceptions import FetchError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.mentemori.icu"
MAX_RETRIES = 3
RETRY_BACKOFF = 1.0
REQUEST_TIMEOUT = 30.0


class BattleApiClient:
    """Memento Mori 통계 API 클라이언트.

    응답 본문의 ``status`` 필드가 200일 때만 성공으로 본다. 네트워크 오류,
    HTTP 오류, JSON 파싱 실패, status 불일치는 모두 실패한 시도로 간주하고
    ``retry_backoff * attempt`` 초 대기 후 재시도한다.

    httpx.Client는 thread-safe하므로 하나의 인스턴스를 여러 worker가 공유한다.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        max_retries: int = MAX_RETRIES,
        retry_backoff: float = RETRY_BACKOFF,
        timeout: float = REQUEST_TIMEOUT,
    ) -> None:
        if max_retries < 1:
            raise ValueError("max_retries must be >= 1")
        self._base_url = base_url.rstrip("/")
        self._max_retries = max_retries
        self._retry_backoff = retry_backoff
        self._client = httpx.Client(
            base_url=self._base_url,
            headers={"Accept": "application/json"},
            timeout=timeout,
            follow_redirects=True,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    # ── Public API ──

    def get_worlds(self) -> dict:
        """월드 인덱스. data: [{world_id, localgvg, ...}]"""
        return self.get_json("/worlds")

    def get_world_groups(self) -> dict:
        """월드 그룹 인덱스. data: [{group_id, worlds, globalgvg, ...}]"""
        return self.get_json("/wgroups")

    def get_local_latest(self, world_id: int) -> dict:
        """월드 단위 길드 배틀 최신 결과."""
        return self.get_json(local_latest_path(world_id))

    def get_grand_latest(self, group_id: int, class_id: int, block: int) -> dict:
        """그랜드 배틀 (그룹, 클래스, 블록) 최신 결과."""
        return self.get_json(grand_latest_path(group_id, class_id, block))

    def get_json(self, path: str, max_retries: int | None = None) -> dict:
        """GET → JSON. status=200 응답을 반환하고, 재시도 소진 시 FetchError."""
        retries = max_retries if max_retries is not None else self._max_retries
        last_error: Exception | None = None

        for attempt in range(1, retries + 1):
            try:
                logger.debug("Request: GET %s (attempt %d/%d)", path, attempt, retries)
                response = self._client.get(path)
                logger.debug("Response: GET %s → %d", path, response.status_code)

                if response.status_code == 503:
                    raise FetchError("Service unavailable (503)")
                if response.status_code >= 400:
                    raise FetchError(f"HTTP {response.status_code}")

                body = response.json()
                status = body.get("status") if isinstance(body, dict) else None
                if status == 200:
                    return body
                raise FetchError(f"Unexpected status field: {status!r}")

            except (httpx.HTTPError, ValueError, FetchError) as e:
                last_error = e
                logger.warning(
                    "retry %d/%d: %s%s (%s)",
                    attempt,
                    retries,
                    self._base_url,
                    path,
                    e,
                )

            if attempt < retries:
                time.sleep(self._retry_backoff * attempt)

        raise FetchError(f"Request failed after {retries} attempts: {path}") from last_error


def local_latest_path(world_id: int) -> str:
    return f"/{world_id}/localgvg/latest"


def grand_latest_path(group_id: int, class_id: int, block: int) -> str:
    return f"/wg/{group_id}/globalgvg/{class_id}/{block}/latest"
