"""대상 탐색 → 병렬 fetch → 정렬 → 타임스탬프 집계 공통 흐름."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Generic, TypeVar

from gvgwatch.config import AppConfig
from gvgwatch.exceptions import FetchError, IndexFetchError
from gvgwatch.infra.api_client import BattleApiClient
from gvgwatch.models import UNCLAIMED, CastleOwner, RegionSnapshot, aggregate_timestamp
from gvgwatch.services.work_queue import run_queue

logger = logging.getLogger(__name__)

TargetT = TypeVar("TargetT")
ItemT = TypeVar("ItemT")


def guild_display_name(guild_id: int | None, guilds: dict) -> str:
    """길드 이름 조회. 미점령(None/0)은 NPC, 이름 누락은 "ID:<n>"."""
    if not guild_id:
        return UNCLAIMED
    return guilds.get(str(guild_id)) or f"ID:{guild_id}"


def parse_castles(
    body: dict,
    name_format: Callable[[int, str], str] | None = None,
) -> dict[str, CastleOwner] | None:
    """최신 결과 응답 → {castle_id: CastleOwner}. data.castles가 없으면 None."""
    data = body.get("data") if isinstance(body, dict) else None
    if not isinstance(data, dict) or not isinstance(data.get("castles"), list):
        return None

    guilds = data.get("guilds") or {}
    castles: dict[str, CastleOwner] = {}
    for castle in data["castles"]:
        if not isinstance(castle, dict):
            continue
        guild_id = castle.get("GuildId")
        name = guild_display_name(guild_id, guilds)
        if guild_id and name_format:
            name = name_format(guild_id, name)
        castles[str(castle.get("CastleId"))] = CastleOwner(guild_id=guild_id, guild_name=name)
    return castles


class BaseCollector(ABC, Generic[TargetT, ItemT]):
    """한 배틀 모드의 스냅샷 수집기.

    서브클래스는 인덱스 조회/필터, 요청 경로, 결과 라벨링만 정의한다.
    """

    mode: str = ""
    index_path: str = ""  # 로그/에러 메시지용

    def __init__(self, config: AppConfig, client: BattleApiClient) -> None:
        self._config = config
        self._client = client
        self._server = config.server_id

    def collect(self, progress: Callable[[str], None] | None = None) -> RegionSnapshot:
        """인덱스 조회 → 대상별 fetch → 정렬 → RegionSnapshot."""
        logger.info("=== %s (server %s) ===", self.mode, self._server)
        if progress:
            progress(f"Collecting {self.mode} (server {self._server})...")

        targets = self.discover_targets()
        logger.info("%s: %d targets", self.mode, len(targets))

        items: list[ItemT] = run_queue(
            targets,
            self._handle,
            concurrency=self._config.concurrency,
            delay=self._config.request_delay,
            progress=progress,
        )
        items.sort(key=self.sort_key)

        snapshot = RegionSnapshot(items=items, timestamp=aggregate_timestamp(items))
        logger.info(
            "%s: %d/%d targets collected (timestamp=%d)",
            self.mode,
            len(items),
            len(targets),
            snapshot.timestamp,
        )
        return snapshot

    def discover_targets(self) -> list[TargetT]:
        try:
            index = self.fetch_index()
        except FetchError as e:
            raise IndexFetchError(f"{self.mode}: failed to fetch {self.index_path}: {e}") from e
        entries = index.get("data")
        if not isinstance(entries, list):
            raise IndexFetchError(f"{self.mode}: {self.index_path} has no data list")
        return self.build_targets(entries)

    def _handle(self, target: TargetT) -> ItemT | None:
        path = self.path_for(target)
        try:
            body = self.fetch_latest(target)
        except FetchError as e:
            logger.warning("Failed to fetch %s, skipping: %s", path, e)
            return None
        item = self.build_item(target, body)
        if item is None:
            logger.debug("No castle data in %s, skipping", path)
        return item

    # ── 모드별 정의 ──

    @abstractmethod
    def fetch_index(self) -> dict: ...

    @abstractmethod
    def fetch_latest(self, target: TargetT) -> dict: ...

    @abstractmethod
    def build_targets(self, entries: list[dict]) -> list[TargetT]: ...

    @abstractmethod
    def path_for(self, target: TargetT) -> str: ...

    @abstractmethod
    def build_item(self, target: TargetT, body: dict) -> ItemT | None: ...

    @staticmethod
    def sort_key(item) -> tuple:
        return item.sort_key()
