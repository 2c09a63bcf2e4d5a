"""Local → (pause) → Global 수집 및 스냅샷 파일 저장 오케스트레이션."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from pathlib import Path

from gvgwatch.config import AppConfig
from gvgwatch.exceptions import FetchError, StepFailedError
from gvgwatch.infra.api_client import BattleApiClient
from gvgwatch.models import RegionSnapshot, save_snapshot
from gvgwatch.services.collector import BaseCollector
from gvgwatch.services.grand_battle import GrandBattleCollector
from gvgwatch.services.local_battle import LocalBattleCollector

logger = logging.getLogger(__name__)

MODES = ("local", "global")


class SnapshotOrchestrator:
    def __init__(
        self,
        config: AppConfig,
        client: BattleApiClient,
        *,
        collectors: dict[str, BaseCollector] | None = None,
    ) -> None:
        self._config = config
        self._collectors = collectors or {
            "local": LocalBattleCollector(config, client),
            "global": GrandBattleCollector(config, client),
        }

    def output_path(self, mode: str) -> Path:
        if mode == "local":
            return self._config.local_snapshot_path
        if mode == "global":
            return self._config.global_snapshot_path
        raise ValueError(f"Unknown mode: {mode}")

    def run_mode(
        self,
        mode: str,
        progress: Callable[[str], None] | None = None,
    ) -> Path:
        """단일 모드 수집 → 파일 저장. 인덱스 조회 실패 시 StepFailedError."""
        collector = self._collectors[mode]
        try:
            snapshot = collector.collect(progress=progress)
        except FetchError as e:
            raise StepFailedError(mode, e) from e
        return self._write(mode, snapshot, progress)

    def run_all(
        self,
        modes: tuple[str, ...] = MODES,
        progress: Callable[[str], None] | None = None,
    ) -> dict[str, Path]:
        """
        모드를 순서대로 실행. 모드 사이에 mode_pause초 대기하여 API 부하를 줄인다.

        앞선 모드의 파일은 뒤 모드가 실패해도 이미 저장된 상태로 남는다.
        """
        results: dict[str, Path] = {}
        for i, mode in enumerate(modes):
            if i > 0 and self._config.mode_pause > 0:
                logger.debug("Pausing %.1fs before %s", self._config.mode_pause, mode)
                time.sleep(self._config.mode_pause)
            results[mode] = self.run_mode(mode, progress=progress)
        logger.info("=== done: %s ===", ", ".join(f"{m} → {p}" for m, p in results.items()))
        return results

    def _write(
        self,
        mode: str,
        snapshot: RegionSnapshot,
        progress: Callable[[str], None] | None,
    ) -> Path:
        path = self.output_path(mode)
        size = save_snapshot(snapshot, path)
        msg = f"  → {path} ({size / 1024:.1f} KB, {len(snapshot.items)} items)"
        logger.info("Wrote %s (%.1f KB, %d items)", path, size / 1024, len(snapshot.items))
        if progress:
            progress(msg)
        return path
