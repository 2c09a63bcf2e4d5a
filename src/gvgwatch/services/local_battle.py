"""길드 배틀: 단일 서버 내 월드별 성 점령 현황."""

import logging

from gvgwatch.infra.api_client import local_latest_path
from gvgwatch.models import LocalBattleItem, World, format_world, world_from_dict
from gvgwatch.services.collector import BaseCollector, parse_castles

logger = logging.getLogger(__name__)


class LocalBattleCollector(BaseCollector[World, LocalBattleItem]):
    mode = "local"
    index_path = "/worlds"

    def build_targets(self, entries: list[dict]) -> list[World]:
        """localgvg 대상이면서 설정 서버에 속한 월드만."""
        worlds = [world_from_dict(e) for e in entries if "world_id" in e]
        return [
            w for w in worlds if w.localgvg and str(w.world_id).startswith(self._server)
        ]

    def fetch_index(self) -> dict:
        return self._client.get_worlds()

    def fetch_latest(self, target: World) -> dict:
        return self._client.get_local_latest(target.world_id)

    def path_for(self, target: World) -> str:
        return local_latest_path(target.world_id)

    def build_item(self, target: World, body: dict) -> LocalBattleItem | None:
        castles = parse_castles(body)
        if castles is None:
            return None
        return LocalBattleItem(
            wid=target.world_id,
            label=format_world(target.world_id),
            castles=castles,
            timestamp=body.get("timestamp") or 0,
        )
