"""그랜드 배틀: 월드 그룹 × 클래스 × 블록별 성 점령 현황."""

import logging

from gvgwatch.infra.api_client import grand_latest_path
from gvgwatch.models import (
    BLOCK_NAMES,
    CLASS_NAMES,
    GRAND_BLOCKS,
    GRAND_CLASSES,
    GrandBattleItem,
    GrandTarget,
    format_world,
    guild_home_world,
    server_of,
    world_group_from_dict,
)
from gvgwatch.services.collector import BaseCollector, parse_castles

logger = logging.getLogger(__name__)


def _with_home_world(guild_id: int, name: str) -> str:
    return f"{name} ({guild_home_world(guild_id)})"


def grand_label(target: GrandTarget) -> str:
    """예: "JP G12 Grand Master C"."""
    return (
        f"{target.group.server_name} G{target.group.group_id} "
        f"{CLASS_NAMES[target.class_id]} {BLOCK_NAMES[target.block]}"
    )


class GrandBattleCollector(BaseCollector[GrandTarget, GrandBattleItem]):
    mode = "global"
    index_path = "/wgroups"

    def build_targets(self, entries: list[dict]) -> list[GrandTarget]:
        groups = [world_group_from_dict(e) for e in entries if "group_id" in e]
        eligible = [
            g for g in groups if g.globalgvg and g.worlds and server_of(g.worlds[0]) == self._server
        ]
        logger.debug("%d/%d world groups eligible", len(eligible), len(groups))
        return [
            GrandTarget(group=g, class_id=c, block=b)
            for g in eligible
            for c in GRAND_CLASSES
            for b in GRAND_BLOCKS
        ]

    def fetch_index(self) -> dict:
        return self._client.get_world_groups()

    def fetch_latest(self, target: GrandTarget) -> dict:
        return self._client.get_grand_latest(target.group.group_id, target.class_id, target.block)

    def path_for(self, target: GrandTarget) -> str:
        return grand_latest_path(target.group.group_id, target.class_id, target.block)

    def build_item(self, target: GrandTarget, body: dict) -> GrandBattleItem | None:
        castles = parse_castles(body, name_format=_with_home_world)
        if castles is None:
            return None
        group = target.group
        return GrandBattleItem(
            label=grand_label(target),
            gid=group.group_id,
            cls=target.class_id,
            blk=target.block,
            sn=group.server_name,
            wds=", ".join(format_world(w) for w in group.worlds),
            castles=castles,
            timestamp=body.get("timestamp") or 0,
        )
