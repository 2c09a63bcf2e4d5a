"""수집 대상/결과 데이터 모델 및 직렬화 유틸리티."""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path

from gvgwatch.exceptions import StorageError

# ── 표시용 이름 테이블 ──

SERVER_NAMES: dict[str, str] = {
    "1": "JP",
    "2": "KR",
    "3": "Asia",
    "4": "NA",
    "5": "EU",
    "6": "Global",
}

CLASS_NAMES: dict[int, str] = {1: "Elite", 2: "Expert", 3: "Grand Master"}

BLOCK_NAMES: dict[int, str] = {0: "A", 1: "B", 2: "C", 3: "D"}

GRAND_CLASSES = (1, 2, 3)
GRAND_BLOCKS = (0, 1, 2, 3)

UNCLAIMED = "NPC"


def format_world(world_id: int | str) -> str:
    """world_id → 서버 내 월드 번호. 1023 → "23"."""
    return str(int(str(world_id)[1:]))


def guild_home_world(guild_id: int | str) -> str:
    """guild_id 끝 3자리 = 길드 소속 월드 번호. 1234023 → "23"."""
    return str(int(str(guild_id)[-3:]))


def server_of(world_id: int | str) -> str:
    """world_id 첫 자리 = 서버 식별자."""
    return str(world_id)[:1]


def server_name(world_id: int | str) -> str:
    return SERVER_NAMES.get(server_of(world_id), "?")


# ── 수집 대상 (Target) ──


@dataclass(frozen=True)
class World:
    """/worlds 인덱스의 단일 월드."""

    world_id: int
    localgvg: bool = False


@dataclass(frozen=True)
class WorldGroup:
    """/wgroups 인덱스의 월드 그룹."""

    group_id: int
    worlds: tuple[int, ...]
    globalgvg: bool = False

    @property
    def server_name(self) -> str:
        return server_name(self.worlds[0]) if self.worlds else "?"


@dataclass(frozen=True)
class GrandTarget:
    """그랜드 배틀 수집 단위: (그룹, 클래스, 블록)."""

    group: WorldGroup
    class_id: int
    block: int


def world_from_dict(d: dict) -> World:
    return World(world_id=int(d["world_id"]), localgvg=bool(d.get("localgvg")))


def world_group_from_dict(d: dict) -> WorldGroup:
    return WorldGroup(
        group_id=int(d["group_id"]),
        worlds=tuple(int(w) for w in d.get("worlds") or ()),
        globalgvg=bool(d.get("globalgvg")),
    )


# ── 수집 결과 (CastleSnapshot / RegionSnapshot) ──


@dataclass
class CastleOwner:
    """성 하나의 점령 길드. 미점령이면 guild_id=None, guild_name="NPC"."""

    guild_id: int | None
    guild_name: str

    def to_dict(self) -> dict:
        return {"guildId": self.guild_id, "guildName": self.guild_name}


@dataclass
class LocalBattleItem:
    """길드 배틀(단일 월드) 결과 1건."""

    wid: int
    label: str
    castles: dict[str, CastleOwner] = field(default_factory=dict)
    timestamp: int = 0

    def sort_key(self) -> tuple:
        return (self.wid,)

    def to_dict(self) -> dict:
        return {
            "wid": self.wid,
            "label": self.label,
            "castles": {cid: owner.to_dict() for cid, owner in self.castles.items()},
            "timestamp": self.timestamp,
        }


@dataclass
class GrandBattleItem:
    """그랜드 배틀 (그룹, 클래스, 블록) 결과 1건."""

    label: str
    gid: int
    cls: int
    blk: int
    sn: str  # 그룹 첫 월드의 서버 이름
    wds: str  # 소속 월드 번호 목록 "1, 2, 3"
    castles: dict[str, CastleOwner] = field(default_factory=dict)
    timestamp: int = 0

    def sort_key(self) -> tuple:
        return (self.sn, self.gid, self.cls, self.blk)

    def to_dict(self) -> dict:
        return {
            "label": self.label,
            "gid": self.gid,
            "cls": self.cls,
            "blk": self.blk,
            "sn": self.sn,
            "wds": self.wds,
            "castles": {cid: owner.to_dict() for cid, owner in self.castles.items()},
            "timestamp": self.timestamp,
        }


@dataclass
class RegionSnapshot:
    """한 모드의 최종 산출물. items는 정렬된 상태로 보관한다."""

    items: list = field(default_factory=list)
    timestamp: int = 0

    def to_dict(self) -> dict:
        return {"items": [item.to_dict() for item in self.items], "timestamp": self.timestamp}


def aggregate_timestamp(items: list) -> int:
    """item timestamp 최댓값. 비어 있으면 0, 음수/누락은 0으로 취급."""
    return max([0, *(item.timestamp or 0 for item in items)])


# ── 직렬화 유틸리티 ──


def save_snapshot(snapshot: RegionSnapshot, path: Path) -> int:
    """RegionSnapshot을 compact JSON으로 저장 (tmp 파일 → rename). 기록한 바이트 수 반환."""
    payload = json.dumps(snapshot.to_dict(), ensure_ascii=False, separators=(",", ":"))
    encoded = payload.encode("utf-8")
    tmp = path.with_suffix(path.suffix + ".tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(tmp, "wb") as f:
            f.write(encoded)
        os.replace(tmp, path)
    except OSError as e:
        raise StorageError(f"Failed to write snapshot {path}: {e}") from e
    return len(encoded)

