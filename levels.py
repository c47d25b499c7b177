from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from schema import DEFAULT_CONFIG, DifficultyLevel, GameConfig, OPERATIONS

_BASE = Path(__file__).resolve().parent
_LEVELS_JSON = _BASE / "data" / "levels.json"

CATEGORIES = {
    "Beginner (1-5)": (1, 5),
    "Intermediate (6-10)": (6, 10),
    "Advanced (11-15)": (11, 15),
    "Expert (16-20)": (16, 20),
    "Master (21-25)": (21, 25),
    "Grandmaster (26-30)": (26, 30),
    "Special Challenges (31-39)": (31, 39),
}


def _expand_ops(raw: Dict[str, Any]) -> Dict[str, Any]:
    # [enabled, frequency, min, max] -> OperationConfig fields
    out = dict(raw)
    ops = out.pop("ops", {})
    out["operations"] = {
        op: dict(zip(("enabled", "frequency", "min_value", "max_value"), ops.get(op, [])))
        for op in OPERATIONS
    }
    return out


class LevelTable:
    _levels: List[DifficultyLevel] = []

    @classmethod
    def load(cls) -> List[DifficultyLevel]:
        if not cls._levels:
            cls.reload()
        return cls._levels

    @classmethod
    def reload(cls, path: Path = _LEVELS_JSON) -> int:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)

        levels: List[DifficultyLevel] = []
        bad = []
        for raw in data:
            try:
                levels.append(DifficultyLevel(**_expand_ops(raw)))
            except ValidationError:
                bad.append(raw.get("id"))
        if bad:
            raise RuntimeError(f"Invalid difficulty levels in {path.name}: {bad}")

        cls._levels = sorted(levels, key=lambda lv: lv.id)
        return len(cls._levels)


# Public API
def get_levels() -> List[DifficultyLevel]:
    return list(LevelTable.load())


def get_level(level_id: int) -> Optional[DifficultyLevel]:
    return next((lv for lv in LevelTable.load() if lv.id == level_id), None)


def get_recommended_levels() -> List[DifficultyLevel]:
    return [lv for lv in LevelTable.load() if lv.recommended]


def get_levels_by_category() -> Dict[str, List[DifficultyLevel]]:
    levels = LevelTable.load()
    return {
        name: [lv for lv in levels if lo <= lv.id <= hi]
        for name, (lo, hi) in CATEGORIES.items()
    }


def config_for_level(level_id: int, base: GameConfig = DEFAULT_CONFIG) -> GameConfig:
    """Apply a level's bounds and chain length on top of an existing config."""
    level = get_level(level_id)
    if level is None:
        raise KeyError(f"unknown difficulty level: {level_id}")
    return base.model_copy(update={
        "difficulty_level": level.id,
        "max_result": level.max_result,
        "operations": level.operations,
        "chain_length": level.chain_length,
    })
