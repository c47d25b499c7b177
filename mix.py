import math
from typing import Dict, Optional

from schema import Operation, OperationMix, OPERATIONS

PRESETS: Dict[str, OperationMix] = {
    "Random": OperationMix(add=25, subtract=25, multiply=25, divide=25),
    "Basic": OperationMix(add=40, subtract=40, multiply=10, divide=10),
    "Advanced": OperationMix(add=20, subtract=20, multiply=30, divide=30),
    "Expert": OperationMix(add=10, subtract=10, multiply=40, divide=40),
}

DEFAULT_MIN_PERCENT = 10


def _round_half_up(x: float) -> int:
    return math.floor(x + 0.5)


def selected_preset(mix: OperationMix) -> Optional[str]:
    return next((name for name, p in PRESETS.items() if p == mix), None)


def adjust_mix(
    mix: OperationMix,
    key: Operation,
    delta: float,
    min_percent: float = DEFAULT_MIN_PERCENT,
) -> OperationMix:
    """
    Move one operation's share by delta and spread the opposite change
    over the other three, keeping each at min_percent or more and the
    total at 100 whenever the floor allows it.
    """
    values = mix.model_dump()
    current = values[key]
    new = max(min_percent, min(100 - 3 * min_percent, current + delta))
    if new == current:
        return mix

    diff = new - current
    values[key] = new

    others = [k for k in OPERATIONS if k != key]
    total_other = sum(values[k] for k in others)
    if total_other == 0:
        return mix

    remaining = -diff
    for i, k in enumerate(others):
        if i == len(others) - 1:
            values[k] = max(min_percent, values[k] + remaining)
        else:
            adjustment = _round_half_up(remaining * values[k] / total_other)
            adjusted = max(min_percent, values[k] + adjustment)
            remaining -= adjusted - values[k]
            values[k] = adjusted

    # chỉnh lại cho đúng 100%
    total = sum(values.values())
    if total != 100:
        rest = 100 - total
        for k in sorted(others, key=lambda k: values[k], reverse=True):
            if values[k] + rest >= min_percent:
                values[k] += rest
                break

    return OperationMix(**values)


def set_mix_value(
    mix: OperationMix,
    key: Operation,
    percent: float,
    min_percent: float = DEFAULT_MIN_PERCENT,
) -> OperationMix:
    clamped = max(min_percent, min(100 - 3 * min_percent, percent))
    diff = clamped - mix.get(key)
    if diff == 0:
        return mix
    return adjust_mix(mix, key, diff, min_percent)


def normalize_mix(mix: OperationMix) -> OperationMix:
    total = mix.total()
    if total == 0:
        return PRESETS["Random"]
    return OperationMix(**{k: mix.get(k) * 100 / total for k in OPERATIONS})
