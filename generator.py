import logging
import random
import string
from datetime import datetime, timezone
from functools import partial
from typing import Callable, List, Optional

from schema import (
    GameConfig,
    Operation,
    OPERATIONS,
    Problem,
    ProblemChain,
    Worksheet,
)
import i18n

logger = logging.getLogger(__name__)

MAX_RANDOM_ATTEMPTS = 20
MIN_CHAIN_PROBLEMS = 3
CHAIN_ATTEMPTS_PER_SLOT = 3
SIMPLE_OPERAND_RANGE = (1, 5)

# số có nhiều ước, dễ nhân/chia
GOOD_STARTS = [12, 18, 20, 24, 30, 36, 40, 48, 60, 72, 80, 90, 100]

_ID_ALPHABET = string.digits + string.ascii_lowercase

Tier = Callable[[int, GameConfig, random.Random], Optional[Problem]]


def _rng_for(cfg: GameConfig, rng: Optional[random.Random]) -> random.Random:
    return rng if rng is not None else random.Random(cfg.seed)


def generate_id(rng: random.Random) -> str:
    return "".join(rng.choice(_ID_ALPHABET) for _ in range(9))


def _random_int(rng: random.Random, lo: int, hi: int) -> int:
    # khoảng bị đảo (max_result quá nhỏ) -> lấy cận dưới
    if hi < lo:
        return lo
    return rng.randint(lo, hi)


# -----------------
# Chọn phép toán
# -----------------
def select_operation(cfg: GameConfig, rng: random.Random) -> Operation:
    """Weighted pick over the mix; divide absorbs any rounding residue."""
    draw = rng.random() * 100
    cumulative = 0.0
    for op in OPERATIONS[:-1]:
        cumulative += cfg.operation_mix.get(op)
        if draw < cumulative:
            return op
    return OPERATIONS[-1]


# -----------------
# Sinh toán hạng
# -----------------
def generate_operand(
    operation: Operation,
    current_value: int,
    cfg: GameConfig,
    rng: random.Random,
) -> Optional[int]:
    """
    Pick an operand that keeps the result inside the configured bounds.
    Returns None when no operand in [min_value, max_value] works.
    """
    op_cfg = cfg.operations.get(operation)
    lo, hi = op_cfg.min_value, op_cfg.max_value

    if operation == "add":
        hi = min(hi, cfg.max_result - current_value)
        if hi < lo:
            return None
        return rng.randint(lo, hi)

    if operation == "subtract":
        min_result = -cfg.max_result if cfg.allow_negative_results else 1
        hi = min(hi, current_value - min_result)
        if hi < lo:
            return None
        return rng.randint(lo, hi)

    if operation == "multiply":
        if current_value == 0:
            return rng.randint(lo, hi)
        hi = min(hi, cfg.max_result // current_value)
        if hi < lo:
            return None
        return rng.randint(lo, hi)

    if operation == "divide":
        if current_value <= 0:
            return None
        divisors = [
            d
            for d in range(max(lo, 1), min(hi, current_value) + 1)
            if current_value % d == 0 and 1 <= current_value // d <= cfg.max_result
        ]
        if not divisors:
            return None
        return rng.choice(divisors)

    return None


def calculate_result(value: int, operation: Operation, operand: int) -> int:
    if operation == "add":
        return value + operand
    if operation == "subtract":
        return value - operand
    if operation == "multiply":
        return value * operand
    if operation == "divide":
        return value // operand
    raise ValueError(f"Unsupported operation: {operation}")


def try_generate_problem(
    current_value: int,
    operation: Operation,
    cfg: GameConfig,
    rng: random.Random,
) -> Optional[Problem]:
    operand = generate_operand(operation, current_value, cfg, rng)
    if operand is None:
        return None

    if operation == "divide" and (operand == 0 or current_value % operand != 0):
        return None
    result = calculate_result(current_value, operation, operand)

    if result < 1 and not cfg.allow_negative_results:
        return None
    if result > cfg.max_result:
        return None
    if result < -cfg.max_result:
        return None

    return Problem(
        id=generate_id(rng),
        start_value=current_value,
        operation=operation,
        operand=operand,
        result=result,
    )


# -----------------
# Các bậc dự phòng
# -----------------
def try_weighted(
    current_value: int,
    cfg: GameConfig,
    rng: random.Random,
    max_attempts: int = MAX_RANDOM_ATTEMPTS,
) -> Optional[Problem]:
    for _ in range(max_attempts):
        op = select_operation(cfg, rng)
        p = try_generate_problem(current_value, op, cfg, rng)
        if p:
            return p
    return None


def try_by_priority(current_value: int, cfg: GameConfig, rng: random.Random) -> Optional[Problem]:
    # sorted() giữ thứ tự gốc khi tỉ lệ bằng nhau
    ordered = sorted(OPERATIONS, key=cfg.operation_mix.get, reverse=True)
    for op in ordered:
        p = try_generate_problem(current_value, op, cfg, rng)
        if p:
            return p
    return None


def try_simplified(current_value: int, cfg: GameConfig, rng: random.Random) -> Optional[Problem]:
    narrow = {"min_value": SIMPLE_OPERAND_RANGE[0], "max_value": SIMPLE_OPERAND_RANGE[1]}
    ops = cfg.operations.model_copy(update={
        "add": cfg.operations.add.model_copy(update=narrow),
        "subtract": cfg.operations.subtract.model_copy(update=narrow),
    })
    simple_cfg = cfg.model_copy(update={"operations": ops})
    for op in ("add", "subtract"):
        p = try_generate_problem(current_value, op, simple_cfg, rng)
        if p:
            return p
    return None


def generate_problem(
    current_value: int,
    cfg: GameConfig,
    rng: Optional[random.Random] = None,
    max_attempts: int = MAX_RANDOM_ATTEMPTS,
) -> Optional[Problem]:
    """
    Next problem continuing from current_value.
    Tiers, each tried only when the previous one gives nothing:
    - weighted random picks following the mix
    - every operation, most frequent first
    - add/subtract with operands narrowed to 1..5
    """
    rng = _rng_for(cfg, rng)
    tiers: List[Tier] = [
        partial(try_weighted, max_attempts=max_attempts),
        try_by_priority,
        try_simplified,
    ]
    for level, tier in enumerate(tiers):
        p = tier(current_value, cfg, rng)
        if p:
            if level > 0:
                logger.debug("fallback tier %d used at value %d", level + 1, current_value)
            return p
    logger.debug("no problem possible from value %d", current_value)
    return None


# -----------------
# Sinh chuỗi bài toán
# -----------------
def choose_starting_number(cfg: GameConfig, rng: random.Random) -> int:
    mix = cfg.operation_mix
    if mix.multiply + mix.divide >= 50:
        candidates = [n for n in GOOD_STARTS if n <= cfg.max_result / 2]
        if candidates:
            return rng.choice(candidates)
        lo, hi = 10, min(50, cfg.max_result // 3)
    else:
        lo = max(5, int(cfg.max_result * 0.1))
        hi = min(int(cfg.max_result * 0.4), 100)
    start = _random_int(rng, lo, hi)
    return max(1, min(start, cfg.max_result))


def generate_chain(cfg: GameConfig, rng: Optional[random.Random] = None) -> Optional[ProblemChain]:
    rng = _rng_for(cfg, rng)
    problems: List[Problem] = []

    starting_number = choose_starting_number(cfg, rng)
    current = starting_number

    for _ in range(cfg.chain_length):
        p = generate_problem(current, cfg, rng)
        if p is None:
            # đủ 3 bài thì giữ chuỗi ngắn
            if len(problems) >= MIN_CHAIN_PROBLEMS:
                break
            logger.debug("chain from %d dropped after %d problems", starting_number, len(problems))
            return None
        problems.append(p)
        current = p.result

    if len(problems) < MIN_CHAIN_PROBLEMS:
        return None

    return ProblemChain(id=generate_id(rng), starting_number=starting_number, problems=problems)


def generate_worksheet(cfg: GameConfig, rng: Optional[random.Random] = None) -> Worksheet:
    rng = _rng_for(cfg, rng)
    chains: List[ProblemChain] = []
    max_attempts = cfg.chain_count * CHAIN_ATTEMPTS_PER_SLOT

    attempts = 0
    while len(chains) < cfg.chain_count and attempts < max_attempts:
        chain = generate_chain(cfg, rng)
        if chain and len(chain.problems) >= MIN_CHAIN_PROBLEMS:
            chains.append(chain)
        attempts += 1

    if len(chains) < cfg.chain_count:
        logger.warning(
            "worksheet has %d of %d chains after %d attempts",
            len(chains), cfg.chain_count, attempts,
        )

    return Worksheet(
        id=generate_id(rng),
        chains=chains,
        config=cfg,
        created_at=datetime.now(timezone.utc),
    )


# -----------------
# Tiện ích
# -----------------
def get_total_problems(worksheet: Worksheet) -> int:
    return sum(len(c.problems) for c in worksheet.chains)


def sum_of_digits(n: int) -> int:
    return sum(int(d) for d in str(abs(n)))


def format_number(n: int, language: Optional[str] = None) -> str:
    return i18n.format_number(n, language)
