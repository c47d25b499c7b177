import random

from generator import (
    format_number,
    generate_chain,
    generate_worksheet,
    get_total_problems,
    sum_of_digits,
)
from schema import DEFAULT_CONFIG, OperationMix


def _cfg(**update):
    return DEFAULT_CONFIG.model_copy(update=update)


def _problems(worksheet):
    return [p for c in worksheet.chains for p in c.problems]


def test_chain_length_within_bounds():
    chain = generate_chain(_cfg(chain_length=5), random.Random(1))
    assert chain is not None
    assert 3 <= len(chain.problems) <= 5


def test_chain_starting_number_in_range():
    chain = generate_chain(DEFAULT_CONFIG, random.Random(2))
    assert chain is not None
    assert 0 < chain.starting_number <= DEFAULT_CONFIG.max_result


def test_each_result_feeds_the_next_problem():
    rng = random.Random(3)
    for _ in range(20):
        chain = generate_chain(DEFAULT_CONFIG, rng)
        assert chain is not None
        current = chain.starting_number
        for p in chain.problems:
            assert p.start_value == current
            current = p.result


def test_results_stay_within_max_result():
    cfg = _cfg(operation_mix=OperationMix(add=25, subtract=25, multiply=25, divide=25))
    rng = random.Random(4)
    for _ in range(30):
        chain = generate_chain(cfg, rng)
        if chain is None:
            continue
        for p in chain.problems:
            assert 1 <= p.result <= cfg.max_result


def test_division_is_always_clean():
    cfg = _cfg(operation_mix=OperationMix(add=0, subtract=0, multiply=0, divide=100))
    rng = random.Random(5)
    for _ in range(10):
        chain = generate_chain(cfg, rng)
        if chain is None:
            continue
        for p in chain.problems:
            assert isinstance(p.result, int)
            if p.operation == "divide":
                assert p.start_value % p.operand == 0
                assert p.start_value // p.operand == p.result


def test_unique_ids():
    rng = random.Random(6)
    c1 = generate_chain(DEFAULT_CONFIG, rng)
    c2 = generate_chain(DEFAULT_CONFIG, rng)
    assert c1 is not None and c2 is not None
    assert c1.id != c2.id
    ids = [p.id for p in c1.problems]
    assert len(set(ids)) == len(ids)


def test_worksheet_has_configured_chain_count():
    ws = generate_worksheet(_cfg(chain_count=5))
    assert len(ws.chains) == 5
    assert not ws.is_partial
    chain_ids = [c.id for c in ws.chains]
    assert len(set(chain_ids)) == len(chain_ids)


def test_worksheet_keeps_config_and_timestamp():
    ws = generate_worksheet(DEFAULT_CONFIG)
    assert ws.config == DEFAULT_CONFIG
    assert ws.created_at is not None
    assert generate_worksheet(DEFAULT_CONFIG).id != ws.id


def test_seeded_config_is_reproducible():
    cfg = _cfg(seed=1234)
    assert generate_worksheet(cfg).model_dump(exclude={"created_at"}) == \
        generate_worksheet(cfg).model_dump(exclude={"created_at"})


def test_total_problems():
    ws = generate_worksheet(_cfg(chain_count=3, chain_length=5))
    assert get_total_problems(ws) == sum(len(c.problems) for c in ws.chains)


def test_total_problems_empty_worksheet():
    ws = generate_worksheet(DEFAULT_CONFIG).model_copy(update={"chains": []})
    assert get_total_problems(ws) == 0
    assert ws.is_partial


def test_add_heavy_mix():
    cfg = _cfg(chain_count=10, chain_length=10,
               operation_mix=OperationMix(add=70, subtract=10, multiply=10, divide=10))
    problems = _problems(generate_worksheet(cfg, random.Random(7)))
    adds = sum(1 for p in problems if p.operation == "add")
    assert adds / len(problems) * 100 > 30


def test_multiply_divide_heavy_mix():
    cfg = _cfg(chain_count=10, chain_length=10,
               operation_mix=OperationMix(add=10, subtract=10, multiply=40, divide=40))
    problems = _problems(generate_worksheet(cfg, random.Random(8)))
    md = sum(1 for p in problems if p.operation in ("multiply", "divide"))
    assert md / len(problems) * 100 > 20


def test_small_max_result():
    cfg = _cfg(max_result=20, operation_mix=OperationMix(add=50, subtract=50, multiply=0, divide=0))
    chain = generate_chain(cfg, random.Random(9))
    assert chain is not None
    for p in chain.problems:
        assert 1 <= p.result <= 20


def test_large_max_result():
    cfg = _cfg(max_result=10000)
    chain = generate_chain(cfg, random.Random(10))
    assert chain is not None
    assert all(p.result <= 10000 for p in chain.problems)


def test_negative_results_stay_above_minus_max():
    cfg = _cfg(allow_negative_results=True,
               operation_mix=OperationMix(add=10, subtract=90, multiply=0, divide=0))
    rng = random.Random(11)
    for _ in range(20):
        chain = generate_chain(cfg, rng)
        assert chain is not None
        for p in chain.problems:
            assert -cfg.max_result <= p.result <= cfg.max_result


def test_mix_not_summing_to_100_still_works():
    cfg = _cfg(operation_mix=OperationMix(add=33, subtract=33, multiply=17, divide=16))
    ws = generate_worksheet(cfg, random.Random(12))
    assert len(ws.chains) == cfg.chain_count


def test_impossible_config_degrades_to_empty_worksheet(caplog):
    # max_result=1: không phép nào đi tiếp được từ 1
    from schema import OperationConfig, OperationSet
    ops = OperationSet(
        add=OperationConfig(min_value=6, max_value=6),
        subtract=OperationConfig(min_value=6, max_value=6),
        multiply=OperationConfig(min_value=6, max_value=6),
        divide=OperationConfig(min_value=6, max_value=6),
    )
    cfg = _cfg(max_result=1, operations=ops, chain_count=2)
    with caplog.at_level("WARNING", logger="generator"):
        ws = generate_worksheet(cfg, random.Random(13))
    assert ws.chains == []
    assert ws.is_partial
    assert "0 of 2 chains" in caplog.text


def test_format_number():
    assert format_number(1000, "en") == "1,000"
    assert format_number(1000000, "en") == "1,000,000"
    assert format_number(100, "en") == "100"
    assert format_number(0, "en") == "0"
    assert format_number(1000, "vi") == "1.000"


def test_sum_of_digits():
    assert sum_of_digits(123) == 6
    assert sum_of_digits(999) == 27
    assert sum_of_digits(100) == 1
    assert sum_of_digits(5) == 5
    assert sum_of_digits(0) == 0
    assert sum_of_digits(-456) == 15
