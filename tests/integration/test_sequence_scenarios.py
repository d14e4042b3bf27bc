from __future__ import annotations

import math

from numgen import SequenceGenerator, UpdateContext

N = 100


def reverse_sign(ctx: UpdateContext) -> float:
    return -ctx.value


def test_constant_sequence(clock) -> None:
    gen = SequenceGenerator({"startValue": 7, "valueChange": None}, clock=clock)
    assert gen.value == 7
    assert gen.step_many(N) == [7] * N

    gen.configure(start_value=7 * 49).reset()
    assert gen.step_many(N) == [343] * N


def test_alternating_unit_sequence(clock) -> None:
    gen = SequenceGenerator({"startValue": 1, "valueChange": reverse_sign}, clock=clock)
    assert gen.step_many(N) == [-1 if i % 2 == 0 else 1 for i in range(N)]


def test_alternating_n_sequence(clock) -> None:
    gen = SequenceGenerator({"startValue": -123, "valueChange": reverse_sign}, clock=clock)
    assert gen.step_many(N) == [123 if i % 2 == 0 else -123 for i in range(N)]


def test_even_and_odd_numbers(clock) -> None:
    evens = SequenceGenerator({"valueChange": 2}, clock=clock)
    odds = SequenceGenerator({"startValue": -1, "valueChange": 2}, clock=clock)

    assert evens.step_many(5) == [2, 4, 6, 8, 10]
    assert all(x % 2 == 0 for x in evens.step_many(N))
    assert all(x % 2 == 1 for x in odds.step_many(N))


def test_constant_increment_formula(clock) -> None:
    start, delta, factor = 4, 3, -2
    gen = SequenceGenerator(start_value=start, value_change=delta, factor=factor, clock=clock)
    for n in range(1, N):
        assert gen.step() == (start + n * delta) * factor


def test_triangular_numbers(clock) -> None:
    gen = SequenceGenerator(value_change=lambda ctx: ctx.index * (ctx.index + 1) // 2, clock=clock)
    assert gen.step_many(5) == [1, 3, 6, 10, 15]


def test_square_numbers(clock) -> None:
    gen = SequenceGenerator({"startValue": 0, "valueChange": lambda ctx: ctx.index * ctx.index}, clock=clock)
    assert gen.value == 0
    assert gen.step_many(5) == [1, 4, 9, 16, 25]
    assert gen.step_many(N) == [i * i for i in range(6, N + 6)]


def test_cube_numbers(clock) -> None:
    gen = SequenceGenerator(value_change=lambda ctx: ctx.index**3, clock=clock)
    assert gen.step_many(5) == [1, 8, 27, 64, 125]


def test_geometric_progression(clock) -> None:
    def keep_current(ctx: UpdateContext) -> float:
        return ctx.current if ctx.index > 1 else ctx.value

    gen = SequenceGenerator({"startValue": 5, "factor": 2, "valueChange": keep_current}, clock=clock)
    previous = gen.value
    for _ in range(20):
        item = gen.step()
        assert item == previous * 2
        previous = item

    gen.configure(start_value=1, factor=-3).reset()
    previous = gen.value
    for _ in range(20):
        item = gen.step()
        assert item == previous * -3
        previous = item


def test_fibonacci(clock) -> None:
    gen = SequenceGenerator(
        {
            "startValue": 0,
            "valueChange": lambda ctx: ctx.prev + ctx.current if ctx.index > 1 else 1,
        },
        clock=clock,
    )
    assert gen.step_many(6) == [1, 1, 2, 3, 5, 8]

    a, b = 5, 8
    for _ in range(N):
        a, b = b, a + b
        assert gen.step() == b


def test_change_handler_object(clock) -> None:
    class Halver:
        def execute(self, ctx: UpdateContext) -> float:
            return ctx.value / 2

    gen = SequenceGenerator(start_value=64, value_change=Halver(), clock=clock)
    assert gen.step_many(4) == [32, 16, 8, 4]


def test_repeated_subsequence(clock) -> None:
    gen = SequenceGenerator({"maxValue": 10, "resetValueOnMax": True}, clock=clock)
    assert gen.value == 0
    for i in range(1, N + 1):
        item = gen.step()
        assert item < 11
        assert item == (i % 10 or 10)

    gen.configure(start_value=-7, max_value=5, value_change_rule=2).reset()
    assert gen.value == -7
    for _ in range(10):
        assert gen.step_many(6) == [-5, -3, -1, 1, 3, 5]


def test_clamp_without_reset_stays_at_max(clock) -> None:
    gen = SequenceGenerator({"maxValue": 10}, clock=clock)
    assert gen.step_many(15) == list(range(1, 11)) + [10] * 5


def test_change_period_elapsed_repeats_current(clock) -> None:
    period = 300
    gen = SequenceGenerator({"valueChangePeriod": period}, clock=clock)
    assert gen.step_many(10) == list(range(1, 11))

    current = gen.current
    for _ in range(10):
        clock.advance(period + 1)
        assert gen.step() == current


def test_save_period_elapsed_restarts_subsequence(clock) -> None:
    period, start = 555, 2

    gen = SequenceGenerator(
        {
            "startValue": start,
            "valueSavePeriod": period,
            "valueChange": lambda ctx: math.sin(ctx.value),
        },
        clock=clock,
    )

    def subsequence() -> list[float]:
        out, v = [], start
        for _ in range(10):
            v = math.sin(v)
            out.append(v)
        return out

    assert gen.step_many(10) == subsequence()
    for _ in range(10):
        clock.advance(period + 1)
        assert gen.step() == start
        assert gen.step_many(10) == subsequence()


def test_to_sequence_from_midstream(clock) -> None:
    gen = SequenceGenerator(clock=clock)
    gen.step_many(10)
    current, index = gen.current, gen.index

    assert gen.to_sequence(5) == [1, 2, 3, 4, 5]
    assert (gen.current, gen.index) == (current, index)
