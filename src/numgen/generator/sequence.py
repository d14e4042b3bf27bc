from __future__ import annotations

from typing import Any, Iterator, Mapping

import structlog

from numgen.core.clock import Clock, monotonic_ms
from numgen.core.errors import InvalidRange
from numgen.generator.config import GeneratorConfig
from numgen.generator.rules import (
    ConstantChange,
    FunctionChange,
    NoChange,
    Number,
    UpdateContext,
    ValueChangeRule,
)

log = structlog.get_logger()


class SequenceGenerator:
    """
    Stateful producer of the sequence ``factor * v``.

    ``v`` (the variable, exposed as ``value``) evolves on each step according
    to the configured update rule, subject to two time windows measured
    between consecutive steps:

      - save period exceeded   -> variable goes back to start_value
      - change period exceeded -> variable is held, the rule is skipped

    The save period wins when both are exceeded. After the rule runs the
    variable is clamped to max_value, or snapped back to start_value when
    reset_value_on_max is set.

    The generator is its own (infinite) iterator: next(gen) == gen.step().
    """

    def __init__(
        self,
        config: GeneratorConfig | Mapping[str, Any] | None = None,
        *,
        clock: Clock | None = None,
        **overrides: Any,
    ) -> None:
        self._config = GeneratorConfig.build(config, **overrides)
        self._clock: Clock = clock or monotonic_ms

        self._value: Number = 0
        self._index: int = 0
        self._current: Number = 0
        self._prev: Number | None = None
        self._last_step_time: int = 0
        self._aux_state: dict[str, Any] | None = None

        self.reset()

    # ---------------- Configuration ----------------

    @property
    def config(self) -> GeneratorConfig:
        return self._config

    @property
    def clock(self) -> Clock:
        return self._clock

    def configure(self, **changes: Any) -> SequenceGenerator:
        """
        Validated update of configuration fields; returns self for chaining.

        Runtime state is left alone, call reset() to restart from the new
        start_value:

            gen.configure(start_value=321, value_change_rule=-25).reset()
        """
        self._config.updated(**changes)
        return self

    @property
    def factor(self) -> Number:
        return self._config.factor

    @factor.setter
    def factor(self, value: Number) -> None:
        self.configure(factor=value)

    @property
    def start_value(self) -> Number:
        return self._config.start_value

    @start_value.setter
    def start_value(self, value: Number) -> None:
        self.configure(start_value=value)

    @property
    def max_value(self) -> Number:
        return self._config.max_value

    @max_value.setter
    def max_value(self, value: Number) -> None:
        self.configure(max_value=value)

    @property
    def reset_value_on_max(self) -> bool:
        return self._config.reset_value_on_max

    @reset_value_on_max.setter
    def reset_value_on_max(self, value: bool) -> None:
        self.configure(reset_value_on_max=value)

    @property
    def value_change_rule(self) -> ValueChangeRule:
        return self._config.value_change_rule

    @value_change_rule.setter
    def value_change_rule(self, value: Any) -> None:
        self.configure(value_change_rule=value)

    @property
    def pass_self_to_changer(self) -> bool:
        return self._config.pass_self_to_changer

    @pass_self_to_changer.setter
    def pass_self_to_changer(self, value: bool) -> None:
        self.configure(pass_self_to_changer=value)

    @property
    def value_change_period(self) -> int:
        return self._config.value_change_period

    @value_change_period.setter
    def value_change_period(self, value: int) -> None:
        self.configure(value_change_period=value)

    @property
    def value_save_period(self) -> int:
        return self._config.value_save_period

    @value_save_period.setter
    def value_save_period(self, value: int) -> None:
        self.configure(value_save_period=value)

    # ---------------- Runtime state (read-only) ----------------

    @property
    def value(self) -> Number:
        return self._value

    @property
    def index(self) -> int:
        return self._index

    @property
    def current(self) -> Number:
        return self._current

    @property
    def prev(self) -> Number | None:
        return self._prev

    @property
    def last_step_time(self) -> int:
        return self._last_step_time

    @property
    def aux_state(self) -> dict[str, Any] | None:
        return self._aux_state

    # ---------------- Stepping ----------------

    def step(self) -> Number:
        """Advance by one position and return the new current item."""
        cfg = self._config

        self._index += 1

        now = self._clock()
        elapsed = now - self._last_step_time
        self._last_step_time = now

        save_period = cfg.value_save_period
        change_period = cfg.value_change_period

        if save_period >= 0 and elapsed > save_period:
            self._value = cfg.start_value
            produced = self._value
            log.debug(
                "generator.value_restored",
                index=self._index,
                elapsed_ms=elapsed,
                save_period_ms=save_period,
            )
        elif change_period < 0 or elapsed <= change_period:
            self._value = self._apply_rule(cfg.value_change_rule)
            produced = self._value
            if self._value >= cfg.max_value:
                produced = self._value = cfg.max_value
                # The item is still max_value; only the variable wraps around
                if cfg.reset_value_on_max:
                    self._value = cfg.start_value
        else:
            # Held as-is; max_value is not re-checked while frozen
            produced = self._value
            log.debug(
                "generator.value_held",
                index=self._index,
                elapsed_ms=elapsed,
                change_period_ms=change_period,
            )

        self._prev = self._current
        self._current = produced * cfg.factor
        return self._current

    get_next = step

    def _apply_rule(self, rule: ValueChangeRule) -> Number:
        if isinstance(rule, NoChange):
            return self._value
        if isinstance(rule, ConstantChange):
            return self._value + rule.delta
        if isinstance(rule, FunctionChange):
            return rule(self._context())
        raise TypeError(f"unsupported value change rule: {type(rule).__name__}")

    def _context(self) -> UpdateContext:
        cfg = self._config
        if self._aux_state is None:
            self._aux_state = {}
        return UpdateContext(
            index=self._index,
            value=self._value,
            start_value=cfg.start_value,
            max_value=cfg.max_value,
            factor=cfg.factor,
            prev=self._prev,
            current=self._current,
            aux_state=self._aux_state,
            generator=self if cfg.pass_self_to_changer else None,
        )

    def step_many(self, count: int) -> list[Number]:
        """Take ``count`` steps and return the produced items in order."""
        return [self.step() for _ in range(max(count, 0))]

    get_next_part = step_many

    # ---------------- Non-mutating queries ----------------

    def clone(self) -> SequenceGenerator:
        """
        Same configuration and clock, fresh runtime state.

        Not a snapshot: the clone starts over from start_value.
        """
        return SequenceGenerator(self._config.model_copy(), clock=self._clock)

    def range(self, first: int, last: int) -> list[Number]:
        """
        Items at positions first..last (inclusive) of a freshly reset sequence.

        Position 0 is the item before any step (start_value * factor).
        Evaluated on a clone, so this generator's state is untouched.
        """
        for name, bound in (("first", first), ("last", last)):
            if isinstance(bound, bool) or not isinstance(bound, int):
                raise InvalidRange(f"{name} must be an int, got {type(bound).__name__}")
        if first > last:
            return []
        if first < 0:
            raise InvalidRange(f"first must be >= 0, got {first}")

        probe = self.clone()
        items: list[Number] = []
        if first == 0:
            items.append(probe.current)
            first = 1
        else:
            probe.step_many(first - 1)
        items.extend(probe.step_many(last - first + 1))
        return items

    get_part = range

    def to_sequence(self, size: int) -> list[Number]:
        """First ``size`` items after a reset, i.e. range(1, size)."""
        return self.range(1, size)

    to_list = to_sequence

    # ---------------- Lifecycle ----------------

    def reset(self) -> SequenceGenerator:
        """Restart the sequence from start_value. Configuration is kept."""
        cfg = self._config
        self._value = cfg.start_value
        self._current = self._value * cfg.factor
        self._prev = None
        self._index = 0
        self._last_step_time = self._clock()
        self._aux_state = None
        log.debug("generator.reset", start_value=cfg.start_value, factor=cfg.factor)
        return self

    def dispose(self) -> None:
        """Drop the scratch state used by function rules."""
        self._aux_state = None
        log.debug("generator.disposed", index=self._index)

    # ---------------- Iteration & diagnostics ----------------

    def __iter__(self) -> Iterator[Number]:
        return self

    def __next__(self) -> Number:
        return self.step()

    def describe(self) -> str:
        cfg = self._config

        def period(ms: int) -> str:
            return "no" if ms < 0 else f"{ms}ms"

        return (
            "SequenceGenerator: "
            f"factor - {cfg.factor}"
            f", value - {self._value}"
            f", start value - {cfg.start_value}"
            f", max value - {cfg.max_value}"
            f", value change period - {period(cfg.value_change_period)}"
            f", value save period - {period(cfg.value_save_period)}"
            f", index - {self._index}"
            f", previous item - {self._prev}"
            f", current item - {self._current}"
        )

    __str__ = describe
