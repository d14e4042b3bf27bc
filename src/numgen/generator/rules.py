from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Protocol, TypeAlias, Union

if TYPE_CHECKING:
    from numgen.generator.sequence import SequenceGenerator

Number: TypeAlias = Union[int, float]


@dataclass(slots=True)
class UpdateContext:
    """
    Snapshot handed to a function rule on every step.

    - index: step number being produced (1 for the first step after reset)
    - value: variable value before the update
    - prev/current: the two most recent sequence items (prev is None early on)
    - aux_state: scratch dict owned by the generator, kept across steps
    - generator: the generator itself, only when pass_self_to_changer is set
    """

    index: int
    value: Number
    start_value: Number
    max_value: Number
    factor: Number
    prev: Number | None
    current: Number
    aux_state: dict[str, Any]
    generator: SequenceGenerator | None = None


UpdateFunction: TypeAlias = Callable[[UpdateContext], Number]


class ChangeHandler(Protocol):
    """Object-style rule: anything exposing execute(ctx) -> number."""

    def execute(self, ctx: UpdateContext) -> Number:
        ...


@dataclass(frozen=True, slots=True)
class NoChange:
    """Variable keeps its value; the sequence is constant."""


@dataclass(frozen=True, slots=True)
class ConstantChange:
    """Variable grows by ``delta`` on every step (arithmetic progression)."""

    delta: Number


@dataclass(frozen=True, slots=True)
class FunctionChange:
    """Variable is replaced by ``func(ctx)`` on every step."""

    func: UpdateFunction

    def __call__(self, ctx: UpdateContext) -> Number:
        return self.func(ctx)


ValueChangeRule: TypeAlias = Union[NoChange, ConstantChange, FunctionChange]


def as_rule(value: Any) -> ValueChangeRule:
    """
    Coerce a raw configuration value into a ValueChangeRule.

    None -> NoChange, number -> ConstantChange, callable -> FunctionChange,
    object with execute() -> FunctionChange over that method.
    """
    if isinstance(value, (NoChange, ConstantChange, FunctionChange)):
        return value
    if value is None:
        return NoChange()
    # bool is an int subclass but never a meaningful increment
    if isinstance(value, bool):
        raise TypeError("value change must not be a bool")
    if isinstance(value, (int, float)):
        return ConstantChange(delta=value)
    if callable(value):
        return FunctionChange(func=value)
    execute = getattr(value, "execute", None)
    if callable(execute):
        return FunctionChange(func=execute)
    raise TypeError(f"unsupported value change rule: {type(value).__name__}")
