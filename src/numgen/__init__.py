from __future__ import annotations

from numgen.core.errors import InvalidConfiguration, InvalidRange, NumGenError
from numgen.generator.config import GeneratorConfig
from numgen.generator.rules import (
    ChangeHandler,
    ConstantChange,
    FunctionChange,
    NoChange,
    UpdateContext,
    ValueChangeRule,
    as_rule,
)
from numgen.generator.sequence import SequenceGenerator

__all__ = [
    "ChangeHandler",
    "ConstantChange",
    "FunctionChange",
    "GeneratorConfig",
    "InvalidConfiguration",
    "InvalidRange",
    "NoChange",
    "NumGenError",
    "SequenceGenerator",
    "UpdateContext",
    "ValueChangeRule",
    "as_rule",
]
