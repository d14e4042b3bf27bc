from __future__ import annotations

import sys
from typing import Any, Mapping, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, StrictFloat, StrictInt, ValidationError, field_validator

from numgen.core.errors import InvalidConfiguration
from numgen.generator.rules import ConstantChange, ValueChangeRule, as_rule

# int first so that integral inputs stay ints (pydantic smart-mode unions)
Number = Union[StrictInt, StrictFloat]


class GeneratorConfig(BaseModel):
    """
    Configuration half of a SequenceGenerator.

    Field names are snake_case; the camelCase keys of the original option
    objects are accepted as aliases so plain mappings can be passed through.
    Assignments are validated, which is what the generator's property setters
    rely on.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        validate_assignment=True,
        arbitrary_types_allowed=True,
        extra="ignore",
    )

    factor: Number = Field(default=1, description="Constant multiplier applied to the variable")
    start_value: Number = Field(
        default=0,
        validation_alias=AliasChoices("start_value", "startValue"),
        description="Initial and reset value of the variable",
    )
    max_value: Number = Field(
        default=sys.float_info.max,
        validation_alias=AliasChoices("max_value", "maxValue"),
        description="Upper bound of the variable",
    )
    reset_value_on_max: bool = Field(
        default=False,
        validation_alias=AliasChoices("reset_value_on_max", "resetValueOnMax"),
        description="Snap back to start_value instead of clamping at max_value",
    )
    value_change_rule: ValueChangeRule = Field(
        default_factory=lambda: ConstantChange(delta=1),
        validation_alias=AliasChoices(
            "value_change_rule", "value_change", "valueChangeRule", "valueChange"
        ),
        description="How the variable evolves on each step",
    )
    pass_self_to_changer: bool = Field(
        default=False,
        validation_alias=AliasChoices(
            "pass_self_to_changer", "passSelfToChanger", "passToChanger"
        ),
        description="Expose the generator itself in UpdateContext.generator",
    )
    value_change_period: int = Field(
        default=-1,
        strict=True,
        validation_alias=AliasChoices("value_change_period", "valueChangePeriod"),
        description="Max ms between steps for the rule to apply; negative = no limit",
    )
    value_save_period: int = Field(
        default=-1,
        strict=True,
        validation_alias=AliasChoices("value_save_period", "valueSavePeriod"),
        description="Max ms between steps before the variable resets; negative = no limit",
    )

    @field_validator("factor", "start_value", "max_value", mode="before")
    @classmethod
    def _reject_bool(cls, v: Any) -> Any:
        if isinstance(v, bool):
            raise ValueError("must be a number, not a bool")
        return v

    @field_validator("value_change_rule", mode="plain")
    @classmethod
    def _coerce_rule(cls, v: Any) -> ValueChangeRule:
        try:
            return as_rule(v)
        except TypeError as exc:
            raise ValueError(str(exc)) from exc

    @classmethod
    def build(cls, source: GeneratorConfig | Mapping[str, Any] | None = None, **overrides: Any) -> GeneratorConfig:
        """
        Merge ``source`` and ``overrides`` over the defaults.

        Raises InvalidConfiguration instead of pydantic's ValidationError.
        """
        if isinstance(source, GeneratorConfig):
            # attribute copy, not model_dump(): rules must not be serialized
            data: dict[str, Any] = {name: getattr(source, name) for name in type(source).model_fields}
        elif source is None:
            data = {}
        elif isinstance(source, Mapping):
            data = cls._canonical_keys(source)
        else:
            raise InvalidConfiguration(
                f"configuration must be a mapping or GeneratorConfig, got {type(source).__name__}"
            )
        data.update(cls._canonical_keys(overrides))

        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise InvalidConfiguration(str(exc)) from exc

    @classmethod
    def _canonical_keys(cls, data: Mapping[str, Any]) -> dict[str, Any]:
        """Map alias keys to field names so later keys override earlier ones."""
        lookup: dict[str, str] = {}
        for name, info in cls.model_fields.items():
            lookup[name] = name
            if isinstance(info.validation_alias, AliasChoices):
                for choice in info.validation_alias.choices:
                    if isinstance(choice, str):
                        lookup[choice] = name
        return {lookup.get(key, key): value for key, value in data.items()}

    def updated(self, **changes: Any) -> None:
        """
        Validated in-place update of one or more fields.

        All changes are validated together before any field is touched, so a
        rejected update leaves the configuration as it was.
        """
        changes = self._canonical_keys(changes)
        unknown = sorted(set(changes) - set(type(self).model_fields))
        if unknown:
            raise InvalidConfiguration(f"unknown configuration field(s): {', '.join(unknown)}")

        candidate = type(self).build(self, **changes)
        for name in changes:
            setattr(self, name, getattr(candidate, name))
