"""
Field definition builder.

Turns a ``FieldConfig`` plus the raw input into an immutable
``FieldDefinition`` and the field's starting ``FieldState``:

1. Reject duplicate names and unknown data types.
2. Expand the ``modify``, ``trim`` and ``required`` shorthands.
3. Add the steps every field of the data type gets (e.g. ``email``).
4. Check every step name against the registries and resolve its options.
5. Read and coerce the raw value.

Nothing is stored by the caller unless every stage succeeds.
"""

import copy
import logging
from collections.abc import Collection, Mapping
from typing import Any

from pydantic import ValidationError

from formval.context import FormSettings
from formval.errors import (
    DuplicateFieldError,
    FieldConfigError,
    InvalidTransformError,
    InvalidValidationError,
)
from formval.models.field_definitions import FieldConfig, FieldDefinition, FieldState, StepSpec
from formval.steps.base import Registry
from formval.types import DataType, coerce, default_value_for, normalize

logger = logging.getLogger(__name__)

# Steps added to every field of a data type unless the caller named them.
TYPE_DEFAULT_STEPS: dict[DataType, dict[str, tuple[str, ...]]] = {
    DataType.EMAIL: {"before": ("str-trim",), "validations": ("email",)},
    DataType.TELEPHONE: {"before": ("str-trim",), "validations": ("telephone",)},
    DataType.URL: {"before": ("str-trim",), "validations": ("url",), "after": ("url",)},
    DataType.HASH: {"validations": ("hash",)},
}


def parse_config(config: "FieldConfig | Mapping[str, Any]") -> FieldConfig:
    """Validate a raw field configuration mapping."""
    if isinstance(config, FieldConfig):
        return config
    try:
        return FieldConfig.model_validate(config)
    except ValidationError as e:
        field_name = config.get("fieldName", config.get("field_name")) if isinstance(config, Mapping) else None
        raise FieldConfigError(
            f"Invalid configuration for field '{field_name}': {e}",
            field_name=field_name,
        ) from e


def collect_hash(field_name: str, raw_data: Mapping[str, Any]) -> dict[str, Any] | None:
    """Gather ``name[key]`` entries (or a nested mapping under ``name``)."""
    collected: dict[str, Any] = {}
    found = False

    nested = raw_data.get(field_name)
    if isinstance(nested, Mapping):
        collected.update(nested)
        found = True

    prefix = f"{field_name}["
    for key, value in raw_data.items():
        if isinstance(key, str) and key.startswith(prefix) and key.endswith("]"):
            collected[key[len(prefix):-1]] = value
            found = True

    return collected if found else None


def _merge_steps(
    configured: Mapping[str, Any],
    added: list[tuple[str, Any]] = (),
) -> dict[str, Any]:
    """The caller's steps in their order, then each added step they left out."""
    merged: dict[str, Any] = dict(configured)
    for name, options in added:
        if name not in merged:
            merged[name] = options
    return merged


def _resolve_steps(
    field_name: str,
    steps: Mapping[str, Any],
    registry: Registry,
    error_class: type[Exception],
) -> tuple[StepSpec, ...]:
    unknown = [name for name in steps if name not in registry]
    if unknown:
        raise error_class(
            f"Field '{field_name}' uses unknown {registry.kind}(s): {', '.join(unknown)}",
            field_name=field_name,
            unknown=unknown,
            valid=sorted(registry),
        )

    specs = []
    for name, raw_options in steps.items():
        step = registry[name]
        options = step.resolve_options(raw_options)
        specs.append(StepSpec(name=name, step=step, options=options, enabled=options is not None))
    return tuple(specs)


def build_field(
    config: "FieldConfig | Mapping[str, Any]",
    raw_data: Mapping[str, Any],
    *,
    transforms: Registry,
    validations: Registry,
    settings: FormSettings,
    existing_names: Collection[str] = (),
) -> tuple[FieldDefinition, FieldState]:
    """
    Build a field definition and its starting state.

    Args:
        config: The field configuration, as a ``FieldConfig`` or mapping.
        raw_data: The raw input of the form.
        transforms: Registry the transform names are looked up in.
        validations: Registry the validation names are looked up in.
        settings: The form's settings.
        existing_names: Names already defined on the form.

    Returns:
        ``(definition, state)``

    Raises:
        DuplicateFieldError: If the name is already defined.
        InvalidDataTypeError: If the data type is unknown.
        InvalidTransformError: If a transform name is unknown.
        InvalidValidationError: If a validation name is unknown.
        FormvalError: If a step's options are malformed.
    """
    config = parse_config(config)
    field_name = config.field_name

    if field_name in existing_names:
        raise DuplicateFieldError(field_name=field_name)

    data_type = normalize(config.data_type)
    type_steps = TYPE_DEFAULT_STEPS.get(data_type, {})

    added_before: list[tuple[str, Any]] = []
    if config.modify is not None:
        added_before.append(("custom", config.modify))
    if config.trim:
        added_before.append(("str-trim", True))
    added_before.extend((name, True) for name in type_steps.get("before", ()))

    added_validations: list[tuple[str, Any]] = []
    if config.required:
        added_validations.append(("required", True))
    added_validations.extend((name, True) for name in type_steps.get("validations", ()))

    before = _resolve_steps(
        field_name,
        _merge_steps(config.transforms.before, added=added_before),
        transforms,
        InvalidTransformError,
    )
    checks = _resolve_steps(
        field_name,
        _merge_steps(config.validations, added=added_validations),
        validations,
        InvalidValidationError,
    )
    after = _resolve_steps(
        field_name,
        _merge_steps(
            config.transforms.after,
            [(name, True) for name in type_steps.get("after", ())],
        ),
        transforms,
        InvalidTransformError,
    )

    # The flag follows the step, whichever of the two asked for it.
    required = config.required or any(spec.name == "required" for spec in checks)

    definition = FieldDefinition(
        field_name=field_name,
        data_type=data_type,
        required=required,
        typecasting=config.typecasting,
        default_value=config.default_value,
        before_transforms=before,
        validations=checks,
        after_transforms=after,
    )

    if data_type is DataType.HASH:
        raw_value = collect_hash(field_name, raw_data)
    else:
        raw_value = raw_data.get(field_name)

    start = raw_value
    if start is None:
        start = config.default_value if config.default_value is not None else default_value_for(data_type)
    value = coerce(data_type, start, settings.checkbox_true_value) if config.typecasting else start

    state = FieldState(
        definition=definition,
        value=value,
        raw_value=copy.deepcopy(raw_value),
        extra_data=dict(config.extra_data),
    )

    logger.debug(
        f"Defined field '{field_name}' ({data_type.value}): "
        f"before={[s.name for s in before]} validations={[s.name for s in checks]} "
        f"after={[s.name for s in after]}"
    )
    return definition, state
