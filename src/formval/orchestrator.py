"""
Form orchestrator.

This is the main entry point for formval. Give it the raw input, define
fields, then await ``validate()``.
"""

import copy
import logging
from collections.abc import Callable, Iterable, Mapping
from types import MappingProxyType
from typing import Any

from formval.builder import build_field
from formval.config import get_config
from formval.context import FormSettings, SiblingField
from formval.errors import ClientVersionError, MissingFunctionError
from formval.models.field_definitions import FieldConfig, FieldState
from formval.models.validation_result import FieldResult, FormResult
from formval.pipeline import FieldPipeline
from formval.steps.base import Registry, as_step_result, maybe_await
from formval.steps.transforms import TRANSFORMS
from formval.steps.validations import VALIDATIONS
from formval.strength import PasswordChecker
from formval.tracing import traced_operation

logger = logging.getLogger(__name__)

# Result key under which the additional whole-form check reports.
ADDITIONAL_STEP = "additional"

# fn(form, values) -> {field_name: outcome}, sync or async
AdditionalValidation = Callable[..., Any]


class Form:
    """
    A set of field definitions over one submission's raw input.

    Usage:
        form = Form(request_data)
        form.define_field(fieldName="email", dataType="email", required=True)
        form.define_field(fieldName="age", dataType="int",
                          validations={"numeric": {"min": 18, "max": 120}})

        result = await form.validate()
        if not result:
            return {"success": False, "errors": result.to_error_dict()}
    """

    def __init__(
        self,
        data: Mapping[str, Any] | None = None,
        *,
        id: str | None = None,
        stop_on_invalid: bool | None = None,
        checkbox_true_value: str | None = None,
        urls_require_protocol: bool | None = None,
        password_checker: PasswordChecker | None = None,
        transforms: Registry | None = None,
        validations: Registry | None = None,
        expected_client_version: str | None = None,
    ):
        """
        Initialize the form.

        Args:
            data: Raw field name to value mapping, e.g. a decoded form post.
            id: Optional identifier returned by ``identify()``.
            stop_on_invalid: Stop at the first failure. Defaults to config.
            checkbox_true_value: String that counts as a ticked checkbox.
            urls_require_protocol: Default for the ``url`` validation.
            password_checker: Checker used by the ``password`` validation.
            transforms: Transform registry. Defaults to the built-ins.
            validations: Validation registry. Defaults to the built-ins.
            expected_client_version: Reject submissions tagged with any
                other client version. Defaults to config.

        Raises:
            ClientVersionError: If the submission came from another
                version of the client collector.
        """
        config = get_config()
        self.id = id
        self.settings = FormSettings.from_config(
            stop_on_invalid=stop_on_invalid,
            checkbox_true_value=checkbox_true_value,
            urls_require_protocol=urls_require_protocol,
            password_checker=password_checker,
        )
        self.transforms = transforms if transforms is not None else TRANSFORMS
        self.validations = validations if validations is not None else VALIDATIONS

        raw = dict(data or {})
        self.client_version = raw.pop(config.client_version_field, None)
        expected = expected_client_version or config.expected_client_version
        if expected and self.client_version is not None and str(self.client_version) != expected:
            logger.warning(
                f"Rejecting submission from client version {self.client_version} "
                f"(expected {expected})"
            )
            raise ClientVersionError(expected=expected, received=self.client_version)

        self.raw_data: Mapping[str, Any] = MappingProxyType(raw)
        self._fields: dict[str, FieldState] = {}
        self._additional_validation: AdditionalValidation | None = None

    def identify(self) -> str | None:
        """Return the ID of the form."""
        return self.id

    def define_field(self, config: "FieldConfig | Mapping[str, Any] | None" = None, /, **kwargs: Any) -> "Form":
        """
        Define a single field.

        Accepts a ``FieldConfig``, a mapping, or the same keys as keyword
        arguments (camelCase or snake_case).

        Raises:
            FormvalError: If the definition is invalid. The form is left
                unchanged.
        """
        if config is None:
            config = kwargs
        definition, state = build_field(
            config,
            self.raw_data,
            transforms=self.transforms,
            validations=self.validations,
            settings=self.settings,
            existing_names=self._fields.keys(),
        )
        self._fields[definition.field_name] = state
        return self

    def define_fields(self, configs: Iterable["FieldConfig | Mapping[str, Any]"]) -> "Form":
        """Define multiple fields, in order."""
        for config in configs:
            self.define_field(config)
        return self

    def additional_validation(self, fn: AdditionalValidation) -> "Form":
        """
        Register a whole-form check run after every field.

        ``fn(form, field_values)`` may be sync or async and returns a mapping
        of field name to outcome (``StepResult``, bool, ``(passed, reason)``
        or ``{"passed": ..., "reason": ...}``).
        """
        if not callable(fn):
            raise MissingFunctionError(step=ADDITIONAL_STEP, kind="additional validation")
        self._additional_validation = fn
        return self

    @property
    def fields(self) -> Mapping[str, FieldState]:
        return MappingProxyType(self._fields)

    def get_field(self, field_name: str) -> FieldState | None:
        return self._fields.get(field_name)

    def value_hash(self) -> dict[str, Any]:
        """Current value of every field, in definition order."""
        return {name: state.value for name, state in self._fields.items()}

    def sibling_view(self, exclude: str | None = None) -> Mapping[str, SiblingField]:
        """Read-only snapshot of every field except ``exclude``."""
        return MappingProxyType({
            name: SiblingField(value=state.value, data_type=state.data_type)
            for name, state in self._fields.items()
            if name != exclude
        })

    async def _run_additional_validation(
        self,
        field_values: dict[str, Any],
        per_field: dict[str, FieldResult],
    ) -> bool:
        outcome = await maybe_await(self._additional_validation(self, dict(field_values)))
        all_passed = True
        for field_name, entry in (outcome or {}).items():
            step_result = as_step_result(entry)
            per_field.setdefault(field_name, FieldResult()).add(ADDITIONAL_STEP, step_result)
            if not step_result.passed:
                all_passed = False
                state = self._fields.get(field_name)
                if state is not None:
                    state.is_valid = False
        return all_passed

    async def validate(self) -> FormResult:
        """
        Run every field's pipeline, then the additional check if any.

        With ``stop_on_invalid`` the first invalid field ends the field loop;
        later fields get no result entry. The additional check runs either
        way.

        Returns:
            FormResult with per-field results and final field values.

        Raises:
            FormvalError: On fatal configuration problems found while running.
        """
        per_field: dict[str, FieldResult] = {}
        is_form_valid = True

        async with traced_operation("form_validation", {"form_id": self.id}):
            for field_name, state in self._fields.items():
                result = await FieldPipeline(state, self).run()
                per_field[field_name] = result
                if not result.is_valid:
                    is_form_valid = False
                    if self.settings.stop_on_invalid:
                        logger.debug(f"Field '{field_name}' is invalid, skipping remaining fields")
                        break

            field_values = self.value_hash()
            if self._additional_validation is not None:
                if not await self._run_additional_validation(field_values, per_field):
                    is_form_valid = False

        result = FormResult(
            is_form_valid=is_form_valid,
            per_field_results=per_field,
            field_value_hash=copy.deepcopy(field_values),
        )
        logger.info(
            f"Validated form {self.id or '<anonymous>'}: "
            f"{'valid' if is_form_valid else 'invalid ' + str(result.invalid_fields)} "
            f"({len(per_field)}/{len(self._fields)} fields checked)"
        )
        return result


async def validate_form(
    data: Mapping[str, Any],
    fields: Iterable["FieldConfig | Mapping[str, Any]"],
    additional_validation: AdditionalValidation | None = None,
    **options: Any,
) -> FormResult:
    """
    Convenience function to validate data in one call.

    Args:
        data: Raw field name to value mapping.
        fields: Field configurations, in order.
        additional_validation: Optional whole-form check.
        **options: Passed to ``Form``.

    Example:
        >>> result = await validate_form(
        ...     {"age": "15"},
        ...     [{"fieldName": "age", "dataType": "int",
        ...       "validations": {"numeric": {"min": 18}}}],
        ... )
        >>> result.is_form_valid
        False
    """
    form = Form(data, **options).define_fields(fields)
    if additional_validation is not None:
        form.additional_validation(additional_validation)
    return await form.validate()
