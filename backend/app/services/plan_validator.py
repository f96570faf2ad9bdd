import logging
from typing import Any, List, Union

from pydantic import ValidationError

from app.exceptions import SchemaViolationError
from app.models.diet_plan import DietPlan, PLAN_SCHEMA_WEEKLY
from app.schemas.diet_plan import WeeklyPlan, LegacyPlan

logger = logging.getLogger(__name__)


def _format_errors(error: ValidationError) -> List[str]:
    return [
        f"{'.'.join(str(part) for part in err['loc']) or '<root>'} - {err['msg']}"
        for err in error.errors()
    ]


def validate_weekly_plan(payload: Any) -> WeeklyPlan:
    """
    Check a parsed generator response against the weekly plan shape.
    Nothing is filled in or coerced; any deviation is a SchemaViolationError.
    """
    if isinstance(payload, dict) and payload.get("error") == "INVALID_FORMAT":
        logger.warning("Generator declined to produce a plan (INVALID_FORMAT)")
        raise SchemaViolationError("Generator reported INVALID_FORMAT", errors=["error - INVALID_FORMAT"])

    try:
        return WeeklyPlan.model_validate(payload)
    except ValidationError as e:
        errors = _format_errors(e)
        logger.error(f"AI Response Format Error (Schema Validation): {errors}")
        raise SchemaViolationError("Invalid weekly plan structure returned by AI", errors=errors) from e


def plan_type_of(plan: DietPlan) -> str:
    data = plan.plan_data or {}
    if (
        plan.plan_schema_version == PLAN_SCHEMA_WEEKLY
        and data.get("plan_type") == "weekly"
        and "weekly_plan" in data
    ):
        return "weekly"
    return "legacy"


def load_stored_plan(plan: DietPlan) -> Union[WeeklyPlan, LegacyPlan]:
    """Parse stored plan data into its variant. Legacy plans are display-only."""
    if plan_type_of(plan) == "weekly":
        return WeeklyPlan.model_validate(plan.plan_data)
    return LegacyPlan.model_validate(plan.plan_data)
