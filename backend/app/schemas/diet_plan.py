from pydantic import BaseModel, ConfigDict, Field, StrictBool, StringConstraints, field_validator
from typing import Annotated, Any, Dict, List, Literal, Optional
from datetime import datetime

DAY_KEYS = ["day_1", "day_2", "day_3", "day_4", "day_5", "day_6", "day_7"]
MEAL_SLOTS = ["breakfast", "mid_morning", "lunch", "evening_snack", "dinner"]
LEGACY_MEAL_SLOTS = ["early_morning", "breakfast", "lunch", "snacks", "dinner"]

PROFILE_DEFAULT = "None"


# --- Health profile (request) ---

class DietProfileRequest(BaseModel):
    """
    Health profile submitted by the client. Blank optional fields are
    normalized to "None" so prompt construction never sees an empty value.
    """
    age: int = Field(..., ge=1, le=120, strict=True)
    gender: Literal["Male", "Female", "Other"]
    height: str = Field(..., min_length=1, description="e.g. 175cm or 5ft 9in")
    weight: str = Field(..., min_length=1, description="e.g. 70kg")
    medical_history: Optional[str] = PROFILE_DEFAULT
    medications: Optional[str] = PROFILE_DEFAULT
    allergies: Optional[str] = PROFILE_DEFAULT
    preference: Literal["Veg", "Non-Veg", "Eggetarian"]
    goal: str = Field(..., min_length=1)

    @field_validator("medical_history", "medications", "allergies", mode="after")
    @classmethod
    def default_blank(cls, value: Optional[str]) -> str:
        return value if value else PROFILE_DEFAULT

    model_config = ConfigDict(
        str_strip_whitespace=True,
        json_schema_extra={
            "example": {
                "age": 30,
                "gender": "Male",
                "height": "175cm",
                "weight": "70kg",
                "medical_history": "Type 2 diabetes",
                "medications": "Metformin",
                "allergies": "Peanuts",
                "preference": "Veg",
                "goal": "weight_loss",
            }
        },
    )


# --- Generated plan (weekly, current shape) ---
# Generator output is never coerced: "1800" is not a number, "true" is not a bool.

MealEntry = Annotated[str, StringConstraints(strict=True, pattern=r"^[^\r\n]*\S[^\r\n]*$")]
MealList = Annotated[List[MealEntry], Field(min_length=1)]
NonEmptyText = Annotated[str, StringConstraints(strict=True, min_length=1, pattern=r"\S")]


class DayPlan(BaseModel):
    breakfast: MealList
    mid_morning: MealList
    lunch: MealList
    evening_snack: MealList
    dinner: MealList


class WeeklyDays(BaseModel):
    day_1: DayPlan
    day_2: DayPlan
    day_3: DayPlan
    day_4: DayPlan
    day_5: DayPlan
    day_6: DayPlan
    day_7: DayPlan


class WeeklyPlan(BaseModel):
    plan_type: Literal["weekly"]
    calories_per_day: float = Field(..., gt=0, strict=True, allow_inf_nan=False)
    veg_or_nonveg: NonEmptyText
    indian_foods_only: StrictBool
    weekly_plan: WeeklyDays
    precautions: Annotated[List[NonEmptyText], Field(min_length=1)]
    disclaimer: NonEmptyText


# --- Legacy plan (read-only, written by the first version of the service) ---

class LegacyDailyMeals(BaseModel):
    early_morning: List[str] = []
    breakfast: List[str] = []
    lunch: List[str] = []
    snacks: List[str] = []
    dinner: List[str] = []


class LegacyPlan(BaseModel):
    daily_meals: LegacyDailyMeals = LegacyDailyMeals()
    calories_per_day: Optional[float] = None
    indian_foods_only: Optional[bool] = None
    veg_or_nonveg: Optional[str] = None
    precautions: List[str] = []
    disclaimer: Optional[str] = None


# --- Responses ---

class PlanOwner(BaseModel):
    id: int
    name: str
    email: str
    phone: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class DietPlanResponse(BaseModel):
    id: int
    user: PlanOwner
    plan_type: Literal["weekly", "legacy"]
    plan_schema_version: int
    plan_data: Dict[str, Any]
    user_input: Dict[str, Any]
    version: int
    is_active: bool
    last_accessed_at: Optional[datetime] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None


class DietPlanSummary(BaseModel):
    id: int
    version: int
    is_active: bool
    plan_type: Literal["weekly", "legacy"]
    calories_per_day: Optional[float] = None
    created_at: Optional[datetime] = None
