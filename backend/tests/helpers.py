import json

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base
import app.models  # noqa: F401
from app.exceptions import DietServiceError

MEALS = ["breakfast", "mid_morning", "lunch", "evening_snack", "dinner"]

VALID_PROFILE = {
    "age": 30,
    "gender": "Male",
    "height": "175cm",
    "weight": "70kg",
    "preference": "Veg",
    "goal": "weight_loss",
}


def make_plan(**overrides) -> dict:
    plan = {
        "plan_type": "weekly",
        "calories_per_day": 1800,
        "veg_or_nonveg": "Vegetarian",
        "indian_foods_only": True,
        "weekly_plan": {
            f"day_{n}": {meal: [f"Day {n} {meal.replace('_', ' ')} dish"] for meal in MEALS}
            for n in range(1, 8)
        },
        "precautions": ["Avoid fried snacks", "Drink 3L water"],
        "disclaimer": "Consult your doctor before changing your diet.",
    }
    plan.update(overrides)
    return plan


def fenced(payload: dict) -> str:
    return "```json\n" + json.dumps(payload) + "\n```"


def make_engine():
    # One shared in-memory connection so every session sees the same tables
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    return engine


def make_session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


class FakeGenerationClient:
    """
    Scripted stand-in for GenerationClient. Each call pops the next response;
    an Exception instance in the script is raised instead of returned.
    """

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    @property
    def call_count(self) -> int:
        return len(self.calls)

    async def generate(self, system_prompt: str, user_prompt: str) -> str:
        self.calls.append((system_prompt, user_prompt))
        if not self.responses:
            raise DietServiceError("FakeGenerationClient ran out of responses")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response
