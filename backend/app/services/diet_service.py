import json
import logging
from typing import Any

from sqlalchemy.orm import Session

from app.crud import diet_plan as crud_diet_plan
from app.exceptions import IncompleteJsonError
from app.models.diet_plan import DietPlan
from app.models.user import User
from app.schemas.diet_plan import DietProfileRequest, WeeklyPlan
from app.services.llm_service import GenerationClient
from app.services.plan_validator import validate_weekly_plan
from app.services.prompt_service import build_diet_prompt
from app.utils.json_extraction import (
    strip_code_fences, looks_truncated, extract_json_window, is_incomplete_json_error, reject_non_finite
)
from app.utils.llm_prompts.diet_prompts import DIET_SYSTEM_INSTRUCTION

logger = logging.getLogger(__name__)

"""
Diet Plan Service
-----------------
Orchestrates weekly plan generation.
1. Builds the prompt from the normalized profile.
2. Calls the generator (30s timeout).
3. Repairs the response: strips fences, checks truncation, extracts the
   brace window, parses. One full regeneration is allowed for a truncated
   or incomplete response; JSON is never patched locally.
4. Validates the exact weekly shape.
5. Stores it as the user's new active plan version.
"""


class DietPlanGenerator:

    def __init__(self, client: GenerationClient):
        self.client = client

    async def generate(self, profile: DietProfileRequest) -> WeeklyPlan:
        prompt = build_diet_prompt(profile)
        logger.info(f"Generating diet plan (age={profile.age}, preference={profile.preference}, goal={profile.goal}), prompt chars: {len(prompt)}")

        payload = await self.request_json(prompt)
        logger.info("Valid complete JSON received from generator")

        plan = validate_weekly_plan(payload)
        logger.info("Weekly diet plan generated successfully")
        return plan

    async def request_json(self, prompt: str, allow_retry: bool = True) -> Any:
        raw_response = await self.client.generate(DIET_SYSTEM_INSTRUCTION, prompt)
        text = strip_code_fences(raw_response)

        if looks_truncated(text):
            logger.warning(f"Generator response appears truncated ({len(text)} chars)")
            if allow_retry:
                logger.warning("Retrying generator for a complete response")
                return await self.request_json(prompt, allow_retry=False)

        json_text = extract_json_window(text)

        try:
            return json.loads(json_text, parse_constant=reject_non_finite)
        except json.JSONDecodeError as e:
            if allow_retry and is_incomplete_json_error(e):
                logger.warning(f"Generator JSON appears incomplete ({e.msg}); retrying for a complete response")
                return await self.request_json(prompt, allow_retry=False)
            logger.error(f"Generator returned unparseable JSON: {e}")
            raise IncompleteJsonError(f"AI returned incomplete JSON: {e}") from e


async def generate_diet_plan(
    db: Session,
    user: User,
    profile: DietProfileRequest,
    generator: DietPlanGenerator
) -> DietPlan:
    """
    Generate, validate and store a new plan version for ``user``.
    Generation errors propagate before anything is written.
    """
    plan = await generator.generate(profile)

    return crud_diet_plan.create_plan_version(
        db,
        user_id=user.id,
        plan_data=plan.model_dump(mode="json"),
        user_input=profile.model_dump(mode="json"),
        created_by=str(user.id),
    )
