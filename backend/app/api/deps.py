from functools import lru_cache

import config
from app.services.diet_service import DietPlanGenerator
from app.services.llm_service import GenerationClient, GenerationSettings

# Plan generation samples hotter for variety; Q&A cooler for consistent answers
PLAN_TEMPERATURE = 0.7
QA_TEMPERATURE = 0.4


@lru_cache
def get_plan_client() -> GenerationClient:
    settings = GenerationSettings.from_config(
        temperature=PLAN_TEMPERATURE,
        timeout=config.PLAN_TIMEOUT_SECONDS,
    )
    return GenerationClient(settings)


@lru_cache
def get_qa_client() -> GenerationClient:
    settings = GenerationSettings.from_config(
        temperature=QA_TEMPERATURE,
        max_tokens=1024,
        timeout=config.QA_TIMEOUT_SECONDS,
    )
    return GenerationClient(settings)


def get_diet_generator() -> DietPlanGenerator:
    return DietPlanGenerator(get_plan_client())
