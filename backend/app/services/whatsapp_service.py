import logging

from langfuse import observe
from sqlalchemy.orm import Session

from app.crud import diet_plan as crud_diet_plan
from app.crud import user as crud_user
from app.exceptions import DietServiceError
from app.services.llm_service import GenerationClient
from app.services.prompt_service import build_qa_prompt
from app.utils.llm_prompts.diet_prompts import QA_SYSTEM_INSTRUCTION

logger = logging.getLogger(__name__)

"""
WhatsApp Query Service
----------------------
Answers a free-text question from the user's active plan. Stateless, plain
text in and out, so a no-code automation tool can drive it. Every failure
degrades to one of the fixed messages below; nothing technical reaches the
messaging transport.
"""

NOT_REGISTERED_MESSAGE = (
    "Sorry, I could not find an account associated with this phone number. "
    "Please register on the MediDiet platform first."
)
NO_ACTIVE_PLAN_MESSAGE = (
    "You don't have an active diet plan yet. "
    "Please visit the MediDiet platform to generate a personalized diet plan."
)
CONFIG_ERROR_MESSAGE = "Sorry, there is a configuration issue. Please try again later."
RATE_LIMIT_MESSAGE = "Too many requests. Please wait a moment and try again."
GENERIC_ERROR_MESSAGE = "Sorry, I encountered an error processing your request. Please try again in a moment."


def _friendly_error(error: Exception) -> str:
    text = str(error).lower()
    if "api key" in text or "api_key" in text:
        return CONFIG_ERROR_MESSAGE
    if "rate limit" in text or "quota" in text or "429" in text:
        return RATE_LIMIT_MESSAGE
    return GENERIC_ERROR_MESSAGE


@observe(name="whatsapp_query")
async def handle_query(db: Session, phone: str, message: str, client: GenerationClient) -> str:
    try:
        return await _answer_from_plan(db, phone, message, client)
    except DietServiceError as e:
        logger.error(f"WhatsApp answer generation failed: {e}")
        return _friendly_error(e)
    except Exception:
        # Lookup or prompt failure; the webhook still answers in plain text
        logger.exception("WhatsApp query failed")
        return GENERIC_ERROR_MESSAGE


async def _answer_from_plan(db: Session, phone: str, message: str, client: GenerationClient) -> str:
    # Step 1: Find user by phone number
    user = crud_user.get_user_by_phone(db, phone)
    if not user:
        logger.warning("WhatsApp query from unregistered phone")
        return NOT_REGISTERED_MESSAGE

    # Step 2: Fetch active diet plan
    plan = crud_diet_plan.find_active_plan(db, user.id)
    if not plan:
        logger.warning(f"No active diet plan found for user {user.id}")
        return NO_ACTIVE_PLAN_MESSAGE

    logger.info(f"Answering WhatsApp query for user {user.id} from plan v{plan.version} ({len(message)} chars)")

    # Step 3: Ask the generator, grounded in the stored plan
    prompt = build_qa_prompt(plan.plan_data, message)
    answer = await client.generate(QA_SYSTEM_INSTRUCTION, prompt)
    return answer.strip()
