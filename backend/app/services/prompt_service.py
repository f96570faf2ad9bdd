import json
import re
from typing import Dict, Iterable

from app.schemas.diet_plan import DietProfileRequest
from app.utils.llm_prompts.diet_prompts import (
    DIET_PLAN_PROMPT, DIET_PLAN_PLACEHOLDERS, WHATSAPP_QA_PROMPT, QA_PLACEHOLDERS
)

"""
Prompt Builder
--------------
Renders the fixed prompt templates. User text is flattened to one line,
stripped of braces and length-capped before insertion, and substitution is
a single pass so inserted text is never scanned for placeholders again.
"""

MAX_PROFILE_FIELD_CHARS = 300
MAX_QUESTION_CHARS = 1000

_WHITESPACE = re.compile(r"\s+")


def flatten_value(value, max_chars: int = MAX_PROFILE_FIELD_CHARS) -> str:
    text = _WHITESPACE.sub(" ", str(value)).strip()
    text = text.replace("{", "(").replace("}", ")")
    if len(text) > max_chars:
        text = text[:max_chars].rstrip()
    return text


def render_template(template: str, values: Dict[str, str], placeholders: Iterable[str]) -> str:
    """
    Substitute every ``{name}`` in ``placeholders`` exactly once.

    Raises ValueError if the template does not contain each placeholder
    exactly once or a value is missing; both are programming errors.
    """
    placeholders = tuple(placeholders)
    missing = [name for name in placeholders if name not in values]
    if missing:
        raise ValueError(f"Missing prompt values: {', '.join(missing)}")

    for name in placeholders:
        occurrences = template.count("{" + name + "}")
        if occurrences != 1:
            raise ValueError(f"Placeholder {{{name}}} appears {occurrences} times in template")

    pattern = re.compile(r"\{(" + "|".join(re.escape(name) for name in placeholders) + r")\}")
    return pattern.sub(lambda match: values[match.group(1)], template)


def build_diet_prompt(profile: DietProfileRequest) -> str:
    values = {name: flatten_value(getattr(profile, name)) for name in DIET_PLAN_PLACEHOLDERS}
    return render_template(DIET_PLAN_PROMPT, values, DIET_PLAN_PLACEHOLDERS)


def build_qa_prompt(plan_data: dict, question: str) -> str:
    values = {
        "diet_plan": json.dumps(plan_data, indent=2, ensure_ascii=False),
        "question": flatten_value(question, max_chars=MAX_QUESTION_CHARS),
    }
    return render_template(WHATSAPP_QA_PROMPT, values, QA_PLACEHOLDERS)
