"""Turn raw model text into a validated pydantic object."""

import json
import logging
from typing import Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


def strip_code_fence(text: str) -> str:
    """Remove a ```json ... ``` wrapper if the model added one."""
    response_clean = text.strip()
    if response_clean.startswith("```"):
        lines = response_clean.split("\n")
        # Remove first line (```json or ```)
        if lines[0].strip().startswith("```"):
            lines = lines[1:]
        # Remove last line (```)
        if lines and lines[-1].strip() == "```":
            lines = lines[:-1]
        response_clean = "\n".join(lines).strip()
    return response_clean


def parse_and_validate(llm_response: Optional[str], schema: Type[T]) -> Optional[T]:
    """Validated object, or None when the text is not JSON or breaks the schema."""
    if not llm_response:
        return None
    try:
        data = json.loads(strip_code_fence(llm_response))
    except json.JSONDecodeError as e:
        logger.warning(f"Invalid JSON from LLM: {e}")
        return None

    if not isinstance(data, dict):
        logger.warning(f"LLM returned {type(data).__name__}, expected an object")
        return None

    try:
        return schema.model_validate(data)
    except ValidationError as e:
        logger.warning(f"Schema validation failed for {schema.__name__}: {e.error_count()} errors")
        return None
