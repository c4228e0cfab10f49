"""
Groq API Client: thin wrapper for the two advisor flows.

The client only sends a prompt and returns the model's raw text. It never
reads or writes the document store; every response is validated by the
caller against a pydantic schema before anything uses it.

- Text model: smart task assignment (JSON mode)
- Vision model: invoice field extraction from an uploaded image (JSON mode)
"""

import logging
import time
from typing import Any, Dict, List, Optional

from groq import Groq, APIError, APITimeoutError, RateLimitError

from app.core.config import settings

# Configure logging (NEVER log API keys or uploaded images)
logger = logging.getLogger(__name__)

Message = Dict[str, Any]


class GroqClient:
    """
    Minimal wrapper for the Groq chat completions API.

    - Temperature: 0 (same input, same suggestion)
    - JSON mode: response_format={"type": "json_object"}
    - Retries: exponential backoff on timeouts and rate limits only

    Returns the raw JSON string, or None on any failure.
    """

    TEMPERATURE = 0
    MAX_TOKENS = 1024

    def __init__(self, api_key: Optional[str] = None):
        """Initialize Groq client with API key from environment."""
        api_key = api_key if api_key is not None else settings.GROQ_API_KEY

        if not api_key:
            logger.warning(
                "GROQ_API_KEY not found in environment. "
                "Smart assignment and invoice extraction are DISABLED. "
                "Add your key to backend/.env file."
            )
            self.client = None
        else:
            self.client = Groq(api_key=api_key, timeout=settings.GROQ_TIMEOUT_SECONDS)
            logger.info("Groq client initialized")

    def is_available(self) -> bool:
        """Check if Groq client is ready to use."""
        return self.client is not None

    def complete_json(
        self,
        messages: List[Message],
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        max_retries: Optional[int] = None,
    ) -> Optional[str]:
        """
        Run one JSON-mode chat completion with retry logic.

        Args:
            messages: chat messages; user content may be a list of text/image parts
            model: defaults to the configured text model
            max_retries: retries for transient failures (timeouts, rate limits)

        Returns:
            Raw JSON string from the model, or None if the call failed
        """
        if not self.is_available():
            logger.debug("Groq client not available - skipping LLM call")
            return None

        model = model or settings.GROQ_TEXT_MODEL
        max_retries = settings.GROQ_MAX_RETRIES if max_retries is None else max_retries

        for attempt in range(max_retries + 1):
            try:
                response = self.client.chat.completions.create(
                    model=model,
                    messages=messages,
                    temperature=self.TEMPERATURE,
                    max_tokens=max_tokens or self.MAX_TOKENS,
                    response_format={"type": "json_object"},
                    stream=False  # No streaming - we need complete JSON
                )

                if response.choices:
                    content = response.choices[0].message.content
                    logger.debug(f"LLM response received: {len(content or '')} chars (attempt {attempt+1})")
                    return content
                logger.warning("LLM returned empty response")
                return None

            except APITimeoutError:
                if attempt < max_retries:
                    wait_time = 0.5 * (2 ** attempt)  # Exponential backoff: 0.5s, 1s
                    logger.warning(f"Groq timeout, retry {attempt+1}/{max_retries} after {wait_time}s")
                    time.sleep(wait_time)
                else:
                    logger.warning(f"Groq API timeout after {max_retries} retries")
                    return None

            except RateLimitError:
                if attempt < max_retries:
                    wait_time = 1.0 * (2 ** attempt)  # Exponential backoff: 1s, 2s
                    logger.warning(f"Groq rate limit, retry {attempt+1}/{max_retries} after {wait_time}s")
                    time.sleep(wait_time)
                else:
                    logger.warning("Groq API rate limit exceeded after retries")
                    return None

            except APIError as e:
                logger.error(f"Groq API error (permanent): {e}")
                return None  # Don't retry permanent errors

        return None


# Singleton instance
_groq_client: Optional[GroqClient] = None


def get_groq_client() -> GroqClient:
    """Get or create singleton Groq client instance."""
    global _groq_client
    if _groq_client is None:
        _groq_client = GroqClient()
    return _groq_client
