"""Thin async wrapper around Groq chat completions with typed failures."""

import logging
from typing import Optional

import groq
from groq import AsyncGroq

from parka.core.config import Settings
from parka.core.exceptions import DecodeFailed, NoContent, RequestFailed, Timeout, Unavailable

logger = logging.getLogger(__name__)


class LanguageModelClient:
    """
    Sends a single prompt and returns the reply text.

    Every failure surfaces as one of `RequestFailed`, `NoContent`,
    `DecodeFailed`, `Timeout` or `Unavailable`.
    """

    def __init__(self, settings: Settings, client: Optional[AsyncGroq] = None):
        self.model = settings.LLM_MODEL_NAME
        self.temperature = settings.TEMPERATURE
        self.max_tokens = settings.MAX_OUTPUT_TOKENS
        self.client = client or AsyncGroq(
            api_key=settings.GROQ_API_KEY,
            timeout=settings.LLM_TIMEOUT_SECONDS,
            max_retries=0,
        )

    async def generate(self, prompt: str) -> str:
        try:
            chat_completion = await self.client.chat.completions.create(
                messages=[{"role": "user", "content": prompt}],
                model=self.model,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except groq.APITimeoutError:
            logger.error("The language model request timed out.")
            raise Timeout("The language model did not answer in time.")
        except groq.APIConnectionError as e:
            logger.error(f"Could not reach the language model: {e}")
            raise Unavailable(f"Connection error: {e}")
        except groq.APIStatusError as e:
            logger.error(f"Language model request failed with code {e.status_code}")
            raise RequestFailed(e.status_code)
        except (groq.APIResponseValidationError, ValueError) as e:
            logger.error(f"Unreadable language model response: {e}")
            raise DecodeFailed("Failed to process response")

        try:
            choices = chat_completion.choices
            content = choices[0].message.content if choices else None
        except (AttributeError, TypeError) as e:
            raise DecodeFailed(f"Failed to process response: {e}")

        if not content or not content.strip():
            raise NoContent("No content in response")
        return content.strip()
