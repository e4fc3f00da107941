"""OpenAI chat completion service used for answer generation."""

from typing import Optional

from openai import AsyncOpenAI

from ragpipe.core.config import settings
from ragpipe.core.exceptions import LLMError
from ragpipe.models.response import Completion


class LLMService:
    """Service for generating LLM responses."""

    def __init__(
        self, client: Optional[AsyncOpenAI] = None, model: Optional[str] = None
    ) -> None:
        """
        Initialize the LLM service.

        Args:
            client: Preconfigured OpenAI client; built from settings when omitted.
            model: Chat model identifier.
        """
        self.client = client or AsyncOpenAI(
            api_key=settings.openai_api_key, base_url=settings.openai_base_url
        )
        self.model = model or settings.llm_model

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float,
        max_tokens: int,
    ) -> Completion:
        """
        Generate a completion for a system and user prompt.

        Args:
            system_prompt: Instructions for the model.
            user_prompt: Prompt carrying the context and question.
            temperature: Sampling temperature.
            max_tokens: Upper bound on generated tokens.

        Returns:
            Generated text and the total tokens billed for the call.

        Raises:
            LLMError: If response generation fails.
        """
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except Exception as e:
            raise LLMError(f"Failed to generate response: {str(e)}") from e

        if not response.choices:
            raise LLMError("Empty response from LLM")

        content = response.choices[0].message.content or ""
        total_tokens = response.usage.total_tokens if response.usage else 0
        return Completion(text=content, total_tokens=total_tokens)
