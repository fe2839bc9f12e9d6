"""LLM client for synthetic event generation using Groq."""

from groq import AsyncGroq, GroqError

from lovesync_events.config.settings import get_settings
from lovesync_events.core.exceptions import LLMError, MissingApiKeyError
from lovesync_events.logging.logger import get_logger

logger = get_logger(__name__)


class LLMClient:
    """Thin wrapper over the Groq chat completions API."""

    def __init__(self, api_key: str | None = None, model: str | None = None) -> None:
        settings = get_settings()
        self.api_key = api_key if api_key is not None else settings.groq_api_key
        self.model = model or settings.groq_model
        self._client: AsyncGroq | None = None

    @property
    def client(self) -> AsyncGroq:
        """Lazy initialization of Groq client."""
        if self._client is None:
            if not self.api_key:
                raise MissingApiKeyError("ai_generated", "GROQ_API_KEY")
            self._client = AsyncGroq(api_key=self.api_key)
        return self._client

    async def complete(
        self,
        prompt: str,
        system: str,
        temperature: float = 0.8,
        max_tokens: int = 4000,
    ) -> str:
        """Run one chat completion and return the raw text.

        Raises:
            LLMError: API failure or empty response
        """
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": prompt},
                ],
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except GroqError as e:
            logger.error("llm_error", model=self.model, error=str(e))
            raise LLMError(str(e), model=self.model, source="ai_generated") from e

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise LLMError("Empty response", model=self.model, source="ai_generated")

        usage = getattr(response, "usage", None)
        logger.info(
            "llm_completed",
            model=self.model,
            total_tokens=getattr(usage, "total_tokens", None),
        )
        return content
