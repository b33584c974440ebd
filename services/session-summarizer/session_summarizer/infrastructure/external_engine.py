"""Summarization through hosted model APIs."""

from collections.abc import AsyncIterator, Callable

import httpx
from google import genai
from lifewrapped_common.logging import setup_logging

from session_summarizer.domain.models import (
    EngineSettings,
    EngineTier,
    ExternalProvider,
    ProgressState,
    SummaryResult,
    Transcript,
)
from session_summarizer.domain.prompts import (
    SYSTEM_INSTRUCTION,
    LLMSummary,
    build_session_prompt,
    parse_summary_response,
    prepare_transcript_text,
)
from session_summarizer.exceptions import SummarizationError
from session_summarizer.infrastructure.interfaces import SummarizationEngine

logger = setup_logging()

OPENAI_CHAT_URL = "https://api.openai.com/v1/chat/completions"
ANTHROPIC_MESSAGES_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"


def _default_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=httpx.Timeout(60.0))


class ExternalEngine(SummarizationEngine):
    """
    Summarizes with OpenAI, Anthropic or Google Gemini.

    Available whenever an API key is configured; the key is not verified
    against the provider. OpenAI and Anthropic are called over httpx with a
    client opened per request, Gemini through the ``google-genai`` SDK.
    """

    tier = EngineTier.EXTERNAL

    def __init__(
        self,
        provider: ExternalProvider,
        api_key: str,
        model_name: str | None = None,
        client_factory: Callable[[], httpx.AsyncClient] = _default_client,
        gemini_client: genai.Client | None = None,
        temperature: float = 0.7,
        settings: EngineSettings | None = None,
    ):
        self._provider = ExternalProvider(provider)
        self._api_key = api_key
        self._model_name = model_name or self._provider.default_model
        self._client_factory = client_factory
        self._gemini_client = gemini_client
        self._temperature = temperature
        self._settings = settings or EngineSettings.defaults_for(self.tier)

    @property
    def provider(self) -> ExternalProvider:
        return self._provider

    async def is_available(self) -> bool:
        return bool(self._api_key)

    async def summarize(
        self, transcript: Transcript, language: str | None
    ) -> AsyncIterator[ProgressState | SummaryResult]:
        if not self._api_key:
            raise SummarizationError(self.tier, "no API key configured")

        text = prepare_transcript_text(transcript, self.tier, self._settings)
        provider_name = self._provider.display_name
        yield ProgressState(phase=f"Sending transcript to {provider_name}", fraction=0.1)

        prompt = build_session_prompt(text, transcript, language)
        yield ProgressState(phase=f"Waiting for {provider_name} to respond", fraction=0.3)
        content = await self._request(prompt)

        yield ProgressState(phase="Parsing response", fraction=0.9)
        parsed = parse_summary_response(content)
        if not parsed.summary.strip():
            raise SummarizationError(self.tier, f"{provider_name} returned an empty summary")

        logger.info(
            "External summary generated",
            extra={"provider": self._provider.value, "model": self._model_name},
        )
        yield parsed.to_result(self.tier, transcript, language)

    async def _request(self, prompt: str) -> str:
        """
        Sends the prompt to the configured provider.

        Returns:
            The raw text content of the model's reply.

        Raises:
            SummarizationError: If the request fails or the reply is malformed.
        """
        try:
            if self._provider is ExternalProvider.GEMINI:
                return await self._request_gemini(prompt)
            async with self._client_factory() as client:
                if self._provider is ExternalProvider.OPENAI:
                    return await self._request_openai(client, prompt)
                return await self._request_anthropic(client, prompt)
        except SummarizationError:
            raise
        except httpx.HTTPStatusError as e:
            logger.exception(
                "External API returned an error",
                extra={"provider": self._provider.value, "status": e.response.status_code},
            )
            raise SummarizationError(
                self.tier,
                f"{self._provider.display_name} returned HTTP {e.response.status_code}",
                cause=e,
            ) from e
        except (KeyError, IndexError, TypeError, ValueError) as e:
            logger.exception("Malformed external API response", extra={"provider": self._provider.value})
            raise SummarizationError(self.tier, "unexpected response format", cause=e) from e
        except Exception as e:
            logger.exception("External API call failed", extra={"provider": self._provider.value})
            raise SummarizationError(
                self.tier, f"request to {self._provider.display_name} failed: {e}", cause=e
            ) from e

    async def _request_openai(self, client: httpx.AsyncClient, prompt: str) -> str:
        response = await client.post(
            OPENAI_CHAT_URL,
            headers={"Authorization": f"Bearer {self._api_key}"},
            json={
                "model": self._model_name,
                "messages": [
                    {"role": "system", "content": SYSTEM_INSTRUCTION},
                    {"role": "user", "content": prompt},
                ],
                "temperature": self._temperature,
                "response_format": {"type": "json_object"},
            },
        )
        response.raise_for_status()
        return response.json()["choices"][0]["message"]["content"]

    async def _request_anthropic(self, client: httpx.AsyncClient, prompt: str) -> str:
        response = await client.post(
            ANTHROPIC_MESSAGES_URL,
            headers={
                "x-api-key": self._api_key,
                "anthropic-version": ANTHROPIC_VERSION,
            },
            json={
                "model": self._model_name,
                "system": SYSTEM_INSTRUCTION,
                "messages": [{"role": "user", "content": prompt}],
                "max_tokens": 2000,
                "temperature": self._temperature,
            },
        )
        response.raise_for_status()
        blocks = response.json()["content"]
        return "".join(block["text"] for block in blocks if block.get("type") == "text")

    async def _request_gemini(self, prompt: str) -> str:
        client = self._gemini_client or genai.Client(api_key=self._api_key)
        response = await client.aio.models.generate_content(
            model=self._model_name,
            contents=prompt,
            config={
                "response_mime_type": "application/json",
                "response_schema": LLMSummary,
                "system_instruction": SYSTEM_INSTRUCTION,
            },
        )
        if not response.text:
            raise SummarizationError(self.tier, "Gemini returned empty response")
        return response.text
