"""Summarization through a local OpenAI-compatible model server."""

import json
from collections.abc import AsyncIterator, Callable

import httpx
from lifewrapped_common.logging import setup_logging

from session_summarizer.domain.models import (
    EngineSettings,
    EngineTier,
    ProgressState,
    SummaryResult,
    Transcript,
)
from session_summarizer.domain.prompts import (
    SYSTEM_INSTRUCTION,
    build_session_prompt,
    parse_summary_response,
    prepare_transcript_text,
)
from session_summarizer.exceptions import SummarizationError
from session_summarizer.infrastructure.interfaces import SummarizationEngine

logger = setup_logging()

GENERATING_PHASE = "Generating summary on device"


class LocalEngine(SummarizationEngine):
    """
    Summarizes with a model served on this machine (LM Studio, llama.cpp).

    The chat completion is streamed so progress follows the number of
    generated tokens against ``max_tokens``.
    """

    tier = EngineTier.LOCAL

    def __init__(
        self,
        client_factory: Callable[[], httpx.AsyncClient],
        model_name: str,
        enabled: bool = True,
        max_tokens: int = 1024,
        temperature: float = 0.3,
        settings: EngineSettings | None = None,
    ):
        """
        Args:
            client_factory: Returns a new AsyncClient whose ``base_url``
                points at the model server.
            model_name: Model identifier sent with each request.
            enabled: Whether the on-device model may be used at all.
        """
        self._client_factory = client_factory
        self._model_name = model_name
        self._enabled = enabled
        self._max_tokens = max_tokens
        self._temperature = temperature
        self._settings = settings or EngineSettings.defaults_for(self.tier)

    async def is_available(self) -> bool:
        """Returns True when enabled and the server lists at least one model."""
        if not self._enabled:
            return False
        try:
            async with self._client_factory() as client:
                response = await client.get("/v1/models")
                response.raise_for_status()
                models = response.json().get("data", [])
        except (httpx.HTTPError, ValueError):
            logger.warning("Local model server unreachable")
            return False
        return len(models) > 0

    async def summarize(
        self, transcript: Transcript, language: str | None
    ) -> AsyncIterator[ProgressState | SummaryResult]:
        text = prepare_transcript_text(transcript, self.tier, self._settings)
        yield ProgressState(phase="Loading on-device model", fraction=0.05)

        payload = {
            "model": self._model_name,
            "messages": [
                {"role": "system", "content": SYSTEM_INSTRUCTION},
                {"role": "user", "content": build_session_prompt(text, transcript, language)},
            ],
            "temperature": self._temperature,
            "max_tokens": self._max_tokens,
            "stream": True,
        }

        chunks: list[str] = []
        try:
            async with self._client_factory() as client:
                async with client.stream("POST", "/v1/chat/completions", json=payload) as response:
                    if response.status_code != 200:
                        await response.aread()
                        raise SummarizationError(
                            self.tier, f"model server returned HTTP {response.status_code}"
                        )
                    yield ProgressState(phase=GENERATING_PHASE, fraction=0.1)

                    reported = 0.1
                    async for line in response.aiter_lines():
                        content = _delta_content(line)
                        if content is None:
                            continue
                        if content == "[DONE]":
                            break
                        chunks.append(content)
                        fraction = min(0.9, 0.1 + 0.8 * len(chunks) / self._max_tokens)
                        if fraction - reported >= 0.05:
                            reported = fraction
                            yield ProgressState(phase=GENERATING_PHASE, fraction=fraction)
        except httpx.HTTPError as e:
            logger.exception("Local model request failed", extra={"model": self._model_name})
            raise SummarizationError(self.tier, f"model server request failed: {e}", cause=e) from e

        yield ProgressState(phase="Parsing response", fraction=0.95)
        parsed = parse_summary_response("".join(chunks))
        if not parsed.summary.strip():
            raise SummarizationError(self.tier, "model returned an empty summary")

        logger.info(
            "Local summary generated",
            extra={"model": self._model_name, "chunk_count": len(chunks)},
        )
        yield parsed.to_result(self.tier, transcript, language)


def _delta_content(line: str) -> str | None:
    """Extracts streamed content from one server-sent event line."""
    if not line.startswith("data:"):
        return None
    data = line[5:].strip()
    if data == "[DONE]":
        return data
    try:
        chunk = json.loads(data)
    except json.JSONDecodeError:
        return None
    choices = chunk.get("choices") or [{}]
    return choices[0].get("delta", {}).get("content") or None
