"""Tiered transcription and summarization pipeline."""

import asyncio
from collections.abc import AsyncIterator, Mapping
from contextlib import aclosing
from datetime import datetime

from lifewrapped_common.logging import setup_logging

from session_summarizer.domain.language_detector import LanguageDetector
from session_summarizer.domain.models import (
    AudioResource,
    CancelledEvent,
    CompletedEvent,
    EngineSettings,
    EngineTier,
    FailedEvent,
    PeriodSummary,
    PeriodType,
    PipelineEvent,
    PipelineState,
    ProgressEvent,
    ProgressState,
    SessionCacheEntry,
    SummaryResult,
    Transcript,
)
from session_summarizer.domain.session_cache import SessionResultCache
from session_summarizer.domain.tier_selector import TierPolicy, TierSelector
from session_summarizer.domain.transcription_service import TranscriptionService
from session_summarizer.exceptions import (
    LifeWrappedError,
    PipelineCancelledError,
    SummarizationError,
)
from session_summarizer.infrastructure.interfaces.summarization_engine import (
    SummarizationEngine,
)

logger = setup_logging()

# Portion of the overall progress bar owned by each stage.
_STAGE_WINDOWS = {
    PipelineState.CHECKING_CACHE: (0.0, 0.02),
    PipelineState.SELECTING_TIER: (0.02, 0.05),
    PipelineState.TRANSCRIBING: (0.05, 0.40),
    PipelineState.DETECTING_LANGUAGE: (0.40, 0.45),
    PipelineState.SUMMARIZING: (0.45, 0.95),
    PipelineState.PERSISTING: (0.95, 1.0),
}


class PipelineRun:
    """
    Handle for one in-flight summary run.

    Every event is appended to a shared history, so any number of
    subscribers can follow the run from its start. The history always ends
    with exactly one terminal event.
    """

    def __init__(self, session_id: str):
        self.session_id = session_id
        self.state = PipelineState.IDLE
        self.tier: EngineTier | None = None
        self._history: list[PipelineEvent] = []
        self._condition = asyncio.Condition()
        self._fraction = 0.0
        self._task: asyncio.Task | None = None
        self._wakeup: asyncio.Task | None = None

    @property
    def done(self) -> bool:
        return self.state.is_terminal

    def cancel(self) -> bool:
        """
        Requests cancellation.

        Returns False if the run already finished or is saving its result;
        a save that has started always runs to completion.
        """
        if self._task is None or self._task.done():
            return False
        if self.state is PipelineState.PERSISTING:
            return False
        return self._task.cancel()

    def _settle(self, task: asyncio.Task) -> None:
        """Records the terminal event for a task cancelled before its first step."""
        if not task.cancelled() or self.done:
            return
        stage = self.state
        self.state = PipelineState.CANCELLED
        self._history.append(CancelledEvent(stage=stage))
        self._wakeup = task.get_loop().create_task(self._notify())

    async def _notify(self) -> None:
        async with self._condition:
            self._condition.notify_all()

    async def result(self) -> SessionCacheEntry:
        """
        Waits for the run to finish.

        Cancelling the waiting caller does not cancel the run; use
        ``cancel()`` for that.

        Raises:
            PipelineCancelledError: If the run was cancelled.
            LifeWrappedError: The error that made the run fail.
        """
        assert self._task is not None, "run has not been started"
        try:
            return await asyncio.shield(self._task)
        except asyncio.CancelledError:
            if self._task.cancelled():
                raise PipelineCancelledError(self._cancelled_stage()) from None
            raise

    async def events(self) -> AsyncIterator[PipelineEvent]:
        """Yields every event of the run, ending after the terminal event."""
        index = 0
        while True:
            async with self._condition:
                await self._condition.wait_for(lambda: len(self._history) > index)
                batch = self._history[index:]
            for event in batch:
                index += 1
                yield event
                if not isinstance(event, ProgressEvent):
                    return

    async def transition(self, state: PipelineState) -> None:
        logger.info(
            "Pipeline state changed",
            extra={"session_id": self.session_id, "state": state.value},
        )
        self.state = state
        window = _STAGE_WINDOWS.get(state)
        if window is not None:
            await self.progress(_STATE_PHASES[state], window[0])

    async def progress(self, phase: str, fraction: float) -> None:
        """Publishes progress, never letting the fraction move backwards."""
        self._fraction = max(self._fraction, min(1.0, max(0.0, fraction)))
        await self._publish(
            ProgressEvent(
                state=self.state,
                progress=ProgressState(phase=phase, fraction=self._fraction),
                tier=self.tier,
            )
        )

    async def stage_progress(self, progress: ProgressState) -> None:
        """Publishes stage-relative progress scaled into the stage's window."""
        start, end = _STAGE_WINDOWS[self.state]
        await self.progress(progress.phase, start + (end - start) * progress.fraction)

    async def complete(self, entry: SessionCacheEntry, from_cache: bool) -> None:
        await self.progress("Loaded saved summary" if from_cache else "Summary ready", 1.0)
        self.state = PipelineState.COMPLETED
        await self._publish(CompletedEvent(entry=entry, from_cache=from_cache))

    async def fail(self, error: Exception) -> None:
        stage = self.state
        self.state = PipelineState.FAILED
        await self._publish(
            FailedEvent(stage=stage, error_type=type(error).__name__, message=str(error))
        )

    async def mark_cancelled(self) -> None:
        stage = self.state
        self.state = PipelineState.CANCELLED
        await self._publish(CancelledEvent(stage=stage))

    def _cancelled_stage(self) -> PipelineState | None:
        for event in reversed(self._history):
            if isinstance(event, CancelledEvent):
                return event.stage
        return None

    async def _publish(self, event: PipelineEvent) -> None:
        async with self._condition:
            self._history.append(event)
            self._condition.notify_all()


_STATE_PHASES = {
    PipelineState.CHECKING_CACHE: "Checking for a saved summary",
    PipelineState.SELECTING_TIER: "Choosing a summarization engine",
    PipelineState.TRANSCRIBING: "Transcribing audio",
    PipelineState.DETECTING_LANGUAGE: "Detecting language",
    PipelineState.SUMMARIZING: "Preparing summary",
    PipelineState.PERSISTING: "Saving summary",
}


class SummaryPipeline:
    """
    Orchestrates cache lookup, tier selection, transcription, language
    detection, summarization and persistence for one session at a time.

    At most one run per session id is in flight; a second request for the
    same session attaches to the running one instead of repeating the work.
    """

    def __init__(
        self,
        transcription: TranscriptionService,
        detector: LanguageDetector,
        selector: TierSelector,
        cache: SessionResultCache,
        policy: TierPolicy | None = None,
        engine_settings: Mapping[EngineTier, EngineSettings] | None = None,
    ):
        self._transcription = transcription
        self._detector = detector
        self._selector = selector
        self._cache = cache
        self._policy = policy or TierPolicy()
        self._settings = {
            tier: (engine_settings or {}).get(tier, EngineSettings.defaults_for(tier))
            for tier in EngineTier
        }
        self._active: dict[str, PipelineRun] = {}

    @property
    def policy(self) -> TierPolicy:
        return self._policy

    @property
    def selector(self) -> TierSelector:
        return self._selector

    async def cached_result(self, session_id: str) -> SessionCacheEntry | None:
        """Returns the stored result for a session without running anything."""
        return await self._cache.get(session_id)

    def active_run(self, session_id: str) -> PipelineRun | None:
        run = self._active.get(session_id)
        if run is None or run.done:
            return None
        return run

    def start(
        self,
        session_id: str,
        audio: AudioResource | None = None,
        transcript: Transcript | None = None,
        policy: TierPolicy | None = None,
        force: bool = False,
    ) -> PipelineRun:
        """
        Starts a run for a session, or returns the run already in flight.

        Args:
            session_id: Session the result is cached under.
            audio: Audio to transcribe. Ignored when ``transcript`` is given.
            transcript: An existing transcript; skips transcription.
            policy: Tier policy for this run. Defaults to the pipeline's.
            force: Ignore any cached result and overwrite it.

        Raises:
            ValueError: If neither audio nor a transcript is supplied.
        """
        existing = self.active_run(session_id)
        if existing is not None:
            logger.info("Attaching to in-flight run", extra={"session_id": session_id})
            return existing

        if audio is None and transcript is None:
            raise ValueError("Either audio or a transcript is required")

        run = PipelineRun(session_id)
        run._task = asyncio.create_task(
            self._execute(run, audio, transcript, policy or self._policy, force),
            name=f"summary-pipeline:{session_id}",
        )
        run._task.add_done_callback(run._settle)
        run._task.add_done_callback(lambda _: self._forget(run))
        self._active[session_id] = run
        return run

    async def summarize(
        self,
        session_id: str,
        audio: AudioResource | None = None,
        transcript: Transcript | None = None,
        policy: TierPolicy | None = None,
        force: bool = False,
    ) -> SessionCacheEntry:
        """Runs (or joins) the pipeline for a session and returns its result."""
        run = self.start(session_id, audio, transcript, policy, force)
        return await run.result()

    async def summarize_period(
        self,
        period_type: PeriodType,
        session_ids: list[str],
        period_start: datetime,
        period_end: datetime,
    ) -> PeriodSummary | None:
        """
        Rolls up the cached summaries of the given sessions with the basic tier.

        Sessions without a cached summary are skipped. Returns None when none
        of them has one.

        Raises:
            ValueError: If the period ends before it starts.
            StorageError: If the cache cannot be read.
        """
        if period_end < period_start:
            raise ValueError("period_end must not be before period_start")

        unique_ids = list(dict.fromkeys(session_ids))
        cached = await asyncio.gather(*(self._cache.get(sid) for sid in unique_ids))
        entries = [entry for entry in cached if entry is not None]
        missing = [sid for sid, entry in zip(unique_ids, cached) if entry is None]
        if missing:
            logger.info(
                "Sessions without a cached summary skipped",
                extra={"period_type": period_type.value, "session_ids": missing},
            )
        if not entries:
            return None

        engine = self._selector.engine(EngineTier.BASIC)
        return await engine.summarize_period(period_type, entries, period_start, period_end)

    def _forget(self, run: PipelineRun) -> None:
        if self._active.get(run.session_id) is run:
            del self._active[run.session_id]

    async def _execute(
        self,
        run: PipelineRun,
        audio: AudioResource | None,
        transcript: Transcript | None,
        policy: TierPolicy,
        force: bool,
    ) -> SessionCacheEntry:
        session_id = run.session_id
        try:
            await run.transition(PipelineState.CHECKING_CACHE)
            cached = None if force else await self._cache.get(session_id)
            if cached is not None and not policy.refresh_lower_tier_results:
                await run.complete(cached, from_cache=True)
                return cached

            await run.transition(PipelineState.SELECTING_TIER)
            tier = await self._selector.select(policy)
            if cached is not None and cached.tier.capability_rank >= tier.capability_rank:
                await run.complete(cached, from_cache=True)
                return cached
            run.tier = tier

            if transcript is None:
                await run.transition(PipelineState.TRANSCRIBING)
                transcript = await self._transcribe(run, audio)

            await run.transition(PipelineState.DETECTING_LANGUAGE)
            language = transcript.language or self._detector.detect_language(transcript.text)
            transcript = transcript.with_language(language)

            await run.transition(PipelineState.SUMMARIZING)
            summary = await self._summarize(run, tier, transcript, language, policy)

            await run.transition(PipelineState.PERSISTING)
            entry = await self._persist(run, transcript, summary)

            await run.complete(entry, from_cache=False)
            logger.info(
                "Pipeline completed",
                extra={"session_id": session_id, "tier": summary.tier.value},
            )
            return entry

        except asyncio.CancelledError:
            logger.info(
                "Pipeline cancelled",
                extra={"session_id": session_id, "stage": run.state.value},
            )
            await run.mark_cancelled()
            raise
        except LifeWrappedError as e:
            e.stage = e.stage or run.state
            logger.exception(
                "Pipeline failed",
                extra={"session_id": session_id, "stage": run.state.value},
            )
            await run.fail(e)
            raise
        except Exception as e:
            logger.exception(
                "Pipeline failed unexpectedly",
                extra={"session_id": session_id, "stage": run.state.value},
            )
            await run.fail(e)
            raise

    async def _persist(
        self, run: PipelineRun, transcript: Transcript, summary: SummaryResult
    ) -> SessionCacheEntry:
        """
        Saves the result. Once started, the write is never abandoned half way:
        a cancellation arriving meanwhile is absorbed and the run completes.
        """
        write = asyncio.ensure_future(
            self._cache.put(run.session_id, transcript, summary, summary.tier)
        )
        absorbed = 0
        while True:
            try:
                entry = await asyncio.shield(write)
                break
            except asyncio.CancelledError:
                if write.cancelled():
                    raise
                absorbed += 1
                logger.warning(
                    "Cancellation ignored while saving result",
                    extra={"session_id": run.session_id},
                )
        task = asyncio.current_task()
        for _ in range(absorbed):
            task.uncancel()
        return entry

    async def _transcribe(self, run: PipelineRun, audio: AudioResource) -> Transcript:
        updates: asyncio.Queue[ProgressState] = asyncio.Queue()
        transcript_task = asyncio.ensure_future(
            self._transcription.transcribe(audio, on_progress=updates.put_nowait)
        )
        try:
            while not transcript_task.done():
                next_update = asyncio.ensure_future(updates.get())
                try:
                    await asyncio.wait(
                        {next_update, transcript_task}, return_when=asyncio.FIRST_COMPLETED
                    )
                finally:
                    next_update.cancel()
                if next_update.done() and not next_update.cancelled():
                    await run.stage_progress(next_update.result())
            while not updates.empty():
                await run.stage_progress(updates.get_nowait())
            return transcript_task.result()
        finally:
            if not transcript_task.done():
                transcript_task.cancel()
                await asyncio.gather(transcript_task, return_exceptions=True)

    async def _summarize(
        self,
        run: PipelineRun,
        tier: EngineTier,
        transcript: Transcript,
        language: str | None,
        policy: TierPolicy,
    ) -> SummaryResult:
        try:
            return await self._run_engine(run, self._selector.engine(tier), transcript, language)
        except SummarizationError:
            if not policy.fallback_on_failure or tier is EngineTier.BASIC:
                raise
            logger.warning(
                "Summarization failed, falling back to basic tier",
                extra={"session_id": run.session_id, "tier": tier.value},
            )
            run.tier = EngineTier.BASIC
            await run.progress("Falling back to basic summary", 0.0)
            return await self._run_engine(
                run, self._selector.engine(EngineTier.BASIC), transcript, language
            )

    async def _run_engine(
        self,
        run: PipelineRun,
        engine: SummarizationEngine,
        transcript: Transcript,
        language: str | None,
    ) -> SummaryResult:
        """Drives an engine's stream within the tier's time limit."""
        tier = engine.tier
        timeout = self._settings[tier].timeout_seconds
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout

        try:
            async with aclosing(engine.summarize(transcript, language)) as stream:
                while True:
                    remaining = deadline - loop.time()
                    if remaining <= 0:
                        raise asyncio.TimeoutError()
                    try:
                        item = await asyncio.wait_for(anext(stream), remaining)
                    except StopAsyncIteration:
                        break
                    if isinstance(item, SummaryResult):
                        return item
                    await run.stage_progress(item)
        except asyncio.TimeoutError as e:
            raise SummarizationError(tier, f"no result within {timeout:g} seconds", cause=e) from e
        except LifeWrappedError:
            raise
        except Exception as e:
            raise SummarizationError(tier, str(e) or type(e).__name__, cause=e) from e

        raise SummarizationError(tier, "engine finished without producing a summary")
