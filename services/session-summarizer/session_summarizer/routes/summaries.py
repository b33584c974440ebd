"""Session summary endpoints."""

from typing import Annotated, List

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse
from lifewrapped_common.logging import setup_logging

from session_summarizer.dependencies import get_pipeline
from session_summarizer.domain.models import (
    AudioResource,
    EngineTier,
    PeriodSummary,
    Transcript,
)
from session_summarizer.domain.pipeline import SummaryPipeline
from session_summarizer.exceptions import (
    AudioFileNotFoundError,
    InvalidAudioFormatError,
    LifeWrappedError,
    NotAuthorizedError,
    NotAvailableError,
    PipelineCancelledError,
    RecognitionFailedError,
    RecognizerSetupError,
    StorageError,
    SummarizationError,
)
from session_summarizer.response_models import (
    CancelResponse,
    EngineStatus,
    PeriodSummaryRequest,
    SessionSummaryResponse,
    SummaryRequest,
)

logger = setup_logging()

router = APIRouter(tags=["summaries"])

PipelineDep = Annotated[SummaryPipeline, Depends(get_pipeline)]

_STATUS_CODES: list[tuple[type[LifeWrappedError], int]] = [
    (AudioFileNotFoundError, 404),
    (InvalidAudioFormatError, 422),
    (NotAuthorizedError, 403),
    (NotAvailableError, 503),
    (RecognizerSetupError, 503),
    (RecognitionFailedError, 502),
    (PipelineCancelledError, 409),
    (SummarizationError, 502),
    (StorageError, 500),
]


def _http_error(error: LifeWrappedError) -> HTTPException:
    """Maps a pipeline error to an HTTP error with a client-safe message."""
    status_code = next(
        (code for kind, code in _STATUS_CODES if isinstance(error, kind)), 500
    )
    detail = {
        "error": type(error).__name__,
        "message": error.description,
        "stage": error.stage.value if error.stage else None,
    }
    return HTTPException(status_code=status_code, detail=detail)


@router.get("/sessions/{session_id}/summary", response_model=SessionSummaryResponse)
async def get_summary(session_id: str, pipeline: PipelineDep):
    """Returns the stored summary for a session."""
    try:
        entry = await pipeline.cached_result(session_id)
    except LifeWrappedError as e:
        raise _http_error(e)
    if entry is None:
        raise HTTPException(status_code=404, detail="Summary not found")
    return SessionSummaryResponse.from_entry(entry)


@router.post("/sessions/{session_id}/summary", response_model=SessionSummaryResponse)
async def create_summary(
    session_id: str,
    request: SummaryRequest,
    pipeline: PipelineDep,
    stream: bool = False,
):
    """
    Generates (or returns the cached) summary for a session.

    With ``stream=true`` the response is newline-delimited JSON: every
    pipeline event in order, ending with one terminal event.
    """
    audio = AudioResource(locator=request.audio_path) if request.audio_path else None
    transcript = (
        Transcript(text=request.transcript_text) if request.transcript_text is not None else None
    )
    policy = pipeline.policy.forcing(request.tier) if request.tier else None

    logger.info(
        "Received summary request",
        extra={
            "session_id": session_id,
            "tier": request.tier.value if request.tier else None,
            "force": request.force,
            "stream": stream,
        },
    )

    run = pipeline.start(session_id, audio, transcript, policy=policy, force=request.force)

    if stream:

        async def _events():
            async for event in run.events():
                yield event.model_dump_json() + "\n"

        return StreamingResponse(_events(), media_type="application/x-ndjson")

    try:
        entry = await run.result()
    except LifeWrappedError as e:
        raise _http_error(e)
    return SessionSummaryResponse.from_entry(entry)


@router.delete("/sessions/{session_id}/summary/run", response_model=CancelResponse)
async def cancel_summary(session_id: str, pipeline: PipelineDep):
    """Cancels the in-flight summary run for a session."""
    run = pipeline.active_run(session_id)
    if run is None:
        raise HTTPException(status_code=404, detail="No summary run in progress")
    return CancelResponse(session_id=session_id, cancelled=run.cancel())


@router.get("/engines", response_model=List[EngineStatus])
async def list_engines(pipeline: PipelineDep):
    """Lists every summarization tier with its current availability."""
    available = await pipeline.selector.available_tiers()
    return [
        EngineStatus(
            tier=tier,
            display_name=tier.display_name,
            description=tier.description,
            available=tier in available,
            permitted=pipeline.policy.permits(tier),
            requires_internet=tier.requires_internet,
            privacy_preserving=tier.is_privacy_preserving,
        )
        for tier in EngineTier
    ]


@router.post("/periods/summary", response_model=PeriodSummary)
async def create_period_summary(request: PeriodSummaryRequest, pipeline: PipelineDep):
    """Rolls the cached summaries of the requested sessions up into one period summary."""
    logger.info(
        "Received period summary request",
        extra={
            "period_type": request.period_type.value,
            "session_count": len(request.session_ids),
        },
    )
    try:
        summary = await pipeline.summarize_period(
            request.period_type,
            request.session_ids,
            request.period_start,
            request.period_end,
        )
    except LifeWrappedError as e:
        raise _http_error(e)
    if summary is None:
        raise HTTPException(status_code=404, detail="No cached summaries for these sessions")
    return summary
