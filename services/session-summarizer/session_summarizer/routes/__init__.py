from session_summarizer.routes.summaries import router as summaries_router

__all__ = ["summaries_router"]
