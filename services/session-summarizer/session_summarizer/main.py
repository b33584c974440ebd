"""FastAPI application entry point."""

from ddtrace import patch_all
from fastapi import FastAPI

from session_summarizer.routes import summaries_router

patch_all()

app = FastAPI(title="Life Wrapped Session Summarizer")
app.include_router(summaries_router)
