"""Tiered transcription and summarization service for recorded sessions."""
