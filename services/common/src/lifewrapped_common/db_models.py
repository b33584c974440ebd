from datetime import datetime

from sqlalchemy import Column
from sqlalchemy.types import Text
from sqlmodel import Field, SQLModel


class SessionSummaryRecord(SQLModel, table=True):
    __tablename__ = "session_summaries"

    session_id: str = Field(primary_key=True, max_length=255)
    tier: str = Field(max_length=32)
    transcript_json: str = Field(sa_column=Column(Text, nullable=False))
    summary_json: str = Field(sa_column=Column(Text, nullable=False))
    generated_at: datetime
