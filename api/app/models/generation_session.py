"""
GenerationSession model.
"""
from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime
from sqlalchemy import Column, JSON
import uuid

from app.utils.time_utils import utc_now, utc_timestamp_column


class GenerationSession(SQLModel, table=True):
    """GenerationSession table - one AI generation run over a source text."""
    __tablename__ = "generation_session"
    
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    user_id: uuid.UUID = Field(foreign_key="user.id", index=True)
    source_text: str
    model_name: str = Field(default="pending")  # Set after the LLM call returns
    llm_response: dict = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    model_params: Optional[dict] = Field(default=None, sa_column=Column(JSON, nullable=True))
    generated_count: int = Field(default=0)
    accepted_count: int = Field(default=0)
    rejected_count: int = Field(default=0)
    created_at: datetime = Field(default_factory=utc_now, sa_column=utc_timestamp_column())
