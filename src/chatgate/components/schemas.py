"""
Shared data models for gateway state.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Annotated, Literal
import uuid

from pydantic import ConfigDict, Field

from chatgate.base_schemas import BaseJSONModel


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class _HistoryEntryBase(BaseJSONModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id, description="Unique message identifier")
    user_id: str
    source_language: str
    target_language: str
    timestamp: datetime = Field(default_factory=_utcnow)


class TextHistoryEntry(_HistoryEntryBase):
    kind: Literal["text"] = "text"
    original_text: str
    translated_text: str


class AudioHistoryEntry(_HistoryEntryBase):
    kind: Literal["audio"] = "audio"
    original_size_bytes: int
    processed_size_bytes: int


HistoryEntry = Annotated[TextHistoryEntry | AudioHistoryEntry, Field(discriminator="kind")]


@dataclass(frozen=True, slots=True)
class PerformanceSample:
    """One timing/size observation for one hop."""

    elapsed_ms: float
    payload_size_bytes: int
