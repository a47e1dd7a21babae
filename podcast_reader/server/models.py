"""Pydantic request/response models for the HTTP API.

WHY: The FastAPI endpoints need typed schemas for request validation,
response serialization, and automatic OpenAPI documentation. Pydantic
models enforce field types at runtime and generate JSON Schema that
appears in the /docs UI.

HOW: Request models validate what the browser sends (feed URL, audio
URL, chat history, transcript view commands); response models mirror
the core dataclasses. SessionResponse is built from
TranscriptView.snapshot() plus the session's pending seek commands.

RULES:
- All models use Field(description=...) for OpenAPI documentation
- Word times are float seconds; end_time >= start_time
- Word indices are 0-based and relative to the page
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, Field, model_validator

from podcast_reader.config import WORDS_PER_PAGE


# ---------------------------------------------------------------------------
# Shared
# ---------------------------------------------------------------------------


class WordModel(BaseModel):
    """A transcribed word with timing."""

    text: str = Field(
        description="Display text of the word.",
        validation_alias=AliasChoices("text", "punctuated_word", "word"),
    )
    start_time: float = Field(
        ge=0,
        description="Start time in seconds.",
        validation_alias=AliasChoices("start_time", "start"),
    )
    end_time: float = Field(
        ge=0,
        description="End time in seconds.",
        validation_alias=AliasChoices("end_time", "end"),
    )
    confidence: float = Field(default=1.0, ge=0, le=1, description="Recognition confidence 0–1.")

    @model_validator(mode="after")
    def _check_span(self) -> WordModel:
        if self.end_time < self.start_time:
            raise ValueError("end_time must be >= start_time")
        return self


class ErrorResponse(BaseModel):
    """Standard error response body."""

    detail: str = Field(description="Human-readable error description.")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(description="Service health status.", json_schema_extra={"example": "ok"})
    version: str = Field(description="API version string.", json_schema_extra={"example": "0.1.0"})


# ---------------------------------------------------------------------------
# Feeds
# ---------------------------------------------------------------------------


class FeedRequest(BaseModel):
    url: Optional[str] = Field(default=None, description="RSS feed URL.")


class EpisodeModel(BaseModel):
    id: str = Field(description="guid, link, or positional id of the episode.")
    title: str = Field(description="Episode title.")
    description: str = Field(default="", description="Episode description (may contain HTML).")
    content: str = Field(default="", description="Full show notes, or the description.")
    date: str = Field(default="", description="Publication date as YYYY-MM-DD, or empty.")
    link: str = Field(default="", description="Episode web page.")
    audio_url: Optional[str] = Field(default=None, description="Audio URL, when the feed has one.")


class FeedResponse(BaseModel):
    title: str = Field(description="Feed title.")
    description: str = Field(description="Feed description.")
    items: List[EpisodeModel] = Field(description="Episodes in feed order (at most 25).")


# ---------------------------------------------------------------------------
# Transcription
# ---------------------------------------------------------------------------


class TranscribeRequest(BaseModel):
    audio_url: Optional[str] = Field(
        default=None,
        description="Public URL of the episode audio.",
        validation_alias=AliasChoices("audio_url", "audioUrl"),
    )


class TranscriptionResponse(BaseModel):
    transcript: str = Field(description="Full transcript text.")
    words: List[WordModel] = Field(description="Timed words in speech order.")


# ---------------------------------------------------------------------------
# Chat
# ---------------------------------------------------------------------------


class ChatMessageModel(BaseModel):
    role: str = Field(description="'system', 'user', or 'assistant'.", pattern="^(system|user|assistant)$")
    content: str = Field(description="Message text.")


class ChatRequest(BaseModel):
    messages: List[ChatMessageModel] = Field(description="Full conversation history, oldest first.")


class ChatResponse(BaseModel):
    id: str = Field(description="Reply identifier.")
    model: str = Field(description="Model that produced the reply.")
    message: ChatMessageModel = Field(description="The assistant reply.")


class ProviderKeyStatus(BaseModel):
    configured: bool = Field(description="Whether the provider can be used.")
    key: Optional[str] = Field(default=None, description="Masked key, or a note for keyless providers.")
    note: str = Field(description="Pricing/usage note.")


ApiKeyStatusResponse = Dict[str, ProviderKeyStatus]


# ---------------------------------------------------------------------------
# Transcript sessions
# ---------------------------------------------------------------------------


class SessionCreateRequest(BaseModel):
    words: List[WordModel] = Field(default_factory=list, description="Transcript words in speech order.")
    words_per_page: int = Field(default=WORDS_PER_PAGE, gt=0, description="Words per page.")
    title: Optional[str] = Field(default=None, description="Episode title for display.")


class TimeUpdateRequest(BaseModel):
    time: float = Field(ge=0, description="Current playback time in seconds.")


class SeekRequest(BaseModel):
    time: float = Field(ge=0, description="Target playback time in seconds.")
    play: bool = Field(default=True, description="Start playback after seeking.")


class JumpInputRequest(BaseModel):
    text: str = Field(default="", description="Text currently typed in the page-jump box.")


class JumpRequest(BaseModel):
    # Any JSON value is accepted; the transcript core decides what counts as a page
    page: Any = Field(
        default=None,
        description="1-based page number as typed by the user. Omit to use the stored jump input.",
    )


class PageSizeRequest(BaseModel):
    words_per_page: int = Field(gt=0, description="New number of words per page.")


class IntersectedWord(BaseModel):
    index: Optional[int] = Field(default=None, description="data-word-index of the element, if any.")
    text: Optional[str] = Field(default=None, description="Element text content.")


class SelectionRequest(BaseModel):
    exists: bool = Field(default=True, description="A selection exists.")
    collapsed: bool = Field(default=False, description="The selection is a caret.")
    within_container: bool = Field(default=True, description="The range lies inside the transcript.")
    intersected: List[IntersectedWord] = Field(
        default_factory=list, description="Word elements the range intersects, in document order.",
    )


class CommentRequest(BaseModel):
    text: str = Field(default="", description="Comment text; blank clears the comment.")


class PageModel(BaseModel):
    page_number: int
    start_time: float
    end_time: float
    words: List[WordModel]


class SelectionModel(BaseModel):
    text: str
    start_word_index: int
    end_word_index: int


class NoteModel(BaseModel):
    id: str
    anchor_text: str
    custom_comment: Optional[str] = None
    start_time: float
    end_time: float
    page_number: int
    start_word_index: int
    end_word_index: int


class SeekCommandModel(BaseModel):
    time: float = Field(description="Position the client should seek its audio to.")
    play: bool = Field(description="Whether the client should start playback.")


class SessionResponse(BaseModel):
    """State of a remote transcript view."""

    id: str = Field(description="Session identifier.")
    title: Optional[str] = Field(default=None, description="Episode title.")
    page_size: int
    word_count: int
    page_count: int
    current_page_index: int = Field(description="0-based index of the page showing.")
    current_time: float
    active_word_index: Optional[int] = Field(default=None, description="Word being spoken on the page.")
    jump_input: str = Field(description="Page-jump input text (always cleared after a jump).")
    page: Optional[PageModel] = None
    selection: Optional[SelectionModel] = None
    notes: List[NoteModel]
    seek_commands: List[SeekCommandModel] = Field(
        default_factory=list, description="Seek commands issued since the last response.",
    )


class ConfirmResponse(BaseModel):
    note: Optional[NoteModel] = Field(default=None, description="The new note, or null if the selection was stale.")
    session: SessionResponse
