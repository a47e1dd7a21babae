"""FastAPI application: feed, transcription, chat, and transcript sessions.

WHY: The browser UI needs one backend for everything it cannot do
itself: fetching RSS feeds (CORS), calling Deepgram and the LLM APIs
with server-side keys, and holding transcript view state (pages,
playback sync, selections, notes) for the episode being read.

HOW: A single FastAPI app exposes endpoints grouped by tags. Feed and
transcription endpoints are thin async wrappers around the collaborator
clients. Chat endpoints pick a provider by path. Session endpoints map
one-to-one onto TranscriptView commands; every session response carries
the view snapshot plus the seek commands issued since the last response,
which the client applies to its audio element.

RULES:
- Error responses use a consistent ErrorResponse schema
- Collaborator failures surface as human-readable 4xx/5xx details
- Soft failures in the transcript core (bad page jump, empty selection,
  stale confirm, deleting a missing note) are not HTTP errors
- The session store is a singleton created at import
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Callable

import httpx
from fastapi import FastAPI, HTTPException, Query, Response

from podcast_reader import __version__
from podcast_reader.api.client import DeepgramAPIError, DeepgramClient, validate_audio_url
from podcast_reader.api.models import TranscriptionError
from podcast_reader.chat.history import ChatMessage
from podcast_reader.chat.providers import ChatProviderError, get_provider
from podcast_reader.config import api_key_status
from podcast_reader.core.ir import RawSelection, Word
from podcast_reader.core.session import (
    CancelNote,
    CaptureSelection,
    ConfirmNote,
    DeleteNote,
    JumpToPage,
    NextPage,
    PlayNote,
    PreviousPage,
    Seek,
    SetComment,
    SetJumpInput,
    SetPageSize,
    TimeUpdate,
)
from podcast_reader.feeds.client import FeedFetchError, fetch_feed
from podcast_reader.feeds.parser import FeedParseError
from podcast_reader.formatters import FORMATTERS
from podcast_reader.server.models import (
    ApiKeyStatusResponse,
    ChatMessageModel,
    ChatRequest,
    ChatResponse,
    CommentRequest,
    ConfirmResponse,
    ErrorResponse,
    FeedRequest,
    FeedResponse,
    HealthResponse,
    JumpInputRequest,
    JumpRequest,
    NoteModel,
    PageSizeRequest,
    ProviderKeyStatus,
    SeekRequest,
    SelectionRequest,
    SessionCreateRequest,
    SessionResponse,
    TimeUpdateRequest,
    TranscribeRequest,
    TranscriptionResponse,
)
from podcast_reader.server.sessions import Session, SessionStore

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# App and store setup
# ---------------------------------------------------------------------------

session_store = SessionStore()


async def _periodic_cleanup() -> None:
    """Run session cleanup every 5 minutes."""
    while True:
        await asyncio.sleep(300)
        session_store.cleanup_expired()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start periodic cleanup on startup, cancel on shutdown."""
    task = asyncio.create_task(_periodic_cleanup())
    yield
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass


app = FastAPI(
    lifespan=lifespan,
    title="Podcast Reader API",
    description=(
        "Backend for the podcast reader: fetch RSS feeds, transcribe episodes "
        "with Deepgram, chat about the current episode, and keep a paginated, "
        "playback-synchronised transcript view with notes."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _get_session_or_404(session_id: str) -> Session:
    session = session_store.get_session(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found: {}".format(session_id))
    return session


def _session_response(session: Session) -> SessionResponse:
    """Snapshot a session and hand over its pending seek commands."""
    snapshot = session.view.snapshot()
    commands = [{"time": c.time, "play": c.play} for c in session.player.drain()]
    return SessionResponse(id=session.id, title=session.title, seek_commands=commands, **snapshot)


def _run(session_id: str, action: Callable[[Session], object]) -> SessionResponse:
    """Apply ``action`` to a session under its lock and return its state."""
    session = _get_session_or_404(session_id)
    with session.lock:
        action(session)
        return _session_response(session)


# ---------------------------------------------------------------------------
# Endpoints: Feeds
# ---------------------------------------------------------------------------


@app.post(
    "/feed",
    response_model=FeedResponse,
    tags=["feeds"],
    summary="Fetch and parse a podcast feed",
    description="Download an RSS feed and return its title, description, and up to 25 episodes.",
    responses={
        400: {"model": ErrorResponse, "description": "No feed URL given"},
        500: {"model": ErrorResponse, "description": "Feed could not be fetched or parsed"},
    },
)
async def get_feed(body: FeedRequest) -> FeedResponse:
    if not body.url:
        raise HTTPException(status_code=400, detail="Feed URL is required")
    try:
        feed = await fetch_feed(body.url)
    except (FeedFetchError, FeedParseError) as exc:
        logger.error("Error parsing feed %s: %s", body.url, exc)
        raise HTTPException(status_code=500, detail=str(exc))
    return FeedResponse(**feed.to_dict())


# ---------------------------------------------------------------------------
# Endpoints: Transcription
# ---------------------------------------------------------------------------


@app.post(
    "/transcribe",
    response_model=TranscriptionResponse,
    tags=["transcription"],
    summary="Transcribe an episode",
    description="Send the episode's audio URL to Deepgram and return the transcript with timed words.",
    responses={
        400: {"model": ErrorResponse, "description": "Missing or invalid audio URL"},
        500: {"model": ErrorResponse, "description": "Transcription failed"},
    },
)
async def transcribe(body: TranscribeRequest) -> TranscriptionResponse:
    if not body.audio_url:
        raise HTTPException(status_code=400, detail="No audio URL provided")
    try:
        validate_audio_url(body.audio_url)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    try:
        async with DeepgramClient() as client:
            result = await client.transcribe(body.audio_url)
    except ValueError as exc:
        # Missing API key
        raise HTTPException(status_code=500, detail=str(exc))
    except (DeepgramAPIError, TranscriptionError, httpx.HTTPError) as exc:
        logger.exception("Error during transcription of %s", body.audio_url)
        raise HTTPException(status_code=500, detail="Transcription failed: {}".format(exc))

    return TranscriptionResponse(**result.to_dict())


# ---------------------------------------------------------------------------
# Endpoints: Chat
# ---------------------------------------------------------------------------


@app.post(
    "/chat/{provider}",
    response_model=ChatResponse,
    tags=["chat"],
    summary="Ask the episode assistant",
    description=(
        "Send the full conversation (system prompt first) to a provider: "
        "'demo' (no key), 'openai', or 'anthropic'. The model used is echoed "
        "in the x-model-used response header."
    ),
    responses={
        404: {"model": ErrorResponse, "description": "Unknown provider"},
        500: {"model": ErrorResponse, "description": "Provider not configured or failed"},
    },
)
def chat(provider: str, body: ChatRequest, response: Response) -> ChatResponse:
    try:
        chat_provider = get_provider(provider)
    except KeyError:
        raise HTTPException(status_code=404, detail="Unknown chat provider: {}".format(provider))
    except ValueError as exc:
        logger.error("Chat provider %s not configured", provider)
        raise HTTPException(status_code=500, detail=str(exc))

    messages = [ChatMessage(m.role, m.content) for m in body.messages]
    try:
        reply = chat_provider.complete(messages)
    except ChatProviderError as exc:
        raise HTTPException(status_code=500, detail=str(exc))

    response.headers["x-model-used"] = reply.model_label
    return ChatResponse(
        id=reply.id,
        model=reply.model_label,
        message=ChatMessageModel(role="assistant", content=reply.content),
    )


@app.get(
    "/api-keys",
    response_model=ApiKeyStatusResponse,
    tags=["chat"],
    summary="Report chat provider key status",
    description="Which chat providers have API keys configured (keys are masked).",
)
def get_api_key_status() -> ApiKeyStatusResponse:
    return {name: ProviderKeyStatus(**status) for name, status in api_key_status().items()}


# ---------------------------------------------------------------------------
# Endpoints: Transcript sessions
# ---------------------------------------------------------------------------


@app.post(
    "/sessions",
    response_model=SessionResponse,
    status_code=201,
    tags=["sessions"],
    summary="Open a transcript view",
    description="Paginate transcript words and start a transcript view session.",
    responses={429: {"model": ErrorResponse, "description": "Too many open sessions"}},
)
def create_session(body: SessionCreateRequest) -> SessionResponse:
    words = [Word(w.text, w.start_time, w.end_time, w.confidence) for w in body.words]
    try:
        session = session_store.create_session(
            words=words, page_size=body.words_per_page, title=body.title,
        )
    except ValueError as exc:
        raise HTTPException(status_code=429, detail=str(exc))
    return _session_response(session)


@app.get(
    "/sessions/{session_id}",
    response_model=SessionResponse,
    tags=["sessions"],
    summary="Get transcript view state",
    responses={404: {"model": ErrorResponse, "description": "Session not found"}},
)
def get_session(session_id: str) -> SessionResponse:
    return _run(session_id, lambda s: None)


@app.delete(
    "/sessions/{session_id}",
    status_code=204,
    tags=["sessions"],
    summary="Close a transcript view",
    description="Discard the session and all of its notes.",
    responses={404: {"model": ErrorResponse, "description": "Session not found"}},
)
def delete_session(session_id: str) -> Response:
    if not session_store.delete_session(session_id):
        raise HTTPException(status_code=404, detail="Session not found: {}".format(session_id))
    return Response(status_code=204)


@app.put(
    "/sessions/{session_id}/page-size",
    response_model=SessionResponse,
    tags=["sessions"],
    summary="Change words per page",
    description="Re-paginate the transcript. Any pending selection is discarded.",
)
def set_page_size(session_id: str, body: PageSizeRequest) -> SessionResponse:
    return _run(session_id, lambda s: s.view.dispatch(SetPageSize(body.words_per_page)))


@app.post(
    "/sessions/{session_id}/time",
    response_model=SessionResponse,
    tags=["sessions"],
    summary="Report playback time",
    description="Push the audio element's current time; the view follows to the matching page.",
)
def time_update(session_id: str, body: TimeUpdateRequest) -> SessionResponse:
    return _run(session_id, lambda s: s.view.dispatch(TimeUpdate(body.time)))


@app.post(
    "/sessions/{session_id}/seek",
    response_model=SessionResponse,
    tags=["sessions"],
    summary="Seek playback",
    description="Issue a seek command (e.g. word click); returned in seek_commands.",
)
def seek(session_id: str, body: SeekRequest) -> SessionResponse:
    return _run(session_id, lambda s: s.view.dispatch(Seek(body.time, body.play)))


@app.put(
    "/sessions/{session_id}/jump-input",
    response_model=SessionResponse,
    tags=["sessions"],
    summary="Set the page-jump input",
    description="Store the text typed in the page-jump box without jumping.",
)
def set_jump_input(session_id: str, body: JumpInputRequest) -> SessionResponse:
    return _run(session_id, lambda s: s.view.dispatch(SetJumpInput(body.text)))


@app.post(
    "/sessions/{session_id}/jump",
    response_model=SessionResponse,
    tags=["sessions"],
    summary="Jump to a page",
    description=(
        "Jump to a 1-based page and seek to its start. Without a page, the "
        "stored jump input is used. Invalid input leaves the page unchanged "
        "and is not an error; the jump input is cleared either way."
    ),
)
def jump_to_page(session_id: str, body: JumpRequest) -> SessionResponse:
    return _run(session_id, lambda s: s.view.dispatch(JumpToPage(body.page)))


@app.post(
    "/sessions/{session_id}/pages/next",
    response_model=SessionResponse,
    tags=["sessions"],
    summary="Show the next page",
)
def next_page(session_id: str) -> SessionResponse:
    return _run(session_id, lambda s: s.view.dispatch(NextPage()))


@app.post(
    "/sessions/{session_id}/pages/previous",
    response_model=SessionResponse,
    tags=["sessions"],
    summary="Show the previous page",
)
def previous_page(session_id: str) -> SessionResponse:
    return _run(session_id, lambda s: s.view.dispatch(PreviousPage()))


@app.post(
    "/sessions/{session_id}/selection",
    response_model=SessionResponse,
    tags=["notes"],
    summary="Capture a text selection",
    description="Snap a text selection on the current page to whole words.",
)
def capture_selection(session_id: str, body: SelectionRequest) -> SessionResponse:
    raw = RawSelection(
        exists=body.exists,
        collapsed=body.collapsed,
        within_container=body.within_container,
        intersected=tuple((item.index, item.text) for item in body.intersected),
    )
    return _run(session_id, lambda s: s.view.dispatch(CaptureSelection(raw)))


@app.post(
    "/sessions/{session_id}/selection/confirm",
    response_model=ConfirmResponse,
    tags=["notes"],
    summary="Save the selection as a note",
    description="Creates a note from the pending selection; a stale selection is dropped.",
)
def confirm_selection(session_id: str) -> ConfirmResponse:
    session = _get_session_or_404(session_id)
    with session.lock:
        note = session.view.dispatch(ConfirmNote())
        return ConfirmResponse(
            note=NoteModel(**note.to_dict()) if note is not None else None,
            session=_session_response(session),
        )


@app.delete(
    "/sessions/{session_id}/selection",
    response_model=SessionResponse,
    tags=["notes"],
    summary="Cancel the selection",
)
def cancel_selection(session_id: str) -> SessionResponse:
    return _run(session_id, lambda s: s.view.dispatch(CancelNote()))


@app.put(
    "/sessions/{session_id}/notes/{note_id}/comment",
    response_model=NoteModel,
    tags=["notes"],
    summary="Set a note's comment",
    description="Blank text clears the comment.",
    responses={404: {"model": ErrorResponse, "description": "Session or note not found"}},
)
def set_comment(session_id: str, note_id: str, body: CommentRequest) -> NoteModel:
    session = _get_session_or_404(session_id)
    with session.lock:
        note = session.view.dispatch(SetComment(note_id, body.text))
    if note is None:
        raise HTTPException(status_code=404, detail="Note not found: {}".format(note_id))
    return NoteModel(**note.to_dict())


@app.post(
    "/sessions/{session_id}/notes/{note_id}/play",
    response_model=SessionResponse,
    tags=["notes"],
    summary="Play from a note",
    description="Seek to the note's start time and start playback.",
    responses={404: {"model": ErrorResponse, "description": "Session or note not found"}},
)
def play_note(session_id: str, note_id: str) -> SessionResponse:
    session = _get_session_or_404(session_id)
    with session.lock:
        if not session.view.dispatch(PlayNote(note_id)):
            raise HTTPException(status_code=404, detail="Note not found: {}".format(note_id))
        return _session_response(session)


@app.delete(
    "/sessions/{session_id}/notes/{note_id}",
    status_code=204,
    tags=["notes"],
    summary="Delete a note",
    description="Deleting a note that does not exist is not an error.",
)
def delete_note(session_id: str, note_id: str) -> Response:
    session = _get_session_or_404(session_id)
    with session.lock:
        session.view.dispatch(DeleteNote(note_id))
    return Response(status_code=204)


@app.get(
    "/sessions/{session_id}/notes/export",
    tags=["notes"],
    summary="Export notes",
    description=(
        "Download the session's notes. Returns 204 with no body when there "
        "are no notes to export."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "Unknown export format"},
        404: {"model": ErrorResponse, "description": "Session not found"},
    },
)
def export_notes(
    session_id: str,
    format: str = Query(default="plain_text", description="Export format: plain_text or json."),
) -> Response:
    if format not in FORMATTERS:
        available = ", ".join(sorted(FORMATTERS.keys()))
        raise HTTPException(
            status_code=400,
            detail="Unknown export format '{}'. Available: {}".format(format, available),
        )
    session = _get_session_or_404(session_id)
    with session.lock:
        output = FORMATTERS[format]().format(session.view.notes.notes)
    if output is None:
        return Response(status_code=204)
    return Response(
        content=output.content,
        media_type=output.media_type,
        headers={"Content-Disposition": 'attachment; filename="{}"'.format(output.filename)},
    )


# ---------------------------------------------------------------------------
# Endpoints: Health
# ---------------------------------------------------------------------------


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["health"],
    summary="Health check",
    description="Liveness and readiness check for load balancers and orchestrators.",
)
async def health_check() -> HealthResponse:
    return HealthResponse(status="ok", version=__version__)


def run_api(host: str = "127.0.0.1", port: int = 8000) -> None:
    """Entry point for the podcast-reader-api console script."""
    import uvicorn

    uvicorn.run(app, host=host, port=port)
