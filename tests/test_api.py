"""Tests for the FastAPI podcast reader API.

WHY: The browser UI talks only to these endpoints. They must map
collaborator failures to readable errors, and session endpoints must
expose exactly the transcript core's behaviour, including its soft
failures (no-op page jumps, stale confirms, silent note deletes).

HOW: FastAPI TestClient runs the app in-process. fetch_feed and
DeepgramClient are patched in the app module, so no network calls are
made; chat tests use the demo provider or patch get_provider.

RULES:
- All tests use the FastAPI TestClient (synchronous)
- The session store is cleared before and after each test
- Tests cover: happy paths, 400 bad request, 404 not found, 500 failures
"""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock, patch

import jsonschema
import pytest
from fastapi.testclient import TestClient

from podcast_reader.api.client import DeepgramAPIError
from podcast_reader.api.models import TranscriptionResult
from podcast_reader.chat.providers import ChatProviderError, ChatReply
from podcast_reader.core.ir import Word
from podcast_reader.feeds.client import FeedFetchError
from podcast_reader.feeds.parser import Episode, Feed, FeedParseError
from podcast_reader.formatters.notes_json import SCHEMA_PATH
from podcast_reader.server.app import app, session_store

# Word dicts as Deepgram returns them (smart_format on)
DEEPGRAM_WORDS = [
    {"word": "hello", "punctuated_word": "Hello", "start": 0.0, "end": 0.5, "confidence": 0.99},
    {"word": "world", "punctuated_word": "world", "start": 0.6, "end": 1.0, "confidence": 0.97},
    {"word": "today", "punctuated_word": "today.", "start": 1.1, "end": 1.5, "confidence": 0.95},
]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_session_store():
    """Clear all sessions before each test to ensure isolation."""
    session_store.clear()
    yield
    session_store.clear()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def session_id(client, sample_word_dicts):
    """A session over the sample words at two words per page."""
    resp = client.post("/sessions", json={"words": sample_word_dicts, "words_per_page": 2, "title": "Ep 1"})
    assert resp.status_code == 201
    return resp.json()["id"]


def _select(client, session_id, intersected):
    return client.post(
        "/sessions/{}/selection".format(session_id),
        json={"intersected": [{"index": i, "text": t} for i, t in intersected]},
    )


def _add_note(client, session_id, intersected=((0, "Hello"), (1, "world"))):
    _select(client, session_id, intersected)
    resp = client.post("/sessions/{}/selection/confirm".format(session_id))
    assert resp.status_code == 200
    return resp.json()["note"]


# ---------------------------------------------------------------------------
# POST /feed
# ---------------------------------------------------------------------------


class TestFeed:

    def test_fetch_feed(self, client):
        feed = Feed(
            title="Tech Talk",
            description="Weekly",
            items=[Episode(id="ep-1", title="Episode 1", audio_url="https://cdn.example.com/1.mp3")],
        )
        with patch("podcast_reader.server.app.fetch_feed", new=AsyncMock(return_value=feed)) as mock:
            resp = client.post("/feed", json={"url": "https://example.com/rss"})

        assert resp.status_code == 200
        mock.assert_awaited_once_with("https://example.com/rss")
        data = resp.json()
        assert data["title"] == "Tech Talk"
        assert data["items"][0]["audio_url"] == "https://cdn.example.com/1.mp3"
        assert data["items"][0]["date"] == ""

    def test_missing_url(self, client):
        resp = client.post("/feed", json={})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Feed URL is required"

    @pytest.mark.parametrize("error", [
        FeedFetchError("HTTP error! status: 404"),
        FeedParseError("Invalid feed format - received HTML instead of RSS"),
    ])
    def test_fetch_or_parse_failure(self, client, error):
        with patch("podcast_reader.server.app.fetch_feed", new=AsyncMock(side_effect=error)):
            resp = client.post("/feed", json={"url": "https://example.com/rss"})
        assert resp.status_code == 500
        assert resp.json()["detail"] == str(error)


# ---------------------------------------------------------------------------
# POST /transcribe
# ---------------------------------------------------------------------------


def _fake_deepgram(result=None, error=None):
    """Patchable stand-in for DeepgramClient used as an async context manager."""
    instance = MagicMock()
    instance.__aenter__ = AsyncMock(return_value=instance)
    instance.__aexit__ = AsyncMock(return_value=None)
    instance.transcribe = AsyncMock(return_value=result, side_effect=error)
    return MagicMock(return_value=instance), instance


class TestTranscribe:

    def test_transcribe(self, client):
        factory, instance = _fake_deepgram(result=TranscriptionResult(
            transcript="Hello world today.",
            words=[Word.from_dict(w) for w in DEEPGRAM_WORDS],
        ))
        with patch("podcast_reader.server.app.DeepgramClient", new=factory):
            resp = client.post("/transcribe", json={"audioUrl": "https://cdn.example.com/1.mp3"})

        assert resp.status_code == 200
        instance.transcribe.assert_awaited_once_with("https://cdn.example.com/1.mp3")
        data = resp.json()
        assert data["transcript"] == "Hello world today."
        assert [w["text"] for w in data["words"]] == ["Hello", "world", "today."]
        assert data["words"][1]["start_time"] == 0.6

    def test_missing_url(self, client):
        resp = client.post("/transcribe", json={})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "No audio URL provided"

    def test_invalid_url(self, client):
        resp = client.post("/transcribe", json={"audio_url": "episode.mp3"})
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Invalid audio URL format"

    def test_deepgram_error(self, client):
        factory, _ = _fake_deepgram(error=DeepgramAPIError(402, "Insufficient credits"))
        with patch("podcast_reader.server.app.DeepgramClient", new=factory):
            resp = client.post("/transcribe", json={"audio_url": "https://cdn.example.com/1.mp3"})
        assert resp.status_code == 500
        assert resp.json()["detail"].startswith("Transcription failed: ")
        assert "Insufficient credits" in resp.json()["detail"]

    def test_missing_api_key(self, client, monkeypatch):
        monkeypatch.delenv("DEEPGRAM_API_KEY", raising=False)
        resp = client.post("/transcribe", json={"audio_url": "https://cdn.example.com/1.mp3"})
        assert resp.status_code == 500
        assert "API key not configured" in resp.json()["detail"]


# ---------------------------------------------------------------------------
# Chat
# ---------------------------------------------------------------------------


class TestChat:

    def test_demo_chat(self, client):
        resp = client.post("/chat/demo", json={"messages": [
            {"role": "system", "content": "Podcast Title: Tech Talk\nDescription: d\nTranscript: words"},
            {"role": "user", "content": "hello"},
        ]})
        assert resp.status_code == 200
        assert resp.headers["x-model-used"] == "Demo Model (Free)"
        data = resp.json()
        assert data["model"] == "Demo Model (Free)"
        assert data["message"]["role"] == "assistant"
        assert "Tech Talk" in data["message"]["content"]

    def test_unknown_provider(self, client):
        resp = client.post("/chat/gemini", json={"messages": []})
        assert resp.status_code == 404

    def test_provider_without_key(self, client, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        resp = client.post("/chat/openai", json={"messages": [{"role": "user", "content": "hi"}]})
        assert resp.status_code == 500
        assert resp.json()["detail"] == "API key not configured"

    def test_provider_failure(self, client):
        provider = MagicMock()
        provider.complete.side_effect = ChatProviderError("Invalid Anthropic API key.")
        with patch("podcast_reader.server.app.get_provider", return_value=provider):
            resp = client.post("/chat/anthropic", json={"messages": [{"role": "user", "content": "hi"}]})
        assert resp.status_code == 500
        assert resp.json()["detail"] == "Invalid Anthropic API key."

    def test_hosted_provider_reply(self, client):
        provider = MagicMock()
        provider.complete.return_value = ChatReply(id="msg_1", content="Hi!", model_label="claude-test")
        with patch("podcast_reader.server.app.get_provider", return_value=provider):
            resp = client.post("/chat/anthropic", json={"messages": [{"role": "user", "content": "hi"}]})
        assert resp.status_code == 200
        assert resp.headers["x-model-used"] == "claude-test"
        assert resp.json()["id"] == "msg_1"
        sent = provider.complete.call_args.args[0]
        assert [(m.role, m.content) for m in sent] == [("user", "hi")]

    def test_invalid_role(self, client):
        resp = client.post("/chat/demo", json={"messages": [{"role": "tool", "content": "x"}]})
        assert resp.status_code == 422

    def test_api_key_status(self, client, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-ant-abcdefgh")
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        resp = client.get("/api-keys")
        assert resp.status_code == 200
        data = resp.json()
        assert data["anthropic"] == {"configured": True, "key": "sk-a...efgh", "note": "Requires paid credits"}
        assert data["openai"]["configured"] is False
        assert data["demo"]["configured"] is True


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------


class TestSessionLifecycle:

    def test_create(self, client, sample_word_dicts):
        resp = client.post("/sessions", json={"words": sample_word_dicts, "words_per_page": 2})
        assert resp.status_code == 201
        data = resp.json()
        assert data["page_count"] == 2
        assert data["word_count"] == 3
        assert data["current_page_index"] == 0
        assert data["page"]["page_number"] == 1
        assert data["page"]["start_time"] == 0.0
        assert data["page"]["end_time"] == 1.0
        assert [w["text"] for w in data["page"]["words"]] == ["Hello", "world"]
        assert data["notes"] == []
        assert data["seek_commands"] == []

    def test_create_from_deepgram_words(self, client):
        resp = client.post("/sessions", json={"words": DEEPGRAM_WORDS})
        assert resp.status_code == 201
        assert resp.json()["page"]["words"][2]["text"] == "today."

    def test_default_page_size(self, client, sample_word_dicts):
        resp = client.post("/sessions", json={"words": sample_word_dicts})
        assert resp.json()["page_size"] == 150
        assert resp.json()["page_count"] == 1

    @pytest.mark.parametrize("body", [
        {"words": [], "words_per_page": 0},
        {"words": [{"text": "x", "start_time": 2.0, "end_time": 1.0}]},
    ])
    def test_invalid_create(self, client, body):
        assert client.post("/sessions", json=body).status_code == 422

    def test_get_and_delete(self, client, session_id):
        assert client.get("/sessions/{}".format(session_id)).json()["title"] == "Ep 1"
        assert client.delete("/sessions/{}".format(session_id)).status_code == 204
        assert client.get("/sessions/{}".format(session_id)).status_code == 404
        assert client.delete("/sessions/{}".format(session_id)).status_code == 404

    def test_unknown_session(self, client):
        resp = client.post("/sessions/nope/time", json={"time": 1.0})
        assert resp.status_code == 404
        assert "Session not found" in resp.json()["detail"]


class TestSessionPlayback:

    def test_time_update(self, client, session_id):
        data = client.post("/sessions/{}/time".format(session_id), json={"time": 0.8}).json()
        assert data["current_page_index"] == 0
        assert data["active_word_index"] == 1

        data = client.post("/sessions/{}/time".format(session_id), json={"time": 99}).json()
        assert data["current_page_index"] == 0
        assert data["active_word_index"] is None

    def test_seek_returns_command_once(self, client, session_id):
        data = client.post("/sessions/{}/seek".format(session_id), json={"time": 0.6}).json()
        assert data["seek_commands"] == [{"time": 0.6, "play": True}]
        assert data["current_time"] == 0.0
        data = client.get("/sessions/{}".format(session_id)).json()
        assert data["seek_commands"] == []

    def test_jump_out_of_range(self, client, session_id):
        data = client.post("/sessions/{}/jump".format(session_id), json={"page": "5"}).json()
        assert data["current_page_index"] == 0
        assert data["jump_input"] == ""
        assert data["seek_commands"] == []

    def test_jump_valid(self, client, session_id):
        data = client.post("/sessions/{}/jump".format(session_id), json={"page": "2"}).json()
        assert data["current_page_index"] == 1
        assert data["seek_commands"] == [{"time": 1.1, "play": False}]

    @pytest.mark.parametrize("page", [True, 2.5, "two"])
    def test_jump_with_non_page_value_is_silent(self, client, session_id, page):
        client.post("/sessions/{}/pages/next".format(session_id))
        resp = client.post("/sessions/{}/jump".format(session_id), json={"page": page})
        assert resp.status_code == 200
        data = resp.json()
        assert data["current_page_index"] == 1
        assert data["seek_commands"] == []

    def test_jump_uses_typed_input(self, client, session_id):
        data = client.put("/sessions/{}/jump-input".format(session_id), json={"text": "2"}).json()
        assert data["jump_input"] == "2"
        assert data["current_page_index"] == 0

        data = client.post("/sessions/{}/jump".format(session_id), json={}).json()
        assert data["current_page_index"] == 1
        assert data["jump_input"] == ""
        assert data["seek_commands"] == [{"time": 1.1, "play": False}]

    def test_jump_clears_typed_input_when_out_of_range(self, client, session_id):
        client.put("/sessions/{}/jump-input".format(session_id), json={"text": "5"})
        data = client.post("/sessions/{}/jump".format(session_id), json={}).json()
        assert data["current_page_index"] == 0
        assert data["jump_input"] == ""

    def test_next_previous(self, client, session_id):
        data = client.post("/sessions/{}/pages/next".format(session_id)).json()
        assert data["current_page_index"] == 1
        data = client.post("/sessions/{}/pages/next".format(session_id)).json()
        assert data["current_page_index"] == 1
        data = client.post("/sessions/{}/pages/previous".format(session_id)).json()
        assert data["current_page_index"] == 0

    def test_page_size(self, client, session_id):
        data = client.put("/sessions/{}/page-size".format(session_id), json={"words_per_page": 1}).json()
        assert data["page_count"] == 3
        assert data["page_size"] == 1
        resp = client.put("/sessions/{}/page-size".format(session_id), json={"words_per_page": 0})
        assert resp.status_code == 422


class TestSessionNotes:

    def test_select_and_confirm(self, client, session_id):
        data = _select(client, session_id, [(0, "Hello"), (1, "world")]).json()
        assert data["selection"] == {"text": "Hello world", "start_word_index": 0, "end_word_index": 1}

        resp = client.post("/sessions/{}/selection/confirm".format(session_id))
        note = resp.json()["note"]
        assert note["anchor_text"] == "Hello world"
        assert note["start_time"] == 0.0
        assert note["end_time"] == 1.0
        assert note["page_number"] == 1
        assert note["start_word_index"] == 0
        assert note["end_word_index"] == 1
        assert note["custom_comment"] is None
        session = resp.json()["session"]
        assert session["selection"] is None
        assert [n["id"] for n in session["notes"]] == [note["id"]]

    def test_collapsed_selection_ignored(self, client, session_id):
        resp = client.post(
            "/sessions/{}/selection".format(session_id),
            json={"collapsed": True, "intersected": [{"index": 0, "text": "Hello"}]},
        )
        assert resp.status_code == 200
        assert resp.json()["selection"] is None

    def test_stale_confirm_is_noop(self, client, session_id):
        _select(client, session_id, [(0, "Hello"), (1, "world")])
        client.post("/sessions/{}/pages/next".format(session_id))
        resp = client.post("/sessions/{}/selection/confirm".format(session_id))
        assert resp.status_code == 200
        assert resp.json()["note"] is None
        assert resp.json()["session"]["notes"] == []

    def test_cancel(self, client, session_id):
        _select(client, session_id, [(0, "Hello")])
        data = client.delete("/sessions/{}/selection".format(session_id)).json()
        assert data["selection"] is None

    def test_comment(self, client, session_id):
        note = _add_note(client, session_id)
        url = "/sessions/{}/notes/{}/comment".format(session_id, note["id"])
        assert client.put(url, json={"text": "  intro "}).json()["custom_comment"] == "intro"
        assert client.put(url, json={"text": ""}).json()["custom_comment"] is None

    def test_comment_unknown_note(self, client, session_id):
        resp = client.put("/sessions/{}/notes/missing/comment".format(session_id), json={"text": "x"})
        assert resp.status_code == 404

    def test_play_note(self, client, session_id):
        note = _add_note(client, session_id)
        data = client.post("/sessions/{}/notes/{}/play".format(session_id, note["id"])).json()
        assert data["seek_commands"] == [{"time": 0.0, "play": True}]
        resp = client.post("/sessions/{}/notes/missing/play".format(session_id))
        assert resp.status_code == 404

    def test_delete_note(self, client, session_id):
        note = _add_note(client, session_id)
        url = "/sessions/{}/notes/{}".format(session_id, note["id"])
        assert client.delete(url).status_code == 204
        assert client.delete(url).status_code == 204
        assert client.get("/sessions/{}".format(session_id)).json()["notes"] == []


class TestExport:

    def test_empty_export(self, client, session_id):
        resp = client.get("/sessions/{}/notes/export".format(session_id))
        assert resp.status_code == 204
        assert resp.content == b""

    def test_plain_text_export(self, client, session_id):
        note = _add_note(client, session_id)
        client.put("/sessions/{}/notes/{}/comment".format(session_id, note["id"]), json={"text": "why"})
        resp = client.get("/sessions/{}/notes/export".format(session_id))
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/plain")
        assert 'filename="transcript-notes.txt"' in resp.headers["content-disposition"]
        assert resp.text == "Note (Page 1, Time: 0:00): Hello world\nComment: why"

    def test_json_export(self, client, session_id):
        _add_note(client, session_id)
        resp = client.get("/sessions/{}/notes/export?format=json".format(session_id))
        assert resp.status_code == 200
        assert 'filename="transcript-notes.json"' in resp.headers["content-disposition"]
        with open(SCHEMA_PATH) as f:
            jsonschema.validate(json.loads(resp.text), json.load(f))

    def test_unknown_format(self, client, session_id):
        resp = client.get("/sessions/{}/notes/export?format=docx".format(session_id))
        assert resp.status_code == 400
        assert "Available: json, plain_text" in resp.json()["detail"]


class TestHealth:

    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok", "version": "0.1.0"}
