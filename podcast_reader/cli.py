"""Command-line interface for the podcast reader.

WHY: Feeds and transcripts are useful without a browser: listing a
feed's episodes, reading a transcript page by page, or running the API
server for the web UI all fit one small command.

HOW: argparse with three subcommands:
  feed URL              list the episodes of an RSS feed
  transcribe AUDIO_URL  transcribe with Deepgram and print one page
  serve                 run the FastAPI server with uvicorn
Async collaborators run via asyncio.run(). Status messages go to stderr;
results go to stdout so they can be piped.

RULES:
- Status output goes to stderr (not stdout)
- Config errors (missing API key, bad URL) exit with status 1
- --page is 1-based, like the page-jump box in the UI
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

import httpx

from podcast_reader.api.client import DeepgramAPIError, DeepgramClient
from podcast_reader.api.models import TranscriptionError
from podcast_reader.config import WORDS_PER_PAGE
from podcast_reader.core.notes import format_timestamp
from podcast_reader.core.session import TranscriptView
from podcast_reader.feeds.client import FeedFetchError, fetch_feed
from podcast_reader.feeds.parser import FeedParseError


def _status(msg: str) -> None:
    """Print a status message to stderr."""
    print(msg, file=sys.stderr, flush=True)


def _fail(msg: str) -> int:
    print("Error: {}".format(msg), file=sys.stderr)
    return 1


async def _run_feed(args: argparse.Namespace) -> int:
    _status("Fetching feed {}...".format(args.url))
    try:
        feed = await fetch_feed(args.url)
    except (FeedFetchError, FeedParseError) as e:
        return _fail(str(e))

    if args.json:
        print(json.dumps(feed.to_dict(), indent=2, ensure_ascii=False))
        return 0

    print(feed.title)
    for episode in feed.items:
        marker = "" if episode.audio_url else "  (no audio)"
        print("{:<10}  {}{}".format(episode.date or "-", episode.title, marker))
        if args.verbose and episode.audio_url:
            print("            {}".format(episode.audio_url))
    _status("{} episode(s)".format(len(feed.items)))
    return 0


def render_page(view: TranscriptView) -> str:
    """Render the page currently showing as a header line plus text."""
    page = view.current_page
    if page is None:
        return "(empty transcript)"
    header = "Page {}/{} ({} - {})".format(
        page.page_number,
        len(view.pages),
        format_timestamp(page.start_time),
        format_timestamp(page.end_time),
    )
    return "{}\n\n{}".format(header, " ".join(word.text for word in page.words))


async def _run_transcribe(args: argparse.Namespace) -> int:
    try:
        async with DeepgramClient() as client:
            result = await client.transcribe(args.audio_url, on_status=_status)
    except ValueError as e:
        # Missing API key or malformed URL
        return _fail(str(e))
    except (DeepgramAPIError, TranscriptionError, httpx.HTTPError) as e:
        return _fail("Transcription failed: {}".format(e))

    if args.output:
        path = Path(args.output)
        path.write_text(json.dumps(result.to_dict(), indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
        _status("Saved: {}".format(path))

    view = TranscriptView(words=result.words, page_size=args.words_per_page)
    if args.page is not None and not view.jump_to_page(args.page):
        return _fail("Page {} is out of range (1-{})".format(args.page, len(view.pages)))
    print(render_page(view))
    return 0


def _run_serve(args: argparse.Namespace) -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    from podcast_reader.server.app import run_api

    run_api(host=args.host, port=args.port)


def _positive_int(raw: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        raise argparse.ArgumentTypeError("expected an integer, got {!r}".format(raw))
    if value <= 0:
        raise argparse.ArgumentTypeError("must be a positive integer")
    return value


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="podcast-reader",
        description="Browse podcast feeds, read transcripts page by page, "
                    "or serve the reader API.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    feed = subparsers.add_parser("feed", help="List the episodes of an RSS feed.")
    feed.add_argument("url", help="Feed URL.")
    feed.add_argument("--json", action="store_true", help="Print the parsed feed as JSON.")
    feed.add_argument("-v", "--verbose", action="store_true", help="Also print audio URLs.")

    transcribe = subparsers.add_parser("transcribe", help="Transcribe an episode with Deepgram.")
    transcribe.add_argument("audio_url", help="Public URL of the episode audio.")
    transcribe.add_argument(
        "--words-per-page",
        type=_positive_int,
        default=WORDS_PER_PAGE,
        help="Words per transcript page (default: %(default)s).",
    )
    transcribe.add_argument(
        "--page",
        type=_positive_int,
        default=None,
        help="1-based page to print (default: first page).",
    )
    transcribe.add_argument(
        "--output",
        default=None,
        help="Also save the transcript and timed words as JSON to this path.",
    )

    serve = subparsers.add_parser("serve", help="Run the HTTP API server.")
    serve.add_argument("--host", default="127.0.0.1", help="Bind address (default: %(default)s).")
    serve.add_argument("--port", type=int, default=8000, help="Port (default: %(default)s).")

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for ``podcast-reader`` and ``python -m podcast_reader``.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command == "serve":
        _run_serve(args)
        return

    runner = _run_feed if args.command == "feed" else _run_transcribe
    code = asyncio.run(runner(args))
    if code:
        sys.exit(code)


if __name__ == "__main__":
    main()
