"""Podcast feed retrieval: fetch an RSS URL and list its episodes."""

from podcast_reader.feeds.client import FeedFetchError, fetch_feed
from podcast_reader.feeds.parser import Episode, Feed, FeedParseError, parse_feed

__all__ = ["Episode", "Feed", "FeedFetchError", "FeedParseError", "fetch_feed", "parse_feed"]
