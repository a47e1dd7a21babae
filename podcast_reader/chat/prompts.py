"""System prompt construction for the episode chat assistant.

WHY: The assistant answers questions about whatever episode the user is
viewing. The only way it knows the episode is through the system prompt,
so the prompt carries the title, a trimmed description, and the start of
the transcript.

HOW: build_podcast_context() renders the three labelled lines;
build_system_prompt() wraps them in the assistant instructions.

RULES:
- Description truncated to 500 chars, transcript to 5000 chars
- Placeholders: "No description available", "No transcript available"
- No episode -> the prompt asks the user what they are listening to
- The "Podcast Title:" and "Transcript:" labels are read back by the
  demo responder, keep them stable
"""

from __future__ import annotations

from podcast_reader.feeds.parser import Episode

DESCRIPTION_LIMIT = 500
TRANSCRIPT_LIMIT = 5000

NO_DESCRIPTION = "No description available"
NO_TRANSCRIPT = "No transcript available"


def build_podcast_context(episode: Episode | None, transcript: str | None) -> str:
    if episode is None:
        return ""
    description = (episode.description or "")[:DESCRIPTION_LIMIT] or NO_DESCRIPTION
    text = (transcript or "")[:TRANSCRIPT_LIMIT] or NO_TRANSCRIPT
    return (
        "Podcast Title: {}\n"
        "Description: {}\n"
        "Transcript: {}".format(episode.title, description, text)
    )


def build_system_prompt(episode: Episode | None, transcript: str | None) -> str:
    context = build_podcast_context(episode, transcript)
    if context:
        intro = "Here is the context from the current podcast: {}".format(context)
    else:
        intro = (
            "The user has not provided any podcast transcript yet. Ask them what "
            "podcast they are listening to and what they would like to know about it."
        )
    return (
        "You are an AI assistant that helps users gain insights from podcast transcripts.\n"
        "{}\n\n"
        "If the user asks for insights, summaries, key points, or lessons from the "
        "podcast, provide them based on the transcript.\n"
        "If there is no transcript available, let the user know they need to "
        "generate a transcript first.\n"
        "Be concise but informative in your responses.".format(intro)
    )
