"""Canned demo responder for the chat assistant.

WHY: The chat panel should work out of the box, without any LLM API key.
The demo responder gives plausible, topic-appropriate answers so the UI
can be tried end to end.

HOW: Lower-cases the user's query and checks keyword groups in a fixed
order; the first group that matches picks the reply template. The
episode title is read back from the system prompt's "Podcast Title:"
line.

RULES:
- Check order: no-transcript guard, greeting, identity, summary,
  key points, lessons, insights, opinions, challenges, future trends,
  then the generic fallback
- The no-transcript guard only fires for analysis requests
- Title defaults to "the podcast"
"""

from __future__ import annotations

import re

DEFAULT_TITLE = "the podcast"

_TITLE_RE = re.compile(r"Podcast Title: (.*?)\n")


def extract_podcast_title(context: str) -> str:
    match = _TITLE_RE.search(context or "")
    if match and match.group(1).strip():
        return match.group(1).strip()
    return DEFAULT_TITLE


def has_transcript(context: str) -> bool:
    return "Transcript:" in context and "No transcript available" not in context


def _matches(query: str, keywords: tuple[str, ...]) -> bool:
    return any(keyword in query for keyword in keywords)


_ANALYSIS = ("summary", "key point", "highlight", "lesson", "insight")


def generate_demo_reply(query: str, podcast_title: str, context: str) -> str:
    """Pick a canned reply for ``query`` about ``podcast_title``."""
    query = query.lower()
    title = podcast_title

    if not has_transcript(context) and _matches(query, _ANALYSIS):
        return (
            f"I'd love to provide insights about {title}, but I don't see a transcript "
            "available yet. To get the most helpful analysis, please generate a transcript "
            'first by clicking the "Generate Transcript" button when viewing the podcast.'
        )

    if _matches(query, ("hello", "hi ", "hey", "greetings")):
        return (
            f"Hello! I'm your podcast assistant. I can help you understand key points "
            f"from {title} or answer questions about it. What would you like to know?"
        )

    if _matches(query, ("who are you", "what can you do", "how do you work")):
        return (
            f"I'm a demo AI assistant designed to help you get insights from {title}. "
            "I can summarize content, highlight key points, or extract lessons from the "
            "podcast. This is a demonstration version that works without requiring any "
            "API keys."
        )

    if _matches(query, ("summary", "summarize")):
        return (
            f"Here is a summary of {title}. This podcast explores important concepts "
            "around technology and innovation. The speakers discuss how emerging "
            "technologies are reshaping industries and society. They emphasize the "
            "importance of ethical considerations in development and implementation. "
            "The conversation also covers challenges in adoption and how organizations "
            "can better prepare for technological change."
        )

    if _matches(query, ("key point", "main point", "highlight")):
        return (
            f"The key points from {title} include. Technology adoption is accelerating "
            "across all sectors. Privacy concerns remain a major challenge for new "
            "technologies. Collaboration between technical and non-technical teams is "
            "essential for innovation. User experience should be prioritized in product "
            "development. Data-driven decision making leads to better outcomes."
        )

    if _matches(query, ("lesson", "learn")):
        return (
            f"Main lessons from {title}. Always consider the ethical implications of new "
            "technologies. Diverse teams create more robust solutions. User feedback is "
            "invaluable throughout the development process. Continuous learning is "
            "necessary to stay relevant in rapidly evolving fields. Balance innovation "
            "with practical implementation."
        )

    if _matches(query, ("insight", "analysis")):
        return (
            f"My analysis of {title} reveals several insights. The speakers emphasize a "
            "human-centered approach to technology. They discuss how successful "
            "implementation requires both technical excellence and organizational change "
            "management. There's a strong focus on responsible innovation and considering "
            "long-term impacts. The podcast also highlights the importance of "
            "accessibility and designing for diverse user needs."
        )

    if _matches(query, ("opinion", "perspective", "view")):
        return (
            f"In {title}, the speakers offer different perspectives on technology "
            "adoption. Some argue for rapid implementation of new technologies, while "
            "others advocate for a more measured approach that considers potential "
            "societal impacts. They all agree, however, that ethical considerations "
            "should be central to technology development."
        )

    if _matches(query, ("challenge", "problem", "issue")):
        return (
            "The podcast discusses several challenges in the technology space. Balancing "
            "innovation with security concerns. Addressing the digital divide and "
            "ensuring equitable access. Managing the pace of change in organizations. "
            "Developing appropriate regulatory frameworks. Building trust with users and "
            "stakeholders."
        )

    if _matches(query, ("future", "trend", "prediction")):
        return (
            f"Regarding future trends discussed in {title}. The speakers predict continued "
            "growth in AI and machine learning applications. They anticipate more focus "
            "on sustainable technology solutions. There's an expectation that remote and "
            "hybrid work models will continue to evolve. They also foresee increased "
            "emphasis on privacy-preserving technologies and more sophisticated "
            "approaches to data governance."
        )

    return (
        f"Based on {title}, I can provide various insights about the content. You can "
        "ask me for a summary, key points, main lessons, or specific aspects of the "
        'discussion. For example, try asking "What are the main points of this '
        'podcast?" or "Can you summarize this episode?"'
    )
