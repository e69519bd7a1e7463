"""Helpers to construct system/user prompts for every insight task.

Given a prompt kind and the caller's payload, we emit:
* A system prompt holding the fixed instruction template for that kind.
* A user prompt carrying the raw customer text or transcript.
* The retrieval context, which is only ever non-empty for RAG answers.

Builders are pure: the same inputs always yield byte-identical prompts.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from textwrap import dedent
from typing import Any, Sequence

from app.application.interfaces import RetrievedSnippet


class PromptKind(str, Enum):
    """One entry per distinct model call the orchestrator can issue."""

    ADMIN_SENTIMENT = "admin_sentiment"
    CUSTOMER_FEELING = "customer_feeling"
    CUSTOMER_SENTIMENT_SCORE = "customer_sentiment_score"
    TOPIC_CHECK = "topic_check"
    RAG_QUERY = "rag_query"
    ANALYSE_CONVERSATION = "analyse_conversation"
    CATEGORIZE_ISSUE = "categorize_issue"


# Telecom issue taxonomy the classifier must choose from.
ISSUE_TAXONOMY: tuple[tuple[str, tuple[str, ...]], ...] = (
    (
        "Account & Subscriptions",
        (
            "Change credit limit",
            "Change postpaid plan",
            "Rewards-related issue",
            "Voicemail and missed call alerts activation/deactivation",
            "Stop non-Digi/Celcom charges/subscriptions",
            "Reinstate terminated prepaid line for CelcomDigi",
            "Others",
        ),
    ),
    (
        "Call, Internet, SMS and OTP issues",
        ("Call quality", "Coverage", "Internet slowness", "Unable to receive OTP/TAC"),
    ),
    ("Internet Quota", ("{Insert details}",)),
    ("Reload & Prepaid", ("Reload-related issue", "Others")),
    ("Roaming", ("Unable to use/connect roaming", "Others")),
    ("Switching to CelcomDigi", ("Resubmit port-in request", "Others")),
    (
        "Billing",
        (
            "I don't agree with my bill (non-scam related)",
            "I don't agree with my bill (suspected scam)",
            "Others",
        ),
    ),
    (
        "Fibre",
        ("No service", "Internet slowness (Fibre)", "Others (Fibre)", "Relocation request"),
    ),
    ("Products & Offerings", ("{Provide details}",)),
    (
        "Report a scam/fraud",
        (
            "Scam call",
            "SMS spam/SMS scam",
            "Scam URL/QR Code",
            "Missed calls from international numbers",
        ),
    ),
    ("SIM & Devices", ("Blocked device due to non-payment of Digi bill", "Others")),
)

REPORT_TEMPLATE = dedent(
    """\
    {
        "overallSummary": "Insightful overview of the conversation and brief outcome of the conversation",
        "agentSummary": "Summary of agent's actions",
        "customerSummary": "Summary of customer's concerns and requests",
        "conversationalInsight": {
            "csatScore": 0,
            "conversationResult": "Outcome of the conversation",
            "customerSentiment": "Positive/Neutral/Negative",
            "overallCallDuration": "00:00"
        },
        "overallPerformance": 0,
        "aiInsight": {
            "introduction": 0,
            "recommendation": 0,
            "thankYouMessage": 0,
            "attitude": 0,
            "communicationSkills": 0
        },
        "timeConsumption": {
            "agent": 0,
            "customer": 0,
            "notTalking": 0
        },
        "topicsDiscussed": {
            "Topic1": 0,
            "Topic2": 0,
            "Topic3": 0,
            "Topic4": 0
        }
    }"""
)

_ADMIN_SENTIMENT_PROMPT = (
    "Given the following admin message, please evaluate the professionalism of the "
    "message and provide a score between 0 (unprofessional) and 1 (highly professional). "
    "Please just provide the score."
)

_CUSTOMER_FEELING_PROMPT = (
    "Given the following customer message, please provide a single word that best "
    "describes how the customer is feeling."
)

_CUSTOMER_SCORE_PROMPT = (
    "Given the following customer message, please provide the sentiment score between "
    "0 (negative) and 1 (positive). Please just provide the score."
)

_TOPIC_CHECK_PROMPT = dedent(
    """\
    You have a list of topics, each represented by a number.

    When a user inputs a message, analyse the message and return a comma-separated list of numbers corresponding to the topics mentioned or matched.

    If a topic is not mentioned, do not include its number in the output. Ensure the numbers are returned in order, without spaces.

    Topics:
    {topics}"""
)

_RAG_QUERY_PROMPT = (
    "You are a helpful assistant who provides accurate and concise answers. "
    "Use the provided context to respond intelligently to user queries. "
    "If no context is provided, answer from your general knowledge."
)

_ANALYSE_CONVERSATION_PROMPT = (
    "Analyze the given list of messages and generate a JSON response based on the "
    "following template:\n"
    f"{REPORT_TEMPLATE}\n\n"
    "Guidelines:\n"
    "CSAT score and overall performance should be percentages (0-100).\n"
    "Call duration can be used as overallCallDuration.\n"
    "The conversation result should be condensed into a few short words.\n"
    "Time consumption should be in percentage.\n"
    "AI insight should be rated on a scale of 100 and take consideration of the agent's conversation.\n"
    "Topics discussed should be telco-related, with at least 4 topics and their percentages.\n"
    "Provide the response as a valid JSON string, without any Markdown formatting, "
    "code fences or commentary."
)


@dataclass(frozen=True)
class PromptBundle:
    system_prompt: str
    user_prompt: str
    context: str = ""


def render_taxonomy(taxonomy: Sequence[tuple[str, Sequence[str]]] = ISSUE_TAXONOMY) -> str:
    """Render the category tree as numbered subcategories under each category."""

    sections: list[str] = []
    for category, subcategories in taxonomy:
        lines = [f"Category: {category}"]
        lines.extend(f"  {idx}) {name}" for idx, name in enumerate(subcategories, start=1))
        sections.append("\n".join(lines))
    return "\n\n".join(sections)


_CATEGORIZE_ISSUE_PROMPT = (
    "You are a helpful assistant that classifies customer inquiries for a telecom company.\n"
    "Here are the categories and subcategories for classification:\n\n"
    f"{render_taxonomy()}\n\n"
    "Classify the following inquiry into the most appropriate category and subcategory. "
    "Return the classification in the following format and nothing else:\n"
    "Category: <category>\n"
    "Subcategory: <subcategory>"
)


def render_topics(topics: str | Sequence[str]) -> str:
    """Embed caller topics verbatim; lists become `1. topic` lines."""

    if isinstance(topics, str):
        return topics.strip()
    return "\n".join(f"{idx}. {str(topic).strip()}" for idx, topic in enumerate(topics, start=1))


def render_transcript(chat_data: str | Sequence[Any]) -> str:
    """Flatten a chat transcript into the user prompt, preserving message order."""

    if isinstance(chat_data, str):
        return chat_data
    return json.dumps(list(chat_data), ensure_ascii=False, indent=2)


def join_context(snippets: Sequence[RetrievedSnippet]) -> str:
    """Concatenate retrieved snippet texts in rank order."""

    return "\n".join(snippet.text for snippet in snippets)


_FIXED_PROMPTS = {
    PromptKind.ADMIN_SENTIMENT: _ADMIN_SENTIMENT_PROMPT,
    PromptKind.CUSTOMER_FEELING: _CUSTOMER_FEELING_PROMPT,
    PromptKind.CUSTOMER_SENTIMENT_SCORE: _CUSTOMER_SCORE_PROMPT,
    PromptKind.RAG_QUERY: _RAG_QUERY_PROMPT,
    PromptKind.ANALYSE_CONVERSATION: _ANALYSE_CONVERSATION_PROMPT,
    PromptKind.CATEGORIZE_ISSUE: _CATEGORIZE_ISSUE_PROMPT,
}


def build_prompt(
    kind: PromptKind,
    payload: str | Sequence[Any],
    *,
    topics: str | Sequence[str] | None = None,
    context: str = "",
) -> PromptBundle:
    """Compose system/user prompts for the selected prompt kind."""

    if kind is PromptKind.TOPIC_CHECK:
        if not topics:
            raise ValueError("Topic check prompts need at least one topic.")
        system_prompt = _TOPIC_CHECK_PROMPT.format(topics=render_topics(topics))
    else:
        system_prompt = _FIXED_PROMPTS[kind]

    if kind is PromptKind.ANALYSE_CONVERSATION:
        user_prompt = render_transcript(payload)
    else:
        user_prompt = str(payload)

    # Only RAG answers carry retrieved context; everything else answers from the text alone.
    return PromptBundle(
        system_prompt=system_prompt,
        user_prompt=user_prompt,
        context=context if kind is PromptKind.RAG_QUERY else "",
    )


__all__ = [
    "ISSUE_TAXONOMY",
    "PromptBundle",
    "PromptKind",
    "REPORT_TEMPLATE",
    "build_prompt",
    "join_context",
    "render_taxonomy",
    "render_topics",
    "render_transcript",
]
