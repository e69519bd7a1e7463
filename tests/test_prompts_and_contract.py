"""Prompt construction and model-output contract tests."""

from __future__ import annotations

import json

import pytest

from app.application.interfaces import RetrievedSnippet
from app.services.errors import ParseError
from app.services.prompt_builder import (
    ISSUE_TAXONOMY,
    PromptKind,
    build_prompt,
    join_context,
    render_taxonomy,
    render_topics,
)
from app.services.response_contract import (
    RESULT_TYPES,
    CategoryResult,
    JsonReport,
    LabelResult,
    ScoreResult,
    band_admin_score,
    parse_response,
)

from conftest import VALID_REPORT


@pytest.mark.parametrize("kind", list(PromptKind))
def test_prompts_are_deterministic(kind):
    kwargs = {"topics": ["Billing"]} if kind is PromptKind.TOPIC_CHECK else {}

    first = build_prompt(kind, "Hello there", **kwargs)
    second = build_prompt(kind, "Hello there", **kwargs)

    assert first == second
    assert first.system_prompt


def test_every_prompt_kind_has_a_result_type():
    assert set(RESULT_TYPES) == set(PromptKind)


def test_topic_text_is_embedded_verbatim():
    topics = "1. Billing\n2. Roaming"

    bundle = build_prompt(PromptKind.TOPIC_CHECK, "roaming broke", topics=topics)

    assert bundle.system_prompt.endswith("Topics:\n1. Billing\n2. Roaming")
    assert bundle.user_prompt == "roaming broke"


def test_topic_list_is_numbered_from_one():
    assert render_topics(["Billing", " Roaming "]) == "1. Billing\n2. Roaming"


def test_topic_check_requires_topics():
    with pytest.raises(ValueError):
        build_prompt(PromptKind.TOPIC_CHECK, "hello", topics=[])


def test_context_only_kept_for_rag():
    rag = build_prompt(PromptKind.RAG_QUERY, "question", context="snippet")
    other = build_prompt(PromptKind.CATEGORIZE_ISSUE, "question", context="snippet")

    assert rag.context == "snippet"
    assert other.context == ""


def test_join_context_preserves_rank_order():
    snippets = [RetrievedSnippet("first", 0.9), RetrievedSnippet("second", 0.5)]

    assert join_context(snippets) == "first\nsecond"
    assert join_context([]) == ""


def test_taxonomy_lists_every_category():
    rendered = render_taxonomy()
    prompt = build_prompt(PromptKind.CATEGORIZE_ISSUE, "x").system_prompt

    for category, subcategories in ISSUE_TAXONOMY:
        assert f"Category: {category}" in rendered
        assert f"1) {subcategories[0]}" in rendered
    assert rendered in prompt


def test_transcript_list_is_serialised_in_order():
    chat = [{"sender": "agent", "text": "Hi"}, {"sender": "customer", "text": "Bye"}]

    bundle = build_prompt(PromptKind.ANALYSE_CONVERSATION, chat)

    assert json.loads(bundle.user_prompt) == chat


@pytest.mark.parametrize(
    ("score", "label"),
    [
        (0.0, "Not Professional"),
        (0.4, "Not Professional"),
        (0.41, "Neutral"),
        (0.59, "Neutral"),
        (0.6, "Professional"),
        (1.0, "Professional"),
    ],
)
def test_admin_score_banding(score, label):
    assert band_admin_score(score) == label


def test_score_parsing():
    assert parse_response(PromptKind.ADMIN_SENTIMENT, " 0.75\n") == ScoreResult(0.75)

    for raw in ("1.2", "-0.1", "nan", "high"):
        with pytest.raises(ParseError):
            parse_response(PromptKind.CUSTOMER_SENTIMENT_SCORE, raw)


def test_label_parsing_trims_and_rejects_blank():
    assert parse_response(PromptKind.CUSTOMER_FEELING, "  Happy \n") == LabelResult("Happy")

    with pytest.raises(ParseError):
        parse_response(PromptKind.RAG_QUERY, "   ")


def test_category_parsing():
    raw = "Category: Roaming\nSubcategory: Unable to use/connect roaming\n"

    assert parse_response(PromptKind.CATEGORIZE_ISSUE, raw) == CategoryResult(
        category="Roaming", subcategory="Unable to use/connect roaming"
    )


@pytest.mark.parametrize(
    "raw",
    [
        "Category: Roaming",
        "Roaming\nOthers",
        "Category: Roaming\nSubcategory:",
        "Category: Roaming\nSubcategory: Others\nExtra line",
    ],
)
def test_malformed_category_is_parse_error(raw):
    with pytest.raises(ParseError):
        parse_response(PromptKind.CATEGORIZE_ISSUE, raw)


def test_report_parsing_accepts_valid_json():
    parsed = parse_response(PromptKind.ANALYSE_CONVERSATION, json.dumps(VALID_REPORT))

    assert isinstance(parsed, JsonReport)
    assert json.loads(parsed.report.to_json()) == VALID_REPORT


def test_report_parsing_rejects_fences_and_bad_shapes():
    fenced = "```json\n" + json.dumps(VALID_REPORT) + "\n```"
    missing = {key: value for key, value in VALID_REPORT.items() if key != "aiInsight"}
    out_of_range = {**VALID_REPORT, "overallPerformance": 140}

    for raw in (fenced, json.dumps(missing), json.dumps(out_of_range), "{"):
        with pytest.raises(ParseError):
            parse_response(PromptKind.ANALYSE_CONVERSATION, raw)


@pytest.mark.parametrize(
    "kind",
    [PromptKind.ADMIN_SENTIMENT, PromptKind.CUSTOMER_FEELING, PromptKind.CATEGORIZE_ISSUE],
)
def test_user_prompt_is_the_raw_input_text(kind):
    bundle = build_prompt(kind, "  Hi,\nmy line is dead.  \n")

    assert bundle.user_prompt == "  Hi,\nmy line is dead.  \n"
