"""Token estimation, budget checks and truncation."""

import pytest

from notes_ai.core.token_budget import (
    contains_hangul,
    estimate_tokens,
    get_usage_info,
    is_exceeded,
    truncate_by_sentence_boundary,
    truncate_to_limit,
)

SAMPLES = [
    "Hello world this is a test",
    "a" * 1000,
    "오늘 회의에서 프로젝트 일정을 논의했다. " * 20,
    "Mixed 한국어 and English text. " * 30,
    "x",
    "Привет мир! " * 50,
]


def test_estimate_tokens_scenario():
    assert estimate_tokens("Hello world this is a test") == 7


def test_estimate_tokens_empty_and_none():
    assert estimate_tokens("") == 0
    assert estimate_tokens(None) == 0


def test_estimate_tokens_is_case_invariant():
    assert estimate_tokens("Meeting NOTES for Monday") == estimate_tokens("meeting notes FOR monday")


def test_hangul_text_gets_multiplier():
    assert contains_hangul("안녕하세요")
    assert not contains_hangul("hello")
    # 5 chars / 4 * 1.2 = 1.5 -> 2
    assert estimate_tokens("안녕하세요") == 2
    # 8 chars / 4 = 2 vs 8 / 4 * 1.2 = 2.4 -> 3
    assert estimate_tokens("abcdefgh") == 2
    assert estimate_tokens("abcdefg가") == 3


def test_estimate_is_monotonic_in_length():
    text = "가나다라 abc " * 40
    estimates = [estimate_tokens(text[:n]) for n in range(0, len(text), 7)]
    assert estimates == sorted(estimates)


@pytest.mark.parametrize("text", [s for s in SAMPLES if s])
def test_is_exceeded_boundary(text):
    estimated = estimate_tokens(text)
    assert is_exceeded(text, estimated) is False
    assert is_exceeded(text, estimated - 1) is True


def test_long_repeated_text_scenario():
    text = "a" * 1000
    assert is_exceeded(text, 100) is True

    truncated = truncate_to_limit(text, 100)
    assert 40 < estimate_tokens(truncated) <= 100
    assert text.startswith(truncated)


@pytest.mark.parametrize("text", SAMPLES)
@pytest.mark.parametrize("limit", [0, 1, 5, 37, 100, 10_000])
def test_truncate_to_limit_yields_prefix_within_budget(text, limit):
    truncated = truncate_to_limit(text, limit)
    assert text.startswith(truncated)
    assert estimate_tokens(truncated) <= limit


def test_truncate_to_limit_returns_text_unchanged_when_within_budget():
    assert truncate_to_limit("short note", 100) == "short note"


def test_truncate_to_limit_rejects_negative_budget():
    with pytest.raises(ValueError):
        truncate_to_limit("anything", -1)


def test_truncate_by_sentence_boundary_keeps_whole_sentences():
    text = "First sentence here. Second sentence is here. Third one."
    assert estimate_tokens(text) == 14

    assert truncate_by_sentence_boundary(text, 12) == "First sentence here. Second sentence is here."
    assert truncate_by_sentence_boundary(text, 11) == "First sentence here."


def test_truncate_by_sentence_boundary_falls_back_to_prefix():
    text = "a" * 100 + ". rest of the note"
    assert truncate_by_sentence_boundary(text, 5) == "a" * 20


def test_truncate_by_sentence_boundary_within_budget():
    assert truncate_by_sentence_boundary("One. Two.", 100) == "One. Two."


def test_usage_info_within_budget():
    info = get_usage_info("a" * 200, 100)
    assert info.estimated_tokens == 50
    assert info.is_exceeded is False
    assert info.remaining_tokens == 50
    assert info.usage_percentage == 50


def test_usage_info_percentage_not_clamped_when_exceeded():
    info = get_usage_info("a" * 1000, 100)
    assert info.estimated_tokens == 250
    assert info.is_exceeded is True
    assert info.remaining_tokens == 0
    assert info.usage_percentage == 250


def test_usage_info_rounds_half_up():
    # 2 tokens of 8 -> 25.0; 1 token of 8 -> 12.5 -> 13
    assert get_usage_info("a" * 8, 8).usage_percentage == 25
    assert get_usage_info("a" * 4, 8).usage_percentage == 13


def test_usage_info_rejects_non_positive_budget():
    with pytest.raises(ValueError):
        get_usage_info("text", 0)
