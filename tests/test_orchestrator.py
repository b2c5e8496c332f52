"""End-to-end orchestration over a scripted provider."""

import asyncio
import logging

import pytest

from notes_ai.config.constants import FALLBACK_FINISH_REASON
from notes_ai.config.model_config import GeminiModelConfig
from notes_ai.core.exceptions import ErrorKind, RequestValidationError
from notes_ai.core.fallback import create_fallback_summary, create_fallback_tags
from notes_ai.core.retry import RetryOptions
from notes_ai.pipeline.orchestrator import SummarizeOptions, TagOptions, summary_output_tokens
from notes_ai.providers.llm.base import GenerationOptions

from .conftest import response

NOTE = (
    "Weekly meeting with the mobile team. "
    "We reviewed the onboarding redesign and agreed to ship the beta on Friday. "
    "QA needs two more days for regression testing. "
    "Next sync will cover the analytics dashboard."
)
GOOD_SUMMARY = "The mobile team agreed to ship the onboarding beta on Friday after QA."

# ================================================================================
# PRE-FLIGHT
# ================================================================================


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "content, message",
    [
        ("", "Content is required and must be a string"),
        (None, "Content is required and must be a string"),
        (42, "Content is required and must be a string"),
        (["text"], "Content is required and must be a string"),
        ("   \n\t ", "Content cannot be empty"),
    ],
)
async def test_summarize_rejects_bad_content_without_remote_call(make_provider, make_orchestrator, content, message):
    provider = make_provider(return_value=response(GOOD_SUMMARY))
    orchestrator = make_orchestrator(provider)

    with pytest.raises(RequestValidationError) as exc_info:
        await orchestrator.summarize(content)

    assert exc_info.value.message == message
    provider.generate.assert_not_awaited()


@pytest.mark.asyncio
async def test_over_budget_content_is_a_request_error(make_provider, make_orchestrator):
    provider = make_provider(return_value=response(GOOD_SUMMARY))
    orchestrator = make_orchestrator(provider, model_config=GeminiModelConfig(api_key="test-key", max_tokens=10))

    with pytest.raises(RequestValidationError) as exc_info:
        await orchestrator.generate_tags("a" * 100)

    assert exc_info.value.message == "Content too long. Estimated tokens: 25, max allowed: 10"
    provider.generate.assert_not_awaited()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "options",
    [
        SummarizeOptions(max_length=0),
        SummarizeOptions(max_length=10_000),
        SummarizeOptions(temperature=1.5),
        SummarizeOptions(temperature=-0.1),
    ],
)
async def test_summarize_rejects_out_of_range_options(make_provider, make_orchestrator, options):
    provider = make_provider(return_value=response(GOOD_SUMMARY))

    with pytest.raises(RequestValidationError):
        await make_orchestrator(provider).summarize(NOTE, options)

    provider.generate.assert_not_awaited()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "options",
    [TagOptions(max_tags=0), TagOptions(max_tags=11), TagOptions(language="fr")],
)
async def test_tags_reject_out_of_range_options(make_provider, make_orchestrator, options):
    provider = make_provider(return_value=response("a, b"))

    with pytest.raises(RequestValidationError):
        await make_orchestrator(provider).generate_tags(NOTE, options)

    provider.generate.assert_not_awaited()

# ================================================================================
# SUMMARIZE
# ================================================================================


@pytest.mark.asyncio
async def test_summarize_success(make_provider, make_orchestrator):
    provider = make_provider(return_value=response(f"  {GOOD_SUMMARY}  "))

    result = await make_orchestrator(provider).summarize(NOTE)

    assert result.summary == GOOD_SUMMARY
    assert result.finish_reason == "STOP"
    assert result.usage == {"prompt_token_count": 12, "total_token_count": 20}
    assert result.warning is None
    assert not result.is_fallback

    prompt, generation = provider.generate.await_args.args
    assert NOTE in prompt
    assert "200 characters" in prompt
    assert generation == GenerationOptions(max_tokens=50, temperature=None)


def test_summary_output_tokens():
    assert summary_output_tokens(200) == 50
    assert summary_output_tokens(201) == 51
    assert summary_output_tokens(5000) == 500


@pytest.mark.asyncio
async def test_summarize_honors_zero_temperature(make_provider, make_orchestrator):
    provider = make_provider(return_value=response(GOOD_SUMMARY))

    await make_orchestrator(provider).summarize(NOTE, SummarizeOptions(max_length=100, temperature=0.0))

    _, generation = provider.generate.await_args.args
    assert generation.temperature == 0.0
    assert generation.max_tokens == 25


@pytest.mark.asyncio
async def test_short_model_summary_is_improved_within_max_length(make_provider, make_orchestrator):
    provider = make_provider(return_value=response("Beta ok"))

    result = await make_orchestrator(provider).summarize(NOTE, SummarizeOptions(max_length=40))

    assert result.summary == create_fallback_summary(NOTE, 40)
    assert len(result.summary) <= 40
    assert result.finish_reason == "STOP"
    assert result.warning is None


@pytest.mark.asyncio
async def test_rate_limit_retries_then_falls_back(make_provider, make_orchestrator):
    provider = make_provider(side_effect=Exception("rate limit exceeded"))

    result = await make_orchestrator(provider).summarize(NOTE)

    assert provider.generate.await_count == 3
    assert result.finish_reason == FALLBACK_FINISH_REASON
    assert result.usage == {}
    assert result.summary == create_fallback_summary(NOTE, 200)
    assert result.warning == ErrorKind.RATE_LIMIT.user_message


@pytest.mark.asyncio
async def test_auth_failure_falls_back_without_retry(make_provider, make_orchestrator, caplog):
    caplog.set_level(logging.WARNING, logger="notes_ai")
    provider = make_provider(side_effect=Exception("API key is invalid"))

    result = await make_orchestrator(provider).summarize(NOTE)

    assert provider.generate.await_count == 1
    assert result.is_fallback
    assert result.warning == ErrorKind.AUTHENTICATION.user_message

    records = [r for r in caplog.records if getattr(r, "error_kind", None) == "AUTHENTICATION"]
    assert len(records) == 1
    assert records[0].levelno == logging.ERROR
    assert records[0].context["content_preview"] == NOTE[:100]
    assert records[0].context["max_length"] == 200


@pytest.mark.asyncio
async def test_recovers_when_a_retry_succeeds(make_provider, make_orchestrator):
    provider = make_provider(side_effect=[Exception("network error"), response(GOOD_SUMMARY)])

    result = await make_orchestrator(provider).summarize(NOTE)

    assert provider.generate.await_count == 2
    assert result.summary == GOOD_SUMMARY
    assert result.warning is None


@pytest.mark.asyncio
async def test_invalid_response_falls_back_without_retry(make_provider, make_orchestrator):
    provider = make_provider(return_value=response(None))

    result = await make_orchestrator(provider).summarize(NOTE)

    assert provider.generate.await_count == 1
    assert result.is_fallback
    assert result.warning == ErrorKind.INVALID_REQUEST.user_message


@pytest.mark.asyncio
async def test_timeout_bounds_total_time_across_retries(make_provider, make_orchestrator):
    async def slow_failure(prompt, options):
        await asyncio.sleep(0.04)
        raise Exception("network error")

    provider = make_provider(side_effect=slow_failure)
    orchestrator = make_orchestrator(
        provider,
        model_config=GeminiModelConfig(api_key="test-key", timeout_s=0.1),
        retry_options=RetryOptions(max_attempts=10, base_delay=0.0, max_delay=0.0),
    )

    result = await orchestrator.summarize(NOTE)

    assert result.is_fallback
    assert result.warning == ErrorKind.TIMEOUT.user_message
    assert provider.generate.await_count < 10


@pytest.mark.asyncio
async def test_low_quality_summary_is_improved(make_provider, make_orchestrator):
    provider = make_provider(return_value=response("Ship it"))

    result = await make_orchestrator(provider).summarize(NOTE)

    assert result.summary == create_fallback_summary(NOTE, 200)
    assert result.finish_reason == "STOP"
    assert result.warning is None


@pytest.mark.asyncio
async def test_concurrent_requests_are_independent(make_provider, make_orchestrator):
    async def generate(prompt, options):
        if "FAIL" in prompt:
            raise Exception("API key is invalid")
        return response(GOOD_SUMMARY)

    orchestrator = make_orchestrator(make_provider(side_effect=generate))

    ok, failed = await asyncio.gather(
        orchestrator.summarize(NOTE),
        orchestrator.summarize("FAIL. " + NOTE),
    )

    assert ok.summary == GOOD_SUMMARY and ok.warning is None
    assert failed.is_fallback

# ================================================================================
# TAGS
# ================================================================================


@pytest.mark.asyncio
async def test_tags_success(make_provider, make_orchestrator):
    provider = make_provider(return_value=response("onboarding, beta launch, QA, analytics"))

    result = await make_orchestrator(provider).generate_tags(NOTE)

    assert result.tags == ["onboarding", "beta launch", "QA", "analytics"]
    assert result.count == 4
    assert result.language == "both"
    assert result.warning is None

    _, generation = provider.generate.await_args.args
    assert generation == GenerationOptions(max_tokens=100, temperature=0.5)


@pytest.mark.asyncio
async def test_tags_are_capped_at_max_tags(make_provider, make_orchestrator):
    provider = make_provider(return_value=response("one1, two2, three3, four4, five5, six6"))

    result = await make_orchestrator(provider).generate_tags(NOTE, TagOptions(max_tags=2))

    assert result.tags == ["one1", "two2"]
    assert result.count == 2


@pytest.mark.asyncio
async def test_language_selector_reaches_prompt(make_provider, make_orchestrator):
    provider = make_provider(return_value=response("회의, 출시"))

    result = await make_orchestrator(provider).generate_tags(NOTE, TagOptions(language="ko"))

    prompt, _ = provider.generate.await_args.args
    assert "Korean" in prompt
    assert result.language == "ko"


@pytest.mark.asyncio
async def test_single_tag_is_topped_up(make_provider, make_orchestrator):
    provider = make_provider(return_value=response("onboarding"))

    result = await make_orchestrator(provider).generate_tags(NOTE, TagOptions(max_tags=4))

    assert result.tags[0] == "onboarding"
    assert 2 <= result.count <= 4
    assert len(set(result.tags)) == result.count


@pytest.mark.asyncio
async def test_tags_fall_back_on_quota_error(make_provider, make_orchestrator):
    provider = make_provider(side_effect=Exception("Quota exceeded for project"))

    result = await make_orchestrator(provider).generate_tags(NOTE, TagOptions(max_tags=3))

    assert provider.generate.await_count == 1
    assert result.is_fallback
    assert result.usage == {}
    assert result.tags == create_fallback_tags(NOTE, 3)
    assert result.count == len(result.tags)
    assert result.tags[0] == "meeting"
    assert result.warning == ErrorKind.QUOTA_EXCEEDED.user_message


@pytest.mark.asyncio
async def test_fallback_uses_configured_keyword_table(make_provider, make_orchestrator):
    provider = make_provider(side_effect=Exception("API key is invalid"))
    orchestrator = make_orchestrator(provider, keyword_table={"release": ("beta",)})

    result = await orchestrator.generate_tags(NOTE)

    assert result.tags[0] == "release"
    assert "meeting" not in result.tags[:1]


@pytest.mark.asyncio
async def test_tags_with_no_usable_candidates_fall_back(make_provider, make_orchestrator):
    provider = make_provider(return_value=response(" , !!, ---"))

    result = await make_orchestrator(provider).generate_tags(NOTE)

    assert result.is_fallback
    assert 1 <= result.count <= 5

# ================================================================================
# CONNECTIVITY
# ================================================================================


@pytest.mark.asyncio
async def test_check_connection_success(make_provider, make_orchestrator):
    provider = make_provider(return_value=response("API connection successful."))

    result = await make_orchestrator(provider).check_connection()

    assert result.success is True
    assert result.error is None
    assert result.response_time_ms >= 0
    assert provider.generate.await_count == 1


@pytest.mark.asyncio
async def test_check_connection_reports_classified_failure(make_provider, make_orchestrator):
    provider = make_provider(side_effect=Exception("API key is invalid"))

    result = await make_orchestrator(provider).check_connection()

    assert result.success is False
    assert result.error == "API key is invalid"
    assert result.error_kind == "AUTHENTICATION"


@pytest.mark.asyncio
async def test_check_connection_unexpected_reply(make_provider, make_orchestrator):
    provider = make_provider(return_value=response("Hello there"))

    result = await make_orchestrator(provider).check_connection()

    assert result.success is False
    assert result.error == "Unexpected probe response"


def test_describe_has_no_secrets(make_provider, make_orchestrator):
    info = make_orchestrator(make_provider()).describe()
    assert info["model"] == "gemini-2.0-flash"
    assert "test-key" not in str(info)
