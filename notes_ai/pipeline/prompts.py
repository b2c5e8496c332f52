"""Prompt templates for Gemini summary and tag requests."""

_TAG_LANGUAGE_INSTRUCTIONS = {
    "ko": "Write the tags in Korean.",
    "en": "Write the tags in English.",
    "both": "Write each tag in Korean or English, whichever fits the note best.",
}

CONNECTION_PROBE_PROMPT = (
    'Hello, this is a test message. Please respond with "API connection successful."'
)
CONNECTION_PROBE_EXPECTED = "api connection successful"


def build_summary_prompt(content: str, max_length: int) -> str:
    return (
        f"Summarize the following note in {max_length} characters or fewer. "
        f"Keep only the key points and write concisely:\n\n{content}"
    )


def build_tags_prompt(content: str, max_tags: int, language: str = "both") -> str:
    instruction = _TAG_LANGUAGE_INSTRUCTIONS.get(language, _TAG_LANGUAGE_INSTRUCTIONS["both"])
    return (
        f"Analyze the following note and generate at most {max_tags} relevant tags. "
        f"Separate the tags with commas. {instruction} "
        f"Tags must be short and specific:\n\n{content}\n\nTags:"
    )
