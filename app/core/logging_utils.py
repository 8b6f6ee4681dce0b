"""
Logging utilities for safe logging of user data and sensitive information.

Includes:
- PII/secret redaction for safe logging
- Structured logging of generative text calls
"""
import json
import logging
import re
from typing import Any, Dict, Optional


# Sensitive keys that should be redacted in logs
SENSITIVE_KEYS = [
    "api_key", "token", "password", "secret", "auth",
    "email", "phone", "access_token", "refresh_token",
    "bearer", "authorization",
]


def sanitize_for_logging(data: Any, max_len: int = 100) -> Any:
    """
    Sanitize data for safe logging - redacts PII and secrets.

    Args:
        data: The data to sanitize (can be dict, list, str, or other types)
        max_len: Maximum length for string values before truncation

    Returns:
        Sanitized version of the data safe for logging
    """
    if data is None:
        return "None"

    if isinstance(data, dict):
        sanitized = {}
        for k, v in data.items():
            if any(sensitive in str(k).lower() for sensitive in SENSITIVE_KEYS):
                sanitized[k] = "***REDACTED***"
            else:
                sanitized[k] = sanitize_for_logging(v, max_len)
        return sanitized

    if isinstance(data, (list, tuple)):
        return [sanitize_for_logging(item, max_len) for item in data]

    if isinstance(data, str):
        # Single-line logging
        cleaned = re.sub(r'[\x00-\x1F\x7F]', '', data)
        if len(cleaned) > max_len:
            return cleaned[:max_len] + "..."
        return cleaned

    if isinstance(data, (int, float, bool)):
        return data

    return sanitize_for_logging(str(data), max_len)


def describe_answers(answers: Dict[str, str]) -> Dict[str, int]:
    """Question ids mapped to answer lengths; never the answer text itself."""
    return {key: len(value or "") for key, value in answers.items()}


# =============================================================================
# STRUCTURED LLM CALL LOGGING
# =============================================================================

_llm_logger = logging.getLogger("QJournal.LLM.Calls")


def log_llm_call(
    model: str,
    purpose: str,
    duration_ms: int,
    input_tokens: Optional[int] = None,
    output_tokens: Optional[int] = None,
    provider: str = "unknown",
) -> None:
    """
    Log a single generative text call as one parseable line.

    Args:
        model: Model identifier that produced the completion
        purpose: Which summary the call was for (e.g. 'one_line')
        duration_ms: Wall-clock duration of the call
        input_tokens: Prompt tokens, when the provider reports usage
        output_tokens: Completion tokens, when the provider reports usage
        provider: 'anthropic' or 'openai'
    """
    event = {
        "event": "llm_call",
        "provider": provider,
        "model": model,
        "purpose": purpose,
        "duration_ms": duration_ms,
    }
    if input_tokens is not None:
        event["input_tokens"] = input_tokens
    if output_tokens is not None:
        event["output_tokens"] = output_tokens

    _llm_logger.info("LLM_CALL %s", json.dumps(event))
