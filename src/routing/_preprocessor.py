"""Query preprocessing: normalization, tokenization, and entity flags."""

from __future__ import annotations

import re
from typing import Any

from src.routing._models import PreprocessedQuery

_MIN_TOKEN_LENGTH = 3

_WORD_PATTERN: re.Pattern[str] = re.compile(r"\w+")
_CODE_BLOCK_PATTERN: re.Pattern[str] = re.compile(r"```[\s\S]*?```|~~~[\s\S]*?~~~")
_URL_PATTERN: re.Pattern[str] = re.compile(r"\bhttps?://\S+|\bwww\.[^\s.]+\.\S+", re.IGNORECASE)
_EMAIL_PATTERN: re.Pattern[str] = re.compile(r"\b[\w.+-]+@[\w-]+\.[\w.-]+\b")

_TECHNICAL_TERMS_PATTERN: re.Pattern[str] = re.compile(
    r"\b(?:apis?|rest(?:ful)?|json|xml|yaml|https?|graphql|sql|nosql|oauth|jwt|sdk|cli"
    r"|urls?|dns|tcp|udp|websockets?|database|server|endpoints?|docker|kubernetes"
    r"|microservices?|cache|regex|async|framework|library|deployment|ci/cd)\b",
    re.IGNORECASE,
)

_PROGRAMMING_LANGUAGES_PATTERN: re.Pattern[str] = re.compile(
    r"\b(?:python|javascript|typescript|java|ruby|php|swift|kotlin|rust|golang|scala"
    r"|perl|haskell|elixir|dart|lua|matlab|bash|sql|html|css)\b"
    r"|(?<!\w)c(?:\+\+|#)(?!\w)",
    re.IGNORECASE,
)


def tokenize(text: str) -> list[str]:
    """Split text into lowercase word tokens longer than two characters.

    Tokens made only of underscores (or other non-alphanumerics) are dropped.
    """
    return [
        token
        for token in _WORD_PATTERN.findall(text.lower())
        if len(token) >= _MIN_TOKEN_LENGTH and any(ch.isalnum() for ch in token)
    ]


def extract_technical_terms(text: str) -> set[str]:
    """Lowercased technical-vocabulary terms found in ``text``."""
    return {match.lower() for match in _TECHNICAL_TERMS_PATTERN.findall(text)}


def extract_programming_languages(text: str) -> set[str]:
    """Lowercased programming language names found in ``text``."""
    return {match.lower() for match in _PROGRAMMING_LANGUAGES_PATTERN.findall(text)}


def preprocess(query: Any) -> PreprocessedQuery:
    """Build a PreprocessedQuery from raw input.

    Never raises: anything that is not a ``str`` is treated as the empty
    query.
    """
    original = query if isinstance(query, str) else ""
    cleaned = " ".join(original.lower().split())

    return PreprocessedQuery(
        original=original,
        cleaned=cleaned,
        tokens=tuple(tokenize(cleaned)),
        word_count=len(cleaned.split()),
        length=len(original),
        has_code_blocks=bool(_CODE_BLOCK_PATTERN.search(original)),
        has_urls=bool(_URL_PATTERN.search(original)),
        has_emails=bool(_EMAIL_PATTERN.search(original)),
        technical_terms=frozenset(extract_technical_terms(original)),
        programming_languages=frozenset(extract_programming_languages(original)),
    )
