import hashlib
from collections import Counter
from datetime import datetime, timezone
from typing import Any, Dict, NamedTuple, Optional

from string_analyzer.exceptions import InvalidInputError, MissingInputError


class Fingerprint(NamedTuple):
    """Properties derived from a string. Every field depends on the value alone."""

    length: int
    is_palindrome: bool
    unique_characters: str
    word_count: int
    sha256_hash: str
    character_frequency_map: Dict[str, int]


def compute_sha256(text: str) -> str:
    """Compute SHA-256 hash of a string (lowercase hex)"""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def is_palindrome(text: str) -> bool:
    """Exact comparison with the reversed string, no case or space folding"""
    return text == text[::-1]


def unique_characters(text: str) -> str:
    """Distinct characters in order of first occurrence"""
    return "".join(dict.fromkeys(text))


def count_words(text: str) -> int:
    # Splits on a single literal space: "" is one word, "a  b" is three.
    return len(text.split(" "))


def get_character_frequency(text: str) -> Dict[str, int]:
    """Get frequency map of each character"""
    return dict(Counter(text))


def compute(value: Any) -> Fingerprint:
    """
    Analyze a string and return all computed properties.

    Raises MissingInputError when no value was supplied and InvalidInputError
    when the value is not a string.
    """
    if value is None:
        raise MissingInputError()
    if not isinstance(value, str):
        raise InvalidInputError()

    sha256_hash = compute_sha256(value)
    return Fingerprint(
        length=len(value),
        is_palindrome=is_palindrome(value),
        unique_characters=unique_characters(value),
        word_count=count_words(value),
        sha256_hash=sha256_hash,
        character_frequency_map=get_character_frequency(value),
    )


def build_record(value: Any, created_at: Optional[datetime] = None) -> Dict:
    """
    Compose the storable record: content-derived id, the value, its
    fingerprint and a creation timestamp.
    """
    fingerprint = compute(value)
    if created_at is None:
        created_at = datetime.now(timezone.utc)

    return {
        "id": fingerprint.sha256_hash,
        "value": value,
        "properties": fingerprint._asdict(),
        "created_at": created_at.isoformat(),
    }
