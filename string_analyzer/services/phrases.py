"""
Phrase translation for the natural-language filter endpoint.

This is a lookup table, not a parser: a phrase is recognized only when it is
exactly (case included) one of the entries of `Phrase`.
"""
import logging
from enum import Enum
from typing import Any, Callable, Dict, NamedTuple, Optional

from string_analyzer.exceptions import (
    ConflictingFilterError,
    MissingQueryError,
    UnparseablePhraseError,
)
from string_analyzer.services.filters import (
    IS_PALINDROME,
    LENGTH,
    VALUE,
    WORD_COUNT,
    Conjunction,
    Equals,
    Range,
    Substring,
)

logger = logging.getLogger(__name__)

VOWELS = ("a", "e", "i", "o", "u")


class Phrase(str, Enum):
    SINGLE_WORD_PALINDROMES = "all single word palindromic strings"
    LONGER_THAN_TEN = "strings longer than 10 characters"
    PALINDROMES_STARTING_WITH_VOWEL = "palindromic strings that contain the first vowel"
    CONTAINING_Z = "strings containing the letter z"
    PALINDROMES_THAT_ARE_NOT = "palindromic strings that are not palindromes"


class Translation(NamedTuple):
    filter: Conjunction
    parsed_filters: Dict[str, Any]


def _single_word_palindromes() -> Conjunction:
    return Conjunction(predicates=(
        Equals(field=WORD_COUNT, value=1),
        Equals(field=IS_PALINDROME, value=True),
    ))


def _longer_than_ten() -> Conjunction:
    return Conjunction(predicates=(Range(field=LENGTH, gt=10),))


def _palindromes_starting_with_vowel() -> Conjunction:
    return Conjunction(predicates=(
        Equals(field=IS_PALINDROME, value=True),
        Substring(field=VALUE, needles=VOWELS, anchored=True),
    ))


def _containing_z() -> Conjunction:
    return Conjunction(predicates=(Substring(field=VALUE, needles=("z",)),))


def _palindromes_that_are_not() -> Conjunction:
    # is_palindrome == true AND is_palindrome == false can never match
    raise ConflictingFilterError()


FILTER_BUILDERS: Dict[Phrase, Callable[[], Conjunction]] = {
    Phrase.SINGLE_WORD_PALINDROMES: _single_word_palindromes,
    Phrase.LONGER_THAN_TEN: _longer_than_ten,
    Phrase.PALINDROMES_STARTING_WITH_VOWEL: _palindromes_starting_with_vowel,
    Phrase.CONTAINING_Z: _containing_z,
    Phrase.PALINDROMES_THAT_ARE_NOT: _palindromes_that_are_not,
}


def translate(phrase: Optional[str]) -> Translation:
    """
    Map a phrase of the closed vocabulary to a filter expression.

    Raises MissingQueryError for an empty phrase, UnparseablePhraseError for
    anything outside the vocabulary and ConflictingFilterError for phrases
    that contradict themselves.
    """
    if not phrase:
        raise MissingQueryError()

    try:
        recognized = Phrase(phrase)
    except ValueError:
        logger.info(f"Unrecognized phrase: {phrase!r}")
        raise UnparseablePhraseError() from None

    expr = FILTER_BUILDERS[recognized]()
    logger.info(f"Translated {recognized.name} into {expr.describe()}")
    return Translation(filter=expr, parsed_filters=expr.describe())
