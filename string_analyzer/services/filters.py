"""
Canonical filter expressions.

Structured query parameters and recognized phrases both compile into the same
small tree of predicates. The record store turns that tree into its own query
form, so nothing here knows about SQL.
"""
from pydantic import BaseModel, ConfigDict, Field
from typing import Annotated, Any, Dict, Literal, Optional, Tuple, Union

# Filterable fields of a stored record
VALUE = "value"
LENGTH = "length"
IS_PALINDROME = "is_palindrome"
WORD_COUNT = "word_count"


class _Expr(BaseModel):
    model_config = ConfigDict(frozen=True)


class Equals(_Expr):
    kind: Literal["equals"] = "equals"
    field: str
    value: Union[bool, int, str]

    def describe(self) -> Dict[str, Any]:
        return {self.field: self.value}


class Range(_Expr):
    """Inclusive (gte/lte) and exclusive (gt/lt) bounds on an integer field"""

    kind: Literal["range"] = "range"
    field: str
    gt: Optional[int] = None
    gte: Optional[int] = None
    lt: Optional[int] = None
    lte: Optional[int] = None

    def bounds(self) -> Dict[str, int]:
        return self.model_dump(include={"gt", "gte", "lt", "lte"}, exclude_none=True)

    def describe(self) -> Dict[str, Any]:
        return {self.field: self.bounds()}


class Substring(_Expr):
    """
    Case-insensitive literal match of any of `needles` inside the field.
    With `anchored` the needle has to sit at the start of the field.
    """

    kind: Literal["substring"] = "substring"
    field: str
    needles: Tuple[str, ...]
    anchored: bool = False

    def describe(self) -> Dict[str, Any]:
        key = "starts_with" if self.anchored else "contains"
        needles = self.needles[0] if len(self.needles) == 1 else list(self.needles)
        return {self.field: {key: needles}}


Predicate = Annotated[Union[Equals, Range, Substring], Field(discriminator="kind")]


class Conjunction(_Expr):
    """AND of predicates. An empty conjunction matches every record."""

    kind: Literal["and"] = "and"
    predicates: Tuple[Predicate, ...] = ()

    def describe(self) -> Dict[str, Any]:
        described: Dict[str, Any] = {}
        for predicate in self.predicates:
            for field, condition in predicate.describe().items():
                if isinstance(condition, dict) and isinstance(described.get(field), dict):
                    described[field] = {**described[field], **condition}
                else:
                    described[field] = condition
        return described


FilterExpr = Union[Equals, Range, Substring, Conjunction]


class QueryParams(BaseModel):
    """Already parsed structured query parameters"""

    is_palindrome: Optional[bool] = None
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    word_count: Optional[int] = None
    contains_character: Optional[str] = None


def build(params: QueryParams) -> Conjunction:
    """Translate structured query parameters into a filter expression"""
    predicates = []

    if params.is_palindrome is not None:
        predicates.append(Equals(field=IS_PALINDROME, value=params.is_palindrome))

    if params.min_length is not None or params.max_length is not None:
        predicates.append(
            Range(field=LENGTH, gte=params.min_length, lte=params.max_length)
        )

    if params.word_count is not None:
        predicates.append(Equals(field=WORD_COUNT, value=params.word_count))

    if params.contains_character is not None:
        predicates.append(Substring(field=VALUE, needles=(params.contains_character,)))

    return Conjunction(predicates=tuple(predicates))
