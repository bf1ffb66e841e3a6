from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy.orm import Session
from typing import Optional
import logging

from string_analyzer.database import get_db
from string_analyzer.exceptions import RecordNotFoundError
from string_analyzer.schemas.string_record import (
    InterpretedQuery,
    NaturalLanguageResponse,
    StringCreate,
    StringListResponse,
    StringResponse,
)
from string_analyzer.crud import string_record as crud
from string_analyzer.services import filters, phrases
from string_analyzer.services.fingerprint import build_record

router = APIRouter()
logger = logging.getLogger(__name__)

QUERY_PARAMS = ("is_palindrome", "min_length", "max_length", "word_count", "contains_character")

# Handlers are sync on purpose: FastAPI runs them in its threadpool.


@router.post("/strings", response_model=StringResponse, status_code=status.HTTP_201_CREATED)
def create_string(string_data: StringCreate, db: Session = Depends(get_db)):
    """
    Analyze and store a string.
    Returns 400 if "value" is missing, 422 if it is not a string and 409 if
    the string already exists.
    """
    record = build_record(string_data.value)
    db_string = crud.insert_unique(db, record)
    return StringResponse.from_record(db_string)


@router.get("/strings", response_model=StringListResponse)
def get_all_strings(
    request: Request,
    is_palindrome: Optional[str] = Query(None),
    min_length: Optional[int] = Query(None, ge=0),
    max_length: Optional[int] = Query(None, ge=0),
    word_count: Optional[int] = Query(None, ge=0),
    contains_character: Optional[str] = Query(None, min_length=1),
    db: Session = Depends(get_db)
):
    """
    Get all strings with optional filtering.
    is_palindrome is true only for the literal "true".
    """
    params = filters.QueryParams(
        is_palindrome=None if is_palindrome is None else is_palindrome == "true",
        min_length=min_length,
        max_length=max_length,
        word_count=word_count,
        contains_character=contains_character,
    )
    strings = crud.find_many(db, filters.build(params))

    # Echo what the caller sent, untouched
    filters_applied = {
        key: value for key, value in request.query_params.items() if key in QUERY_PARAMS
    }

    data = [StringResponse.from_record(s) for s in strings]
    return StringListResponse(data=data, count=len(data), filters_applied=filters_applied)


@router.get("/strings/filter-by-natural-language", response_model=NaturalLanguageResponse)
def filter_by_natural_language(
    query: Optional[str] = Query(None, description="Natural language query"),
    q: Optional[str] = Query(None, description="Alias of query"),
    db: Session = Depends(get_db)
):
    """
    Filter strings using one of the supported phrases.
    Example: "all single word palindromic strings"
    """
    phrase = query if query is not None else q
    translation = phrases.translate(phrase)
    strings = crud.find_many(db, translation.filter)

    data = [StringResponse.from_record(s) for s in strings]
    return NaturalLanguageResponse(
        data=data,
        count=len(data),
        interpreted_query=InterpretedQuery(
            original=phrase,
            parsed_filters=translation.parsed_filters,
        ),
    )


@router.get("/strings/{string_value}", response_model=StringResponse)
def get_string(string_value: str, db: Session = Depends(get_db)):
    """
    Get analysis for a specific string.
    Returns 404 if string doesn't exist.
    """
    db_string = crud.find_one_by_value(db, string_value)
    if db_string is None:
        raise RecordNotFoundError()
    return StringResponse.from_record(db_string)


@router.delete("/strings/{string_value}", status_code=status.HTTP_204_NO_CONTENT)
def delete_string(string_value: str, db: Session = Depends(get_db)):
    """
    Delete a string from the system.
    Returns 404 if string doesn't exist.
    """
    if crud.delete_one_by_value(db, string_value) is None:
        raise RecordNotFoundError()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
