from contextlib import contextmanager
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy import and_, delete, or_, true
from typing import Dict, List, Optional
import logging

from string_analyzer.exceptions import DuplicateValueError, StoreFailureError
from string_analyzer.models.string_record import StringRecord
from string_analyzer.services.fingerprint import compute_sha256
from string_analyzer.services.filters import (
    IS_PALINDROME,
    LENGTH,
    VALUE,
    WORD_COUNT,
    Conjunction,
    Equals,
    FilterExpr,
    Range,
    Substring,
)

logger = logging.getLogger(__name__)

FILTER_COLUMNS = {
    VALUE: StringRecord.value,
    LENGTH: StringRecord.length,
    IS_PALINDROME: StringRecord.is_palindrome,
    WORD_COUNT: StringRecord.word_count,
}


@contextmanager
def _store_errors(db: Session, action: str):
    try:
        yield
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Error while {action}: {e}")
        raise StoreFailureError() from e


def compile_filter(expr: FilterExpr):
    """Compile a filter expression into a SQLAlchemy WHERE clause"""
    if isinstance(expr, Conjunction):
        return and_(true(), *[compile_filter(p) for p in expr.predicates])

    column = FILTER_COLUMNS[expr.field]

    if isinstance(expr, Equals):
        return column == expr.value

    if isinstance(expr, Range):
        clauses = []
        if expr.gt is not None:
            clauses.append(column > expr.gt)
        if expr.gte is not None:
            clauses.append(column >= expr.gte)
        if expr.lt is not None:
            clauses.append(column < expr.lt)
        if expr.lte is not None:
            clauses.append(column <= expr.lte)
        return and_(true(), *clauses)

    if isinstance(expr, Substring):
        # autoescape keeps % and _ literal
        if expr.anchored:
            options = [column.istartswith(n, autoescape=True) for n in expr.needles]
        else:
            options = [column.icontains(n, autoescape=True) for n in expr.needles]
        return or_(*options)

    raise TypeError(f"Unsupported filter expression: {expr!r}")


def insert_unique(db: Session, record: Dict) -> StringRecord:
    """
    Store a freshly built record.
    Raises DuplicateValueError if the value is already stored.
    """
    db_string = StringRecord(
        id=record["id"],
        value=record["value"],
        created_at=record["created_at"],
        **record["properties"],
    )

    with _store_errors(db, "creating string record"):
        db.add(db_string)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            logger.warning(f"Rejected duplicate value with id {record['id']}")
            raise DuplicateValueError()
        db.refresh(db_string)

    logger.info(f"Stored string record {db_string.id}")
    return db_string


def find_many(db: Session, expr: FilterExpr) -> List[StringRecord]:
    """Get all string records matching the filter (no particular order)"""
    with _store_errors(db, "filtering string records"):
        return db.query(StringRecord).filter(compile_filter(expr)).all()


def find_one_by_value(db: Session, value: str) -> Optional[StringRecord]:
    """Get string record by value"""
    with _store_errors(db, "looking up string record"):
        return db.query(StringRecord).filter(
            StringRecord.id == compute_sha256(value),
            StringRecord.value == value,
        ).first()


def delete_one_by_value(db: Session, value: str) -> Optional[StringRecord]:
    """
    Delete string record by value, returning the deleted record.
    Only the caller whose DELETE actually removed the row gets it back.
    """
    db_string = find_one_by_value(db, value)
    if db_string is None:
        return None

    stmt = (
        delete(StringRecord)
        .where(StringRecord.id == db_string.id, StringRecord.value == value)
        .execution_options(synchronize_session=False)
    )
    with _store_errors(db, "deleting string record"):
        result = db.execute(stmt)
        if result.rowcount == 0:
            db.rollback()
            logger.info(f"String record {db_string.id} was already deleted")
            return None
        db.commit()
        db.expunge(db_string)

    logger.info(f"Deleted string record {db_string.id}")
    return db_string
