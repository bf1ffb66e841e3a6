from sqlalchemy import Column, String, Integer, Boolean, Text, JSON
from string_analyzer.database import Base


class StringRecord(Base):
    __tablename__ = "string_records"

    # SHA-256 of value, so the primary key also enforces unique values
    # (TEXT columns cannot carry a unique index on MySQL)
    id = Column(String(64), primary_key=True, index=True)
    value = Column(Text, nullable=False)
    length = Column(Integer, nullable=False, index=True)
    is_palindrome = Column(Boolean, nullable=False, index=True)
    unique_characters = Column(Text, nullable=False)
    word_count = Column(Integer, nullable=False, index=True)
    sha256_hash = Column(String(64), nullable=False)
    character_frequency_map = Column(JSON, nullable=False)
    created_at = Column(String(40), nullable=False)
