"""
SQLAlchemy ORM Models for the study database

Defines the phrase tables (written by the extraction pipeline, read here)
and the per-user card study and study session tables.
"""

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class PhraseExtraction(Base):
    """
    One run of phrase extraction over a subtitle file.

    episode_id is the scope a study deck is built from.
    """
    __tablename__ = 'phrase_extractions'

    id = Column(String(36), primary_key=True)
    episode_id = Column(String(255), nullable=True, index=True)
    show_id = Column(String(255), nullable=True)

    # Provenance
    content_hash = Column(String(64), nullable=False)
    content_preview = Column(Text, nullable=True)
    source = Column(String(50), nullable=False, default="manual")
    language = Column(String(10), nullable=False, default="pt")
    total_phrases_found = Column(Integer, nullable=False, default=0)
    was_truncated = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), nullable=False)

    def __repr__(self):
        return f"<PhraseExtraction({self.id}, episode={self.episode_id})>"


class ExtractedPhrase(Base):
    """
    A learnable phrase with its translation.

    Read-only for the study subsystem.
    """
    __tablename__ = 'extracted_phrases'

    id = Column(String(36), primary_key=True)
    extraction_id = Column(String(36), ForeignKey('phrase_extractions.id'), nullable=False, index=True)

    phrase = Column(Text, nullable=False)
    translation = Column(Text, nullable=False)
    context = Column(Text, nullable=True)
    confidence_score = Column(Float, nullable=True)
    position_in_content = Column(Integer, nullable=True)  # Order within the subtitle file

    created_at = Column(DateTime(timezone=True), nullable=False)

    def __repr__(self):
        return f"<ExtractedPhrase({self.id}, {self.phrase!r})>"


class UserCardStudy(Base):
    """
    Spaced-repetition state for one (user, phrase, direction).

    Exactly one row per key; rows are upserted, never deleted.
    """
    __tablename__ = 'user_card_studies'
    __table_args__ = (
        UniqueConstraint('user_id', 'phrase_id', 'direction', name='uq_card_study_key'),
        Index('ix_card_study_due', 'user_id', 'direction', 'due_date'),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)

    user_id = Column(String(255), nullable=False)
    phrase_id = Column(String(36), ForeignKey('extracted_phrases.id'), nullable=False)
    direction = Column(String(20), nullable=False)  # "recognize" / "produce"

    # Scheduling parameters
    due_date = Column(DateTime(timezone=True), nullable=False)
    stability = Column(Float, nullable=False, default=0.0)
    difficulty = Column(Float, nullable=False, default=0.0)
    elapsed_days = Column(Integer, nullable=False, default=0)
    scheduled_days = Column(Integer, nullable=False, default=0)

    # Counters
    reps = Column(Integer, nullable=False, default=0)
    lapses = Column(Integer, nullable=False, default=0)
    state = Column(String(20), nullable=False, default="New")

    # Last interaction
    last_review = Column(DateTime(timezone=True), nullable=True)
    last_rating = Column(Integer, nullable=True)  # 1=AGAIN, 2=HARD, 3=GOOD, 4=EASY

    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    def __repr__(self):
        return f"<UserCardStudy({self.user_id}, {self.phrase_id}, {self.direction}, {self.state})>"


class UserStudySession(Base):
    """
    One sitting of study for a user and episode.
    """
    __tablename__ = 'user_study_sessions'

    id = Column(String(36), primary_key=True)
    user_id = Column(String(255), nullable=False, index=True)
    episode_id = Column(String(255), nullable=False)
    direction = Column(String(20), nullable=False, default="recognize")
    session_type = Column(String(20), nullable=False, default="mixed")  # new / review / mixed

    # Running totals
    total_cards = Column(Integer, nullable=False, default=0)
    cards_studied = Column(Integer, nullable=False, default=0)
    cards_correct = Column(Integer, nullable=False, default=0)
    session_duration_seconds = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), nullable=False)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    def __repr__(self):
        return f"<UserStudySession({self.id}, {self.cards_studied}/{self.total_cards})>"
