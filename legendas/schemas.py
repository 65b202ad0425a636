"""
Pydantic models for phrase imports.

An import is a batch of phrases already extracted from an episode's
subtitles, validated before it becomes one phrase extraction.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


MAX_PREVIEW_CHARS = 200  # Stored preview of the imported content


class PhraseRecord(BaseModel):
    """One extracted phrase with its English translation."""
    phrase: str = Field(..., min_length=1, description="Portuguese phrase as spoken in the episode")
    translation: str = Field(..., min_length=1, description="English translation")
    context: Optional[str] = Field(default=None, description="Subtitle line(s) the phrase came from")
    confidence_score: Optional[float] = Field(
        default=None, ge=0.0, le=1.0, description="Extractor confidence, if known"
    )


class PhraseImport(BaseModel):
    """A batch of phrases for one episode."""
    episode_id: str = Field(..., min_length=1, description="Episode the phrases belong to")
    source: str = Field(default="manual", description="Where the phrases came from (csv, manual, ...)")
    phrases: list[PhraseRecord] = Field(default_factory=list)

    @property
    def preview(self) -> Optional[str]:
        if not self.phrases:
            return None
        return self.phrases[0].phrase[:MAX_PREVIEW_CHARS]
