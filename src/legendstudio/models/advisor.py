"""Advisor suggestion models."""

from enum import StrEnum

from pydantic import BaseModel, Field


class EditingSuggestion(BaseModel):
    """Combined analysis/suggestion pair returned for a single uploaded image."""

    analysis: str = Field(..., description="Prompt describing what the image shows")
    suggestion: str = Field(..., description="Proposed edit for the image")


class SuggestionTarget(StrEnum):
    """Which draft prompt an adopted suggestion is merged into."""

    PROMPT = "prompt"
    VIDEO = "video"


class AdvisorChoice(StrEnum):
    """Resolutions of a pending single-image suggestion."""

    ANALYSIS = "analysis"
    SUGGESTION = "suggestion"
    BOTH = "both"
    NONE = "none"


class SuggestionContext(BaseModel):
    """A pending analysis/suggestion pair awaiting the user's choice."""

    analysis: str
    suggestion: str
    target: SuggestionTarget = SuggestionTarget.PROMPT
