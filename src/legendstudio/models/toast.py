"""User notification model."""

import uuid
from enum import StrEnum

from pydantic import BaseModel, Field


class ToastSeverity(StrEnum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


class Toast(BaseModel):
    """A short-lived message shown to the user."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    message: str
    severity: ToastSeverity = ToastSeverity.INFO
    created_at: float = Field(..., description="Clock reading at creation")
