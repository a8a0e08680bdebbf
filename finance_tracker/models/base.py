"""
Base models for all Pydantic models in the application.
"""
from datetime import datetime
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class DocumentModel(BaseModel):
    """Base model for data stored as Firestore documents.

    Documents use camelCase field names; Python code uses snake_case.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True
    )

    def to_document(self, **kwargs: Any) -> Dict[str, Any]:
        """Dump the model with document field names."""
        return self.model_dump(by_alias=True, **kwargs)


class TimestampedModel(DocumentModel):
    """Base model with automatic timestamps."""

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
