"""
Chunk domain model.

Represents a bounded, overlapping slice of a document's extracted text,
the unit of embedding and retrieval.

Dependencies: pydantic
System role: Data structure produced by the chunker
"""

from pydantic import BaseModel, ConfigDict, Field


class Chunk(BaseModel):
    """Immutable document chunk."""

    model_config = ConfigDict(frozen=True)

    source_document_id: str = Field(description="Document the chunk was cut from")
    index: int = Field(ge=0, description="Position of the chunk within its document")
    text: str = Field(description="Chunk text, including the overlap with its predecessor")
    page_number: int = Field(default=1, ge=1, description="Page of the chunk's first character")
    char_offset: int = Field(default=0, ge=0, description="Offset of the chunk's first character")

    @property
    def end_offset(self) -> int:
        """Offset one past the chunk's last character."""
        return self.char_offset + len(self.text)
