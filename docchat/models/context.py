"""
Assembled generation context.

Dependencies: pydantic
System role: Hand-off between the context assembler and the generation orchestrator
"""

from pydantic import BaseModel, Field


class AssembledContext(BaseModel):
    """Everything the model sees for one question, already rendered to text."""

    instructions: str = Field(description="System block: role, rules, response format")
    retrieved_text: str = Field(description="Rendered matches or the no-documents marker")
    retrieved_summary: str = Field(default="", description="Sources and chunk count for this query")
    catalog_text: str = Field(default="", description="Registry catalog and statistics")
    history_text: str = Field(default="", description="Prior turns as 'Role: content' lines")
    query: str = Field(description="The user's question")
    closing_instruction: str = Field(default="", description="Intent-dependent final instruction")
    is_inventory_query: bool = Field(default=False)
