"""
Context assembly.

Turns ranked matches, conversation history and the registry catalog into
the text blocks the model sees. The catalog is rendered independently of
retrieval so inventory questions are answerable even when similarity search
finds nothing relevant.

Dependencies: docchat.core.prompts, docchat.core.intent
System role: Second stage of the query path
"""

import logging
from collections.abc import Sequence

from docchat.core.history import format_history
from docchat.core.intent import is_inventory_query
from docchat.core.prompts import (
    CONTEXT_SEPARATOR,
    INVENTORY_INSTRUCTION,
    NO_DOCUMENTS_AVAILABLE,
    NO_RELEVANT_DOCUMENTS,
    REFINE_INSTRUCTION,
    SYSTEM_PROMPT,
    USER_PROMPT,
)
from docchat.models.chat import ConversationTurn, RetrievedMatch
from docchat.models.context import AssembledContext
from docchat.models.document import DocumentRecord, DocumentStats

logger = logging.getLogger(__name__)

CATALOG_PREVIEW_CHARS = 100


def format_matches(matches: Sequence[RetrievedMatch]) -> str:
    """Render matches in rank order, or the no-relevant-documents marker."""
    if not matches:
        return NO_RELEVANT_DOCUMENTS
    return CONTEXT_SEPARATOR.join(
        f"Document {n} (from {m.source}, page {m.page}, relevance: {m.score * 100:.1f}%):\n{m.text}"
        for n, m in enumerate(matches, start=1)
    )


def format_retrieved_summary(matches: Sequence[RetrievedMatch]) -> str:
    """Summarize which sources this query hit."""
    sources = list(dict.fromkeys(m.source for m in matches))
    if not sources:
        return "**Retrieved Context for Current Query:**\n- No specific documents matched this query"
    return (
        "**Retrieved Context for Current Query:**\n"
        f"- Sources Found: {', '.join(sources)}\n"
        f"- Chunks Retrieved: {len(matches)}"
    )


def format_documents(records: Sequence[DocumentRecord]) -> str:
    """Render the document list for display."""
    if not records:
        return NO_DOCUMENTS_AVAILABLE

    lines = [f"📚 **Document Catalog** ({len(records)} documents available)", ""]
    for n, record in enumerate(records, start=1):
        lines.append(f"{n}. **{record.file_name}**")
        counts = f"   📄 Chunks: {record.total_chunks}"
        if record.pages:
            counts += f" | 📖 Pages: {record.pages}"
        lines.append(counts)
        lines.append(f"   📅 Uploaded: {record.uploaded_at.strftime('%Y-%m-%d')}")
        if record.preview:
            lines.append(f"   📝 Preview: {record.preview[:CATALOG_PREVIEW_CHARS]}...")
        lines.append("")
    return "\n".join(lines)


def format_catalog(records: Sequence[DocumentRecord]) -> str:
    """Render the global catalog with aggregate statistics."""
    if not records:
        return f"**Global Document Catalog:**\n{NO_DOCUMENTS_AVAILABLE}"
    stats = DocumentStats.from_records(list(records))
    return (
        "**Global Document Catalog:**\n"
        f"{format_documents(records)}\n"
        "**Catalog Statistics:**\n"
        f"- Total Documents: {stats.total_documents}\n"
        f"- Total Chunks: {stats.total_chunks}\n"
        f"- Total Pages: {stats.total_pages}\n"
        f"- Average Chunks per Document: {stats.average_chunks_per_document}"
    )


class ContextAssembler:
    """Builds AssembledContext values and renders them into the user turn."""

    def __init__(self, system_prompt: str = SYSTEM_PROMPT) -> None:
        self.system_prompt = system_prompt

    def assemble(
        self,
        query: str,
        matches: Sequence[RetrievedMatch],
        history: Sequence[ConversationTurn],
        catalog: Sequence[DocumentRecord],
    ) -> AssembledContext:
        """
        Assemble the generation context for one question.

        Args:
            query: Raw user question
            matches: Ranked retrieval results (may be empty)
            history: Prior turns, oldest first
            catalog: Registry records of the namespace

        Returns:
            AssembledContext: Rendered blocks plus the inventory-intent flag
        """
        inventory = is_inventory_query(query)
        context = AssembledContext(
            instructions=self.system_prompt,
            retrieved_text=format_matches(matches),
            retrieved_summary=format_retrieved_summary(matches),
            catalog_text=format_catalog(catalog),
            history_text=format_history(history),
            query=query,
            closing_instruction=INVENTORY_INSTRUCTION if inventory else REFINE_INSTRUCTION,
            is_inventory_query=inventory,
        )
        logger.info(
            f"{__name__}:assemble - Context assembled",
            extra={
                "matches": len(matches),
                "catalog_documents": len(catalog),
                "history_turns": len(history),
                "inventory_query": inventory,
            },
        )
        return context

    @staticmethod
    def render(context: AssembledContext) -> str:
        """Render the user turn sent to the model."""
        history = (
            f"\n**Previous conversation context:**\n{context.history_text}\n"
            if context.history_text
            else ""
        )
        return USER_PROMPT.format(
            catalog=context.catalog_text,
            retrieved_summary=context.retrieved_summary,
            retrieved_text=context.retrieved_text,
            history=history,
            query=context.query,
            closing_instruction=context.closing_instruction,
        )
