"""
Test suite for ContextAssembler.

System role: Verification of context-window construction
"""

from datetime import datetime, timezone

import pytest

from docchat.core.context_assembler import (
    ContextAssembler,
    format_catalog,
    format_matches,
    format_retrieved_summary,
)
from docchat.core.prompts import (
    INVENTORY_INSTRUCTION,
    NO_RELEVANT_DOCUMENTS,
    REFINE_INSTRUCTION,
    SYSTEM_PROMPT,
)
from docchat.models.chat import ConversationTurn, RetrievedMatch
from docchat.models.document import DocumentRecord, DocumentStatus


@pytest.fixture
def matches() -> list[RetrievedMatch]:
    """Provide two matches from different sources."""
    return [
        RetrievedMatch(id="r1", score=0.912, text="Revenue grew 12%.", source="report.pdf", page=4),
        RetrievedMatch(id="m1", score=0.5, text="Minutes of the meeting.", source="minutes.pdf", page=2),
    ]


@pytest.fixture
def catalog() -> list[DocumentRecord]:
    """Provide one completed document."""
    return [
        DocumentRecord(
            document_id="report-1",
            owner_namespace="ns",
            file_name="report.pdf",
            total_chunks=3,
            pages=5,
            status=DocumentStatus.COMPLETED,
            uploaded_at=datetime(2025, 3, 1, tzinfo=timezone.utc),
            preview="Annual report " * 20,
        )
    ]


@pytest.fixture
def assembler() -> ContextAssembler:
    return ContextAssembler()


class TestFormatMatches:
    """Test suite for retrieved text rendering."""

    def test_every_match_source_and_page_should_appear(self, matches: list[RetrievedMatch]) -> None:
        text = format_matches(matches)

        for match in matches:
            assert match.source in text
            assert f"page {match.page}" in text

    def test_matches_should_render_rank_and_relevance(self, matches: list[RetrievedMatch]) -> None:
        text = format_matches(matches)

        assert text.startswith("Document 1 (from report.pdf, page 4, relevance: 91.2%):\nRevenue grew 12%.")
        assert "\n\n---\n\nDocument 2 (from minutes.pdf, page 2, relevance: 50.0%):" in text

    def test_empty_matches_should_render_marker(self) -> None:
        assert format_matches([]) == NO_RELEVANT_DOCUMENTS
        assert NO_RELEVANT_DOCUMENTS != ""


class TestFormatCatalog:
    """Test suite for catalog rendering."""

    def test_catalog_should_list_name_counts_and_stats(self, catalog: list[DocumentRecord]) -> None:
        text = format_catalog(catalog)

        assert "**report.pdf**" in text
        assert "Chunks: 3" in text
        assert "Pages: 5" in text
        assert "Uploaded: 2025-03-01" in text
        assert "- Total Documents: 1" in text
        assert "- Total Chunks: 3" in text
        assert "- Average Chunks per Document: 3.0" in text

    def test_catalog_preview_should_be_truncated(self, catalog: list[DocumentRecord]) -> None:
        text = format_catalog(catalog)

        preview_line = next(line for line in text.splitlines() if "Preview:" in line)
        assert preview_line.endswith(catalog[0].preview[:100] + "...")

    def test_empty_catalog_should_say_no_documents(self) -> None:
        assert "No documents available at this time." in format_catalog([])


class TestFormatRetrievedSummary:
    """Test suite for the per-query source summary."""

    def test_should_list_distinct_sources_and_count(self, matches: list[RetrievedMatch]) -> None:
        text = format_retrieved_summary(matches + matches[:1])

        assert "- Sources Found: report.pdf, minutes.pdf" in text
        assert "- Chunks Retrieved: 3" in text

    def test_no_matches_should_say_so(self) -> None:
        assert "No specific documents matched this query" in format_retrieved_summary([])


class TestAssemble:
    """Test suite for ContextAssembler.assemble."""

    def test_assemble_should_fill_all_blocks(
        self,
        assembler: ContextAssembler,
        matches: list[RetrievedMatch],
        catalog: list[DocumentRecord],
    ) -> None:
        history = [
            ConversationTurn(role="user", content="Hi"),
            ConversationTurn(role="assistant", content="Hello"),
        ]

        context = assembler.assemble("What was revenue?", matches, history, catalog)

        assert context.instructions == SYSTEM_PROMPT
        assert context.query == "What was revenue?"
        assert "report.pdf" in context.retrieved_text
        assert "report.pdf" in context.catalog_text
        assert context.history_text == "User: Hi\nAssistant: Hello"
        assert context.closing_instruction == REFINE_INSTRUCTION
        assert context.is_inventory_query is False

    def test_inventory_query_should_request_full_listing(
        self, assembler: ContextAssembler, catalog: list[DocumentRecord]
    ) -> None:
        context = assembler.assemble("What documents do you have?", [], [], catalog)

        assert context.is_inventory_query is True
        assert context.closing_instruction == INVENTORY_INSTRUCTION
        assert context.retrieved_text == NO_RELEVANT_DOCUMENTS
        assert "report.pdf" in context.catalog_text

    def test_render_should_include_every_block(
        self,
        assembler: ContextAssembler,
        matches: list[RetrievedMatch],
        catalog: list[DocumentRecord],
    ) -> None:
        history = [ConversationTurn(role="user", content="Earlier question")]
        context = assembler.assemble("What was revenue?", matches, history, catalog)

        rendered = ContextAssembler.render(context)

        assert context.catalog_text in rendered
        assert context.retrieved_summary in rendered
        assert context.retrieved_text in rendered
        assert "User: Earlier question" in rendered
        assert "**User Question:**\nWhat was revenue?" in rendered
        assert rendered.rstrip().endswith(f"4. {REFINE_INSTRUCTION}")

    def test_render_should_keep_braces_in_content(self, assembler: ContextAssembler) -> None:
        match = RetrievedMatch(id="x", score=1.0, text="json {\"a\": 1}", source="a.pdf", page=1)
        context = assembler.assemble("what is {a}?", [match], [], [])

        rendered = ContextAssembler.render(context)

        assert "json {\"a\": 1}" in rendered
        assert "what is {a}?" in rendered
