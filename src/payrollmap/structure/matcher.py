"""Match uploaded headers against the canonical structure."""

import logging
from typing import Any, Optional

from .loader import header_text
from .models import (
    MAIN_HEADER_SOURCE,
    ColumnMeta,
    HeaderMatch,
    MatchCounts,
    MatchResult,
    StructureColumn,
    fallback_source,
)

logger = logging.getLogger(__name__)


def uploaded_header_texts(header_row: list[Any]) -> list[str]:
    """Render an uploaded header row as the header strings used for matching."""
    return [header_text(value, index) for index, value in enumerate(header_row)]


class ColumnMatcher:
    """
    Resolves uploaded headers to canonical main headers.

    Each uploaded header is tried, in strict priority:

    1. exact main-header match (case-sensitive, untrimmed)
    2. alias match (case-sensitive, both sides trimmed), scanning columns in
       structure order and aliases in list order
    3. registration as a new column named after the uploaded header

    The first hit wins. New columns are appended to a copy of the structure,
    so later headers in the same pass can match them; the caller's structure
    is never modified.
    """

    def match(
        self, structure: list[StructureColumn], uploaded_headers: list[str]
    ) -> MatchResult:
        """
        Match uploaded headers against a structure.

        Args:
            structure: Canonical structure (left untouched)
            uploaded_headers: Header strings in upload (left-to-right) order

        Returns:
            MatchResult with the mapping, the updated structure, per-column
            meta and counts
        """
        updated = [column.model_copy(deep=True) for column in structure]
        mapping: dict[str, str] = {}
        matches: list[HeaderMatch] = []
        counts = MatchCounts(total_columns=len(uploaded_headers))

        for index, uploaded in enumerate(uploaded_headers):
            match = self._match_main_header(updated, uploaded, index)
            if match is None:
                match = self._match_alias(updated, uploaded, index)

            if match is not None:
                counts.matched_columns += 1
                if match.is_fallback:
                    counts.fallback_matches += 1
            else:
                match = HeaderMatch(
                    uploaded_header=uploaded,
                    column_index=index,
                    main_header=uploaded,
                    is_new_column=True,
                )
                updated.append(StructureColumn(main_header=uploaded, aliases=[]))
                counts.new_columns += 1
                logger.debug(f"Registered new column '{uploaded}'")

            mapping[uploaded] = match.main_header
            matches.append(match)

        logger.info(
            f"Matched {counts.matched_columns}/{counts.total_columns} columns "
            f"({counts.fallback_matches} via aliases, {counts.new_columns} new)"
        )

        return MatchResult(
            mapping=mapping,
            structure=updated,
            meta=self._column_meta(updated, matches),
            matches=matches,
            counts=counts,
        )

    def _match_main_header(
        self, structure: list[StructureColumn], uploaded: str, index: int
    ) -> Optional[HeaderMatch]:
        for column in structure:
            if column.main_header == uploaded:
                return HeaderMatch(
                    uploaded_header=uploaded,
                    column_index=index,
                    main_header=column.main_header,
                    match_source=MAIN_HEADER_SOURCE,
                )
        return None

    def _match_alias(
        self, structure: list[StructureColumn], uploaded: str, index: int
    ) -> Optional[HeaderMatch]:
        target = uploaded.strip()
        for column in structure:
            for alias_index, alias in enumerate(column.aliases):
                if alias and alias.strip() == target:
                    return HeaderMatch(
                        uploaded_header=uploaded,
                        column_index=index,
                        main_header=column.main_header,
                        match_source=fallback_source(alias_index),
                        is_fallback=True,
                    )
        return None

    def _column_meta(
        self, structure: list[StructureColumn], matches: list[HeaderMatch]
    ) -> list[ColumnMeta]:
        """Derive match info per column from the first upload that landed on it."""
        first_match: dict[str, HeaderMatch] = {}
        for match in matches:
            first_match.setdefault(match.main_header, match)

        meta = []
        for column in structure:
            match = first_match.get(column.main_header)
            if match is None:
                meta.append(ColumnMeta())
                continue
            meta.append(
                ColumnMeta(
                    match_found=True,
                    is_fallback=match.is_fallback,
                    match_source=match.match_source,
                    is_new_column=match.is_new_column,
                )
            )
        return meta
