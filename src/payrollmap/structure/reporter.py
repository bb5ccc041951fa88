"""Summarize a reconciliation pass."""

from .models import MatchCounts, ReconciliationSummary


def build_summary(
    counts: MatchCounts, processed_sheet: str, output_file_label: str
) -> ReconciliationSummary:
    """Aggregate match counts into the summary returned to the caller."""
    return ReconciliationSummary(
        total_columns=counts.total_columns,
        matched_columns=counts.matched_columns,
        fallback_matches=counts.fallback_matches,
        new_columns=counts.new_columns,
        processed_sheet=processed_sheet,
        success=True,
        output_file_name=output_file_label,
    )
