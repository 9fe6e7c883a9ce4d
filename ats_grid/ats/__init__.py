"""
Applicant tracking presets for the grid core.
"""

from .candidates import (
    DEFAULT_QUICK_FILTERS,
    CandidateSource,
    CandidateStage,
    create_candidate_columns,
    create_default_bulk_actions,
    days_in_stage,
    match_score_label,
)

__all__ = [
    "DEFAULT_QUICK_FILTERS",
    "CandidateSource",
    "CandidateStage",
    "create_candidate_columns",
    "create_default_bulk_actions",
    "days_in_stage",
    "match_score_label",
]
