"""
Candidate table presets.

The default column set, quick filters and bulk actions for an applicant
tracking candidate table. Candidate rows are plain mappings with keys such
as ``id``, ``name``, ``stage``, ``source``, ``match_score``, ``applied_at``
and ``stage_changed_at``.
"""

import math
import time
from enum import Enum
from typing import Any, Callable, Mapping, Optional

from ats_grid.core.columns import Column
from ats_grid.core.grid import BulkAction, QuickFilterPreset
from ats_grid.core.sorting import SortEntry
from ats_grid.core.values import MS_PER_DAY, to_epoch_ms
from ats_grid.utils.constants import AggregateFunc, FieldType, FilterKind, PinSide, SortDirection


class CandidateStage(str, Enum):
    """Pipeline stages a candidate moves through."""

    NEW = "new"
    APPLIED = "applied"
    SCREENING = "screening"
    INTERVIEW = "interview"
    ASSESSMENT = "assessment"
    OFFER = "offer"
    HIRED = "hired"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @property
    def is_closed(self) -> bool:
        return self in (CandidateStage.HIRED, CandidateStage.REJECTED, CandidateStage.WITHDRAWN)


class CandidateSource(str, Enum):
    """Where a candidate came from."""

    GREEN_JOBS_BOARD = "green_jobs_board"
    LINKEDIN = "linkedin"
    INDEED = "indeed"
    REFERRAL = "referral"
    WEBSITE = "website"
    OTHER = "other"

    @property
    def label(self) -> str:
        return SOURCE_LABELS[self]


SOURCE_LABELS: dict[CandidateSource, str] = {
    CandidateSource.GREEN_JOBS_BOARD: "Green Jobs Board",
    CandidateSource.LINKEDIN: "LinkedIn",
    CandidateSource.INDEED: "Indeed",
    CandidateSource.REFERRAL: "Referral",
    CandidateSource.WEBSITE: "Website",
    CandidateSource.OTHER: "Other",
}

# Match score thresholds (0-100)
HIGH_MATCH_THRESHOLD = 80
MEDIUM_MATCH_THRESHOLD = 50


def match_score_label(score: Optional[float]) -> str:
    """High, Medium or Low match; empty when there is no score."""
    if score is None:
        return ""
    if score >= HIGH_MATCH_THRESHOLD:
        return "High"
    if score >= MEDIUM_MATCH_THRESHOLD:
        return "Medium"
    return "Low"


def days_in_stage(candidate: Mapping[str, Any], now: Any = None) -> Optional[int]:
    """
    Whole days since the candidate entered the current stage.

    Falls back to the application date when the stage change date is
    missing. Partial days round up.
    """
    since = to_epoch_ms(candidate.get("stage_changed_at") or candidate.get("applied_at"))
    if since is None:
        return None
    current = to_epoch_ms(now) if now is not None else time.time() * 1000
    if current is None:
        return None
    return math.ceil(abs(current - since) / MS_PER_DAY)


def _skills(candidate: Mapping[str, Any]) -> str:
    return ", ".join([*(candidate.get("green_skills") or []), *(candidate.get("skills") or [])])


def _reviewers(candidate: Mapping[str, Any]) -> str:
    return ", ".join(r["name"] for r in candidate.get("reviewers") or [])


def create_candidate_columns() -> list[Column]:
    """The default candidate table columns."""
    return [
        Column(
            id="name",
            label="Candidate",
            width=250,
            min_width=250,
            pinned=PinSide.START,
        ),
        Column(
            id="stage",
            label="Stage",
            width=130,
            min_width=130,
            field_type=FieldType.SELECT,
            filter_options=tuple(stage.value for stage in CandidateStage),
        ),
        Column(
            id="match_score",
            label="Match",
            width=90,
            min_width=90,
            field_type=FieldType.NUMBER,
            filterable=False,
            aggregate=AggregateFunc.AVG,
        ),
        Column(id="location", label="Location", min_width=150),
        Column(
            id="source",
            label="Source",
            width=130,
            min_width=130,
            field_type=FieldType.SELECT,
            filter_options=tuple(source.value for source in CandidateSource),
        ),
        Column(
            id="skills",
            label="Skills",
            accessor=_skills,
            width=200,
            min_width=200,
            sortable=False,
            hidden=True,
        ),
        Column(
            id="reviewers",
            label="Reviewers",
            accessor=_reviewers,
            width=120,
            min_width=120,
            sortable=False,
            filterable=False,
        ),
        Column(
            id="days_in_stage",
            label="Days",
            accessor=days_in_stage,
            width=70,
            min_width=70,
            field_type=FieldType.NUMBER,
            filterable=False,
        ),
        Column(
            id="next_action",
            label="Next Action",
            width=180,
            min_width=180,
            sortable=False,
            filterable=False,
        ),
        Column(
            id="applied_at",
            label="Applied",
            width=100,
            min_width=100,
            field_type=FieldType.DATE,
            filter_kind=FilterKind.DATE_RANGE,
            filterable=False,
        ),
    ]


DEFAULT_QUICK_FILTERS: tuple[QuickFilterPreset, ...] = (
    QuickFilterPreset(
        id="high-match",
        label="High Match",
        filters={"match_score": {"min": HIGH_MATCH_THRESHOLD}},
        sort=(SortEntry("match_score", SortDirection.DESC),),
    ),
    QuickFilterPreset(id="needs-review", label="Needs Review", filters={"stage": CandidateStage.SCREENING.value}),
    QuickFilterPreset(id="in-interview", label="In Interview", filters={"stage": CandidateStage.INTERVIEW.value}),
    QuickFilterPreset(id="offer-stage", label="Offer Stage", filters={"stage": CandidateStage.OFFER.value}),
)


# (id, label, shown in toolbar, destructive, shortcut)
_BULK_ACTIONS: tuple[tuple[str, str, bool, bool, Optional[str]], ...] = (
    ("move-stage", "Move to Stage", True, False, None),
    ("send-email", "Send Email", True, False, "⌘E"),
    ("schedule", "Schedule Interview", True, False, None),
    ("add-tags", "Add Tags", False, False, None),
    ("export", "Export", False, False, None),
    ("archive", "Archive", False, False, None),
    ("reject", "Reject", False, True, "⌘⇧R"),
)


def create_default_bulk_actions(handler: Callable[[str, list[Any]], Any]) -> list[BulkAction]:
    """
    The default candidate bulk actions.

    Args:
        handler: Called as ``handler(action_id, rows)`` for every action

    Returns:
        BulkAction list in toolbar order
    """

    def bind(action_id: str) -> Callable[[list[Any]], Any]:
        return lambda rows: handler(action_id, rows)

    return [
        BulkAction(
            id=action_id,
            label=label,
            handler=bind(action_id),
            destructive=destructive,
            show_in_toolbar=in_toolbar,
            shortcut=shortcut,
        )
        for action_id, label, in_toolbar, destructive, shortcut in _BULK_ACTIONS
    ]
