"""
Saved view manager for the grid core.

Captures the current filter, sort and column configuration as a named
SavedView, and applies a view back onto a column model. Applying never
aliases the stored document: it produces fresh filter, sort and layout
state. References to columns that no longer exist are dropped with a
warning, so schema drift never breaks a stored view.
"""

import copy
import math
from dataclasses import dataclass, field, replace
from typing import Any, Optional, Sequence

from ats_grid.core.columns import Column, ColumnModel, as_column_model
from ats_grid.core.exceptions import ViewNotFoundError
from ats_grid.core.filtering import FilterState
from ats_grid.core.layout import LayoutState
from ats_grid.core.sorting import SortEntry, SortState
from ats_grid.core.state import GridState
from ats_grid.data.models import SavedView, SortEntryModel
from ats_grid.data.repositories import ViewRepository, get_view_repository
from ats_grid.utils.constants import AuditType, PinSide, SortDirection
from ats_grid.utils.logger import audit_log, get_logger

logger = get_logger(__name__)


@dataclass
class ViewApplyResult:
    """Outcome of applying a saved view to the current column model."""

    state: GridState
    view_id: str = ""
    dropped_columns: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)


class SavedViewManager:
    """
    Captures, applies and persists saved views.

    Persistence goes through a ViewRepository; ``capture`` and ``apply``
    themselves are pure and can be used without storing anything.
    """

    def __init__(self, repository: Optional[ViewRepository] = None):
        """
        Initialize the manager.

        Args:
            repository: Persistence collaborator; defaults to the configured one
        """
        self.repository = repository if repository is not None else get_view_repository()

    # -------------------------------------------------------------------------
    # Capture / apply
    # -------------------------------------------------------------------------

    def capture(
        self,
        state: GridState,
        name: str,
        view_id: Optional[str] = None,
        is_default: bool = False,
    ) -> SavedView:
        """
        Snapshot the current configuration as a SavedView.

        Args:
            state: Current grid state
            name: Display name for the view
            view_id: Reuse an existing id (update); a new one is generated otherwise
            is_default: Whether the view is applied on startup

        Returns:
            A new, unsaved SavedView
        """
        layout = state.layout
        data: dict[str, Any] = {
            "name": name,
            "filter_state": copy.deepcopy(dict(state.filters.column_filters)),
            "quick_filter": state.filters.quick_filter,
            "quick_filter_preset_id": state.quick_filter_preset_id,
            "sort_state": [
                SortEntryModel(column_id=e.column_id, direction=e.direction) for e in state.sort.entries
            ],
            "column_order": list(layout.order),
            "column_widths": {k: float(v) for k, v in layout.widths.items()},
            "hidden_columns": [c for c in layout.order if c in layout.hidden],
            "pinned_columns": dict(layout.pinned),
            "is_default": is_default,
        }
        if view_id is not None:
            data["id"] = view_id
        return SavedView(**data)

    def apply(
        self,
        view: SavedView,
        columns: ColumnModel | Sequence[Column],
        state: Optional[GridState] = None,
    ) -> ViewApplyResult:
        """
        Produce grid state from a saved view.

        Filter, sort and layout are fully replaced. Selection is carried
        over from ``state`` when given.

        Args:
            view: The view to apply
            columns: Current column model
            state: Current grid state

        Returns:
            ViewApplyResult with the new state and any dropped references
        """
        model = as_column_model(columns)
        dropped: list[str] = []

        def known(column_id: str) -> bool:
            if column_id in model:
                return True
            if column_id not in dropped:
                dropped.append(column_id)
            return False

        column_filters = {
            column_id: copy.deepcopy(value)
            for column_id, value in view.filter_state.items()
            if known(column_id)
        }
        filters = FilterState(column_filters=column_filters, quick_filter=view.quick_filter or "")

        sort = SortState(tuple(
            SortEntry(entry.column_id, SortDirection(entry.direction))
            for entry in view.sort_state
            if known(entry.column_id)
        ))

        layout = self._layout_from_view(view, model, known)

        warnings = []
        if dropped:
            message = f"Saved view {view.name!r} refers to unknown columns: {', '.join(dropped)}"
            logger.warning(message)
            warnings.append(message)

        base = state if state is not None else GridState.initial(model)
        new_state = replace(
            base,
            filters=filters,
            sort=sort,
            layout=layout,
            quick_filter_preset_id=view.quick_filter_preset_id,
            active_view_id=view.id,
        )
        return ViewApplyResult(state=new_state, view_id=view.id, dropped_columns=dropped, warnings=warnings)

    @staticmethod
    def _layout_from_view(view: SavedView, model: ColumnModel, known) -> LayoutState:
        defaults = LayoutState.from_columns(model)

        order = []
        for column_id in view.column_order:
            if known(column_id) and column_id not in order:
                order.append(column_id)
        added: list[str] = []
        if order:
            # Columns added since the view was saved go to the end
            added = [c for c in model.ids if c not in order]
            order.extend(added)
        else:
            order = list(defaults.order)

        widths = dict(defaults.widths)
        for column_id, width in view.column_widths.items():
            if not known(column_id):
                continue
            try:
                width = float(width)
            except (TypeError, ValueError):
                continue
            if math.isfinite(width):
                widths[column_id] = max(model[column_id].min_width, width)

        hidden = frozenset(c for c in view.hidden_columns if known(c))
        pinned = {c: PinSide(side) for c, side in view.pinned_columns.items() if known(c)}

        # Added columns keep the visibility and pinning they declare
        hidden = hidden | {c for c in added if c in defaults.hidden}
        for column_id in added:
            if column_id in defaults.pinned and column_id not in pinned:
                pinned[column_id] = defaults.pinned[column_id]

        return LayoutState(order=tuple(order), widths=widths, hidden=hidden, pinned=pinned)

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def create(self, name: str, state: GridState, is_default: bool = False) -> SavedView:
        """Capture and store a new view."""
        view = self.capture(state, name, is_default=is_default)
        if is_default:
            self._clear_defaults()
        self.repository.save_view(view)
        audit_log("view_created", {"view_id": view.id, "name": view.name}, AuditType.VIEW.value)
        logger.info(f"Saved view {view.name!r} ({view.id})")
        return view

    def update(self, view_id: str, state: GridState) -> SavedView:
        """Overwrite a stored view's configuration, keeping its name."""
        existing = self.get(view_id)
        view = self.capture(state, existing.name, view_id=view_id, is_default=existing.is_default)
        view = view.model_copy(update={"created_at": existing.created_at})
        view.touch()
        self.repository.save_view(view)
        audit_log("view_updated", {"view_id": view_id, "name": view.name}, AuditType.VIEW.value)
        return view

    def rename(self, view_id: str, new_name: str) -> SavedView:
        """Rename a stored view."""
        existing = self.get(view_id)
        data = existing.model_dump(by_alias=True)
        data["name"] = new_name
        view = SavedView.model_validate(data)
        view.touch()
        self.repository.save_view(view)
        audit_log(
            "view_renamed",
            {"view_id": view_id, "old_name": existing.name, "new_name": view.name},
            AuditType.VIEW.value,
        )
        return view

    def delete(self, view_id: str) -> None:
        """Delete a stored view."""
        if not self.repository.delete_view(view_id):
            raise ViewNotFoundError(view_id)
        audit_log("view_deleted", {"view_id": view_id}, AuditType.VIEW.value)
        logger.info(f"Deleted saved view {view_id}")

    def load(self) -> list[SavedView]:
        """All stored views, oldest first."""
        return self.repository.load_views()

    list_views = load

    def get(self, view_id: str) -> SavedView:
        """Get one view; raises ViewNotFoundError if it does not exist."""
        view = self.repository.get_view(view_id)
        if view is None:
            raise ViewNotFoundError(view_id)
        return view

    def find_by_name(self, name: str) -> Optional[SavedView]:
        """First view with this name, case-insensitively."""
        wanted = name.strip().casefold()
        for view in self.load():
            if view.name.casefold() == wanted:
                return view
        return None

    def set_default(self, view_id: Optional[str]) -> Optional[SavedView]:
        """Mark one view as default (or clear the default with None)."""
        target = self.get(view_id) if view_id is not None else None
        self._clear_defaults(keep=view_id)
        if target is None:
            return None
        if not target.is_default:
            target = target.model_copy(update={"is_default": True})
            target.touch()
            self.repository.save_view(target)
        return target

    def default_view(self) -> Optional[SavedView]:
        for view in self.load():
            if view.is_default:
                return view
        return None

    def _clear_defaults(self, keep: Optional[str] = None) -> None:
        for view in self.load():
            if view.is_default and view.id != keep:
                cleared = view.model_copy(update={"is_default": False})
                cleared.touch()
                self.repository.save_view(cleared)
