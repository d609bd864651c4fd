# -----------------------------------------------------------------------------
# Workbench: composition root
# Owns every component and exposes the user events as explicit methods taking
# a formula name (no globally exposed handlers).
#
#   user event ─► Workbench ─► orchestrator ─► RemoteClient
#                                   │
#                                   ├─► NotificationQueue
#                                   └─► render (ResultCard)
#   FormulaStore: shared source of truth, rewritten only by reload()
# -----------------------------------------------------------------------------

from __future__ import annotations
from typing import Optional, Tuple

from .client import RemoteClient
from .forms import ContextKind, SelectionContext
from .logger import get_logger
from .navigation import Navigator
from .notifications import NotificationQueue
from .orchestrators import (
    Confirm,
    EvaluationOrchestrator,
    FormulaCrudOrchestrator,
    GoalSeekOrchestrator,
)
from .store import FormulaStore
from .types import Formula

logger = get_logger(__name__)


class Workbench:
    def __init__(self, client: RemoteClient | None = None,
                 notifications: NotificationQueue | None = None):
        self.client = client or RemoteClient()
        self.notifications = notifications or NotificationQueue()
        self.store = FormulaStore(self.client, self.notifications)
        self.navigation = Navigator()

        self.goal_seek = GoalSeekOrchestrator(
            self.client, self.notifications, SelectionContext(ContextKind.CALCULATOR))
        self.evaluation = EvaluationOrchestrator(
            self.client, self.notifications, SelectionContext(ContextKind.EVALUATOR))
        self.formulas = FormulaCrudOrchestrator(self.store, self.notifications)

        self.store.subscribe(self._on_reload)

    @property
    def calculator(self) -> SelectionContext:
        return self.goal_seek.context

    @property
    def evaluator(self) -> SelectionContext:
        return self.evaluation.context

    # ---------------- lifecycle ----------------

    async def start(self) -> bool:
        return await self.store.reload()

    async def aclose(self) -> None:
        await self.client.aclose()

    # ---------------- selection events ----------------

    def select_formula(self, context: ContextKind | str, name: Optional[str]) -> Optional[Formula]:
        """Select by name in one context; an empty or unknown name clears it."""
        formula = self.store.find_by_name(name)
        if ContextKind(context) is ContextKind.CALCULATOR:
            self.goal_seek.select_formula(formula)
        else:
            self.evaluation.select_formula(formula)
        return formula

    def select_seek_variable(self, variable: Optional[str]) -> None:
        self.goal_seek.select_seek_variable(variable)

    # ---------------- formula list events ----------------

    def edit_formula(self, name: str) -> bool:
        return self.formulas.begin_edit(name)

    def cancel_edit(self) -> None:
        self.formulas.cancel_edit()

    async def delete_formula(self, name: str, confirm: Confirm) -> bool:
        return await self.formulas.delete(name, confirm)

    # ---------------- submit events ----------------

    async def calculate(self):
        return await self.goal_seek.submit()

    async def evaluate(self):
        return await self.evaluation.submit()

    async def save_formula(self) -> bool:
        return await self.formulas.submit()

    async def refresh(self) -> bool:
        return await self.formulas.refresh()

    # ---------------- reload reconciliation ----------------

    def _on_reload(self, formulas: Tuple[Formula, ...]) -> None:
        # Edit state is left alone: a deleted formula stays in the draft.
        for orchestrator in (self.goal_seek, self.evaluation):
            current = orchestrator.context.formula
            if current is None:
                continue
            fresh = self.store.find_by_name(current.name)
            if fresh is None:
                logger.info("Selected formula %r no longer exists; clearing %s",
                            current.name, orchestrator.context.kind.value)
                orchestrator.select_formula(None)
            elif fresh != current:
                orchestrator.select_formula(fresh)
