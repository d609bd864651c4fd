# -----------------------------------------------------------------------------
# Request Orchestrators
# One per user action: goal-seek, evaluate, formula create/update/delete.
# Each one: validate → build request → submit → route result to the renderer
# and the notification queue. ClientError is caught HERE and turned into a
# toast; it never escapes to the event loop.
# Re-entrancy: every action owns an InFlight flag; a second submit while the
# first is outstanding is refused without touching the network.
# -----------------------------------------------------------------------------

from __future__ import annotations
import inspect
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, List, Optional, Union

from .client import RemoteClient
from .errors import ClientError, FormValidationError
from .forms import ContextKind, SelectionContext, parse_number
from .logger import get_logger
from .notifications import NotificationQueue
from .render import ResultCard, evaluation_card, format_number, goal_seek_card
from .store import FormulaStore
from .types import EvaluationResult, Formula, GoalSeekRequest, GoalSeekResult

logger = get_logger(__name__)

Confirm = Callable[[str], Union[bool, Awaitable[bool]]]


class InFlight:
    """Per-action busy flag. `with guard.hold():` marks the action in flight."""

    def __init__(self, name: str):
        self.name = name
        self.busy = False

    @contextmanager
    def hold(self):
        if self.busy:
            raise RuntimeError(f"{self.name} already in flight")
        self.busy = True
        try:
            yield
        finally:
            # re-enabled whatever the outcome
            self.busy = False


# =============================================================================
# Goal seek
# =============================================================================

class GoalSeekOrchestrator:
    def __init__(self, client: RemoteClient, notifications: NotificationQueue,
                 context: SelectionContext | None = None):
        self.client = client
        self.notifications = notifications
        self.context = context or SelectionContext(ContextKind.CALCULATOR)
        self.guard = InFlight("goal-seek")
        self.result: Optional[GoalSeekResult] = None
        self.card: Optional[ResultCard] = None

    @property
    def result_visible(self) -> bool:
        return self.card is not None

    def select_formula(self, formula: Optional[Formula]) -> None:
        self.context.select(formula)
        self.hide_result()

    def select_seek_variable(self, variable: Optional[str]) -> None:
        self.context.set_seek_variable(variable)

    def hide_result(self) -> None:
        self.result = None
        self.card = None

    @property
    def can_submit(self) -> bool:
        ctx = self.context
        # target is checked for presence only; the solver validates its value
        return (ctx.formula is not None and bool(ctx.seek_variable)
                and ctx.target.strip() != "" and not self.guard.busy)

    def build_request(self) -> GoalSeekRequest:
        ctx = self.context
        if ctx.formula is None or not ctx.seek_variable:
            raise FormValidationError("Select a formula and the variable to solve for")
        return GoalSeekRequest(
            formula_name=ctx.formula.name,
            seek_variable=ctx.seek_variable,
            # a non-numeric target goes out as null and the solver rejects it
            target_value=parse_number(ctx.target),
            known_values=ctx.numeric_values(),
            lower_bound=parse_number(ctx.lower_bound),
            upper_bound=parse_number(ctx.upper_bound),
            initial_guess=parse_number(ctx.initial_guess),
        )

    async def submit(self) -> Optional[GoalSeekResult]:
        if not self.can_submit:
            logger.info("Goal seek not submitted: form incomplete or request in flight")
            return None
        request = self.build_request()
        formula = self.context.formula

        with self.guard.hold():
            try:
                result = await self.client.goal_seek(request)
            except ClientError as e:
                self.hide_result()
                self.notifications.error("Goal Seek Failed", e.message)
                return None

        # a reply for an abandoned selection still toasts but is not rendered
        ctx = self.context
        if ctx.formula is formula and ctx.seek_variable == request.seek_variable:
            self.result = result
            self.card = goal_seek_card(result)
        else:
            logger.info("Goal seek result for %s not shown: selection changed", formula.name)
        if result.success:
            self.notifications.success(
                "Goal Seek Complete",
                f"Found {request.seek_variable} = {format_number(result.computed_value)}")
        else:
            self.notifications.warning("Goal Seek Completed",
                                       result.message or "Solution may not be optimal")
        return result


# =============================================================================
# Evaluate
# =============================================================================

class EvaluationOrchestrator:
    def __init__(self, client: RemoteClient, notifications: NotificationQueue,
                 context: SelectionContext | None = None):
        self.client = client
        self.notifications = notifications
        self.context = context or SelectionContext(ContextKind.EVALUATOR)
        self.guard = InFlight("evaluate")
        self.result: Optional[EvaluationResult] = None
        self.inputs: Dict[str, float] = {}
        self.card: Optional[ResultCard] = None

    @property
    def result_visible(self) -> bool:
        return self.card is not None

    def select_formula(self, formula: Optional[Formula]) -> None:
        self.context.select(formula)
        self.hide_result()

    def hide_result(self) -> None:
        self.result = None
        self.inputs = {}
        self.card = None

    @property
    def can_submit(self) -> bool:
        return self.context.formula is not None and not self.guard.busy

    async def submit(self) -> Optional[EvaluationResult]:
        if not self.can_submit:
            logger.info("Evaluation not submitted: no formula or request in flight")
            return None
        formula = self.context.formula
        name = formula.name
        values = self.context.numeric_values()

        with self.guard.hold():
            try:
                result = await self.client.evaluate(name, values)
            except ClientError as e:
                self.hide_result()
                self.notifications.error("Evaluation Failed", e.message)
                return None

        if self.context.formula is formula:
            self.result = result
            self.inputs = values
            self.card = evaluation_card(result, values)
        else:
            logger.info("Evaluation result for %s not shown: selection changed", name)
        self.notifications.success("Evaluation Complete", f"Result: {format_number(result.result)}")
        return result


# =============================================================================
# Formula CRUD
# =============================================================================

@dataclass
class FormulaDraft:
    # Editable form fields; variables are typed as one comma-separated string.
    name: str = ""
    expression: str = ""
    description: str = ""
    output_variable: str = ""
    variables_text: str = ""
    name_locked: bool = False

    @classmethod
    def from_formula(cls, formula: Formula) -> "FormulaDraft":
        return cls(
            name=formula.name,
            expression=formula.expression,
            description=formula.description or "",
            output_variable=formula.output_variable,
            variables_text=", ".join(formula.variables),
            name_locked=True,
        )

    def variables(self) -> List[str]:
        return [v.strip() for v in self.variables_text.split(",") if v.strip()]

    def to_formula(self) -> Formula:
        variables = self.variables()
        if not variables:
            raise FormValidationError("At least one variable is required", field="variables")
        return Formula(
            name=self.name.strip(),
            expression=self.expression.strip(),
            description=self.description.strip() or None,
            output_variable=self.output_variable.strip(),
            variables=variables,
        )


class FormulaCrudOrchestrator:
    """
    idle/create ⇄ editing.
    begin_edit → draft pre-filled, name locked; cancel_edit or a successful
    submit → empty draft, name unlocked. Deleting the formula under edit does
    not leave edit mode.
    """

    def __init__(self, store: FormulaStore, notifications: NotificationQueue):
        self.store = store
        self.notifications = notifications
        self.draft = FormulaDraft()
        self.editing: Optional[Formula] = None
        self.guard = InFlight("formula-save")
        self.delete_guard = InFlight("formula-delete")

    @property
    def is_editing(self) -> bool:
        return self.editing is not None

    def begin_edit(self, name: str) -> bool:
        formula = self.store.find_by_name(name)
        if formula is None:
            logger.info("Edit requested for unknown formula %r", name)
            return False
        self.editing = formula
        self.draft = FormulaDraft.from_formula(formula)
        return True

    def cancel_edit(self) -> None:
        self.draft = FormulaDraft()
        self.editing = None

    async def submit(self) -> bool:
        if self.guard.busy:
            logger.info("Formula save already in flight")
            return False
        try:
            formula = self.draft.to_formula()
        except FormValidationError as e:
            self.notifications.error("Validation Error", e.message)
            return False

        editing = self.editing
        with self.guard.hold():
            try:
                if editing is not None:
                    # identity is the original name, whatever the draft says
                    formula = formula.model_copy(update={"name": editing.name})
                    await self.store.update(editing.name, formula)
                else:
                    await self.store.create(formula)
            except ClientError as e:
                self.notifications.error("Update Failed" if editing else "Creation Failed", e.message)
                return False

        if editing is not None:
            self.notifications.success("Formula Updated", f'"{formula.name}" has been updated.')
        else:
            self.notifications.success("Formula Created", f'"{formula.name}" has been added.')
        self.cancel_edit()
        await self.store.reload()
        return True

    async def delete(self, name: str, confirm: Confirm) -> bool:
        answer = confirm(name)
        if inspect.isawaitable(answer):
            answer = await answer
        if not answer:
            return False
        if self.delete_guard.busy:
            logger.info("Formula delete already in flight")
            return False

        with self.delete_guard.hold():
            try:
                await self.store.delete(name)
            except ClientError as e:
                self.notifications.error("Delete Failed", e.message)
                return False

        self.notifications.success("Formula Deleted", f'"{name}" has been removed.')
        await self.store.reload()
        return True

    async def refresh(self) -> bool:
        if not await self.store.reload():
            return False
        self.notifications.success("Refreshed", "Formula list updated")
        return True
