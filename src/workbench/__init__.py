# -----------------------------------------------------------------------------
# Formula Workbench
# Client-side state and request lifecycle for a remote formula registry and
# numeric solver (evaluate + goal-seek).
# -----------------------------------------------------------------------------

from .app import Workbench
from .client import RemoteClient
from .errors import CatalogError, ClientError, FormValidationError, WorkbenchError
from .types import EvaluationResult, Formula, GoalSeekRequest, GoalSeekResult

__all__ = [
    "Workbench",
    "RemoteClient",
    "WorkbenchError",
    "ClientError",
    "FormValidationError",
    "CatalogError",
    "Formula",
    "GoalSeekRequest",
    "GoalSeekResult",
    "EvaluationResult",
]
