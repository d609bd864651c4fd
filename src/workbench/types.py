# -----------------------------------------------------------------------------
# Types module: wire models shared by the client, store and orchestrators
# Purpose:
#   Typed representations of the registry/solver JSON contract. Attributes are
#   snake_case in Python and camelCase on the wire (see WireModel).
# -----------------------------------------------------------------------------

from __future__ import annotations
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(p.title() for p in rest)


class WireModel(BaseModel):
    # Accept both spellings on input; unknown server fields (id, createdAt...) are ignored.
    model_config = ConfigDict(alias_generator=_camel, populate_by_name=True, extra="ignore")

    def to_wire(self) -> Dict[str, Any]:
        """JSON-ready dict in the remote's camelCase shape, optional fields omitted."""
        return self.model_dump(by_alias=True, exclude_none=True)


class Formula(WireModel):
    """
    A named, server-interpreted expression.
    Example:
        name: "circle_area"
        expression: "pi*r^2"
        output_variable: "area"
        variables: ["r", "area"]
    `name` is the external key and never changes once created.
    """
    name: str
    expression: str
    description: Optional[str] = None
    output_variable: str
    variables: List[str] = Field(default_factory=list)


class GoalSeekRequest(WireModel):
    formula_name: str
    seek_variable: str
    # None when the entered target is not a number; sent as null regardless
    target_value: Optional[float]
    known_values: Dict[str, float] = Field(default_factory=dict)
    lower_bound: Optional[float] = None
    upper_bound: Optional[float] = None
    initial_guess: Optional[float] = None

    def to_wire(self) -> Dict[str, Any]:
        data = super().to_wire()
        data.setdefault("targetValue", None)
        return data


class GoalSeekResult(WireModel):
    """
    Solver outcome. success=False is a displayable result (did not converge),
    not a transport failure. Numeric fields may be null on failed solves.
    """
    success: bool = False
    formula_name: Optional[str] = None
    seek_variable: Optional[str] = None
    computed_value: Optional[float] = None
    target_value: Optional[float] = None
    achieved_value: Optional[float] = None
    error: Optional[float] = None
    iterations: Optional[int] = None
    algorithm: Optional[str] = None
    message: Optional[str] = None
    all_values: Optional[Dict[str, float]] = None


class EvaluationResult(WireModel):
    result: float
    formula_name: str
    input_values: Optional[Dict[str, float]] = None
