# -----------------------------------------------------------------------------
# Result Renderer
# Purpose: turn solver results into display strings / cards. No business logic.
# -----------------------------------------------------------------------------

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .types import EvaluationResult, GoalSeekResult

DASH = "—"


def _exp(x: float, digits: int) -> str:
    # 1.2346e+06 → 1.2346e+6
    mantissa, exponent = f"{x:.{digits}e}".split("e")
    return f"{mantissa}e{int(exponent):+d}"


def format_number(x: Optional[float]) -> str:
    """
    Large (>= 1e6) and tiny non-zero (< 0.001) magnitudes go exponential with
    4 digits; everything else is grouped with at most 6 fraction digits.
    """
    if x is None:
        return DASH
    if abs(x) >= 1e6 or (x != 0 and abs(x) < 0.001):
        return _exp(x, 4)
    text = f"{x:,.6f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


def format_scientific(x: Optional[float]) -> str:
    if x is None:
        return DASH
    return _exp(x, 2)


def value_chips(values: Optional[Dict[str, float]]) -> List[str]:
    return [f"{k} = {format_number(v)}" for k, v in (values or {}).items()]


@dataclass
class ResultCard:
    title: str
    headline: str
    headline_label: str = ""
    rows: List[Tuple[str, str]] = field(default_factory=list)
    chips_title: str = ""
    chips: List[str] = field(default_factory=list)
    success: bool = True


def goal_seek_card(result: GoalSeekResult) -> ResultCard:
    status = "✓ Success" if result.success else "✕ Failed"
    rows = [
        ("Variable", result.seek_variable or DASH),
        ("Target", format_number(result.target_value)),
        ("Achieved", format_number(result.achieved_value)),
        ("Error", format_scientific(result.error)),
        ("Iterations", DASH if result.iterations is None else str(result.iterations)),
        ("Algorithm", result.algorithm or DASH),
        ("Status", status),
    ]
    if result.message:
        rows.append(("Message", result.message))
    return ResultCard(
        title="Goal Seek Result",
        headline=format_number(result.computed_value),
        headline_label=result.seek_variable or "",
        rows=rows,
        chips_title="All Variable Values" if result.all_values else "",
        chips=value_chips(result.all_values),
        success=result.success,
    )


def evaluation_card(result: EvaluationResult, inputs: Dict[str, float]) -> ResultCard:
    return ResultCard(
        title="Evaluation Result",
        headline=format_number(result.result),
        headline_label="Result",
        rows=[("Formula", result.formula_name)],
        chips_title="Input Values",
        chips=value_chips(inputs),
    )
