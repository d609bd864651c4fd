# -----------------------------------------------------------------------------
# Dynamic Form Builder
# Purpose: derive the variable inputs a section needs from the selected formula.
#   calculator → formula.variables minus the seek variable (declared order)
#   evaluator  → all formula.variables (declared order)
# Any change of formula (or, for the calculator, seek variable) rebuilds the
# field list from scratch; values typed for the previous layout are dropped.
# -----------------------------------------------------------------------------

from __future__ import annotations
import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from .errors import FormValidationError
from .types import Formula


class ContextKind(str, Enum):
    CALCULATOR = "calculator"
    EVALUATOR = "evaluator"


@dataclass(frozen=True)
class FieldDescriptor:
    # One numeric input rendered for a variable.
    variable: str
    label: str
    value: str = ""


def parse_number(raw) -> Optional[float]:
    """
    Lenient numeric parse for form input. Returns None for blank, unparsable
    or non-finite entries so callers can drop them instead of zero-filling.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        value = float(raw)
    else:
        text = str(raw).strip()
        if not text:
            return None
        try:
            value = float(text)
        except ValueError:
            return None
    return value if math.isfinite(value) else None


class SelectionContext:
    """
    Selection state for one section. The calculator flavour also tracks the
    seek variable, target value and the optional solver hints.
    """

    def __init__(self, kind: ContextKind | str):
        self.kind = ContextKind(kind)
        self.formula: Optional[Formula] = None
        self.seek_variable: Optional[str] = None
        self.target: str = ""
        self.lower_bound: str = ""
        self.upper_bound: str = ""
        self.initial_guess: str = ""
        self._values: Dict[str, str] = {}
        self._fields: List[str] = []

    @property
    def is_calculator(self) -> bool:
        return self.kind is ContextKind.CALCULATOR

    # ---------------- selection ----------------

    def select(self, formula: Optional[Formula]) -> None:
        """Select (or clear) the formula; everything entered so far is discarded."""
        self.formula = formula
        self.seek_variable = None
        self.target = ""
        self.lower_bound = self.upper_bound = self.initial_guess = ""
        self._rebuild()

    def set_seek_variable(self, variable: Optional[str]) -> None:
        if not self.is_calculator:
            raise FormValidationError("Only the calculator has a seek variable", field="seek_variable")
        if variable and (self.formula is None or variable not in self.formula.variables):
            raise FormValidationError(f"'{variable}' is not a variable of the selected formula",
                                      field="seek_variable")
        self.seek_variable = variable or None
        self._rebuild()

    # ---------------- values ----------------

    def set_value(self, variable: str, raw: str) -> None:
        if variable not in self._fields:
            raise FormValidationError(f"No input for variable '{variable}'", field=variable)
        self._values[variable] = "" if raw is None else str(raw)

    def set_target(self, raw: str) -> None:
        self.target = "" if raw is None else str(raw)

    def set_bounds(self, lower: str = "", upper: str = "", guess: str = "") -> None:
        self.lower_bound, self.upper_bound, self.initial_guess = lower or "", upper or "", guess or ""

    def value(self, variable: str) -> str:
        return self._values.get(variable, "")

    def fields(self) -> List[FieldDescriptor]:
        return [FieldDescriptor(v, v, self._values.get(v, "")) for v in self._fields]

    def numeric_values(self) -> Dict[str, float]:
        """Parsed values for the current fields; blank or non-numeric entries are skipped."""
        out: Dict[str, float] = {}
        for v in self._fields:
            num = parse_number(self._values.get(v))
            if num is not None:
                out[v] = num
        return out

    # ---------------- internal ----------------

    def _rebuild(self) -> None:
        self._values = {}
        if self.formula is None:
            self._fields = []
        elif self.is_calculator:
            # no known-value inputs until the unknown has been chosen
            if self.seek_variable is None:
                self._fields = []
            else:
                self._fields = [v for v in self.formula.variables if v != self.seek_variable]
        else:
            self._fields = list(self.formula.variables)
