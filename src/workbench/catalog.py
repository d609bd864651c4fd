# -----------------------------------------------------------------------------
# Seed catalog loader & importer
# Purpose: read formula definitions from a YAML file and push them to the
# remote registry (used by dev_up.py --seed to populate an empty service).
# Expected YAML shape:
#   formulas:
#     - name: SIMPLE_INTEREST
#       expression: "P * R * T / 100"
#       description: "..."            # optional
#       outputVariable: SI             # or output_variable
#       variables: [P, R, T]
# -----------------------------------------------------------------------------

from __future__ import annotations
from typing import Any, Dict, List

import yaml
from pydantic import ValidationError

from .client import RemoteClient
from .errors import CatalogError, ClientError
from .logger import get_logger
from .types import Formula

logger = get_logger(__name__)


def from_yaml_dict(d: Dict[str, Any] | None) -> List[Formula]:
    """
    Build Formula objects from a pre-parsed YAML mapping.
    Entries must carry at least one variable and unique names.
    """
    entries = (d or {}).get("formulas") or []
    if not isinstance(entries, list):
        raise CatalogError("'formulas' must be a list")

    out: List[Formula] = []
    seen = set()
    for i, entry in enumerate(entries):
        label = entry.get("name", f"#{i}") if isinstance(entry, dict) else f"#{i}"
        try:
            formula = Formula.model_validate(entry)
        except ValidationError as e:
            raise CatalogError(f"Invalid formula {label}: {e.error_count()} invalid field(s)") from e
        if not formula.variables:
            raise CatalogError(f"Invalid formula {label}: at least one variable is required")
        if formula.name in seen:
            raise CatalogError(f"Duplicate formula name: {formula.name}")
        seen.add(formula.name)
        out.append(formula)
    return out


def from_yaml_text(text: str) -> List[Formula]:
    # safe_load only: no arbitrary object constructors
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise CatalogError(f"YAML parse failed: {e}") from e
    if data is not None and not isinstance(data, dict):
        raise CatalogError("Catalog root must be a mapping")
    return from_yaml_dict(data)


def load_catalog(path: str) -> List[Formula]:
    with open(path, "r", encoding="utf-8") as f:
        return from_yaml_text(f.read())


async def seed(client: RemoteClient, formulas: List[Formula]) -> List[str]:
    """Create each formula; one that the registry rejects (e.g. duplicate) is skipped."""
    created: List[str] = []
    logger.info("Seeding %d formulas...", len(formulas))
    for formula in formulas:
        try:
            await client.create_formula(formula)
        except ClientError as e:
            logger.warning("Could not create formula %s: %s", formula.name, e.message)
            continue
        logger.info("Created formula: %s", formula.name)
        created.append(formula.name)
    return created
