import os

import pytest

from workbench import Formula
from workbench.catalog import from_yaml_dict, from_yaml_text, load_catalog, seed
from workbench.errors import CatalogError

CATALOG = os.path.join(os.path.dirname(__file__), "..", "examples", "formulas.yaml")


def test_bundled_catalog_loads():
    formulas = load_catalog(CATALOG)
    assert len(formulas) == 9
    si = next(f for f in formulas if f.name == "SIMPLE_INTEREST")
    assert si.output_variable == "SI"
    assert all(f.variables for f in formulas)


def test_snake_case_keys_accepted():
    [f] = from_yaml_dict({"formulas": [
        {"name": "ROI", "expression": "gain / cost * 100", "output_variable": "roi",
         "variables": ["gain", "cost", "roi"]},
    ]})
    assert f.output_variable == "roi"
    assert f.description is None


def test_empty_document_is_empty_catalog():
    assert from_yaml_text("") == []


@pytest.mark.parametrize("text", [
    "formulas: [{name: x}]",
    "formulas: [{name: x, expression: '1', outputVariable: y, variables: []}]",
    "formulas:\n  - {name: a, expression: '1', outputVariable: y, variables: [y]}\n"
    "  - {name: a, expression: '2', outputVariable: y, variables: [y]}\n",
    "formulas: {name: a}",
    "- just\n- a list\n",
    "formulas: [unterminated",
])
def test_invalid_catalogs_rejected(text):
    with pytest.raises(CatalogError):
        from_yaml_text(text)


@pytest.mark.asyncio
async def test_seed_skips_rejected_formulas(client, service):
    formulas = [
        Formula(name="circle_area", expression="pi*r^2", output_variable="area", variables=["r", "area"]),
        Formula(name="double", expression="2*x", output_variable="y", variables=["x", "y"]),
    ]
    created = await seed(client, formulas)
    assert created == ["double"]
    assert len(service.calls("POST", "/api/formulas")) == 2
    assert "double" in service.formulas
