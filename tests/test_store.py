import asyncio

import pytest

from workbench import ClientError, Formula
from workbench.notifications import NotificationQueue
from workbench.store import FormulaStore


class ScriptedClient:
    """list_formulas() answers come from futures the test resolves in any order."""

    def __init__(self):
        self.pending = []

    async def list_formulas(self):
        fut = asyncio.get_running_loop().create_future()
        self.pending.append(fut)
        return await fut


def _formula(name):
    return Formula(name=name, expression="x", output_variable="y", variables=["x", "y"])


@pytest.mark.asyncio
async def test_reload_replaces_cache_wholesale(client, service, notifications):
    store = FormulaStore(client, notifications)
    assert await store.reload() is True
    assert store.names() == ["circle_area", "SIMPLE_INTEREST"]

    del service.formulas["circle_area"]
    await store.reload()
    assert store.names() == ["SIMPLE_INTEREST"]


@pytest.mark.asyncio
async def test_failed_reload_keeps_previous_cache(client, service, notifications):
    store = FormulaStore(client, notifications)
    await store.reload()
    service.fail("GET /api/formulas", 500, {"message": "db down"})

    assert await store.reload() is False
    assert store.names() == ["circle_area", "SIMPLE_INTEREST"]
    [toast] = notifications.active()
    assert (toast.kind.value, toast.title, toast.message) == ("error", "Failed to Load Formulas", "db down")


@pytest.mark.asyncio
async def test_find_by_name_absent_is_none(client, notifications):
    store = FormulaStore(client, notifications)
    await store.reload()
    assert store.find_by_name("circle_area").expression == "pi*r^2"
    assert store.find_by_name("nope") is None
    assert store.find_by_name("") is None


@pytest.mark.asyncio
async def test_mutations_do_not_touch_cache(client, service, notifications):
    store = FormulaStore(client, notifications)
    await store.reload()

    await store.create(_formula("double"))
    await store.delete("circle_area")
    assert store.names() == ["circle_area", "SIMPLE_INTEREST"]

    await store.reload()
    assert store.names() == ["SIMPLE_INTEREST", "double"]


@pytest.mark.asyncio
async def test_fetch_single_formula(client, notifications):
    store = FormulaStore(client, notifications)
    assert (await store.fetch("circle_area")).output_variable == "area"
    with pytest.raises(ClientError):
        await store.fetch("missing")


@pytest.mark.asyncio
async def test_older_reload_cannot_overwrite_newer():
    client = ScriptedClient()
    store = FormulaStore(client, NotificationQueue(dwell=60))
    seen = []
    store.subscribe(lambda formulas: seen.append([f.name for f in formulas]))

    older = asyncio.ensure_future(store.reload())
    newer = asyncio.ensure_future(store.reload())
    await asyncio.sleep(0)
    first_call, second_call = client.pending

    second_call.set_result([_formula("new")])
    await newer
    first_call.set_result([_formula("old")])
    await older

    assert store.names() == ["new"]
    assert seen == [["new"]]


@pytest.mark.asyncio
async def test_reloads_resolving_in_order_apply_both():
    client = ScriptedClient()
    store = FormulaStore(client, NotificationQueue(dwell=60))

    first = asyncio.ensure_future(store.reload())
    second = asyncio.ensure_future(store.reload())
    await asyncio.sleep(0)
    client.pending[0].set_result([_formula("a")])
    await first
    assert store.names() == ["a"]
    client.pending[1].set_result([_formula("b")])
    await second
    assert store.names() == ["b"]
