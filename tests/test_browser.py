# tests/test_browser.py
from __future__ import annotations

import anyio
import pytest

from catalog_admin.browser import DELETE_CONFIRM_MESSAGE, DELETE_FAILED_MESSAGE, BrowserState, CatalogBrowser
from catalog_admin.prompts import never_confirm

pytestmark = pytest.mark.anyio


async def test_load_all_orders_newest_first(fake_store, catalog):
    browser = CatalogBrowser(fake_store)
    assert browser.state() is BrowserState.LOADING

    assert await browser.load_all() is True
    assert [p.name for p in browser.products] == ["Widget Pro", "Speaker", "Cable"]
    assert browser.loading is False


async def test_load_failure_keeps_previous_state(fake_store):
    browser = CatalogBrowser(fake_store)
    await browser.load_all()
    before = list(browser.products)

    fake_store.fail_on.add("select_all")
    assert await browser.load_all() is False
    assert browser.products == before
    assert browser.last_error is not None
    # un singur apel per încercare, fără retry
    assert fake_store.ops().count("select_all") == 2


async def test_first_load_failure_leaves_empty_not_loading(fake_store):
    fake_store.fail_on.add("select_all")
    browser = CatalogBrowser(fake_store)
    await browser.load_all()
    assert browser.loading is False
    assert browser.state() is BrowserState.EMPTY


@pytest.mark.parametrize(
    "query, expected",
    [
        ("widget", ["Widget Pro"]),
        ("WIDGET", ["Widget Pro"]),
        ("audio", ["Speaker"]),      # potrivire pe categorie
        ("ACCESS", ["Cable"]),
        ("e", ["Widget Pro", "Speaker", "Cable"]),
        ("zzz", []),
    ],
)
async def test_filter_is_case_insensitive_on_name_and_category(fake_store, query, expected):
    browser = CatalogBrowser(fake_store)
    await browser.load_all()
    assert [p.name for p in browser.filter(query)] == expected


async def test_filter_matches_definition_for_every_product(fake_store):
    browser = CatalogBrowser(fake_store)
    await browser.load_all()
    for q in ("o", "Pro", "ca", "TOOLS", "x"):
        got = {p.id for p in browser.filter(q)}
        want = {
            p.id for p in browser.products
            if q.lower() in p.name.lower() or q.lower() in p.category.lower()
        }
        assert got == want, q


async def test_empty_query_returns_everything_in_order(fake_store):
    browser = CatalogBrowser(fake_store)
    await browser.load_all()
    assert browser.filter("") == browser.products
    # copie, nu aceeași listă
    assert browser.filter("") is not browser.products


async def test_filter_does_not_hit_the_store(fake_store):
    browser = CatalogBrowser(fake_store)
    await browser.load_all()
    calls = len(fake_store.calls)
    browser.filter("speaker")
    browser.filter("")
    assert len(fake_store.calls) == calls


async def test_delete_removes_locally_without_reload(fake_store, catalog):
    browser = CatalogBrowser(fake_store)
    await browser.load_all()
    target = catalog[1]

    assert await browser.delete(target.id) is True
    assert target.id not in {p.id for p in browser.filter("")}
    assert fake_store.ops() == ["select_all", "delete"]


async def test_delete_asks_for_confirmation(fake_store, catalog):
    prompts = []

    def confirm(message: str) -> bool:
        prompts.append(message)
        return False

    browser = CatalogBrowser(fake_store, confirm=confirm)
    await browser.load_all()

    assert await browser.delete(catalog[0].id) is False
    assert prompts == [DELETE_CONFIRM_MESSAGE]
    assert "delete" not in fake_store.ops()
    assert len(browser.products) == 3


async def test_delete_accepts_async_confirm(fake_store, catalog):
    async def confirm(message: str) -> bool:
        return True

    browser = CatalogBrowser(fake_store, confirm=confirm)
    await browser.load_all()
    assert await browser.delete(catalog[0].id) is True


async def test_delete_failure_notifies_and_keeps_state(fake_store, catalog):
    notes = []
    browser = CatalogBrowser(fake_store, notify=notes.append)
    await browser.load_all()
    fake_store.fail_on.add("delete")

    assert await browser.delete(catalog[0].id) is False
    assert notes == [DELETE_FAILED_MESSAGE]
    assert len(browser.products) == 3
    assert fake_store.ops().count("delete") == 1


async def test_delete_declined_by_never_confirm(fake_store, catalog):
    browser = CatalogBrowser(fake_store, confirm=never_confirm)
    assert await browser.delete(catalog[0].id) is False
    assert fake_store.ops() == []


async def test_states_and_view(fake_store):
    browser = CatalogBrowser(fake_store)
    await browser.load_all()

    assert browser.state() is BrowserState.POPULATED
    assert browser.state("nothing-like-this") is BrowserState.NO_MATCHES

    view = browser.view("nothing-like-this")
    assert view.state == "no_matches"
    assert view.title == "No products found"
    assert view.items == []

    populated = browser.view("speaker")
    assert populated.state == "populated"
    assert populated.total == 1
    assert populated.title is None


async def test_empty_catalog_view(empty_store):
    browser = CatalogBrowser(empty_store)
    await browser.load_all()
    view = browser.view()
    assert view.state == "empty"
    assert view.title == "No products yet"
    assert view.hint == "Get started by adding your first product"


async def test_second_delete_for_same_id_is_ignored_while_in_flight(fake_store, catalog):
    gate = anyio.Event()
    real_delete = fake_store.delete

    async def slow_delete(product_id: str) -> None:
        await gate.wait()
        await real_delete(product_id)

    fake_store.delete = slow_delete
    browser = CatalogBrowser(fake_store)
    await browser.load_all()
    target = catalog[0].id
    results = []

    async def first():
        results.append(await browser.delete(target))

    async with anyio.create_task_group() as tg:
        tg.start_soon(first)
        while target not in browser._deleting:
            await anyio.sleep(0)
        results.append(await browser.delete(target))
        gate.set()

    assert sorted(results) == [False, True]
    assert fake_store.ops().count("delete") == 1


async def test_second_delete_is_ignored_while_async_confirm_is_pending(fake_store, catalog):
    async def slow_confirm(message: str) -> bool:
        await anyio.sleep(0.01)
        return True

    browser = CatalogBrowser(fake_store, confirm=slow_confirm)
    await browser.load_all()
    target = catalog[0].id
    results = []

    async def attempt():
        results.append(await browser.delete(target))

    async with anyio.create_task_group() as tg:
        tg.start_soon(attempt)
        tg.start_soon(attempt)

    assert sorted(results) == [False, True]
    assert fake_store.ops().count("delete") == 1


async def test_declined_delete_can_be_retried(fake_store, catalog):
    answers = iter([False, True])
    browser = CatalogBrowser(fake_store, confirm=lambda message: next(answers))
    await browser.load_all()
    target = catalog[0].id

    assert await browser.delete(target) is False
    assert await browser.delete(target) is True
    assert fake_store.ops().count("delete") == 1
