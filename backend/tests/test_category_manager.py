import time

import requests
from fastapi.testclient import TestClient

from storefront.client import messages as msg
from storefront.client.category_manager import CategoryAssociationManager, reconcile_plan
from storefront.client.http import ApiClient
from storefront.client.scheduling import UiScheduler
from storefront.main import app
from support import FailingSession, RecordingSession, reset_catalog

client = TestClient(app)
scheduler = UiScheduler()
ids = {}


def setup_function(function):
    ids.clear()
    ids.update(reset_catalog())


def teardown_module(module):
    scheduler.shutdown()


def make_manager(session=None, debounce_seconds=0.1):
    session = session or RecordingSession(client)
    api = ApiClient(session=session, timeout=None)
    mgr = CategoryAssociationManager(
        api, ids["product"], scheduler=scheduler, debounce_seconds=debounce_seconds
    )
    return mgr, session


def cat(slug):
    return ids["categories"][slug]


def available_fetches(session):
    return [c for c in session.calls if c[1].endswith("/available-categories")]


def test_reconcile_plan_orders_adds_before_removes():
    assert reconcile_plan([2, 3], [1, 2]) == ([3], [1])
    assert reconcile_plan([1, 2], [2, 1]) == ([], [])
    assert reconcile_plan([], [4, 5]) == ([], [4, 5])


def test_open_modal_seeds_selection_from_associations():
    mgr, _ = make_manager()
    assert mgr.open_modal() is True
    assert mgr.modal_open
    assert [c.name for c in mgr.available] == ["Dresses", "Sale", "Shirts", "Summer"]
    assert sorted(mgr.selected) == sorted([cat("sale"), cat("summer")])


def test_save_adds_then_removes():
    mgr, session = make_manager()
    mgr.fetch_associated()
    mgr.open_modal()
    mgr.toggle(cat("summer"))
    mgr.toggle(cat("shirts"))

    result = mgr.save()

    assert result.ok
    assert result.added == [cat("shirts")]
    assert result.removed == [cat("summer")]
    writes = session.writes()
    assert [w[0] for w in writes] == ["POST", "DELETE"]
    assert writes[0][3] == {"categoryId": cat("shirts")}
    assert writes[1][2] == {"categoryId": cat("summer")}
    assert [c.slug for c in mgr.associated] == ["sale", "shirts"]
    assert mgr.modal_open is False
    assert mgr.selected == []


def test_unchanged_selection_saves_without_calls():
    mgr, session = make_manager()
    mgr.fetch_associated()
    mgr.open_modal()
    mgr.toggle(cat("sale"))
    mgr.toggle(cat("sale"))
    result = mgr.save()
    assert result.ok
    assert session.writes() == []
    assert mgr.modal_open is False


def test_failure_aborts_and_reports_partial_progress():
    session = FailingSession(
        client, requests.ConnectionError("reset by peer"), [("DELETE", "/categories")]
    )
    mgr, _ = make_manager(session=session)
    mgr.fetch_associated()
    mgr.open_modal()
    mgr.toggle(cat("dresses"))
    mgr.toggle(cat("summer"))

    result = mgr.save()

    assert not result.ok
    assert result.partial
    assert result.added == [cat("dresses")]
    assert result.removed == []
    assert result.failed_op == ("remove", cat("summer"))
    assert mgr.error == msg.SERVER_UNREACHABLE
    assert mgr.modal_open is True
    # local list stays as last fetched; the server already has the add
    assert [c.slug for c in mgr.associated] == ["sale", "summer"]
    server = client.get(f"/api/admin/products/{ids['product']}/categories").json()["data"]
    assert [c["slug"] for c in server] == ["dresses", "sale", "summer"]


def test_server_rejection_uses_server_message():
    mgr, _ = make_manager()
    mgr.fetch_associated()
    mgr.open_modal()
    mgr.toggle(4242)
    result = mgr.save()
    assert result.failed_op == ("add", 4242)
    assert not result.partial
    assert mgr.error == "Category not found"
    assert mgr.last_result is result


def test_typing_is_debounced():
    mgr, session = make_manager(debounce_seconds=0.2)
    mgr.open_modal()
    mgr.toggle(cat("dresses"))
    mgr.type_search("s")
    mgr.type_search("su")
    mgr.type_search("sum")
    assert mgr.search_debounce.pending
    time.sleep(1.0)

    fetches = available_fetches(session)
    assert len(fetches) == 2
    assert fetches[-1][2] == {"search": "sum"}
    assert [c.slug for c in mgr.available] == ["summer"]
    # pending toggles survive a search
    assert cat("dresses") in mgr.selected


def test_enter_searches_immediately():
    mgr, session = make_manager(debounce_seconds=0.5)
    mgr.open_modal()
    mgr.type_search("dre")
    assert mgr.submit_search() is True
    assert not mgr.search_debounce.pending
    assert [c.slug for c in mgr.available] == ["dresses"]
    time.sleep(0.8)
    assert len(available_fetches(session)) == 2


def test_close_modal_cancels_pending_search():
    mgr, session = make_manager(debounce_seconds=0.3)
    mgr.open_modal()
    mgr.type_search("sale")
    mgr.close_modal()
    time.sleep(0.6)
    assert len(available_fetches(session)) == 1
    assert mgr.selected == []


def test_add_category_skips_existing_association():
    mgr, session = make_manager()
    mgr.fetch_associated()
    assert mgr.add_category(cat("sale")) is True
    assert session.writes() == []

    assert mgr.add_category(cat("shirts")) is True
    assert [c.slug for c in mgr.associated] == ["sale", "shirts", "summer"]


def test_remove_category_refetches():
    mgr, _ = make_manager()
    mgr.fetch_associated()
    assert mgr.remove_category(cat("summer")) is True
    assert [c.slug for c in mgr.associated] == ["sale"]
    assert mgr.removing is None


def test_single_add_connection_error():
    session = FailingSession(client, requests.ConnectionError("refused"), [("POST", "/categories")])
    mgr, _ = make_manager(session=session)
    mgr.fetch_associated()
    assert mgr.add_category(cat("shirts")) is False
    assert mgr.error == msg.CONNECTION_ERROR.format("refused")
    assert mgr.saving is False
