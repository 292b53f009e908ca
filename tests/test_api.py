"""
HTTP tests for the /api blueprint and the landing page.
"""
import threading
from collections import Counter
from concurrent.futures import ThreadPoolExecutor

from santa_tiers.extensions import db
from santa_tiers.models import Assignment
from santa_tiers.services.generator import PARTICIPANTS, PRICE_TIERS, ROUND_SIZE, generate


def assign(client, participant):
    return client.post("/api/assign", json={"participant": participant})


def test_landing_page_lists_participants(client):
    r = client.get("/")
    assert r.status_code == 200
    body = r.get_data(as_text=True)
    for name in PARTICIPANTS:
        assert f'<option value="{name}">' in body
    assert "/api/assign" in body


def test_participants_endpoint(client):
    r = client.get("/api/participants")
    assert r.status_code == 200
    assert r.get_json() == {"participants": list(PARTICIPANTS)}


def test_assign_returns_three_gifts(client):
    r = assign(client, "David")
    assert r.status_code == 200

    data = r.get_json()
    assert data["participant"] == "David"
    assert len(data["assignments"]) == 3
    assert sorted(a["price_tier"] for a in data["assignments"]) == sorted(PRICE_TIERS)
    assert all(a["recipient"] != "David" for a in data["assignments"])


def test_assign_is_idempotent(client):
    first = assign(client, "Dana").get_json()
    second = assign(client, "Dana").get_json()
    assert first == second

    everything = client.get("/api/all-assignments").get_json()["assignments"]
    assert len(everything) == ROUND_SIZE


def test_assign_rejects_unknown_participant(client):
    r = assign(client, "Rudolph")
    assert r.status_code == 400
    assert r.get_json() == {"error": "Invalid or missing participant."}
    assert client.get("/api/all-assignments").get_json() == {"assignments": []}


def test_assign_rejects_missing_body(client):
    r = client.post("/api/assign", data="not json", content_type="text/plain")
    assert r.status_code == 400

    r = client.post("/api/assign", json={"participant": 42})
    assert r.status_code == 400


def test_assign_trims_whitespace(client):
    r = assign(client, "  Gianna ")
    assert r.status_code == 200
    assert r.get_json()["participant"] == "Gianna"


def test_concurrent_first_requests_share_one_round(app):
    barrier = threading.Barrier(len(PARTICIPANTS))

    def request_for(name):
        client = app.test_client()
        barrier.wait()
        return assign(client, name)

    with ThreadPoolExecutor(max_workers=len(PARTICIPANTS)) as pool:
        responses = list(pool.map(request_for, PARTICIPANTS))

    assert [r.status_code for r in responses] == [200] * len(PARTICIPANTS)
    assert all(len(r.get_json()["assignments"]) == 3 for r in responses)

    rows = app.test_client().get("/api/all-assignments").get_json()["assignments"]
    assert len(rows) == ROUND_SIZE
    assert Counter(r["participant"] for r in rows) == {p: 3 for p in PARTICIPANTS}

    # What each caller saw is exactly what got stored
    for name, response in zip(PARTICIPANTS, responses):
        seen = {(a["recipient"], a["price_tier"]) for a in response.get_json()["assignments"]}
        stored = {(r["recipient"], r["price_tier"]) for r in rows if r["participant"] == name}
        assert seen == stored


def test_admin_reset_requires_token(client):
    assign(client, "Rocio")

    r = client.post("/api/admin/reset", json={"token": "nope"})
    assert r.status_code == 403
    assert r.get_json() == {"error": "Invalid admin token."}
    assert len(client.get("/api/all-assignments").get_json()["assignments"]) == ROUND_SIZE

    r = client.post("/api/admin/reset", json={})
    assert r.status_code == 403


def test_admin_reset_clears_round(client):
    assign(client, "Rocio")

    r = client.post("/api/admin/reset", json={"token": "letmein"})
    assert r.status_code == 200
    assert r.get_json() == {
        "success": True,
        "message": "All assignments have been reset.",
        "deleted": ROUND_SIZE,
    }
    assert client.get("/api/all-assignments").get_json() == {"assignments": []}

    r = assign(client, "Rocio")
    assert r.status_code == 200
    assert len(client.get("/api/all-assignments").get_json()["assignments"]) == ROUND_SIZE


def test_inconsistent_round_is_conflict(app, client):
    with app.app_context():
        db.session.add_all(Assignment(**r.to_dict()) for r in generate() if r.participant != "Dana")
        db.session.commit()

    r = assign(client, "Dana")
    assert r.status_code == 409
    assert "Admin may need to reset" in r.get_json()["error"]


def test_show_round_command(app):
    runner = app.test_cli_runner()

    result = runner.invoke(args=["show-round"])
    assert "No round has been generated yet." in result.output

    assign(app.test_client(), "David")
    result = runner.invoke(args=["show-round"])
    assert result.output.count("->") == ROUND_SIZE


def test_reset_round_command(app):
    assign(app.test_client(), "David")

    result = app.test_cli_runner().invoke(args=["reset-round"])

    assert f"Deleted {ROUND_SIZE} assignments." in result.output
    assert app.test_client().get("/api/all-assignments").get_json() == {"assignments": []}
