from decimal import Decimal

import pytest

from app.engine.compounding import generate_plan_entries


def create_plan(client, headers, start_wager="100", odds="1.5", days=3, name="Marathon"):
    resp = client.post(
        "/api/plans",
        json={"name": name, "start_wager": start_wager, "odds": odds, "days": days},
        headers=headers,
    )
    assert resp.status_code == 200, resp.text
    return resp.json()["plan"]


def entries_of(client, headers, plan_id):
    resp = client.get(f"/api/plans/{plan_id}", headers=headers)
    assert resp.status_code == 200, resp.text
    return resp.json()


def as_rows(entries):
    return [(e["day"], Decimal(e["wager"]), Decimal(e["winnings"]), e["result"]) for e in entries]


def test_create_plan_generates_schedule(client, auth_headers):
    plan = create_plan(client, auth_headers)
    assert plan["status"] == "active"
    assert Decimal(plan["start_wager"]) == Decimal("100")
    assert Decimal(plan["odds"]) == Decimal("1.5")

    detail = entries_of(client, auth_headers, plan["id"])
    assert as_rows(detail["day_entries"]) == [
        (1, Decimal("100.00"), Decimal("150.00"), "pending"),
        (2, Decimal("150.00"), Decimal("225.00"), "pending"),
        (3, Decimal("225.00"), Decimal("337.50"), "pending"),
    ]
    assert all(e["plan_id"] == plan["id"] for e in detail["day_entries"])


def test_list_plans_only_returns_own(client, auth_headers, other_headers):
    create_plan(client, auth_headers, name="Mine")
    create_plan(client, other_headers, name="Theirs")

    resp = client.get("/api/plans", headers=auth_headers)
    assert resp.status_code == 200
    data = resp.json()
    assert data["total"] == 1
    assert [p["name"] for p in data["plans"]] == ["Mine"]


@pytest.mark.parametrize("payload,message", [
    ({"start_wager": "0", "odds": "1.5", "days": 3}, "Start wager must be greater than 0"),
    ({"start_wager": "10", "odds": "1.0", "days": 3}, "Odds must be at least 1.01"),
    ({"start_wager": "10", "odds": "1.5", "days": 0}, "Duration must be at least 1 day"),
    ({"start_wager": "10", "odds": "1.5", "days": 366}, "Duration cannot exceed 365 days"),
])
def test_create_plan_rejects_invalid_terms(client, auth_headers, payload, message):
    resp = client.post("/api/plans", json={"name": "Bad", **payload}, headers=auth_headers)
    assert resp.status_code == 400
    assert resp.json() == {"message": message, "kind": "validation"}


def test_create_plan_rejects_malformed_body(client, auth_headers):
    resp = client.post("/api/plans", json={"name": "Bad", "odds": "1.5", "days": 3}, headers=auth_headers)
    assert resp.status_code == 400
    assert resp.json()["kind"] == "validation"


def test_plans_require_auth(client):
    assert client.get("/api/plans").status_code == 401
    assert client.post("/api/plans", json={}).status_code == 401


def test_other_users_plan_is_forbidden(client, auth_headers, other_headers):
    plan = create_plan(client, auth_headers)

    resp = client.get(f"/api/plans/{plan['id']}", headers=other_headers)
    assert resp.status_code == 403
    assert resp.json()["kind"] == "forbidden"

    resp = client.patch(f"/api/plans/{plan['id']}/days/1", json={"result": "win"}, headers=other_headers)
    assert resp.status_code == 403
    resp = client.delete(f"/api/plans/{plan['id']}", headers=other_headers)
    assert resp.status_code == 403


def test_unknown_plan_not_found(client, auth_headers):
    resp = client.get("/api/plans/does-not-exist", headers=auth_headers)
    assert resp.status_code == 404
    assert resp.json() == {"message": "Plan not found", "kind": "not_found"}


def test_delete_plan(client, auth_headers):
    plan = create_plan(client, auth_headers)
    resp = client.delete(f"/api/plans/{plan['id']}", headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json() == {"message": "Plan deleted successfully"}
    assert client.get(f"/api/plans/{plan['id']}", headers=auth_headers).status_code == 404


def test_loss_stops_plan(client, auth_headers):
    plan = create_plan(client, auth_headers)
    resp = client.patch(f"/api/plans/{plan['id']}/days/2", json={"result": "loss"}, headers=auth_headers)
    assert resp.status_code == 200
    data = resp.json()
    assert data["plan"]["status"] == "stopped"
    assert data["day_entries"][1]["result"] == "loss"


def test_all_wins_complete_plan(client, auth_headers):
    plan = create_plan(client, auth_headers)
    for day in (1, 2):
        resp = client.patch(f"/api/plans/{plan['id']}/days/{day}", json={"result": "win"}, headers=auth_headers)
        assert resp.json()["plan"]["status"] == "active"

    resp = client.patch(f"/api/plans/{plan['id']}/days/3", json={"result": "win"}, headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["plan"]["status"] == "completed"


@pytest.mark.parametrize("day", [0, 4])
def test_record_result_day_out_of_range(client, auth_headers, day):
    plan = create_plan(client, auth_headers)
    resp = client.patch(f"/api/plans/{plan['id']}/days/{day}", json={"result": "win"}, headers=auth_headers)
    assert resp.status_code == 400
    assert resp.json()["message"] == "Day must be between 1 and 3"


def test_record_result_rejects_unknown_result(client, auth_headers):
    plan = create_plan(client, auth_headers)
    resp = client.patch(f"/api/plans/{plan['id']}/days/1", json={"result": "pending"}, headers=auth_headers)
    assert resp.status_code == 400
    assert resp.json()["kind"] == "validation"


def test_restart_keeps_history_and_recomputes_tail(client, auth_headers):
    plan = create_plan(client, auth_headers)
    client.patch(f"/api/plans/{plan['id']}/days/1", json={"result": "win"}, headers=auth_headers)
    client.patch(f"/api/plans/{plan['id']}/days/2", json={"result": "loss"}, headers=auth_headers)

    resp = client.post(f"/api/plans/{plan['id']}/restart", json={"day": 2}, headers=auth_headers)
    assert resp.status_code == 200
    data = resp.json()
    assert data["plan"]["status"] == "active"
    assert as_rows(data["day_entries"]) == [
        (1, Decimal("100.00"), Decimal("150.00"), "win"),
        (2, Decimal("150.00"), Decimal("225.00"), "pending"),
        (3, Decimal("225.00"), Decimal("337.50"), "pending"),
    ]


def test_restart_from_day_one_regenerates_everything(client, auth_headers):
    plan = create_plan(client, auth_headers)
    before = entries_of(client, auth_headers, plan["id"])["day_entries"]
    client.patch(f"/api/plans/{plan['id']}/days/1", json={"result": "loss"}, headers=auth_headers)

    resp = client.post(f"/api/plans/{plan['id']}/restart", json={"day": 1}, headers=auth_headers)
    assert resp.status_code == 200
    after = resp.json()["day_entries"]
    assert as_rows(after) == as_rows(before)
    assert len(after) == 3


def test_restart_completed_plan_keeps_status(client, auth_headers):
    plan = create_plan(client, auth_headers, days=1)
    client.patch(f"/api/plans/{plan['id']}/days/1", json={"result": "win"}, headers=auth_headers)

    resp = client.post(f"/api/plans/{plan['id']}/restart", json={"day": 1}, headers=auth_headers)
    assert resp.json()["plan"]["status"] == "completed"
    assert resp.json()["day_entries"][0]["result"] == "pending"


@pytest.mark.parametrize("day", [0, 4])
def test_restart_day_out_of_range(client, auth_headers, day):
    plan = create_plan(client, auth_headers)
    resp = client.post(f"/api/plans/{plan['id']}/restart", json={"day": day}, headers=auth_headers)
    assert resp.status_code == 400
    assert resp.json() == {"message": "Day must be between 1 and 3", "kind": "validation"}


def test_summary(client, auth_headers):
    create_plan(client, auth_headers)
    stopped = create_plan(client, auth_headers, start_wager="50", odds="2", days=2)
    client.patch(f"/api/plans/{stopped['id']}/days/1", json={"result": "loss"}, headers=auth_headers)

    resp = client.get("/api/plans/summary", headers=auth_headers)
    assert resp.status_code == 200
    data = resp.json()
    assert data["total_plans"] == 2
    assert data["active_plans"] == 1
    assert data["stopped_plans"] == 1
    assert data["completed_plans"] == 0
    assert Decimal(data["total_investment"]) == Decimal("150.00")
    assert Decimal(data["potential_winnings"]) == Decimal("337.50")


def test_preview_does_not_persist(client, auth_headers):
    resp = client.post("/api/plans/preview", json={"start_wager": "100", "odds": "1.5", "days": 3}, headers=auth_headers)
    assert resp.status_code == 200
    data = resp.json()
    assert [Decimal(e["winnings"]) for e in data["entries"]] == [Decimal("150.00"), Decimal("225.00"), Decimal("337.50")]
    assert Decimal(data["projected_payout"]) == Decimal("337.50")

    assert client.get("/api/plans", headers=auth_headers).json()["total"] == 0


def test_large_schedule_is_stored_to_the_cent(client, auth_headers):
    plan = create_plan(client, auth_headers, start_wager="12345.67", odds="3.37", days=23)
    stored = entries_of(client, auth_headers, plan["id"])["day_entries"]

    expected = generate_plan_entries(Decimal("12345.67"), Decimal("3.37"), 23)
    assert [(e["day"], Decimal(e["wager"]), Decimal(e["winnings"])) for e in stored] == [
        (e.day, e.wager, e.winnings) for e in expected
    ]
    assert Decimal(stored[-1]["winnings"]) == Decimal("16865623954230655.98")


def test_large_schedule_restart_resumes_from_exact_winnings(client, auth_headers):
    plan = create_plan(client, auth_headers, start_wager="12345.67", odds="3.37", days=23)
    client.patch(f"/api/plans/{plan['id']}/days/21", json={"result": "loss"}, headers=auth_headers)

    resp = client.post(f"/api/plans/{plan['id']}/restart", json={"day": 22}, headers=auth_headers)
    assert resp.status_code == 200
    entries = resp.json()["day_entries"]

    expected = generate_plan_entries(Decimal("12345.67"), Decimal("3.37"), 23)
    assert Decimal(entries[21]["wager"]) == expected[20].winnings
    assert [Decimal(e["winnings"]) for e in entries[21:]] == [e.winnings for e in expected[21:]]
