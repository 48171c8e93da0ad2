from dailysync.tests.conftest import auth_headers, today


def test_submit_daily_report_defaults_to_today(client, agent):
    r = client.post(
        "/api/daily-reports",
        json={"ticketsResolved": 4, "chatsHandled": 2, "notes": "busy"},
        headers=auth_headers(agent),
    )
    data = r.json()["data"]

    assert r.status_code == 201
    assert data["date"] == today().isoformat()
    assert data["ticketsResolved"] == 4
    assert data["githubIssues"] == 0
    assert data["userId"] == agent.id


def test_submit_daily_report_rejects_negative_counts(client, agent):
    r = client.post("/api/daily-reports", json={"ticketsResolved": -1}, headers=auth_headers(agent))

    assert r.status_code == 400
    assert r.json()["error"] == "Invalid daily report data"


def test_same_day_reports_are_allowed(client, agent):
    body = {"date": "2026-01-05", "ticketsResolved": 1}
    assert client.post("/api/daily-reports", json=body, headers=auth_headers(agent)).status_code == 201
    assert client.post("/api/daily-reports", json=body, headers=auth_headers(agent)).status_code == 201


def test_list_daily_reports_scoped(client, admin, agent, other_agent):
    client.post("/api/daily-reports", json={"ticketsResolved": 1}, headers=auth_headers(agent))
    client.post("/api/daily-reports", json={"ticketsResolved": 2}, headers=auth_headers(other_agent))

    mine = client.get("/api/daily-reports", headers=auth_headers(agent)).json()
    everything = client.get("/api/daily-reports", headers=auth_headers(admin)).json()

    assert [r["ticketsResolved"] for r in mine["data"]] == [1]
    assert mine["pagination"]["total"] == 1
    assert everything["pagination"]["total"] == 2


def test_submit_and_list_meeting_reports(client, agent, other_agent):
    r = client.post(
        "/api/meeting-reports",
        json={"title": "Quarterly review", "outcome": "FOLLOW_UP_REQUIRED"},
        headers=auth_headers(agent),
    )
    client.post("/api/meeting-reports", json={"title": "Not mine"}, headers=auth_headers(other_agent))

    assert r.status_code == 201
    assert r.json()["data"]["outcome"] == "FOLLOW_UP_REQUIRED"

    listed = client.get("/api/meeting-reports", headers=auth_headers(agent)).json()["data"]
    assert [m["title"] for m in listed] == ["Quarterly review"]


def test_meeting_report_requires_title(client, agent):
    r = client.post("/api/meeting-reports", json={"outcome": "COMPLETED"}, headers=auth_headers(agent))
    assert r.status_code == 400


def test_reports_require_session(client):
    assert client.get("/api/daily-reports").status_code == 401
    assert client.post("/api/meeting-reports", json={"title": "x"}).status_code == 401
