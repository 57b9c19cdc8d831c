from datetime import datetime, timezone

API = "/api/v1"

INBOX = f"{API}/coach/inbox"


def _submit(client, user, weight: float):
    res = client.post(f"{API}/check-ins", json={"weight": weight}, headers=user["headers"])
    assert res.status_code == 200, res.text
    return res.json()


def _row(inbox: dict, client_id: str) -> dict:
    return next(r for r in inbox["clients"] if r["id"] == client_id)


def test_inbox_reports_new_check_in_with_weight_change(client, coach, athlete, clock) -> None:
    # Previous period (Feb 3 - Feb 10)
    clock.set(datetime(2025, 2, 5, 18, 0, tzinfo=timezone.utc))
    _submit(client, athlete, 182.0)

    clock.set(datetime(2025, 2, 12, 18, 0, tzinfo=timezone.utc))
    latest = _submit(client, athlete, 180.0)

    res = client.get(INBOX, headers=coach["headers"])
    assert res.status_code == 200
    inbox = res.json()
    row = _row(inbox, athlete["id"])
    assert row["status"] == "new"
    assert row["check_in_id"] == latest["check_in_id"]
    assert row["weight"] == 180.0
    assert row["weight_change"] == -2.0
    assert row["period"]["period_start"] == "2025-02-10"
    assert row["has_client_message"] is False
    assert inbox["counts"] == {"new": 1, "reviewed": 0, "missing": 0}


def test_inbox_missing_and_reviewed(client, coach, athlete, signup, connect) -> None:
    quiet = signup("nora@fitmail.com", name="Nora")
    connect(quiet, coach)

    check_in_id = _submit(client, athlete, 180.0)["check_in_id"]
    client.post(f"{API}/check-ins/{check_in_id}/review", headers=coach["headers"])

    inbox = client.get(INBOX, headers=coach["headers"]).json()
    assert _row(inbox, athlete["id"])["status"] == "reviewed"
    assert _row(inbox, quiet["id"])["status"] == "missing"
    assert _row(inbox, quiet["id"])["weight_change"] is None
    assert inbox["counts"] == {"new": 0, "reviewed": 1, "missing": 1}


def test_check_in_from_previous_period_counts_as_missing(client, coach, athlete, clock) -> None:
    clock.set(datetime(2025, 2, 7, 18, 0, tzinfo=timezone.utc))
    _submit(client, athlete, 181.0)

    clock.set(datetime(2025, 2, 12, 18, 0, tzinfo=timezone.utc))
    inbox = client.get(INBOX, headers=coach["headers"]).json()
    assert _row(inbox, athlete["id"])["status"] == "missing"


def test_inbox_flags_client_messages_in_period(client, coach, athlete) -> None:
    client.post(
        f"{API}/messages",
        json={"client_id": athlete["id"], "week_start_date": "2025-02-12", "body": "Coach reply"},
        headers=coach["headers"],
    )
    inbox = client.get(INBOX, headers=coach["headers"]).json()
    assert _row(inbox, athlete["id"])["has_client_message"] is False

    client.post(
        f"{API}/messages",
        json={"client_id": athlete["id"], "week_start_date": "2025-02-12", "body": "Rough week"},
        headers=athlete["headers"],
    )
    inbox = client.get(INBOX, headers=coach["headers"]).json()
    assert _row(inbox, athlete["id"])["has_client_message"] is True


def test_inbox_uses_client_schedule_override(client, coach, athlete) -> None:
    res = client.put(
        f"{API}/coach/clients/{athlete['id']}/schedule",
        json={"check_in_days_of_week": [3, 3]},
        headers=coach["headers"],
    )
    assert res.status_code == 200
    body = res.json()
    assert body["check_in_days_of_week_override"] == [3]
    assert body["effective_check_in_days"] == [3]

    row = _row(client.get(INBOX, headers=coach["headers"]).json(), athlete["id"])
    assert row["period"]["period_start"] == "2025-02-12"
    assert row["period"]["period_end"] == "2025-02-19"

    period = client.get(f"{API}/coach/clients/{athlete['id']}/period", headers=coach["headers"])
    assert period.json()["due_today"] is True
    assert period.json()["overdue"] is False

    # Empty list resets to the coach default, then the Monday fallback
    res = client.put(
        f"{API}/coach/clients/{athlete['id']}/schedule",
        json={"check_in_days_of_week": []},
        headers=coach["headers"],
    )
    assert res.json()["effective_check_in_days"] == [1]


def test_coach_default_schedule_applies_to_roster(client, coach, athlete) -> None:
    client.put(
        f"{API}/users/me/schedule",
        json={"check_in_days_of_week": [1, 4]},
        headers=coach["headers"],
    )
    row = _row(client.get(INBOX, headers=coach["headers"]).json(), athlete["id"])
    assert row["period"]["period_start"] == "2025-02-10"
    assert row["period"]["period_end"] == "2025-02-13"


def test_coach_notes_and_link(client, coach, athlete) -> None:
    res = client.put(
        f"{API}/coach/clients/{athlete['id']}/notes",
        json={"notes": "Knee injury, avoid lunges"},
        headers=coach["headers"],
    )
    assert res.status_code == 200

    res = client.get(f"{API}/coach/clients/{athlete['id']}", headers=coach["headers"])
    assert res.json()["coach_notes"] == "Knee injury, avoid lunges"


def test_remove_client_keeps_history(client, coach, athlete) -> None:
    _submit(client, athlete, 180.0)

    res = client.delete(f"{API}/coach/clients/{athlete['id']}", headers=coach["headers"])
    assert res.status_code == 204

    inbox = client.get(INBOX, headers=coach["headers"]).json()
    assert inbox["clients"] == []
    assert client.get(f"{API}/coach/clients/{athlete['id']}", headers=coach["headers"]).status_code == 403

    history = client.get(f"{API}/check-ins/me", headers=athlete["headers"]).json()
    assert len(history) == 1


def test_week_review(client, coach, athlete, bucket) -> None:
    _submit(client, athlete, 180.0)
    client.post(
        f"{API}/messages",
        json={"client_id": athlete["id"], "week_start_date": "2025-02-10", "body": "Done!"},
        headers=athlete["headers"],
    )

    res = client.get(
        f"{API}/coach/clients/{athlete['id']}/weeks/2025-02-14",
        headers=coach["headers"],
    )
    assert res.status_code == 200
    body = res.json()
    assert body["week_of"] == "2025-02-10"
    assert body["week_end"].startswith("2025-02-16T23:59:59.999")
    assert [c["weight"] for c in body["check_ins"]] == [180.0]
    assert [m["body"] for m in body["messages"]] == ["Done!"]

    res = client.get(
        f"{API}/coach/clients/{athlete['id']}/weeks/bad-date",
        headers=coach["headers"],
    )
    assert res.status_code == 422
    assert "week_start_date" in res.json()["detail"]["errors"]


def test_coach_endpoints_require_link_and_role(client, athlete, signup) -> None:
    stranger = signup("olga.coach@fitmail.com", role="coach")
    res = client.get(f"{API}/coach/clients/{athlete['id']}", headers=stranger["headers"])
    assert res.status_code == 403
    res = client.get(
        f"{API}/coach/clients/{athlete['id']}/weeks/2025-02-10",
        headers=stranger["headers"],
    )
    assert res.status_code == 403

    assert client.get(INBOX, headers=athlete["headers"]).status_code == 403


def _history(client, athlete, clock) -> list[dict]:
    weights = [
        (datetime(2025, 1, 20, 18, 0, tzinfo=timezone.utc), 186.0),
        (datetime(2025, 1, 27, 18, 0, tzinfo=timezone.utc), 185.0),
        (datetime(2025, 2, 3, 18, 0, tzinfo=timezone.utc), 184.0),
        (datetime(2025, 2, 5, 18, 0, tzinfo=timezone.utc), 183.0),
        (datetime(2025, 2, 10, 18, 0, tzinfo=timezone.utc), 182.4),
    ]
    submitted = []
    for instant, weight in weights:
        clock.set(instant)
        submitted.append(_submit(client, athlete, weight))
    clock.set(datetime(2025, 2, 12, 18, 0, tzinfo=timezone.utc))
    res = client.post(
        f"{API}/check-ins",
        json={"weight": 181.2, "photo_paths": [f"{athlete['id']}/b/0-front.jpg"]},
        headers=athlete["headers"],
    )
    submitted.append(res.json())

    # Feb 5 is withdrawn by the client
    client.delete(f"{API}/check-ins/{submitted[3]['check_in_id']}", headers=athlete["headers"])
    return submitted


def test_coach_lists_client_check_in_history(client, coach, athlete, clock) -> None:
    submitted = _history(client, athlete, clock)

    res = client.get(f"{API}/coach/clients/{athlete['id']}/check-ins", headers=coach["headers"])
    assert res.status_code == 200
    history = res.json()
    assert [c["weight"] for c in history] == [181.2, 182.4, 184.0, 185.0, 186.0]
    assert history[0]["id"] == submitted[-1]["check_in_id"]
    assert history[0]["photo_count"] == 1
    assert submitted[3]["check_in_id"] not in {c["id"] for c in history}


def test_client_profile_summarizes_recent_activity(client, coach, athlete, clock) -> None:
    res = client.get(f"{API}/coach/clients/{athlete['id']}", headers=coach["headers"])
    body = res.json()
    assert body["recent_check_ins"] == []
    assert body["weight_change"] is None
    assert body["last_message_at"] is None

    _history(client, athlete, clock)
    client.post(
        f"{API}/messages",
        json={"client_id": athlete["id"], "week_start_date": "2025-02-12", "body": "Photos up"},
        headers=athlete["headers"],
    )

    res = client.get(f"{API}/coach/clients/{athlete['id']}", headers=coach["headers"])
    assert res.status_code == 200
    body = res.json()
    assert [c["weight"] for c in body["recent_check_ins"]] == [181.2, 182.4, 184.0, 185.0]
    assert body["weight_change"] == -1.2
    assert body["last_message_at"].startswith("2025-02-12T18:00:00")
    assert body["effective_check_in_days"] == [1]


def test_unlinked_coach_cannot_list_client_check_ins(client, athlete, signup) -> None:
    _submit(client, athlete, 180.0)
    stranger = signup("ivan.coach@fitmail.com", role="coach")
    res = client.get(f"{API}/coach/clients/{athlete['id']}/check-ins", headers=stranger["headers"])
    assert res.status_code == 403
    res = client.get(f"{API}/coach/clients/{athlete['id']}/check-ins", headers=athlete["headers"])
    assert res.status_code == 403
