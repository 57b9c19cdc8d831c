API = "/api/v1"

MESSAGES = f"{API}/messages"


def test_client_and_coach_share_weekly_thread(client, coach, athlete, clock) -> None:
    res = client.post(
        MESSAGES,
        json={"client_id": athlete["id"], "week_start_date": "2025-02-13", "body": "  Knee feels better  "},
        headers=athlete["headers"],
    )
    assert res.status_code == 201
    body = res.json()
    assert body["body"] == "Knee feels better"
    assert body["week_of"].startswith("2025-02-10T00:00:00")
    assert body["created_at"].startswith("2025-02-12T18:00:00")

    res = client.post(
        MESSAGES,
        json={"client_id": athlete["id"], "week_start_date": "2025-02-10", "body": "Great to hear"},
        headers=coach["headers"],
    )
    assert res.status_code == 201

    thread = client.get(f"{MESSAGES}/{athlete['id']}/2025-02-16", headers=coach["headers"]).json()
    assert [m["sender_id"] for m in thread] == [athlete["id"], coach["id"]]

    own = client.get(f"{MESSAGES}/{athlete['id']}/2025-02-10", headers=athlete["headers"]).json()
    assert len(own) == 2


def test_client_cannot_post_on_another_clients_thread(client, athlete, signup, connect, coach) -> None:
    other = signup("pia@fitmail.com")
    connect(other, coach)
    res = client.post(
        MESSAGES,
        json={"client_id": athlete["id"], "week_start_date": "2025-02-10", "body": "hi"},
        headers=other["headers"],
    )
    assert res.status_code == 403

    res = client.get(f"{MESSAGES}/{athlete['id']}/2025-02-10", headers=other["headers"])
    assert res.status_code == 403


def test_client_without_coach_cannot_message(client, signup) -> None:
    loner = signup("quinn@fitmail.com")
    res = client.post(
        MESSAGES,
        json={"client_id": loner["id"], "week_start_date": "2025-02-10", "body": "hello?"},
        headers=loner["headers"],
    )
    assert res.status_code == 403


def test_unlinked_coach_cannot_read_or_write(client, athlete, signup) -> None:
    stranger = signup("rae.coach@fitmail.com", role="coach")
    res = client.get(f"{MESSAGES}/{athlete['id']}/2025-02-10", headers=stranger["headers"])
    assert res.status_code == 403
    res = client.post(
        MESSAGES,
        json={"client_id": athlete["id"], "week_start_date": "2025-02-10", "body": "hey"},
        headers=stranger["headers"],
    )
    assert res.status_code == 403


def test_message_validation(client, athlete) -> None:
    res = client.post(
        MESSAGES,
        json={"client_id": athlete["id"], "week_start_date": "2025-02-10", "body": "   "},
        headers=athlete["headers"],
    )
    assert res.status_code == 422
    assert "body" in res.json()["detail"]["errors"]

    res = client.post(
        MESSAGES,
        json={"client_id": athlete["id"], "week_start_date": "yesterday", "body": "hi"},
        headers=athlete["headers"],
    )
    assert res.status_code == 422
    assert "week_start_date" in res.json()["detail"]["errors"]
