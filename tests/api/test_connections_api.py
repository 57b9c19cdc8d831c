API = "/api/v1"


def test_connect_with_lowercase_code(client, signup, coach) -> None:
    user = signup("ivy@fitmail.com")
    res = client.post(
        f"{API}/connections",
        json={"coach_code": f"  {coach['profile']['coach_code'].lower()} "},
        headers=user["headers"],
    )
    assert res.status_code == 201
    body = res.json()
    assert body["coach_id"] == coach["id"]
    assert body["coach_name"] == "Anna"

    res = client.get(f"{API}/connections", headers=user["headers"])
    assert [c["coach_id"] for c in res.json()] == [coach["id"]]


def test_connect_twice_conflicts(client, athlete, coach) -> None:
    res = client.post(
        f"{API}/connections",
        json={"coach_code": coach["profile"]["coach_code"]},
        headers=athlete["headers"],
    )
    assert res.status_code == 409


def test_unknown_code(client, signup) -> None:
    user = signup("jay@fitmail.com")
    res = client.post(f"{API}/connections", json={"coach_code": "ZZZZZZ"}, headers=user["headers"])
    assert res.status_code == 404


def test_coach_mode_cannot_redeem_codes(client, coach) -> None:
    res = client.post(
        f"{API}/connections",
        json={"coach_code": coach["profile"]["coach_code"]},
        headers=coach["headers"],
    )
    assert res.status_code == 403


def test_leave_coach(client, athlete) -> None:
    link_id = athlete["link"]["id"]
    res = client.delete(f"{API}/connections/{link_id}", headers=athlete["headers"])
    assert res.status_code == 204

    assert client.get(f"{API}/connections", headers=athlete["headers"]).json() == []
    res = client.delete(f"{API}/connections/{link_id}", headers=athlete["headers"])
    assert res.status_code == 404
