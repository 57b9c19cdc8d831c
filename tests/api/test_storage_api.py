API = "/api/v1"

UPLOAD_URLS = f"{API}/storage/upload-urls"


def test_upload_urls_are_scoped_to_the_client(client, athlete, bucket) -> None:
    res = client.post(
        UPLOAD_URLS,
        json={"file_names": ["front.jpg", "../../side view.png"]},
        headers=athlete["headers"],
    )
    assert res.status_code == 200
    items = res.json()
    assert len(items) == 2

    prefix = f"{athlete['id']}/"
    assert all(item["path"].startswith(prefix) for item in items)
    assert items[0]["path"].endswith("/0-front.jpg")
    assert items[1]["path"].endswith("/1-side-view.png")
    assert items[0]["signed_url"].startswith("https://storage.test/upload/")
    assert bucket.uploads == [item["path"] for item in items]


def test_uploaded_paths_are_accepted_on_submit(client, athlete, bucket) -> None:
    items = client.post(
        UPLOAD_URLS, json={"file_names": ["front.jpg"]}, headers=athlete["headers"]
    ).json()

    res = client.post(
        f"{API}/check-ins",
        json={"weight": 180.0, "photo_paths": [items[0]["path"]]},
        headers=athlete["headers"],
    )
    assert res.status_code == 200
    check_in_id = res.json()["check_in_id"]

    detail = client.get(f"{API}/check-ins/{check_in_id}", headers=athlete["headers"]).json()
    assert detail["photo_count"] == 1


def test_upload_url_limits(client, athlete, bucket) -> None:
    res = client.post(
        UPLOAD_URLS,
        json={"file_names": ["a.jpg", "b.jpg", "c.jpg", "d.jpg"]},
        headers=athlete["headers"],
    )
    assert res.status_code == 422
    res = client.post(UPLOAD_URLS, json={"file_names": []}, headers=athlete["headers"])
    assert res.status_code == 422


def test_missing_bucket_is_a_bad_gateway(client, athlete, bucket) -> None:
    bucket.missing = True
    res = client.post(UPLOAD_URLS, json={"file_names": ["a.jpg"]}, headers=athlete["headers"])
    assert res.status_code == 502
    assert "check-in-photos" in res.json()["detail"]
