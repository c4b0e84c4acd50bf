from __future__ import annotations

import json

from fastapi.testclient import TestClient

from squircleapi.theme_contract import FALLBACK_COLOR, THEME_PROPERTY_KEYS


def _create_payload(uuid: str, name: str, **colors: str) -> dict:
    return {
        "meta": {
            "uuid": uuid,
            "name": name,
            "author": "api tests",
            "description": "",
        },
        "properties": [
            {"propertyKey": key, "propertyValue": value}
            for key, value in colors.items()
        ],
    }


def test_healthz(client: TestClient) -> None:
    assert client.get("/healthz").json() == {"status": "ok"}


def test_create_get_and_list_themes(client: TestClient) -> None:
    created = client.post("/v1/themes", json=_create_payload("api-1", "Api Night", text="#EEEEEE"))
    assert created.status_code == 201
    body = created.json()
    assert body["uuid"] == "api-1"
    assert body["colors"]["text"] == "#EEEEEE"
    assert body["colors"]["background"] == FALLBACK_COLOR
    assert set(body["colors"]) == set(THEME_PROPERTY_KEYS)

    fetched = client.get("/v1/themes/api-1")
    assert fetched.status_code == 200
    assert fetched.json() == body

    listed = client.get("/v1/themes", params={"query": "NIGHT"})
    assert listed.status_code == 200
    assert [item["uuid"] for item in listed.json()["themes"]] == ["api-1", "ladies_night", "tomorrow_night"]


def test_duplicate_create_returns_conflict(client: TestClient) -> None:
    payload = _create_payload("api-dup", "Dup")
    assert client.post("/v1/themes", json=payload).status_code == 201

    response = client.post("/v1/themes", json=payload)

    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "THEME_ALREADY_EXISTS"


def test_create_rejects_invalid_color(client: TestClient) -> None:
    response = client.post("/v1/themes", json=_create_payload("api-bad", "Bad", text="blue"))

    assert response.status_code == 422
    assert response.json()["detail"]["code"] == "THEME_INVALID_COLOR"
    assert client.get("/v1/themes/api-bad").status_code == 404


def test_create_accepts_unknown_key_with_any_value(client: TestClient) -> None:
    response = client.post("/v1/themes", json=_create_payload("api-loose", "Loose", cursor="red"))

    assert response.status_code == 201
    assert "cursor" not in response.json()["colors"]


def test_create_rejects_built_in_identifier(client: TestClient) -> None:
    response = client.post("/v1/themes", json=_create_payload("darcula", "Mine"))

    assert response.status_code == 409
    assert client.get("/v1/themes/active").json()["name"] == "Darcula"


def test_overlong_identifier_on_remove_and_select_is_rejected(client: TestClient) -> None:
    overlong = "x" * 65

    assert client.delete(f"/v1/themes/{overlong}").status_code == 422
    assert client.post(f"/v1/themes/{overlong}/select").status_code == 422
    assert client.get("/v1/themes/active").json()["uuid"] == "darcula"


def test_list_query_matches_non_ascii_names(client: TestClient) -> None:
    client.post("/v1/themes", json=_create_payload("api-umlaut", "Ärger"))

    listed = client.get("/v1/themes", params={"query": "ä"})

    assert [item["uuid"] for item in listed.json()["themes"]] == ["api-umlaut"]


def test_missing_theme_returns_404(client: TestClient) -> None:
    response = client.get("/v1/themes/missing")

    assert response.status_code == 404
    assert response.json()["detail"]["code"] == "THEME_NOT_FOUND"
    assert client.get("/v1/themes/missing/export").status_code == 404


def test_select_remove_and_active_theme(client: TestClient) -> None:
    assert client.get("/v1/themes/active").json()["uuid"] == "darcula"

    client.post("/v1/themes", json=_create_payload("api-active", "Active", background="#202020"))
    assert client.post("/v1/themes/api-active/select").status_code == 204
    assert client.get("/v1/themes/active").json()["colors"]["background"] == "#202020"

    assert client.delete("/v1/themes/api-active").status_code == 204
    assert client.get("/v1/themes/active").json()["uuid"] == "darcula"
    assert client.delete("/v1/themes/api-active").status_code == 204


def test_selecting_unknown_theme_is_accepted_but_unresolvable(client: TestClient) -> None:
    assert client.post("/v1/themes/ghost/select").status_code == 204

    response = client.get("/v1/themes/active")
    assert response.status_code == 404


def test_import_endpoint_parses_theme_file(client: TestClient) -> None:
    raw = json.dumps(
        {
            "uuid": "imported",
            "name": "Imported",
            "author": "someone",
            "description": "from a file",
            "colorScheme": {"keyword": "#cc7832"},
        }
    )

    response = client.post("/v1/themes/import", content=raw, headers={"content-type": "application/json"})

    assert response.status_code == 200
    assert response.json()["colors"]["keyword"] == "#CC7832"

    malformed = client.post("/v1/themes/import", content=b"{oops")
    assert malformed.status_code == 400
    assert malformed.json()["detail"]["code"] == "THEME_MALFORMED"


def test_download_export_of_built_in_theme(client: TestClient) -> None:
    response = client.get("/v1/themes/monokai/export")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/json")
    assert "Monokai.json" in response.headers["content-disposition"]
    assert response.json()["name"] == "Monokai"


def test_export_to_sink_writes_file(client: TestClient, tmp_path) -> None:
    client.post("/v1/themes", json=_create_payload("api-export", "Shipped", string="#6A8759"))

    response = client.post("/v1/themes/api-export/export")

    assert response.status_code == 200
    assert response.json()["fileName"] == "Shipped.json"
    written = tmp_path / "exports" / "Shipped.json"
    assert json.loads(written.read_text(encoding="utf-8"))["colorScheme"]["string"] == "#6A8759"


def test_request_body_limit(client: TestClient, monkeypatch) -> None:
    import squircleapi.app as squircleapi_app

    monkeypatch.setattr(squircleapi_app, "MAX_REQUEST_BYTES", 8)
    response = client.post("/v1/themes/import", content=b"0123456789")

    assert response.status_code == 413
