"""
HTTP API tests
"""
import json

from conftest import make_layout, make_part

CLAIMS = {"X-Authorizer-Claims": json.dumps({"sub": "u-1", "cognito:groups": ["Admin"]})}


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_schema_endpoint(client):
    response = client.get("/layouts/schema")
    assert response.status_code == 200
    assert response.json()["items"] == {"$ref": "#/$defs/Part"}


def test_post_without_claims(client, store):
    response = client.post("/layouts", content=json.dumps([make_part()]))

    assert response.status_code == 401
    assert response.headers["access-control-allow-origin"] == "*"
    assert response.json() == {"message": "Unauthorized"}
    assert store.retrieve_all() == []


def test_undecodable_claims_header(client):
    response = client.get("/layouts", headers={"X-Authorizer-Claims": "{nope"})
    assert response.status_code == 401


def test_post_invalid_document(client):
    part = make_part()
    del part["dimensions"]

    response = client.post("/layouts", content=json.dumps([part]), headers=CLAIMS)

    assert response.status_code == 400
    assert response.headers["access-control-allow-methods"] == "GET,POST,OPTIONS"
    assert response.json()["errors"][0]["path"] == "$[0].dimensions"


def test_post_malformed_json(client):
    response = client.post("/layouts", content="not json", headers=CLAIMS)
    assert response.status_code == 400
    assert response.json()["errors"][0]["rule"] == "parse"


def test_post_then_list(client):
    document = [make_part("door", layout=make_layout([make_part("handle")]))]

    posted = client.post("/layouts", content=json.dumps(document), headers=CLAIMS)
    assert posted.status_code == 200
    item = posted.json()["item"]

    listed = client.get("/layouts", headers=CLAIMS)
    assert listed.status_code == 200
    assert listed.json()["items"] == [item]
    assert listed.json()["items"][0]["payload"] == document


def test_preflight(client):
    response = client.options(
        "/layouts",
        headers={
            "Origin": "https://example.com",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "Content-Type",
        },
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"
