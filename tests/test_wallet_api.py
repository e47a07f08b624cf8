def _auth(client, email="a@x.com"):
    login = client.post("/api/auth/login", json={"email": email})
    token = login.json()["credentials"]["access_token"]
    return {"Authorization": f"Bearer {token}"}


def test_wallet_routes_require_login(client):
    assert client.get("/api/wallets/my-wallets").status_code == 401
    assert client.post("/api/wallets/connect", json={"walletAddress": "0xaaa"}).status_code == 401


def test_connect_list_and_disconnect(client):
    headers = _auth(client)

    resp = client.post(
        "/api/wallets/connect",
        json={"walletAddress": "0xAAA", "walletType": "metamask", "chainId": 1},
        headers=headers,
    )
    assert resp.status_code == 201
    wallet = resp.json()["wallet"]
    assert wallet["wallet_address"] == "0xaaa"
    assert wallet["is_primary"] is True

    again = client.post("/api/wallets/connect", json={"walletAddress": "0xaaa"}, headers=headers)
    assert again.status_code == 200
    assert again.json()["wallet"]["id"] == wallet["id"]

    listed = client.get("/api/wallets/my-wallets", headers=headers).json()
    assert listed["success"] is True
    assert [w["wallet_address"] for w in listed["wallets"]] == ["0xaaa"]

    gone = client.delete(f"/api/wallets/{wallet['id']}", headers=headers)
    assert gone.status_code == 200
    assert client.get("/api/wallets/my-wallets", headers=headers).json()["wallets"] == []


def test_connect_wallet_of_another_account_is_409(client):
    client.post("/api/auth/login", json={"walletAddress": "0xaaa"})
    headers = _auth(client)

    resp = client.post("/api/wallets/connect", json={"walletAddress": "0xAAA"}, headers=headers)
    assert resp.status_code == 409


def test_connect_without_address_is_400(client):
    resp = client.post("/api/wallets/connect", json={}, headers=_auth(client))
    assert resp.status_code == 400


def test_primary_and_label_updates(client):
    headers = _auth(client)
    client.post("/api/wallets/connect", json={"walletAddress": "0xaaa"}, headers=headers)
    second = client.post(
        "/api/wallets/connect", json={"walletAddress": "0xbbb"}, headers=headers
    ).json()["wallet"]

    resp = client.patch(f"/api/wallets/{second['id']}/primary", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["wallet"]["is_primary"] is True

    resp = client.patch(
        f"/api/wallets/{second['id']}/label", json={"label": "Main"}, headers=headers
    )
    assert resp.status_code == 200
    assert resp.json()["wallet"]["label"] == "Main"

    listed = client.get("/api/wallets/my-wallets", headers=headers).json()["wallets"]
    assert [w["wallet_address"] for w in listed] == ["0xbbb", "0xaaa"]


def test_foreign_wallet_id_is_404(client):
    owner = _auth(client, "owner@x.com")
    wallet = client.post(
        "/api/wallets/connect", json={"walletAddress": "0xaaa"}, headers=owner
    ).json()["wallet"]

    other = _auth(client, "other@x.com")
    assert client.delete(f"/api/wallets/{wallet['id']}", headers=other).status_code == 404
    assert client.patch(f"/api/wallets/{wallet['id']}/primary", headers=other).status_code == 404


def test_login_with_linked_wallet_finds_owner(client):
    headers = _auth(client)
    me = client.get("/api/users/me", headers=headers).json()
    client.post("/api/wallets/connect", json={"walletAddress": "0xside"}, headers=headers)

    resp = client.post("/api/auth/login", json={"walletAddress": "0xSIDE"})
    assert resp.status_code == 200
    assert resp.json()["is_new"] is False
    assert resp.json()["user"]["id"] == me["id"]
