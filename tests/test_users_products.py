def test_create_and_lookup_user(client):
    r = client.post("/users", json={"email": "jo@example.com", "displayName": "Jo", "photoURL": "http://img/jo.png"})
    assert r.status_code == 200, r.text
    assert r.json()["inserted_id"]

    assert client.get("/user", params={"email": "jo@example.com"}).json() == {"exists": True}
    assert client.get("/user", params={"email": "no@example.com"}).json() == {"exists": False}

    single = client.get("/singleuser", params={"email": "jo@example.com"}).json()
    assert single["success"] is True
    assert single["data"]["name"] == "Jo"
    assert single["data"]["photo_url"] == "http://img/jo.png"
    assert single["data"]["role"] == "user"

    missing = client.get("/singleuser", params={"email": "no@example.com"}).json()
    assert missing == {"success": True, "data": None}

    users = client.get("/users").json()
    assert [u["email"] for u in users] == ["jo@example.com"]


def test_user_requires_valid_email(client):
    assert client.post("/users", json={"name": "No Mail"}).status_code == 400
    assert client.post("/users", json={"email": "not-an-email"}).status_code == 400
    assert client.get("/user").status_code == 400


def test_products(client, file_db):
    pid = file_db.collection("products").insert_one({"name": "Chew Rope Toy", "price": 6.99}).inserted_id

    r = client.get("/products")
    assert r.status_code == 200
    assert [p["_id"] for p in r.json()] == [pid]

    r = client.get(f"/product/{pid}")
    assert r.status_code == 200
    assert r.json()["price"] == 6.99

    r = client.get("/product/0123456789abcdef0123456789abcdef")
    assert r.status_code == 404
    assert r.json()["message"] == "Product not found"


def test_root(client):
    assert client.get("/").json() == {"status": "ok", "service": "PetVerse API"}
