from leaderboard.core import StoreError, Unavailable


def test_health(client):
    res = client.get("/health")
    assert res.status_code == 200
    assert res.json() == {"ok": True}


def test_readiness_reports_policy(client):
    res = client.get("/healthz")
    assert res.status_code == 200
    assert res.json() == {"ok": True, "merge_policy": "best_of"}


def test_responses_carry_request_id(client):
    res = client.get("/health", headers={"X-Request-ID": "abc-123"})
    assert res.headers["X-Request-ID"] == "abc-123"
    assert client.get("/health").headers["X-Request-ID"]


def test_register_is_idempotent(client):
    first = client.post("/register", json={"username": "alice"})
    second = client.post("/register", json={"username": "alice"})

    assert first.status_code == 200
    assert first.json() == second.json()
    assert first.json()["username"] == "alice"
    assert isinstance(first.json()["id"], int)


def test_register_requires_username(client):
    for body in ({}, {"username": ""}, {"username": 7}, {"username": "x" * 65}):
        res = client.post("/register", json=body)
        assert res.status_code == 400
        assert "error" in res.json()

    res = client.post("/register", content=b"not json", headers={"content-type": "application/json"})
    assert res.status_code == 400


def test_lookup_user(client):
    created = client.post("/register", json={"username": "alice"}).json()

    assert client.get("/users/alice").json() == created
    res = client.get("/users/nobody")
    assert res.status_code == 404
    assert res.json()["error"] == "User not found"


def test_submit_and_rank_best_of(client):
    for username, score in [("alice", 50), ("bob", 70), ("alice", 90), ("alice", 10)]:
        res = client.post("/update-leaderboard", json={"username": username, "score": score})
        assert res.status_code == 200
        assert res.json()["ok"] is True

    res = client.get("/leaderboard")
    assert res.status_code == 200
    body = res.json()
    assert body["merge_policy"] == "best_of"
    assert [(row["username"], row["score"], row["rank"]) for row in body["leaderboard"]] == [
        ("alice", 90, 1),
        ("bob", 70, 2),
    ]


def test_submit_echoes_resolved_score(client):
    client.post("/update-leaderboard", json={"username": "alice", "score": 80})
    res = client.post("/update-leaderboard", json={"username": "alice", "score": "30"})

    assert res.json()["score"] == 80
    assert res.json()["username"] == "alice"


def test_submit_by_user_id(client):
    alice = client.post("/register", json={"username": "alice"}).json()

    res = client.post("/update-leaderboard", json={"user_id": alice["id"], "score": 12})
    assert res.status_code == 200
    assert res.json()["user_id"] == alice["id"]


def test_invalid_score_is_rejected_without_changes(client):
    client.post("/update-leaderboard", json={"username": "alice", "score": 40})

    for bad in ("notanumber", "NaN", "Infinity", None, 1.5):
        res = client.post("/update-leaderboard", json={"username": "alice", "score": bad})
        assert res.status_code == 400

    assert client.get("/leaderboard").json()["leaderboard"][0]["score"] == 40


def test_invalid_score_does_not_register_username(client):
    res = client.post("/update-leaderboard", json={"username": "ghost", "score": "x"})
    assert res.status_code == 400
    assert client.get("/users/ghost").status_code == 404


def test_missing_identity_is_rejected(client):
    assert client.post("/update-leaderboard", json={"score": 5}).status_code == 400
    res = client.post("/update-leaderboard", json={"user_id": 4242, "score": 5})
    assert res.status_code == 400
    assert res.json()["error"] == "Unknown user_id 4242"


def test_auto_register_can_be_disabled(make_client):
    client = make_client(auto_register=False)

    res = client.post("/update-leaderboard", json={"username": "alice", "score": 5})
    assert res.status_code == 400

    client.post("/register", json={"username": "alice"})
    res = client.post("/update-leaderboard", json={"username": "alice", "score": 5})
    assert res.status_code == 200


def test_latest_wins_mode(make_client):
    client = make_client(merge_policy="latest_wins")
    client.post("/update-leaderboard", json={"username": "alice", "score": 50})
    res = client.post("/update-leaderboard", json={"username": "alice", "score": 30})

    assert res.json()["score"] == 30
    assert client.get("/leaderboard").json()["leaderboard"][0]["score"] == 30


def test_accumulator_mode(make_client):
    client = make_client(merge_policy="accumulator")
    alice = client.post("/register", json={"username": "alice"}).json()

    client.post(
        "/update-leaderboard",
        json={"user_id": alice["id"], "victory": 1, "defeat": 0, "explored": 3},
    )
    res = client.post(
        "/update-leaderboard",
        json={"user_id": alice["id"], "victory": 0, "defeat": 1, "explored": 2},
    )
    assert res.status_code == 200
    assert {k: res.json()[k] for k in ("victories", "defeats", "explored")} == {
        "victories": 1,
        "defeats": 1,
        "explored": 5,
    }

    row = client.get("/leaderboard").json()["leaderboard"][0]
    assert row == {
        "rank": 1,
        "user_id": alice["id"],
        "username": "alice",
        "victories": 1,
        "defeats": 1,
        "explored": 5,
    }

    res = client.post("/update-leaderboard", json={"user_id": alice["id"], "victory": -1})
    assert res.status_code == 400


def test_leaderboard_limit(make_client):
    client = make_client(max_size=2)
    for index in range(4):
        client.post("/update-leaderboard", json={"username": f"p{index}", "score": index})

    assert len(client.get("/leaderboard").json()["leaderboard"]) == 2
    assert len(client.get("/leaderboard", params={"limit": 50}).json()["leaderboard"]) == 2
    assert len(client.get("/leaderboard", params={"limit": 1}).json()["leaderboard"]) == 1
    assert client.get("/leaderboard", params={"limit": 0}).status_code == 400
    assert client.get("/leaderboard", params={"limit": "many"}).status_code == 400


def test_store_failures_do_not_leak_details(client, monkeypatch):
    def broken_submit(*args, **kwargs):
        raise StoreError("UNIQUE constraint failed: score_record.identity_id")

    monkeypatch.setattr(client.app.state.ledger, "submit", broken_submit)

    res = client.post("/update-leaderboard", json={"username": "alice", "score": 1})
    assert res.status_code == 500
    assert res.json()["error"] == "Server error"
    assert "UNIQUE" not in res.text


def test_unavailable_store_is_retryable(client, monkeypatch):
    def down():
        raise Unavailable("Store unavailable")

    monkeypatch.setattr(client.app.state.database, "ping", down)
    monkeypatch.setattr(client.app.state.ranking, "top", lambda n=None: down())

    for path in ("/healthz", "/leaderboard"):
        res = client.get(path)
        assert res.status_code == 503
        assert res.headers["Retry-After"] == "1"
        assert res.json()["error"] == "Service unavailable"


def test_cors_allows_configured_origin(client):
    res = client.options(
        "/leaderboard",
        headers={"Origin": "http://localhost:5173", "Access-Control-Request-Method": "GET"},
    )
    assert res.status_code == 200
    assert res.headers["access-control-allow-origin"] == "http://localhost:5173"


def test_out_of_range_scores_are_rejected(client):
    client.post("/update-leaderboard", json={"username": "alice", "score": 40})

    for bad in (10**20, "1e30", -(2**63) - 1):
        res = client.post("/update-leaderboard", json={"username": "alice", "score": bad})
        assert res.status_code == 400
        res = client.post("/update-leaderboard", json={"username": "ghost", "score": bad})
        assert res.status_code == 400

    assert client.get("/leaderboard").json()["leaderboard"][0]["score"] == 40
    assert client.get("/users/ghost").status_code == 404


def test_accumulator_overflow_is_rejected(make_client):
    client = make_client(merge_policy="accumulator")
    biggest = 2**63 - 1

    res = client.post("/update-leaderboard", json={"username": "alice", "victory": biggest})
    assert res.status_code == 200
    assert res.json()["victories"] == biggest

    res = client.post("/update-leaderboard", json={"username": "alice", "victory": 1})
    assert res.status_code == 400

    row = client.get("/leaderboard").json()["leaderboard"][0]
    assert row["victories"] == biggest


def test_failed_upsert_keeps_auto_registered_identity(client, monkeypatch):
    def broken_submit(*args, **kwargs):
        raise StoreError("disk I/O error")

    monkeypatch.setattr(client.app.state.ledger, "submit", broken_submit)

    res = client.post("/update-leaderboard", json={"username": "newbie", "score": 3})
    assert res.status_code == 500

    assert client.get("/users/newbie").status_code == 200
    assert client.get("/leaderboard").json()["leaderboard"] == []


def test_unhandled_errors_keep_the_request_id(client, monkeypatch):
    def explode(n=None):
        raise RuntimeError("boom")

    monkeypatch.setattr(client.app.state.ranking, "top", explode)

    res = client.get("/leaderboard", headers={"X-Request-ID": "req-9"})
    assert res.status_code == 500
    assert res.json() == {"error": "Server error", "request_id": "req-9"}
    assert res.headers["X-Request-ID"] == "req-9"
    assert "boom" not in res.text
