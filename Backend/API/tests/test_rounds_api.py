from services.engine import simulate
from services.fairness import combined_seed, commit_hash


def _commit(client):
    res = client.post("/rounds/commit")
    assert res.status_code == 200
    return res.json()


def _start(client, round_id, **overrides):
    body = {"clientSeed": "candidate-hello", "betCents": 100, "dropColumn": 6}
    body.update(overrides)
    return client.post(f"/rounds/{round_id}/start", json=body)


def test_healthz(client):
    assert client.get("/healthz").json() == {"ok": True}


def test_commit_stores_hidden_seed(client, fake_rounds):
    data = _commit(client)
    stored = fake_rounds.rows[data["roundId"]]
    assert data["commitHex"] == commit_hash(stored.server_seed, stored.nonce)
    assert data["nonce"] == stored.nonce
    assert data["rows"] == 12
    assert len(stored.server_seed) == 64

    public = client.get(f"/rounds/{data['roundId']}").json()
    assert public["status"] == "CREATED"
    assert public["serverSeed"] is None
    assert public["path"] == []


def test_full_round_lifecycle(client, fake_rounds):
    data = _commit(client)
    round_id = data["roundId"]

    started = _start(client, round_id, clientSeed="  candidate-hello  ")
    assert started.status_code == 200
    body = started.json()
    stored = fake_rounds.rows[round_id]
    expected = simulate(combined_seed(stored.server_seed, "candidate-hello", stored.nonce), 12, 6)
    assert body["status"] == "STARTED"
    assert body["binIndex"] == expected.bin_index
    assert body["decisions"] == expected.decisions
    assert body["pegMapHash"] == expected.peg_map_hash
    assert stored.client_seed == "candidate-hello"
    assert client.get(f"/rounds/{round_id}").json()["serverSeed"] is None

    revealed = client.post(f"/rounds/{round_id}/reveal")
    assert revealed.status_code == 200
    reveal = revealed.json()
    assert commit_hash(reveal["serverSeed"], reveal["nonce"]) == data["commitHex"]
    assert reveal["revealedAt"] is not None

    again = client.post(f"/rounds/{round_id}/reveal").json()
    assert again["revealedAt"] == reveal["revealedAt"]

    public = client.get(f"/rounds/{round_id}").json()
    assert public["status"] == "REVEALED"
    assert public["serverSeed"] == reveal["serverSeed"]
    assert public["path"] == body["decisions"]


def test_unknown_round_is_404(client):
    assert client.get("/rounds/999").status_code == 404
    assert _start(client, 999).status_code == 404
    assert client.post("/rounds/999/reveal").status_code == 404


def test_start_twice_is_rejected(client):
    round_id = _commit(client)["roundId"]
    assert _start(client, round_id).status_code == 200
    assert _start(client, round_id).status_code == 400


def test_reveal_before_start_is_rejected(client):
    round_id = _commit(client)["roundId"]
    assert client.post(f"/rounds/{round_id}/reveal").status_code == 400


def test_blank_client_seed_is_empty_required_field(client, fake_rounds):
    round_id = _commit(client)["roundId"]
    res = _start(client, round_id, clientSeed="   ")
    assert res.status_code == 400
    assert res.json()["code"] == "empty_required_field"
    assert fake_rounds.rows[round_id].status == "CREATED"


def test_drop_column_bounds(client):
    round_id = _commit(client)["roundId"]
    assert _start(client, round_id, dropColumn=13).status_code == 400
    assert _start(client, round_id, dropColumn=-1).status_code == 422
    assert _start(client, round_id, dropColumn=12).status_code == 200


def test_bet_must_be_positive(client):
    round_id = _commit(client)["roundId"]
    assert _start(client, round_id, betCents=0).status_code == 422
