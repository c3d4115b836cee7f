import dataclasses
from contextlib import contextmanager
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from deps import rounds_repo
from main import app


class FakeRounds:
    """In-memory stand-in for dbo.PlinkoRounds."""

    def __init__(self):
        self.rows = {}
        self.next_id = 1

    def create_round(self, conn, server_seed, nonce, commit_hex, rows):
        round_id = self.next_id
        self.next_id += 1
        self.rows[round_id] = rounds_repo.Round(
            id=round_id, status=rounds_repo.CREATED, server_seed=server_seed,
            nonce=nonce, commit_hex=commit_hex, rows=rows,
            created_at=datetime.now(timezone.utc),
        )
        return round_id

    def get_round(self, conn, round_id):
        rnd = self.rows.get(round_id)
        return dataclasses.replace(rnd) if rnd else None

    def mark_started(self, conn, round_id, *, client_seed, combined_seed, peg_map_hash,
                     drop_column, bias_per_column, bin_index, payout_multiplier, bet_cents, decisions):
        rnd = self.rows.get(round_id)
        if rnd is None or rnd.status != rounds_repo.CREATED:
            return False
        self.rows[round_id] = dataclasses.replace(
            rnd, status=rounds_repo.STARTED, client_seed=client_seed,
            combined_seed=combined_seed, peg_map_hash=peg_map_hash, drop_column=drop_column,
            bias_per_column=bias_per_column, bin_index=bin_index,
            payout_multiplier=payout_multiplier, bet_cents=bet_cents, path=list(decisions),
        )
        return True

    def mark_revealed(self, conn, round_id):
        rnd = self.rows.get(round_id)
        if rnd is None or rnd.status != rounds_repo.STARTED:
            return None
        revealed_at = datetime.now(timezone.utc)
        self.rows[round_id] = dataclasses.replace(rnd, status=rounds_repo.REVEALED, revealed_at=revealed_at)
        return revealed_at


@contextmanager
def _fake_conn():
    yield object()


@pytest.fixture
def fake_rounds(monkeypatch):
    fake = FakeRounds()
    for name in ("create_round", "get_round", "mark_started", "mark_revealed"):
        monkeypatch.setattr(rounds_repo, name, getattr(fake, name))
    monkeypatch.setattr("routers.rounds.get_conn", _fake_conn)
    monkeypatch.setattr("routers.verify.get_conn", _fake_conn)
    return fake


@pytest.fixture
def client(fake_rounds):
    return TestClient(app)
