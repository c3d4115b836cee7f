import json
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from deps.db import exec_tsql

CREATED, STARTED, REVEALED = "CREATED", "STARTED", "REVEALED"

_COLUMNS = (
    "Id, Status, ServerSeed, Nonce, CommitHex, BoardRows, ClientSeed, CombinedSeed, PegMapHash, "
    "DropColumn, BiasPerColumn, BinIndex, PayoutMultiplier, BetCents, PathJson, CreatedAt, RevealedAt"
)


@dataclass
class Round:
    id: int
    status: str
    server_seed: str
    nonce: str
    commit_hex: str
    rows: int
    client_seed: Optional[str] = None
    combined_seed: Optional[str] = None
    peg_map_hash: Optional[str] = None
    drop_column: Optional[int] = None
    bias_per_column: Optional[float] = None
    bin_index: Optional[int] = None
    payout_multiplier: Optional[float] = None
    bet_cents: Optional[int] = None
    path: Optional[list] = None
    created_at: Optional[datetime] = None
    revealed_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row) -> "Round":
        (id_, status, server_seed, nonce, commit_hex, rows, client_seed, combined, peg_hash,
         drop_column, bias, bin_index, mult, bet_cents, path_json, created_at, revealed_at) = row
        return cls(
            id=int(id_), status=status, server_seed=server_seed, nonce=nonce,
            commit_hex=commit_hex, rows=int(rows), client_seed=client_seed,
            combined_seed=combined, peg_map_hash=peg_hash, drop_column=drop_column,
            bias_per_column=None if bias is None else float(bias), bin_index=bin_index,
            payout_multiplier=None if mult is None else float(mult),
            bet_cents=bet_cents, path=json.loads(path_json) if path_json else [],
            created_at=created_at, revealed_at=revealed_at,
        )


def create_round(conn, server_seed: str, nonce: str, commit_hex: str, rows: int) -> int:
    sql = """
INSERT INTO dbo.PlinkoRounds (Status, ServerSeed, Nonce, CommitHex, BoardRows)
OUTPUT INSERTED.Id
VALUES (?, ?, ?, ?, ?);
"""
    rows_out = exec_tsql(conn, sql, (CREATED, server_seed, nonce, commit_hex, rows))
    return int(rows_out[0][0])


def get_round(conn, round_id: int) -> Optional[Round]:
    rows = exec_tsql(conn, f"SELECT {_COLUMNS} FROM dbo.PlinkoRounds WHERE Id = ?;", (round_id,))
    return Round.from_row(rows[0]) if rows else None


def mark_started(conn, round_id: int, *, client_seed: str, combined_seed: str, peg_map_hash: str,
                 drop_column: int, bias_per_column: float, bin_index: int, payout_multiplier: float,
                 bet_cents: int, decisions: list) -> bool:
    """CREATED -> STARTED. False if another request already started it."""
    sql = """
UPDATE dbo.PlinkoRounds
SET Status = ?, ClientSeed = ?, CombinedSeed = ?, PegMapHash = ?, DropColumn = ?,
    BiasPerColumn = ?, BinIndex = ?, PayoutMultiplier = ?, BetCents = ?, PathJson = ?
OUTPUT INSERTED.Id
WHERE Id = ? AND Status = ?;
"""
    params = (STARTED, client_seed, combined_seed, peg_map_hash, drop_column, bias_per_column,
              bin_index, payout_multiplier, bet_cents, json.dumps(decisions), round_id, CREATED)
    return bool(exec_tsql(conn, sql, params))


def mark_revealed(conn, round_id: int) -> Optional[datetime]:
    """STARTED -> REVEALED, exactly once. Returns the reveal timestamp."""
    sql = """
UPDATE dbo.PlinkoRounds
SET Status = ?, RevealedAt = SYSUTCDATETIME()
OUTPUT INSERTED.RevealedAt
WHERE Id = ? AND Status = ?;
"""
    rows = exec_tsql(conn, sql, (REVEALED, round_id, STARTED))
    return rows[0][0] if rows else None
