import hmac
import logging
from fastapi import APIRouter, HTTPException, Query
from deps.db import get_conn
from deps import rounds_repo
from deps.settings import BIAS_PER_COLUMN, PLINKO_MAX_ROWS
from services.fairness import commit_hash, combined_seed, verify_commitment
from services.engine import DEFAULT_BIAS_PER_COLUMN, simulate
from services.payout import payout_multiplier

logger = logging.getLogger("uvicorn.error")

router = APIRouter(prefix="/verify", tags=["verify"])


@router.get("")
def verify(
    server_seed: str = Query(alias="serverSeed", min_length=1),
    client_seed: str = Query(alias="clientSeed", min_length=1),
    nonce: str = Query(min_length=1),
    drop_column: int = Query(alias="dropColumn", ge=0),
    rows: int = Query(12, gt=0, le=PLINKO_MAX_ROWS),
    bias_per_column: float = Query(BIAS_PER_COLUMN, alias="biasAdjustmentPerColumn", ge=0),
):
    """Recompute a round from revealed material only. No DB."""
    commit_hex = commit_hash(server_seed, nonce)
    combined = combined_seed(server_seed, client_seed, nonce)
    sim = simulate(combined, rows, drop_column, bias_per_column)
    return {
        "commitHex": commit_hex,
        "combinedSeed": combined,
        "biasPerColumn": bias_per_column,
        "pegMapHash": sim.peg_map_hash,
        "binIndex": sim.bin_index,
        "decisions": sim.decisions,
        "payoutMultiplier": payout_multiplier(sim.bin_index, rows),
    }


def _same(a, b) -> bool:
    if a is None or b is None:
        return False
    return hmac.compare_digest(str(a).lower().encode(), str(b).lower().encode())


@router.get("/rounds/{round_id}")
def audit_round(round_id: int):
    with get_conn() as conn:
        rnd = rounds_repo.get_round(conn, round_id)
    if rnd is None:
        raise HTTPException(404, "Ronda no encontrada")
    if rnd.status != rounds_repo.REVEALED:
        raise HTTPException(400, "La ronda aun no fue revelada")

    combined = combined_seed(rnd.server_seed, rnd.client_seed, rnd.nonce)
    # rondas anteriores a BiasPerColumn se jugaron con el valor por defecto
    bias = DEFAULT_BIAS_PER_COLUMN if rnd.bias_per_column is None else rnd.bias_per_column
    sim = simulate(combined, rnd.rows, rnd.drop_column, bias)
    checks = {
        "commitHex": verify_commitment(rnd.server_seed, rnd.nonce, rnd.commit_hex),
        "combinedSeed": _same(combined, rnd.combined_seed),
        "pegMapHash": _same(sim.peg_map_hash, rnd.peg_map_hash),
        "decisions": sim.decisions == list(rnd.path or []),
        "binIndex": sim.bin_index == rnd.bin_index,
    }
    valid = all(checks.values())
    if not valid:
        failed = [k for k, ok in checks.items() if not ok]
        logger.warning(f"[VERIFY] round={round_id} failed checks: {failed}")
    return {"roundId": round_id, "biasPerColumn": bias, "checks": checks, "valid": valid}
