import logging
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field
from deps.db import get_conn
from deps import rounds_repo
from deps.settings import PLINKO_ROWS, BIAS_PER_COLUMN
from services.fairness import generate_server_seed, generate_nonce, commit_hash, combined_seed
from services.engine import simulate
from services.payout import payout_multiplier

logger = logging.getLogger("uvicorn.error")

router = APIRouter(prefix="/rounds", tags=["rounds"])


class StartIn(BaseModel):
    client_seed: str = Field(alias="clientSeed", max_length=256)
    bet_cents: int = Field(alias="betCents", gt=0)
    drop_column: int = Field(alias="dropColumn", ge=0)


def _load(conn, round_id: int) -> rounds_repo.Round:
    rnd = rounds_repo.get_round(conn, round_id)
    if rnd is None:
        raise HTTPException(404, "Ronda no encontrada")
    return rnd


@router.post("/commit")
def commit_round():
    server_seed = generate_server_seed()
    nonce = generate_nonce()
    commit_hex = commit_hash(server_seed, nonce)
    with get_conn() as conn:
        round_id = rounds_repo.create_round(conn, server_seed, nonce, commit_hex, PLINKO_ROWS)
    logger.info(f"[ROUNDS] committed round={round_id} commit={commit_hex}")
    return {"roundId": round_id, "commitHex": commit_hex, "nonce": nonce, "rows": PLINKO_ROWS}


@router.post("/{round_id}/start")
def start_round(round_id: int, body: StartIn):
    client_seed = body.client_seed.strip()
    with get_conn() as conn:
        rnd = _load(conn, round_id)
        if rnd.status != rounds_repo.CREATED:
            raise HTTPException(400, "La ronda no esta lista para empezar")
        if body.drop_column > rnd.rows:
            raise HTTPException(400, f"dropColumn debe estar entre 0 y {rnd.rows}")

        combined = combined_seed(rnd.server_seed, client_seed, rnd.nonce)
        sim = simulate(combined, rnd.rows, body.drop_column, BIAS_PER_COLUMN)
        mult = payout_multiplier(sim.bin_index, rnd.rows)

        ok = rounds_repo.mark_started(
            conn, round_id,
            client_seed=client_seed, combined_seed=combined, peg_map_hash=sim.peg_map_hash,
            drop_column=body.drop_column, bias_per_column=BIAS_PER_COLUMN, bin_index=sim.bin_index,
            payout_multiplier=mult, bet_cents=body.bet_cents, decisions=sim.decisions,
        )
        if not ok:
            raise HTTPException(400, "La ronda no esta lista para empezar")

    logger.info(f"[ROUNDS] started round={round_id} drop={body.drop_column} bin={sim.bin_index} x{mult}")
    return {
        "roundId": round_id,
        "status": rounds_repo.STARTED,
        "dropColumn": body.drop_column,
        "biasPerColumn": BIAS_PER_COLUMN,
        "binIndex": sim.bin_index,
        "payoutMultiplier": mult,
        "betCents": body.bet_cents,
        "pegMapHash": sim.peg_map_hash,
        "combinedSeed": combined,
        "decisions": sim.decisions,
    }


@router.post("/{round_id}/reveal")
def reveal_round(round_id: int):
    with get_conn() as conn:
        rnd = _load(conn, round_id)
        if rnd.status == rounds_repo.REVEALED:
            revealed_at = rnd.revealed_at
        elif rnd.status == rounds_repo.STARTED:
            revealed_at = rounds_repo.mark_revealed(conn, round_id)
            if revealed_at is None:
                # otra peticion la revelo entre medias
                revealed_at = _load(conn, round_id).revealed_at
            logger.info(f"[ROUNDS] revealed round={round_id}")
        else:
            raise HTTPException(400, "La ronda debe empezar antes de revelarse")

    return {
        "roundId": round_id,
        "serverSeed": rnd.server_seed,
        "commitHex": rnd.commit_hex,
        "nonce": rnd.nonce,
        "revealedAt": revealed_at,
    }


@router.get("/{round_id}")
def get_round(round_id: int):
    with get_conn() as conn:
        rnd = _load(conn, round_id)
    revealed = rnd.status == rounds_repo.REVEALED
    return {
        "roundId": rnd.id,
        "status": rnd.status,
        "rows": rnd.rows,
        "commitHex": rnd.commit_hex,
        "nonce": rnd.nonce,
        "serverSeed": rnd.server_seed if revealed else None,
        "clientSeed": rnd.client_seed,
        "combinedSeed": rnd.combined_seed,
        "pegMapHash": rnd.peg_map_hash,
        "dropColumn": rnd.drop_column,
        "biasPerColumn": rnd.bias_per_column,
        "binIndex": rnd.bin_index,
        "payoutMultiplier": rnd.payout_multiplier,
        "betCents": rnd.bet_cents,
        "path": rnd.path or [],
        "createdAt": rnd.created_at,
        "revealedAt": rnd.revealed_at,
    }
