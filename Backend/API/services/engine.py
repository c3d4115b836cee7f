"""Deterministic plinko run: xorshift32 stream -> peg map -> walk -> bin."""
import hashlib, math
from dataclasses import dataclass, field
from services.errors import OutOfRangeParameter
from services.fairness import seed_from_combined

MASK32 = 0xFFFFFFFF
ZERO_SEED_SUBSTITUTE = 0x9E3779B9
DEFAULT_BIAS_PER_COLUMN = 0.01


class XorShift32:
    """32-bit xorshift (13, 17, 5). Floats in [0, 1) as state / 0xFFFFFFFF."""

    def __init__(self, seed: int):
        self.state = (seed & MASK32) or ZERO_SEED_SUBSTITUTE

    def next_float(self) -> float:
        x = self.state
        x ^= (x << 13) & MASK32
        x ^= x >> 17
        x ^= (x << 5) & MASK32
        self.state = x
        return x / MASK32


@dataclass(frozen=True)
class Peg:
    left_bias: float


@dataclass
class SimulationResult:
    peg_map: list
    peg_map_hash: str
    decisions: list = field(default_factory=list)
    bin_index: int = 0

    def to_dict(self) -> dict:
        return {
            "pegMap": [[{"leftBias": p.left_bias} for p in row] for row in self.peg_map],
            "pegMapHash": self.peg_map_hash,
            "decisions": list(self.decisions),
            "binIndex": self.bin_index,
        }


def generate_peg_map(prng: XorShift32, rows: int) -> list[list[Peg]]:
    """Row k has k+1 pegs, bias 0.5 +/- 0.1 rounded to 6 decimals."""
    peg_map = []
    for row in range(rows):
        pegs = []
        for _ in range(row + 1):
            r = prng.next_float()
            pegs.append(Peg(left_bias=round(0.5 + (r - 0.5) * 0.2, 6)))
        peg_map.append(pegs)
    return peg_map


def canonical_peg_map(peg_map: list[list[Peg]]) -> str:
    # [[{"leftBias":0.422123}],[{"leftBias":...},...],...] sin espacios
    rows = []
    for pegs in peg_map:
        rows.append("[" + ",".join('{"leftBias":%.6f}' % p.left_bias for p in pegs) + "]")
    return "[" + ",".join(rows) + "]"


def hash_peg_map(peg_map: list[list[Peg]]) -> str:
    return hashlib.sha256(canonical_peg_map(peg_map).encode("utf-8")).hexdigest()


def _clamp(value: float, lo: float, hi: float) -> float:
    if value < lo:
        return lo
    if value > hi:
        return hi
    return value


def _check_params(rows, drop_column, bias_per_column):
    if isinstance(rows, bool) or not isinstance(rows, int) or rows <= 0:
        raise OutOfRangeParameter(f"rows must be a positive integer, got {rows!r}")
    if isinstance(drop_column, bool) or not isinstance(drop_column, int) or not 0 <= drop_column <= rows:
        raise OutOfRangeParameter(f"dropColumn must be between 0 and {rows}, got {drop_column!r}")
    if not math.isfinite(bias_per_column) or bias_per_column < 0:
        raise OutOfRangeParameter(f"biasAdjustmentPerColumn must be >= 0, got {bias_per_column!r}")


def simulate(combined_seed: str, rows: int, drop_column: int,
             bias_adjustment_per_column: float = DEFAULT_BIAS_PER_COLUMN) -> SimulationResult:
    """
    1) seed the PRNG from the combined seed
    2) build the peg map from the stream
    3) keep drawing from the same stream for one decision per row
    4) bin = number of right moves
    """
    _check_params(rows, drop_column, bias_adjustment_per_column)
    prng = XorShift32(seed_from_combined(combined_seed))

    peg_map = generate_peg_map(prng, rows)
    peg_map_hash = hash_peg_map(peg_map)

    adjustment = (drop_column - rows // 2) * bias_adjustment_per_column
    decisions = []
    right_moves = 0
    for row in range(rows):
        base = peg_map[row][min(right_moves, row)].left_bias
        if prng.next_float() < _clamp(base + adjustment, 0.0, 1.0):
            decisions.append("L")
        else:
            decisions.append("R")
            right_moves += 1

    return SimulationResult(
        peg_map=peg_map,
        peg_map_hash=peg_map_hash,
        decisions=decisions,
        bin_index=right_moves,
    )
