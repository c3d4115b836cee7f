import json
import logging
from deps.settings import PAYOUT_TABLE_JSON, PLINKO_ROWS

logger = logging.getLogger("uvicorn.error")

# rows -> multiplicador por bin (simetrico, bordes pagan mas)
PAYOUT = {
    12: [15, 5, 3, 2, 1.5, 1.2, 1, 1.2, 1.5, 2, 3, 5, 15],
}


def load_payout_tables(raw: str) -> dict[int, list[float]]:
    """Parse {"rows": [multipliers...]}; each table needs rows + 1 entries."""
    tables = {}
    for key, mults in json.loads(raw).items():
        rows = int(key)
        if rows <= 0 or not isinstance(mults, list) or len(mults) != rows + 1:
            raise ValueError(f"payout table for {key} rows must have {rows + 1} entries")
        tables[rows] = [float(m) for m in mults]
    return tables


def check_payout_table(rows: int) -> bool:
    if rows in PAYOUT:
        return True
    logger.warning(f"[PAYOUT] no payout table for {rows} rows; every bin will pay 1.0 "
                   f"(tables: {sorted(PAYOUT)}). Set PAYOUT_TABLE_JSON.")
    return False


if PAYOUT_TABLE_JSON:
    PAYOUT.update(load_payout_tables(PAYOUT_TABLE_JSON))

check_payout_table(PLINKO_ROWS)


def payout_multiplier(bin_index: int, rows: int = 12) -> float:
    table = PAYOUT.get(rows)
    if table is None or not 0 <= bin_index < len(table):
        return 1.0
    return float(table[bin_index])
