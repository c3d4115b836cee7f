import os
from dotenv import load_dotenv

load_dotenv()

DB_DSN = os.getenv("DB_DSN")
PLINKO_ROWS = int(os.getenv("PLINKO_ROWS", "12"))
PLINKO_MAX_ROWS = int(os.getenv("PLINKO_MAX_ROWS", "32"))
BIAS_PER_COLUMN = float(os.getenv("BIAS_PER_COLUMN", "0.01"))
PAYOUT_TABLE_JSON = os.getenv("PAYOUT_TABLE_JSON", "")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

if not 0 < PLINKO_ROWS <= PLINKO_MAX_ROWS:
    raise ValueError(f"PLINKO_ROWS must be between 1 and PLINKO_MAX_ROWS ({PLINKO_MAX_ROWS}), got {PLINKO_ROWS}")
