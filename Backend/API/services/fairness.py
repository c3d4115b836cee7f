import hashlib, hmac, re, secrets
from services.errors import EmptyRequiredField, InvalidInputFormat

_HEX = re.compile(r"[0-9a-fA-F]+")


def generate_server_seed() -> str:
    """32 bytes from the CSPRNG as 64 hex chars. Secret until the reveal."""
    return secrets.token_hex(32)


def generate_nonce() -> str:
    return secrets.token_hex(8)


def _sha256(msg: str) -> str:
    return hashlib.sha256(msg.encode("utf-8")).hexdigest()


def _require(name: str, value: str):
    if not isinstance(value, str) or not value:
        raise EmptyRequiredField(f"{name} is required")


def commit_hash(server_seed: str, nonce: str) -> str:
    """SHA-256 of "serverSeed:nonce"; published before the client seed is known."""
    _require("serverSeed", server_seed)
    _require("nonce", nonce)
    return _sha256(f"{server_seed}:{nonce}")


def combined_seed(server_seed: str, client_seed: str, nonce: str) -> str:
    """SHA-256 of "serverSeed:clientSeed:nonce"; the only entropy the simulation sees."""
    _require("serverSeed", server_seed)
    _require("nonce", nonce)
    if not isinstance(client_seed, str) or not client_seed.strip():
        raise EmptyRequiredField("clientSeed is required")
    return _sha256(f"{server_seed}:{client_seed}:{nonce}")


def seed_from_combined(combined: str) -> int:
    """First 4 bytes of the combined seed, big endian, as uint32."""
    if not isinstance(combined, str) or len(combined) < 8 or not _HEX.fullmatch(combined):
        raise InvalidInputFormat("combinedSeed must be a hex string of at least 8 chars")
    return int(combined[:8], 16)


def verify_commitment(server_seed: str, nonce: str, commit_hex: str) -> bool:
    expected = commit_hash(server_seed, nonce)
    return hmac.compare_digest(expected.encode(), (commit_hex or "").lower().encode("utf-8"))
