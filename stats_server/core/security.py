import hashlib
import hmac
import secrets


def generate_api_key() -> str:
    return secrets.token_hex(24)


def hash_api_key(raw_key: str) -> str:
    return hashlib.sha256(raw_key.encode()).hexdigest()


def raw_token_matches(supplied: str | None, configured: str) -> bool:
    """Constant-time check of the shared raw-data token; empty config never matches."""
    if not configured or not supplied:
        return False
    return hmac.compare_digest(supplied.encode(), configured.encode())
