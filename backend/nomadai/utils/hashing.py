"""API key generation."""
import secrets

API_KEY_PREFIX = "nmd_"


def generate_api_key() -> str:
    """
    Generate a new project API key.

    Returns:
        A new API key string (format: nmd_xxxxxxxxxxxx)
    """
    return f"{API_KEY_PREFIX}{secrets.token_urlsafe(32)}"
