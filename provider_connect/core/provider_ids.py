"""Canonical provider identifiers."""

_CANONICAL_IDS = {
    "z.ai": "zai",
    "z-ai": "zai",
    "opencode-zen": "opencode",
    "qwen": "qwen-portal",
    "kimi-code": "kimi-coding",
}


def normalize_provider_id(provider: str) -> str:
    """Trim, case-fold and map known alternate spellings to one id."""
    normalized = provider.strip().lower()
    return _CANONICAL_IDS.get(normalized, normalized)
