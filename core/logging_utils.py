"""
Secret-safe logging helpers.
"""


def mask_secret(secret: str | None) -> str:
    """
    Mask a credential for logs.

    Rules:
    - None / empty → "missing"
    - < 8 chars → fully masked
    - Otherwise → first 4 chars, rest masked
    """
    if not secret:
        return "missing"

    secret = secret.strip()
    if len(secret) < 8:
        return "***"

    return f"{secret[:4]}***"
