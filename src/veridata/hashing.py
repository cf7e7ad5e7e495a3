# src/veridata/hashing.py

import hashlib

ZERO_ACCOUNT = "0x" + "0" * 40


def compute_sha256_from_file(file_path: str, chunk_size: int = 65536) -> str:
    """
    Compute the content hash of a dataset file incrementally.

    Args:
        file_path: Path to file
        chunk_size: Bytes to read at a time (default: 64KB)

    Returns:
        Hexadecimal SHA-256 hash string.
    """
    sha256_hash = hashlib.sha256()
    with open(file_path, "rb") as f:
        for chunk in iter(lambda: f.read(chunk_size), b""):
            sha256_hash.update(chunk)
    return sha256_hash.hexdigest()


def is_null_identity(account) -> bool:
    """True for a missing, blank or all-zero account reference."""
    if account is None:
        return True
    if not isinstance(account, str):
        return True
    value = account.strip()
    if not value:
        return True
    return value.lower() == ZERO_ACCOUNT
