# tests/unit/test_hashing.py

import hashlib

import pytest

from veridata.hashing import (
    ZERO_ACCOUNT,
    compute_sha256_from_file,
    is_null_identity,
)


class TestContentHashing:
    """Test content-hash helpers."""

    def test_file_hash_matches_content_hash(self, tmp_path):
        path = tmp_path / "data.csv"
        path.write_bytes(b"t,value\n1,20.5\n" * 10_000)
        assert compute_sha256_from_file(str(path), chunk_size=1024) == hashlib.sha256(
            path.read_bytes()
        ).hexdigest()


class TestNullIdentity:
    """Test detection of null account references."""

    @pytest.mark.parametrize("account", [None, "", "   ", ZERO_ACCOUNT, ZERO_ACCOUNT.upper(), 42])
    def test_null(self, account):
        assert is_null_identity(account)

    @pytest.mark.parametrize("account", ["alice", "0x" + "0" * 39 + "1"])
    def test_not_null(self, account):
        assert not is_null_identity(account)


if __name__ == "__main__":
    pytest.main([__file__])
