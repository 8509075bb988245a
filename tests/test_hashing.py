"""Tests for the SHA-256 priority derivation."""

from __future__ import annotations

import hashlib

import pytest

from selection_reference import reference_priority
from token_manager.hashing import MAX_PRIORITY, priority, priority_message


class TestPriorityMessage:
    """The digest input must be '<name> <decimal nonce>' exactly."""

    def test_name_space_nonce(self) -> None:
        assert priority_message("alice", 3) == b"alice 3"

    def test_empty_name_keeps_separator(self) -> None:
        assert priority_message("", 0) == b" 0"

    def test_no_leading_zeros_or_grouping(self) -> None:
        assert priority_message("x", 1000000) == b"x 1000000"

    def test_full_uint64_range(self) -> None:
        assert priority_message("x", MAX_PRIORITY) == b"x 18446744073709551615"

    def test_name_is_not_trimmed(self) -> None:
        assert priority_message(" a b ", 7) == b" a b  7"

    def test_non_ascii_name_is_utf8(self) -> None:
        assert priority_message("é", 1) == "é 1".encode()


class TestPriority:
    """Tests for priority()."""

    @pytest.mark.parametrize(
        ("name", "nonce"),
        [("alice", 0), ("alice", 1), ("", 0), ("bob", 2**63), ("token", MAX_PRIORITY)],
    )
    def test_matches_reference_derivation(self, name: str, nonce: int) -> None:
        assert priority(name, nonce) == reference_priority(name, nonce)

    def test_first_eight_digest_bytes_big_endian(self) -> None:
        digest = hashlib.sha256(b"alice 5").digest()
        assert priority("alice", 5) == int.from_bytes(digest[:8], "big")

    def test_deterministic(self) -> None:
        assert priority("alice", 42) == priority("alice", 42)

    def test_in_uint64_range(self) -> None:
        for nonce in range(50):
            assert 0 <= priority("range", nonce) <= MAX_PRIORITY

    def test_changing_name_changes_value(self) -> None:
        assert priority("alice", 1) != priority("alicf", 1)

    def test_changing_nonce_changes_value(self) -> None:
        assert priority("alice", 1) != priority("alice", 2)

    def test_separator_matters(self) -> None:
        """'a 12' and 'a1 2' are different inputs."""
        assert priority("a", 12) != priority("a1", 2)
