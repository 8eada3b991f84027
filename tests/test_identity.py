from __future__ import annotations

import hashlib

from luckyspin.services.identity import hash_fingerprint, hash_identity, hash_ip


def test_digest_is_sha256_of_namespaced_value():
    expected = hashlib.sha256(b"fp:abc123:pepper").hexdigest()
    assert hash_identity("fp", "abc123", "pepper") == expected
    assert len(expected) == 64


def test_deterministic_and_kind_separated():
    assert hash_fingerprint("same", "s") == hash_fingerprint("same", "s")
    assert hash_fingerprint("same", "s") != hash_ip("same", "s")


def test_salt_changes_digest():
    assert hash_ip("10.0.0.1", "a") != hash_ip("10.0.0.1", "b")


def test_missing_value_uses_sentinel():
    sentinel = hash_identity("fp", "unknown", "")
    assert hash_fingerprint(None) == sentinel
    assert hash_fingerprint("") == sentinel
    assert hash_fingerprint("   ") == sentinel
