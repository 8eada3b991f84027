# luckyspin/services/identity.py
from __future__ import annotations

import hashlib

UNKNOWN = "unknown"

KIND_FINGERPRINT = "fp"
KIND_IP = "ip"


def hash_identity(kind: str, raw: str | None, salt: str = "") -> str:
    """
    One-way, deterministic digest (sha256 hex) of "<kind>:<raw>:<salt>".
    Missing or blank raw values hash as the literal "unknown"; never raises.
    """
    value = (raw or "").strip() or UNKNOWN
    return hashlib.sha256(f"{kind}:{value}:{salt or ''}".encode("utf-8")).hexdigest()


def hash_fingerprint(fingerprint: str | None, salt: str = "") -> str:
    return hash_identity(KIND_FINGERPRINT, fingerprint, salt)


def hash_ip(ip: str | None, salt: str = "") -> str:
    return hash_identity(KIND_IP, ip, salt)
