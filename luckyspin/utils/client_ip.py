# luckyspin/utils/client_ip.py
from __future__ import annotations

from fastapi import Request


def real_ip(request: Request) -> str:
    """
    Caller IP behind a proxy:
    X-Forwarded-For (first hop) -> X-Real-IP -> socket peer -> "unknown"
    """
    fwd = request.headers.get("x-forwarded-for") or ""
    first = fwd.split(",")[0].strip()
    if first:
        return first

    real = (request.headers.get("x-real-ip") or "").strip()
    if real:
        return real

    if request.client and request.client.host:
        return request.client.host
    return "unknown"
