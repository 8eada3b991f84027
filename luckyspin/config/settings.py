# luckyspin/config/settings.py
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv


def _to_int(value: str, key_name: str) -> int:
    try:
        return int(value)
    except ValueError as e:
        raise RuntimeError(f"Invalid integer for {key_name}: {value!r}") from e


def _to_float(value: str, key_name: str) -> float:
    try:
        return float(value)
    except ValueError as e:
        raise RuntimeError(f"Invalid number for {key_name}: {value!r}") from e


def _opt(env: dict[str, str], key: str) -> str:
    return (env.get(key) or "").strip()


@dataclass(frozen=True, slots=True)
class Settings:
    # --- storage ---
    database_url: str = "sqlite+aiosqlite:///./luckyspin.db"

    # --- identity hashing ---
    hash_salt: str = ""

    # --- spin tuning ---
    miss_ratio: float = 0.3          # house edge: miss band = 30% of available weight
    max_attempts: int = 3            # serialization retries per spin
    window_hours: int = 24           # rolling device window
    ip_spin_limit: int = 3           # spins per ip per window

    # --- staff notifications (optional) ---
    staff_bot_token: Optional[str] = None
    staff_chat_id: Optional[int] = None

    # --- http ---
    host: str = "0.0.0.0"
    port: int = 8000

    # --- environment ---
    environment: str = "production"  # production | development

    @property
    def is_dev(self) -> bool:
        return self.environment.lower() in {"dev", "development", "local"}

    @property
    def staff_notifications_enabled(self) -> bool:
        return bool(self.staff_bot_token) and self.staff_chat_id is not None

    @classmethod
    def load(cls) -> "Settings":
        """
        Loads from process env (and .env if present).
        Every key is optional; malformed numbers fail fast.
        """
        load_dotenv()
        env = os.environ

        database_url = _opt(env, "DATABASE_URL") or "sqlite+aiosqlite:///./luckyspin.db"
        hash_salt = _opt(env, "HASH_SALT")

        miss_raw = _opt(env, "SPIN_MISS_RATIO")
        miss_ratio = _to_float(miss_raw, "SPIN_MISS_RATIO") if miss_raw else 0.3
        if miss_ratio < 0:
            raise RuntimeError(f"SPIN_MISS_RATIO must be >= 0, got {miss_ratio}")

        attempts_raw = _opt(env, "SPIN_MAX_ATTEMPTS")
        max_attempts = _to_int(attempts_raw, "SPIN_MAX_ATTEMPTS") if attempts_raw else 3

        window_raw = _opt(env, "SPIN_WINDOW_HOURS")
        window_hours = _to_int(window_raw, "SPIN_WINDOW_HOURS") if window_raw else 24

        ip_raw = _opt(env, "IP_SPIN_LIMIT")
        ip_spin_limit = _to_int(ip_raw, "IP_SPIN_LIMIT") if ip_raw else 3

        staff_bot_token = _opt(env, "STAFF_BOT_TOKEN") or None
        staff_chat_raw = _opt(env, "STAFF_CHAT_ID")
        staff_chat_id = _to_int(staff_chat_raw, "STAFF_CHAT_ID") if staff_chat_raw else None

        host = _opt(env, "HOST") or "0.0.0.0"
        port_raw = _opt(env, "PORT")
        port = _to_int(port_raw, "PORT") if port_raw else 8000

        environment = _opt(env, "ENVIRONMENT") or "production"

        return cls(
            database_url=database_url,
            hash_salt=hash_salt,
            miss_ratio=miss_ratio,
            max_attempts=max(1, max_attempts),
            window_hours=window_hours,
            ip_spin_limit=ip_spin_limit,
            staff_bot_token=staff_bot_token,
            staff_chat_id=staff_chat_id,
            host=host,
            port=port,
            environment=environment,
        )
