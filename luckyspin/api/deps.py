# luckyspin/api/deps.py
from __future__ import annotations

from fastapi import Request

from luckyspin.config.settings import Settings
from luckyspin.database.session import Database
from luckyspin.services.allocation import SpinService
from luckyspin.services.analytics import EventRecorder


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_db(request: Request) -> Database:
    return request.app.state.db


def get_events(request: Request) -> EventRecorder:
    return request.app.state.events


def get_spin_service(request: Request) -> SpinService:
    return request.app.state.spins
