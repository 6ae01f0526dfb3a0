# Petition Admin Core Module
from .config import Settings, get_settings, settings
from .database import (
    async_session_maker,
    build_engine,
    build_session_maker,
    engine,
    init_models,
    session_scope,
)
from .logging import get_logger, setup_logging

__all__ = [
    "Settings",
    "settings",
    "get_settings",
    "setup_logging",
    "get_logger",
    "engine",
    "async_session_maker",
    "build_engine",
    "build_session_maker",
    "session_scope",
    "init_models",
]
