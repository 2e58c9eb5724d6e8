"""
vaultroll.api.deps — FastAPI dependency injection
==================================================
"""

from __future__ import annotations

import os
from functools import lru_cache

from sqlalchemy import Engine

from vaultroll.config import VaultrollConfig, load_config
from vaultroll.database.engine import create_db_engine
from vaultroll.engine.outcome import RandomSource, default_random


@lru_cache(maxsize=1)
def get_config() -> VaultrollConfig:
    return load_config(os.getenv("VAULTROLL_CONFIG", "config.yaml"))


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    return create_db_engine(get_config())


def get_random() -> RandomSource:
    return default_random()
