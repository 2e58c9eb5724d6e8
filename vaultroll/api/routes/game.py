"""
vaultroll.api.routes.game — Wager, allowance and pool endpoints
================================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field, StrictInt
from sqlalchemy import Engine

from vaultroll.api.deps import get_config, get_engine, get_random
from vaultroll.config import VaultrollConfig
from vaultroll.engine.outcome import RandomSource
from vaultroll.services.allowance_service import claim_daily_allowance
from vaultroll.services.state_service import get_pool_state
from vaultroll.services.wager_service import place_wager

router = APIRouter(tags=["game"])


class WagerRequest(BaseModel):
    account_key: str = Field(min_length=1, max_length=64)
    amount: StrictInt


class AllowanceRequest(BaseModel):
    account_key: str = Field(min_length=1, max_length=64)


# ---------------------------------------------------------------------------
# GET /pool
# ---------------------------------------------------------------------------
@router.get("/pool")
def read_pool(
    engine: Engine = Depends(get_engine),
    cfg: VaultrollConfig = Depends(get_config),
):
    """Current jackpot and the latest winners."""
    return get_pool_state(engine, cfg=cfg).to_dict()


# ---------------------------------------------------------------------------
# POST /wagers
# ---------------------------------------------------------------------------
@router.post("/wagers")
def create_wager(
    body: WagerRequest,
    engine: Engine = Depends(get_engine),
    cfg: VaultrollConfig = Depends(get_config),
    rng: RandomSource = Depends(get_random),
):
    result = place_wager(engine, body.account_key, body.amount, cfg=cfg, rng=rng)
    return result.to_dict()


# ---------------------------------------------------------------------------
# POST /daily
# ---------------------------------------------------------------------------
@router.post("/daily")
def claim_daily(
    body: AllowanceRequest,
    engine: Engine = Depends(get_engine),
    cfg: VaultrollConfig = Depends(get_config),
):
    return claim_daily_allowance(engine, body.account_key, cfg=cfg).to_dict()
