"""
vaultroll.api.routes.accounts — Account registration and lookup
================================================================

``POST /accounts`` is called by the identity glue once it has verified a
player with the messaging platform.  Verification itself happens upstream.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field
from sqlalchemy import Engine

from vaultroll.api.deps import get_config, get_engine
from vaultroll.config import VaultrollConfig
from vaultroll.services.account_service import get_account_summary, register_account

router = APIRouter(prefix="/accounts", tags=["accounts"])


class RegisterRequest(BaseModel):
    account_key: str = Field(min_length=1, max_length=64)
    first_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
    username: str | None = Field(default=None, max_length=100)
    language_code: str | None = Field(default=None, max_length=16)
    is_premium: bool = False


@router.post("")
def register(
    body: RegisterRequest,
    response: Response,
    engine: Engine = Depends(get_engine),
):
    account, created = register_account(
        engine,
        body.account_key,
        first_name=body.first_name,
        last_name=body.last_name,
        username=body.username,
        language_code=body.language_code,
        is_premium=body.is_premium,
    )
    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return {
        "account_key": account.account_key,
        "first_name": account.first_name,
        "username": account.username,
        "balance": account.balance,
        "created": created,
    }


@router.get("/{account_key}")
def read_account(
    account_key: str,
    engine: Engine = Depends(get_engine),
    cfg: VaultrollConfig = Depends(get_config),
):
    return get_account_summary(engine, account_key, cfg=cfg).to_dict()
