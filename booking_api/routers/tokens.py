# booking_api/routers/tokens.py
from __future__ import annotations
from fastapi import APIRouter, Depends, Query
from typing import Optional

from .. import schemas
from ..services.tokens import TokenStore, get_token_store

router = APIRouter(prefix="", tags=["tokens"])


@router.get("/generate-token", response_model=schemas.TokenResponse)
def generate_token(
    phone: Optional[str] = Query(default=None),
    name: Optional[str] = Query(default=None),
    store: TokenStore = Depends(get_token_store),
):
    return schemas.TokenResponse(token=store.issue(phone, name))


@router.get("/validate-token", response_model=schemas.IdentityOut)
def validate_token(
    token: Optional[str] = Query(default=None),
    store: TokenStore = Depends(get_token_store),
):
    identity = store.redeem(token)
    return schemas.IdentityOut(phone=identity.phone, name=identity.name)
