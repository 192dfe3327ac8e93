"""Player registration and lookup endpoints."""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, HTTPException

from ...models import Identity
from ...services import IdentityStore
from ..dependencies import get_identity_store

router = APIRouter(tags=["users"])


def identity_to_dict(identity: Identity) -> Dict[str, Any]:
    return {"id": identity.id, "username": identity.username}


@router.post("/register")
def register(
    body: Optional[Dict[str, Any]] = Body(default=None),
    identities: IdentityStore = Depends(get_identity_store),
):
    """Register a username, or return the existing identity for it."""

    identity = identities.register((body or {}).get("username"))
    return identity_to_dict(identity)


@router.get("/users/{username}")
def get_user(username: str, identities: IdentityStore = Depends(get_identity_store)):
    identity = identities.get_by_username(username)
    if not identity:
        raise HTTPException(404, "User not found")
    return identity_to_dict(identity)


__all__ = ["router", "identity_to_dict"]
