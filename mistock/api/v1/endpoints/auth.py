from fastapi import APIRouter, Depends

from mistock.core.auth import get_current_actor
from mistock.models.user import Actor, ActorResponse, can_unlock

router = APIRouter()


@router.get("/me", response_model=ActorResponse)
async def get_me(actor: Actor = Depends(get_current_actor)):
    """Who the bearer token says you are, and what you may approve"""
    return ActorResponse(
        email=actor.email,
        full_name=actor.full_name,
        role=actor.role,
        can_unlock=can_unlock(actor.role)
    )
