from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, Field

from app.auth.router import get_current_user
from app.challenges.service import ChallengeStore
from app.db import Database, get_db
from app.errors import ValidationError

router = APIRouter(prefix="/challenges", tags=["challenges"])


class ChallengeRequest(BaseModel):
    title: str = Field(min_length=1)
    category: str
    plan: str


class ProofRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    day_index: int = Field(alias="dayIndex")
    image_base64: str = Field(alias="imageBase64", min_length=1)


def get_challenge_store(db: Database = Depends(get_db)) -> ChallengeStore:
    return ChallengeStore(db)


def parse_complete_filter(value: str | None) -> bool | None:
    """Coerce the ``isComplete`` query string to a boolean filter."""
    if value is None:
        return None
    lowered = value.strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    raise ValidationError("isComplete must be 'true' or 'false'")


@router.post("", status_code=201)
async def create_challenge(
    payload: ChallengeRequest,
    user: dict = Depends(get_current_user),
    store: ChallengeStore = Depends(get_challenge_store),
):
    challenge = store.create(user["id"], payload.title, payload.category, payload.plan)
    return challenge.to_dict()


@router.get("")
async def list_challenges(
    is_complete: str | None = Query(None, alias="isComplete"),
    user: dict = Depends(get_current_user),
    store: ChallengeStore = Depends(get_challenge_store),
):
    challenges = store.list_challenges(user["id"], parse_complete_filter(is_complete))
    return {"challenges": [c.to_dict() for c in challenges]}


@router.get("/{challenge_id}")
async def get_challenge(
    challenge_id: str,
    user: dict = Depends(get_current_user),
    store: ChallengeStore = Depends(get_challenge_store),
):
    return store.get(user["id"], challenge_id).to_dict()


@router.post("/{challenge_id}/proof")
async def upload_proof(
    challenge_id: str,
    payload: ProofRequest,
    user: dict = Depends(get_current_user),
    store: ChallengeStore = Depends(get_challenge_store),
):
    return store.upload_proof(user["id"], challenge_id, payload.day_index, payload.image_base64)


@router.post("/{challenge_id}/reset")
async def reset_challenge(
    challenge_id: str,
    user: dict = Depends(get_current_user),
    store: ChallengeStore = Depends(get_challenge_store),
):
    return store.reset(user["id"], challenge_id)


@router.post("/{challenge_id}/complete")
async def complete_challenge(
    challenge_id: str,
    user: dict = Depends(get_current_user),
    store: ChallengeStore = Depends(get_challenge_store),
):
    return store.complete(user["id"], challenge_id)


@router.get("/{challenge_id}/proof/{day_index}")
async def get_proof(
    challenge_id: str,
    day_index: int,
    user: dict = Depends(get_current_user),
    store: ChallengeStore = Depends(get_challenge_store),
):
    return store.get_proof(user["id"], challenge_id, day_index).to_dict()


@router.delete("/{challenge_id}")
async def delete_challenge(
    challenge_id: str,
    user: dict = Depends(get_current_user),
    store: ChallengeStore = Depends(get_challenge_store),
):
    return store.delete(user["id"], challenge_id)
