from fastapi import APIRouter, Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, Field

from app.auth.service import CredentialStore
from app.auth.utils import decode_token
from app.config import Settings
from app.db import Database, get_db
from app.errors import Unauthenticated, Unauthorized

router = APIRouter(prefix="/auth", tags=["auth"])

bearer_scheme = HTTPBearer(auto_error=False)


class SignupRequest(BaseModel):
    nickname: str = Field(min_length=1)
    email: str = Field(min_length=1)
    pw: str = Field(min_length=1)


class LoginRequest(BaseModel):
    # Missing credentials are rejected as invalid, not as a malformed body
    email: str | None = None
    pw: str | None = None


class NicknameRequest(BaseModel):
    nickname: str


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_credential_store(request: Request, db: Database = Depends(get_db)) -> CredentialStore:
    return CredentialStore(db, request.app.state.settings, request.app.state.secret_key)


def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> dict:
    if not credentials or not credentials.credentials:
        raise Unauthenticated()

    settings = get_settings(request)
    payload = decode_token(credentials.credentials, request.app.state.secret_key, settings.jwt_algorithm)
    if not payload:
        raise Unauthorized()

    return {"id": payload["sub"], "email": payload.get("email")}


@router.post("/signup", status_code=201)
async def signup(payload: SignupRequest, store: CredentialStore = Depends(get_credential_store)):
    store.register(payload.nickname, payload.email, payload.pw)
    return {"message": "User registered"}


@router.post("/login")
async def login(payload: LoginRequest, store: CredentialStore = Depends(get_credential_store)):
    return store.authenticate(payload.email or "", payload.pw or "")


@router.get("/users")
async def get_user(
    user: dict = Depends(get_current_user),
    store: CredentialStore = Depends(get_credential_store),
):
    return store.get_profile(user["id"])


@router.post("/nickname")
async def update_nickname(
    payload: NicknameRequest,
    user: dict = Depends(get_current_user),
    store: CredentialStore = Depends(get_credential_store),
):
    return store.rename_user(user["id"], payload.nickname)
