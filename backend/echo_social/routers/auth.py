"""Registration and login routes."""

from fastapi import APIRouter, Depends, Header, HTTPException
from sqlalchemy.orm import Session

from echo_social.context import ServerContext
from echo_social.db.dependencies import get_context, get_db
from echo_social.schemas.common import StatusMessage
from echo_social.schemas.user import AuthResult, LoginRequest, UserCreate, UserRead
from echo_social.services.users import authenticate, create_user

router = APIRouter(prefix="/auth")


@router.post("/register", response_model=AuthResult, status_code=201)
def register(
    payload: UserCreate,
    db: Session = Depends(get_db),
    context: ServerContext = Depends(get_context),
) -> AuthResult:
    """Create an account and open a session for it."""

    user = create_user(db, payload)
    return AuthResult(user=UserRead.model_validate(user), token=context.sessions.issue(user.id))


@router.post("/login", response_model=AuthResult)
def login(
    payload: LoginRequest,
    db: Session = Depends(get_db),
    context: ServerContext = Depends(get_context),
) -> AuthResult:
    """Check credentials and issue the token used to authenticate the realtime channel."""

    user = authenticate(db, payload.username, payload.password)
    if user is None:
        raise HTTPException(status_code=401, detail="Invalid username or password")
    return AuthResult(user=UserRead.model_validate(user), token=context.sessions.issue(user.id))


@router.post("/logout", response_model=StatusMessage)
def logout(
    authorization: str | None = Header(default=None),
    context: ServerContext = Depends(get_context),
) -> StatusMessage:
    """Revoke the bearer token sent in the Authorization header."""

    token = (authorization or "").removeprefix("Bearer ").strip()
    if not token or not context.sessions.revoke(token):
        raise HTTPException(status_code=401, detail="Not logged in")
    return StatusMessage(message="Logged out")
