import logging

from fastapi import APIRouter, Depends, HTTPException, status, Response
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from config import ACCESS_TOKEN_EXPIRE_MINUTES, APP_ENV
from app.api.auth import ACCESS_TOKEN_COOKIE
from app.crud import user as crud_user
from app.database import get_db
from app.models.user import User
from app.schemas.user import UserLogin, LoginResponse
from app.utils.utils import verify_password, create_access_token

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _authenticate(db: Session, email: str, password: str) -> User:
    user = crud_user.get_user_by_email(db, email=email)
    if not user or not verify_password(password, user.password):
        logger.warning("Login failed for a submitted email")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def _issue_token(response: Response, user: User) -> dict:
    access_token = create_access_token(user.id, user.email)

    # Set cookie for browser-based access
    response.set_cookie(
        key=ACCESS_TOKEN_COOKIE,
        value=access_token,
        httponly=True,
        max_age=ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        samesite="lax",
        secure=APP_ENV == "production",
    )

    return {"access_token": access_token, "token_type": "bearer", "user": user}


@router.post("/login", response_model=LoginResponse)
def login(response: Response, login_data: UserLogin, db: Session = Depends(get_db)):
    """
    JSON login. Returns a bearer token for the Authorization header.
    """
    user = _authenticate(db, login_data.email, login_data.password)
    return _issue_token(response, user)


@router.post("/token", response_model=LoginResponse)
def login_for_access_token(
    response: Response,
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db)
):
    """
    OAuth2 compatible token login (form data), used by the interactive docs.
    """
    user = _authenticate(db, form_data.username, form_data.password)
    return _issue_token(response, user)


@router.post("/logout")
def logout(response: Response):
    response.delete_cookie(ACCESS_TOKEN_COOKIE)
    return {"message": "Logged out successfully"}
