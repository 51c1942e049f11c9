"""
Account routes.

- POST /api/auth/signup       queue a signup, mail the confirmation link
- GET  /api/auth/confirm      consume the link, redirect to the client with a session token
- POST /api/auth/login        name or email + password
- GET  /api/auth/me           current profile
- GET  /api/auth/name-check   display name availability
"""
from typing import Optional
from urllib.parse import urlencode, urljoin

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import RedirectResponse
from pydantic import BaseModel

from placesapi.api.deps import get_account_store, get_mailer
from placesapi.core.auth import Session, get_current_session
from placesapi.core.config import settings
from placesapi.features.accounts.service import (
    confirm_signup,
    get_profile,
    login,
    name_available,
    request_signup,
)
from placesapi.features.mail.service import Mailer
from placesapi.features.storage.store import RecordStore

router = APIRouter(prefix="/api/auth", tags=["auth"])


class SignupRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(BaseModel):
    username: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None

    @property
    def identifier(self) -> Optional[str]:
        for value in (self.username, self.name, self.email):
            if value is not None:
                return value
        return None


def _client_url(request: Request, path: str) -> str:
    base = settings.CLIENT_URL or str(request.base_url)
    return urljoin(base if base.endswith("/") else base + "/", path.lstrip("/"))


@router.post("/signup")
def signup(
    body: SignupRequest,
    request: Request,
    store: RecordStore = Depends(get_account_store),
    mailer: Mailer = Depends(get_mailer),
):
    def confirm_url_for(token: str) -> str:
        return str(request.url_for("confirm_signup_endpoint").include_query_params(token=token))

    request_signup(store, mailer, body.name, body.email, body.password, confirm_url_for)
    return {"message": "Confirmation email sent. Please check your inbox."}


@router.get("/confirm", name="confirm_signup_endpoint")
def confirm(
    request: Request,
    token: Optional[str] = Query(None),
    store: RecordStore = Depends(get_account_store),
):
    user, session_token = confirm_signup(store, token)
    redirect = f"{_client_url(request, '/')}?{urlencode({'token': session_token})}"
    return RedirectResponse(redirect, status_code=302)


@router.post("/login")
def login_endpoint(body: LoginRequest, store: RecordStore = Depends(get_account_store)):
    user, token = login(store, body.identifier, body.password)
    return {
        "token": token,
        "user": {
            "name": user.name,
            "email": user.email,
            "plan": user.plan,
            "tokens": user.tokens,
        },
    }


@router.get("/me")
def me(session: Session = Depends(get_current_session), store: RecordStore = Depends(get_account_store)):
    return get_profile(store, session)


@router.get("/name-check")
def name_check(name: Optional[str] = Query(None), store: RecordStore = Depends(get_account_store)):
    return {"available": name_available(store, (name or "").strip())}
