from fastapi import APIRouter, Request, Response

from handwerk import auth
from handwerk.errors import Unauthorized
from handwerk.schemas import AuthStatus, LoginRequest, OkResponse

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/login", response_model=OkResponse)
async def login(body: LoginRequest, response: Response):
    if not auth.check_credentials(body.username, body.password):
        raise Unauthorized("Invalid credentials")
    auth.login(response)
    return OkResponse()


@router.post("/logout", response_model=OkResponse)
async def logout(response: Response):
    auth.logout(response)
    return OkResponse()


@router.get("/me", response_model=AuthStatus)
async def me(request: Request):
    return AuthStatus(authed=auth.is_authed(request))
