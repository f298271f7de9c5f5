import secrets

from fastapi import Request, Response
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from handwerk.config import get_settings
from handwerk.errors import Unauthorized, UpstreamError

COOKIE_NAME = "admin"


def _serializer() -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(get_settings().COOKIE_SECRET, salt="admin-v1")


def check_credentials(username: str, password: str) -> bool:
    settings = get_settings()
    if not settings.ADMIN_USERNAME or not settings.ADMIN_PASSWORD:
        raise UpstreamError("Admin credentials not configured")
    user_ok = secrets.compare_digest(username.encode(), settings.ADMIN_USERNAME.encode())
    pass_ok = secrets.compare_digest(password.encode(), settings.ADMIN_PASSWORD.encode())
    return user_ok and pass_ok


def login(response: Response) -> None:
    settings = get_settings()
    response.set_cookie(
        COOKIE_NAME,
        _serializer().dumps("1"),
        max_age=settings.COOKIE_MAX_AGE,
        httponly=True,
        samesite="lax",
        secure=settings.COOKIE_SECURE,
        path="/",
    )


def logout(response: Response) -> None:
    response.delete_cookie(COOKIE_NAME, path="/")


def is_authed(request: Request) -> bool:
    token = request.cookies.get(COOKIE_NAME)
    if not token:
        return False
    try:
        return _serializer().loads(token, max_age=get_settings().COOKIE_MAX_AGE) == "1"
    except (BadSignature, SignatureExpired):
        return False


def require_admin(request: Request) -> None:
    if not is_authed(request):
        raise Unauthorized("Unauthorized")
