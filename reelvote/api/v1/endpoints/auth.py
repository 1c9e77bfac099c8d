"""Admin session endpoints."""
from fastapi import APIRouter, HTTPException, Request, Response

from reelvote.core import config
from reelvote.core.logging_config import get_logger
from reelvote.core.rate_limit import RATE_LIMITS, limiter
from reelvote.core.security import ADMIN_COOKIE, create_access_token, verify_admin_password
from reelvote.schemas import AdminLoginRequest, SuccessResponse

logger = get_logger(__name__)
router = APIRouter()


@router.post("/admin/login", response_model=SuccessResponse)
@limiter.limit(RATE_LIMITS["admin_write"])
async def admin_login(
    request: Request,
    credentials: AdminLoginRequest,
    response: Response
) -> SuccessResponse:
    """
    Authenticate the organizer and set the ``admin_token`` cookie.

    The cookie holds a JWT with ``is_admin`` set, is httpOnly with
    SameSite=Lax, and is only marked Secure in production. It expires after
    ``ACCESS_TOKEN_EXPIRE_MINUTES``.

    Raises:
        HTTPException: 401 if the password is wrong
    """
    if not verify_admin_password(credentials.password):
        logger.warning("admin_login_failed")
        raise HTTPException(status_code=401, detail="Invalid password")

    access_token = create_access_token(data={"is_admin": True})
    response.set_cookie(
        key=ADMIN_COOKIE,
        value=access_token,
        httponly=True,
        secure=config.settings.ENVIRONMENT == "production",
        samesite="lax",
        max_age=config.settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )

    logger.info("admin_logged_in")
    return SuccessResponse(success=True, message="Logged in successfully")


@router.post("/admin/logout", response_model=SuccessResponse)
async def admin_logout(response: Response) -> SuccessResponse:
    """Clear the admin cookie. Safe to call when not logged in."""
    response.delete_cookie(key=ADMIN_COOKIE)
    return SuccessResponse(success=True, message="Logged out successfully")
