"""Shared API dependencies: API key, caller context and domain error mapping."""
import logging
import secrets
from typing import Optional

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from ..config import Settings, get_settings
from ..context import RequestContext, require_team_member
from ..database import get_db
from ..errors import EntityNotFoundError, LaboroboError, PermissionDeniedError

logger = logging.getLogger("laborobo-core.api")


def http_error(error: LaboroboError) -> HTTPException:
    """Map a domain error to an HTTP error response."""
    if isinstance(error, PermissionDeniedError):
        return HTTPException(status_code=403, detail=str(error))
    if isinstance(error, EntityNotFoundError):
        return HTTPException(status_code=404, detail=str(error))
    return HTTPException(status_code=400, detail=str(error))


def verify_api_key(
    x_api_key: Optional[str] = Header(None, alias="X-API-Key", description="Shared API key"),
    settings: Settings = Depends(get_settings),
) -> None:
    """
    Require the configured API key, if any.

    Raises:
        HTTPException: 401 if a key is configured and the header is missing or wrong
    """
    if not settings.api_key:
        return
    if x_api_key is None or not secrets.compare_digest(x_api_key, settings.api_key):
        logger.warning("Rejected request with missing or invalid API key")
        raise HTTPException(status_code=401, detail="Invalid or missing API key")


def get_request_context(
    x_user_id: int = Header(..., alias="X-User-Id", description="Calling user ID"),
    x_team_id: int = Header(..., alias="X-Team-Id", description="Current team ID"),
    _api_key: None = Depends(verify_api_key),
    db: Session = Depends(get_db),
) -> RequestContext:
    """
    Build the caller context from request headers.

    Raises:
        HTTPException: 404 if the team does not exist, 403 if the user is not a member
    """
    context = RequestContext(team_id=x_team_id, user_id=x_user_id)
    try:
        require_team_member(db, context)
    except LaboroboError as e:
        logger.warning(f"Rejected request context: {e}")
        raise http_error(e)
    return context
