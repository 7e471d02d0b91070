import logging
from typing import Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import RedirectResponse
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import PyMongoError

from devboard.config import settings
from devboard.database.mongo import get_db
from devboard.services.github.exceptions import GithubOAuthError
from devboard.services.github.github_oauth import (
    SUPPORTED_PROVIDERS,
    build_authorize_url,
    create_oauth_state,
    exchange_code_for_token,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


def _require_provider(provider: str) -> None:
    if provider not in SUPPORTED_PROVIDERS:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unsupported identity provider: {provider}",
        )


def _success_redirect(username: str) -> str:
    target = settings.FRONTEND_SUCCESS_URL
    sep = "&" if "?" in target else "?"
    return f"{target}{sep}{urlencode({'username': username})}"


def _failure_redirect() -> RedirectResponse:
    return RedirectResponse(url=settings.FRONTEND_FAILURE_URL, status_code=status.HTTP_302_FOUND)


@router.get("/{provider}")
async def begin_login(provider: str, db: AsyncDatabase = Depends(get_db)):
    """Start the OAuth flow by redirecting to the provider's consent page."""
    _require_provider(provider)
    oauth_state = await create_oauth_state(db)
    return RedirectResponse(
        url=build_authorize_url(oauth_state.state), status_code=status.HTTP_302_FOUND
    )


@router.get("/{provider}/callback")
async def oauth_callback(
    provider: str,
    code: Optional[str] = Query(None, description="GitHub authorization code"),
    state: Optional[str] = Query(None, description="OAuth state token"),
    error: Optional[str] = Query(None),
    db: AsyncDatabase = Depends(get_db),
):
    """Finish OAuth, upsert the user record and send the browser back to the frontend."""
    _require_provider(provider)
    if error or not code or not state:
        logger.warning("OAuth callback rejected: error=%s code_present=%s", error, bool(code))
        return _failure_redirect()

    try:
        user = await exchange_code_for_token(db, code=code, state=state)
    except GithubOAuthError as exc:
        logger.warning("OAuth login failed: %s", exc)
        return _failure_redirect()
    except PyMongoError as exc:
        logger.error("OAuth login could not be stored: %s", exc)
        return _failure_redirect()

    return RedirectResponse(
        url=_success_redirect(user.username), status_code=status.HTTP_302_FOUND
    )
