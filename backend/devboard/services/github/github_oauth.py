"""GitHub OAuth helper utilities (MongoDB)."""

from __future__ import annotations

import logging
from urllib.parse import urlencode

import httpx
from pymongo.asynchronous.database import AsyncDatabase

from devboard.config import settings
from devboard.entities.oauth_state import OAuthState
from devboard.entities.user import UserRecord
from devboard.repositories.oauth_state import OAuthStateRepository
from devboard.services.github.exceptions import GithubError, GithubOAuthError
from devboard.services.github.github_client import GitHubClient
from devboard.services.user_service import record_login

GITHUB_AUTHORIZE_URL = "https://github.com/login/oauth/authorize"
GITHUB_TOKEN_URL = "https://github.com/login/oauth/access_token"

SUPPORTED_PROVIDERS = {"github"}

logger = logging.getLogger(__name__)


def build_authorize_url(state: str) -> str:
    query = urlencode(
        {
            "client_id": settings.GITHUB_CLIENT_ID,
            "redirect_uri": settings.GITHUB_CALLBACK_URL,
            "scope": " ".join(settings.GITHUB_SCOPES),
            "state": state,
        }
    )
    return f"{GITHUB_AUTHORIZE_URL}?{query}"


async def create_oauth_state(db: AsyncDatabase) -> OAuthState:
    return await OAuthStateRepository(db).create_state(provider="github")


async def _exchange_code(code: str, state: str) -> str:
    try:
        async with httpx.AsyncClient(timeout=10) as client:
            token_response = await client.post(
                GITHUB_TOKEN_URL,
                headers={"Accept": "application/json"},
                data={
                    "client_id": settings.GITHUB_CLIENT_ID,
                    "client_secret": settings.GITHUB_CLIENT_SECRET,
                    "code": code,
                    "redirect_uri": settings.GITHUB_CALLBACK_URL,
                    "state": state,
                },
            )
        token_response.raise_for_status()
    except httpx.HTTPError as exc:
        raise GithubOAuthError(f"Token exchange failed: {exc}") from exc

    token_data = token_response.json()
    access_token = token_data.get("access_token")
    if not access_token:
        error_details = (
            token_data.get("error_description") or token_data.get("error") or str(token_data)
        )
        raise GithubOAuthError(f"GitHub did not return an access token. Error: {error_details}")
    return access_token


async def exchange_code_for_token(db: AsyncDatabase, code: str, state: str) -> UserRecord:
    """
    Complete the OAuth callback: consume the state, trade the code for a
    token, read the GitHub profile and upsert the user record.
    """
    oauth_state = await OAuthStateRepository(db).consume_state(state, provider="github")
    if not oauth_state:
        raise GithubOAuthError("Invalid or expired OAuth state")

    access_token = await _exchange_code(code, state)

    try:
        async with GitHubClient(token=access_token) as client:
            user_data = await client.get_authenticated_user()
    except GithubError as exc:
        raise GithubOAuthError(f"Failed to read GitHub profile: {exc}") from exc

    login = user_data.get("login")
    github_user_id = user_data.get("id")
    if not login or github_user_id is None:
        raise GithubOAuthError("GitHub did not return a login and user id")

    return await record_login(
        db,
        username=login,
        github_id=str(github_user_id),
        display_name=user_data.get("name") or login,
        avatar_url=user_data.get("avatar_url"),
        access_token=access_token,
    )
