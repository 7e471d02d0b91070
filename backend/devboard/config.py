from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "DevBoard Leaderboard API"
    APP_VERSION: str = "1.0.0"
    ENV: str = "dev"  # Environment: "dev", "staging", "prod"
    PORT: int = 5000
    ALLOWED_ORIGINS: List[str] = ["*"]

    # Database (MongoDB)
    MONGODB_URI: str = "mongodb://localhost:27017"
    MONGODB_DB_NAME: str = "devboard"
    MONGODB_SERVICE_ACCOUNT: Optional[str] = None  # JSON credential, see database.mongo

    # GitHub OAuth
    GITHUB_CLIENT_ID: str
    GITHUB_CLIENT_SECRET: str
    GITHUB_CALLBACK_URL: str = "http://localhost:5000/auth/github/callback"
    GITHUB_SCOPES: List[str] = ["user", "repo"]

    # GitHub REST
    GITHUB_API_URL: str = "https://api.github.com"
    GITHUB_TOKEN: Optional[str] = None  # Used when a user has no stored token
    GITHUB_HTTP_TIMEOUT: float = 20.0
    GITHUB_PAGE_SIZE: int = 100

    # --- Throttling (seconds slept between sequential GitHub calls) ---
    PAGINATION_DELAY_SECONDS: float = 0.1  # Between page fetches
    COMMIT_FETCH_DELAY_SECONDS: float = 0.2  # Between per-repo commit counts
    QUICK_SCAN_DELAY_SECONDS: float = 0.05  # Pagination in quick mode
    QUICK_SCAN_EVENT_PAGES: int = 1  # Event feed pages read in quick mode
    FULL_SCAN_TIMEOUT_SECONDS: Optional[float] = None  # None = unbounded

    # Frontend redirects
    FRONTEND_SUCCESS_URL: str = "http://localhost:3000/"
    FRONTEND_FAILURE_URL: str = "http://localhost:3000/"

    # Operational
    ENABLE_DEBUG_ROUTES: bool = False
    KEEPALIVE_URL: Optional[str] = None
    KEEPALIVE_INTERVAL_SECONDS: float = 600.0

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
