import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from app.config import get_settings
from app.database import init_db
from app.rate_limit import limiter
from app.moderation.admin_router import router as moderation_admin_router
from app.notifications.router import router as notifications_router
from app.reports.admin_router import router as reports_admin_router
from app.reports.router import router as reports_router
from app.social_graph.admin_router import router as social_admin_router
from app.social_graph.router import router as social_router
from app.standing.admin_router import router as standing_admin_router
from app.standing.internal_router import router as standing_internal_router
from shared.middleware.error_handler import error_envelope_middleware, install_error_handlers
from shared.middleware.request_id import RequestIdLogFilter, request_id_middleware

logging.basicConfig(
    level=get_settings().log_level,
    format="%(levelname)s:%(name)s:[%(request_id)s] %(message)s",
)
for _handler in logging.getLogger().handlers:
    _handler.addFilter(RequestIdLogFilter())


# ── OpenAPI metadata ──────────────────────────────────────────────────────────

_DESCRIPTION = """
## Encore Trust & Moderation Service

Keeps the musician community safe and the social graph consistent:

* **Reports** — users report songs, albums, playlists, comments or profiles. One active
  report per item; new reports go to the least-loaded admin automatically.
* **Resolution** — admins close reports with `none`, `warning`, `remove_content`,
  `suspend_user` or `ban_user`. Removing content costs the owner a life; at zero lives
  the account is banned automatically.
* **Account standing** — suspensions (timed or indefinite, expire lazily at the next
  login / upload check), bans, lives, reactivation and the conduct log.
* **Blocks** — blocking tears down friendship and follow edges both ways, recounts
  follower counters and hides notifications between the two users, atomically.

### Authentication
All protected endpoints require:
```
Authorization: Bearer <access_token>
```
Admin endpoints additionally require the `admin` or `super_admin` role in the token.
Internal endpoints expect the shared `X-Internal-Token` header.

### Error shape
All errors return a consistent JSON envelope:
```json
{ "error": { "code": "conflict", "message": "Human-readable message" }, "request_id": "..." }
```
`code` is one of `validation_error`, `not_found`, `conflict`, `forbidden`,
`policy_violation` (plus `unauthorized`, `rate_limited` and `internal_error`).
"""

_TAGS_METADATA = [
    {
        "name": "reports",
        "description": "Submit reports and follow their status. Reports are confidential.",
    },
    {
        "name": "admin-reports",
        "description": (
            "**Admin only.** Report queue, statistics, priority, open / reject, and "
            "reassignment (super admin)."
        ),
    },
    {
        "name": "admin-moderation",
        "description": "**Admin only.** Resolve reports and retry failed content removals.",
    },
    {
        "name": "admin-standing",
        "description": (
            "**Admin only.** Suspend, ban, reactivate, manage lives and read the conduct "
            "history of user accounts. Administrators cannot be moderated."
        ),
    },
    {
        "name": "social-graph",
        "description": "Blocks and follows. A block removes every social edge between two users.",
    },
    {
        "name": "admin-social-graph",
        "description": "**Super admin only.** Recompute denormalised follower counters.",
    },
    {
        "name": "notifications",
        "description": "The authenticated user's notifications, including moderation notices.",
    },
    {
        "name": "internal-standing",
        "description": "**Service-to-service.** Login and upload standing checks.",
    },
]


# ── Health schema ─────────────────────────────────────────────────────────────

class HealthResponse(BaseModel):
    status: str
    service: str


# ── App factory ───────────────────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    init_db(settings.trust_database_url)
    yield


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(
        title="Encore Trust & Moderation Service",
        version="1.0.0",
        description=_DESCRIPTION,
        openapi_tags=_TAGS_METADATA,
        # Interactive docs are not served in production.
        docs_url=None if settings.env_name == "production" else "/docs",
        redoc_url=None if settings.env_name == "production" else "/redoc",
        lifespan=lifespan,
    )

    # Attach rate limiter state before middleware
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    install_error_handlers(app)

    # Middleware is applied in reverse-registration order (last added = outermost).
    # CORS must be outermost so ALL responses (including 429s) carry CORS headers.
    app.add_middleware(SlowAPIMiddleware)
    app.middleware("http")(error_envelope_middleware)
    app.middleware("http")(request_id_middleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        max_age=600,
    )

    app.include_router(reports_router, prefix="/api/v1")
    app.include_router(reports_admin_router, prefix="/api/v1")
    app.include_router(moderation_admin_router, prefix="/api/v1")
    app.include_router(standing_admin_router, prefix="/api/v1")
    app.include_router(standing_internal_router, prefix="/api/v1")
    app.include_router(social_router, prefix="/api/v1")
    app.include_router(social_admin_router, prefix="/api/v1")
    app.include_router(notifications_router, prefix="/api/v1")

    @app.get("/health", response_model=HealthResponse, tags=["health"], include_in_schema=True)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", service="trust")

    return app


app = create_app()
