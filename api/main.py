"""
FastAPI application initialization and configuration.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core.config import settings
from core.sessions import SessionStore
from database.engine import Base, init_db, close_db
from database.errors import constraint_registry
from database.storage.policies import load_authorization_rules
from api.routes import health
from api.routes.v1 import (
    sessions,
    tenants,
    users,
    policies,
    job_requisitions,
    job_applications,
)

# Import middleware components
from core.middleware import (
    ErrorHandlingMiddleware,
    setup_error_handlers,
    StructuredLoggingMiddleware,
    setup_logging,
    AuthenticationMiddleware,
    PolicyCache,
)

# Setup structured logging (do this first, before anything else)
setup_logging(
    log_level=settings.log_level,
    json_logs=settings.json_logs,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan events."""
    # Startup
    logger.info(f"Starting {settings.app_name} in {settings.app_env} environment")
    await init_db()
    constraint_registry.load(Base.metadata)

    app.state.session_store = SessionStore()
    await app.state.session_store.init()

    app.state.policy_cache = PolicyCache(load_authorization_rules)
    await app.state.policy_cache.reload()

    yield

    # Shutdown
    logger.info(f"Shutting down {settings.app_name}")
    await app.state.session_store.close()
    await close_db()


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Multi-tenant HR information system",
    version="0.1.0",
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    lifespan=lifespan,
)

# Setup error handlers (before middleware)
setup_error_handlers(app)

# Add middleware (order matters - the last one added is the outermost)
# 1. Authentication middleware (resolves the session cookie)
app.add_middleware(AuthenticationMiddleware)

# 2. Error handling middleware (catches anything the handlers did not)
app.add_middleware(
    ErrorHandlingMiddleware,
    debug=settings.debug,
)

# 3. Structured logging middleware (request ids, REQUEST-COMPLETED)
app.add_middleware(
    StructuredLoggingMiddleware,
    log_request_body=settings.log_request_body,
    max_body_size=settings.log_max_body_size,
)

# 4. CORS middleware (outermost)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Health check routes
app.include_router(health.router, tags=["Health"])

# API routes
for router in (
    sessions.router,
    tenants.router,
    users.router,
    policies.router,
    job_requisitions.router,
    job_applications.router,
):
    app.include_router(router, prefix=settings.api_prefix)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
