from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.core.errors import register_exception_handlers
from app.db.init_db import create_all_tables
from app.middleware.request_logging import RequestLoggingMiddleware
from app.middleware.auth_logging import AuthLoggingMiddleware
from app.modules.auth.api.router import router as auth_router
from app.modules.user_management.api.router import router as user_router
from app.modules.posts.api.router import router as posts_router
from app.modules.posts.comments.api.router import router as comments_router
from app.modules.posts.likes.api.router import router as likes_router
from app.modules.follows.api.router import router as follows_router
from app.modules.media.router import router as media_router

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting server in {settings.ENVIRONMENT} mode")
    logger.info(f"BASE_URL: {settings.BASE_URL}")
    create_all_tables()
    yield


def create_app(create_tables: bool = True) -> FastAPI:
    application = FastAPI(
        title=settings.PROJECT_NAME,
        openapi_url=f"{settings.API_V1_STR}/openapi.json",
        debug=settings.DEBUG,
        description="Photo sharing feed: posts, likes, comments and follows",
        version=settings.VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan if create_tables else None,
    )
    register_exception_handlers(application)

    # Add middleware
    application.add_middleware(RequestLoggingMiddleware)
    application.add_middleware(AuthLoggingMiddleware)

    # Configure CORS
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register API routers
    application.include_router(auth_router, prefix=f"{settings.API_V1_STR}/auth", tags=["auth"])
    application.include_router(user_router, prefix=f"{settings.API_V1_STR}/users", tags=["users"])
    application.include_router(posts_router, prefix=f"{settings.API_V1_STR}/posts", tags=["posts"])
    application.include_router(comments_router, prefix=f"{settings.API_V1_STR}/comments", tags=["comments"])
    application.include_router(likes_router, prefix=f"{settings.API_V1_STR}/likes", tags=["likes"])
    application.include_router(follows_router, prefix=f"{settings.API_V1_STR}/follows", tags=["follows"])
    application.include_router(media_router, prefix=f"{settings.API_V1_STR}/media", tags=["media"])

    @application.get("/")
    async def root():
        return {
            "message": "Welcome to Snapgram",
            "version": settings.VERSION,
            "environment": settings.ENVIRONMENT,
            "documentation": "/docs" if settings.DEBUG else None,
        }

    return application


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=True)
