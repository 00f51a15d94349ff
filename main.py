from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import get_config
from db import init_database, close_database
from routes.ai_routes import router as ai_router
from routes.auth_routes import router as auth_router
from routes.chats_routes import router as chats_router
from routes.events_routes import router as events_router
from routes.health_routes import router as health_router
from routes.notifications_routes import router as notifications_router
from routes.oauth_google_routes import router as oauth_google_router
from routes.products_routes import router as products_router
from routes.profiles_routes import router as profiles_router
from routes.wishlist_routes import router as wishlist_router
from services.events_service import start_event_hub, stop_event_hub
from utils.logging_ut import setup_logging

logger = setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_database()
    await start_event_hub()
    logger.info("Bazaar started (env=%s)", get_config()["APP_ENV"])
    try:
        yield
    finally:
        await stop_event_hub()
        await close_database()


cfg = get_config()
app = FastAPI(title="bazaar", version="1.0.0", lifespan=lifespan)

allow_origins = cfg["CORS_ORIGINS"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    ## Credentials only with an explicit origin list
    allow_credentials=allow_origins != ["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router, tags=["health"])

## Sign-in
app.include_router(auth_router, prefix="/auth", tags=["auth"])
app.include_router(oauth_google_router, tags=["oauth"])

## Marketplace API (JSON)
app.include_router(products_router, prefix="/api", tags=["products"])
app.include_router(wishlist_router, prefix="/api", tags=["wishlist"])
app.include_router(chats_router, prefix="/api", tags=["chats"])
app.include_router(notifications_router, prefix="/api", tags=["notifications"])
app.include_router(profiles_router, prefix="/api", tags=["profiles"])
app.include_router(ai_router, prefix="/api", tags=["ai"])
app.include_router(events_router, prefix="/api", tags=["events"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=cfg["PORT"])
