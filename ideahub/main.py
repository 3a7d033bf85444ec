import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ideahub.api import auth, billing, collab, dashboard, health, ideas, partnerships, users, wallet, webhooks
from ideahub.core.config import settings
from ideahub.utils.infrastructure import close_redis

log = logging.getLogger("ideahub")
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await close_redis()


app = FastAPI(title="Idea-HUB", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(ideas.router)
app.include_router(collab.router)
app.include_router(partnerships.router)
app.include_router(dashboard.router)
app.include_router(wallet.router)
app.include_router(billing.router)
app.include_router(webhooks.router)
