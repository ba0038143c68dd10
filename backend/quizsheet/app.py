from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging

from . import config
from .routers import quiz_routers


@asynccontextmanager
async def lifespan(app: FastAPI):
    # run once when app starts
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger(__name__).info(
        "Quiz template: %s", config.QUIZ_TEMPLATE_PATH or "built-in header block"
    )
    yield

app = FastAPI(lifespan=lifespan)


# NOTE: origins come from CORS_ORIGINS (no trailing slash)
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,  # which sites can call this API
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(quiz_routers.router, prefix="/api")
