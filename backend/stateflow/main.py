import logging
import time

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import OperationalError

from stateflow import __version__
from stateflow.api.routes import router
from stateflow.config import CORS_ORIGINS, DB_CONNECT_DELAY, DB_CONNECT_RETRIES, LOG_LEVEL
from stateflow.db.models import Base
from stateflow.db.session import engine

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("stateflow")

app = FastAPI(
    title="State Flow Visualizer",
    version=__version__,
)

# Middleware FIRST
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes AFTER middleware
app.include_router(router)


@app.on_event("startup")
def startup():
    for attempt in range(DB_CONNECT_RETRIES):
        try:
            Base.metadata.create_all(bind=engine)
            logger.info("[DB] Database connected")
            return
        except OperationalError:
            logger.warning(
                "[DB] Waiting for database... (%d/%d)", attempt + 1, DB_CONNECT_RETRIES
            )
            time.sleep(DB_CONNECT_DELAY)

    # Layout endpoints keep working without a store
    logger.error("[DB] Database not ready, running without persistence")
