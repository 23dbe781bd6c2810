import logging

from dotenv import load_dotenv

# Load environment variables from .env file before app settings are read
load_dotenv()

from fastapi import FastAPI  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402

from app import config  # noqa: E402
from app.database.config import engine, Base  # noqa: E402
from app.middleware.timing import timing_middleware  # noqa: E402
from app.routes.bugs import router as bugs_router  # noqa: E402
from app.services.bug_store import build_bug_store  # noqa: E402
from contextlib import asynccontextmanager  # noqa: E402

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: Create tables (unless storage is in-memory) and the process-wide store
    if config.STORAGE_BACKEND != "memory":
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    app.state.bug_store = build_bug_store()
    if config.SEED_ON_STARTUP:
        await app.state.bug_store.seed_data()

    yield

    # Shutdown: Dispose of the engine
    await engine.dispose()

app = FastAPI(title="Bug Tracker", lifespan=lifespan)

app.middleware("http")(timing_middleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(levelname)s | %(name)s | %(message)s",
)

app.include_router(bugs_router)
