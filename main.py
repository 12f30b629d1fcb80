import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core.database import engine
from core.errors import SwipeMatchError
from models.base import Base
# Импорты моделей регистрируют таблицы в Base.metadata
from models.room import Room  # noqa: F401
from models.member import Member  # noqa: F401
from models.swipe import Swipe  # noqa: F401
from models.match import Match  # noqa: F401

from routers.rooms import router as rooms_router
from routers.swipes import router as swipes_router
from routers.health import router as health_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Сначала создаём все таблицы
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    # Закрываем все соединения пула
    await engine.dispose()


app = FastAPI(
    lifespan=lifespan,
    title="SwipeMatch Backend",
    version="0.1.0",
    description="Комнаты для совместного выбора фильма свайпами",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],        # Или список ваших фронтенд-адресов
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],        # Content-Type, X-Session-Id и др.
)

logger = logging.getLogger("uvicorn.error")


@app.middleware("http")
async def log_request_time(request: Request, call_next):
    start_time = time.perf_counter()
    response = await call_next(request)
    process_time = (time.perf_counter() - start_time) * 1000
    logger.info(
        f"{request.method} {request.url.path} completed in {process_time:.2f} ms"
    )
    return response


@app.exception_handler(SwipeMatchError)
async def swipe_match_error_handler(request: Request, exc: SwipeMatchError):
    logger.info(f"{request.method} {request.url.path} rejected: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


app.include_router(rooms_router)
app.include_router(swipes_router)
app.include_router(health_router)


@app.get("/")
async def root():
    return {"message": "SwipeMatch Backend"}

