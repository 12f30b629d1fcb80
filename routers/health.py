# routers/health.py
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from core.database import get_db, read_guard

router = APIRouter()


@router.get("/health", summary="Health check")
async def healthcheck(db: AsyncSession = Depends(get_db)):
    async with read_guard(db):
        await db.execute(text("SELECT 1"))
    return {"status": "ok", "database": "ok"}
