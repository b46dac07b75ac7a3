from fastapi import APIRouter, Depends

from horplus.core.database import Store, get_store

router = APIRouter(tags=["health"])


@router.get("/health")
async def health():
    return {"status": "ok"}


@router.get("/health/db")
async def health_db(store: Store = Depends(get_store)):
    await store.ping()
    return {"status": "ok", "database": "connected"}
