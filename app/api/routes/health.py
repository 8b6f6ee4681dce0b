from fastapi import APIRouter, Request

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check(request: Request):
    """Simple health endpoint for monitoring."""
    database = getattr(request.app.state, "database", None)
    db_ok = await database.ping() if database is not None else False
    return {"status": "healthy", "db_ok": db_ok}
