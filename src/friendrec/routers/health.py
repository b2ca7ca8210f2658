from fastapi import APIRouter, Request
from pydantic import BaseModel

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    status: str
    store_backend: str | None = None


@router.get("/health", response_model=HealthResponse, status_code=200)
async def healthcheck(request: Request):
    backend = getattr(request.app.state, "store_backend", None)
    return {"status": "ok", "store_backend": backend}
