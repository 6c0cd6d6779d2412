from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from gcp.backend import Backend, get_backend

router = APIRouter()


@router.get("/increment-visitor")
async def increment_visitor(backend: Backend = Depends(get_backend)):
    result = backend.metrics.increment_visitors()
    if not result.success:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": result.error}
        )
    return {"count": result.data}
