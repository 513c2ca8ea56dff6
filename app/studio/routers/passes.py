from fastapi import APIRouter, Depends, Request

from app.core.dependencies import get_store
from app.core.limits import limiter
from app.core.store import StudioStore
from app.studio.models.passes import PassDefinition
from app.studio.schemas.passes import PassListResponse

router = APIRouter(prefix="/passes", tags=["Passes"])


@router.get("/", response_model=PassListResponse)
@limiter.limit("60/minute")
async def get_passes(request: Request, store: StudioStore = Depends(get_store)):
    """Pass catalog (read-only)."""
    passes = store.catalog.all()
    return PassListResponse(passes=passes, total=len(passes))


@router.get("/{pass_id}", response_model=PassDefinition)
@limiter.limit("60/minute")
async def get_pass(request: Request, pass_id: str, store: StudioStore = Depends(get_store)):
    return store.catalog.get(pass_id)
