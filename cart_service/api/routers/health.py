from fastapi import APIRouter, Request

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(request: Request):
    state = request.app.state
    return {
        "status": "ok",
        "service": "cart",
        # fallback = lock/cache tylko w pamieci procesu, bez wykluczania miedzy instancjami
        "lock_backend": "memory" if state.lock_service.fallback_mode else "redis",
        "cache_backend": "memory" if state.cache.fallback_mode else "redis",
    }
