# cart_service/api/errors.py
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from cart_service.domain.errors import CartBusyError, CartValidationError, NotFoundError
from cart_service.utils.logging import get_logger

logger = get_logger(__name__)


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": {"message": message, "statusCode": status_code}},
    )


def register_error_handlers(app: FastAPI) -> None:
    #busy osobno od walidacji, klient ma sie wycofac i sprobowac ponownie
    @app.exception_handler(CartBusyError)
    async def busy_handler(request: Request, exc: CartBusyError):
        return error_response(429, str(exc))

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError):
        return error_response(404, str(exc))

    @app.exception_handler(PermissionError)
    async def forbidden_handler(request: Request, exc: PermissionError):
        return error_response(403, str(exc))

    #tylko bledy domenowe, inne ValueError to blad serwera
    @app.exception_handler(CartValidationError)
    async def validation_handler(request: Request, exc: CartValidationError):
        return error_response(400, str(exc))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        message = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        return error_response(400, message)

    @app.exception_handler(StarletteHTTPException)
    async def http_handler(request: Request, exc: StarletteHTTPException):
        return error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def unhandled_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
        return error_response(500, "Internal server error")
