from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from supplier_api.schemas.problem import ValidationProblem
from supplier_api.services.exceptions import (
    DomainValidationError,
    IdentityError,
    ResourceNotFoundError,
    ServiceError,
)


def validation_problem(errors: dict[str, list[str]]) -> JSONResponse:
    body = ValidationProblem(errors=errors)
    return JSONResponse(status_code=400, content=body.model_dump())


def _request_errors(exc: RequestValidationError) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        field = ".".join(loc) or "body"
        errors.setdefault(field, []).append(str(error.get("msg", "Invalid value")))
    return errors


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(_: Request, exc: RequestValidationError) -> JSONResponse:
        return validation_problem(_request_errors(exc))

    @app.exception_handler(DomainValidationError)
    async def handle_validation(_: Request, exc: DomainValidationError) -> JSONResponse:
        return validation_problem(exc.errors)

    @app.exception_handler(ResourceNotFoundError)
    async def handle_not_found(_: Request, exc: ResourceNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": exc.detail})

    @app.exception_handler(IdentityError)
    async def handle_identity(_: Request, exc: IdentityError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content=jsonable_encoder({"detail": exc.detail, "errors": exc.errors}),
        )

    @app.exception_handler(ServiceError)
    async def handle_service_error(_: Request, exc: ServiceError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": exc.detail})
