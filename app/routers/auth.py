from typing import Any, Callable, Dict, Type

from fastapi import APIRouter, Depends, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

from app.core.exceptions import ProviderError
from app.deps.identity import get_identity_gateway
from app.schemas.auth import (
    ErrorResponse,
    RegistrationRequest,
    SessionCredentials,
    SessionValidationRequest,
    SessionValidationResult,
    SignInRequest,
)
from app.services.identity_service import (
    INCORRECT_SIGN_IN,
    IdentityGateway,
    is_error,
)

router = APIRouter(prefix="/user", tags=["user"])

_FORM_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


def parsed_body(model: Type[BaseModel]) -> Callable:
    """
    Acepta el body como JSON o como formulario url-encoded y lo valida con `model`.
    """
    async def dependency(request: Request) -> BaseModel:
        content_type = request.headers.get("content-type", "")
        if content_type.startswith(_FORM_TYPES):
            payload: Any = dict(await request.form())
        else:
            try:
                payload = await request.json()
            except ValueError:
                raise RequestValidationError(
                    [{"type": "json_invalid", "loc": ("body",), "msg": "JSON decode error", "input": None}]
                )
        try:
            return model.model_validate(payload)
        except ValidationError as e:
            raise RequestValidationError(
                [{**err, "loc": ("body", *err["loc"])} for err in e.errors(include_url=False, include_context=False)]
            )

    return dependency


_STATUS_BY_CODE = {
    "auth/email-already-exists": status.HTTP_409_CONFLICT,
    "auth/uid-already-exists": status.HTTP_409_CONFLICT,
    "auth/id-token-revoked": status.HTTP_401_UNAUTHORIZED,
    "auth/id-token-expired": status.HTTP_401_UNAUTHORIZED,
    "auth/invalid-id-token": status.HTTP_401_UNAUTHORIZED,
    "auth/user-disabled": status.HTTP_401_UNAUTHORIZED,
    "auth/invalid-credential": status.HTTP_401_UNAUTHORIZED,
    "auth/user-not-found": status.HTTP_401_UNAUTHORIZED,
    "auth/invalid-user-token": status.HTTP_401_UNAUTHORIZED,
    "auth/invalid-email": status.HTTP_400_BAD_REQUEST,
    "auth/invalid-argument": status.HTTP_400_BAD_REQUEST,
    "auth/invalid-password": status.HTTP_400_BAD_REQUEST,
    "auth/weak-password": status.HTTP_400_BAD_REQUEST,
    "auth/missing-password": status.HTTP_400_BAD_REQUEST,
    "auth/too-many-requests": status.HTTP_429_TOO_MANY_REQUESTS,
}


def _serialize(value: Any) -> Any:
    # Los errores del proveedor solo salen como {code, message}
    if isinstance(value, ProviderError):
        return value.to_dict()
    return value


def _error_response(result: Dict[str, Any]) -> JSONResponse:
    error = result["error"]
    raw = result.get("errorRaw", error)

    if error == INCORRECT_SIGN_IN:
        status_code = status.HTTP_401_UNAUTHORIZED
    elif isinstance(raw, ProviderError):
        status_code = _STATUS_BY_CODE.get(raw.code, status.HTTP_500_INTERNAL_SERVER_ERROR)
    else:
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    body = {"error": _serialize(error)}
    if "errorRaw" in result:
        body["errorRaw"] = _serialize(result["errorRaw"])
    return JSONResponse(status_code=status_code, content=body)


@router.post(
    "/sign-up",
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 409: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def sign_up(
    body: RegistrationRequest = Depends(parsed_body(RegistrationRequest)),
    gateway: IdentityGateway = Depends(get_identity_gateway),
):
    result = await gateway.register_account(body.model_dump())
    if is_error(result):
        return _error_response(result)
    return result


@router.post(
    "/sign-in",
    response_model=SessionCredentials,
    responses={401: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def sign_in(
    body: SignInRequest = Depends(parsed_body(SignInRequest)),
    gateway: IdentityGateway = Depends(get_identity_gateway),
):
    result = await gateway.authenticate(body.model_dump())
    if is_error(result):
        return _error_response(result)
    return result


@router.post(
    "/validate-session",
    response_model=SessionValidationResult,
    responses={401: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def validate_session(
    body: SessionValidationRequest = Depends(parsed_body(SessionValidationRequest)),
    gateway: IdentityGateway = Depends(get_identity_gateway),
):
    result = await gateway.validate_session(body.model_dump())
    if is_error(result):
        return _error_response(result)
    return result
