import logging
import re
from typing import Any, Dict, Optional

import firebase_admin
import httpx
from firebase_admin import auth as fb_auth
from firebase_admin import credentials, exceptions as fb_exceptions, firestore
from google.auth.exceptions import GoogleAuthError
from starlette.concurrency import run_in_threadpool

from app import config
from app.core.exceptions import (
    EMAIL_ALREADY_EXISTS,
    ID_TOKEN_REVOKED,
    INTERNAL_ERROR,
    INVALID_EMAIL,
    WRONG_PASSWORD,
    ProviderError,
)

logger = logging.getLogger(__name__)

BASE_ID_TOOLKIT = "https://identitytoolkit.googleapis.com/v1"

# El orden importa: Revoked/Expired heredan de InvalidIdTokenError
_ADMIN_ERROR_CODES = (
    (fb_auth.RevokedIdTokenError, ID_TOKEN_REVOKED),
    (fb_auth.ExpiredIdTokenError, "auth/id-token-expired"),
    (fb_auth.InvalidIdTokenError, "auth/invalid-id-token"),
    (fb_auth.EmailAlreadyExistsError, EMAIL_ALREADY_EXISTS),
    (fb_auth.UidAlreadyExistsError, "auth/uid-already-exists"),
    (fb_auth.UserNotFoundError, "auth/user-not-found"),
    (fb_auth.UserDisabledError, "auth/user-disabled"),
    (fb_auth.CertificateFetchError, "auth/certificate-fetch-failed"),
)

_REST_ERROR_CODES = {
    "INVALID_EMAIL": INVALID_EMAIL,
    "INVALID_PASSWORD": WRONG_PASSWORD,
    "EMAIL_NOT_FOUND": "auth/user-not-found",
    "USER_DISABLED": "auth/user-disabled",
    "INVALID_LOGIN_CREDENTIALS": "auth/invalid-credential",
    "TOO_MANY_ATTEMPTS_TRY_LATER": "auth/too-many-requests",
    "MISSING_PASSWORD": "auth/missing-password",
    "INVALID_ID_TOKEN": "auth/invalid-user-token",
}


def _kebab(value: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", (value or "unknown").lower()).strip("-") or "unknown"


def translate_admin_error(exc: Exception) -> ProviderError:
    """Convierte una excepción del Admin SDK en un ProviderError con código `auth/...`."""
    for exc_type, code in _ADMIN_ERROR_CODES:
        if isinstance(exc, exc_type):
            return ProviderError(code, str(exc))
    if isinstance(exc, ValueError):
        # el SDK valida argumentos (email mal formado, password corta...) con ValueError
        return ProviderError("auth/invalid-argument", str(exc))
    if isinstance(exc, fb_exceptions.FirebaseError):
        return ProviderError(f"auth/{_kebab(exc.code)}", str(exc))
    if isinstance(exc, GoogleAuthError):
        # credenciales de la service account inválidas o rotadas (RefreshError, ...)
        return ProviderError(INTERNAL_ERROR, str(exc))
    raise exc


def translate_rest_error(response: httpx.Response) -> ProviderError:
    """
    Identity Toolkit responde {"error": {"code": 400, "message": "INVALID_PASSWORD"}}.
    Algunos mensajes traen detalle: "WEAK_PASSWORD : Password should be at least 6 characters".
    """
    try:
        payload = response.json()
    except ValueError:
        payload = {}
    raw = ((payload or {}).get("error") or {}).get("message") or f"HTTP_{response.status_code}"
    reason = raw.split(" : ", 1)[0].strip()
    code = _REST_ERROR_CODES.get(reason, f"auth/{_kebab(reason)}")
    return ProviderError(code, raw)


def user_record_to_dict(record: Any) -> Dict[str, Any]:
    metadata = record.user_metadata
    return {
        "uid": record.uid,
        "email": record.email,
        "emailVerified": record.email_verified,
        "displayName": record.display_name,
        "photoURL": record.photo_url,
        "phoneNumber": record.phone_number,
        "disabled": record.disabled,
        "customClaims": record.custom_claims,
        "metadata": {
            "creationTime": metadata.creation_timestamp if metadata else None,
            "lastSignInTime": metadata.last_sign_in_timestamp if metadata else None,
        },
        "providerData": [
            {
                "uid": info.uid,
                "email": info.email,
                "displayName": info.display_name,
                "photoURL": info.photo_url,
                "providerId": info.provider_id,
            }
            for info in (record.provider_data or [])
        ],
    }


def init_firebase_app() -> firebase_admin.App:
    """Inicializa (una sola vez) la app por defecto de firebase_admin con la service account del entorno."""
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass

    cred = credentials.Certificate({
        "type": "service_account",
        "project_id": config.FIREBASE_ADMIN_PROJECT_ID,
        "private_key": config.FIREBASE_ADMIN_PRIVATE_KEY,
        "client_email": config.FIREBASE_ADMIN_CLIENT_EMAIL,
        "token_uri": "https://oauth2.googleapis.com/token",
    })
    logger.info("Inicializando firebase_admin para el proyecto %s", config.FIREBASE_ADMIN_PROJECT_ID)
    return firebase_admin.initialize_app(cred)


def get_firestore_client():
    return firestore.client(init_firebase_app())


class FirebaseIdentityProvider:
    """
    Cliente del proveedor de identidad.
    Operaciones de administración con firebase_admin (en threadpool, el SDK es bloqueante)
    y sign-in con la API REST de Identity Toolkit vía httpx.
    """

    def __init__(
        self,
        web_api_key: str,
        timeout: float = 20,
        firebase_app: Optional[firebase_admin.App] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.web_api_key = web_api_key
        self.timeout = timeout
        self.firebase_app = firebase_app
        self.transport = transport

    @classmethod
    def from_config(cls) -> "FirebaseIdentityProvider":
        return cls(
            web_api_key=config.FIREBASE_WEB_API_KEY,
            timeout=config.IDENTITY_HTTP_TIMEOUT,
            firebase_app=init_firebase_app(),
        )

    # ===== Admin SDK =====

    async def _admin_call(self, fn, *args, **kwargs):
        try:
            return await run_in_threadpool(fn, *args, app=self.firebase_app, **kwargs)
        except (fb_exceptions.FirebaseError, GoogleAuthError, ValueError) as e:
            raise translate_admin_error(e) from e

    async def create_user(
        self,
        email: str,
        password: str,
        display_name: Optional[str],
        email_verified: bool = False,
        disabled: bool = False,
    ) -> Dict[str, Any]:
        record = await self._admin_call(
            fb_auth.create_user,
            email=email,
            password=password,
            display_name=display_name,
            email_verified=email_verified,
            disabled=disabled,
        )
        return user_record_to_dict(record)

    async def set_custom_user_claims(self, uid: str, claims: Dict[str, Any]) -> None:
        await self._admin_call(fb_auth.set_custom_user_claims, uid, claims)

    async def verify_id_token(self, id_token: str, check_revoked: bool = True) -> Dict[str, Any]:
        return await self._admin_call(fb_auth.verify_id_token, id_token, check_revoked=check_revoked)

    # ===== Identity Toolkit REST =====

    async def _toolkit_post(self, endpoint: str, body: Dict[str, Any]) -> Dict[str, Any]:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                r = await client.post(
                    f"{BASE_ID_TOOLKIT}/{endpoint}",
                    params={"key": self.web_api_key},
                    json=body,
                )
        except httpx.HTTPError as e:
            raise ProviderError("auth/network-request-failed", str(e)) from e
        if r.status_code != 200:
            raise translate_rest_error(r)
        return r.json()

    async def sign_in_with_password(self, email: str, password: str) -> Dict[str, Any]:
        """Devuelve {idToken, refreshToken, localId, email, displayName, expiresIn}."""
        return await self._toolkit_post(
            "accounts:signInWithPassword",
            {"email": email, "password": password, "returnSecureToken": True},
        )

    async def get_id_token_result(self, id_token: str) -> Dict[str, Any]:
        """
        Resultado del ID token actual (sin forzar refresh) junto con el perfil de la cuenta.
        """
        data = await self._toolkit_post("accounts:lookup", {"idToken": id_token})
        users = data.get("users") or []
        if not users:
            raise ProviderError("auth/user-not-found", "accounts:lookup no devolvió usuarios")
        account = users[0]
        return {
            "token": id_token,
            "uid": account.get("localId"),
            "email": account.get("email"),
            "emailVerified": bool(account.get("emailVerified", False)),
            "displayName": account.get("displayName"),
            "photoURL": account.get("photoUrl"),
            "customClaims": account.get("customAttributes"),
        }
