import asyncio
import logging
from typing import Any, Dict, Set

from app.core.exceptions import (
    ID_TOKEN_REVOKED,
    INVALID_EMAIL,
    WRONG_PASSWORD,
    ProviderError,
    as_provider_error,
)

logger = logging.getLogger(__name__)

DEFAULT_LOCALE = "en"
DEFAULT_USER_CLAIMS = {"regularUser": True}

INCORRECT_SIGN_IN = "Incorrect sign-in information provided."
UNCAUGHT_SIGN_IN = "Sign In Failed For Some Uncaught Reason"

# Códigos que no deben revelar qué parte del par email/password falló
_AMBIGUOUS_SIGN_IN_CODES = {INVALID_EMAIL, WRONG_PASSWORD}


def is_error(result: Dict[str, Any]) -> bool:
    return "error" in result


class IdentityGateway:
    """
    Envuelve al proveedor de identidad: registro, sign-in y validación de sesión.
    Ninguna operación lanza errores del proveedor; siempre devuelve un dict de éxito
    o un dict `{"error": ...}`.
    """

    def __init__(self, provider):
        self.provider = provider
        self._background: Set[asyncio.Task] = set()

    async def register_account(self, details: Dict[str, Any]) -> Dict[str, Any]:
        try:
            user_record = await self.provider.create_user(
                email=details.get("email"),
                password=details.get("password"),
                display_name=details.get("displayName"),
                email_verified=False,
                disabled=False,
            )
        except ProviderError as e:
            logger.warning("createUser falló para %s: %r", details.get("email"), e)
            return {"error": e}
        except Exception as e:
            logger.exception("createUser falló inesperadamente para %s", details.get("email"))
            return {"error": as_provider_error(e)}

        user_record["accountLocale"] = details.get("accountLocale") or DEFAULT_LOCALE
        logger.info("Usuario creado uid=%s email=%s", user_record.get("uid"), user_record.get("email"))

        # Claims en segundo plano: el registro no espera por ellas
        task = asyncio.create_task(self._assign_default_claims(user_record["uid"], user_record.get("email")))
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return user_record

    async def _assign_default_claims(self, uid: str, email: str) -> None:
        try:
            await self.provider.set_custom_user_claims(uid, dict(DEFAULT_USER_CLAIMS))
        except Exception:
            logger.exception("No se pudo asignar el claim regularUser a uid=%s", uid)
            return
        logger.info(
            "Claim regularUser asignado a %s; debe volver a iniciar sesión para obtenerlo.", email
        )

    async def drain(self) -> None:
        """Espera a que terminen las tareas de claims pendientes."""
        if self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    async def authenticate(self, details: Dict[str, Any]) -> Dict[str, Any]:
        email = details.get("email")
        try:
            session = await self.provider.sign_in_with_password(email, details.get("password"))
            token_result = await self.provider.get_id_token_result(session.get("idToken"))
        except ProviderError as e:
            if e.code in _AMBIGUOUS_SIGN_IN_CODES:
                logger.info("Sign-in rechazado para %s (%s)", email, e.code)
                return {"error": INCORRECT_SIGN_IN}
            logger.error("User %s failed sign in: %r", email, e)
            return {"error": UNCAUGHT_SIGN_IN, "errorRaw": e}
        except Exception as e:
            logger.exception("User %s failed sign in", email)
            return {"error": UNCAUGHT_SIGN_IN, "errorRaw": as_provider_error(e)}

        return {
            "idToken": token_result.get("token"),
            "refreshToken": session.get("refreshToken"),
            "email": token_result.get("email"),
            "emailVerified": token_result.get("emailVerified"),
            "displayName": token_result.get("displayName"),
            "photoURL": token_result.get("photoURL"),
            "uid": token_result.get("uid") or session.get("localId"),
        }

    async def validate_session(self, details: Dict[str, Any]) -> Dict[str, Any]:
        # refreshToken se acepta pero no interviene en la validación
        try:
            decoded = await self.provider.verify_id_token(details.get("idToken"), check_revoked=True)
        except ProviderError as e:
            if e.code == ID_TOKEN_REVOKED:
                logger.info("Token revocado, el usuario debe iniciar sesión de nuevo: %r", e)
            else:
                logger.info("Token de sesión inválido: %r", e)
            return {"error": e}
        except Exception as e:
            logger.exception("verifyIdToken falló inesperadamente")
            return {"error": as_provider_error(e)}

        logger.debug("Token decodificado: %s", decoded)
        return {"isValid": True, "uid": decoded.get("uid"), "fullDecodedToken": decoded}
