from typing import Dict

INVALID_EMAIL = "auth/invalid-email"
WRONG_PASSWORD = "auth/wrong-password"
ID_TOKEN_REVOKED = "auth/id-token-revoked"
EMAIL_ALREADY_EXISTS = "auth/email-already-exists"
INTERNAL_ERROR = "auth/internal-error"


class ProviderError(Exception):
    """Error devuelto por el proveedor de identidad, etiquetado con un `code` tipo `auth/...`."""

    def __init__(self, code: str, message: str = ""):
        super().__init__(message or code)
        self.code = code
        self.message = message or code

    def to_dict(self) -> Dict[str, str]:
        return {"code": self.code, "message": self.message}

    def __repr__(self) -> str:
        return f"ProviderError(code={self.code!r}, message={self.message!r})"


def as_provider_error(exc: Exception) -> ProviderError:
    """Cualquier fallo inesperado del proveedor se reporta como `auth/internal-error`."""
    if isinstance(exc, ProviderError):
        return exc
    return ProviderError(INTERNAL_ERROR, f"{type(exc).__name__}: {exc}")
