from typing import Any, Dict, Optional, Union

from pydantic import BaseModel

# Sin validación local: el proveedor decide qué email/password son aceptables
class RegistrationRequest(BaseModel):
    email: str
    password: str
    displayName: str
    accountLocale: Optional[str] = "en"

class SignInRequest(BaseModel):
    email: str
    password: str

class SessionValidationRequest(BaseModel):
    idToken: str
    refreshToken: Optional[str] = None  # se acepta pero no se usa

class SessionCredentials(BaseModel):
    idToken: str
    refreshToken: str
    email: Optional[str] = None
    emailVerified: bool = False
    displayName: Optional[str] = None
    photoURL: Optional[str] = None
    uid: str

class SessionValidationResult(BaseModel):
    isValid: bool
    uid: str
    fullDecodedToken: Dict[str, Any]

class ErrorResponse(BaseModel):
    error: Union[str, Dict[str, Any]]
    errorRaw: Optional[Dict[str, Any]] = None
