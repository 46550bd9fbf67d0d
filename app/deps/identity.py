from fastapi import Request

from app.core.firebase import FirebaseIdentityProvider, get_firestore_client
from app.services.identity_service import IdentityGateway


def build_identity_gateway() -> IdentityGateway:
    return IdentityGateway(FirebaseIdentityProvider.from_config())


def get_identity_gateway(request: Request) -> IdentityGateway:
    gateway = getattr(request.app.state, "identity_gateway", None)
    if gateway is None:
        gateway = build_identity_gateway()
        request.app.state.identity_gateway = gateway
    return gateway


def get_firestore_db(request: Request):
    db = getattr(request.app.state, "firestore_db", None)
    if db is None:
        db = get_firestore_client()
        request.app.state.firestore_db = db
    return db
