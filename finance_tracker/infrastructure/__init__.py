"""
Infrastructure layer for external service clients.
"""
from .firestore import FirestoreService, cleanup_firestore, get_firestore
from .identity import (
    FirebaseIdentityClient,
    IdentityError,
    IdentityProvider,
    cleanup_identity_client,
    get_identity_client,
)

__all__ = [
    "FirestoreService",
    "get_firestore",
    "cleanup_firestore",
    "FirebaseIdentityClient",
    "IdentityError",
    "IdentityProvider",
    "get_identity_client",
    "cleanup_identity_client",
]
