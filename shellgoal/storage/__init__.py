"""Credential storage."""

from shellgoal.storage.credentials import CredentialPair, CredentialStore, connect

__all__ = [
    "CredentialPair",
    "CredentialStore",
    "connect",
]
