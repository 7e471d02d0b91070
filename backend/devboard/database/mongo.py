from __future__ import annotations

"""
MongoDB connection helpers.

The client is created once during application startup (see ``init_database``)
and handed to request handlers through the ``get_db`` dependency.
"""

import json
import logging
import os
import tempfile
from typing import AsyncGenerator, Optional

from pydantic import BaseModel, ValidationError, field_validator
from pymongo import AsyncMongoClient
from pymongo.asynchronous.database import AsyncDatabase

from devboard.config import settings

logger = logging.getLogger(__name__)

PEM_HEADER = "-----BEGIN"

_client: AsyncMongoClient | None = None
_db_name: str | None = None
_cert_path: str | None = None


class StoreConfigurationError(RuntimeError):
    """Raised when the store credential or location cannot be used."""


class ServiceAccount(BaseModel):
    """Service credential for the store, supplied as a JSON environment value."""

    uri: Optional[str] = None
    database: Optional[str] = None
    certificate_key: Optional[str] = None

    @field_validator("certificate_key")
    @classmethod
    def _unescape_newlines(cls, value: Optional[str]) -> Optional[str]:
        # Keys pasted into env vars usually carry literal "\n" sequences.
        if value is None:
            return None
        value = value.replace("\\n", "\n")
        if PEM_HEADER not in value:
            raise ValueError("certificate_key is not a PEM block")
        return value


def parse_service_account(raw: str) -> ServiceAccount:
    """Parse the JSON service credential, raising StoreConfigurationError on bad input."""
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise StoreConfigurationError(
            f"MONGODB_SERVICE_ACCOUNT is not valid JSON: {exc}"
        ) from exc

    if not isinstance(payload, dict):
        raise StoreConfigurationError("MONGODB_SERVICE_ACCOUNT must be a JSON object")

    try:
        return ServiceAccount.model_validate(payload)
    except ValidationError as exc:
        raise StoreConfigurationError(
            f"MONGODB_SERVICE_ACCOUNT is invalid: {exc}"
        ) from exc


def _write_certificate(pem: str) -> str:
    handle = tempfile.NamedTemporaryFile(
        mode="w", suffix=".pem", prefix="devboard-mongo-", delete=False
    )
    with handle:
        handle.write(pem)
    os.chmod(handle.name, 0o600)
    return handle.name


def build_client(
    uri: str | None = None, service_account: str | None = None
) -> AsyncMongoClient:
    """Create a client from the configured URI and optional service credential."""
    global _cert_path
    uri = uri or settings.MONGODB_URI
    raw_account = service_account if service_account is not None else settings.MONGODB_SERVICE_ACCOUNT

    if not raw_account:
        return AsyncMongoClient(uri)

    account = parse_service_account(raw_account)
    if account.uri:
        uri = account.uri
    if account.certificate_key:
        cert_path = _write_certificate(account.certificate_key)
        _cert_path = cert_path
        logger.info("Using X.509 certificate credential for MongoDB")
        return AsyncMongoClient(
            uri,
            tls=True,
            tlsCertificateKeyFile=cert_path,
            authMechanism="MONGODB-X509",
        )
    return AsyncMongoClient(uri)


def _database_name() -> str:
    if settings.MONGODB_SERVICE_ACCOUNT:
        account = parse_service_account(settings.MONGODB_SERVICE_ACCOUNT)
        if account.database:
            return account.database
    return settings.MONGODB_DB_NAME


def get_client() -> AsyncMongoClient:
    global _client, _db_name
    if _client is None:
        _client = build_client()
        _db_name = _database_name()
    return _client


def get_database() -> AsyncDatabase:
    client = get_client()
    return client[_db_name]


async def get_db() -> AsyncGenerator[AsyncDatabase, None]:
    yield get_database()


async def init_database() -> AsyncDatabase:
    """
    Connect, verify the server answers, and ensure indexes.

    Any failure propagates so the application refuses to start.
    """
    from devboard.database.ensure_indexes import ensure_indexes

    db = get_database()
    await db.client.admin.command("ping")
    await ensure_indexes(db)
    logger.info("Connected to MongoDB database %s", db.name)
    return db


async def close_client() -> None:
    global _client, _db_name, _cert_path
    if _client is not None:
        await _client.close()
        _client = None
        _db_name = None
    if _cert_path is not None:
        try:
            os.remove(_cert_path)
        except FileNotFoundError:
            pass
        _cert_path = None
