"""API key lifecycle service.

Handles issuance, rotation, lookup and revocation of API keys. Plaintext
keys leave this service only inside ``IssuedApiKey`` values returned from
``create``, ``create_for_plugin`` and ``rotate``.
"""

from __future__ import annotations

import re
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from keyward.config import Settings
from keyward.db.errors import is_duplicate_error
from keyward.db.session import SessionFactory, get_session_factory, session_scope
from keyward.errors import (
    DuplicateNameError,
    InvalidPatternError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from keyward.models.api_key import ApiKey, IssuedApiKey, plugin_api_key_type
from keyward.models.user import User
from keyward.services.api_key.digest import TokenDigester
from keyward.services.api_key.generator import API_KEY_LENGTH, generate_secret
from keyward.utils.datetime import ensure_utc, utcnow

logger = structlog.get_logger()


class ApiKeyService:
    """Service for API key lifecycle management."""

    def __init__(
        self,
        digester: TokenDigester,
        session_factory: SessionFactory | None = None,
        *,
        key_length: int = API_KEY_LENGTH,
    ) -> None:
        self._digester = digester
        self._session_factory = session_factory
        self._key_length = key_length
        self._log = logger.bind(service="api_key")

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        session_factory: SessionFactory | None = None,
    ) -> ApiKeyService:
        """Build the service from settings.

        Raises:
            ConfigurationError: If ENCRYPTION_SECRET is missing
        """
        return cls(
            TokenDigester.from_settings(settings),
            session_factory,
            key_length=settings.api_key.length,
        )

    @property
    def digester(self) -> TokenDigester:
        return self._digester

    @asynccontextmanager
    async def _scope(self, db: AsyncSession | None) -> AsyncGenerator[AsyncSession, None]:
        """Use the caller's session, or open one that commits on exit."""
        if db is not None:
            yield db
            return
        async with session_scope(self._session_factory or get_session_factory()) as session:
            yield session

    def _generate(self) -> tuple[str, str]:
        """Return (plaintext, key_hash)."""
        plaintext = generate_secret(self._key_length)
        return plaintext, self._digester.digest(plaintext)

    # ---------------------------------------------------------------------
    # Issuance
    # ---------------------------------------------------------------------

    async def create(
        self,
        db: AsyncSession,
        user: User | None,
        name: str,
        allowed_path: str,
        api_key_type: str,
        extra: str = "",
        expired_at: datetime | None = None,
    ) -> IssuedApiKey:
        """Issue a new API key inside the caller's session.

        The caller owns the transaction: the record is flushed, not committed.

        Args:
            db: Session the record is written in
            user: Acting user, stamped as creator and updater
            name: Unique key name
            allowed_path: Regular expression of paths the key may access
            api_key_type: Type tag, e.g. "plugin:webhook"
            extra: Free-form correlation value
            expired_at: Expiry time, None for a non-expiring key. Naive values
                are taken as UTC

        Returns:
            The stored fields plus the plaintext key

        Raises:
            InvalidPatternError: If allowed_path does not compile
            DuplicateNameError: If the name is taken
            PersistenceError: If the insert fails
        """
        try:
            re.compile(allowed_path)
        except re.error as exc:
            self._log.error("api_key.create.invalid_pattern", allowed_path=allowed_path, error=str(exc))
            raise InvalidPatternError(
                f"compile allowed path: {allowed_path}",
                details={"allowed_path": allowed_path, "reason": str(exc)},
            ) from exc

        plaintext, key_hash = self._generate()

        now = utcnow()
        record = ApiKey(
            name=name,
            key_hash=key_hash,
            expired_at=ensure_utc(expired_at) if expired_at is not None else None,
            allowed_path=allowed_path,
            type=api_key_type,
            extra=extra,
            created_at=now,
            updated_at=now,
        )
        if user is not None:
            record.creator = user.name
            record.creator_email = user.email
            record.updater = user.name
            record.updater_email = user.email

        db.add(record)
        try:
            await db.flush()
        except SQLAlchemyError as exc:
            if is_duplicate_error(exc):
                self._log.error("api_key.create.duplicate_name", name=name)
                raise DuplicateNameError(name) from exc
            self._log.error("api_key.create.failed", name=name, error=str(exc))
            raise PersistenceError(
                f"error creating api key [{name}]",
                details={"name": name},
            ) from exc

        self._log.info("api_key.create", api_key_id=record.id, name=name, type=api_key_type)
        return IssuedApiKey.from_record(record, plaintext)

    async def create_for_plugin(
        self,
        db: AsyncSession,
        user: User | None,
        name: str,
        plugin_name: str,
        allowed_path: str,
        extra: str = "",
    ) -> IssuedApiKey:
        """Issue a non-expiring key typed ``plugin:<plugin_name>``."""
        return await self.create(
            db,
            user,
            name,
            allowed_path,
            plugin_api_key_type(plugin_name),
            extra,
        )

    async def rotate(
        self,
        user: User | None,
        api_key_id: int,
        *,
        db: AsyncSession | None = None,
    ) -> IssuedApiKey:
        """Replace a key's secret and return the new plaintext.

        The old plaintext stops matching the stored digest.

        Raises:
            NotFoundError: If the key does not exist
            PersistenceError: If the update fails
        """
        try:
            async with self._scope(db) as session:
                record = await self._get_by_id(session, api_key_id)

                plaintext, key_hash = self._generate()
                record.key_hash = key_hash
                record.updated_at = utcnow()
                if user is not None:
                    record.updater = user.name
                    record.updater_email = user.email

                session.add(record)
                await session.flush()
                issued = IssuedApiKey.from_record(record, plaintext)
        except SQLAlchemyError as exc:
            self._log.error("api_key.rotate.failed", api_key_id=api_key_id, error=str(exc))
            raise PersistenceError(
                f"error updating api key id[{api_key_id}]",
                details={"api_key_id": api_key_id},
            ) from exc

        self._log.info("api_key.rotate", api_key_id=api_key_id)
        return issued

    # ---------------------------------------------------------------------
    # Revocation
    # ---------------------------------------------------------------------

    async def delete(self, api_key_id: int, *, db: AsyncSession | None = None) -> None:
        """Delete a key by id.

        Raises:
            NotFoundError: If the key does not exist
            PersistenceError: If the delete fails
        """
        try:
            async with self._scope(db) as session:
                record = await self._get_by_id(session, api_key_id)
                await session.delete(record)
                await session.flush()
        except SQLAlchemyError as exc:
            self._log.error("api_key.delete.failed", api_key_id=api_key_id, error=str(exc))
            raise PersistenceError(
                f"error deleting api key id[{api_key_id}]",
                details={"api_key_id": api_key_id},
            ) from exc

        self._log.info("api_key.delete", api_key_id=api_key_id)

    async def delete_for_plugin(
        self,
        db: AsyncSession,
        plugin_name: str = "",
        extra: str = "",
    ) -> None:
        """Revoke the key a plugin issued, e.g. for a webhook.

        Only the first matching key (lowest id) is deleted per call. A missing
        key counts as already revoked. At least one filter is required, so an
        empty call can never revoke an unrelated key.

        Raises:
            ValidationError: If both filters are empty
            PersistenceError: If the lookup or delete fails
        """
        clauses: list[Any] = []
        if plugin_name:
            clauses.append(ApiKey.type == plugin_api_key_type(plugin_name))
        if extra:
            clauses.append(ApiKey.extra == extra)
        if not clauses:
            raise ValidationError(
                "plugin_name or extra is required to revoke a plugin api key",
                details={"fields": ["plugin_name", "extra"]},
            )

        try:
            result = await db.execute(select(ApiKey).where(*clauses).order_by(ApiKey.id))
            record = result.scalars().first()
            if record is None:
                self._log.info(
                    "api_key.delete_for_plugin.not_found",
                    plugin_name=plugin_name,
                    extra=extra,
                )
                return
            await db.delete(record)
            await db.flush()
        except SQLAlchemyError as exc:
            self._log.error(
                "api_key.delete_for_plugin.failed",
                plugin_name=plugin_name,
                extra=extra,
                error=str(exc),
            )
            raise PersistenceError(
                f"error deleting api key for plugin [{plugin_name}] extra [{extra}]",
                details={"plugin_name": plugin_name, "extra": extra},
            ) from exc

        self._log.info(
            "api_key.delete_for_plugin",
            api_key_id=record.id,
            plugin_name=plugin_name,
            extra=extra,
        )

    # ---------------------------------------------------------------------
    # Lookup
    # ---------------------------------------------------------------------

    async def get(
        self,
        api_key_id: int,
        *clauses: Any,
        db: AsyncSession | None = None,
    ) -> ApiKey:
        """Get a stored key by id, optionally narrowed by extra where-clauses.

        Raises:
            NotFoundError: If no key matches
            PersistenceError: If the query fails
        """
        try:
            async with self._scope(db) as session:
                record = await self._get_by_id(session, api_key_id, *clauses)
                if db is None:
                    session.expunge(record)
                return record
        except SQLAlchemyError as exc:
            raise PersistenceError(
                f"error getting api key id[{api_key_id}] from DB",
                details={"api_key_id": api_key_id},
            ) from exc

    async def get_one(self, *clauses: Any, db: AsyncSession | None = None) -> ApiKey:
        """Get the first stored key matching ``clauses``.

        Raises:
            NotFoundError: If no key matches
            PersistenceError: If the query fails
        """
        try:
            async with self._scope(db) as session:
                result = await session.execute(select(ApiKey).where(*clauses).order_by(ApiKey.id))
                record = result.scalars().first()
                if record is not None and db is None:
                    session.expunge(record)
        except SQLAlchemyError as exc:
            raise PersistenceError(
                "error getting api key from DB",
                details={"clauses": _describe(clauses)},
            ) from exc

        if record is None:
            raise NotFoundError(
                "could not find api key in DB",
                details={"clauses": _describe(clauses)},
            )
        return record

    async def _get_by_id(
        self,
        session: AsyncSession,
        api_key_id: int,
        *clauses: Any,
    ) -> ApiKey:
        result = await session.execute(
            select(ApiKey).where(ApiKey.id == api_key_id, *clauses)
        )
        record = result.scalars().first()
        if record is None:
            self._log.warning("api_key.not_found", api_key_id=api_key_id)
            raise NotFoundError(
                f"could not find api key id[{api_key_id}] in DB",
                details={"api_key_id": api_key_id},
            )
        return record


def _describe(clauses: tuple[Any, ...]) -> list[str]:
    """Render where-clauses for error details."""
    return [str(clause) for clause in clauses]
