# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Single-entity use cases: get, create, update and delete.

Writes run in their own transaction and, once committed, invalidate the
cached list pages of the resource and of every resource that can expand
into it.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from stockfly.kernel.exceptions import ConflictException, ResourceNotFoundException, ValidationException
from stockfly.modules.resource import Resource
from stockfly.odata.cache import ODataCacheStore
from stockfly.odata.query import ODataQuery
from stockfly.odata.translator import QueryTranslator
from stockfly.validation import validate_model

logger = logging.getLogger(__name__)

Payload = bytes | str | dict[str, Any]


def _not_found(resource: Resource, id: uuid.UUID) -> ResourceNotFoundException:
    return ResourceNotFoundException(
        f"{resource.name} entry '{id}' not found",
        code="RESOURCE_NOT_FOUND",
        context={"resource": resource.name, "id": str(id)},
    )


class GetResourceUseCase:
    """Fetch one entity; ``$select`` and ``$expand`` are honoured."""

    def __init__(
        self,
        resource: Resource,
        session_factory: async_sessionmaker[AsyncSession],
        translator: QueryTranslator,
    ) -> None:
        self._resource = resource
        self._session_factory = session_factory
        self._translator = translator

    async def execute(self, id: uuid.UUID, query: ODataQuery | None = None) -> dict[str, Any]:
        resource = self._resource
        translated = self._translator.translate(
            query or ODataQuery(), resource.fields, resource.relation_attributes, model=resource.model
        )
        async with self._session_factory() as session:
            entity = await resource.repository(session=session).find_by_id(id, relations=translated.relations)
            if entity is None:
                raise _not_found(resource, id)
            return resource.serialize(entity, translated.projection, translated.expand)


class _WriteUseCase:
    def __init__(
        self,
        resource: Resource,
        session_factory: async_sessionmaker[AsyncSession],
        cache: ODataCacheStore,
        dependents: Sequence[str] = (),
    ) -> None:
        self._resource = resource
        self._session_factory = session_factory
        self._cache = cache
        self._invalidates = (resource.name, *dependents)

    async def _invalidate(self) -> None:
        for name in self._invalidates:
            await self._cache.invalidate(name)

    def _conflict(self, exc: IntegrityError, message: str | None = None) -> ConflictException:
        logger.info("Rejected %s write: %s", self._resource.name, exc.orig)
        return ConflictException(
            message or f"{self._resource.name} entry conflicts with an existing one",
            code="CONFLICT",
            context={"resource": self._resource.name},
        )


class CreateResourceUseCase(_WriteUseCase):
    async def execute(self, payload: Payload) -> dict[str, Any]:
        resource = self._resource
        data = validate_model(resource.create_schema, payload)
        entity = resource.model(**data.model_dump(exclude_none=True))
        try:
            async with self._session_factory() as session, session.begin():
                entity = await resource.repository(session=session).save(entity)
                result = resource.serialize(entity)
        except IntegrityError as exc:
            raise self._conflict(exc) from exc
        await self._invalidate()
        logger.info("Created %s %s", resource.name, result["id"])
        return result


class UpdateResourceUseCase(_WriteUseCase):
    """Partial update: only fields present in the payload are written."""

    async def execute(self, id: uuid.UUID, payload: Payload) -> dict[str, Any]:
        resource = self._resource
        changes = validate_model(resource.update_schema, payload).model_dump(exclude_unset=True)
        self._reject_null_required(changes)
        try:
            async with self._session_factory() as session, session.begin():
                repository = resource.repository(session=session)
                entity = await repository.find_by_id(id)
                if entity is None:
                    raise _not_found(resource, id)
                for attribute, value in changes.items():
                    setattr(entity, attribute, value)
                entity = await repository.save(entity)
                result = resource.serialize(entity)
        except IntegrityError as exc:
            raise self._conflict(exc) from exc
        await self._invalidate()
        logger.info("Updated %s %s (%s)", resource.name, id, ", ".join(sorted(changes)) or "no changes")
        return result

    def _reject_null_required(self, changes: dict[str, Any]) -> None:
        columns = self._resource.model.__table__.columns
        errors = [
            {"loc": [name], "msg": "Field cannot be null", "type": "null_not_allowed"}
            for name, value in changes.items()
            if value is None and not columns[name].nullable
        ]
        if errors:
            fields = ", ".join(e["loc"][0] for e in errors)
            raise ValidationException(
                f"Validation failed: {fields} cannot be null",
                code="VALIDATION_ERROR",
                context={"errors": errors},
            )


class DeleteResourceUseCase(_WriteUseCase):
    async def execute(self, id: uuid.UUID) -> None:
        resource = self._resource
        try:
            async with self._session_factory() as session, session.begin():
                repository = resource.repository(session=session)
                entity = await repository.find_by_id(id)
                if entity is None:
                    raise _not_found(resource, id)
                await repository.delete(entity)
        except IntegrityError as exc:
            raise self._conflict(exc, f"{resource.name} entry '{id}' is still referenced") from exc
        await self._invalidate()
        logger.info("Deleted %s %s", resource.name, id)
