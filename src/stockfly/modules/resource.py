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
"""Resource descriptors: what each entity exposes over HTTP.

A :class:`Resource` ties an entity to its URL segment, its repository, its
payload schemas and its relations. API field names are the camelCase form
of the entity's column attributes (``id_category`` is exposed as
``idCategory``), and that mapping doubles as the OData allow-list.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime
from functools import cached_property
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from sqlalchemy import inspect

from stockfly.data.entity import BaseEntity
from stockfly.data.repository import Repository
from stockfly.data.sort import Sort


class ResourceSchema(BaseModel):
    """Base for payload schemas: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")


@dataclass(frozen=True)
class Relation:
    """An expandable relation.

    Attributes:
        attribute: Relationship attribute on the model.
        target: Name of the resource the relation points at.
    """

    attribute: str
    target: str


@dataclass(frozen=True)
class Resource:
    name: str
    model: type[BaseEntity]
    repository: type[Repository[Any, uuid.UUID]]
    create_schema: type[ResourceSchema]
    update_schema: type[ResourceSchema]
    relations: Mapping[str, Relation] = field(default_factory=dict)
    default_sort: Sort = field(default_factory=lambda: Sort.by("created_at"))

    @cached_property
    def fields(self) -> dict[str, str]:
        """API field name -> model attribute, in column order."""
        return column_fields(self.model)

    @cached_property
    def relation_attributes(self) -> dict[str, str]:
        return {name: relation.attribute for name, relation in self.relations.items()}

    def serialize(
        self,
        entity: BaseEntity,
        projection: Sequence[str] | None = None,
        expand: Sequence[str] = (),
    ) -> dict[str, Any]:
        """Render *entity* as a JSON-ready dict.

        Only the ``projection`` fields are emitted when one is given. Each
        name in ``expand`` adds the related entity's columns under that name.
        """
        names = self.fields if projection is None else projection
        data = {name: to_json_value(getattr(entity, self.fields[name])) for name in names}
        for name in expand:
            related = getattr(entity, self.relations[name].attribute)
            if related is None:
                data[name] = None
            elif isinstance(related, list):
                data[name] = [serialize_columns(item) for item in related]
            else:
                data[name] = serialize_columns(related)
        return data


def column_fields(model: type[BaseEntity]) -> dict[str, str]:
    return {to_camel(attr.key): attr.key for attr in inspect(model).column_attrs}


def serialize_columns(entity: BaseEntity) -> dict[str, Any]:
    return {api: to_json_value(getattr(entity, attr)) for api, attr in column_fields(type(entity)).items()}


def to_json_value(value: Any) -> Any:
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value
