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
"""Stockfly Data: SQLAlchemy entities, specifications and repositories."""

from stockfly.data.entity import Base, BaseEntity
from stockfly.data.filter import FilterOperator
from stockfly.data.page import Page
from stockfly.data.repository import Repository
from stockfly.data.sort import Order, Sort
from stockfly.data.specification import Specification

__all__ = [
    "Base",
    "BaseEntity",
    "FilterOperator",
    "Order",
    "Page",
    "Repository",
    "Sort",
    "Specification",
]
