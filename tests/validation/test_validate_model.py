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
"""Tests for validate_model."""

import pytest

from stockfly.kernel.exceptions import ValidationException
from stockfly.modules.categories import CreateCategory
from stockfly.validation import validate_model


class TestValidateModel:
    def test_dict_with_aliases(self):
        model = validate_model(CreateCategory, {"name": "Books", "sortOrder": 2})
        assert (model.name, model.sort_order) == ("Books", 2)

    def test_json_bytes(self):
        assert validate_model(CreateCategory, b'{"name": "Books"}').is_active is True

    def test_errors_are_collected(self):
        with pytest.raises(ValidationException) as exc_info:
            validate_model(CreateCategory, {"sortOrder": "high"})
        exc = exc_info.value
        assert exc.code == "VALIDATION_ERROR"
        locs = sorted(tuple(e["loc"]) for e in exc.context["errors"])
        assert locs == [("name",), ("sortOrder",)]
        assert str(exc).startswith("Validation failed:")

    def test_invalid_json(self):
        with pytest.raises(ValidationException):
            validate_model(CreateCategory, "{")
