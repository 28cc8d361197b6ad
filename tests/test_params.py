"""Tests for AlterCollectionParam and its builder."""

from __future__ import annotations

import pytest

from scalarq.errors import ParamError
from scalarq.params import (
    MMAP_ENABLED,
    TTL_SECONDS,
    AlterCollectionParam,
    parse_mmap_enabled,
    parse_ttl_seconds,
    validate_properties,
)


class TestBuilder:
    def test_ttl_and_mmap(self):
        param = (
            AlterCollectionParam.new_builder()
            .with_collection_name("books")
            .with_ttl(3600)
            .with_mmap_enabled(True)
            .build()
        )
        assert param.collection_name == "books"
        assert param.database_name is None
        assert dict(param.properties) == {TTL_SECONDS: "3600", MMAP_ENABLED: "true"}
        assert param.ttl_seconds == 3600
        assert param.mmap_enabled is True

    def test_zero_ttl_is_valid(self):
        param = AlterCollectionParam.new_builder().with_collection_name("c").with_ttl(0).build()
        assert param.properties[TTL_SECONDS] == "0"

    def test_negative_ttl_rejected(self):
        builder = AlterCollectionParam.new_builder().with_collection_name("c")
        with pytest.raises(ParamError, match="0 or greater"):
            builder.with_ttl(-1)

    @pytest.mark.parametrize("value", [1.5, "10", True, None])
    def test_non_integer_ttl_rejected(self, value):
        with pytest.raises(ParamError, match="integer"):
            AlterCollectionParam.new_builder().with_ttl(value)

    def test_mmap_disabled(self):
        param = (
            AlterCollectionParam.new_builder()
            .with_collection_name("c")
            .with_mmap_enabled(False)
            .build()
        )
        assert param.properties[MMAP_ENABLED] == "false"
        assert param.mmap_enabled is False

    @pytest.mark.parametrize("value", ["false", 0, 1, None])
    def test_non_bool_mmap_rejected(self, value):
        with pytest.raises(ParamError, match="must be a bool"):
            AlterCollectionParam.new_builder().with_mmap_enabled(value)

    def test_unset_properties_are_none(self):
        param = AlterCollectionParam.new_builder().with_collection_name("c").build()
        assert param.ttl_seconds is None
        assert param.mmap_enabled is None
        assert dict(param.properties) == {}

    def test_later_value_wins(self):
        param = (
            AlterCollectionParam.new_builder()
            .with_collection_name("c")
            .with_ttl(10)
            .with_property(TTL_SECONDS, "20")
            .build()
        )
        assert param.ttl_seconds == 20

    def test_raw_property_forwarded_verbatim(self):
        param = (
            AlterCollectionParam.new_builder()
            .with_collection_name("c")
            .with_property("custom.key", "anything")
            .build()
        )
        assert param.properties["custom.key"] == "anything"

    def test_property_key_required(self):
        builder = AlterCollectionParam.new_builder()
        with pytest.raises(ParamError):
            builder.with_property("", "x")
        with pytest.raises(ParamError):
            builder.with_property("k", None)

    def test_empty_property_value_allowed(self):
        param = (
            AlterCollectionParam.new_builder()
            .with_collection_name("c")
            .with_property("custom.key", "")
            .build()
        )
        assert param.properties["custom.key"] == ""

    def test_database_name(self):
        param = (
            AlterCollectionParam.new_builder()
            .with_collection_name("c")
            .with_database_name("db1")
            .build()
        )
        assert param.database_name == "db1"

    @pytest.mark.parametrize("name", ["", "   "])
    def test_empty_collection_name_rejected(self, name):
        builder = AlterCollectionParam.new_builder().with_collection_name(name)
        with pytest.raises(ParamError, match="null or empty"):
            builder.build()

    def test_missing_collection_name_rejected(self):
        with pytest.raises(ParamError):
            AlterCollectionParam.new_builder().build()
        with pytest.raises(ParamError):
            AlterCollectionParam.new_builder().with_collection_name(None)


class TestParam:
    def test_properties_are_read_only(self):
        param = AlterCollectionParam.new_builder().with_collection_name("c").with_ttl(5).build()
        with pytest.raises(TypeError):
            param.properties[TTL_SECONDS] = "6"  # type: ignore[index]

    def test_builder_reuse_does_not_leak(self):
        builder = AlterCollectionParam.new_builder().with_collection_name("c").with_ttl(5)
        first = builder.build()
        builder.with_ttl(6)
        assert first.ttl_seconds == 5

    def test_to_dict_and_str(self):
        param = AlterCollectionParam.new_builder().with_collection_name("c").with_ttl(5).build()
        assert param.to_dict() == {
            "collection_name": "c",
            "database_name": None,
            "properties": {TTL_SECONDS: "5"},
        }
        text = str(param)
        assert "collection_name='c'" in text
        assert TTL_SECONDS in text


class TestPropertyValues:
    def test_parse_ttl(self):
        assert parse_ttl_seconds("30") == 30
        with pytest.raises(ParamError):
            parse_ttl_seconds("soon")
        with pytest.raises(ParamError):
            parse_ttl_seconds("-5")

    @pytest.mark.parametrize("value,expected", [("true", True), ("False", False)])
    def test_parse_mmap(self, value, expected):
        assert parse_mmap_enabled(value) is expected

    def test_parse_mmap_rejects_other_values(self):
        with pytest.raises(ParamError):
            parse_mmap_enabled("yes")

    def test_validate_properties_ignores_unknown_keys(self):
        validate_properties({"custom": "whatever", TTL_SECONDS: "10"})
        with pytest.raises(ParamError):
            validate_properties({MMAP_ENABLED: "maybe"})
