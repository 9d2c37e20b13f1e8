import pytest
from pydantic import ValidationError

from feedbase.core.database import get_default_database
from feedbase.core.exceptions import FeedContractError
from feedbase.sql.db_spec import DBProtocol, DBProtocolV2, DBSpec
from tests.demo_models import LegacyDemoProtocol


def _pair_protocol(**overrides) -> DBProtocolV2:
    fields = {
        "table": "demo_pair",
        "primary_key": ["group_id", "item_id"],
        "cols": ["group_id", "item_id", "label", "rank"],
    }
    fields.update(overrides)
    return DBProtocolV2(**fields)


def test_single_key_is_normalised_to_list():
    spec = DBSpec(DBProtocolV2(table="demo_table", primary_key="uid", cols=["uid", "key1"]))
    assert spec.primary_keys() == ["uid"]
    assert spec.is_single_key()
    assert spec.primary_key == "uid"


def test_composite_key_keeps_declaration_order():
    spec = DBSpec(_pair_protocol())
    assert spec.primary_keys() == ["group_id", "item_id"]
    assert not spec.is_single_key()
    with pytest.raises(FeedContractError, match="must be single item"):
        _ = spec.primary_key


def test_column_defaults():
    spec = DBSpec(_pair_protocol())
    assert spec.insertable_columns() == ["group_id", "item_id", "label", "rank"]
    assert spec.modifiable_columns() == ["label", "rank"]

    restricted = DBSpec(_pair_protocol(insertable_cols=["group_id", "item_id"], modifiable_cols=["label"]))
    assert restricted.insertable_columns() == ["group_id", "item_id"]
    assert restricted.modifiable_columns() == ["label"]


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"table": ""}, "table must not be empty"),
        ({"primary_key": []}, "primary_key must name at least one column"),
        ({"primary_key": ["group_id", "missing"]}, "not listed in cols"),
    ],
)
def test_invalid_descriptor_is_rejected(overrides, message):
    with pytest.raises(ValidationError, match=message):
        _pair_protocol(**overrides)


def test_descriptor_is_frozen():
    protocol = _pair_protocol()
    with pytest.raises(ValidationError):
        protocol.table = "other"


def test_legacy_protocol_is_adapted(settings_override):
    legacy = LegacyDemoProtocol()
    assert isinstance(legacy, DBProtocol)

    spec = DBSpec.from_protocol(legacy)

    assert spec.table == "demo_table"
    assert spec.primary_keys() == ["uid"]
    assert spec.columns() == ["uid", "key1", "key2"]
    assert spec.modifiable_columns() == ["key2"]
    assert spec.database is get_default_database()


def test_from_protocol_passes_specs_through():
    spec = DBSpec(_pair_protocol())
    assert DBSpec.from_protocol(spec) is spec
    with pytest.raises(TypeError, match="Unsupported descriptor type"):
        DBSpec.from_protocol(object())


def test_database_defaults_lazily(settings_override):
    spec = DBSpec(_pair_protocol())
    assert spec.database is get_default_database()


def test_copy_with_replaces_fields_only_on_the_copy():
    spec = DBSpec(_pair_protocol())
    copy = spec.copy_with(table="demo_pair_2024", modifiable_cols=["rank"])

    assert copy.table == "demo_pair_2024"
    assert copy.modifiable_columns() == ["rank"]
    assert copy.primary_keys() == ["group_id", "item_id"]
    assert spec.table == "demo_pair"
    assert repr(copy) == "DBSpec(table='demo_pair_2024', primary_keys=['group_id', 'item_id'])"


def test_copy_with_is_validated():
    spec = DBSpec(_pair_protocol())
    with pytest.raises(ValidationError):
        spec.copy_with(cols=["label"])
