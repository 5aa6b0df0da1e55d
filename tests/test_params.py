from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import pytest

from rgwadmin.exceptions import SerializationError
from rgwadmin.params import QueryValues, Rule, format_timestamp, param, serialize


@dataclass
class Sample:
    name: Optional[str] = param("name", Rule.IF_NOT_EMPTY)
    count: Optional[int] = param("count")
    flag: Optional[bool] = param("flag", Rule.FALSE_ONLY)
    purge: Optional[bool] = param("purge", Rule.TRUE_ONLY)
    since: Optional[datetime] = param("since", Rule.TIMESTAMP)
    local_only: str = "never serialized"


# ---------------------------------------------------------------------------
# serialize
# ---------------------------------------------------------------------------

class TestSerialize:

    def test_none_object_gives_empty_values(self):
        assert len(serialize(None)) == 0

    def test_unset_fields_emit_nothing(self):
        assert list(serialize(Sample())) == []

    def test_fields_without_param_metadata_are_ignored(self):
        values = serialize(Sample(local_only="x"))
        assert "local_only" not in values

    def test_if_not_empty(self):
        assert serialize(Sample(name="")).get("name") is None
        assert serialize(Sample(name="alice")).get("name") == "alice"

    def test_always_renders_integers(self):
        assert serialize(Sample(count=0)).get("count") == "0"

    def test_false_only_omits_true(self):
        assert "flag" not in serialize(Sample(flag=True))
        assert serialize(Sample(flag=False)).get_all("flag") == ["False"]

    def test_true_only_omits_false(self):
        assert "purge" not in serialize(Sample(purge=False))
        assert serialize(Sample(purge=True)).get("purge") == "True"

    def test_timestamp(self):
        values = serialize(Sample(since=datetime(2024, 1, 5, 3, 4, 5)))
        assert values.get("since") == "2024-1-5 3:4:5"

    def test_field_order_is_declaration_order(self):
        values = serialize(Sample(name="a", count=1, flag=False))
        assert [k for k, _ in values] == ["name", "count", "flag"]

    @pytest.mark.parametrize("kwargs", [
        {"name": 42},
        {"flag": "no"},
        {"purge": 1},
        {"since": "2024-01-01"},
        {"count": True},
        {"count": 1.5},
    ])
    def test_rule_type_mismatch_raises(self, kwargs):
        with pytest.raises(SerializationError) as excinfo:
            serialize(Sample(**kwargs))
        assert list(kwargs)[0] in str(excinfo.value)


class TestFormatTimestamp:

    def test_no_zero_padding(self):
        assert format_timestamp(datetime(2023, 3, 7, 0, 0, 9)) == "2023-3-7 0:0:9"

    def test_two_digit_fields(self):
        assert format_timestamp(datetime(2023, 12, 31, 23, 59, 58)) == "2023-12-31 23:59:58"


# ---------------------------------------------------------------------------
# QueryValues
# ---------------------------------------------------------------------------

class TestQueryValues:

    def test_encode_sorts_keys(self):
        values = QueryValues([("uid", "alice"), ("format", "json")])
        assert values.encode() == "format=json&uid=alice"

    def test_encode_keeps_order_of_repeated_keys(self):
        values = QueryValues([("b", "2"), ("a", "x"), ("b", "1")])
        assert values.encode() == "a=x&b=2&b=1"

    def test_encode_escapes(self):
        values = QueryValues([("start", "2024-1-5 3:4:5")])
        assert values.encode() == "start=2024-1-5%203%3A4%3A5"

    def test_set_replaces_all_values(self):
        values = QueryValues([("k", "1"), ("k", "2"), ("other", "x")])
        values.set("k", "3")
        assert values.get_all("k") == ["3"]
        assert len(values) == 2

    def test_add_appends(self):
        values = QueryValues()
        values.add("k", "1")
        values.add("k", "2")
        assert values.get_all("k") == ["1", "2"]
        assert values.get("missing") is None
