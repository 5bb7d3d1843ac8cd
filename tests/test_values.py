import pytest

from curly.errors import TypeMismatchError
from curly.values import FALSE, NULL, TRUE, Value, ValueKind, format_number, stringify, to_value


class TestToValue:

    def test_scalars(self):
        assert to_value("x") == Value.string("x")
        assert to_value(3) == Value.number(3)
        assert to_value(1.5) == Value.number(1.5)
        assert to_value(None) is NULL

    def test_bool_is_not_number(self):
        assert to_value(True) is TRUE
        assert to_value(False) is FALSE
        assert to_value(True).kind is ValueKind.BOOLEAN

    def test_nested_structures(self):
        value = to_value({"users": [{"name": "Ann"}], "tags": ("a",)})
        assert value.kind is ValueKind.RECORD
        users = value.payload["users"]
        assert users.kind is ValueKind.SEQUENCE
        assert users.payload[0].payload["name"] == Value.string("Ann")
        assert value.payload["tags"] == Value.sequence([Value.string("a")])

    def test_value_passthrough(self):
        value = Value.string("x")
        assert to_value(value) is value

    def test_unsupported(self):
        with pytest.raises(TypeError, match="Cannot use bytes"):
            to_value(b"raw")
        with pytest.raises(TypeError, match="Cannot use set"):
            to_value({1, 2})

    def test_record_is_read_only(self):
        record = to_value({"a": 1})
        with pytest.raises(TypeError):
            record.payload["b"] = Value.number(2)


class TestStringify:

    def test_numbers(self):
        assert format_number(4) == "4"
        assert format_number(4.0) == "4"
        assert format_number(2.5) == "2.5"
        assert format_number(-0.125) == "-0.125"

    def test_scalars(self):
        assert stringify(Value.string("a b")) == "a b"
        assert stringify(TRUE) == "true"
        assert stringify(FALSE) == "false"
        assert stringify(NULL) == "null"

    def test_containers_cannot_be_rendered(self):
        with pytest.raises(TypeMismatchError, match="Cannot render a record as text at offset 3"):
            stringify(Value.record({}), 3)
        with pytest.raises(TypeMismatchError, match="Cannot render a sequence as text"):
            stringify(Value.sequence([]))

    def test_small_and_large_floats_without_exponent(self):
        assert format_number(1 / 100000) == "0.00001"
        assert format_number(-1.5e-7) == "-0.00000015"
        assert format_number(1e20) == "100000000000000000000"
        assert format_number(123456789.125) == "123456789.125"

    def test_non_finite_numbers_cannot_be_rendered(self):
        with pytest.raises(TypeMismatchError, match="non-finite number"):
            stringify(Value.number(float("inf")), 0)
        with pytest.raises(TypeMismatchError, match="non-finite number"):
            stringify(Value.number(float("nan")))
