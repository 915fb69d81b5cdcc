from decimal import Decimal

import pytest

from gio.errors import ParamTypeError
from gio.events.params import (
    ParamDefinition,
    build_params_tree,
    to_wire,
    transform,
    validate,
)
from gio.models import EventAttr, ParamType


@pytest.mark.unit
class TestTransform:
    """
    Test coercion of raw values to their declared type.
    """

    @pytest.mark.parametrize(
        "param_type, value, expected",
        [
            (ParamType.STRING, 3, "3"),
            (ParamType.STRING, "u1", "u1"),
            (ParamType.INT, "3", 3),
            (ParamType.INT, " 42 ", 42),
            (ParamType.INT, "3.9", 3),
            (ParamType.INT, 3.7, 3),
            (ParamType.INT, "1e3", 1000),
            (ParamType.DOUBLE, "2.5", 2.5),
            (ParamType.DOUBLE, 2, 2.0),
        ],
    )
    def test_transform_values(self, param_type, value, expected) -> None:
        result = transform(param_type, "key", value)

        assert result == expected
        assert type(result) is type(expected)

    def test_big_int_keeps_precision(self) -> None:
        """
        Big int parsing goes through Decimal instead of float.
        """
        raw = "123456789012345678901234567890.0"

        assert transform(ParamType.INT, "key", raw, big_int=True) == 123456789012345678901234567890
        assert transform(ParamType.INT, "key", raw) != 123456789012345678901234567890

    @pytest.mark.parametrize("raw", ["3.7", Decimal("-0.5"), "NaN"])
    def test_big_int_rejects_non_integral_values(self, raw) -> None:
        with pytest.raises(ParamTypeError) as exc_info:
            transform(ParamType.INT, "retryCount", raw, big_int=True)

        assert exc_info.value.key == "retryCount"

    @pytest.mark.parametrize(
        "param_type, value",
        [
            (ParamType.INT, "abc"),
            (ParamType.INT, True),
            (ParamType.INT, float("inf")),
            (ParamType.DOUBLE, "x"),
            (ParamType.DOUBLE, False),
        ],
    )
    def test_unparseable_values_raise(self, param_type, value) -> None:
        with pytest.raises(ParamTypeError) as exc_info:
            transform(param_type, "retryCount", value)

        assert exc_info.value.key == "retryCount"
        assert "retryCount" in str(exc_info.value)


@pytest.mark.unit
class TestValidate:
    """
    Test runtime type checks of param values.
    """

    @pytest.mark.parametrize(
        "param_type, value",
        [
            (ParamType.STRING, "a"),
            (ParamType.INT, 3),
            (ParamType.INT, 3.5),
            (ParamType.INT, Decimal("12")),
            (ParamType.DOUBLE, 1),
            (ParamType.DOUBLE, 1.5),
        ],
    )
    def test_accepts_allowed_types(self, param_type, value) -> None:
        validate(param_type, "key", value)

    @pytest.mark.parametrize(
        "param_type, value",
        [
            (ParamType.STRING, 1),
            (ParamType.INT, "3"),
            (ParamType.INT, True),
            (ParamType.DOUBLE, "1.5"),
            (ParamType.DOUBLE, [1.5]),
        ],
    )
    def test_rejects_other_types(self, param_type, value) -> None:
        with pytest.raises(ParamTypeError):
            validate(param_type, "key", value)

    def test_none_allowed_unless_strict(self) -> None:
        validate(ParamType.STRING, "uid", None)

        with pytest.raises(ParamTypeError, match="to not be None"):
            validate(ParamType.STRING, "uid", None, strict=True)

    def test_strict_int_rejects_decimal_numbers(self) -> None:
        validate(ParamType.INT, "count", 3.0, strict=True)

        with pytest.raises(ParamTypeError, match="strict integer"):
            validate(ParamType.INT, "count", 3.5, strict=True)


@pytest.mark.unit
class TestToWire:
    @pytest.mark.parametrize(
        "param_type, value, expected",
        [
            (ParamType.INT, Decimal("3"), 3),
            (ParamType.INT, Decimal("3.0"), 3),
            (ParamType.INT, Decimal("3.5"), 3.5),
            (ParamType.DOUBLE, Decimal("1.5"), 1.5),
            (ParamType.DOUBLE, Decimal("2"), 2.0),
            (ParamType.INT, 7, 7),
            (ParamType.STRING, "a", "a"),
        ],
    )
    def test_decimals_become_json_numbers(self, param_type, value, expected) -> None:
        result = to_wire(param_type, value)

        assert result == expected
        assert type(result) is type(expected)


@pytest.mark.unit
class TestBuildParamsTree:
    def test_one_definition_per_attribute(self) -> None:
        attrs = [
            EventAttr(key="uid", type=ParamType.STRING),
            EventAttr(key="retryCount", type=ParamType.INT),
        ]

        tree = build_params_tree(attrs, required_keys=["uid"], strict=True)

        assert list(tree) == ["uid", "retryCount"]
        assert tree["uid"] == ParamDefinition(
            key="uid", type=ParamType.STRING, is_required=True, strict=True
        )
        assert tree["retryCount"].is_required is False

    def test_definition_binds_type_behavior(self) -> None:
        definition = ParamDefinition(
            key="retryCount", type=ParamType.INT, is_required=False, strict=True
        )

        assert definition.transform("3") == 3
        with pytest.raises(ParamTypeError):
            definition.validate(None)
