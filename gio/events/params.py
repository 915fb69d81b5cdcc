"""
Per-type coercion and validation of event params.

Behavior is looked up in explicit ``ParamType`` tables, a
``ParamDefinition`` binds them to one attribute of an event definition.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, Iterable, NamedTuple, Tuple, Type

from gio.errors import ParamTypeError
from gio.models import EventAttr, ParamType

NUMBER_TYPES: Tuple[Type, ...] = (int, float, Decimal)

ALLOWED_TYPES: Dict[ParamType, Tuple[Type, ...]] = {
    ParamType.STRING: (str,),
    ParamType.INT: NUMBER_TYPES,
    ParamType.DOUBLE: NUMBER_TYPES,
}


def _to_string(value: Any, big_int: bool = False) -> str:
    return str(value)


def _to_int(value: Any, big_int: bool = False) -> int:
    if isinstance(value, bool):
        raise ValueError("booleans are not integers")
    if big_int:
        number = Decimal(str(value).strip())
        if number != number.to_integral_value():
            raise ValueError(f"{value!r} is not an integer")
        return int(number)
    if isinstance(value, str):
        value = value.strip()
        try:
            return int(value, 10)
        except ValueError:
            return int(float(value))
    return int(value)


def _to_double(value: Any, big_int: bool = False) -> float:
    if isinstance(value, bool):
        raise ValueError("booleans are not numbers")
    return float(value)


TRANSFORMERS: Dict[ParamType, Callable[..., Any]] = {
    ParamType.STRING: _to_string,
    ParamType.INT: _to_int,
    ParamType.DOUBLE: _to_double,
}


def transform(param_type: ParamType, key: str, value: Any, big_int: bool = False) -> Any:
    """
    Coerce ``value`` to the Python type backing ``param_type``.

    Raises:
        ParamTypeError: If the value cannot be parsed.
    """
    try:
        return TRANSFORMERS[param_type](value, big_int)
    except (ValueError, TypeError, OverflowError, InvalidOperation) as e:
        raise ParamTypeError(
            key,
            f"Expect variable `{key}` to be convertible to {param_type.value}, got {value!r}.",
        ) from e


def validate(param_type: ParamType, key: str, value: Any, strict: bool = False) -> None:
    """
    Check ``value`` against the types allowed for ``param_type``.

    None is accepted unless ``strict``. Strict ``Int`` also rejects numbers
    with a fractional part.

    Raises:
        ParamTypeError: If the value does not match.
    """
    if value is None:
        if strict:
            raise ParamTypeError(
                key, f"Expect variable `{key}` to not be None."
            )
        return

    expected = ALLOWED_TYPES[param_type]
    if isinstance(value, bool) or not isinstance(value, expected):
        names = ", ".join(t.__name__ for t in expected)
        raise ParamTypeError(
            key,
            f"Expect variable `{key}` to be one type of {names}, got {type(value).__name__}.",
        )

    if param_type is ParamType.INT and strict and value % 1:
        raise ParamTypeError(
            key, f"Expect `{key}` to be a strict integer, got a decimal number."
        )


def to_wire(param_type: ParamType, value: Any) -> Any:
    """
    Replace a validated ``Decimal`` by the JSON number it stands for, an
    ``int`` for integral ``Int`` values and a ``float`` otherwise.
    """
    if not isinstance(value, Decimal):
        return value
    if param_type is ParamType.INT and value.is_finite() and value == value.to_integral_value():
        return int(value)
    return float(value)


class ParamDefinition(NamedTuple):
    key: str
    type: ParamType
    is_required: bool
    strict: bool = False
    big_int: bool = False

    def validate(self, value: Any) -> None:
        validate(self.type, self.key, value, self.strict)

    def transform(self, value: Any) -> Any:
        return transform(self.type, self.key, value, self.big_int)

    def to_wire(self, value: Any) -> Any:
        return to_wire(self.type, value)


def build_params_tree(
    attrs: Iterable[EventAttr],
    required_keys: Iterable[str] = (),
    strict: bool = False,
    big_int: bool = False,
) -> Dict[str, ParamDefinition]:
    required = set(required_keys)
    return {
        attr.key: ParamDefinition(
            key=attr.key,
            type=attr.type,
            is_required=attr.key in required,
            strict=strict,
            big_int=big_int,
        )
        for attr in attrs
    }
