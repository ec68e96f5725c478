import re
from decimal import Decimal
from uuid import UUID


def is_number(value) -> bool:
    return isinstance(value, (int, Decimal)) and not isinstance(value, bool)


def is_int(value) -> bool:
    # DynamoDB hands every stored number back as Decimal
    if isinstance(value, Decimal):
        return value.is_finite() and value == value.to_integral_value()
    return isinstance(value, int) and not isinstance(value, bool)


def is_number_between(low=None, high=None):
    def check(value):
        if not is_number(value):
            return False
        return (low is None or value >= low) and (high is None or value <= high)
    return check


def is_int_between(low=None, high=None):
    def check(value):
        return is_int(value) and is_number_between(low, high)(value)
    return check


def is_str(max_length: int = None, required: bool = True):
    def check(value):
        if not isinstance(value, str):
            return False
        if required and not value.strip():
            return False
        return max_length is None or len(value) <= max_length
    return check


def matches(pattern: str):
    regex = re.compile(pattern)

    def check(value):
        return isinstance(value, str) and regex.match(value) is not None
    return check


def is_one_of(values):
    return lambda x: x in values


def is_uuid(value) -> bool:
    if not isinstance(value, str):
        return False
    try:
        UUID(value)
    except ValueError:
        return False
    return True


def is_list_of_str(value) -> bool:
    return isinstance(value, list) and all(isinstance(i, str) for i in value)
