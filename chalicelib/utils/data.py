import json
import math
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, Tuple

from chalicelib.utils.exceptions import InvalidRequestBody, InvalidQueryParameter


def replace_dict_key(item, orig_key, new_key):
    if orig_key in item:
        if new_key not in item:
            item[new_key] = item[orig_key]
        del item[orig_key]


def substitute_keys(dict_to_process: dict, base_keys: dict, opt_dict=None):
    if opt_dict is None:
        opt_dict = {}
    all_keys = {**base_keys, **opt_dict}
    for key, val in all_keys.items():
        if val:
            replace_dict_key(dict_to_process, key, val)
        elif key in dict_to_process.keys():
            dict_to_process.pop(key, None)


def substitute_keys_copy(dict_to_process: dict, base_keys: dict) -> dict:
    result = dict(dict_to_process)
    substitute_keys(dict_to_process=result, base_keys=base_keys)
    return result


def parse_raw_body(chalice_request) -> Dict:
    request_raw_body = chalice_request.raw_body
    if not request_raw_body:
        return {}
    try:
        item = json.loads(request_raw_body)
    except ValueError:
        raise InvalidRequestBody('Request body must be valid JSON')
    if not isinstance(item, dict):
        raise InvalidRequestBody('Request body must be a JSON object')
    return fix_values_from_ui(item=item)


def fix_values_from_ui(item):
    """
    Remove keys with empty or None values and transform float to Decimal
    """
    if item.get('_values_from_ui_strategy') == 'delete_empty':
        list_to_cleanup = ['', None]
    else:
        list_to_cleanup = [None]
    item = cleanup_dict(item, list_to_cleanup)
    item.pop('_values_from_ui_strategy', None)
    result = json.dumps(item)
    return json.loads(result, parse_float=Decimal)


def cleanup_dict(item: dict, list_of_values: list):
    """ Remove None fields in dict with. Supports one nesting.
    Nested objects are kept, even when nothing is left in them """

    def sub_clean(sub_item):
        return {
            key: value
            for key, value in sub_item.items()
            if value not in list_of_values
        }

    clean = {}
    for k, v in item.items():
        if isinstance(v, dict):
            clean[k] = sub_clean(v)
        elif v not in list_of_values:
            clean[k] = v
    return clean


def clean_string(value):
    """Trimmed string, or None when the value is missing or blank. Integers (phones, pincodes) become strings"""
    if isinstance(value, int) and not isinstance(value, bool):
        value = str(value)
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_iso(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat(timespec='seconds')


def from_iso(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def get_query_params(chalice_request) -> Dict:
    return chalice_request.query_params or {}


def parse_positive_int(query_params: Dict, name: str, default: int) -> int:
    raw_value = query_params.get(name)
    if raw_value in (None, ''):
        return default
    try:
        value = int(raw_value)
    except ValueError:
        raise InvalidQueryParameter(f'Query parameter "{name}" must be a positive integer')
    if value < 1:
        raise InvalidQueryParameter(f'Query parameter "{name}" must be a positive integer')
    return value


def parse_pagination(query_params: Dict, default_limit: int) -> Tuple[int, int]:
    return parse_positive_int(query_params, 'page', 1), parse_positive_int(query_params, 'limit', default_limit)


def paginate(records: list, page: int, limit: int) -> Tuple[list, Dict]:
    total = len(records)
    start = (page - 1) * limit
    return records[start:start + limit], {
        'page': page,
        'limit': limit,
        'total': total,
        'pages': math.ceil(total / limit)
    }


def parse_day(value: str) -> Tuple[str, str]:
    """
    ISO bounds [start, end) of a single UTC calendar day given as YYYY-MM-DD
    """
    try:
        day = datetime.strptime(value, '%Y-%m-%d').replace(tzinfo=timezone.utc)
    except ValueError:
        raise InvalidQueryParameter('Query parameter "date" must be formatted as YYYY-MM-DD')
    next_day = datetime.fromordinal(day.toordinal() + 1).replace(tzinfo=timezone.utc)
    return to_iso(day), to_iso(next_day)
