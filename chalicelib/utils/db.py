import functools
import time
from random import uniform
from typing import Dict, List, Optional, Tuple

from botocore.exceptions import ClientError

from chalicelib.utils import exceptions
from chalicelib.utils.logger import logger, log_exception

# For safe db operations
RETRY_EXCEPTIONS = ('ProvisionedThroughputExceededException', 'ThrottlingException')
need_return_capacity = ('put_item', 'get_item', 'update_item', 'delete_item')
CONDITIONAL_CHECK_FAILED = 'ConditionalCheckFailedException'

MAX_RETRIES = 5
BASE_DELAY_SECONDS = 0.05
MAX_DELAY_SECONDS = 1.0


def error_code(error: ClientError) -> str:
    return error.response.get('Error', {}).get('Code', '')


def is_conditional_check_failed(error: Exception) -> bool:
    return isinstance(error, ClientError) and error_code(error) == CONDITIONAL_CHECK_FAILED


def exp_db_backoff(func):
    """
        should be used for any atomic
        get/put item in the code
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        logger.debug(f'{func.__name__}:: args={args}, kwargs={kwargs}')
        if func.__name__ in need_return_capacity:
            kwargs.update({'ReturnConsumedCapacity': 'TOTAL'})

        for retries in range(1, MAX_RETRIES + 1):
            try:
                result = func(*args, **kwargs)
                logger.info(f'{func.__name__}:: SUCCESS')
                return result
            except ClientError as e:
                if error_code(e) not in RETRY_EXCEPTIONS:
                    raise
                delay = min(BASE_DELAY_SECONDS * (2 ** retries), MAX_DELAY_SECONDS) + uniform(0, BASE_DELAY_SECONDS)
                logger.warning(f'{func.__name__}:: throttled on attempt {retries}/{MAX_RETRIES}, '
                               f'retrying in {delay:.3f}s')
                time.sleep(delay)
            except Exception as e:
                log_exception(e, msg=f'Got exception while trying to {func.__name__}: ')
                raise

        raise exceptions.NumberOfRetriesExceeded(
            f"MaxNumber={MAX_RETRIES} of DB retries has exceeded"
        )

    return wrapper


def generate_update_expression(update_body: dict, allowed_attrs_to_update: list, allowed_attrs_to_delete: list):
    """
    Generate expressions to update and delete attributes.
    if a key of update_body is empty - the attribute is deleted, else - attribute is updated
    Attribute names are always aliased, many of ours (status, name, date) are DynamoDB reserved words.
    """
    expr_attr_values = {}
    expr_attr_names = {}
    set_parts = []
    remove_parts = []
    for field in allowed_attrs_to_update:
        field_value = update_body.get(field, None)
        if field_value is None:
            continue
        expr_attr_names[f'#{field}'] = field
        # if field is in update_body but is equal to empty string, list etc. - delete field
        if field_value in ['', [], {}] and field in allowed_attrs_to_delete:
            remove_parts.append(f'#{field}')
        else:
            expr_attr_values[f':{field}'] = field_value
            set_parts.append(f'#{field}=:{field}')

    set_expr = 'SET ' + ', '.join(set_parts) if set_parts else None
    remove_expr = 'REMOVE ' + ', '.join(remove_parts) if remove_parts else None
    return set_expr, expr_attr_values, remove_expr, expr_attr_names


class Database:
    """
    Data-access handle over the single DynamoDB table.
    Owned by the application context, never created at import time.
    """

    def __init__(self, table):
        self.table = table
        self._put_item = exp_db_backoff(table.put_item)
        self._get_item = exp_db_backoff(table.get_item)
        self._update_item = exp_db_backoff(table.update_item)
        self._delete_item = exp_db_backoff(table.delete_item)
        self._query = exp_db_backoff(table.query)

    def put_db_record(self, item: dict, condition_expression=None) -> None:
        kwargs = {'Item': item}
        if condition_expression is not None:
            kwargs['ConditionExpression'] = condition_expression
        self._put_item(**kwargs)

    def find_db_item(self, partkey: str, sortkey: str) -> Optional[Dict]:
        result = self._get_item(Key={'partkey': partkey, 'sortkey': sortkey})
        return result.get('Item')

    def get_db_item(self, partkey: str, sortkey: str) -> Dict:
        item = self.find_db_item(partkey, sortkey)
        if item is None:
            logger.error(f"get_db_item ::: record partkey={partkey} sortkey={sortkey} not found")
            raise exceptions.RecordNotFound(f'record partkey={partkey} sortkey={sortkey} not found')
        return item

    def update_db_record(self, key: dict, update_body: dict, allowed_attrs_to_update: list,
                         allowed_attrs_to_delete: list, condition_expression=None) -> Dict:
        """
        Updates the record and returns all of its attributes after the update.
        With condition_expression a failed condition raises ClientError(ConditionalCheckFailedException).
        """
        set_expr, expr_attr_values, remove_expr, expr_attr_names = generate_update_expression(
            update_body=update_body,
            allowed_attrs_to_update=allowed_attrs_to_update,
            allowed_attrs_to_delete=allowed_attrs_to_delete
        )
        update_expr = ' '.join(expr for expr in (set_expr, remove_expr) if expr)
        if not update_expr:
            return self.get_db_item(key['partkey'], key['sortkey'])

        update_item_dict = {
            'Key': key,
            'UpdateExpression': update_expr,
            'ExpressionAttributeNames': expr_attr_names,
            'ReturnValues': 'ALL_NEW'
        }
        if expr_attr_values:
            update_item_dict['ExpressionAttributeValues'] = expr_attr_values
        if condition_expression is not None:
            update_item_dict['ConditionExpression'] = condition_expression
        response = self._update_item(**update_item_dict)
        return response.get('Attributes', {})

    def delete_db_record(self, key: dict) -> Optional[Dict]:
        """
        Deletes the record, returns its attributes or None if there was nothing to delete
        """
        response = self._delete_item(Key=key, ReturnValues='ALL_OLD')
        return response.get('Attributes')

    def increment_counter(self, partkey: str, sortkey: str, attribute: str = 'sequence_value') -> int:
        """
        Atomic ADD on a counter record, creates the record on first use
        """
        response = self._update_item(
            Key={'partkey': partkey, 'sortkey': sortkey},
            UpdateExpression='ADD #counter :increment',
            ExpressionAttributeNames={'#counter': attribute},
            ExpressionAttributeValues={':increment': 1},
            ReturnValues='UPDATED_NEW'
        )
        return int(response['Attributes'][attribute])

    def query_items_paginated(self, key_condition_expression, filter_expression=None, limit=None,
                              start_key=None) -> Tuple[List[Dict], Optional[Dict]]:
        kwargs = {'KeyConditionExpression': key_condition_expression}
        if filter_expression is not None:
            kwargs.update({'FilterExpression': filter_expression})

        if limit:
            kwargs.update({'Limit': int(limit)})

        if start_key:
            kwargs.update({'ExclusiveStartKey': start_key})

        resp = self._query(**kwargs)
        return resp['Items'], resp.get('LastEvaluatedKey')

    def query_items_paged(self, key_condition_expression, filter_expression=None) -> List[Dict]:
        """ This method shall be used whenever you think the query will
            return more than 1mb of data at once"""
        all_items = []
        items, last_evaluated_key = self.query_items_paginated(
            key_condition_expression,
            filter_expression=filter_expression
        )
        all_items.extend(items)

        while last_evaluated_key is not None:
            items, last_evaluated_key = self.query_items_paginated(
                key_condition_expression,
                filter_expression=filter_expression,
                start_key=last_evaluated_key
            )
            all_items.extend(items)

        return all_items
