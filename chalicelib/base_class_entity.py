from typing import Tuple, Dict, List, Callable

from boto3.dynamodb.conditions import Attr
from botocore.exceptions import ClientError

from chalicelib.constants.substitute_keys import from_db
from chalicelib.utils import exceptions
from chalicelib.utils.data import substitute_keys, to_iso, utc_now
from chalicelib.utils.db import Database, is_conditional_check_failed
from chalicelib.utils.logger import logger

# field -> (validator, message shown to the client when the validator fails)
ValidationTable = Dict[str, Tuple[Callable, str]]


class EntityBase:
    pk = None
    sk = None
    record_type = ''
    not_found_exception = exceptions.RecordNotFound
    not_found_message = 'Record not found'

    required_immutable_fields_validation: ValidationTable = {}
    required_mutable_fields_validation: ValidationTable = {}
    optional_fields_validation: ValidationTable = {}
    deletable_fields: List = []

    def __init__(self, db: Database, id_):
        self.db = db
        self.id_: str = id_
        self.db_record: Dict = {}

    def _get_pk_sk(self) -> Tuple[str, str]:
        """
        Should be re-implemented in each child class
        :return:
        partkey, sortkey of db item for child
        """
        return self.pk, self.sk

    def _get_db_item(self) -> Dict:
        item = self.db.find_db_item(*self._get_pk_sk())
        if item is None:
            raise self.not_found_exception(self.not_found_message)
        return item

    def _to_dict(self) -> Dict:
        """
        Should be re-implemented in each child class
        :return:
        dict of item's attributes
        """
        return {
            'id_': self.id_
        }

    def _init_db_record(self) -> None:
        pk, sk = self._get_pk_sk()
        self.db_record = {
            'partkey': pk,
            'sortkey': sk,
            'record_type': self.record_type,
            **{key: value for key, value in self._to_dict().items() if value is not None}
        }

    @staticmethod
    def _collect_errors(record: Dict, validation: ValidationTable, optional: bool) -> List[str]:
        errors = []
        for key, (validator_func, message) in validation.items():
            value = record.get(key)
            if optional and value is None:
                continue
            if not validator_func(value):
                logger.warning(f'_collect_errors ::: {key=}, {value=} is not valid')
                errors.append(message)
        return errors

    def _validate_fields(self, record: Dict) -> None:
        """
        Validates all fields of the record against the validation tables
        Raise ValidationException with the list of per-field messages if any field is not valid
        """
        errors = [
            *self._collect_errors(record, {
                **self.required_immutable_fields_validation,
                **self.required_mutable_fields_validation
            }, optional=False),
            *self._collect_errors(record, self.optional_fields_validation, optional=True)
        ]
        if errors:
            logger.error(f'_validate_fields ::: {self.record_type=} {self.id_=} {errors=}')
            raise exceptions.ValidationException('Validation error', errors=errors)

    def _create_db_record(self, condition_expression=None) -> None:
        """
        Creates entity db record
        :return:
        None
        """
        self._init_db_record()
        self._validate_fields(self.db_record)
        self.db.put_db_record(self.db_record, condition_expression=condition_expression)
        logger.info(f"_create_db_record ::: {self.record_type=} {self.id_=} {self.db_record.get('partkey')=} "
                    f"{self.db_record.get('sortkey')=} successfully created")

    def _update_fields_whitelist(self) -> List:
        return [*self.required_mutable_fields_validation.keys(), *self.optional_fields_validation.keys()]

    def _validate_update_dict(self, update_dict: Dict) -> None:
        whitelist = self._update_fields_whitelist()
        validation = {
            key: rule for key, rule in {
                **self.required_mutable_fields_validation,
                **self.optional_fields_validation
            }.items() if key in whitelist and key in update_dict
        }
        # None values are skipped by the update expression, so they are not validated either
        errors = self._collect_errors(update_dict, validation, optional=True)
        if errors:
            logger.error(f'_validate_update_dict ::: {self.record_type=} {self.id_=} {errors=}')
            raise exceptions.ValidationException('Validation error', errors=errors)

    def _update_db_record(self, update_dict: Dict) -> Dict:
        """
        Updates the existing entity db record, the record must already exist
        :return:
        all attributes of the record after the update
        """
        pk, sk = self._get_pk_sk()
        update_dict = {**update_dict, 'updated_at': to_iso(utc_now())}
        self._validate_update_dict(update_dict)
        try:
            attributes = self.db.update_db_record(
                key={'partkey': pk, 'sortkey': sk},
                update_body=update_dict,
                allowed_attrs_to_update=self._update_fields_whitelist(),
                allowed_attrs_to_delete=self.deletable_fields,
                condition_expression=Attr('partkey').exists()
            )
        except ClientError as error:
            if is_conditional_check_failed(error):
                raise self.not_found_exception(self.not_found_message)
            raise
        logger.info(f"_update_db_record ::: {self.record_type=} "
                    f"{self.id_=} {pk=} {sk=} successfully updated")
        return attributes

    def _to_ui(self) -> Dict:
        item = {key: value for key, value in self._to_dict().items() if value is not None}
        substitute_keys(dict_to_process=item, base_keys=from_db)
        return item

    def to_ui(self) -> Dict:
        return self._to_ui()
