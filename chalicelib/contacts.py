from typing import Tuple, Dict, Optional
from uuid import uuid4

from boto3.dynamodb.conditions import Key
from chalice import Response

from chalicelib.base_class_entity import EntityBase
from chalicelib.constants import keys_structure
from chalicelib.constants.constants import CONTACT_STATUSES, CONTACT_STATUS_NEW, MAX_PERSON_NAME_LENGTH, \
    MAX_CONTACT_SUBJECT_LENGTH, MAX_CONTACT_MESSAGE_LENGTH, EMAIL_REGEX, PHONE_REGEX, DEFAULT_CONTACT_PAGE_LIMIT
from chalicelib.constants.status_codes import http201
from chalicelib.utils import auth as utils_auth, data as utils_data, app as utils_app, validators
from chalicelib.utils.db import Database
from chalicelib.utils.logger import logger


class ContactMessage(EntityBase):
    pk = keys_structure.contact_messages_pk
    sk = keys_structure.contact_messages_sk
    record_type = 'contact_message'

    required_immutable_fields_validation = {
        'id_': (validators.is_uuid, 'Message id is invalid'),
        'name': (validators.is_str(MAX_PERSON_NAME_LENGTH),
                 f'Name is required and cannot exceed {MAX_PERSON_NAME_LENGTH} characters'),
        'email': (validators.matches(EMAIL_REGEX), 'Please enter a valid email'),
        'message': (validators.is_str(MAX_CONTACT_MESSAGE_LENGTH),
                    f'Message is required and cannot exceed {MAX_CONTACT_MESSAGE_LENGTH} characters'),
        'created_at': (lambda x: isinstance(x, str), 'Creation date is required')
    }

    required_mutable_fields_validation = {
        'status': (validators.is_one_of(CONTACT_STATUSES), 'Invalid status value')
    }

    optional_fields_validation = {
        'phone': (validators.matches(PHONE_REGEX), 'Please enter a valid phone number'),
        'subject': (validators.is_str(MAX_CONTACT_SUBJECT_LENGTH, required=False),
                    f'Subject cannot exceed {MAX_CONTACT_SUBJECT_LENGTH} characters')
    }

    def __init__(self, db: Optional[Database], id_, **kwargs):
        EntityBase.__init__(self, db, id_)

        email = kwargs.get('email')
        self.name: str = utils_data.clean_string(kwargs.get('name')) or kwargs.get('name')
        self.email: str = email.strip().lower() if isinstance(email, str) else email
        self.phone: str = utils_data.clean_string(kwargs.get('phone'))
        self.subject: str = utils_data.clean_string(kwargs.get('subject'))
        self.message: str = utils_data.clean_string(kwargs.get('message')) or kwargs.get('message')
        self.status: str = kwargs.get('status', CONTACT_STATUS_NEW)
        self.created_at: str = kwargs.get('created_at') or utils_data.to_iso(utils_data.utc_now())

    @classmethod
    def init_request_create(cls, request, db: Database):
        request_body = utils_data.parse_raw_body(request)
        return cls(
            db,
            str(uuid4()),
            name=request_body.get('name'),
            email=request_body.get('email'),
            phone=request_body.get('phone'),
            subject=request_body.get('subject'),
            message=request_body.get('message')
        )

    @classmethod
    def from_db_record(cls, db: Database, record: Dict):
        return cls(db, **record)

    def _get_pk_sk(self) -> Tuple[str, str]:
        return self.pk, self.sk.format(message_id=self.id_)

    def _to_dict(self) -> Dict:
        return {
            'id_': self.id_,
            'name': self.name,
            'email': self.email,
            'phone': self.phone,
            'subject': self.subject,
            'message': self.message,
            'status': self.status,
            'created_at': self.created_at
        }

    def create(self) -> None:
        self._create_db_record()


@utils_app.request_exception_handler
@utils_app.log_start_finish
def endpoint_create_contact_message(request, ctx) -> Response:
    contact_message = ContactMessage.init_request_create(request, ctx.db)
    contact_message.create()
    if ctx.notifier is not None:
        ctx.notifier.notify_contact_message(contact_message.db_record)
    logger.info(f'endpoint_create_contact_message ::: message {contact_message.id_} stored')
    return utils_app.success_response(
        data={'id': contact_message.id_},
        message="Thank you for contacting us! We'll get back to you soon.",
        status_code=http201
    )


@utils_app.request_exception_handler
@utils_auth.authenticate
@utils_app.log_start_finish
def endpoint_get_contact_messages(request, ctx) -> Response:
    qp = utils_data.get_query_params(request)
    page, limit = utils_data.parse_pagination(qp, DEFAULT_CONTACT_PAGE_LIMIT)
    db_records = ctx.db.query_items_paged(key_condition_expression=Key('partkey').eq(ContactMessage.pk))
    db_records.sort(key=lambda record: record.get('created_at', ''), reverse=True)
    page_records, pagination = utils_data.paginate(db_records, page, limit)
    return utils_app.success_response(
        data=[ContactMessage.from_db_record(ctx.db, record).to_ui() for record in page_records],
        pagination=pagination
    )
