from typing import Tuple, Dict, List, Optional
from uuid import uuid4

from boto3.dynamodb.conditions import Key, Attr
from chalice import Response

from chalicelib.base_class_entity import EntityBase
from chalicelib.constants import keys_structure
from chalicelib.constants.constants import RESERVATION_STATUSES, RESERVATION_STATUS_PENDING, \
    RESERVATION_STATUS_CONFIRMED, RESERVATION_STATUS_CANCELLED, MIN_GUESTS, MAX_GUESTS, MIN_TABLE_NUMBER, \
    MAX_TABLE_NUMBER, MAX_PERSON_NAME_LENGTH, MAX_NOTE_LENGTH, EMAIL_REGEX, PHONE_REGEX, TIME_REGEX, \
    DEFAULT_RESERVATIONS_PAGE_LIMIT
from chalicelib.constants.status_codes import http201
from chalicelib.utils import auth as utils_auth, data as utils_data, app as utils_app, exceptions, validators
from chalicelib.utils.db import Database
from chalicelib.utils.logger import logger

REQUIRED_FIELDS = ('name', 'email', 'phone', 'date', 'time', 'guests')


class Reservation(EntityBase):
    pk = keys_structure.reservations_pk
    sk = keys_structure.reservations_sk
    record_type = 'reservation'
    not_found_exception = exceptions.ReservationNotFound
    not_found_message = 'Reservation not found'

    required_immutable_fields_validation = {
        'id_': (validators.is_uuid, 'Reservation id is invalid'),
        'name': (validators.is_str(MAX_PERSON_NAME_LENGTH),
                 f'Name is required and cannot exceed {MAX_PERSON_NAME_LENGTH} characters'),
        'email': (validators.matches(EMAIL_REGEX), 'Please enter a valid email'),
        'phone': (validators.matches(PHONE_REGEX), 'Please enter a valid phone number'),
        'date': (lambda x: isinstance(x, str), 'Reservation date is required'),
        'time': (validators.matches(TIME_REGEX), 'Please enter a valid time format (HH:MM)'),
        'guests': (validators.is_int_between(MIN_GUESTS, MAX_GUESTS),
                   f'Number of guests must be between {MIN_GUESTS} and {MAX_GUESTS}'),
        'created_at': (lambda x: isinstance(x, str), 'Creation date is required')
    }

    required_mutable_fields_validation = {
        'status': (validators.is_one_of(RESERVATION_STATUSES), 'Invalid status value'),
        'updated_at': (lambda x: isinstance(x, str), 'Update date is required')
    }

    optional_fields_validation = {
        'special_requests': (validators.is_str(MAX_NOTE_LENGTH, required=False),
                             f'Special requests cannot exceed {MAX_NOTE_LENGTH} characters'),
        'table_number': (validators.is_int_between(MIN_TABLE_NUMBER, MAX_TABLE_NUMBER),
                         f'Table number must be between {MIN_TABLE_NUMBER} and {MAX_TABLE_NUMBER}')
    }

    def __init__(self, db: Optional[Database], id_, **kwargs):
        EntityBase.__init__(self, db, id_)

        now = utils_data.to_iso(utils_data.utc_now())
        email = kwargs.get('email')
        self.name: str = utils_data.clean_string(kwargs.get('name')) or kwargs.get('name')
        self.email: str = email.strip().lower() if isinstance(email, str) else email
        self.phone: str = utils_data.clean_string(kwargs.get('phone')) or kwargs.get('phone')
        self.date: str = kwargs.get('date')
        self.time: str = utils_data.clean_string(kwargs.get('time')) or kwargs.get('time')
        self.guests: int = kwargs.get('guests')
        self.special_requests: str = kwargs.get('special_requests')
        self.status: str = kwargs.get('status', RESERVATION_STATUS_PENDING)
        self.table_number: int = kwargs.get('table_number')
        self.created_at: str = kwargs.get('created_at') or now
        self.updated_at: str = kwargs.get('updated_at') or now

    @classmethod
    def init_request_create(cls, request, db: Database):
        logger.info("init_request_create ::: started")
        request_body = utils_data.parse_raw_body(request)
        if not all(request_body.get(field) for field in REQUIRED_FIELDS):
            raise exceptions.MissingFields('All required fields must be provided')

        date = request_body['date']
        try:
            reservation_date = utils_data.from_iso(date) if isinstance(date, str) else None
        except ValueError:
            reservation_date = None
        if reservation_date is None:
            raise exceptions.ValidationException('Validation error', errors=['Reservation date is invalid'])
        if reservation_date <= utils_data.utc_now():
            raise exceptions.ReservationDateInPast('Reservation date must be in the future')

        special_requests = request_body.get('specialRequests')
        return cls(
            db,
            str(uuid4()),
            name=request_body['name'],
            email=request_body['email'],
            phone=request_body['phone'],
            date=utils_data.to_iso(reservation_date),
            time=request_body['time'],
            guests=request_body['guests'],
            special_requests=special_requests.strip() if isinstance(special_requests, str) else special_requests
        )

    @classmethod
    def init_get_by_id(cls, db: Database, reservation_id):
        c = cls(db, reservation_id)
        c.__init__(db, **c._get_db_item())
        return c

    @classmethod
    def from_db_record(cls, db: Database, record: Dict):
        return cls(db, **record)

    def _get_pk_sk(self) -> Tuple[str, str]:
        return self.pk, self.sk.format(reservation_id=self.id_)

    def _to_dict(self) -> Dict:
        return {
            'id_': self.id_,
            'name': self.name,
            'email': self.email,
            'phone': self.phone,
            'date': self.date,
            'time': self.time,
            'guests': self.guests,
            'special_requests': self.special_requests,
            'status': self.status,
            'table_number': self.table_number,
            'created_at': self.created_at,
            'updated_at': self.updated_at
        }

    def create(self) -> None:
        self._create_db_record()

    def update_status(self, status: str, table_number=None) -> None:
        if status not in RESERVATION_STATUSES:
            raise exceptions.InvalidStatus('Invalid status value')
        update_dict = {'status': status}
        if table_number and status == RESERVATION_STATUS_CONFIRMED:
            update_dict['table_number'] = table_number
        self.__init__(self.db, **self._update_db_record(update_dict))
        logger.info(f'update_status ::: reservation {self.id_} is {self.status} now')

    def to_created_view(self) -> Dict:
        item = self.to_ui()
        return {key: item.get(key) for key in ('id', 'name', 'email', 'date', 'time', 'guests', 'status', 'createdAt')}


def get_db_reservations(db: Database, status: Optional[str] = None, date: Optional[str] = None) -> List[Dict]:
    filter_expression = None
    if status:
        filter_expression = Attr('status').eq(status)
    if date:
        day_start, day_end = utils_data.parse_day(date)
        date_filter = Attr('date').gte(day_start) & Attr('date').lt(day_end)
        filter_expression = date_filter if filter_expression is None else filter_expression & date_filter
    return db.query_items_paged(
        key_condition_expression=Key('partkey').eq(Reservation.pk),
        filter_expression=filter_expression
    )


@utils_app.request_exception_handler
@utils_app.log_start_finish
def endpoint_create_reservation(request, ctx) -> Response:
    reservation = Reservation.init_request_create(request, ctx.db)
    reservation.create()
    if ctx.notifier is not None:
        ctx.notifier.notify_reservation_created(reservation.db_record)
    return utils_app.success_response(
        data=reservation.to_created_view(),
        message='Reservation created successfully! We will confirm your booking soon.',
        status_code=http201
    )


@utils_app.request_exception_handler
@utils_auth.authenticate
@utils_app.log_start_finish
def endpoint_get_reservations(request, ctx) -> Response:
    qp = utils_data.get_query_params(request)
    page, limit = utils_data.parse_pagination(qp, DEFAULT_RESERVATIONS_PAGE_LIMIT)
    status = qp.get('status')
    if status and status not in RESERVATION_STATUSES:
        raise exceptions.InvalidQueryParameter('Invalid status value')
    db_records = get_db_reservations(ctx.db, status=status, date=qp.get('date'))
    db_records.sort(key=lambda record: (record.get('date', ''), record.get('time', '')))
    page_records, pagination = utils_data.paginate(db_records, page, limit)
    return utils_app.success_response(
        data=[Reservation.from_db_record(ctx.db, record).to_ui() for record in page_records],
        pagination=pagination
    )


@utils_app.request_exception_handler
@utils_app.log_start_finish
def endpoint_get_reservation(request, ctx, reservation_id) -> Response:
    reservation = Reservation.init_get_by_id(ctx.db, reservation_id)
    return utils_app.success_response(data=reservation.to_ui())


@utils_app.request_exception_handler
@utils_auth.authenticate
@utils_app.log_start_finish
def endpoint_update_reservation_status(request, ctx, reservation_id) -> Response:
    request_body = utils_data.parse_raw_body(request)
    reservation = Reservation(ctx.db, reservation_id)
    reservation.update_status(request_body.get('status'), table_number=request_body.get('tableNumber'))
    return utils_app.success_response(data=reservation.to_ui(), message='Reservation status updated successfully')


@utils_app.request_exception_handler
@utils_app.log_start_finish
def endpoint_cancel_reservation(request, ctx, reservation_id) -> Response:
    reservation = Reservation(ctx.db, reservation_id)
    reservation.update_status(RESERVATION_STATUS_CANCELLED)
    return utils_app.success_response(data=reservation.to_ui(), message='Reservation cancelled successfully')
