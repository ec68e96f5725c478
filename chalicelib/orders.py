from datetime import datetime, timedelta
from decimal import Decimal
from typing import Tuple, List, Dict, Optional

from boto3.dynamodb.conditions import Key, Attr
from botocore.exceptions import ClientError
from chalice import Response

from chalicelib.base_class_entity import EntityBase
from chalicelib.constants import keys_structure
from chalicelib.constants.constants import ORDER_NUMBER_PREFIX, ORDER_SEQUENCE_WIDTH, ORDER_STATUSES, \
    ORDER_STATUS_PENDING, ORDER_STATUS_DELIVERED, PAYMENT_METHOD_COD, FREE_DELIVERY_THRESHOLD, DELIVERY_FEE, \
    ESTIMATED_DELIVERY_MINUTES, DEFAULT_CITY, MAX_SPECIAL_INSTRUCTIONS_LENGTH, MAX_ITEM_QUANTITY, UNNAMED_ITEM, \
    DEFAULT_ORDERS_PAGE_LIMIT
from chalicelib.constants.status_codes import http201
from chalicelib.constants.substitute_keys import from_db
from chalicelib.menu_items import MenuCatalog, MenuItem
from chalicelib.utils import auth as utils_auth, \
    data as utils_data, \
    app as utils_app, \
    exceptions, \
    validators
from chalicelib.utils.db import Database, is_conditional_check_failed
from chalicelib.utils.logger import logger

MONEY = Decimal('1.00')
ORDER_NUMBER_ATTEMPTS = 2


def calculate_delivery_fee(subtotal: Decimal) -> Decimal:
    return Decimal(0).quantize(MONEY) if subtotal >= FREE_DELIVERY_THRESHOLD else DELIVERY_FEE.quantize(MONEY)


def format_order_number(now: datetime, sequence: int) -> str:
    epoch_ms = int(now.timestamp()) * 1000 + now.microsecond // 1000
    time_part = str(epoch_ms)[-6:]
    return f'{ORDER_NUMBER_PREFIX}{time_part}{sequence:0{ORDER_SEQUENCE_WIDTH}d}'


def is_line_item(value) -> bool:
    return isinstance(value, dict) and validators.is_int_between(1, MAX_ITEM_QUANTITY)(value.get('quantity')) and \
        validators.is_number_between(0)(value.get('price'))


class Order(EntityBase):
    pk = keys_structure.orders_pk
    sk = keys_structure.orders_sk
    record_type = 'order'
    not_found_exception = exceptions.OrderNotFound
    not_found_message = 'Order not found'

    required_immutable_fields_validation = {
        'order_number': (lambda x: isinstance(x, str) and x.startswith(ORDER_NUMBER_PREFIX),
                         'Order number is invalid'),
        'customer': (lambda x: isinstance(x, dict), 'Customer details are required'),
        'delivery_address': (lambda x: isinstance(x, dict), 'Delivery address is required'),
        'items': (lambda x: isinstance(x, list) and len(x) > 0 and all(is_line_item(i) for i in x),
                  'Order must contain at least one valid item'),
        'subtotal': (validators.is_number_between(0), 'Subtotal cannot be negative'),
        'delivery_fee': (validators.is_number_between(0), 'Delivery fee cannot be negative'),
        'total': (validators.is_number_between(0), 'Total cannot be negative'),
        'payment_method': (lambda x: x == PAYMENT_METHOD_COD, 'Only cash on delivery is supported'),
        'estimated_delivery_time': (lambda x: isinstance(x, str), 'Estimated delivery time is required'),
        'created_at': (lambda x: isinstance(x, str), 'Creation date is required')
    }

    required_mutable_fields_validation = {
        'status': (validators.is_one_of(ORDER_STATUSES), 'Invalid status value'),
        'updated_at': (lambda x: isinstance(x, str), 'Update date is required')
    }

    optional_fields_validation = {
        'actual_delivery_time': (lambda x: isinstance(x, str), 'Actual delivery time is invalid'),
        'special_instructions': (validators.is_str(MAX_SPECIAL_INSTRUCTIONS_LENGTH, required=False),
                                 f'Special instructions cannot exceed {MAX_SPECIAL_INSTRUCTIONS_LENGTH} characters')
    }

    def __init__(self, db: Optional[Database], order_number=None, **kwargs):
        EntityBase.__init__(self, db, order_number)

        now = utils_data.to_iso(utils_data.utc_now())
        self.customer: Dict = kwargs.get('customer')
        self.delivery_address: Dict = kwargs.get('delivery_address')
        self.items: List[Dict] = kwargs.get('items', [])
        self.subtotal: Decimal = kwargs.get('subtotal')
        self.delivery_fee: Decimal = kwargs.get('delivery_fee')
        self.total: Decimal = kwargs.get('total')
        self.payment_method: str = kwargs.get('payment_method', PAYMENT_METHOD_COD)
        self.status: str = kwargs.get('status', ORDER_STATUS_PENDING)
        self.estimated_delivery_time: str = kwargs.get('estimated_delivery_time')
        self.actual_delivery_time: str = kwargs.get('actual_delivery_time')
        self.special_instructions: str = kwargs.get('special_instructions', '')
        self.created_at: str = kwargs.get('created_at') or now
        self.updated_at: str = kwargs.get('updated_at') or now

    @property
    def order_number(self) -> str:
        return self.id_

    @order_number.setter
    def order_number(self, value: str):
        self.id_ = value

    @classmethod
    def init_get_by_order_number(cls, db: Database, order_number):
        c = cls(db, order_number)
        c.__init__(db, **c._get_db_item())
        return c

    @classmethod
    def from_db_record(cls, db: Database, record: Dict):
        return cls(db, **record)

    def _get_pk_sk(self) -> Tuple[str, str]:
        return self.pk, self.sk.format(order_number=self.order_number)

    def _to_dict(self) -> Dict:
        return {
            'order_number': self.order_number,
            'customer': self.customer,
            'delivery_address': self.delivery_address,
            'items': self.items,
            'subtotal': self.subtotal,
            'delivery_fee': self.delivery_fee,
            'total': self.total,
            'payment_method': self.payment_method,
            'status': self.status,
            'estimated_delivery_time': self.estimated_delivery_time,
            'actual_delivery_time': self.actual_delivery_time,
            'special_instructions': self.special_instructions,
            'created_at': self.created_at,
            'updated_at': self.updated_at
        }

    def _to_ui(self) -> Dict:
        item = EntityBase._to_ui(self)
        item['items'] = [utils_data.substitute_keys_copy(line, from_db) for line in self.items]
        return item

    def update_status(self, status: str) -> None:
        if status not in ORDER_STATUSES:
            raise exceptions.InvalidStatus('Invalid status value')
        update_dict = {'status': status}
        if status == ORDER_STATUS_DELIVERED:
            update_dict['actual_delivery_time'] = utils_data.to_iso(utils_data.utc_now())
        self.__init__(self.db, **self._update_db_record(update_dict))
        logger.info(f'update_status ::: order {self.order_number} is {self.status} now')

    def to_customer_view(self, catalog: MenuCatalog) -> Dict:
        """
        Customer-facing projection of the order.
        Item fields fall back to the live catalog when the snapshot lacks them, then to defaults.
        """
        return {
            'orderNumber': self.order_number,
            'status': self.status,
            'estimatedDeliveryTime': self.estimated_delivery_time,
            'deliveryAddress': self.delivery_address,
            'paymentMethod': self.payment_method,
            'items': [self._project_line_item(line, catalog) for line in self.items],
            'subtotal': self.subtotal,
            'deliveryFee': self.delivery_fee,
            'totalAmount': self.total
        }

    @staticmethod
    def _project_line_item(line: Dict, catalog: MenuCatalog) -> Dict:
        name, price, image = line.get('name') or None, line.get('price'), line.get('image') or None
        if name is None or price is None or image is None:
            menu_item_id = line.get('menu_item_id')
            menu_item = catalog.find_by_id(menu_item_id) if validators.is_uuid(menu_item_id) else None
            if menu_item is not None:
                name = name or menu_item.name
                price = price if price is not None else menu_item.price
                image = image or menu_item.image
        return {
            'name': name or UNNAMED_ITEM,
            'price': price if price is not None else 0,
            'quantity': line.get('quantity'),
            'image': image or ''
        }


class OrderBuilder:
    """
    Validates a raw order request against the menu catalog, computes totals
    and persists the order under a freshly generated order number.
    """

    def __init__(self, db: Database, catalog: MenuCatalog, notifier=None):
        self.db = db
        self.catalog = catalog
        self.notifier = notifier

    @staticmethod
    def _validate_sections(body: Dict) -> Tuple[Dict, Dict, List]:
        customer, address, items = body.get('customer'), body.get('deliveryAddress'), body.get('items')
        if not isinstance(customer, dict) or not isinstance(address, dict) or \
                not isinstance(items, list) or not items:
            raise exceptions.MissingFields('Customer details, delivery address, and items are required')
        return customer, address, items

    @staticmethod
    def _normalize_customer(customer: Dict) -> Dict:
        name, email, phone = (utils_data.clean_string(customer.get(key)) for key in ('name', 'email', 'phone'))
        if not (name and email and phone):
            raise exceptions.MissingCustomerFields('Customer name, email, and phone are required')
        return {'name': name, 'email': email.lower(), 'phone': phone}

    @staticmethod
    def _normalize_address(address: Dict) -> Dict:
        def clean(key):
            return utils_data.clean_string(address.get(key))

        street, area, pincode = clean('street'), clean('area'), clean('pincode')
        if not (street and area and pincode):
            raise exceptions.MissingAddressFields('Street address, area, and pincode are required')
        return {
            'street': street,
            'area': area,
            'city': clean('city') or DEFAULT_CITY,
            'pincode': pincode,
            'landmark': clean('landmark') or ''
        }

    def _resolve_item(self, requested: Dict) -> Dict:
        requested = requested if isinstance(requested, dict) else {}
        menu_item_id = requested.get('menuItemId')
        if not validators.is_uuid(menu_item_id):
            raise exceptions.InvalidItemId(f'Invalid menu item ID: {menu_item_id}')

        menu_item: Optional[MenuItem] = self.catalog.find_by_id(menu_item_id)
        if menu_item is None:
            raise exceptions.ItemNotFound(
                f'Menu item "{requested.get("name") or menu_item_id}" not found or has been removed')
        if not menu_item.is_available:
            raise exceptions.ItemUnavailable(f'Menu item "{menu_item.name}" is currently unavailable')

        quantity = requested.get('quantity')
        if not validators.is_int_between(1, MAX_ITEM_QUANTITY)(quantity):
            raise exceptions.InvalidQuantity(f'Invalid quantity for item "{menu_item.name}"')

        # name, price and image always come from the catalog, never from the client
        return {
            'menu_item_id': menu_item.id_,
            'name': menu_item.name,
            'price': menu_item.price,
            'image': menu_item.image,
            'quantity': quantity
        }

    def build(self, body: Dict) -> Order:
        """
        Runs the whole validation sequence and computes the totals, nothing is written
        :return:
        Order without an order number
        """
        customer, address, items = self._validate_sections(body)
        customer = self._normalize_customer(customer)
        address = self._normalize_address(address)
        line_items = [self._resolve_item(item) for item in items]

        subtotal = sum((line['price'] * line['quantity'] for line in line_items), Decimal(0)).quantize(MONEY)
        delivery_fee = calculate_delivery_fee(subtotal)
        special_instructions = body.get('specialInstructions')
        if isinstance(special_instructions, str):
            special_instructions = special_instructions.strip()
        return Order(
            self.db,
            customer=customer,
            delivery_address=address,
            items=line_items,
            subtotal=subtotal,
            delivery_fee=delivery_fee,
            total=(subtotal + delivery_fee).quantize(MONEY),
            special_instructions=special_instructions if special_instructions is not None else ''
        )

    def generate_order_number(self, now: datetime) -> str:
        sequence = self.db.increment_counter(keys_structure.counters_pk, keys_structure.orders_counter_sk)
        return format_order_number(now, sequence)

    def create(self, body: Dict) -> Order:
        order = self.build(body)
        for attempt in range(1, ORDER_NUMBER_ATTEMPTS + 1):
            now = utils_data.utc_now()
            order.order_number = self.generate_order_number(now)
            order.created_at = order.updated_at = utils_data.to_iso(now)
            order.estimated_delivery_time = utils_data.to_iso(now + timedelta(minutes=ESTIMATED_DELIVERY_MINUTES))
            try:
                order._create_db_record(condition_expression=Attr('partkey').not_exists())
                break
            except ClientError as error:
                if not is_conditional_check_failed(error):
                    raise
                logger.warning(f'create ::: order number {order.order_number} is taken, attempt {attempt}')
        else:
            raise exceptions.OrderNumberConflict('Could not allocate a unique order number, please try again')

        logger.info(f'create ::: order {order.order_number} successfully created')
        if self.notifier is not None:
            self.notifier.notify_order_created(order.db_record)
        return order


def get_db_orders(db: Database, status: Optional[str] = None, date: Optional[str] = None) -> List[Dict]:
    filter_expression = None
    if status:
        filter_expression = Attr('status').eq(status)
    if date:
        day_start, day_end = utils_data.parse_day(date)
        date_filter = Attr('created_at').gte(day_start) & Attr('created_at').lt(day_end)
        filter_expression = date_filter if filter_expression is None else filter_expression & date_filter
    return db.query_items_paged(
        key_condition_expression=Key('partkey').eq(Order.pk),
        filter_expression=filter_expression
    )


@utils_app.request_exception_handler
@utils_app.log_start_finish
def endpoint_create_order(request, ctx) -> Response:
    request_body = utils_data.parse_raw_body(request)
    order = OrderBuilder(ctx.db, ctx.catalog, ctx.notifier).create(request_body)
    return utils_app.success_response(
        data={
            'orderNumber': order.order_number,
            'total': order.total,
            'estimatedDeliveryTime': order.estimated_delivery_time,
            'status': order.status
        },
        message='Order placed successfully!',
        status_code=http201
    )


@utils_app.request_exception_handler
@utils_app.log_start_finish
def endpoint_get_order(request, ctx, order_number) -> Response:
    order = Order.init_get_by_order_number(ctx.db, order_number)
    return utils_app.success_response(data=order.to_customer_view(ctx.catalog))


@utils_app.request_exception_handler
@utils_auth.authenticate
@utils_app.log_start_finish
def endpoint_get_orders(request, ctx) -> Response:
    qp = utils_data.get_query_params(request)
    page, limit = utils_data.parse_pagination(qp, DEFAULT_ORDERS_PAGE_LIMIT)
    status = qp.get('status')
    if status and status not in ORDER_STATUSES:
        raise exceptions.InvalidQueryParameter('Invalid status value')
    db_records = get_db_orders(ctx.db, status=status, date=qp.get('date'))
    db_records.sort(key=lambda record: record.get('created_at', ''), reverse=True)
    page_records, pagination = utils_data.paginate(db_records, page, limit)
    return utils_app.success_response(
        data=[Order.from_db_record(ctx.db, record).to_ui() for record in page_records],
        pagination=pagination
    )


@utils_app.request_exception_handler
@utils_auth.authenticate
@utils_app.log_start_finish
def endpoint_update_order_status(request, ctx, order_number) -> Response:
    status = utils_data.parse_raw_body(request).get('status')
    order = Order(ctx.db, order_number)
    order.update_status(status)
    return utils_app.success_response(data=order.to_ui(), message='Order status updated successfully')
