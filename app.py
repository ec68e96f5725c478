from typing import Optional

from chalice import Chalice, CORSConfig, Response

from chalicelib import auth, orders, menu_items, reservations, contacts
from chalicelib.context import AppContext, build_context
from chalicelib.utils import config
from chalicelib.utils.data import to_iso, utc_now
from chalicelib.utils.logger import set_request_id

app = Chalice(app_name='cafe-ordering')
app.debug = not config.is_production()

cors_config = CORSConfig(
    allow_origin=config.frontend_url(),
    allow_headers=['Authorization'],
    allow_credentials=True
)

_context: Optional[AppContext] = None


def get_context() -> AppContext:
    global _context
    if _context is None:
        _context = build_context()
    return _context


def configure_context(ctx: Optional[AppContext]) -> None:
    global _context
    _context = ctx


@app.middleware('http')
def request_id_middleware(event, get_response):
    set_request_id(event.lambda_context)
    return get_response(event)


# HEALTH
@app.route('/api/health', methods=['GET'], cors=cors_config)
def health_check():
    return Response(body={
        'status': 'OK',
        'message': 'Café Ahmedabad API is running!',
        'timestamp': to_iso(utc_now())
    })


# AUTH
@app.route('/api/auth/login', methods=['POST'], cors=cors_config)
def login():
    return auth.endpoint_login(app.current_request)


@app.route('/api/auth/verify', methods=['GET'], cors=cors_config)
def verify():
    """
    admin operation
    """
    return auth.endpoint_verify(app.current_request)


# MENU
@app.route('/api/menu', methods=['GET'], cors=cors_config)
def get_menu():
    return menu_items.endpoint_get_menu_items(app.current_request, get_context())


@app.route('/api/menu/categories', methods=['GET'], cors=cors_config)
def get_menu_categories():
    return menu_items.endpoint_get_categories(app.current_request, get_context())


@app.route('/api/menu/{menu_item_id}', methods=['GET'], cors=cors_config)
def get_menu_item(menu_item_id):
    return menu_items.endpoint_get_menu_item(app.current_request, get_context(), menu_item_id)


@app.route('/api/menu', methods=['POST'], cors=cors_config)
def create_menu_item():
    """
    admin operation
    """
    return menu_items.endpoint_create_menu_item(app.current_request, get_context())


@app.route('/api/menu/{menu_item_id}', methods=['PUT'], cors=cors_config)
def update_menu_item(menu_item_id):
    """
    admin operation
    """
    return menu_items.endpoint_update_menu_item(app.current_request, get_context(), menu_item_id)


@app.route('/api/menu/{menu_item_id}', methods=['DELETE'], cors=cors_config)
def delete_menu_item(menu_item_id):
    """
    admin operation
    """
    return menu_items.endpoint_delete_menu_item(app.current_request, get_context(), menu_item_id)


# ORDERS
@app.route('/api/orders', methods=['POST'], cors=cors_config)
def create_order():
    """
    Customers place cash-on-delivery orders without an account
    """
    return orders.endpoint_create_order(app.current_request, get_context())


@app.route('/api/orders/{order_number}', methods=['GET'], cors=cors_config)
def get_order(order_number):
    return orders.endpoint_get_order(app.current_request, get_context(), order_number)


@app.route('/api/orders', methods=['GET'], cors=cors_config)
def get_orders():
    """
    admin operation, supports page, limit, status and date query parameters
    """
    return orders.endpoint_get_orders(app.current_request, get_context())


@app.route('/api/orders/{order_number}/status', methods=['PUT'], cors=cors_config)
def update_order_status(order_number):
    """
    admin operation
    """
    return orders.endpoint_update_order_status(app.current_request, get_context(), order_number)


# RESERVATIONS
@app.route('/api/reservations', methods=['POST'], cors=cors_config)
def create_reservation():
    return reservations.endpoint_create_reservation(app.current_request, get_context())


@app.route('/api/reservations', methods=['GET'], cors=cors_config)
def get_reservations():
    """
    admin operation
    """
    return reservations.endpoint_get_reservations(app.current_request, get_context())


@app.route('/api/reservations/{reservation_id}', methods=['GET'], cors=cors_config)
def get_reservation(reservation_id):
    return reservations.endpoint_get_reservation(app.current_request, get_context(), reservation_id)


@app.route('/api/reservations/{reservation_id}/status', methods=['PUT'], cors=cors_config)
def update_reservation_status(reservation_id):
    """
    admin operation
    """
    return reservations.endpoint_update_reservation_status(app.current_request, get_context(), reservation_id)


@app.route('/api/reservations/{reservation_id}', methods=['DELETE'], cors=cors_config)
def cancel_reservation(reservation_id):
    """
    Cancels the reservation, the record is kept
    """
    return reservations.endpoint_cancel_reservation(app.current_request, get_context(), reservation_id)


# CONTACT
@app.route('/api/contact', methods=['POST'], cors=cors_config)
def create_contact_message():
    return contacts.endpoint_create_contact_message(app.current_request, get_context())


@app.route('/api/contact', methods=['GET'], cors=cors_config)
def get_contact_messages():
    """
    admin operation
    """
    return contacts.endpoint_get_contact_messages(app.current_request, get_context())
