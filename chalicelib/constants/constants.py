from decimal import Decimal

# ORDERS
ORDER_NUMBER_PREFIX = 'CA'
ORDER_SEQUENCE_WIDTH = 3
ORDER_STATUS_PENDING = 'pending'
ORDER_STATUS_DELIVERED = 'delivered'
ORDER_STATUSES = ('pending', 'confirmed', 'preparing', 'out-for-delivery', 'delivered', 'cancelled')
PAYMENT_METHOD_COD = 'cod'
FREE_DELIVERY_THRESHOLD = Decimal('300')
DELIVERY_FEE = Decimal('30')
ESTIMATED_DELIVERY_MINUTES = 45
DEFAULT_CITY = 'Ahmedabad'
MAX_SPECIAL_INSTRUCTIONS_LENGTH = 500
MAX_ITEM_QUANTITY = 1000

# MENU
MENU_CATEGORIES = ('coffee', 'tea', 'snacks', 'desserts', 'gujarati-specials', 'beverages')
ALL_CATEGORIES = 'all'
MAX_MENU_NAME_LENGTH = 100
MAX_MENU_DESCRIPTION_LENGTH = 500
MAX_MENU_PRICE = Decimal('100000')
UNNAMED_ITEM = 'Unnamed Item'

# RESERVATIONS
RESERVATION_STATUS_PENDING = 'pending'
RESERVATION_STATUS_CONFIRMED = 'confirmed'
RESERVATION_STATUS_CANCELLED = 'cancelled'
RESERVATION_STATUSES = ('pending', 'confirmed', 'cancelled', 'completed')
MIN_GUESTS, MAX_GUESTS = 1, 20
MIN_TABLE_NUMBER, MAX_TABLE_NUMBER = 1, 50

# CONTACT
CONTACT_STATUS_NEW = 'new'
CONTACT_STATUSES = ('new', 'read')
MAX_CONTACT_SUBJECT_LENGTH = 200
MAX_CONTACT_MESSAGE_LENGTH = 2000

# SHARED
MAX_PERSON_NAME_LENGTH = 100
MAX_NOTE_LENGTH = 500
EMAIL_REGEX = r'^\w+([.-]?\w+)*@\w+([.-]?\w+)*(\.\w{2,3})+$'
PHONE_REGEX = r'^[0-9+\-\s()]{10,15}$'
TIME_REGEX = r'^([01]?[0-9]|2[0-3]):[0-5][0-9]$'

# PAGINATION
DEFAULT_ORDERS_PAGE_LIMIT = 10
DEFAULT_MENU_PAGE_LIMIT = 20
DEFAULT_RESERVATIONS_PAGE_LIMIT = 10
DEFAULT_CONTACT_PAGE_LIMIT = 20

# AUTH
ADMIN_ROLE = 'admin'
JWT_ALGORITHM = 'HS256'
