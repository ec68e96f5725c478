import os

PRODUCTION = 'production'


def _flag(name: str, default: str = 'false') -> bool:
    return os.environ.get(name, default).strip().lower() in ('1', 'true', 'yes', 'on')


def gen_table_name() -> str:
    return os.environ.get('GEN_TABLE_NAME', 'cafe-ordering')


def dynamodb_endpoint_url():
    return os.environ.get('ENDPOINT_URL') or None


def aws_region() -> str:
    return os.environ.get('AWS_REGION', 'ap-south-1')


def app_env() -> str:
    return os.environ.get('APP_ENV', 'development')


def is_production() -> bool:
    return app_env().lower() == PRODUCTION


def frontend_url() -> str:
    return os.environ.get('FRONTEND_URL', 'http://localhost:5173')


def admin_username() -> str:
    return os.environ.get('ADMIN_USERNAME', 'admin')


def admin_password():
    return os.environ.get('ADMIN_PASSWORD')


def jwt_secret_key():
    return os.environ.get('JWT_SECRET_KEY') or None


def jwt_expiration_minutes() -> int:
    return int(os.environ.get('JWT_EXPIRATION_MINUTES', '720'))


def order_email_from():
    return os.environ.get('ORDER_EMAIL_FROM')


def cafe_notification_email():
    return os.environ.get('CAFE_NOTIFICATION_EMAIL')


def notifications_enabled() -> bool:
    return _flag('NOTIFICATIONS_ENABLED')


def seed_default_menu() -> bool:
    return _flag('SEED_DEFAULT_MENU')
