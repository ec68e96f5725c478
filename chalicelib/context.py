from typing import Optional

from chalicelib.menu_items import MenuCatalog
from chalicelib.utils import config
from chalicelib.utils.boto_clients import get_dynamodb_table, get_ses_client
from chalicelib.utils.db import Database
from chalicelib.utils.logger import logger
from chalicelib.utils.notifications import EmailNotifier


class AppContext:
    """
    Everything a request handler needs: the data-access handle and the notifier.
    Built once by the entry point, tests pass their own.
    """

    def __init__(self, db: Database, notifier: Optional[EmailNotifier] = None):
        self.db = db
        self.notifier = notifier
        self.catalog = MenuCatalog(db)


def build_context() -> AppContext:
    table_name = config.gen_table_name()
    logger.info(f'build_context ::: {table_name=}, app_env={config.app_env()}')
    db = Database(get_dynamodb_table(table_name))
    notifier = EmailNotifier(
        ses_client=get_ses_client() if config.notifications_enabled() else None,
        email_from=config.order_email_from(),
        cafe_email=config.cafe_notification_email(),
        enabled=config.notifications_enabled()
    )
    ctx = AppContext(db, notifier)
    if config.seed_default_menu():
        ctx.catalog.seed_defaults()
    return ctx
