from decimal import Decimal, InvalidOperation
from typing import List, Dict, Tuple, Optional
from uuid import uuid4

from boto3.dynamodb.conditions import Attr, Key
from chalice import Response

from chalicelib.base_class_entity import EntityBase
from chalicelib.constants import keys_structure
from chalicelib.constants.constants import MENU_CATEGORIES, ALL_CATEGORIES, MAX_MENU_NAME_LENGTH, \
    MAX_MENU_DESCRIPTION_LENGTH, MAX_MENU_PRICE, DEFAULT_MENU_PAGE_LIMIT
from chalicelib.constants.default_menu import DEFAULT_MENU_ITEMS
from chalicelib.constants.status_codes import http201
from chalicelib.constants.substitute_keys import to_db
from chalicelib.utils import auth as utils_auth, data as utils_data, exceptions, app as utils_app, \
    validators
from chalicelib.utils.db import Database
from chalicelib.utils.logger import logger

NUTRITION_FIELDS = ('calories', 'protein', 'carbs', 'fat')


def to_decimal(value, places: str = '1.00'):
    if validators.is_number(value):
        try:
            return Decimal(value).quantize(Decimal(places))
        except InvalidOperation:
            # too many digits to quantize, the range validators reject it
            return value
    return value


def is_nutritional_info(value) -> bool:
    return isinstance(value, dict) and all(
        key in NUTRITION_FIELDS and validators.is_number_between(0)(val) for key, val in value.items()
    )


class MenuItem(EntityBase):
    pk = keys_structure.menu_items_pk
    sk = keys_structure.menu_items_sk
    record_type = 'menu_item'
    not_found_exception = exceptions.MenuItemNotFound
    not_found_message = 'Menu item not found'

    required_immutable_fields_validation = {
        'id_': (validators.is_uuid, 'Menu item id is invalid'),
        'created_at': (lambda x: isinstance(x, str), 'Creation date is required')
    }

    required_mutable_fields_validation = {
        'name': (validators.is_str(MAX_MENU_NAME_LENGTH),
                 f'Item name is required and cannot exceed {MAX_MENU_NAME_LENGTH} characters'),
        'description': (validators.is_str(MAX_MENU_DESCRIPTION_LENGTH),
                        f'Description is required and cannot exceed {MAX_MENU_DESCRIPTION_LENGTH} characters'),
        'price': (validators.is_number_between(0, MAX_MENU_PRICE),
                  f'Price is required and must be between 0 and {MAX_MENU_PRICE}'),
        'category': (validators.is_one_of(MENU_CATEGORIES), f'Category must be one of: {", ".join(MENU_CATEGORIES)}'),
        'image': (validators.is_str(), 'Image URL is required'),
        'rating': (validators.is_number_between(0, 5), 'Rating must be between 0 and 5'),
        'is_veg': (lambda x: isinstance(x, bool), 'isVeg must be a boolean'),
        'is_popular': (lambda x: isinstance(x, bool), 'isPopular must be a boolean'),
        'is_available': (lambda x: isinstance(x, bool), 'isAvailable must be a boolean'),
        'search_text': (lambda x: isinstance(x, str), 'Search text is required'),
        'updated_at': (lambda x: isinstance(x, str), 'Update date is required')
    }

    optional_fields_validation = {
        'ingredients': (validators.is_list_of_str, 'Ingredients must be a list of strings'),
        'nutritional_info': (is_nutritional_info,
                             'Nutritional info may only contain non-negative calories, protein, carbs and fat'),
        'preparation_time': (validators.is_int_between(1), 'Preparation time must be at least 1 minute')
    }

    def __init__(self, db: Optional[Database], id_, **kwargs):
        EntityBase.__init__(self, db, id_)

        now = utils_data.to_iso(utils_data.utc_now())
        name = kwargs.get('name')
        description = kwargs.get('description')
        self.name: str = name.strip() if isinstance(name, str) else name
        self.description: str = description.strip() if isinstance(description, str) else description
        self.price: Decimal = to_decimal(kwargs.get('price'))
        self.category: str = kwargs.get('category')
        self.image: str = kwargs.get('image')
        self.rating: Decimal = to_decimal(kwargs.get('rating', 0), '1.0')
        self.is_veg: bool = kwargs.get('is_veg', True)
        self.is_popular: bool = kwargs.get('is_popular', False)
        self.is_available: bool = kwargs.get('is_available', True)
        self.ingredients: list = kwargs.get('ingredients')
        self.nutritional_info: dict = kwargs.get('nutritional_info')
        self.preparation_time: int = kwargs.get('preparation_time')
        self.created_at: str = kwargs.get('created_at') or now
        self.updated_at: str = kwargs.get('updated_at') or now

    @classmethod
    def init_request_create_update(cls, request, db: Database, menu_item_id=None):
        logger.info("init_request_create_update ::: started")
        request_body = utils_data.parse_raw_body(request)
        utils_data.substitute_keys(dict_to_process=request_body, base_keys=to_db)
        # identity and audit fields are never taken from the client
        for key in ('id_', 'created_at', 'updated_at', 'search_text'):
            request_body.pop(key, None)
        if menu_item_id is None:
            return cls(db, str(uuid4()), **request_body)
        existing = cls.init_get_by_id(db, menu_item_id)._to_dict()
        existing.pop('id_')
        return cls(db, menu_item_id, **{**existing, **request_body})

    @classmethod
    def init_get_by_id(cls, db: Database, menu_item_id):
        c = cls(db, menu_item_id)
        c.__init__(db, **c._get_db_item())
        return c

    @classmethod
    def from_db_record(cls, db: Database, record: Dict):
        return cls(db, **record)

    def _get_pk_sk(self) -> Tuple[str, str]:
        return self.pk, self.sk.format(menu_item_id=self.id_)

    def _search_text(self) -> Optional[str]:
        if not isinstance(self.name, str) or not isinstance(self.description, str):
            return None
        return f'{self.name} {self.description}'.lower()

    def _to_dict(self) -> Dict:
        return {
            'id_': self.id_,
            'name': self.name,
            'description': self.description,
            'price': self.price,
            'category': self.category,
            'image': self.image,
            'rating': self.rating,
            'is_veg': self.is_veg,
            'is_popular': self.is_popular,
            'is_available': self.is_available,
            'ingredients': self.ingredients,
            'nutritional_info': self.nutritional_info,
            'preparation_time': self.preparation_time,
            'search_text': self._search_text(),
            'created_at': self.created_at,
            'updated_at': self.updated_at
        }

    def create(self) -> None:
        self._create_db_record()

    def update(self) -> None:
        update_dict = self._to_dict()
        for key in ('id_', 'created_at'):
            update_dict.pop(key)
        self.__init__(self.db, **self._update_db_record(update_dict))


class MenuCatalog:
    """
    Keyed lookup and listing over the menu_items partition
    """

    def __init__(self, db: Database):
        self.db = db

    def find_by_id(self, menu_item_id: str) -> Optional[MenuItem]:
        record = self.db.find_db_item(MenuItem.pk, MenuItem.sk.format(menu_item_id=menu_item_id))
        if record is None:
            return None
        return MenuItem.from_db_record(self.db, record)

    def list_available(self, category: Optional[str] = None, search: Optional[str] = None) -> List[MenuItem]:
        filter_expression = Attr('is_available').eq(True)
        if category and category != ALL_CATEGORIES:
            filter_expression = filter_expression & Attr('category').eq(category)
        if search:
            filter_expression = filter_expression & Attr('search_text').contains(search.lower())
        records = self.db.query_items_paged(
            Key('partkey').eq(MenuItem.pk),
            filter_expression=filter_expression
        )
        items = [MenuItem.from_db_record(self.db, record) for record in records]
        items.sort(key=lambda item: (-(item.rating or 0), item.name or ''))
        return items

    def categories(self) -> List[str]:
        available = {item.category for item in self.list_available()}
        return [category for category in MENU_CATEGORIES if category in available]

    def is_empty(self) -> bool:
        records, _ = self.db.query_items_paginated(Key('partkey').eq(MenuItem.pk), limit=1)
        return not records

    def seed_defaults(self) -> int:
        """
        Inserts the default café menu when the catalog has no items
        :return:
        number of created items
        """
        if not self.is_empty():
            logger.info('seed_defaults ::: menu is not empty, skipping')
            return 0
        for item in DEFAULT_MENU_ITEMS:
            MenuItem(self.db, str(uuid4()), **item).create()
        logger.info(f'seed_defaults ::: {len(DEFAULT_MENU_ITEMS)} default menu items created')
        return len(DEFAULT_MENU_ITEMS)


@utils_app.request_exception_handler
@utils_app.log_start_finish
def endpoint_get_menu_items(request, ctx) -> Response:
    qp = utils_data.get_query_params(request)
    page, limit = utils_data.parse_pagination(qp, DEFAULT_MENU_PAGE_LIMIT)
    search = utils_data.clean_string(qp.get('search'))
    menu_items = ctx.catalog.list_available(category=qp.get('category'), search=search)
    page_items, pagination = utils_data.paginate(menu_items, page, limit)
    logger.info(f"endpoint_get_menu_items ::: returning menu items={[item.id_ for item in page_items]}")
    return utils_app.success_response(data=[item.to_ui() for item in page_items], pagination=pagination)


@utils_app.request_exception_handler
@utils_app.log_start_finish
def endpoint_get_categories(request, ctx) -> Response:
    return utils_app.success_response(data=ctx.catalog.categories())


@utils_app.request_exception_handler
@utils_app.log_start_finish
def endpoint_get_menu_item(request, ctx, menu_item_id) -> Response:
    menu_item = ctx.catalog.find_by_id(menu_item_id)
    if menu_item is None:
        raise exceptions.MenuItemNotFound('Menu item not found')
    return utils_app.success_response(data=menu_item.to_ui())


@utils_app.request_exception_handler
@utils_auth.authenticate
@utils_app.log_start_finish
def endpoint_create_menu_item(request, ctx) -> Response:
    menu_item = MenuItem.init_request_create_update(request, ctx.db)
    menu_item.create()
    return utils_app.success_response(data=menu_item.to_ui(), message='Menu item created successfully',
                                      status_code=http201)


@utils_app.request_exception_handler
@utils_auth.authenticate
@utils_app.log_start_finish
def endpoint_update_menu_item(request, ctx, menu_item_id) -> Response:
    menu_item = MenuItem.init_request_create_update(request, ctx.db, menu_item_id=menu_item_id)
    menu_item.update()
    return utils_app.success_response(data=menu_item.to_ui(), message='Menu item updated successfully')


@utils_app.request_exception_handler
@utils_auth.authenticate
@utils_app.log_start_finish
def endpoint_delete_menu_item(request, ctx, menu_item_id) -> Response:
    deleted = ctx.db.delete_db_record(
        key={'partkey': MenuItem.pk, 'sortkey': MenuItem.sk.format(menu_item_id=menu_item_id)}
    )
    if deleted is None:
        raise exceptions.MenuItemNotFound('Menu item not found')
    logger.info(f'endpoint_delete_menu_item ::: menu item {menu_item_id} deleted')
    return utils_app.success_response(message='Menu item deleted successfully')
