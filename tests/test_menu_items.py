from decimal import Decimal
from uuid import uuid4

import pytest

from chalicelib.constants import keys_structure
from chalicelib.constants.default_menu import DEFAULT_MENU_ITEMS
from chalicelib.constants.status_codes import http200, http201, http400, http401, http404
from chalicelib.menu_items import MenuCatalog
from tests.utils.fixtures import fake_table, db, ses_client, app_context, admin_env, chalice_client, admin_token, \
    create_test_menu_item
from tests.utils.request_utils import make_request

NEW_MENU_ITEM = {
    'name': 'KESAR LASSI',
    'description': 'Chilled yoghurt drink with saffron and cardamom',
    'price': 70.5,
    'category': 'beverages',
    'image': 'https://images.test/lassi.jpeg',
    'rating': 4.4,
    'isVeg': True,
    'ingredients': ['yoghurt', 'saffron', 'cardamom'],
    'nutritionalInfo': {'calories': 180, 'protein': 6},
    'preparationTime': 5
}


def menu_records(fake_table):
    return [item for (pk, _), item in fake_table.items.items() if pk == keys_structure.menu_items_pk]


@pytest.fixture
def menu(db):
    return {
        'cappuccino': create_test_menu_item(db, rating=Decimal('4.6')),
        'chai': create_test_menu_item(db, name='MASALA CHAI', description='Spiced milk tea with ginger',
                                      category='tea', price=Decimal('25'), rating=Decimal('4.9')),
        'latte': create_test_menu_item(db, name='LATTE', description='Espresso with a lot of steamed milk',
                                       price=Decimal('85'), rating=Decimal('4.6')),
        'khaman': create_test_menu_item(db, name='KHAMAN', description='Soft steamed gram flour cake',
                                        category='gujarati-specials', price=Decimal('45'), rating=Decimal('4.8'),
                                        is_available=False)
    }


def test_get_menu_items_available_sorted_by_rating(chalice_client, menu):
    response = make_request(chalice_client, endpoint='/api/menu')
    assert response.status_code == http200
    body = response.json_body
    assert [item['name'] for item in body['data']] == ['MASALA CHAI', 'CAPPUCCINO', 'LATTE']
    assert body['pagination'] == {'page': 1, 'limit': 20, 'total': 3, 'pages': 1}
    first = body['data'][0]
    assert first['id'] == menu['chai'].id_
    assert first['isAvailable'] is True
    assert 'searchText' not in first and 'search_text' not in first
    assert 'partkey' not in first


@pytest.mark.parametrize('query, expected', [
    ('category=tea', ['MASALA CHAI']),
    ('category=all', ['MASALA CHAI', 'CAPPUCCINO', 'LATTE']),
    ('category=gujarati-specials', []),
    ('search=STEAMED', ['CAPPUCCINO', 'LATTE']),
    ('search=ginger', ['MASALA CHAI']),
    ('search=latte&category=coffee', ['LATTE']),
    ('search=pizza', []),
])
def test_get_menu_items_filters(chalice_client, menu, query, expected):
    response = make_request(chalice_client, endpoint='/api/menu', query=query)
    assert response.status_code == http200
    assert [item['name'] for item in response.json_body['data']] == expected


def test_get_menu_items_pagination(chalice_client, menu):
    response = make_request(chalice_client, endpoint='/api/menu', query='page=2&limit=2')
    assert response.status_code == http200
    assert [item['name'] for item in response.json_body['data']] == ['LATTE']
    assert response.json_body['pagination'] == {'page': 2, 'limit': 2, 'total': 3, 'pages': 2}


def test_get_menu_items_invalid_limit(chalice_client):
    response = make_request(chalice_client, endpoint='/api/menu', query='limit=-5')
    assert response.status_code == http400
    assert response.json_body['exception'] == 'InvalidQueryParameter'


def test_get_categories(chalice_client, menu):
    response = make_request(chalice_client, endpoint='/api/menu/categories')
    assert response.status_code == http200
    assert response.json_body['data'] == ['coffee', 'tea']


def test_get_menu_item(chalice_client, menu):
    response = make_request(chalice_client, endpoint=f"/api/menu/{menu['khaman'].id_}")
    assert response.status_code == http200
    data = response.json_body['data']
    assert data['name'] == 'KHAMAN'
    assert data['price'] == 45
    assert data['isAvailable'] is False


def test_get_menu_item_not_found(chalice_client):
    response = make_request(chalice_client, endpoint=f'/api/menu/{uuid4()}')
    assert response.status_code == http404
    assert response.json_body['message'] == 'Menu item not found'
    assert response.json_body['exception'] == 'MenuItemNotFound'


def test_create_menu_item(chalice_client, fake_table, admin_token):
    response = make_request(chalice_client, endpoint='/api/menu', method='POST', json_body=NEW_MENU_ITEM,
                            token=admin_token)
    assert response.status_code == http201
    data = response.json_body['data']
    assert data['name'] == 'KESAR LASSI'
    assert data['price'] == 70.5
    assert data['isPopular'] is False
    assert data['isAvailable'] is True
    assert data['nutritionalInfo'] == {'calories': 180, 'protein': 6}

    record = fake_table.items[(keys_structure.menu_items_pk, data['id'])]
    assert record['price'] == Decimal('70.50')
    assert record['search_text'] == 'kesar lassi chilled yoghurt drink with saffron and cardamom'
    assert record['record_type'] == 'menu_item'


def test_create_menu_item_ignores_client_identity(chalice_client, admin_token):
    client_id = str(uuid4())
    response = make_request(chalice_client, endpoint='/api/menu', method='POST',
                            json_body={**NEW_MENU_ITEM, 'id': client_id, 'createdAt': '2000-01-01T00:00:00+00:00'},
                            token=admin_token)
    assert response.status_code == http201
    assert response.json_body['data']['id'] != client_id
    assert response.json_body['data']['createdAt'] != '2000-01-01T00:00:00+00:00'


def test_create_menu_item_requires_admin(chalice_client, fake_table):
    response = make_request(chalice_client, endpoint='/api/menu', method='POST', json_body=NEW_MENU_ITEM)
    assert response.status_code == http401
    assert menu_records(fake_table) == []


def test_create_menu_item_validation_errors(chalice_client, fake_table, admin_token):
    body = {**NEW_MENU_ITEM, 'price': -1, 'category': 'pizza', 'rating': 7, 'name': ''}
    response = make_request(chalice_client, endpoint='/api/menu', method='POST', json_body=body, token=admin_token)
    assert response.status_code == http400
    body = response.json_body
    assert body['exception'] == 'ValidationException'
    assert body['message'] == 'Validation error'
    assert 'Price is required and must be between 0 and 100000' in body['errors']
    assert 'Rating must be between 0 and 5' in body['errors']
    assert any(error.startswith('Category must be one of') for error in body['errors'])
    assert any(error.startswith('Item name is required') for error in body['errors'])
    assert menu_records(fake_table) == []


def test_create_menu_item_huge_numbers(chalice_client, fake_table, admin_token):
    body = {**NEW_MENU_ITEM, 'price': 10 ** 30, 'rating': 10 ** 30}
    response = make_request(chalice_client, endpoint='/api/menu', method='POST', json_body=body, token=admin_token)
    assert response.status_code == http400
    assert response.json_body['errors'] == [
        'Price is required and must be between 0 and 100000',
        'Rating must be between 0 and 5'
    ]
    assert menu_records(fake_table) == []


def test_update_menu_item(chalice_client, fake_table, menu, admin_token):
    latte = menu['latte']
    response = make_request(chalice_client, endpoint=f'/api/menu/{latte.id_}', method='PUT',
                            json_body={'price': 95, 'isAvailable': False}, token=admin_token)
    assert response.status_code == http200
    data = response.json_body['data']
    assert data['price'] == 95
    assert data['isAvailable'] is False
    assert data['name'] == 'LATTE'
    assert data['createdAt'] == latte.created_at

    record = fake_table.items[(keys_structure.menu_items_pk, latte.id_)]
    assert record['price'] == Decimal('95.00')
    assert record['is_available'] is False


def test_update_menu_item_refreshes_search_text(chalice_client, fake_table, menu, admin_token):
    latte = menu['latte']
    response = make_request(chalice_client, endpoint=f'/api/menu/{latte.id_}', method='PUT',
                            json_body={'name': 'Hazelnut Latte'}, token=admin_token)
    assert response.status_code == http200
    response = make_request(chalice_client, endpoint='/api/menu', query='search=hazelnut')
    assert [item['id'] for item in response.json_body['data']] == [latte.id_]


def test_update_menu_item_validation_error(chalice_client, fake_table, menu, admin_token):
    latte = menu['latte']
    response = make_request(chalice_client, endpoint=f'/api/menu/{latte.id_}', method='PUT',
                            json_body={'rating': 6}, token=admin_token)
    assert response.status_code == http400
    assert response.json_body['errors'] == ['Rating must be between 0 and 5']
    assert fake_table.items[(keys_structure.menu_items_pk, latte.id_)]['rating'] == Decimal('4.6')


def test_update_menu_item_not_found(chalice_client, admin_token):
    response = make_request(chalice_client, endpoint=f'/api/menu/{uuid4()}', method='PUT',
                            json_body={'price': 10}, token=admin_token)
    assert response.status_code == http404


def test_delete_menu_item(chalice_client, fake_table, menu, admin_token):
    chai = menu['chai']
    response = make_request(chalice_client, endpoint=f'/api/menu/{chai.id_}', method='DELETE', token=admin_token)
    assert response.status_code == http200
    assert response.json_body['message'] == 'Menu item deleted successfully'
    assert (keys_structure.menu_items_pk, chai.id_) not in fake_table.items

    response = make_request(chalice_client, endpoint=f'/api/menu/{chai.id_}', method='DELETE', token=admin_token)
    assert response.status_code == http404


def test_delete_menu_item_requires_admin(chalice_client, fake_table, menu):
    chai = menu['chai']
    response = make_request(chalice_client, endpoint=f'/api/menu/{chai.id_}', method='DELETE')
    assert response.status_code == http401
    assert (keys_structure.menu_items_pk, chai.id_) in fake_table.items


def test_seed_defaults_fills_empty_catalog(db, fake_table):
    catalog = MenuCatalog(db)
    assert catalog.is_empty()
    assert catalog.seed_defaults() == len(DEFAULT_MENU_ITEMS)
    assert len(menu_records(fake_table)) == len(DEFAULT_MENU_ITEMS)
    assert not catalog.is_empty()
    assert len(catalog.list_available()) == len(DEFAULT_MENU_ITEMS)


def test_seed_defaults_keeps_existing_catalog(db, fake_table, menu):
    assert MenuCatalog(db).seed_defaults() == 0
    assert len(menu_records(fake_table)) == len(menu)


def test_list_available_follows_query_pages(fake_table, db, menu):
    fake_table.page_size = 1
    names = [item.name for item in MenuCatalog(db).list_available()]
    assert names == ['MASALA CHAI', 'CAPPUCCINO', 'LATTE']
    assert len([call for call in fake_table.calls if call[0] == 'query']) > 1
