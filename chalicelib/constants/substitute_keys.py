# db attribute -> api field, None means the attribute is never returned to clients
from_db = {
    'partkey': None,
    'sortkey': None,
    'record_type': None,
    'search_text': None,
    'id_': 'id',
    'order_number': 'orderNumber',
    'delivery_address': 'deliveryAddress',
    'delivery_fee': 'deliveryFee',
    'payment_method': 'paymentMethod',
    'estimated_delivery_time': 'estimatedDeliveryTime',
    'actual_delivery_time': 'actualDeliveryTime',
    'special_instructions': 'specialInstructions',
    'special_requests': 'specialRequests',
    'table_number': 'tableNumber',
    'menu_item_id': 'menuItemId',
    'is_veg': 'isVeg',
    'is_popular': 'isPopular',
    'is_available': 'isAvailable',
    'nutritional_info': 'nutritionalInfo',
    'preparation_time': 'preparationTime',
    'created_at': 'createdAt',
    'updated_at': 'updatedAt'
}

# api field -> db attribute
to_db = {value: key for key, value in from_db.items() if value}
