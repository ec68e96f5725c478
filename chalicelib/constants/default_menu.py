from decimal import Decimal

_IMAGE_URL = 'https://images.pexels.com/photos/{photo_id}/pexels-photo-{photo_id}.jpeg?auto=compress&cs=tinysrgb&w=400'

DEFAULT_MENU_ITEMS = [
    {
        'name': 'MASALA CHAI',
        'description': 'Traditional Indian spiced tea with cardamom, ginger, and cinnamon',
        'price': Decimal('25'),
        'category': 'tea',
        'image': _IMAGE_URL.format(photo_id=1638280),
        'rating': Decimal('4.8'),
        'is_popular': True
    },
    {
        'name': 'CAPPUCCINO',
        'description': 'Rich espresso with steamed milk and velvety foam',
        'price': Decimal('80'),
        'category': 'coffee',
        'image': _IMAGE_URL.format(photo_id=302899),
        'rating': Decimal('4.6'),
        'is_popular': False
    },
    {
        'name': 'DHOKLA',
        'description': 'Steamed Gujarati snack made from fermented rice and chickpea flour',
        'price': Decimal('45'),
        'category': 'gujarati-specials',
        'image': _IMAGE_URL.format(photo_id=5560763),
        'rating': Decimal('4.9'),
        'is_popular': True
    },
    {
        'name': 'KHANDVI',
        'description': 'Soft, savory rolls made from gram flour and buttermilk',
        'price': Decimal('55'),
        'category': 'gujarati-specials',
        'image': _IMAGE_URL.format(photo_id=14737),
        'rating': Decimal('4.7'),
        'is_popular': False
    },
    {
        'name': 'COLD COFFEE',
        'description': 'Chilled coffee with ice cream and whipped cream',
        'price': Decimal('90'),
        'category': 'coffee',
        'image': _IMAGE_URL.format(photo_id=312418),
        'rating': Decimal('4.5'),
        'is_popular': True
    },
    {
        'name': 'GULAB JAMUN',
        'description': 'Soft, spongy milk-based dessert in sugar syrup',
        'price': Decimal('40'),
        'category': 'desserts',
        'image': _IMAGE_URL.format(photo_id=12737080),
        'rating': Decimal('4.8'),
        'is_popular': False
    },
    {
        'name': 'SAMOSA',
        'description': 'Crispy fried pastry with spiced potato filling',
        'price': Decimal('20'),
        'category': 'snacks',
        'image': _IMAGE_URL.format(photo_id=14477),
        'rating': Decimal('4.6'),
        'is_popular': True
    },
    {
        'name': 'LATTE',
        'description': 'Smooth espresso with steamed milk and light foam',
        'price': Decimal('85'),
        'category': 'coffee',
        'image': _IMAGE_URL.format(photo_id=324028),
        'rating': Decimal('4.4'),
        'is_popular': False
    }
]
