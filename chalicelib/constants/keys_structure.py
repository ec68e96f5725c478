menu_items_pk = 'menu_items'
menu_items_sk = '{menu_item_id}'

orders_pk = 'orders'
orders_sk = '{order_number}'

counters_pk = 'counters'
orders_counter_sk = 'orders'

reservations_pk = 'reservations'
reservations_sk = '{reservation_id}'

contact_messages_pk = 'contact_messages'
contact_messages_sk = '{message_id}'
