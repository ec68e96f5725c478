def _format_order_items(items):
    return '\n'.join(
        f"        {item.get('quantity')} x {item.get('name')} @ {item.get('price')}"
        for item in items or []
    )


def get_new_order_notification_message(order_record):
    customer = order_record.get('customer', {})
    address = order_record.get('delivery_address', {})
    return f"""
        Thank you for your order, {customer.get('name')}!\n
        Order number: {order_record.get('order_number')}\n
        Items:\n{_format_order_items(order_record.get('items'))}\n
        Subtotal: {order_record.get('subtotal')}\n
        Delivery fee: {order_record.get('delivery_fee')}\n
        Total: {order_record.get('total')}\n
        Payment: cash on delivery\n
        Address: {address.get('street')}, {address.get('area')}, {address.get('city')} {address.get('pincode')}\n
        Phone: {customer.get('phone')}\n
        Estimated delivery: {order_record.get('estimated_delivery_time')}\n
        Instructions: {order_record.get('special_instructions') or '-'}
    """


def get_new_reservation_message(reservation_record):
    return f"""
        Reservation received for {reservation_record.get('name')}\n
        Date: {reservation_record.get('date')}\n
        Time: {reservation_record.get('time')}\n
        Guests: {reservation_record.get('guests')}\n
        Phone: {reservation_record.get('phone')}\n
        Requests: {reservation_record.get('special_requests') or '-'}\n
        We will confirm your table shortly.
    """


def get_new_contact_message(contact_record):
    return f"""
        From: {contact_record.get('name')} <{contact_record.get('email')}>\n
        Phone: {contact_record.get('phone') or '-'}\n
        Subject: {contact_record.get('subject') or '-'}\n
        Message:\n
        {contact_record.get('message')}
    """
