# Order service module for business logic
import logging

from pet_market import db
from pet_market.errors import ConflictError, ValidationError
from pet_market.models.order_model import Order, OrderItem, OrderStatus, PaymentMethod
from pet_market.models.shop_model import Product, Shop
from pet_market.services.workflows import next_order_state
from pet_market.utils.role_utils import authorize
from pet_market.utils.util import (
    atomic, get_or_404, iso, paginate, parse_enum, parse_int, parse_number, require_fields
)

logger = logging.getLogger(__name__)


def format_order(order):
    buyer = order.buyer
    return {
        'id': order.id,
        'shop': order.shop_id,
        'buyer': {
            'id': buyer.id,
            'firstName': buyer.first_name,
            'lastName': buyer.last_name,
            'email': buyer.email,
        } if buyer else None,
        'items': [{
            'product': {'id': item.product.id, 'name': item.product.name} if item.product else None,
            'quantity': item.quantity,
        } for item in order.items],
        'paymentMethod': order.payment_method.value,
        'status': order.status.value,
        'total': order.total,
        'createdAt': iso(order.created_at),
    }


def _order_lines(items):
    if not isinstance(items, list) or not items:
        raise ValidationError('Missing required order fields',
                              errors=[{'field': 'items', 'message': 'At least one item is required'}])
    lines = []
    for index, item in enumerate(items):
        if not isinstance(item, dict) or not item.get('product'):
            raise ValidationError(f'Invalid item at index {index}',
                                  errors=[{'field': f'items[{index}].product', 'message': 'is required'}])
        quantity = parse_int(item.get('quantity'), f'items[{index}].quantity', minimum=1)
        lines.append((item['product'], quantity))
    return lines


def create_order(identity, data):
    """Place an order and take its stock in one transaction.

    A missing product or a short line aborts the whole order and leaves every
    product's stock as it was.
    """
    authorize(identity, 'create_order')
    require_fields(data, 'shop', 'paymentMethod', 'total')
    lines = _order_lines(data.get('items'))
    payment_method = parse_enum(PaymentMethod, data['paymentMethod'], 'paymentMethod')
    total = parse_number(data['total'], 'total', minimum=0, exclusive=True)

    with atomic():
        shop = get_or_404(Shop, data['shop'], 'Shop not found')
        order = Order(shop_id=shop.id, buyer_id=identity.id, payment_method=payment_method,
                      status=OrderStatus.PENDING, total=total)
        db.session.add(order)
        for product_id, quantity in lines:
            product = get_or_404(Product, product_id, 'Product not found', for_update=True)
            if product.shop_id != shop.id:
                raise ValidationError(f'{product.name} is not sold by this shop')
            if product.stock < quantity:
                raise ConflictError(f'Insufficient stock for {product.name}')
            product.stock -= quantity
            order.items.append(OrderItem(product=product, quantity=quantity))

    logger.info(f"Order {order.id} placed by user {identity.id} at shop {order.shop_id}")
    return format_order(order)


def update_order_status(identity, order_id, data):
    status = data.get('status')
    if status not in {member.value for member in OrderStatus}:
        raise ValidationError('Invalid status value')
    target = OrderStatus(status)

    with atomic():
        order = get_or_404(Order, order_id, 'Order not found', for_update=True)
        authorize(identity, 'update_order_status', order)
        previous = order.status
        order.status = next_order_state(previous, target)
    logger.info(f"Order {order.id} moved from {previous.value} to {target.value}")
    return format_order(order)


def list_shop_orders(identity, filters):
    shop_id = filters.get('shop') or filters.get('seller')
    if not shop_id:
        raise ValidationError('Missing seller (shopId) parameter')
    shop = get_or_404(Shop, shop_id, 'Shop not found')
    authorize(identity, 'view_shop_orders', shop)
    query = Order.query.filter_by(shop_id=shop.id)
    if filters.get('status'):
        query = query.filter(Order.status == parse_enum(OrderStatus, filters['status'], 'status'))
    query = query.order_by(Order.created_at.desc(), Order.id.desc())
    orders, pagination = paginate(query, filters.get('page'), filters.get('limit'))
    return {'orders': [format_order(o) for o in orders], 'pagination': pagination}


def list_my_orders(identity, filters):
    query = Order.query.filter_by(buyer_id=identity.id).order_by(Order.created_at.desc(), Order.id.desc())
    orders, pagination = paginate(query, filters.get('page'), filters.get('limit'))
    return {'orders': [format_order(o) for o in orders], 'pagination': pagination}


def get_order(identity, order_id):
    order = get_or_404(Order, order_id, 'Order not found')
    if order.buyer_id != identity.id:
        authorize(identity, 'view_shop_orders', order.shop)
    return format_order(order)
