# Product service module for business logic
import logging

from pet_market import db
from pet_market.errors import ValidationError
from pet_market.models.shop_model import Product
from pet_market.models.user_model import Role
from pet_market.services.employee_service import get_active_employee
from pet_market.services.shop_service import get_owned_shop
from pet_market.utils.role_utils import authorize
from pet_market.utils.util import (
    apply_sort, atomic, coerce_id, get_or_404, iso, paginate, parse_int, parse_number, parse_str, require_fields
)

logger = logging.getLogger(__name__)

SORT_FIELDS = {
    'createdAt': Product.created_at,
    'name': Product.name,
    'price': Product.price,
    'stock': Product.stock,
}


def format_product(product):
    return {
        'id': product.id,
        'name': product.name,
        'description': product.description,
        'price': product.price,
        'category': product.category,
        'images': product.images or [],
        'stock': product.stock,
        'shop': product.shop_id,
        'seller': product.seller_id,
        'createdAt': iso(product.created_at),
    }


def _images(value):
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValidationError('images must be a list of strings')
    return value


def list_products(filters):
    query = Product.query
    if filters.get('shop'):
        query = query.filter(Product.shop_id == coerce_id(filters['shop']))
    if filters.get('category'):
        query = query.filter(Product.category == filters['category'])
    if filters.get('seller'):
        query = query.filter(Product.seller_id == coerce_id(filters['seller']))
    query = apply_sort(query, SORT_FIELDS, filters.get('sort'), '-createdAt', tiebreak=Product.id)
    products, pagination = paginate(query, filters.get('page'), filters.get('limit'))
    return {'products': [format_product(p) for p in products], 'pagination': pagination}


def get_product(product_id):
    return format_product(get_or_404(Product, product_id, 'Product not found'))


def create_product(identity, data):
    if identity.role == Role.EMPLOYEE:
        employee = get_active_employee(identity)
        authorize(identity, 'add_shop_products', employee,
                  message='You do not have permission to add products')
        shop = employee.shop
    else:
        authorize(identity, 'create_product', message='Only sellers can add products')
        shop = get_owned_shop(identity)

    require_fields(data, 'name', 'price')
    product = Product(
        name=parse_str(data['name'], 'name'),
        description=data.get('description'),
        price=parse_number(data['price'], 'price', minimum=0),
        category=data.get('category'),
        images=_images(data.get('images') or []),
        stock=parse_int(data.get('stock'), 'stock', minimum=0, default=0),
        shop_id=shop.id,
        seller_id=shop.owner_id
    )
    with atomic():
        db.session.add(product)
    logger.info(f"Product {product.id} added to shop {shop.id} by user {identity.id}")
    return format_product(product)


def update_product(identity, product_id, data):
    product = get_or_404(Product, product_id, 'Product not found')
    authorize(identity, 'update_product', product)
    if 'stock' in data:
        raise ValidationError('Stock is changed through inventory adjustments')

    with atomic():
        if data.get('name'):
            product.name = parse_str(data['name'], 'name')
        if 'description' in data:
            product.description = data['description']
        if 'price' in data:
            product.price = parse_number(data['price'], 'price', minimum=0)
        if 'category' in data:
            product.category = data['category']
        if 'images' in data:
            product.images = _images(data['images'])
    return format_product(product)


def delete_product(identity, product_id):
    product = get_or_404(Product, product_id, 'Product not found')
    authorize(identity, 'delete_product', product)
    with atomic():
        db.session.delete(product)
    logger.info(f"Product {product_id} removed by user {identity.id}")
    return {'message': 'Product removed'}
