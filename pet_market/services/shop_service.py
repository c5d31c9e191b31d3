# Shop business logic
import logging

from pet_market import db
from pet_market.errors import ConflictError, NotFoundError, ValidationError
from pet_market.models.shop_model import Shop
from pet_market.utils.role_utils import authorize
from pet_market.utils.util import atomic, get_or_404, iso, parse_str, require_fields

logger = logging.getLogger(__name__)

ADDRESS_FIELDS = ('street', 'city', 'state', 'zipCode', 'country')
CONTACT_FIELDS = ('phone', 'email')
WEEKDAYS = ('monday', 'tuesday', 'wednesday', 'thursday', 'friday', 'saturday', 'sunday')


def format_shop(shop, include_owner=False):
    data = {
        'id': shop.id,
        'name': shop.name,
        'description': shop.description,
        'address': shop.address,
        'contactInfo': shop.contact_info,
        'businessHours': shop.business_hours or {},
        'categories': shop.categories or [],
        'owner': shop.owner_id,
        'createdAt': iso(shop.created_at),
    }
    if include_owner and shop.owner:
        data['owner'] = {
            'id': shop.owner.id,
            'firstName': shop.owner.first_name,
            'lastName': shop.owner.last_name,
            'email': shop.owner.email,
        }
    return data


def _nested(data, key, required):
    value = data.get(key)
    if not isinstance(value, dict):
        raise ValidationError(f'{key} is required', errors=[{'field': key, 'message': 'must be an object'}])
    missing = [field for field in required if not value.get(field)]
    if missing:
        raise ValidationError(f'{key} is incomplete', errors=[
            {'field': f'{key}.{field}', 'message': f'{field} is required'} for field in missing
        ])
    return value


def _business_hours(value):
    if not isinstance(value, dict) or set(value) - set(WEEKDAYS):
        raise ValidationError('businessHours must map weekdays to {open, close}')
    return value


def _categories(value):
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValidationError('categories must be a list of strings')
    return value


def get_owned_shop(identity):
    shop = Shop.query.filter_by(owner_id=identity.id).first()
    if shop is None:
        raise NotFoundError('Shop not found')
    return shop


def create_shop(identity, data):
    authorize(identity, 'create_shop', message='Only sellers can open a shop')
    require_fields(data, 'name', 'description')
    if Shop.query.filter_by(owner_id=identity.id).first():
        raise ConflictError('You already have a shop')
    shop = Shop(
        name=parse_str(data['name'], 'name'),
        description=data['description'],
        address=_nested(data, 'address', ADDRESS_FIELDS),
        contact_info=_nested(data, 'contactInfo', CONTACT_FIELDS),
        business_hours=_business_hours(data.get('businessHours') or {}),
        categories=_categories(data.get('categories') or []),
        owner_id=identity.id
    )
    with atomic():
        db.session.add(shop)
    logger.info(f"Shop {shop.id} opened by seller {identity.id}")
    return format_shop(shop)


def get_my_shop(identity):
    return format_shop(get_owned_shop(identity))


def get_shop(shop_id):
    return format_shop(get_or_404(Shop, shop_id, 'Shop not found'), include_owner=True)


def update_shop(identity, shop_id, data):
    shop = get_or_404(Shop, shop_id, 'Shop not found')
    authorize(identity, 'manage_shop', shop)
    if 'name' in data and not data['name']:
        raise ValidationError('name cannot be empty')

    with atomic():
        if data.get('name'):
            shop.name = parse_str(data['name'], 'name')
        if data.get('description'):
            shop.description = data['description']
        if 'address' in data:
            shop.address = _nested(data, 'address', ADDRESS_FIELDS)
        if 'contactInfo' in data:
            shop.contact_info = _nested(data, 'contactInfo', CONTACT_FIELDS)
        if 'businessHours' in data:
            shop.business_hours = _business_hours(data['businessHours'])
        if 'categories' in data:
            shop.categories = _categories(data['categories'])
    return format_shop(shop)
