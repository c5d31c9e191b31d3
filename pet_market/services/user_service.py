# Account, favorites and cart business logic
import logging
import re

from flask_jwt_extended import create_access_token

from pet_market import db, bcrypt
from pet_market.errors import ConflictError, NotFoundError, ValidationError
from pet_market.models.user_model import User, Role, CartItem, PROVIDER_ROLES
from pet_market.models.pet_model import Pet, PetStatus
from pet_market.models.shop_model import Product
from pet_market.utils.role_utils import get_role_permissions
from pet_market.utils.util import (
    atomic, get_or_404, iso, parse_enum, parse_int, parse_str, require_fields
)

logger = logging.getLogger(__name__)

EMAIL_REGEX = re.compile(r'^[a-zA-Z0-9_.+-]+@[a-zA-Z0-9-]+\.[a-zA-Z0-9-.]+$')
MIN_PASSWORD_LENGTH = 6
# Employees are registered by their shop owner, not through the public form
SELF_REGISTER_ROLES = (Role.BUYER, Role.SELLER, Role.NGO, Role.ADMIN)
PROFILE_FIELDS = {
    'username': 'username',
    'email': 'email',
    'firstName': 'first_name',
    'lastName': 'last_name',
    'phone': 'phone',
    'address': 'address',
    'bio': 'bio',
    'petPreferences': 'pet_preferences',
}
FAVORITE_TYPES = {'pet': (Pet, 'favorite_pets'), 'product': (Product, 'favorite_products')}


def issue_token(user):
    return create_access_token(identity=str(user.id), additional_claims={'role': user.role.value})


def format_user(user, private=True):
    data = {
        'id': user.id,
        'username': user.username,
        'role': user.role.value,
        'firstName': user.first_name,
        'lastName': user.last_name,
        'bio': user.bio,
        'ngoDetails': user.ngo_details,
        'createdAt': iso(user.created_at),
    }
    if private:
        data.update({
            'email': user.email,
            'phone': user.phone,
            'address': user.address,
            'petPreferences': user.pet_preferences,
            'favorites': format_favorites(user),
            'cart': format_cart(user),
        })
    return data


def format_favorites(user):
    return {
        'pets': [pet.id for pet in user.favorite_pets],
        'products': [product.id for product in user.favorite_products],
    }


def format_cart(user):
    return {
        'items': [{
            'product': {
                'id': item.product.id,
                'name': item.product.name,
                'price': item.product.price,
                'images': item.product.images,
            },
            'quantity': item.quantity
        } for item in user.cart_items if item.product],
        'total': user.cart_total,
    }


def validate_email(email):
    if not isinstance(email, str) or not EMAIL_REGEX.match(email):
        raise ValidationError('Please include a valid email',
                              errors=[{'field': 'email', 'message': 'Please include a valid email'}])
    return email.strip().lower()


def validate_password(password, field='password'):
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        message = f'Password must be at least {MIN_PASSWORD_LENGTH} characters'
        raise ValidationError(message, errors=[{'field': field, 'message': message}])
    return password


def password_matches(user, password):
    return isinstance(password, str) and bcrypt.check_password_hash(user.password, password)


def register_user(data):
    require_fields(data, 'username', 'email', 'password')
    username = parse_str(data['username'], 'username')
    email = validate_email(data['email'])
    password = validate_password(data['password'])
    role = parse_enum(Role, data.get('role') or Role.BUYER.value, 'role')
    if role not in SELF_REGISTER_ROLES:
        raise ValidationError('Employees are registered by their shop owner')
    if User.query.filter_by(email=email).first():
        raise ConflictError('User already exists')

    with atomic():
        user = User(
            username=username,
            email=email,
            password=bcrypt.generate_password_hash(password).decode('utf-8'),
            role=role
        )
        db.session.add(user)
    logger.info(f"Registered user {user.id} with role {role.value}")
    return {'token': issue_token(user), 'user': format_user(user)}


def login_user(data):
    require_fields(data, 'email', 'password')
    user = User.query.filter_by(email=str(data['email']).strip().lower()).first()
    if not user or not password_matches(user, data['password']):
        raise ValidationError('Invalid credentials')
    if user.role == Role.EMPLOYEE and user.employee_profile and not user.employee_profile.is_active:
        raise ValidationError('Account is deactivated')
    return {'token': issue_token(user), 'user': format_user(user)}


def get_current_user(identity):
    user = get_or_404(User, identity.id, 'User not found')
    data = format_user(user)
    data['permissions'] = sorted(get_role_permissions(user.role))
    return data


def update_profile(identity, data):
    user = get_or_404(User, identity.id, 'User not found')
    if data.get('email'):
        email = validate_email(data['email'])
        if User.query.filter(User.email == email, User.id != user.id).first():
            raise ConflictError('Email already taken')
        data = dict(data, email=email)

    with atomic():
        for key, attribute in PROFILE_FIELDS.items():
            if data.get(key):
                setattr(user, attribute, data[key])
        if data.get('ngoDetails') and user.role == Role.NGO:
            user.ngo_details = data['ngoDetails']
    return format_user(user)


def change_password(identity, data):
    require_fields(data, 'currentPassword', 'newPassword')
    user = get_or_404(User, identity.id, 'User not found')
    if not password_matches(user, data['currentPassword']):
        raise ValidationError('Current password is incorrect')
    new_password = validate_password(data['newPassword'], 'newPassword')
    with atomic():
        user.password = bcrypt.generate_password_hash(new_password).decode('utf-8')
    return {'message': 'Password updated successfully'}


def get_public_profile(user_id):
    user = get_or_404(User, user_id, 'User not found')
    pets = []
    if user.role in PROVIDER_ROLES:
        pets = Pet.query.filter_by(provider_id=user.id, status=PetStatus.AVAILABLE).all()
    products = []
    if user.role == Role.SELLER:
        products = Product.query.filter_by(seller_id=user.id).all()
    profile = format_user(user, private=False)
    profile['favorites'] = format_favorites(user)
    return {
        'user': profile,
        'listings': {
            'pets': [{'id': p.id, 'name': p.name, 'images': p.images, 'species': p.species.value,
                      'breed': p.breed, 'status': p.status.value} for p in pets],
            'products': [{'id': p.id, 'name': p.name, 'images': p.images, 'price': p.price,
                          'category': p.category} for p in products],
        }
    }


def _favorite_target(data):
    favorite_type = data.get('type')
    if favorite_type not in FAVORITE_TYPES:
        raise ValidationError('Invalid favorite type')
    require_fields(data, 'id')
    model, attribute = FAVORITE_TYPES[favorite_type]
    return favorite_type, model, attribute


def add_favorite(identity, data):
    favorite_type, model, attribute = _favorite_target(data)
    user = get_or_404(User, identity.id, 'User not found')
    item = get_or_404(model, data['id'], f'{favorite_type.capitalize()} not found')
    favorites = getattr(user, attribute)
    if item in favorites:
        raise ConflictError(f'{favorite_type} already in favorites')
    with atomic():
        favorites.append(item)
    return format_favorites(user)


def remove_favorite(identity, data):
    favorite_type, model, attribute = _favorite_target(data)
    user = get_or_404(User, identity.id, 'User not found')
    favorites = getattr(user, attribute)
    with atomic():
        for item in list(favorites):
            if str(item.id) == str(data['id']):
                favorites.remove(item)
    return format_favorites(user)


def get_cart(identity):
    return format_cart(get_or_404(User, identity.id, 'User not found'))


def add_to_cart(identity, data):
    require_fields(data, 'product')
    quantity = parse_int(data.get('quantity'), 'quantity', minimum=1, default=1)
    user = get_or_404(User, identity.id, 'User not found')
    product = get_or_404(Product, data['product'], 'Product not found')
    with atomic():
        item = next((i for i in user.cart_items if i.product_id == product.id), None)
        if item:
            item.quantity += quantity
        else:
            user.cart_items.append(CartItem(product=product, quantity=quantity))
    return format_cart(user)


def update_cart_item(identity, product_id, data):
    quantity = parse_int(data.get('quantity'), 'quantity', minimum=1)
    user = get_or_404(User, identity.id, 'User not found')
    item = next((i for i in user.cart_items if i.product_id == product_id), None)
    if item is None:
        raise NotFoundError('Item not in cart')
    with atomic():
        item.quantity = quantity
    return format_cart(user)


def remove_cart_item(identity, product_id):
    user = get_or_404(User, identity.id, 'User not found')
    item = next((i for i in user.cart_items if i.product_id == product_id), None)
    if item is None:
        raise NotFoundError('Item not in cart')
    with atomic():
        user.cart_items.remove(item)
    return format_cart(user)


def clear_cart(identity):
    user = get_or_404(User, identity.id, 'User not found')
    with atomic():
        user.cart_items.clear()
    return format_cart(user)
