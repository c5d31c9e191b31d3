from flask_restx import Namespace, Resource, fields

from pet_market.services import user_service
from pet_market.utils.auth_middleware import token_required, current_identity
from pet_market.utils.util import get_json_body

user_ns = Namespace('users', description='Accounts, favorites and cart', path='/users')

register_model = user_ns.model('Register', {
    'username': fields.String(required=True),
    'email': fields.String(required=True),
    'password': fields.String(required=True, description='At least 6 characters'),
    'role': fields.String(description='buyer, seller, ngo or admin (default buyer)')
})

login_model = user_ns.model('Login', {
    'email': fields.String(required=True),
    'password': fields.String(required=True)
})

profile_model = user_ns.model('Profile', {
    'username': fields.String(),
    'email': fields.String(),
    'firstName': fields.String(),
    'lastName': fields.String(),
    'phone': fields.String(),
    'address': fields.Raw(),
    'bio': fields.String(),
    'ngoDetails': fields.Raw(description='NGO accounts only'),
    'petPreferences': fields.Raw()
})

password_model = user_ns.model('ChangePassword', {
    'currentPassword': fields.String(required=True),
    'newPassword': fields.String(required=True)
})

favorite_model = user_ns.model('Favorite', {
    'type': fields.String(required=True, enum=['pet', 'product']),
    'id': fields.Integer(required=True)
})

cart_item_model = user_ns.model('CartItem', {
    'product': fields.Integer(required=True),
    'quantity': fields.Integer(default=1)
})

quantity_model = user_ns.model('CartQuantity', {
    'quantity': fields.Integer(required=True)
})


@user_ns.route('/register')
class Register(Resource):
    @user_ns.expect(register_model)
    def post(self):
        """Register a new account and return a token"""
        return user_service.register_user(get_json_body()), 201


@user_ns.route('/login')
class Login(Resource):
    @user_ns.expect(login_model)
    def post(self):
        """Log in and return a token"""
        return user_service.login_user(get_json_body()), 200


@user_ns.route('/me')
class Me(Resource):
    @user_ns.doc(security='BearerAuth')
    @token_required
    def get(self):
        """Current user profile"""
        return user_service.get_current_user(current_identity()), 200

    @user_ns.doc(security='BearerAuth')
    @user_ns.expect(profile_model)
    @token_required
    def put(self):
        """Update the current user profile"""
        return user_service.update_profile(current_identity(), get_json_body()), 200


@user_ns.route('/change-password')
class ChangePassword(Resource):
    @user_ns.doc(security='BearerAuth')
    @user_ns.expect(password_model)
    @token_required
    def put(self):
        return user_service.change_password(current_identity(), get_json_body()), 200


@user_ns.route('/<int:user_id>')
class PublicProfile(Resource):
    def get(self, user_id):
        """Public profile with active listings"""
        return user_service.get_public_profile(user_id), 200


@user_ns.route('/favorites')
class Favorites(Resource):
    @user_ns.doc(security='BearerAuth')
    @user_ns.expect(favorite_model)
    @token_required
    def post(self):
        return user_service.add_favorite(current_identity(), get_json_body()), 200

    @user_ns.doc(security='BearerAuth')
    @user_ns.expect(favorite_model)
    @token_required
    def delete(self):
        return user_service.remove_favorite(current_identity(), get_json_body()), 200


@user_ns.route('/cart')
class Cart(Resource):
    @user_ns.doc(security='BearerAuth')
    @token_required
    def get(self):
        return user_service.get_cart(current_identity()), 200

    @user_ns.doc(security='BearerAuth')
    @token_required
    def delete(self):
        """Empty the cart"""
        return user_service.clear_cart(current_identity()), 200


@user_ns.route('/cart/items')
class CartItems(Resource):
    @user_ns.doc(security='BearerAuth')
    @user_ns.expect(cart_item_model)
    @token_required
    def post(self):
        """Add a product, merging with an existing line"""
        return user_service.add_to_cart(current_identity(), get_json_body()), 200


@user_ns.route('/cart/items/<int:product_id>')
class CartItem(Resource):
    @user_ns.doc(security='BearerAuth')
    @user_ns.expect(quantity_model)
    @token_required
    def put(self, product_id):
        return user_service.update_cart_item(current_identity(), product_id, get_json_body()), 200

    @user_ns.doc(security='BearerAuth')
    @token_required
    def delete(self, product_id):
        return user_service.remove_cart_item(current_identity(), product_id), 200
