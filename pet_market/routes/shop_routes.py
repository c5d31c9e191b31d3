from flask_restx import Namespace, Resource, fields

from pet_market.services import shop_service
from pet_market.utils.auth_middleware import token_required, current_identity
from pet_market.utils.util import get_json_body

shop_ns = Namespace('shops', description='Seller shops', path='/shops')

shop_model = shop_ns.model('Shop', {
    'name': fields.String(required=True),
    'description': fields.String(required=True),
    'address': fields.Nested(shop_ns.model('ShopAddress', {
        'street': fields.String(required=True),
        'city': fields.String(required=True),
        'state': fields.String(required=True),
        'zipCode': fields.String(required=True),
        'country': fields.String(required=True)
    }), required=True),
    'contactInfo': fields.Nested(shop_ns.model('ShopContact', {
        'phone': fields.String(required=True),
        'email': fields.String(required=True),
        'website': fields.String()
    }), required=True),
    'businessHours': fields.Raw(description='{"monday": {"open": "09:00", "close": "17:00"}, ...}'),
    'categories': fields.List(fields.String)
})


@shop_ns.route('')
class ShopList(Resource):
    @shop_ns.doc(security='BearerAuth')
    @shop_ns.expect(shop_model)
    @token_required
    def post(self):
        """Open the seller's shop (one per seller)"""
        return shop_service.create_shop(current_identity(), get_json_body()), 201


@shop_ns.route('/my-shop')
class MyShop(Resource):
    @shop_ns.doc(security='BearerAuth')
    @token_required
    def get(self):
        return shop_service.get_my_shop(current_identity()), 200


@shop_ns.route('/<int:shop_id>')
class ShopDetail(Resource):
    def get(self, shop_id):
        return shop_service.get_shop(shop_id), 200

    @shop_ns.doc(security='BearerAuth')
    @shop_ns.expect(shop_model)
    @token_required
    def put(self, shop_id):
        return shop_service.update_shop(current_identity(), shop_id, get_json_body()), 200
