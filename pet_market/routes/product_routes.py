from flask_restx import Namespace, Resource, fields

from pet_market.services import product_service
from pet_market.utils.auth_middleware import token_required, current_identity
from pet_market.utils.util import get_json_body, list_parser

product_ns = Namespace('products', description='Shop products', path='/products')

product_model = product_ns.model('Product', {
    'name': fields.String(required=True),
    'description': fields.String(),
    'price': fields.Float(required=True),
    'category': fields.String(),
    'images': fields.List(fields.String),
    'stock': fields.Integer(description='Initial stock; later changes go through inventory')
})

product_list_parser = list_parser.copy()
for name in ('shop', 'category', 'seller'):
    product_list_parser.add_argument(name, type=str, location='args')


@product_ns.route('')
class ProductList(Resource):
    @product_ns.expect(product_list_parser)
    def get(self):
        return product_service.list_products(product_list_parser.parse_args()), 200

    @product_ns.doc(security='BearerAuth')
    @product_ns.expect(product_model)
    @token_required
    def post(self):
        """Add a product to the seller's shop, or the employee's shop"""
        return product_service.create_product(current_identity(), get_json_body()), 201


@product_ns.route('/<int:product_id>')
class ProductDetail(Resource):
    def get(self, product_id):
        return product_service.get_product(product_id), 200

    @product_ns.doc(security='BearerAuth')
    @product_ns.expect(product_model)
    @token_required
    def put(self, product_id):
        return product_service.update_product(current_identity(), product_id, get_json_body()), 200

    @product_ns.doc(security='BearerAuth')
    @token_required
    def delete(self, product_id):
        return product_service.delete_product(current_identity(), product_id), 200
