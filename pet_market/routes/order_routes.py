from flask_restx import Namespace, Resource, fields

from pet_market.services import order_service
from pet_market.utils.auth_middleware import token_required, current_identity
from pet_market.utils.util import get_json_body, list_parser

order_ns = Namespace('orders', description='Shop orders', path='/orders')

order_item_model = order_ns.model('OrderItem', {
    'product': fields.Integer(required=True),
    'quantity': fields.Integer(required=True)
})

order_model = order_ns.model('Order', {
    'shop': fields.Integer(required=True),
    'items': fields.List(fields.Nested(order_item_model), required=True),
    'paymentMethod': fields.String(required=True, enum=['cod', 'card', 'bkash']),
    'total': fields.Float(required=True)
})

status_model = order_ns.model('OrderStatus', {
    'status': fields.String(required=True, enum=['Pending', 'Completed', 'Cancelled'])
})

shop_orders_parser = list_parser.copy()
shop_orders_parser.add_argument('shop', type=str, location='args', help='Shop id')
shop_orders_parser.add_argument('seller', type=str, location='args', help='Shop id (legacy name)')
shop_orders_parser.add_argument('status', type=str, location='args')


@order_ns.route('')
class OrderList(Resource):
    @order_ns.doc(security='BearerAuth')
    @order_ns.expect(shop_orders_parser)
    @token_required
    def get(self):
        """Orders placed with a shop (owner or admin)"""
        return order_service.list_shop_orders(current_identity(), shop_orders_parser.parse_args()), 200

    @order_ns.doc(security='BearerAuth')
    @order_ns.expect(order_model)
    @token_required
    def post(self):
        """Place an order; stock for every line is taken together or not at all"""
        return order_service.create_order(current_identity(), get_json_body()), 201


@order_ns.route('/mine')
class MyOrders(Resource):
    @order_ns.doc(security='BearerAuth')
    @order_ns.expect(list_parser)
    @token_required
    def get(self):
        return order_service.list_my_orders(current_identity(), list_parser.parse_args()), 200


@order_ns.route('/<int:order_id>')
class OrderDetail(Resource):
    @order_ns.doc(security='BearerAuth')
    @token_required
    def get(self, order_id):
        return order_service.get_order(current_identity(), order_id), 200


@order_ns.route('/<int:order_id>/status')
class OrderStatusResource(Resource):
    @order_ns.doc(security='BearerAuth')
    @order_ns.expect(status_model)
    @token_required
    def put(self, order_id):
        return order_service.update_order_status(current_identity(), order_id, get_json_body()), 200
