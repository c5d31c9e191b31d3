from flask_restx import Namespace, Resource, fields

from pet_market.services import inventory_service
from pet_market.utils.auth_middleware import token_required, current_identity
from pet_market.utils.util import get_json_body, list_parser

inventory_ns = Namespace('inventory', description='Stock adjustments and approvals', path='/inventory')

adjustment_model = inventory_ns.model('InventoryAdjustment', {
    'product': fields.Integer(required=True),
    'type': fields.String(required=True, enum=['restock', 'adjustment', 'sale', 'damaged', 'expired']),
    'quantityChange': fields.Integer(required=True),
    'damagedQuantity': fields.Integer(default=0),
    'expiredQuantity': fields.Integer(default=0),
    'expiryDate': fields.String(description='ISO date'),
    'newStock': fields.Integer(description='Derived from the quantities when omitted'),
    'notes': fields.String(),
    'requiresApproval': fields.Boolean()
})

review_model = inventory_ns.model('AdjustmentReview', {
    'status': fields.String(required=True, enum=['approved', 'rejected']),
    'rejectionReason': fields.String(description='Required when rejecting')
})

stock_model = inventory_ns.model('ProductStock', {
    'stock': fields.Integer(required=True)
})

history_parser = list_parser.copy()
for name in ('status', 'type', 'product', 'startDate', 'endDate'):
    history_parser.add_argument(name, type=str, location='args')


@inventory_ns.route('/adjustments')
class Adjustments(Resource):
    @inventory_ns.doc(security='BearerAuth')
    @inventory_ns.expect(history_parser)
    @token_required
    def get(self):
        """Adjustment history for the caller's shop"""
        return inventory_service.list_adjustment_history(current_identity(), history_parser.parse_args()), 200

    @inventory_ns.doc(security='BearerAuth')
    @inventory_ns.expect(adjustment_model)
    @token_required
    def post(self):
        """Record an adjustment; damaged or expired stock waits for the owner"""
        return inventory_service.create_adjustment(current_identity(), get_json_body()), 201


@inventory_ns.route('/adjustments/pending')
class PendingAdjustments(Resource):
    @inventory_ns.doc(security='BearerAuth')
    @inventory_ns.expect(list_parser)
    @token_required
    def get(self):
        return inventory_service.list_pending_adjustments(current_identity(), list_parser.parse_args()), 200


@inventory_ns.route('/adjustments/<int:adjustment_id>/status')
class AdjustmentReview(Resource):
    @inventory_ns.doc(security='BearerAuth')
    @inventory_ns.expect(review_model)
    @token_required
    def put(self, adjustment_id):
        return inventory_service.review_adjustment(current_identity(), adjustment_id, get_json_body()), 200


@inventory_ns.route('/products/<int:product_id>/stock')
class ProductStock(Resource):
    @inventory_ns.doc(security='BearerAuth')
    @inventory_ns.expect(stock_model)
    @token_required
    def put(self, product_id):
        """Set stock directly, clamped at zero"""
        return inventory_service.set_product_stock(current_identity(), product_id, get_json_body()), 200
