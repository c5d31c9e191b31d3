from flask_restx import Namespace, Resource, fields

from pet_market.services import invoice_service
from pet_market.utils.auth_middleware import token_required, current_identity
from pet_market.utils.util import get_json_body, list_parser

invoice_ns = Namespace('invoices', description='Point-of-sale invoices', path='/invoices')

invoice_item_model = invoice_ns.model('InvoiceItem', {
    'product': fields.Integer(required=True),
    'quantity': fields.Integer(required=True),
    'price': fields.Float(description='Defaults to the product price'),
    'discount': fields.Float(default=0)
})

invoice_model = invoice_ns.model('Invoice', {
    'customerName': fields.String(required=True),
    'customerPhone': fields.String(required=True),
    'customerEmail': fields.String(),
    'items': fields.List(fields.Nested(invoice_item_model), required=True),
    'tax': fields.Float(default=0),
    'discount': fields.Float(default=0),
    'paymentMethod': fields.String(required=True, enum=['cash', 'card', 'mobile_banking']),
    'paymentStatus': fields.String(enum=['paid', 'pending', 'cancelled']),
    'notes': fields.String()
})

invoice_list_parser = list_parser.copy()
invoice_list_parser.add_argument('paymentStatus', type=str, location='args')


@invoice_ns.route('')
class InvoiceList(Resource):
    @invoice_ns.doc(security='BearerAuth')
    @invoice_ns.expect(invoice_list_parser)
    @token_required
    def get(self):
        """Invoices of the caller's shop"""
        return invoice_service.list_invoices(current_identity(), invoice_list_parser.parse_args()), 200

    @invoice_ns.doc(security='BearerAuth')
    @invoice_ns.expect(invoice_model)
    @token_required
    def post(self):
        """Create an invoice; totals are computed from the lines"""
        return invoice_service.create_invoice(current_identity(), get_json_body()), 201


@invoice_ns.route('/<int:invoice_id>')
class InvoiceDetail(Resource):
    @invoice_ns.doc(security='BearerAuth')
    @token_required
    def get(self, invoice_id):
        return invoice_service.get_invoice(current_identity(), invoice_id), 200
