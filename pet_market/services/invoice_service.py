# Point-of-sale invoice business logic
import logging

from pet_market import db
from pet_market.errors import ForbiddenError, NotFoundError, ValidationError
from pet_market.models.invoice_model import Invoice, InvoiceItem, InvoicePaymentMethod, PaymentStatus
from pet_market.models.shop_model import Product
from pet_market.models.user_model import Role
from pet_market.services.employee_service import get_active_employee
from pet_market.services.shop_service import get_owned_shop
from pet_market.utils.role_utils import authorize
from pet_market.utils.util import (
    atomic, coerce_id, get_or_404, iso, paginate, parse_enum, parse_int, parse_number, require_fields, utcnow
)

logger = logging.getLogger(__name__)


def format_invoice(invoice):
    return {
        'id': invoice.id,
        'invoiceNumber': invoice.invoice_number,
        'shop': invoice.shop_id,
        'createdBy': invoice.created_by_id,
        'customerName': invoice.customer_name,
        'customerPhone': invoice.customer_phone,
        'customerEmail': invoice.customer_email,
        'items': [{
            'product': {'id': item.product.id, 'name': item.product.name} if item.product else None,
            'quantity': item.quantity,
            'price': item.price,
            'discount': item.discount,
        } for item in invoice.items],
        'subtotal': invoice.subtotal,
        'tax': invoice.tax,
        'discount': invoice.discount,
        'total': invoice.total,
        'paymentMethod': invoice.payment_method.value,
        'paymentStatus': invoice.payment_status.value,
        'notes': invoice.notes,
        'createdAt': iso(invoice.created_at),
    }


def next_invoice_number(now=None):
    """INV-YYMM-NNNN, numbered from the running invoice count."""
    now = now or utcnow()
    count = db.session.query(db.func.count(Invoice.id)).scalar() or 0
    return f"INV-{now:%y%m}-{count + 1:04d}"


def _invoice_shop(identity):
    if identity.role == Role.SELLER:
        return get_owned_shop(identity)
    if identity.role == Role.EMPLOYEE:
        return get_active_employee(identity).shop
    raise ForbiddenError('Unauthorized')


def create_invoice(identity, data):
    if identity.role != Role.EMPLOYEE:
        raise ForbiddenError('Only employees can create invoices')
    employee = get_active_employee(identity)
    authorize(identity, 'create_invoice', employee, message='You do not have permission to create invoices')
    require_fields(data, 'customerName', 'customerPhone', 'paymentMethod')
    payment_method = parse_enum(InvoicePaymentMethod, data['paymentMethod'], 'paymentMethod')
    payment_status = parse_enum(PaymentStatus, data.get('paymentStatus') or PaymentStatus.PAID.value,
                                'paymentStatus')
    items = data.get('items')
    if not isinstance(items, list) or not items:
        raise ValidationError('At least one item is required')
    tax = parse_number(data.get('tax'), 'tax', minimum=0, default=0)
    discount = parse_number(data.get('discount'), 'discount', minimum=0, default=0)

    invoice = Invoice(
        shop_id=employee.shop_id,
        created_by_id=identity.id,
        customer_name=data['customerName'],
        customer_phone=data['customerPhone'],
        customer_email=data.get('customerEmail'),
        payment_method=payment_method,
        payment_status=payment_status,
        notes=data.get('notes')
    )
    subtotal = 0.0
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            raise ValidationError(f'Invalid item at index {index}')
        product_id = coerce_id(item.get('product'))
        product = Product.query.filter_by(id=product_id, shop_id=employee.shop_id).first() \
            if product_id is not None else None
        if product is None:
            raise NotFoundError('Product not found or not part of your shop')
        quantity = parse_int(item.get('quantity'), f'items[{index}].quantity', minimum=1)
        price = parse_number(item.get('price'), f'items[{index}].price', minimum=0, default=product.price)
        line_discount = parse_number(item.get('discount'), f'items[{index}].discount', minimum=0, default=0)
        subtotal += max(0.0, price * quantity - line_discount)
        invoice.items.append(InvoiceItem(product=product, quantity=quantity, price=price, discount=line_discount))

    invoice.subtotal = round(subtotal, 2)
    invoice.tax = tax
    invoice.discount = discount
    invoice.total = round(max(0.0, subtotal + tax - discount), 2)

    with atomic():
        invoice.invoice_number = next_invoice_number()
        db.session.add(invoice)
    logger.info(f"Invoice {invoice.invoice_number} created by employee {employee.id}")
    return format_invoice(invoice)


def list_invoices(identity, filters):
    authorize(identity, 'view_invoices', message='Unauthorized')
    shop = _invoice_shop(identity)
    query = Invoice.query.filter_by(shop_id=shop.id)
    if filters.get('paymentStatus'):
        query = query.filter(Invoice.payment_status == parse_enum(PaymentStatus, filters['paymentStatus'],
                                                                  'paymentStatus'))
    query = query.order_by(Invoice.created_at.desc(), Invoice.id.desc())
    invoices, pagination = paginate(query, filters.get('page'), filters.get('limit'))
    return {'invoices': [format_invoice(i) for i in invoices], 'pagination': pagination}


def get_invoice(identity, invoice_id):
    authorize(identity, 'view_invoices', message='Unauthorized')
    invoice = get_or_404(Invoice, invoice_id, 'Invoice not found')
    if invoice.shop_id != _invoice_shop(identity).id:
        raise NotFoundError('Invoice not found')
    return format_invoice(invoice)
