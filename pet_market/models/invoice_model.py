import enum
from pet_market import db
from pet_market.utils.util import utcnow


class InvoicePaymentMethod(enum.Enum):
    CASH = 'cash'
    CARD = 'card'
    MOBILE_BANKING = 'mobile_banking'


class PaymentStatus(enum.Enum):
    PAID = 'paid'
    PENDING = 'pending'
    CANCELLED = 'cancelled'


class Invoice(db.Model):
    __tablename__ = 'invoice'
    id = db.Column(db.Integer, primary_key=True)
    invoice_number = db.Column(db.String(40), unique=True, nullable=False)
    shop_id = db.Column(db.Integer, db.ForeignKey('shop.id'), nullable=False)
    created_by_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    customer_name = db.Column(db.String(150), nullable=False)
    customer_phone = db.Column(db.String(40), nullable=False)
    customer_email = db.Column(db.String(120))
    subtotal = db.Column(db.Float, nullable=False)
    tax = db.Column(db.Float, nullable=False, default=0)
    discount = db.Column(db.Float, nullable=False, default=0)
    total = db.Column(db.Float, nullable=False)
    payment_method = db.Column(db.Enum(InvoicePaymentMethod), nullable=False)
    payment_status = db.Column(db.Enum(PaymentStatus), nullable=False, default=PaymentStatus.PAID)
    notes = db.Column(db.Text)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    shop = db.relationship('Shop', backref=db.backref('invoices', lazy=True))
    created_by = db.relationship('User')
    items = db.relationship('InvoiceItem', backref='invoice', lazy=True,
                            cascade='all, delete-orphan', order_by='InvoiceItem.id')

    def __repr__(self):
        return f'<Invoice {self.invoice_number}>'


class InvoiceItem(db.Model):
    __tablename__ = 'invoice_item'
    id = db.Column(db.Integer, primary_key=True)
    invoice_id = db.Column(db.Integer, db.ForeignKey('invoice.id'), nullable=False)
    product_id = db.Column(db.Integer, db.ForeignKey('product.id'), nullable=True)
    quantity = db.Column(db.Integer, nullable=False)
    price = db.Column(db.Float, nullable=False)
    discount = db.Column(db.Float, nullable=False, default=0)
    product = db.relationship('Product', backref=db.backref('invoice_items', lazy=True))
