import enum
from pet_market import db
from pet_market.utils.util import utcnow


class AdjustmentType(enum.Enum):
    RESTOCK = 'restock'
    ADJUSTMENT = 'adjustment'
    SALE = 'sale'
    DAMAGED = 'damaged'
    EXPIRED = 'expired'


class AdjustmentStatus(enum.Enum):
    PENDING = 'pending'
    APPROVED = 'approved'
    REJECTED = 'rejected'


class InventoryAdjustment(db.Model):
    __tablename__ = 'inventory_adjustment'
    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(db.Integer, db.ForeignKey('product.id'), nullable=True)
    shop_id = db.Column(db.Integer, db.ForeignKey('shop.id'), nullable=False)
    adjusted_by_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    approved_by_id = db.Column(db.Integer, db.ForeignKey('user.id'))
    type = db.Column(db.Enum(AdjustmentType), nullable=False)
    quantity_change = db.Column(db.Integer, nullable=False)
    damaged_quantity = db.Column(db.Integer, nullable=False, default=0)
    expired_quantity = db.Column(db.Integer, nullable=False, default=0)
    expiry_date = db.Column(db.DateTime)
    previous_stock = db.Column(db.Integer, nullable=False)
    new_stock = db.Column(db.Integer, nullable=False)
    notes = db.Column(db.Text)
    requires_approval = db.Column(db.Boolean, nullable=False, default=False)
    status = db.Column(db.Enum(AdjustmentStatus), nullable=False, default=AdjustmentStatus.PENDING)
    rejection_reason = db.Column(db.Text)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)
    product = db.relationship('Product', backref=db.backref('adjustments', lazy=True))
    shop = db.relationship('Shop', backref=db.backref('adjustments', lazy=True))
    adjusted_by = db.relationship('User', foreign_keys=[adjusted_by_id])
    approved_by = db.relationship('User', foreign_keys=[approved_by_id])

    def __repr__(self):
        return f'<InventoryAdjustment {self.id} {self.type} ({self.status})>'
