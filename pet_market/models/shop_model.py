from pet_market import db
from pet_market.utils.util import utcnow

EMPLOYEE_PERMISSIONS = ('canAddProducts', 'canCreateInvoices', 'canManageInventory')


def default_permissions():
    return {permission: True for permission in EMPLOYEE_PERMISSIONS}


class Shop(db.Model):
    __tablename__ = 'shop'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(150), nullable=False)
    description = db.Column(db.Text, nullable=False)
    address = db.Column(db.JSON, nullable=False)
    contact_info = db.Column(db.JSON, nullable=False)
    business_hours = db.Column(db.JSON, nullable=False, default=dict)
    categories = db.Column(db.JSON, nullable=False, default=list)
    owner_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, unique=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    owner = db.relationship('User', backref=db.backref('shop', uselist=False))
    products = db.relationship('Product', backref='shop', lazy=True)
    employees = db.relationship('Employee', backref='shop', lazy=True)

    def __repr__(self):
        return f'<Shop {self.name}>'


class Product(db.Model):
    __tablename__ = 'product'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(150), nullable=False)
    description = db.Column(db.Text)
    price = db.Column(db.Float, nullable=False)
    category = db.Column(db.String(100))
    images = db.Column(db.JSON, nullable=False, default=list)
    stock = db.Column(db.Integer, nullable=False, default=0)
    shop_id = db.Column(db.Integer, db.ForeignKey('shop.id'), nullable=False)
    seller_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def __repr__(self):
        return f'<Product {self.name}>'


class Employee(db.Model):
    __tablename__ = 'employee'
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, unique=True)
    shop_id = db.Column(db.Integer, db.ForeignKey('shop.id'), nullable=False)
    first_name = db.Column(db.String(80), nullable=False)
    last_name = db.Column(db.String(80), nullable=False)
    phone = db.Column(db.String(40), nullable=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    permissions = db.Column(db.JSON, nullable=False, default=default_permissions)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    user = db.relationship('User', backref=db.backref('employee_profile', uselist=False))

    def has_permission(self, permission):
        return bool((self.permissions or {}).get(permission))

    def __repr__(self):
        return f'<Employee {self.first_name} {self.last_name} shop={self.shop_id}>'
