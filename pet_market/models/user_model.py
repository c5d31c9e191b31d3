import enum
from pet_market import db
from pet_market.utils.util import utcnow


class Role(enum.Enum):
    BUYER = 'buyer'
    SELLER = 'seller'
    ADMIN = 'admin'
    NGO = 'ngo'
    EMPLOYEE = 'employee'


# Roles that can own pet listings
PROVIDER_ROLES = (Role.SELLER, Role.NGO)

favorite_pets = db.Table('favorite_pets',
    db.Column('user_id', db.Integer, db.ForeignKey('user.id'), primary_key=True),
    db.Column('pet_id', db.Integer, db.ForeignKey('pet.id'), primary_key=True)
)

favorite_products = db.Table('favorite_products',
    db.Column('user_id', db.Integer, db.ForeignKey('user.id'), primary_key=True),
    db.Column('product_id', db.Integer, db.ForeignKey('product.id'), primary_key=True)
)


class User(db.Model):
    __tablename__ = 'user'
    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    username = db.Column(db.String(80), nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    password = db.Column(db.String(200), nullable=False)
    role = db.Column(db.Enum(Role), nullable=False, default=Role.BUYER)
    first_name = db.Column(db.String(80))
    last_name = db.Column(db.String(80))
    phone = db.Column(db.String(40))
    address = db.Column(db.JSON)
    bio = db.Column(db.Text)
    ngo_details = db.Column(db.JSON)
    pet_preferences = db.Column(db.JSON)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    favorite_pets = db.relationship('Pet', secondary=favorite_pets, backref='favorited_by', lazy=True)
    favorite_products = db.relationship('Product', secondary=favorite_products, backref='favorited_by', lazy=True)
    cart_items = db.relationship('CartItem', backref='user', lazy=True, cascade='all, delete-orphan',
                                 order_by='CartItem.id')

    @property
    def cart_total(self):
        return round(sum(item.product.price * item.quantity for item in self.cart_items if item.product), 2)

    def __repr__(self):
        return f'<User {self.username} ({self.role})>'


class CartItem(db.Model):
    __tablename__ = 'cart_item'
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False)
    product_id = db.Column(db.Integer, db.ForeignKey('product.id'), nullable=False)
    quantity = db.Column(db.Integer, nullable=False, default=1)
    product = db.relationship('Product', backref=db.backref('cart_items', cascade='all, delete-orphan'))

    def __repr__(self):
        return f'<CartItem {self.product_id} x{self.quantity}>'
