# pet_market/routes/__init__.py
from .user_routes import user_ns
from .pet_routes import pet_ns
from .adoption_routes import adoption_ns
from .rescue_routes import rescue_ns
from .shop_routes import shop_ns
from .product_routes import product_ns
from .employee_routes import employee_ns
from .inventory_routes import inventory_ns
from .order_routes import order_ns
from .invoice_routes import invoice_ns


def register_namespaces(api):
    api.add_namespace(user_ns)
    api.add_namespace(pet_ns)
    api.add_namespace(adoption_ns)
    api.add_namespace(rescue_ns)
    api.add_namespace(shop_ns)
    api.add_namespace(product_ns)
    api.add_namespace(employee_ns)
    api.add_namespace(inventory_ns)
    api.add_namespace(order_ns)
    api.add_namespace(invoice_ns)
