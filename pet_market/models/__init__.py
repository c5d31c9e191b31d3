from .user_model import Role, PROVIDER_ROLES, User, CartItem, favorite_pets, favorite_products
from .pet_model import Pet, PetStatus, Species, AgeUnit, Gender, Size
from .adoption_model import (
    Adoption, AdoptionStatus, AdoptionMessage, AdoptionNote, AdoptionFollowUp,
    LivingArrangement, ACTIVE_ADOPTION_STATUSES
)
from .rescue_model import Rescue, RescueStatus, AnimalCondition, RescueTeamMember, RescueDonation, RescueUpdate
from .shop_model import Shop, Product, Employee, EMPLOYEE_PERMISSIONS
from .inventory_model import InventoryAdjustment, AdjustmentType, AdjustmentStatus
from .order_model import Order, OrderItem, OrderStatus, PaymentMethod
from .invoice_model import Invoice, InvoiceItem, InvoicePaymentMethod, PaymentStatus
