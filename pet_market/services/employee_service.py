# Shop employee business logic
import logging

from pet_market import db, bcrypt
from pet_market.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from pet_market.models.shop_model import Employee, Shop, EMPLOYEE_PERMISSIONS, default_permissions
from pet_market.models.user_model import User, Role
from pet_market.services.user_service import validate_email, validate_password, password_matches, issue_token
from pet_market.utils.role_utils import authorize
from pet_market.utils.util import atomic, get_or_404, iso, parse_str, require_fields

logger = logging.getLogger(__name__)


def format_employee(employee):
    return {
        'id': employee.id,
        'user': employee.user_id,
        'firstName': employee.first_name,
        'lastName': employee.last_name,
        'email': employee.user.email if employee.user else None,
        'phone': employee.phone,
        'shop': employee.shop_id,
        'isActive': employee.is_active,
        'permissions': {p: bool((employee.permissions or {}).get(p)) for p in EMPLOYEE_PERMISSIONS},
        'createdAt': iso(employee.created_at),
    }


def get_active_employee(identity):
    """Return the caller's employee profile, refusing deactivated accounts."""
    if identity is None or identity.role != Role.EMPLOYEE:
        raise ForbiddenError('Not an employee account')
    employee = Employee.query.filter_by(user_id=identity.id).first()
    if employee is None:
        raise NotFoundError('Employee not found')
    if not employee.is_active:
        raise ForbiddenError('Employee account is not active')
    return employee


def _validate_permissions(permissions):
    if not isinstance(permissions, dict):
        raise ValidationError('permissions must be an object')
    unknown = sorted(set(permissions) - set(EMPLOYEE_PERMISSIONS))
    if unknown:
        raise ValidationError(f"Unknown permissions: {', '.join(unknown)}")
    if not all(isinstance(value, bool) for value in permissions.values()):
        raise ValidationError('permission values must be booleans')
    return permissions


def register_employee(identity, data):
    require_fields(data, 'firstName', 'lastName', 'email', 'password', 'phone', 'shopId')
    first_name = parse_str(data['firstName'], 'firstName')
    last_name = parse_str(data['lastName'], 'lastName')
    phone = parse_str(data['phone'], 'phone')
    shop = get_or_404(Shop, data['shopId'], 'Shop not found or unauthorized')
    authorize(identity, 'manage_employees', shop, message='Shop not found or unauthorized')
    email = validate_email(data['email'])
    password = validate_password(data['password'])
    if User.query.filter_by(email=email).first():
        raise ConflictError('Employee already exists')

    permissions = default_permissions()
    if 'permissions' in data:
        permissions.update(_validate_permissions(data['permissions']))

    with atomic():
        user = User(
            username=f"{first_name} {last_name}",
            email=email,
            password=bcrypt.generate_password_hash(password).decode('utf-8'),
            role=Role.EMPLOYEE,
            first_name=first_name,
            last_name=last_name,
            phone=phone
        )
        employee = Employee(
            user=user,
            shop_id=shop.id,
            first_name=first_name,
            last_name=last_name,
            phone=phone,
            is_active=True,
            permissions=permissions
        )
        db.session.add(employee)
    logger.info(f"Employee {employee.id} registered for shop {shop.id}")
    return format_employee(employee)


def login_employee(data):
    require_fields(data, 'email', 'password')
    user = User.query.filter_by(email=str(data['email']).strip().lower(), role=Role.EMPLOYEE).first()
    if not user or not user.employee_profile or not password_matches(user, data['password']):
        raise ValidationError('Invalid credentials')
    if not user.employee_profile.is_active:
        raise ValidationError('Account is deactivated')
    return {'token': issue_token(user), 'employee': format_employee(user.employee_profile)}


def list_shop_employees(identity, shop_id):
    shop = get_or_404(Shop, shop_id, 'Shop not found or unauthorized')
    authorize(identity, 'manage_employees', shop, message='Shop not found or unauthorized')
    employees = Employee.query.filter_by(shop_id=shop.id).order_by(Employee.id).all()
    return [format_employee(e) for e in employees]


def set_employee_status(identity, employee_id, data):
    if not isinstance(data.get('isActive'), bool):
        raise ValidationError('isActive must be a boolean')
    employee = get_or_404(Employee, employee_id, 'Employee not found')
    authorize(identity, 'manage_employees', employee.shop, message='Unauthorized')
    with atomic():
        employee.is_active = data['isActive']
    logger.info(f"Employee {employee.id} active={employee.is_active}")
    return format_employee(employee)


def set_employee_permissions(identity, employee_id, data):
    permissions = _validate_permissions(data.get('permissions'))
    employee = get_or_404(Employee, employee_id, 'Employee not found')
    authorize(identity, 'manage_employees', employee.shop, message='Unauthorized')
    with atomic():
        employee.permissions = dict(employee.permissions or {}, **permissions)
    return format_employee(employee)


def get_employee_profile(identity):
    if identity.role != Role.EMPLOYEE:
        raise ForbiddenError('Not an employee account')
    employee = Employee.query.filter_by(user_id=identity.id).first()
    if employee is None:
        raise NotFoundError('Employee not found')
    profile = format_employee(employee)
    profile['shopName'] = employee.shop.name if employee.shop else 'Unknown Shop'
    return profile
