from flask_restx import Namespace, Resource, fields

from pet_market.models.user_model import Role
from pet_market.services import employee_service
from pet_market.utils.auth_middleware import token_required, current_identity
from pet_market.utils.util import get_json_body, role_required

employee_ns = Namespace('employees', description='Shop employees', path='/employees')

permissions_model = employee_ns.model('EmployeePermissions', {
    'canAddProducts': fields.Boolean(),
    'canCreateInvoices': fields.Boolean(),
    'canManageInventory': fields.Boolean()
})

employee_model = employee_ns.model('EmployeeRegistration', {
    'firstName': fields.String(required=True),
    'lastName': fields.String(required=True),
    'email': fields.String(required=True),
    'password': fields.String(required=True),
    'phone': fields.String(required=True),
    'shopId': fields.Integer(required=True),
    'permissions': fields.Nested(permissions_model)
})

employee_login_model = employee_ns.model('EmployeeLogin', {
    'email': fields.String(required=True),
    'password': fields.String(required=True)
})

active_model = employee_ns.model('EmployeeActive', {
    'isActive': fields.Boolean(required=True)
})

permissions_update_model = employee_ns.model('EmployeePermissionsUpdate', {
    'permissions': fields.Nested(permissions_model, required=True)
})


@employee_ns.route('/register')
class EmployeeRegister(Resource):
    @employee_ns.doc(security='BearerAuth')
    @employee_ns.expect(employee_model)
    @token_required
    @role_required(Role.SELLER)
    def post(self):
        """Register an employee for the seller's shop"""
        return employee_service.register_employee(current_identity(), get_json_body()), 201


@employee_ns.route('/login')
class EmployeeLogin(Resource):
    @employee_ns.expect(employee_login_model)
    def post(self):
        return employee_service.login_employee(get_json_body()), 200


@employee_ns.route('/shop/<int:shop_id>')
class ShopEmployees(Resource):
    @employee_ns.doc(security='BearerAuth')
    @token_required
    @role_required(Role.SELLER)
    def get(self, shop_id):
        return employee_service.list_shop_employees(current_identity(), shop_id), 200


@employee_ns.route('/<int:employee_id>/status')
class EmployeeStatus(Resource):
    @employee_ns.doc(security='BearerAuth')
    @employee_ns.expect(active_model)
    @token_required
    @role_required(Role.SELLER)
    def put(self, employee_id):
        return employee_service.set_employee_status(current_identity(), employee_id, get_json_body()), 200


@employee_ns.route('/<int:employee_id>/permissions')
class EmployeePermissions(Resource):
    @employee_ns.doc(security='BearerAuth')
    @employee_ns.expect(permissions_update_model)
    @token_required
    @role_required(Role.SELLER)
    def put(self, employee_id):
        return employee_service.set_employee_permissions(current_identity(), employee_id, get_json_body()), 200


@employee_ns.route('/me')
class EmployeeProfile(Resource):
    @employee_ns.doc(security='BearerAuth')
    @token_required
    def get(self):
        return employee_service.get_employee_profile(current_identity()), 200
