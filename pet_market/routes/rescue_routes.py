from flask_restx import Namespace, Resource, fields

from pet_market.services import rescue_service
from pet_market.utils.auth_middleware import token_required, token_optional, current_identity
from pet_market.utils.util import get_json_body, list_parser

rescue_ns = Namespace('rescues', description='Rescue operations', path='/rescues')

location_model = rescue_ns.model('RescueLocation', {
    'address': fields.String(),
    'city': fields.String(required=True),
    'state': fields.String(required=True),
    'country': fields.String(required=True),
    'coordinates': fields.Raw()
})

animal_model = rescue_ns.model('RescueAnimal', {
    'species': fields.String(required=True),
    'breed': fields.String(),
    'count': fields.Integer(required=True),
    'condition': fields.String(enum=['critical', 'poor', 'fair', 'good', 'unknown']),
    'notes': fields.String(),
    'images': fields.List(fields.String)
})

rescue_model = rescue_ns.model('Rescue', {
    'title': fields.String(required=True),
    'ngo': fields.Integer(description='Admins only; NGOs always create for themselves'),
    'location': fields.Nested(location_model, required=True),
    'description': fields.String(required=True),
    'rescueDate': fields.Raw(required=True, description='{"planned": ISO date}'),
    'animals': fields.List(fields.Nested(animal_model), required=True),
    'resources': fields.Raw(),
    'funding': fields.Raw(description='{"required": amount}')
})

status_model = rescue_ns.model('RescueStatus', {
    'status': fields.String(required=True, enum=['planning', 'in_progress', 'completed', 'cancelled'])
})

team_model = rescue_ns.model('RescueTeam', {
    'members': fields.List(fields.Nested(rescue_ns.model('RescueTeamMember', {
        'member': fields.Integer(required=True),
        'role': fields.String(required=True)
    })), required=True)
})

update_model = rescue_ns.model('RescueUpdate', {
    'content': fields.String(required=True),
    'images': fields.List(fields.String)
})

donation_model = rescue_ns.model('RescueDonation', {
    'amount': fields.Float(required=True),
    'message': fields.String(),
    'anonymous': fields.Boolean(default=False),
    'anonymousDonor': fields.Nested(rescue_ns.model('AnonymousDonor', {
        'name': fields.String(required=True),
        'email': fields.String()
    }))
})

outcomes_model = rescue_ns.model('RescueOutcomes', {
    'outcomes': fields.Raw(required=True)
})

rescue_list_parser = list_parser.copy()
for name in ('status', 'ngo', 'city', 'state', 'country'):
    rescue_list_parser.add_argument(name, type=str, location='args')


@rescue_ns.route('')
class RescueList(Resource):
    @rescue_ns.expect(rescue_list_parser)
    def get(self):
        return rescue_service.list_rescues(rescue_list_parser.parse_args()), 200

    @rescue_ns.doc(security='BearerAuth')
    @rescue_ns.expect(rescue_model)
    @token_required
    def post(self):
        """Create a rescue operation (NGO or admin)"""
        return rescue_service.create_rescue(current_identity(), get_json_body()), 201


@rescue_ns.route('/<int:rescue_id>')
class RescueDetail(Resource):
    def get(self, rescue_id):
        return rescue_service.get_rescue(rescue_id), 200

    @rescue_ns.doc(security='BearerAuth')
    @rescue_ns.expect(rescue_model)
    @token_required
    def put(self, rescue_id):
        return rescue_service.update_rescue(current_identity(), rescue_id, get_json_body()), 200


@rescue_ns.route('/<int:rescue_id>/status')
class RescueStatusResource(Resource):
    @rescue_ns.doc(security='BearerAuth')
    @rescue_ns.expect(status_model)
    @token_required
    def put(self, rescue_id):
        return rescue_service.update_rescue_status(current_identity(), rescue_id, get_json_body()), 200


@rescue_ns.route('/<int:rescue_id>/team')
class RescueTeam(Resource):
    @rescue_ns.doc(security='BearerAuth')
    @rescue_ns.expect(team_model)
    @token_required
    def post(self, rescue_id):
        return rescue_service.add_team_members(current_identity(), rescue_id, get_json_body()), 200


@rescue_ns.route('/<int:rescue_id>/updates')
class RescueUpdates(Resource):
    @rescue_ns.doc(security='BearerAuth')
    @rescue_ns.expect(update_model)
    @token_required
    def post(self, rescue_id):
        return rescue_service.add_update(current_identity(), rescue_id, get_json_body()), 200


@rescue_ns.route('/<int:rescue_id>/donate')
class RescueDonate(Resource):
    @rescue_ns.expect(donation_model)
    @token_optional
    def post(self, rescue_id):
        """Donate; anonymous donors need no token"""
        return rescue_service.add_donation(current_identity(), rescue_id, get_json_body()), 200


@rescue_ns.route('/<int:rescue_id>/outcomes')
class RescueOutcomes(Resource):
    @rescue_ns.doc(security='BearerAuth')
    @rescue_ns.expect(outcomes_model)
    @token_required
    def put(self, rescue_id):
        return rescue_service.update_outcomes(current_identity(), rescue_id, get_json_body()), 200
