from flask_restx import Namespace, Resource, fields

from pet_market.services import adoption_service
from pet_market.utils.auth_middleware import token_required, current_identity
from pet_market.utils.util import get_json_body, list_parser

adoption_ns = Namespace('adoptions', description='Adoption applications', path='/adoptions')

details_model = adoption_ns.model('ApplicationDetails', {
    'livingArrangement': fields.String(required=True, enum=['house', 'apartment', 'condo', 'other']),
    'hasYard': fields.Boolean(),
    'hasChildren': fields.Boolean(),
    'hasOtherPets': fields.Boolean(),
    'otherPetsDetails': fields.String(),
    'workSchedule': fields.String(),
    'experience': fields.String(),
    'reasonForAdoption': fields.String(required=True)
})

adoption_model = adoption_ns.model('AdoptionApplication', {
    'petId': fields.Integer(required=True),
    'applicationDetails': fields.Nested(details_model, required=True)
})

status_model = adoption_ns.model('AdoptionStatus', {
    'status': fields.String(required=True, enum=['pending', 'approved', 'rejected', 'completed', 'cancelled']),
    'notes': fields.String(description='Optional note recorded by the provider')
})

message_model = adoption_ns.model('AdoptionMessage', {
    'message': fields.String(required=True)
})

follow_up_model = adoption_ns.model('AdoptionFollowUp', {
    'notes': fields.String(required=True),
    'images': fields.List(fields.String)
})

adoption_list_parser = list_parser.copy()
for name in ('status', 'pet', 'applicant', 'provider'):
    adoption_list_parser.add_argument(name, type=str, location='args')


@adoption_ns.route('')
class AdoptionList(Resource):
    @adoption_ns.doc(security='BearerAuth')
    @adoption_ns.expect(adoption_list_parser)
    @token_required
    def get(self):
        """Applications visible to the caller"""
        return adoption_service.list_adoptions(current_identity(), adoption_list_parser.parse_args()), 200

    @adoption_ns.doc(security='BearerAuth')
    @adoption_ns.expect(adoption_model)
    @token_required
    def post(self):
        """Apply to adopt an available pet"""
        return adoption_service.create_adoption(current_identity(), get_json_body()), 201


@adoption_ns.route('/<int:adoption_id>')
class AdoptionDetail(Resource):
    @adoption_ns.doc(security='BearerAuth')
    @token_required
    def get(self, adoption_id):
        return adoption_service.get_adoption(current_identity(), adoption_id), 200


@adoption_ns.route('/<int:adoption_id>/status')
class AdoptionStatusResource(Resource):
    @adoption_ns.doc(security='BearerAuth')
    @adoption_ns.expect(status_model)
    @token_required
    def put(self, adoption_id):
        """Move an application through its workflow"""
        return adoption_service.update_adoption_status(current_identity(), adoption_id, get_json_body()), 200


@adoption_ns.route('/<int:adoption_id>/messages')
class AdoptionMessages(Resource):
    @adoption_ns.doc(security='BearerAuth')
    @adoption_ns.expect(message_model)
    @token_required
    def post(self, adoption_id):
        return adoption_service.add_message(current_identity(), adoption_id, get_json_body()), 200


@adoption_ns.route('/<int:adoption_id>/follow-up')
class AdoptionFollowUps(Resource):
    @adoption_ns.doc(security='BearerAuth')
    @adoption_ns.expect(follow_up_model)
    @token_required
    def post(self, adoption_id):
        """Record a post-adoption check; completed adoptions only"""
        return adoption_service.add_follow_up(current_identity(), adoption_id, get_json_body()), 200
