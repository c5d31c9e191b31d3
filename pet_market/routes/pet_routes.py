from flask_restx import Namespace, Resource, fields

from pet_market.services import pet_service
from pet_market.utils.auth_middleware import token_required, current_identity
from pet_market.utils.util import get_json_body, list_parser

pet_ns = Namespace('pets', description='Pet listings', path='/pets')

pet_model = pet_ns.model('Pet', {
    'name': fields.String(required=True),
    'species': fields.String(required=True, enum=['dog', 'cat', 'bird', 'fish', 'small_animal', 'reptile', 'other']),
    'breed': fields.String(required=True),
    'age': fields.Integer(required=True),
    'ageUnit': fields.String(enum=['days', 'months', 'years']),
    'gender': fields.String(required=True, enum=['male', 'female', 'unknown']),
    'size': fields.String(required=True, enum=['small', 'medium', 'large', 'extra_large']),
    'color': fields.String(required=True),
    'description': fields.String(required=True),
    'medicalHistory': fields.String(),
    'vaccinated': fields.Boolean(),
    'neutered': fields.Boolean(),
    'trained': fields.Boolean(),
    'temperament': fields.List(fields.String),
    'images': fields.List(fields.String),
    'adoptionFee': fields.Float()
})

images_model = pet_ns.model('PetImages', {
    'images': fields.List(fields.String, required=True, description='Image URIs to append')
})

image_model = pet_ns.model('PetImage', {
    'imageUrl': fields.String(required=True)
})

pet_list_parser = list_parser.copy()
for name in ('species', 'breed', 'minAge', 'maxAge', 'gender', 'size', 'status', 'provider'):
    pet_list_parser.add_argument(name, type=str, location='args')


@pet_ns.route('')
class PetList(Resource):
    @pet_ns.expect(pet_list_parser)
    def get(self):
        """List pets with filters, sorting and pagination"""
        filters = pet_service.parse_pet_filters(pet_list_parser.parse_args())
        return pet_service.list_pets(filters), 200

    @pet_ns.doc(security='BearerAuth')
    @pet_ns.expect(pet_model)
    @token_required
    def post(self):
        """List a new pet (seller, NGO or admin)"""
        return pet_service.create_pet(current_identity(), get_json_body()), 201


@pet_ns.route('/stats')
class PetStats(Resource):
    @pet_ns.doc(security='BearerAuth')
    @token_required
    def get(self):
        """Listing counts for the current provider"""
        return pet_service.get_provider_stats(current_identity()), 200


@pet_ns.route('/recent')
class RecentPets(Resource):
    @pet_ns.doc(security='BearerAuth')
    @token_required
    def get(self):
        return pet_service.get_recent_pets(current_identity()), 200


@pet_ns.route('/<int:pet_id>')
class PetDetail(Resource):
    def get(self, pet_id):
        return pet_service.get_pet(pet_id), 200

    @pet_ns.doc(security='BearerAuth')
    @pet_ns.expect(pet_model)
    @token_required
    def put(self, pet_id):
        """Update descriptive fields; status is driven by adoptions"""
        return pet_service.update_pet(current_identity(), pet_id, get_json_body()), 200

    @pet_ns.doc(security='BearerAuth')
    @token_required
    def delete(self, pet_id):
        return pet_service.delete_pet(current_identity(), pet_id), 200


@pet_ns.route('/<int:pet_id>/images')
class PetImages(Resource):
    @pet_ns.doc(security='BearerAuth')
    @pet_ns.expect(images_model)
    @token_required
    def post(self, pet_id):
        return pet_service.add_pet_images(current_identity(), pet_id, get_json_body()), 200

    @pet_ns.doc(security='BearerAuth')
    @pet_ns.expect(image_model)
    @token_required
    def delete(self, pet_id):
        return pet_service.remove_pet_image(current_identity(), pet_id, get_json_body()), 200
