# Pet service module for business logic
import logging

from pet_market import db
from pet_market.errors import ConflictError, ValidationError
from pet_market.models.adoption_model import Adoption, ACTIVE_ADOPTION_STATUSES
from pet_market.models.pet_model import Pet, PetStatus, Species, AgeUnit, Gender, Size
from pet_market.utils.role_utils import authorize
from pet_market.utils.util import (
    apply_sort, atomic, coerce_id, get_or_404, iso, paginate, parse_enum, parse_int,
    parse_number, require_fields
)

logger = logging.getLogger(__name__)

RECENT_PETS_LIMIT = 5
REQUIRED_FIELDS = ('name', 'species', 'breed', 'age', 'gender', 'size', 'color', 'description')
# Owned by the adoption workflow, never written through a generic update
PROTECTED_FIELDS = ('provider', 'status', 'adoptedBy', 'adoptionDate')
TEXT_FIELDS = {
    'name': 'name',
    'breed': 'breed',
    'color': 'color',
    'description': 'description',
    'medicalHistory': 'medical_history',
}
FLAG_FIELDS = {'vaccinated': 'vaccinated', 'neutered': 'neutered', 'trained': 'trained'}
ENUM_FIELDS = {
    'species': ('species', Species),
    'ageUnit': ('age_unit', AgeUnit),
    'gender': ('gender', Gender),
    'size': ('size', Size),
}
SORT_FIELDS = {
    'createdAt': Pet.created_at,
    'name': Pet.name,
    'age': Pet.age,
    'adoptionFee': Pet.adoption_fee,
}


def format_pet(pet):
    provider = pet.provider
    return {
        'id': pet.id,
        'name': pet.name,
        'species': pet.species.value,
        'breed': pet.breed,
        'age': pet.age,
        'ageUnit': pet.age_unit.value,
        'gender': pet.gender.value,
        'size': pet.size.value,
        'color': pet.color,
        'description': pet.description,
        'medicalHistory': pet.medical_history,
        'vaccinated': pet.vaccinated,
        'neutered': pet.neutered,
        'trained': pet.trained,
        'temperament': pet.temperament or [],
        'images': pet.images or [],
        'adoptionFee': pet.adoption_fee,
        'status': pet.status.value,
        'provider': {'id': provider.id, 'username': provider.username, 'role': provider.role.value}
        if provider else None,
        'adoptedBy': pet.adopted_by_id,
        'adoptionDate': iso(pet.adoption_date),
        'createdAt': iso(pet.created_at),
    }


def _string_list(value, field):
    if not isinstance(value, list) or not all(isinstance(item, str) and item for item in value):
        raise ValidationError(f'{field} must be a list of strings',
                              errors=[{'field': field, 'message': 'must be a list of strings'}])
    return value


def _apply_fields(pet, data):
    for key, attribute in TEXT_FIELDS.items():
        if key in data:
            setattr(pet, attribute, data[key])
    for key, (attribute, enum_cls) in ENUM_FIELDS.items():
        if key in data:
            setattr(pet, attribute, parse_enum(enum_cls, data[key], key))
    for key, attribute in FLAG_FIELDS.items():
        if key in data:
            setattr(pet, attribute, bool(data[key]))
    if 'age' in data:
        pet.age = parse_int(data['age'], 'age', minimum=0)
    if 'adoptionFee' in data:
        pet.adoption_fee = parse_number(data['adoptionFee'], 'adoptionFee', minimum=0)
    if 'temperament' in data:
        pet.temperament = _string_list(data['temperament'], 'temperament')
    if 'images' in data:
        pet.images = _string_list(data['images'], 'images')


def list_pets(filters):
    query = Pet.query
    if filters.get('species'):
        query = query.filter(Pet.species == parse_enum(Species, filters['species'], 'species'))
    if filters.get('breed'):
        query = query.filter(Pet.breed.ilike(f"%{filters['breed']}%"))
    if filters.get('gender'):
        query = query.filter(Pet.gender == parse_enum(Gender, filters['gender'], 'gender'))
    if filters.get('size'):
        query = query.filter(Pet.size == parse_enum(Size, filters['size'], 'size'))
    if filters.get('status'):
        query = query.filter(Pet.status == parse_enum(PetStatus, filters['status'], 'status'))
    if filters.get('provider') is not None:
        query = query.filter(Pet.provider_id == filters['provider'])
    if filters.get('minAge') is not None:
        query = query.filter(Pet.age >= filters['minAge'])
    if filters.get('maxAge') is not None:
        query = query.filter(Pet.age <= filters['maxAge'])

    query = apply_sort(query, SORT_FIELDS, filters.get('sort'), '-createdAt', tiebreak=Pet.id)
    pets, pagination = paginate(query, filters.get('page'), filters.get('limit'))
    return {'pets': [format_pet(p) for p in pets], 'pagination': pagination}


def get_pet(pet_id):
    return format_pet(get_or_404(Pet, pet_id, 'Pet not found'))


def create_pet(identity, data):
    authorize(identity, 'create_pet', message='Only sellers, NGOs and admins can list pets')
    require_fields(data, *REQUIRED_FIELDS)
    pet = Pet(provider_id=identity.id, status=PetStatus.AVAILABLE, temperament=[], images=[])
    _apply_fields(pet, data)
    with atomic():
        db.session.add(pet)
    logger.info(f"Pet {pet.id} listed by user {identity.id}")
    return format_pet(pet)


def update_pet(identity, pet_id, data):
    pet = get_or_404(Pet, pet_id, 'Pet not found')
    authorize(identity, 'update_pet', pet)
    protected = [field for field in PROTECTED_FIELDS if field in data]
    if protected:
        raise ValidationError(
            f"Cannot update {', '.join(protected)} directly",
            errors=[{'field': field, 'message': 'is managed by the adoption workflow'} for field in protected]
        )
    with atomic():
        _apply_fields(pet, data)
    return format_pet(pet)


def delete_pet(identity, pet_id):
    pet = get_or_404(Pet, pet_id, 'Pet not found')
    authorize(identity, 'delete_pet', pet)
    active = Adoption.query.filter(
        Adoption.pet_id == pet.id,
        Adoption.status.in_(ACTIVE_ADOPTION_STATUSES)
    ).first()
    if active:
        raise ConflictError('Cannot delete pet with active adoption applications')
    with atomic():
        db.session.delete(pet)
    logger.info(f"Pet {pet_id} removed by user {identity.id}")
    return {'message': 'Pet removed'}


def add_pet_images(identity, pet_id, data):
    pet = get_or_404(Pet, pet_id, 'Pet not found')
    authorize(identity, 'update_pet', pet)
    images = data.get('images')
    if not images:
        raise ValidationError('No images provided')
    images = _string_list(images, 'images')
    with atomic():
        pet.images = list(pet.images or []) + images
    return format_pet(pet)


def remove_pet_image(identity, pet_id, data):
    image_url = data.get('imageUrl')
    if not image_url:
        raise ValidationError('Image URL is required')
    pet = get_or_404(Pet, pet_id, 'Pet not found')
    authorize(identity, 'update_pet', pet)
    with atomic():
        pet.images = [image for image in (pet.images or []) if image != image_url]
    return format_pet(pet)


def get_provider_stats(identity):
    authorize(identity, 'view_provider_stats')
    counts = dict(
        db.session.query(Pet.status, db.func.count(Pet.id))
        .filter(Pet.provider_id == identity.id)
        .group_by(Pet.status)
        .all()
    )
    return {
        'totalPets': sum(counts.values()),
        'availablePets': counts.get(PetStatus.AVAILABLE, 0),
        'adoptedPets': counts.get(PetStatus.ADOPTED, 0),
        'pendingAdoptions': counts.get(PetStatus.PENDING, 0),
    }


def get_recent_pets(identity):
    authorize(identity, 'view_provider_stats')
    pets = (Pet.query.filter_by(provider_id=identity.id)
            .order_by(Pet.created_at.desc(), Pet.id.desc())
            .limit(RECENT_PETS_LIMIT).all())
    return [format_pet(p) for p in pets]


def parse_pet_filters(args):
    """Normalise the pet list query string into typed filters."""
    filters = dict(args)
    for key in ('minAge', 'maxAge'):
        if args.get(key) not in (None, ''):
            filters[key] = parse_int(args[key], key, minimum=0)
        else:
            filters[key] = None
    if args.get('provider') not in (None, ''):
        filters['provider'] = coerce_id(args['provider'])
        if filters['provider'] is None:
            raise ValidationError('provider must be a user id')
    else:
        filters['provider'] = None
    return filters
