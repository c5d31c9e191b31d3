# Adoption application business logic
import logging

from pet_market import db
from pet_market.errors import ConflictError, ValidationError
from pet_market.models.adoption_model import (
    Adoption, AdoptionStatus, AdoptionMessage, AdoptionNote, AdoptionFollowUp,
    LivingArrangement, ACTIVE_ADOPTION_STATUSES
)
from pet_market.models.pet_model import Pet, PetStatus
from pet_market.models.user_model import Role, PROVIDER_ROLES
from pet_market.services.workflows import next_adoption_state, PET_STATUS_ON_ADOPTION
from pet_market.utils.role_utils import authorize, can
from pet_market.utils.util import (
    apply_sort, atomic, coerce_id, get_or_404, iso, paginate, parse_enum, require_fields, utcnow
)

logger = logging.getLogger(__name__)

NOT_FOUND = 'Adoption application not found'
DETAIL_FLAGS = ('hasYard', 'hasChildren', 'hasOtherPets')
DETAIL_TEXT = ('otherPetsDetails', 'workSchedule', 'experience', 'reasonForAdoption')
SORT_FIELDS = {
    'applicationDate': Adoption.application_date,
    'status': Adoption.status,
    'completionDate': Adoption.completion_date,
}


def _user_summary(user):
    return {'id': user.id, 'username': user.username} if user else None


def format_message(message):
    return {'id': message.id, 'sender': message.sender_id, 'message': message.message,
            'timestamp': iso(message.timestamp)}


def format_follow_up(follow_up):
    return {'id': follow_up.id, 'date': iso(follow_up.date), 'notes': follow_up.notes,
            'images': follow_up.images or [], 'conductedBy': follow_up.conducted_by_id}


def format_adoption(adoption):
    pet = adoption.pet
    return {
        'id': adoption.id,
        'pet': {
            'id': pet.id,
            'name': pet.name,
            'species': pet.species.value,
            'breed': pet.breed,
            'images': pet.images or [],
            'status': pet.status.value,
        } if pet else None,
        'applicant': _user_summary(adoption.applicant),
        'provider': _user_summary(adoption.provider),
        'status': adoption.status.value,
        'applicationDate': iso(adoption.application_date),
        'completionDate': iso(adoption.completion_date),
        'applicationDetails': adoption.application_details,
        'messages': [format_message(m) for m in adoption.messages],
        'notes': [{'id': n.id, 'author': n.author_id, 'content': n.content, 'timestamp': iso(n.timestamp)}
                  for n in adoption.notes],
        'followUp': [format_follow_up(f) for f in adoption.follow_ups],
    }


def validate_application_details(details):
    """Check the questionnaire answers and return them in canonical form."""
    if not isinstance(details, dict):
        raise ValidationError('Application details are required',
                              errors=[{'field': 'applicationDetails', 'message': 'must be an object'}])
    errors = []
    arrangement = details.get('livingArrangement')
    if arrangement not in {member.value for member in LivingArrangement}:
        errors.append({'field': 'applicationDetails.livingArrangement',
                       'message': 'Living arrangement is required'})
    for flag in DETAIL_FLAGS:
        if flag in details and not isinstance(details[flag], bool):
            errors.append({'field': f'applicationDetails.{flag}', 'message': 'must be a boolean'})
    for text in DETAIL_TEXT:
        if details.get(text) is not None and not isinstance(details[text], str):
            errors.append({'field': f'applicationDetails.{text}', 'message': 'must be a string'})
    if not details.get('reasonForAdoption'):
        errors.append({'field': 'applicationDetails.reasonForAdoption',
                       'message': 'Reason for adoption is required'})
    if errors:
        raise ValidationError('Invalid application details', errors=errors)

    cleaned = {'livingArrangement': arrangement}
    cleaned.update({flag: details.get(flag, False) for flag in DETAIL_FLAGS})
    cleaned.update({text: details.get(text) for text in DETAIL_TEXT})
    return cleaned


def list_adoptions(identity, filters):
    query = Adoption.query
    if filters.get('status'):
        query = query.filter(Adoption.status == parse_enum(AdoptionStatus, filters['status'], 'status'))
    if filters.get('pet'):
        query = query.filter(Adoption.pet_id == coerce_id(filters['pet']))

    if identity.role == Role.ADMIN:
        if filters.get('applicant'):
            query = query.filter(Adoption.applicant_id == coerce_id(filters['applicant']))
        if filters.get('provider'):
            query = query.filter(Adoption.provider_id == coerce_id(filters['provider']))
    elif identity.role in PROVIDER_ROLES:
        query = query.filter(Adoption.provider_id == identity.id)
    else:
        query = query.filter(Adoption.applicant_id == identity.id)

    query = apply_sort(query, SORT_FIELDS, filters.get('sort'), '-applicationDate', tiebreak=Adoption.id)
    adoptions, pagination = paginate(query, filters.get('page'), filters.get('limit'))
    return {'adoptions': [format_adoption(a) for a in adoptions], 'pagination': pagination}


def get_adoption(identity, adoption_id):
    adoption = get_or_404(Adoption, adoption_id, NOT_FOUND)
    authorize(identity, 'view_adoption', adoption)
    return format_adoption(adoption)


def create_adoption(identity, data):
    authorize(identity, 'apply_for_adoption')
    require_fields(data, 'petId')
    details = validate_application_details(data.get('applicationDetails'))

    with atomic():
        pet = get_or_404(Pet, data['petId'], 'Pet not found', for_update=True)
        if pet.status != PetStatus.AVAILABLE:
            raise ConflictError('Pet is not available for adoption')
        existing = Adoption.query.filter(
            Adoption.pet_id == pet.id,
            Adoption.applicant_id == identity.id,
            Adoption.status.in_(ACTIVE_ADOPTION_STATUSES)
        ).first()
        if existing:
            raise ConflictError('You already have a pending application for this pet')

        adoption = Adoption(
            pet=pet,
            applicant_id=identity.id,
            provider_id=pet.provider_id,
            status=AdoptionStatus.PENDING,
            application_details=details
        )
        db.session.add(adoption)
        pet.status = PetStatus.PENDING

    logger.info(f"Adoption {adoption.id} opened by user {identity.id} for pet {pet.id}")
    return format_adoption(adoption)


def update_adoption_status(identity, adoption_id, data):
    require_fields(data, 'status')
    target = parse_enum(AdoptionStatus, data['status'], 'status')

    with atomic():
        adoption = get_or_404(Adoption, adoption_id, NOT_FOUND, for_update=True)
        action = 'cancel_adoption' if target == AdoptionStatus.CANCELLED else 'review_adoption'
        authorize(identity, action, adoption)
        previous = adoption.status
        adoption.status = next_adoption_state(previous, target)

        pet = db.session.get(Pet, adoption.pet_id, with_for_update=True) if adoption.pet_id else None
        pet_status = PET_STATUS_ON_ADOPTION.get(target)
        now = utcnow()
        if pet is not None and pet_status is not None:
            pet.status = pet_status
            if target == AdoptionStatus.COMPLETED:
                pet.adopted_by_id = adoption.applicant_id
                pet.adoption_date = now
        if target == AdoptionStatus.COMPLETED:
            adoption.completion_date = now

        # Notes are provider-authored; applicants leave messages instead
        if data.get('notes') and can(identity, 'review_adoption', adoption):
            adoption.notes.append(AdoptionNote(author_id=identity.id, content=data['notes']))

    logger.info(f"Adoption {adoption.id} moved from {previous.value} to {target.value} by user {identity.id}")
    return format_adoption(adoption)


def add_message(identity, adoption_id, data):
    require_fields(data, 'message')
    adoption = get_or_404(Adoption, adoption_id, NOT_FOUND)
    authorize(identity, 'message_adoption', adoption)
    with atomic():
        adoption.messages.append(AdoptionMessage(sender_id=identity.id, message=data['message']))
    return [format_message(m) for m in adoption.messages]


def add_follow_up(identity, adoption_id, data):
    require_fields(data, 'notes')
    adoption = get_or_404(Adoption, adoption_id, NOT_FOUND)
    authorize(identity, 'follow_up_adoption', adoption)
    if adoption.status != AdoptionStatus.COMPLETED:
        raise ConflictError('Can only add follow-ups for completed adoptions')
    images = data.get('images') or []
    if not isinstance(images, list):
        raise ValidationError('images must be a list')
    with atomic():
        adoption.follow_ups.append(AdoptionFollowUp(
            notes=data['notes'],
            images=images,
            conducted_by_id=identity.id
        ))
    return [format_follow_up(f) for f in adoption.follow_ups]
