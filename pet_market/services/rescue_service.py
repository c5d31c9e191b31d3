# Rescue operation business logic
import logging

from pet_market import db
from pet_market.errors import UnauthorizedError, ValidationError
from pet_market.models.rescue_model import (
    Rescue, RescueStatus, AnimalCondition, RescueTeamMember, RescueDonation, RescueUpdate
)
from pet_market.models.user_model import User, Role
from pet_market.services.workflows import next_rescue_state
from pet_market.utils.role_utils import authorize
from pet_market.utils.util import (
    apply_sort, atomic, coerce_id, get_or_404, iso, paginate, parse_date, parse_enum,
    parse_int, parse_number, require_fields, utcnow
)

logger = logging.getLogger(__name__)

NOT_FOUND = 'Rescue operation not found'
OUTCOME_FIELDS = ('animalsRescued', 'animalsRehabilitated', 'animalsAdopted', 'success', 'challenges', 'summary')
SORT_FIELDS = {
    'createdAt': Rescue.created_at,
    'plannedDate': Rescue.rescue_date_planned,
    'title': Rescue.title,
}


def format_funding(rescue):
    return {
        'required': rescue.funding_required,
        'raised': rescue.funding_raised,
        'donations': [{
            'id': donation.id,
            'donor': donation.donor_id,
            'anonymousDonor': donation.anonymous_donor,
            'amount': donation.amount,
            'message': donation.message,
            'date': iso(donation.date),
        } for donation in rescue.donations],
    }


def format_rescue(rescue):
    return {
        'id': rescue.id,
        'title': rescue.title,
        'ngo': {'id': rescue.ngo.id, 'username': rescue.ngo.username} if rescue.ngo else None,
        'status': rescue.status.value,
        'location': {
            'address': rescue.location_address,
            'city': rescue.location_city,
            'state': rescue.location_state,
            'country': rescue.location_country,
            'coordinates': rescue.location_coordinates,
        },
        'description': rescue.description,
        'rescueDate': {
            'planned': iso(rescue.rescue_date_planned),
            'actual': iso(rescue.rescue_date_actual),
        },
        'animals': rescue.animals or [],
        'team': [{'member': m.member_id, 'role': m.role} for m in rescue.team],
        'resources': rescue.resources or {},
        'funding': format_funding(rescue),
        'updates': [{
            'id': update.id,
            'content': update.content,
            'author': update.author_id,
            'images': update.images or [],
            'date': iso(update.date),
        } for update in rescue.updates],
        'outcomes': rescue.outcomes or {},
        'createdAt': iso(rescue.created_at),
    }


def validate_animals(animals):
    if not isinstance(animals, list) or not animals:
        raise ValidationError('At least one animal type must be included',
                              errors=[{'field': 'animals', 'message': 'At least one animal type must be included'}])
    cleaned = []
    for index, animal in enumerate(animals):
        if not isinstance(animal, dict) or not animal.get('species'):
            raise ValidationError('Species is required for each animal',
                                  errors=[{'field': f'animals[{index}].species', 'message': 'is required'}])
        condition = parse_enum(AnimalCondition, animal.get('condition') or AnimalCondition.UNKNOWN.value,
                               f'animals[{index}].condition')
        cleaned.append({
            'species': animal['species'],
            'breed': animal.get('breed'),
            'count': parse_int(animal.get('count'), f'animals[{index}].count', minimum=0),
            'condition': condition.value,
            'notes': animal.get('notes'),
            'images': animal.get('images') or [],
        })
    return cleaned


def _location(data):
    location = data.get('location')
    if not isinstance(location, dict):
        raise ValidationError('Location is required', errors=[
            {'field': f'location.{key}', 'message': f'{key.capitalize()} is required'}
            for key in ('city', 'state', 'country')
        ])
    missing = [key for key in ('city', 'state', 'country') if not location.get(key)]
    if missing:
        raise ValidationError('Location is incomplete', errors=[
            {'field': f'location.{key}', 'message': f'{key.capitalize()} is required'} for key in missing
        ])
    return location


def _apply_location(rescue, location):
    if 'address' in location:
        rescue.location_address = location['address']
    for key in ('city', 'state', 'country'):
        if location.get(key):
            setattr(rescue, f'location_{key}', location[key])
    if 'coordinates' in location:
        rescue.location_coordinates = location['coordinates']


def list_rescues(filters):
    query = Rescue.query
    if filters.get('status'):
        query = query.filter(Rescue.status == parse_enum(RescueStatus, filters['status'], 'status'))
    if filters.get('ngo'):
        query = query.filter(Rescue.ngo_id == coerce_id(filters['ngo']))
    for key in ('city', 'state', 'country'):
        if filters.get(key):
            query = query.filter(getattr(Rescue, f'location_{key}').ilike(f'%{filters[key]}%'))

    query = apply_sort(query, SORT_FIELDS, filters.get('sort'), '-createdAt', tiebreak=Rescue.id)
    rescues, pagination = paginate(query, filters.get('page'), filters.get('limit'))
    return {'rescues': [format_rescue(r) for r in rescues], 'pagination': pagination}


def get_rescue(rescue_id):
    return format_rescue(get_or_404(Rescue, rescue_id, NOT_FOUND))


def create_rescue(identity, data):
    authorize(identity, 'create_rescue', message='Not authorized. Only NGOs can create rescue operations')
    require_fields(data, 'title', 'description')
    location = _location(data)
    rescue_date = data.get('rescueDate') or {}
    if not isinstance(rescue_date, dict) or not rescue_date.get('planned'):
        raise ValidationError('Planned rescue date is required',
                              errors=[{'field': 'rescueDate.planned', 'message': 'Planned rescue date is required'}])
    animals = validate_animals(data.get('animals'))

    if identity.role == Role.NGO:
        ngo_id = identity.id
    else:
        ngo = get_or_404(User, data.get('ngo'), 'NGO not found')
        if ngo.role != Role.NGO:
            raise ValidationError('ngo must reference an NGO account')
        ngo_id = ngo.id

    funding = data.get('funding') or {}
    rescue = Rescue(
        title=data['title'],
        ngo_id=ngo_id,
        status=RescueStatus.PLANNING,
        description=data['description'],
        rescue_date_planned=parse_date(rescue_date['planned'], 'rescueDate.planned'),
        animals=animals,
        resources=data.get('resources') or {},
        funding_required=parse_number(funding.get('required'), 'funding.required', minimum=0, default=0),
        funding_raised=0,
        outcomes={}
    )
    _apply_location(rescue, location)
    with atomic():
        db.session.add(rescue)
    logger.info(f"Rescue {rescue.id} created for NGO {ngo_id}")
    return format_rescue(rescue)


def update_rescue(identity, rescue_id, data):
    rescue = get_or_404(Rescue, rescue_id, NOT_FOUND)
    authorize(identity, 'manage_rescue', rescue)
    for key in ('title', 'description'):
        if key in data and not data[key]:
            raise ValidationError(f'{key.capitalize()} is required if provided')

    with atomic():
        if data.get('title'):
            rescue.title = data['title']
        if data.get('description'):
            rescue.description = data['description']
        if isinstance(data.get('location'), dict):
            _apply_location(rescue, data['location'])
        rescue_date = data.get('rescueDate')
        if isinstance(rescue_date, dict) and rescue_date.get('planned'):
            rescue.rescue_date_planned = parse_date(rescue_date['planned'], 'rescueDate.planned')
        if 'animals' in data:
            rescue.animals = validate_animals(data['animals'])
        if isinstance(data.get('resources'), dict):
            rescue.resources = data['resources']
    return format_rescue(rescue)


def update_rescue_status(identity, rescue_id, data):
    require_fields(data, 'status')
    target = parse_enum(RescueStatus, data['status'], 'status')
    with atomic():
        rescue = get_or_404(Rescue, rescue_id, NOT_FOUND, for_update=True)
        authorize(identity, 'manage_rescue', rescue)
        previous = rescue.status
        rescue.status = next_rescue_state(previous, target)
        if target == RescueStatus.COMPLETED:
            rescue.rescue_date_actual = utcnow()
    logger.info(f"Rescue {rescue.id} moved from {previous.value} to {target.value}")
    return format_rescue(rescue)


def add_team_members(identity, rescue_id, data):
    members = data.get('members')
    if not isinstance(members, list) or not members:
        raise ValidationError('Members array is required')
    rescue = get_or_404(Rescue, rescue_id, NOT_FOUND)
    authorize(identity, 'manage_rescue', rescue)

    with atomic():
        for index, entry in enumerate(members):
            if not isinstance(entry, dict) or not entry.get('member') or not entry.get('role'):
                raise ValidationError('Member ID and role are required for each team member',
                                      errors=[{'field': f'members[{index}]', 'message': 'member and role are required'}])
            member = get_or_404(User, entry['member'], f"User {entry['member']} not found")
            rescue.team.append(RescueTeamMember(member_id=member.id, role=entry['role']))
    return format_rescue(rescue)['team']


def add_update(identity, rescue_id, data):
    require_fields(data, 'content')
    rescue = get_or_404(Rescue, rescue_id, NOT_FOUND)
    authorize(identity, 'post_rescue_update', rescue)
    with atomic():
        rescue.updates.append(RescueUpdate(
            content=data['content'],
            images=data.get('images') or [],
            author_id=identity.id
        ))
    return format_rescue(rescue)['updates']


def add_donation(identity, rescue_id, data):
    """Record a donation and bump the running total in the same commit.

    Anonymous donations need ``anonymousDonor.name``; everything else needs a
    signed-in donor.
    """
    amount = parse_number(data.get('amount'), 'amount', minimum=0, exclusive=True)
    anonymous = bool(data.get('anonymous'))
    anonymous_donor = None
    if anonymous:
        anonymous_donor = data.get('anonymousDonor') or {}
        if not isinstance(anonymous_donor, dict) or not anonymous_donor.get('name'):
            raise ValidationError('Name is required for anonymous donor',
                                  errors=[{'field': 'anonymousDonor.name', 'message': 'Name is required'}])
        anonymous_donor = {'name': anonymous_donor['name'], 'email': anonymous_donor.get('email')}
    elif identity is None:
        raise UnauthorizedError('Authentication required for non-anonymous donations')

    with atomic():
        rescue = get_or_404(Rescue, rescue_id, NOT_FOUND, for_update=True)
        if not anonymous:
            authorize(identity, 'donate')
        rescue.donations.append(RescueDonation(
            donor_id=None if anonymous else identity.id,
            anonymous_donor=anonymous_donor,
            amount=amount,
            message=data.get('message')
        ))
        rescue.funding_raised = Rescue.funding_raised + amount
    logger.info(f"Donation of {amount} recorded for rescue {rescue.id}")
    return format_funding(rescue)


def update_outcomes(identity, rescue_id, data):
    outcomes = data.get('outcomes')
    if not isinstance(outcomes, dict) or not outcomes:
        raise ValidationError('Outcomes object is required')
    unknown = sorted(set(outcomes) - set(OUTCOME_FIELDS))
    if unknown:
        raise ValidationError(f"Unknown outcome fields: {', '.join(unknown)}")
    rescue = get_or_404(Rescue, rescue_id, NOT_FOUND)
    authorize(identity, 'manage_rescue', rescue)
    with atomic():
        rescue.outcomes = dict(rescue.outcomes or {}, **outcomes)
    return rescue.outcomes
