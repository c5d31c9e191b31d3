# pet_market/utils/util.py
import math
from contextlib import contextmanager
from datetime import datetime, timezone
from functools import wraps

from flask import current_app, g, request
from dateutil.parser import isoparse
from flask_restx import reqparse

from pet_market import db
from pet_market.errors import ForbiddenError, NotFoundError, ValidationError


def utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


def iso(value):
    return value.isoformat() if value is not None else None


def role_required(*roles):
    """Allow the wrapped view only for the given roles; expects token_required above it."""
    def wrapper(fn):
        @wraps(fn)
        def decorator(*args, **kwargs):
            identity = g.get('identity')
            if identity is None or identity.role not in roles:
                raise ForbiddenError('Access denied')
            return fn(*args, **kwargs)
        return decorator
    return wrapper


@contextmanager
def atomic():
    """Commit everything done inside the block as one transaction, or nothing."""
    try:
        yield db.session
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise


def get_json_body():
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data


def coerce_id(value):
    if isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def get_or_404(model, object_id, message=None, for_update=False):
    object_id = coerce_id(object_id)
    instance = None
    if object_id is not None:
        instance = db.session.get(model, object_id, with_for_update=for_update or None)
    if instance is None:
        raise NotFoundError(message or f'{model.__name__} not found')
    return instance


def require_fields(data, *fields):
    missing = [field for field in fields if data.get(field) in (None, '', [])]
    if missing:
        raise ValidationError(
            'Missing required fields: ' + ', '.join(missing),
            errors=[{'field': field, 'message': f'{field} is required'} for field in missing]
        )


def parse_str(value, field):
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f'{field} must be a non-empty string',
                              errors=[{'field': field, 'message': 'must be a non-empty string'}])
    return value.strip()


def parse_date(value, field):
    try:
        if not isinstance(value, str):
            raise TypeError(value)
        parsed = isoparse(value)
    except (ValueError, TypeError, OverflowError):
        raise ValidationError(f'Invalid {field}. Use ISO format (YYYY-MM-DDTHH:MM:SS)',
                              errors=[{'field': field, 'message': 'must be an ISO date'}])
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def parse_enum(enum_cls, value, field):
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ', '.join(member.value for member in enum_cls)
        raise ValidationError(
            f'Invalid {field}: {value}. Allowed values: {allowed}',
            errors=[{'field': field, 'message': f'{field} must be one of: {allowed}'}]
        )


def parse_int(value, field, minimum=None, default=None):
    if value is None or value == '':
        if default is not None:
            return default
        raise ValidationError(f'{field} is required', errors=[{'field': field, 'message': f'{field} is required'}])
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        value = None
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f'{field} must be an integer', errors=[{'field': field, 'message': 'must be an integer'}])
    if minimum is not None and number < minimum:
        raise ValidationError(f'{field} must be at least {minimum}',
                              errors=[{'field': field, 'message': f'must be at least {minimum}'}])
    return number


def parse_number(value, field, minimum=None, default=None, exclusive=False):
    if value is None or value == '':
        if default is not None:
            return default
        raise ValidationError(f'{field} is required', errors=[{'field': field, 'message': f'{field} is required'}])
    if isinstance(value, bool):
        value = None
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f'{field} must be a number', errors=[{'field': field, 'message': 'must be a number'}])
    if not math.isfinite(number):
        raise ValidationError(f'{field} must be a finite number',
                              errors=[{'field': field, 'message': 'must be a finite number'}])
    if minimum is not None and (number <= minimum if exclusive else number < minimum):
        bound = 'greater than' if exclusive else 'at least'
        raise ValidationError(f'{field} must be {bound} {minimum}',
                              errors=[{'field': field, 'message': f'must be {bound} {minimum}'}])
    return number


list_parser = reqparse.RequestParser()
list_parser.add_argument('page', type=int, default=1, location='args', help='Page number (1-based)')
list_parser.add_argument('limit', type=int, location='args', help='Items per page')
list_parser.add_argument('sort', type=str, location='args', help='Sort field, prefix with - for descending')


def apply_sort(query, fields, sort, default, tiebreak=None):
    sort_key = sort or default
    descending = sort_key.startswith('-')
    key = sort_key.lstrip('-')
    column = fields.get(key)
    if column is None:
        raise ValidationError(f'Cannot sort by {key}. Allowed: {", ".join(sorted(fields))}')
    order = [column.desc() if descending else column.asc()]
    if tiebreak is not None:
        order.append(tiebreak.desc() if descending else tiebreak.asc())
    return query.order_by(*order)


def paginate(query, page=None, limit=None):
    page = page or 1
    limit = limit or current_app.config.get('DEFAULT_PAGE_SIZE', 10)
    max_limit = current_app.config.get('MAX_PAGE_SIZE', 100)
    if page < 1:
        raise ValidationError('page must be at least 1')
    if limit < 1 or limit > max_limit:
        raise ValidationError(f'limit must be between 1 and {max_limit}')
    total = query.order_by(None).count()
    items = query.offset((page - 1) * limit).limit(limit).all()
    return items, {
        'total': total,
        'pages': math.ceil(total / limit),
        'currentPage': page,
        'perPage': limit
    }
