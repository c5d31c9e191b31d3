from collections import namedtuple
from functools import wraps

from flask import g, jsonify
from flask_jwt_extended import jwt_required, get_jwt, get_jwt_identity

from pet_market import db, jwt
from pet_market.errors import UnauthorizedError
from pet_market.models.user_model import User, Role

# Verified caller for the current request
Identity = namedtuple('Identity', ['id', 'role'])


def load_identity():
    subject = get_jwt_identity()
    if subject is None:
        g.identity = None
        return None
    try:
        user = db.session.get(User, int(subject))
    except (TypeError, ValueError):
        user = None
    if not user:
        raise UnauthorizedError('User not found')
    g.identity = Identity(user.id, Role(get_jwt().get('role', user.role.value)))
    return g.identity


def current_identity():
    return g.get('identity')


def token_required(f):
    @wraps(f)
    @jwt_required()
    def decorated(*args, **kwargs):
        load_identity()
        return f(*args, **kwargs)
    return decorated


def token_optional(f):
    @wraps(f)
    @jwt_required(optional=True)
    def decorated(*args, **kwargs):
        load_identity()
        return f(*args, **kwargs)
    return decorated


def setup_auth_middleware(app):
    @jwt.unauthorized_loader
    def missing_token(reason):
        return jsonify({'message': 'No token, authorization denied'}), 401

    @jwt.invalid_token_loader
    def invalid_token(reason):
        return jsonify({'message': 'Token is not valid'}), 401

    @jwt.expired_token_loader
    def expired_token(jwt_header, jwt_payload):
        return jsonify({'message': 'Token has expired'}), 401

    @app.before_request
    def before_request():
        g.identity = None
