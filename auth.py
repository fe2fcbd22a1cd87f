import secrets
from functools import wraps

from flask import current_app, g, request
from itsdangerous import BadData, URLSafeSerializer

from errors import AuthenticationError
from models import AUTH_ACCESS, User, db


def _serializer():
    return URLSafeSerializer(current_app.config['SECRET_KEY'], salt=AUTH_ACCESS)


def generate_auth_token(user):
    # caller commits
    payload = {'_id': user.id, 'access': AUTH_ACCESS, 'jti': secrets.token_hex(16)}
    token = _serializer().dumps(payload)
    user.add_token(token)
    return token


def decode_auth_token(token):
    try:
        payload = _serializer().loads(token)
    except BadData:
        return None
    if not isinstance(payload, dict) or payload.get('access') != AUTH_ACCESS:
        return None
    return payload


def find_by_token(token):
    # signature first, then the token must still be stored for that user
    if not token:
        return None
    payload = decode_auth_token(token)
    if payload is None:
        return None
    user_id = payload.get('_id')
    if not isinstance(user_id, int):
        return None
    user = db.session.get(User, user_id)
    if user is None or not user.has_token(token):
        return None
    return user


def authenticate(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        token = request.headers.get(current_app.config['AUTH_HEADER'])
        user = find_by_token(token)
        if user is None:
            current_app.logger.warning('Rejected token on %s %s', request.method, request.path)
            raise AuthenticationError()
        g.user = user
        g.token = token
        return view(*args, **kwargs)

    return wrapper
