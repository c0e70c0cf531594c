import logging
from flask import jsonify
from flask_jwt_extended import JWTManager, create_access_token, decode_token, get_jwt, get_jwt_identity
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError

from models import ROLES
from portal.access import Requester

logger = logging.getLogger(__name__)

jwt = JWTManager()


def issue_token(user, expires_delta=None, extra_claims=None):
    """Sign an access token for ``user``; lifetime defaults to JWT_ACCESS_TOKEN_EXPIRES."""
    claims = {'role': user.role, 'username': user.username, 'email': user.email}
    if extra_claims:
        claims.update(extra_claims)
    kwargs = {'additional_claims': claims}
    if expires_delta is not None:
        kwargs['expires_delta'] = expires_delta
    return create_access_token(identity=str(user.id), **kwargs)


def verify_token(token):
    """Return the token's Requester, or None when it is unusable for any reason."""
    if not token or not isinstance(token, str):
        return None
    try:
        claims = decode_token(token)
    except (PyJWTError, JWTExtendedException) as e:
        logger.debug('Rejected token: %s', e)
        return None
    role = claims.get('role')
    if role not in ROLES or not claims.get('sub'):
        return None
    return Requester(claims['sub'], role)


def current_requester():
    """Requester for the current request; call after jwt_required()."""
    claims = get_jwt()
    if not claims:
        return None
    return Requester(get_jwt_identity(), claims.get('role'))


@jwt.unauthorized_loader
def missing_token(reason):
    return jsonify({'message': 'No token, authorization denied'}), 401


@jwt.invalid_token_loader
def invalid_token(reason):
    logger.info('Invalid token presented: %s', reason)
    return jsonify({'message': 'Token is not valid'}), 401


@jwt.expired_token_loader
def expired_token(jwt_header, jwt_payload):
    return jsonify({'message': 'Token has expired'}), 401
