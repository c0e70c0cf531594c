import logging
from flask import Blueprint, jsonify, request
from flask_cors import CORS
from flask_jwt_extended import jwt_required
from sqlalchemy.exc import IntegrityError

from models import db, User
from portal.errors import Conflict, NotFound
from portal.schemas import LoginPayload, ProfileUpdate, RegisterPayload, parse
from portal.tokens import current_requester, issue_token

logger = logging.getLogger(__name__)

auth = Blueprint('auth', __name__)
cors = CORS(auth)


def register_user(data):
    """The one account-creation flow: every new account is a student."""
    payload = parse(RegisterPayload, data)
    existing_user = User.query.filter((User.username == payload.username) | (User.email == payload.email)).first()
    if existing_user:
        raise Conflict()

    new_user = User(username=payload.username, email=payload.email, role='student')
    new_user.set_password(payload.password)
    db.session.add(new_user)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise Conflict() from None

    logger.info('Registered user %s (%s)', new_user.id, new_user.username)
    return jsonify({
        'message': 'User registered successfully',
        'token': issue_token(new_user),
        'user': new_user.to_dict(),
    }), 201


def _load_current_user():
    user = db.session.get(User, int(current_requester().id))
    if user is None:
        raise NotFound('User not found')
    return user


@auth.route('/register', methods=['POST'])
def register():
    return register_user(request.get_json(silent=True))


@auth.route('/login', methods=['POST'])
def login():
    payload = parse(LoginPayload, request.get_json(silent=True))
    user = User.query.filter_by(email=payload.email).first()
    if user and user.check_password(payload.password):
        return jsonify({'message': 'Logged in successfully', 'token': issue_token(user), 'user': user.to_dict()}), 200
    return jsonify({'message': 'Invalid credentials'}), 400


@auth.route('/me', methods=['GET'])
@jwt_required()
def me():
    return jsonify(_load_current_user().to_dict()), 200


@auth.route('/me', methods=['PUT'])
@jwt_required()
def update_profile():
    payload = parse(ProfileUpdate, request.get_json(silent=True))
    user = _load_current_user()

    if payload.username and payload.username != user.username:
        if User.query.filter(User.username == payload.username, User.id != user.id).first():
            raise Conflict('Username already in use by another account.')
        user.username = payload.username
    if payload.email and payload.email != user.email:
        if User.query.filter(User.email == payload.email, User.id != user.id).first():
            raise Conflict('Email already in use by another account.')
        user.email = payload.email

    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise Conflict() from None
    return jsonify({'message': 'Profile updated successfully', 'user': user.to_dict()}), 200
