import logging
from flask import Blueprint, jsonify, request
from flask_cors import CORS
from flask_jwt_extended import jwt_required

from models import db, User
from portal.access import Action, authorize
from portal.auth import register_user
from portal.errors import NotFound
from portal.pagination import paginate_query
from portal.schemas import RoleChange, parse
from portal.tokens import current_requester

logger = logging.getLogger(__name__)

users = Blueprint('users', __name__, url_prefix='/users')
cors = CORS(users)


@users.route('', methods=['POST'])
def create_user():
    return register_user(request.get_json(silent=True))


@users.route('/all', methods=['GET'])
@jwt_required()
def list_users():
    authorize(current_requester(), Action.LIST_ALL)
    query = User.query.order_by(User.created_at.asc(), User.id.asc())
    return jsonify(paginate_query(query, User.to_dict)), 200


@users.route('/role/<int:user_id>', methods=['PUT'])
@jwt_required()
def change_role(user_id):
    requester = current_requester()
    target = db.session.get(User, user_id)
    if target is None:
        raise NotFound('User not found')

    authorize(requester, Action.CHANGE_ROLE, target=target)
    payload = parse(RoleChange, request.get_json(silent=True))

    previous = target.role
    target.role = payload.role
    db.session.commit()
    logger.info('User %s changed role of user %s from %s to %s', requester.id, target.id, previous, target.role)
    return jsonify({'message': 'User role updated successfully', 'user': target.to_dict()}), 200
