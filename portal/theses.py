import logging
import os
from flask import Blueprint, jsonify, request, send_file, url_for
from flask_cors import CORS
from flask_jwt_extended import jwt_required
from itsdangerous import BadSignature, SignatureExpired
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError

from models import db, Thesis
from portal.access import Action, authorize
from portal.errors import Internal, NotFound, ValidationFailed
from portal.pagination import paginate_query
from portal.schemas import ThesisUpdate, ThesisUpload, parse
from portal.services import get_services
from portal.tokens import current_requester

logger = logging.getLogger(__name__)

theses = Blueprint('theses', __name__, url_prefix='/theses')
cors = CORS(theses)

FILE_FIELD = 'thesisFile'


def _get_thesis(thesis_id):
    thesis = db.session.get(Thesis, thesis_id)
    if thesis is None:
        raise NotFound('Thesis not found')
    return thesis


@theses.route('/upload', methods=['POST'])
@jwt_required()
def upload_thesis():
    requester = current_requester()
    payload = parse(ThesisUpload, request.form.to_dict())

    if FILE_FIELD not in request.files or len(request.files.getlist(FILE_FIELD)) != 1:
        raise ValidationFailed('No file uploaded', errors=[{'field': FILE_FIELD, 'msg': 'Exactly one PDF file is required'}])
    file = request.files[FILE_FIELD]
    files = get_services().files
    if not files.accepts(file):
        raise ValidationFailed('Only PDF files are allowed!', errors=[{'field': FILE_FIELD, 'msg': 'Only PDF files are allowed'}])

    try:
        stored = files.save(file)
    except OSError as e:
        raise Internal('Could not store upload') from e

    try:
        new_thesis = Thesis(
            owner_id=int(requester.id),
            title=payload.title,
            abstract=payload.abstract,
            author_name=payload.author_name,
            department=payload.department,
            submission_year=payload.submission_year,
            keywords=payload.keywords,
            file_location=stored.name,
            file_name=stored.original_name,
            file_size=stored.size,
            status='pending',
            is_public=payload.is_public,
        )
        db.session.add(new_thesis)
        db.session.commit()
    except (SQLAlchemyError, ValueError) as e:
        db.session.rollback()
        files.delete(stored.name)
        raise Internal('Could not save thesis') from e

    logger.info('User %s uploaded thesis %s', requester.id, new_thesis.id)
    return jsonify({'message': 'Thesis uploaded successfully', 'thesis': new_thesis.to_dict()}), 201


@theses.route('/public', methods=['GET'])
def public_theses():
    query = Thesis.publicly_visible().order_by(Thesis.upload_date.desc(), Thesis.id.desc())
    return jsonify(paginate_query(query, Thesis.to_dict)), 200


@theses.route('/search', methods=['GET'])
def search_theses():
    term = (request.args.get('q') or '').strip()
    if not term:
        raise ValidationFailed('Search query is required', errors=[{'field': 'q', 'msg': 'Search query is required'}])
    query = Thesis.publicly_visible().filter(or_(
        Thesis.title.icontains(term, autoescape=True),
        Thesis.abstract.icontains(term, autoescape=True),
        Thesis.author_name.icontains(term, autoescape=True),
        Thesis.department.icontains(term, autoescape=True),
        Thesis.keywords_text.contains(term.lower(), autoescape=True),
    )).order_by(Thesis.upload_date.desc(), Thesis.id.desc())
    return jsonify(paginate_query(query, Thesis.to_dict)), 200


@theses.route('/pending', methods=['GET'])
@jwt_required()
def pending_theses():
    authorize(current_requester(), Action.LIST_PENDING)
    pending = Thesis.query.filter_by(status='pending').order_by(Thesis.upload_date.asc(), Thesis.id.asc()).all()
    return jsonify([thesis.to_dict() for thesis in pending]), 200


@theses.route('', methods=['GET'])
@jwt_required()
def my_theses():
    requester = current_requester()
    own = Thesis.query.filter_by(owner_id=int(requester.id)).order_by(Thesis.upload_date.desc(), Thesis.id.desc()).all()
    return jsonify([thesis.to_dict() for thesis in own]), 200


@theses.route('/<int:thesis_id>', methods=['GET'])
@jwt_required(optional=True)
def get_thesis(thesis_id):
    thesis = _get_thesis(thesis_id)
    authorize(current_requester(), Action.VIEW, thesis=thesis)
    return jsonify(thesis.to_dict()), 200


@theses.route('/<int:thesis_id>', methods=['PUT'])
@jwt_required()
def update_thesis(thesis_id):
    thesis = _get_thesis(thesis_id)
    authorize(current_requester(), Action.EDIT, thesis=thesis)
    payload = parse(ThesisUpdate, request.get_json(silent=True))

    for field, value in payload.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(thesis, field, value)
    db.session.commit()
    return jsonify({'message': 'Thesis updated successfully', 'thesis': thesis.to_dict()}), 200


def _set_status(thesis_id, action, status):
    requester = current_requester()
    thesis = _get_thesis(thesis_id)
    authorize(requester, action, thesis=thesis)
    thesis.status = status
    db.session.commit()
    logger.info('User %s set thesis %s to %s', requester.id, thesis.id, status)
    return jsonify({'message': f'Thesis {status} successfully', 'thesis': thesis.to_dict()}), 200


@theses.route('/approve/<int:thesis_id>', methods=['PUT'])
@jwt_required()
def approve_thesis(thesis_id):
    return _set_status(thesis_id, Action.APPROVE, 'approved')


@theses.route('/reject/<int:thesis_id>', methods=['PUT'])
@jwt_required()
def reject_thesis(thesis_id):
    return _set_status(thesis_id, Action.REJECT, 'rejected')


def _run_check(thesis_id, kind):
    requester = current_requester()
    thesis = _get_thesis(thesis_id)
    authorize(requester, Action.RUN_CHECK, thesis=thesis)
    result = get_services().checkers[kind].run_check(thesis)
    setattr(thesis, f'{kind}_result', result)
    db.session.commit()
    logger.info('User %s ran %s check on thesis %s', requester.id, kind, thesis.id)
    return jsonify({'message': f'{kind.capitalize()} check completed', 'result': result, 'thesis': thesis.to_dict()}), 200


@theses.route('/check-plagiarism/<int:thesis_id>', methods=['POST'])
@jwt_required()
def check_plagiarism(thesis_id):
    return _run_check(thesis_id, 'plagiarism')


@theses.route('/check-grammar/<int:thesis_id>', methods=['POST'])
@jwt_required()
def check_grammar(thesis_id):
    return _run_check(thesis_id, 'grammar')


@theses.route('/<int:thesis_id>', methods=['DELETE'])
@jwt_required()
def delete_thesis(thesis_id):
    requester = current_requester()
    thesis = _get_thesis(thesis_id)
    authorize(requester, Action.DELETE, thesis=thesis)

    stored_name = thesis.file_location
    db.session.delete(thesis)
    db.session.commit()
    get_services().files.delete(stored_name)
    logger.info('User %s deleted thesis %s', requester.id, thesis_id)
    return jsonify({'message': 'Thesis removed'}), 200


@theses.route('/<int:thesis_id>/download-link', methods=['GET'])
@jwt_required(optional=True)
def download_link(thesis_id):
    thesis = _get_thesis(thesis_id)
    authorize(current_requester(), Action.VIEW, thesis=thesis)
    token = get_services().download_links.dumps(thesis.id)
    link = url_for('theses.secure_download', token=token, _external=True)
    return jsonify({'downloadLink': link, 'message': 'success'}), 200


@theses.route('/files/<token>', methods=['GET'])
def secure_download(token):
    services = get_services()
    try:
        thesis_id = services.download_links.loads(token, max_age=services.config.DOWNLOAD_LINK_MAX_AGE)
    except (BadSignature, SignatureExpired):
        return jsonify({'message': 'Invalid or expired link'}), 400

    thesis = _get_thesis(thesis_id)
    file_path = services.files.path(thesis.file_location)
    if os.path.exists(file_path):
        return send_file(file_path, mimetype='application/pdf', as_attachment=True, download_name=thesis.file_name)
    raise NotFound('File not found')
