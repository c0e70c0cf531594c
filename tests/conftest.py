"""
Pytest fixtures: an app on in-memory SQLite with a throwaway upload folder.
"""
import io

import pytest

from app import create_app
from config import Config
from models import db, Thesis, User
from portal.tokens import issue_token

PASSWORD = 'secret123'
PDF_BYTES = b'%PDF-1.4\n1 0 obj <<>> endobj\ntrailer <<>>\n%%EOF\n'


@pytest.fixture
def config(tmp_path):
    return Config(
        SQLALCHEMY_DATABASE_URI='sqlite://',
        SECRET_KEY='test-secret-key',
        JWT_SECRET_KEY='test-jwt-secret',
        UPLOAD_FOLDER=str(tmp_path / 'uploads'),
        BCRYPT_LOG_ROUNDS=4,
        LOG_LEVEL='WARNING',
        TESTING=True,
    )


@pytest.fixture
def app(config):
    app = create_app(config)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    def _make_user(username, role='student', password=PASSWORD):
        user = User(username=username, email=f'{username}@uni.edu', role=role)
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        return user
    return _make_user


@pytest.fixture
def student(make_user):
    return make_user('alice')


@pytest.fixture
def other_student(make_user):
    return make_user('bob')


@pytest.fixture
def supervisor(make_user):
    return make_user('sam', role='supervisor')


@pytest.fixture
def admin(make_user):
    return make_user('ada', role='admin')


@pytest.fixture
def headers_for(app):
    def _headers_for(user):
        return {'x-auth-token': issue_token(user)}
    return _headers_for


@pytest.fixture
def make_thesis(app):
    """Insert a thesis row directly, with a real file in the upload folder."""
    def _make_thesis(owner, status='pending', is_public=True, title='Graph Theory', **fields):
        stored_name = f'thesisFile-{owner.id}-{Thesis.query.count()}.pdf'
        with open(app.extensions['thesis_portal'].files.path(stored_name), 'wb') as fh:
            fh.write(PDF_BYTES)
        thesis = Thesis(
            owner_id=owner.id,
            title=title,
            abstract=fields.pop('abstract', 'An abstract'),
            author_name=fields.pop('author_name', owner.username),
            department=fields.pop('department', 'Mathematics'),
            submission_year=fields.pop('submission_year', 2023),
            keywords=fields.pop('keywords', ['graphs']),
            file_location=stored_name,
            file_name='thesis.pdf',
            file_size=len(PDF_BYTES),
            status=status,
            is_public=is_public,
        )
        db.session.add(thesis)
        db.session.commit()
        return thesis
    return _make_thesis


def upload_form(**overrides):
    form = {
        'title': 'T',
        'abstract': 'A',
        'authorName': 'N',
        'department': 'D',
        'submissionYear': '2023',
        'keywords': 'ai, ml , ,ethics',
        'isPublic': 'true',
        'thesisFile': (io.BytesIO(PDF_BYTES), 'valid.pdf', 'application/pdf'),
    }
    form.update(overrides)
    return form


def fetch_thesis(thesis_id):
    db.session.expire_all()
    return db.session.get(Thesis, thesis_id)
