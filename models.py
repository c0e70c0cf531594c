from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from sqlalchemy.orm import validates

db = SQLAlchemy()
bcrypt = Bcrypt()

ROLES = ('student', 'supervisor', 'admin')
STATUSES = ('pending', 'approved', 'rejected')
NOT_CHECKED = 'Not checked'


class User(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), nullable=False, unique=True)
    email = db.Column(db.String(120), nullable=False, unique=True)
    password_hash = db.Column(db.String(128), nullable=False)
    role = db.Column(db.String(20), nullable=False, default='student')  # see ROLES
    created_at = db.Column(db.DateTime, default=db.func.now())

    theses = db.relationship('Thesis', back_populates='owner')

    @validates('email')
    def normalize_email(self, key, value):
        return value.strip().lower()

    @validates('username')
    def normalize_username(self, key, value):
        return value.strip()

    @validates('role')
    def check_role(self, key, value):
        if value not in ROLES:
            raise ValueError(f'Unknown role {value!r}')
        return value

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        return bcrypt.check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
            'email': self.email,
            'role': self.role,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
        }


class Thesis(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    owner_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    title = db.Column(db.String(300), nullable=False)
    abstract = db.Column(db.Text, nullable=False)
    author_name = db.Column(db.String(200), nullable=False)
    department = db.Column(db.String(200), nullable=False)
    submission_year = db.Column(db.Integer, nullable=False)
    keywords = db.Column(db.JSON, nullable=False, default=list)
    keywords_text = db.Column(db.Text, nullable=False, default='')  # lowercased keywords, one per line
    file_location = db.Column(db.String(255), nullable=False)  # stored name under UPLOAD_FOLDER
    file_name = db.Column(db.String(255), nullable=False)
    file_size = db.Column(db.Integer, nullable=False)
    upload_date = db.Column(db.DateTime, default=db.func.now())
    status = db.Column(db.String(20), nullable=False, default='pending', index=True)
    is_public = db.Column(db.Boolean, nullable=False, default=True)
    plagiarism_result = db.Column(db.Text, nullable=False, default=NOT_CHECKED)
    grammar_result = db.Column(db.Text, nullable=False, default=NOT_CHECKED)

    owner = db.relationship('User', back_populates='theses')

    @validates('status')
    def check_status(self, key, value):
        if value not in STATUSES:
            raise ValueError(f'Unknown status {value!r}')
        return value

    @validates('keywords')
    def index_keywords(self, key, value):
        value = list(value or [])
        self.keywords_text = '\n'.join(keyword.lower() for keyword in value)
        return value

    @classmethod
    def publicly_visible(cls):
        """Query for theses anyone may read."""
        return cls.query.filter(cls.status == 'approved', cls.is_public.is_(True))

    def to_dict(self):
        return {
            'id': self.id,
            'owner': self.owner_id,
            'ownerUsername': self.owner.username if self.owner else None,
            'title': self.title,
            'abstract': self.abstract,
            'authorName': self.author_name,
            'department': self.department,
            'submissionYear': self.submission_year,
            'keywords': list(self.keywords or []),
            'fileName': self.file_name,
            'fileSize': self.file_size,
            'uploadDate': self.upload_date.isoformat() if self.upload_date else None,
            'status': self.status,
            'isPublic': self.is_public,
            'plagiarismResult': self.plagiarism_result,
            'grammarResult': self.grammar_result,
        }
