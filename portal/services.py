from flask import current_app
from itsdangerous import URLSafeTimedSerializer

from portal.checks import CHECK_KINDS, default_checkers
from portal.storage import FileStore

EXTENSION_KEY = 'thesis_portal'


class PortalServices:
    """Collaborators built once from the Config and shared by every request."""

    def __init__(self, config, checkers=None):
        self.config = config
        self.files = FileStore(config.UPLOAD_FOLDER, config.ALLOWED_EXTENSIONS)
        self.checkers = default_checkers()
        if checkers:
            unknown = set(checkers) - set(CHECK_KINDS)
            if unknown:
                raise ValueError(f'Unknown check kinds {sorted(unknown)}')
            self.checkers.update(checkers)
        self.download_links = URLSafeTimedSerializer(config.SECRET_KEY, salt='thesis-download')

    def init_app(self, app):
        app.extensions[EXTENSION_KEY] = self


def get_services():
    return current_app.extensions[EXTENSION_KEY]
