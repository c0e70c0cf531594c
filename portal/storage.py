import logging
import os
import uuid
from collections import namedtuple
from werkzeug.utils import secure_filename

logger = logging.getLogger(__name__)

PDF_MIMETYPE = 'application/pdf'

StoredFile = namedtuple('StoredFile', ['name', 'original_name', 'size'])


class FileStore:
    """Uploaded thesis PDFs kept under a single folder with generated names."""

    def __init__(self, upload_folder, allowed_extensions=('pdf',)):
        self.upload_folder = upload_folder
        self.allowed_extensions = frozenset(ext.lower() for ext in allowed_extensions)

    def allowed_file(self, filename):
        return '.' in filename and filename.rsplit('.', 1)[1].lower() in self.allowed_extensions

    def accepts(self, file):
        """Only PDFs: checked on both the declared content type and the extension."""
        if file is None or not file.filename:
            return False
        return file.mimetype == PDF_MIMETYPE and self.allowed_file(file.filename)

    def path(self, name):
        safe = secure_filename(name)
        if not safe or safe != name:
            raise ValueError(f'Refusing unsafe stored file name {name!r}')
        return os.path.join(self.upload_folder, safe)

    def save(self, file, prefix='thesisFile'):
        if not os.path.exists(self.upload_folder):
            os.makedirs(self.upload_folder)
        extension = file.filename.rsplit('.', 1)[1].lower()
        name = f'{prefix}-{uuid.uuid4().hex}.{extension}'
        target = self.path(name)
        file.save(target)
        stored = StoredFile(name, secure_filename(file.filename) or name, os.path.getsize(target))
        logger.info('Stored upload %s (%d bytes)', stored.name, stored.size)
        return stored

    def delete(self, name):
        """Remove a stored file. Failures are logged and reported as False, never raised."""
        try:
            os.remove(self.path(name))
        except FileNotFoundError:
            logger.warning('File not found for deletion: %s', name)
            return False
        except (OSError, ValueError) as e:
            logger.warning('Could not delete %s: %s', name, e)
            return False
        logger.info('Deleted file %s', name)
        return True
