"""
Backend (admin) routes: login, manager page and the manager API.

The API keeps its historical response shapes: getAllEntries answers
{"entries": [...]}, uploadImage always answers 200 with
{"filePath": ..., "error": ...}, unknown operations answer 403 with 0.
"""

import io
import logging
import os

import pandas as pd
from flask import (
    Blueprint,
    Response,
    current_app,
    jsonify,
    redirect,
    render_template,
    request,
    url_for,
)
from werkzeug.security import check_password_hash
from werkzeug.utils import secure_filename

from blog.decorators import require_login
from blog.exceptions import UploadError
from blog.repositories import UserRepository
from blog.routes.errors import api_error
from blog.utils.security import (
    is_valid_csrf_token,
    issue_csrf_token,
    mark_logged_in,
    rate_limit,
)
from blog.validation import validate_image_filename, validate_string

logger = logging.getLogger(__name__)

backend_bp = Blueprint('backend', __name__)

LOGIN_ERRORS = {
    'ac': 'Invalid username or password.',
    'csrf': 'Invalid csrf token.',
}

EXPORT_COLUMNS = ['entryId', 'entryCode', 'publishDate', 'title', 'content', 'tag',
                  'isPublished', 'authorId', 'createdAt', 'updatedAt']


def allow_user(name, password):
    """Check credentials against the users collection."""
    if not validate_string(name, "User name", max_length=255) or not password:
        return False

    user = UserRepository.find_by_name(name).first()
    if user is None:
        return False
    try:
        return check_password_hash(user.password, password)
    except ValueError as e:
        # Unknown hash method stored for this user
        logger.error(f"Cannot verify password of user {name!r}: {e}")
        return False


@backend_bp.route('/', methods=['GET'])
def login():
    """Login form with a fresh CSRF token."""
    return render_template(
        'login.html',
        token=issue_csrf_token(),
        error_message=LOGIN_ERRORS.get(request.args.get('err', ''), ''),
    )


@backend_bp.route('/', methods=['POST'])
@rate_limit("5 per minute")
def authenticate():
    if not is_valid_csrf_token():
        logger.warning("Login rejected: invalid CSRF token")
        return redirect(url_for('backend.login', err='csrf'))

    name = request.form.get('user', '')
    if allow_user(name, request.form.get('password', '')):
        mark_logged_in()
        logger.info(f"User {name!r} logged in")
        return redirect(url_for('backend.manager'))

    logger.warning(f"Login rejected for user {name!r}")
    return redirect(url_for('backend.login', err='ac'))


@backend_bp.route('/manager/')
@require_login
def manager():
    return render_template('manager.html')


def _export_entries():
    entries = [post.to_dict() for post in current_app.entry_service.get_all_entries()]
    logger.info(f"Exporting {len(entries)} entries")

    if request.args.get('format') == 'csv':
        frame = pd.DataFrame(entries, columns=EXPORT_COLUMNS)
        frame['tag'] = frame['tag'].apply(lambda tags: ','.join(tags))
        buffer = io.StringIO()
        frame.to_csv(buffer, index=False)
        return Response(
            buffer.getvalue(),
            mimetype='text/csv',
            headers={'Content-Disposition': 'attachment; filename=entries.csv'}
        )

    return jsonify({'entries': entries})


@backend_bp.route('/manager/api/<param>', methods=['GET'])
@require_login
def api_get(param):
    if param == 'getAllEntries':
        return _export_entries()
    return jsonify(0), 403


def save_uploaded_image(file_storage):
    """
    Store an uploaded image under FILES_FOLDER/images.

    Returns:
        Public URI of the stored file

    Raises:
        UploadError: missing file, bad name/extension or write failure
    """
    if file_storage is None:
        raise UploadError('no image in request')

    filename = secure_filename(file_storage.filename or '')
    result = validate_image_filename(filename, current_app.config['ALLOWED_IMAGE_EXTENSIONS'])
    if not result:
        raise UploadError(result.error)

    upload_dir = os.path.join(current_app.config['FILES_FOLDER'], 'images')
    try:
        os.makedirs(upload_dir, exist_ok=True)
        file_storage.save(os.path.join(upload_dir, filename))
    except OSError as e:
        logger.error(f"Failed to store upload {filename}: {e}")
        raise UploadError(str(e)) from e

    logger.info(f"Stored uploaded image {filename}")
    return f"{current_app.config['ROOT_PATH']}files/images/{filename}"


@backend_bp.route('/manager/api/<param>', methods=['POST'])
@require_login
def api_post(param):
    if param == 'uploadImage':
        try:
            file_path = save_uploaded_image(request.files.get('image'))
        except UploadError as e:
            logger.warning(f"Image upload rejected: {e}")
            return jsonify({'filePath': '', 'error': str(e)})
        return jsonify({'filePath': file_path, 'error': ''})

    if param == 'refreshTags':
        tags = current_app.tag_service.rebuild_tag_index()
        if current_app.tag_service.last_error is not None:
            return api_error(f"document store unavailable: {current_app.tag_service.last_error}", 503)
        return jsonify({'success': True, 'tags': len(tags)})

    return jsonify(0), 403
