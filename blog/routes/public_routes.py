"""
Public blog routes: listing pages, single entries, tag pages, error pages.

All content comes from the app's EntryService/TagService; "nothing to show"
(not found or store failure) is answered with the 404 error page.
"""

from flask import Blueprint, abort, current_app, render_template, send_from_directory
from blog.validation import validate_page_number
import logging
import os

logger = logging.getLogger(__name__)

public_bp = Blueprint('public', __name__)

ERROR_MESSAGES = {
    404: 'not found',
    400: 'Bad Request',
}


def _render_listing(page_number):
    page = current_app.entry_service.get_page(page_number)
    if not page.entries:
        logger.info(f"Listing page {page_number} has no entries")
        abort(404)
    return render_template(
        'multiple.html',
        title='',
        entries=page.entries,
        next=page.next,
        previous=page.previous,
        tags=current_app.tag_service.tags,
    )


@public_bp.route('/')
def index():
    """Newest entries (page 0)."""
    return _render_listing(0)


@public_bp.route('/page/<num>')
def page(num):
    """Older listing pages."""
    result = validate_page_number(num)
    if not result:
        logger.info(f"Rejected page number {num!r}: {result.error}")
        abort(400)
    return _render_listing(result.value)


@public_bp.route('/tag/<path:tag_name>')
def tag(tag_name):
    """Titles of the published entries carrying a tag."""
    title_list = current_app.entry_service.get_title_list(tag_name)
    if not title_list:
        abort(404)
    return render_template(
        'tag_page.html',
        title=f'tag : {tag_name}',
        tag_name=tag_name,
        title_list=title_list,
        tags=current_app.tag_service.tags,
    )


@public_bp.route('/error/<code>')
def error(code):
    """Error page the error handlers redirect to."""
    try:
        status = int(code)
    except ValueError:
        status = 500
    if not 400 <= status <= 599:
        status = 500
    return render_template(
        'error.html',
        title=str(status),
        error_code=str(status),
        error_message=ERROR_MESSAGES.get(status, 'internal server error'),
    ), status


@public_bp.route('/files/<path:filename>')
def files(filename):
    """Static files and uploaded images."""
    return send_from_directory(os.path.abspath(current_app.config['FILES_FOLDER']), filename)


@public_bp.route('/favicon.ico')
def favicon():
    return send_from_directory(
        os.path.abspath(os.path.join(current_app.config['FILES_FOLDER'], 'images')),
        'favicon.ico'
    )


@public_bp.route('/<entry_code>')
def entry(entry_code):
    """A single published entry."""
    entry_item = current_app.entry_service.get_entry(entry_code)
    if entry_item.entry_id < 1:
        abort(404)
    return render_template(
        'single.html',
        title=entry_item.title,
        entry=entry_item,
        tags=current_app.tag_service.tags,
    )
