"""
Tests for the public blog pages, the backend login flow and the manager API.
"""

import io
import json
from unittest.mock import patch

import pandas as pd
import pytest

from blog.exceptions import StoreError
from blog.repositories import QueryResult
from tests.test_data_generators import EntryTestData, insert_user

BACKEND = '/backend/'


def login_session(client, app):
    """Mark the test client's backend session as logged in."""
    with client.session_transaction(BACKEND) as sess:
        sess[app.config['LOGGEDIN_KEY']] = app.config['LOGGEDIN_VALUE']


class TestPublicPages:
    """Tests for listing, entry and tag pages"""

    def test_index_lists_newest_entries(self, client, five_posts):
        response = client.get('/')
        body = response.get_data(as_text=True)

        assert response.status_code == 200
        assert 'href="/post-5"' in body
        assert 'href="/post-4"' in body
        assert 'href="/post-3"' not in body
        assert 'Older entries' in body
        assert 'Newer entries' not in body

    def test_listing_cuts_at_more_marker(self, client, five_posts):
        body = client.get('/').get_data(as_text=True)

        assert 'Body of post 5' in body
        assert 'The rest of post 5' not in body
        assert 'Read more<span class="srt">Post 5</span>' in body

    def test_older_page_links_both_ways(self, client, five_posts):
        body = client.get('/page/1').get_data(as_text=True)

        assert 'href="/post-3"' in body
        assert '<a class="next" href="/">' in body
        assert '<a class="previous" href="/page/2">' in body

    def test_empty_page_redirects_to_404(self, client, five_posts):
        response = client.get('/page/9')
        assert response.status_code == 302
        assert response.headers['Location'].endswith('/error/404')

    def test_empty_blog_index_redirects_to_404(self, client):
        response = client.get('/')
        assert response.status_code == 302
        assert response.headers['Location'].endswith('/error/404')

    def test_huge_page_number_redirects_to_404(self, client, five_posts):
        response = client.get('/page/' + '9' * 25)
        assert response.status_code == 302
        assert response.headers['Location'].endswith('/error/404')

    @pytest.mark.parametrize('num', ['abc', '-1', '1.5', '1_0', '+1', '01'])
    def test_invalid_page_number_redirects_to_400(self, client, five_posts, num):
        response = client.get(f'/page/{num}')
        assert response.status_code == 302
        assert response.headers['Location'].endswith('/error/400')

    def test_single_entry_renders_full_body(self, client, seed):
        seed([EntryTestData.entry(1, tags=['python'])])
        response = client.get('/post-1')
        body = response.get_data(as_text=True)

        assert response.status_code == 200
        assert 'The rest of post 1' in body
        assert 'Read more' not in body
        assert '<a href="/tag/python">python</a>' in body
        assert '2024-01-01' in body

    def test_unpublished_entry_redirects_to_404(self, client, seed):
        seed([EntryTestData.entry(1, published=False)])
        response = client.get('/post-1')
        assert response.headers['Location'].endswith('/error/404')

    def test_tag_page_lists_titles(self, client, seed):
        seed([
            EntryTestData.entry(1, tags=['python']),
            EntryTestData.entry(2, tags=['python', 'web']),
        ])
        response = client.get('/tag/python')
        body = response.get_data(as_text=True)

        assert response.status_code == 200
        assert 'tag : python' in body
        assert body.index('Post 2') < body.index('Post 1')

    def test_tag_with_space_is_url_decoded(self, client, seed):
        seed([EntryTestData.entry(1, tags=['web dev'])])
        response = client.get('/tag/web%20dev')
        assert response.status_code == 200
        assert 'tag : web dev' in response.get_data(as_text=True)

    def test_unknown_tag_redirects_to_404(self, client, five_posts):
        response = client.get('/tag/missing')
        assert response.headers['Location'].endswith('/error/404')

    def test_sidebar_shows_tag_counts(self, client, seed):
        seed([
            EntryTestData.entry(1, tags=['a', 'b']),
            EntryTestData.entry(2, tags=['b']),
        ])
        body = client.get('/').get_data(as_text=True)
        assert '<a href="/tag/a">a</a> (1)' in body
        assert '<a href="/tag/b">b</a> (2)' in body

    def test_store_failure_is_shown_as_not_found(self, app, client, five_posts):
        failure = QueryResult.failed(StoreError('unreachable'))
        with patch('blog.services.entry_service.EntryRepository.find_by_code', return_value=failure):
            response = client.get('/post-1')
        assert response.headers['Location'].endswith('/error/404')


class TestErrorPage:
    """Tests for /error/<code>"""

    def test_not_found_page(self, client):
        response = client.get('/error/404')
        body = response.get_data(as_text=True)

        assert response.status_code == 404
        assert '<h1>404</h1>' in body
        assert 'not found' in body

    def test_bad_request_page(self, client):
        response = client.get('/error/400')
        assert response.status_code == 400
        assert 'Bad Request' in response.get_data(as_text=True)

    def test_other_codes_are_server_errors(self, client):
        response = client.get('/error/503')
        assert response.status_code == 503
        assert 'internal server error' in response.get_data(as_text=True)

    @pytest.mark.parametrize('code', ['abc', '200', '999'])
    def test_unusable_codes_become_500(self, client, code):
        assert client.get(f'/error/{code}').status_code == 500

    def test_unknown_route_redirects_to_error_page(self, client):
        response = client.get('/no/such/route')
        assert response.status_code == 302
        assert response.headers['Location'].endswith('/error/404')


class TestLogin:
    """Tests for the backend login flow"""

    def test_login_form_carries_random_token(self, client):
        response = client.get(BACKEND)
        assert response.status_code == 200

        with client.session_transaction(BACKEND) as sess:
            name, value = sess['token_name'], sess['token_value']
        assert len(name) == 64
        assert len(value) == 128
        assert f'name="{name}" value="{value}"' in response.get_data(as_text=True)

    def test_valid_login_reaches_manager(self, app, client):
        insert_user(app, 'admin', 'correct horse')
        client.get(BACKEND)
        with client.session_transaction(BACKEND) as sess:
            token = {sess['token_name']: sess['token_value']}

        response = client.post(BACKEND, data={'user': 'admin', 'password': 'correct horse', **token})
        assert response.status_code == 302
        assert response.headers['Location'].endswith('/backend/manager/')

        manager = client.get('/backend/manager/')
        assert manager.status_code == 200
        assert 'manager' in manager.get_data(as_text=True)

        with client.session_transaction(BACKEND) as sess:
            assert sess[app.config['LOGGEDIN_KEY']] == app.config['LOGGEDIN_VALUE']
            assert 'token_name' not in sess

    def test_wrong_password_is_rejected(self, app, client):
        insert_user(app, 'admin', 'correct horse')
        client.get(BACKEND)
        with client.session_transaction(BACKEND) as sess:
            token = {sess['token_name']: sess['token_value']}

        response = client.post(BACKEND, data={'user': 'admin', 'password': 'wrong', **token})
        assert 'err=ac' in response.headers['Location']
        assert client.get('/backend/manager/').status_code == 302

    def test_missing_csrf_token_is_rejected(self, app, client):
        insert_user(app, 'admin', 'correct horse')
        client.get(BACKEND)

        response = client.post(BACKEND, data={'user': 'admin', 'password': 'correct horse'})
        assert 'err=csrf' in response.headers['Location']

    def test_forged_token_value_is_rejected(self, app, client):
        insert_user(app, 'admin', 'correct horse')
        client.get(BACKEND)
        with client.session_transaction(BACKEND) as sess:
            token = {sess['token_name']: 'x' * 128}

        response = client.post(BACKEND, data={'user': 'admin', 'password': 'correct horse', **token})
        assert 'err=csrf' in response.headers['Location']

    def test_error_message_is_shown(self, client):
        body = client.get(BACKEND + '?err=csrf').get_data(as_text=True)
        assert 'Invalid csrf token.' in body

    def test_manager_requires_login(self, client):
        response = client.get('/backend/manager/')
        assert response.status_code == 302
        assert response.headers['Location'].endswith('/backend/')


class TestManagerApi:
    """Tests for /backend/manager/api/<param>"""

    def test_api_requires_login(self, client):
        response = client.get('/backend/manager/api/getAllEntries')
        assert response.status_code == 401
        assert response.get_json() == 0

    def test_dev_bypass_opens_api(self, app, client, five_posts):
        app.config['ADMIN_API_DEV_BYPASS'] = True
        response = client.get('/backend/manager/api/getAllEntries')
        assert response.status_code == 200

    def test_dev_bypass_does_not_open_manager_page(self, app, client):
        app.config['ADMIN_API_DEV_BYPASS'] = True
        assert client.get('/backend/manager/').status_code == 302

    def test_get_all_entries_as_json(self, app, client, seed):
        seed([
            EntryTestData.entry(1, tags=['a']),
            EntryTestData.entry(2, published=False),
        ])
        login_session(client, app)
        entries = client.get('/backend/manager/api/getAllEntries').get_json()['entries']

        assert [e['entryCode'] for e in entries] == ['post-2', 'post-1']
        assert entries[0]['isPublished'] == 0
        assert entries[1]['tag'] == ['a']

    def test_get_all_entries_as_csv(self, app, client, seed):
        seed([EntryTestData.entry(1, tags=['a', 'b'])])
        login_session(client, app)
        response = client.get('/backend/manager/api/getAllEntries?format=csv')

        assert response.mimetype == 'text/csv'
        frame = pd.read_csv(io.StringIO(response.get_data(as_text=True)))
        assert list(frame['entryCode']) == ['post-1']
        assert frame['tag'][0] == 'a,b'

    def test_unknown_get_param_is_forbidden(self, app, client):
        login_session(client, app)
        response = client.get('/backend/manager/api/dropEverything')
        assert response.status_code == 403
        assert response.get_json() == 0

    def test_http_errors_on_api_paths_are_json(self, app, client):
        login_session(client, app)
        response = client.put('/backend/manager/api/getAllEntries')

        assert response.status_code == 405
        assert response.get_json()['success'] is False
        assert response.get_json()['error']

    def test_unknown_post_param_is_forbidden(self, app, client):
        login_session(client, app)
        assert client.post('/backend/manager/api/dropEverything').status_code == 403

    def test_upload_image(self, app, client, tmp_path):
        login_session(client, app)
        response = client.post(
            '/backend/manager/api/uploadImage',
            data={'image': (io.BytesIO(b'\x89PNG fake'), 'photo.png')},
            content_type='multipart/form-data'
        )
        payload = response.get_json()

        assert response.status_code == 200
        assert payload == {'filePath': '/files/images/photo.png', 'error': ''}
        assert (tmp_path / 'files' / 'images' / 'photo.png').read_bytes() == b'\x89PNG fake'
        assert client.get('/files/images/photo.png').status_code == 200

    def test_upload_rejects_bad_extension(self, app, client, tmp_path):
        login_session(client, app)
        response = client.post(
            '/backend/manager/api/uploadImage',
            data={'image': (io.BytesIO(b'#!/bin/sh'), 'run.sh')},
            content_type='multipart/form-data'
        )
        payload = response.get_json()

        assert response.status_code == 200
        assert payload['filePath'] == ''
        assert payload['error']
        assert not (tmp_path / 'files' / 'images' / 'run.sh').exists()

    def test_upload_without_file(self, app, client):
        login_session(client, app)
        payload = client.post('/backend/manager/api/uploadImage').get_json()
        assert payload == {'filePath': '', 'error': 'no image in request'}

    def test_refresh_tags_rebuilds_index(self, app, client, seed):
        seed([EntryTestData.entry(1, tags=['a'])])
        from tests.test_data_generators import insert_entries
        insert_entries(app, [EntryTestData.entry(2, tags=['b'])])
        login_session(client, app)

        response = client.post('/backend/manager/api/refreshTags')
        payload = response.get_json()

        assert response.status_code == 200
        assert payload['success'] is True
        assert payload['tags'] == 2
        assert [t.name for t in app.tag_service.tags] == ['a', 'b']

    def test_refresh_tags_reports_store_failure(self, app, client, seed):
        seed([EntryTestData.entry(1, tags=['a'])])
        login_session(client, app)
        failure = QueryResult.failed(StoreError('database is locked'))

        with patch('blog.services.tag_service.EntryRepository.scan_all', return_value=failure):
            response = client.post('/backend/manager/api/refreshTags')

        assert response.status_code == 503
        payload = response.get_json()
        assert payload['success'] is False
        assert 'database is locked' in payload['error']
        assert [t.name for t in app.tag_service.tags] == ['a']


class TestHealth:

    def test_health_reports_counts(self, client, seed):
        seed([
            EntryTestData.entry(1, tags=['a']),
            EntryTestData.entry(2, published=False),
        ])
        payload = json.loads(client.get('/health').get_data(as_text=True))

        assert payload['status'] == 'healthy'
        assert payload['published_entries'] == 1
        assert payload['tags'] == 1

    def test_health_reports_store_failure(self, client):
        with patch('blog.repositories.EntryRepository.count_published', return_value=None):
            response = client.get('/health')
        assert response.status_code == 503
        assert response.get_json()['status'] == 'unhealthy'
