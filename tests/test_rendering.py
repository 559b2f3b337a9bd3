"""
Tests for markdown rendering and link construction.
"""

from markupsafe import Markup

from blog.utils.links import LinkBuilder, normalize_root_path
from blog.utils.rendering import dt_format, to_markdown


class TestToMarkdown:

    def test_full_body_keeps_everything(self):
        html = to_markdown('# Title\n\nintro\n<!--more-->\nrest')

        assert isinstance(html, Markup)
        assert '<h1>Title</h1>' in html
        assert 'rest' in html

    def test_list_mode_cuts_at_marker_line(self):
        html = to_markdown('intro\n\nsecond <!--more--> same line\nrest', True, '/post-1', 'Post 1')

        assert '<p>intro</p>' in html
        assert 'same line' not in html
        assert 'rest' not in html
        assert html.endswith('<a href="/post-1">Read more<span class="srt">Post 1</span></a>')

    def test_list_mode_without_marker_has_no_link(self):
        html = to_markdown('just a short post', True, '/post-1', 'Post 1')
        assert 'Read more' not in html
        assert '<p>just a short post</p>' in html

    def test_more_link_escapes_title(self):
        html = to_markdown('a\n<!--more-->', True, '/post-1', '<script>x</script>')
        assert '<script>' not in html
        assert '&lt;script&gt;' in html

    def test_empty_content(self):
        assert to_markdown(None) == ''
        assert to_markdown('', True, '/x', 'x') == ''


class TestDtFormat:

    def test_keeps_date_part(self):
        assert dt_format('2024-01-05 09:00:00') == '2024-01-05'

    def test_empty_values(self):
        assert dt_format(None) == ''
        assert dt_format('') == ''


class TestLinkBuilder:

    def test_root_path_is_normalized(self):
        assert normalize_root_path('') == '/'
        assert normalize_root_path('blog') == '/blog/'
        assert normalize_root_path('/blog/') == '/blog/'

    def test_page_zero_is_the_root(self):
        links = LinkBuilder('/blog')
        assert links.page_uri(0) == '/blog/'
        assert links.page_uri(3) == '/blog/page/3'

    def test_entry_and_tag_uris_are_quoted(self):
        links = LinkBuilder('/')
        assert links.entry_uri('hello-world') == '/hello-world'
        assert links.tag_uri('a/b') == '/tag/a%2Fb'
