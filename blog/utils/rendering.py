"""
Markdown rendering helpers exposed to templates.
"""

import markdown
from markupsafe import Markup

MORE_LINK_MARKER = '<!--more-->'


def to_markdown(text: str, is_list: bool = False, uri: str = '', title: str = '') -> Markup:
    """
    Render entry markdown to HTML.

    In list mode the body is cut at the first line containing <!--more-->
    and a "Read more" link to the entry replaces the rest.

    Args:
        text: markdown source
        is_list: render the listing excerpt instead of the full body
        uri: entry URI for the "Read more" link
        title: entry title, repeated for screen readers

    Returns:
        Markup safe to insert unescaped
    """
    if not is_list:
        return Markup(markdown.markdown(text or ''))

    kept = []
    more_link = ''
    for line in (text or '').splitlines():
        if MORE_LINK_MARKER in line:
            more_link = Markup('<a href="{}">Read more<span class="srt">{}</span></a>').format(uri, title)
            break
        kept.append(line)

    return Markup(markdown.markdown('\n'.join(kept))) + more_link


def dt_format(value) -> str:
    """Keep the YYYY-MM-DD part of a date/datetime string."""
    if not value:
        return ''
    return str(value)[:10]
