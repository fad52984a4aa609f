from homepage.content.sanitizer import excerpt, sanitize_html, strip_tags


def test_keeps_allowed_markup():
    html = '<p>Some <em>text</em> with <a href="https://example.com" title="x">a link</a></p>'
    assert sanitize_html(html) == html


def test_drops_script_with_content():
    assert sanitize_html("<p>hi</p><script>alert(1)</script>") == "<p>hi</p>"


def test_unwraps_unknown_tags():
    assert sanitize_html("<p><font color='red'>red</font></p>") == "<p>red</p>"


def test_strips_event_handlers_and_unsafe_urls():
    html = sanitize_html(
        '<p onclick="steal()">x</p>'
        '<a href="javascript:alert(1)">bad</a>'
        '<a href="java\tscript:alert(1)">sneaky</a>'
        '<img src="/img.png" onerror="steal()" alt="pic">'
    )

    assert "onclick" not in html
    assert "javascript" not in html
    assert "script:" not in html
    assert "onerror" not in html
    assert '<img alt="pic" src="/img.png"/>' in html or '<img src="/img.png" alt="pic"/>' in html


def test_removes_comments():
    assert sanitize_html("<p>a<!-- hidden -->b</p>") == "<p>ab</p>"


def test_keeps_code_language_class():
    html = '<pre><code class="language-python">print(1)</code></pre>'
    assert sanitize_html(html) == html


def test_strip_tags_collapses_whitespace():
    assert strip_tags("<p>Hello\n  <b>world</b></p>") == "Hello world"


def test_excerpt():
    assert excerpt("<p>short</p>", 100) == "short"
    assert excerpt("<p>abcdefghij</p>", 4) == "abcd..."
