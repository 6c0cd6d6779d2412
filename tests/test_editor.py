import pytest
from pydantic import ValidationError

from blog.editor import RichTextDocument, TextRange


def _range(start, end):
    return TextRange(start=start, end=end)


def test_bold_wraps_selection():
    document = RichTextDocument("Hello world")
    document.execute('bold', _range(0, 5))
    assert document.html == "<strong>Hello</strong> world"


def test_bold_twice_removes_formatting():
    document = RichTextDocument("<strong>Hello</strong> world")
    document.execute('bold', _range(0, 5))
    assert document.html == "Hello world"
    assert document.text == "Hello world"


def test_partial_unbold_keeps_the_rest_bold():
    document = RichTextDocument("<strong>Hello</strong>")
    document.apply_inline_style(_range(0, 2), 'strong')
    assert document.html == "He<strong>llo</strong>"


def test_collapsed_selection_is_a_no_op():
    document = RichTextDocument("Hello")
    assert document.execute('italic', _range(2, 2)) == _range(2, 2)
    assert document.html == "Hello"


def test_heading_on_empty_selection_inserts_placeholder():
    document = RichTextDocument("")
    selection = document.execute('formatBlock', _range(0, 0), "<h2>")
    assert document.html == "<h2>Heading</h2>"
    assert selection == _range(0, len("Heading"))


def test_list_replaces_selected_text():
    document = RichTextDocument("<p>Buy now</p>")
    selection = document.execute('insertUnorderedList', _range(4, 7))
    assert document.html == "<p>Buy <ul><li>now</li></ul></p>"
    assert selection == _range(4, 7)


def test_link_wraps_selected_text():
    document = RichTextDocument("Visit us")
    document.execute('createLink', _range(6, 8), "https://example.com")
    assert document.html == 'Visit <a href="https://example.com">us</a>'


def test_link_without_selection_uses_url_as_text():
    document = RichTextDocument("Go ")
    selection = document.insert_link(_range(3, 3), "https://example.com")
    assert document.html == 'Go <a href="https://example.com">https://example.com</a>'
    assert selection == _range(3, 3 + len("https://example.com"))


def test_color_wraps_in_span():
    document = RichTextDocument("Hi there")
    document.execute('foreColor', _range(0, 2), "#ff0000")
    assert document.html == '<span style="color: #ff0000">Hi</span> there'


def test_remove_format_strips_inline_tags():
    document = RichTextDocument("<em><strong>Hi</strong></em> there")
    document.execute('removeFormat', _range(0, 2))
    assert document.html == "Hi there"


@pytest.mark.parametrize("command, value", [
    ('explode', None),
    ('foreColor', "red; background: url(x)"),
    ('createLink', ""),
    ('formatBlock', "<table>"),
])
def test_invalid_commands_raise(command, value):
    document = RichTextDocument("Hello")
    with pytest.raises(ValueError):
        document.execute(command, _range(0, 5), value)


def test_selection_outside_document_is_rejected():
    with pytest.raises(ValueError):
        RichTextDocument("Hi").execute('createLink', _range(0, 10), "https://example.com")
    with pytest.raises(ValidationError):
        TextRange(start=3, end=1)
