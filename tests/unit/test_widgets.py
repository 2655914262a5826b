import datetime
from collections import deque

import pytest

from safeplate.error.exceptions import InvalidOptionError, ShapeMismatchError
from safeplate.variables import EscapeMode, html_attributes
from safeplate.variables.widgets import attribute_name

def test_html_table(wrap):
    """Test a table of mapping rows."""
    people = wrap([{"name": "<a>", "age": 1}, {"name": "b", "age": 2}])
    assert people.html_table() == (
        "<table>\n"
        "<tr><th>name</th><th>age</th></tr>\n"
        "<tr><td>&lt;a&gt;</td><td>1</td></tr>\n"
        "<tr><td>b</td><td>2</td></tr>\n"
        "\n</table>\n"
    )

def test_html_table_sequence_rows(wrap):
    """Test a table of sequence rows uses column indexes as header."""
    assert wrap([["x", "y"]]).html_table() == "<table>\n<tr><th>0</th><th>1</th></tr>\n<tr><td>x</td><td>y</td></tr>\n\n</table>\n"

def test_html_table_collection_rows(wrap):
    """Test tables of deques and dict views."""
    assert wrap(deque([{"a": 1}])).html_table() == "<table>\n<tr><th>a</th></tr>\n<tr><td>1</td></tr>\n\n</table>\n"
    assert "<td>x</td><td>&lt;1&gt;</td>" in wrap({"x": "<1>"}.items()).html_table()
    with pytest.raises(ShapeMismatchError):
        wrap(range(2)).html_table()

def test_html_table_shape(wrap):
    """Test tables of data that is not two-dimensional."""
    assert wrap([]).html_table() == ""
    with pytest.raises(ShapeMismatchError):
        wrap([1, 2]).html_table()
    with pytest.raises(ShapeMismatchError):
        wrap("abc").html_table()

def test_html_table_escapes_in_raw_mode(wrap):
    """Test that builders escape whatever the variable's mode."""
    assert "&lt;a&gt;" in wrap([{"name": "<a>"}], EscapeMode.RAW).html_table()

def test_html_list(wrap):
    """Test every list type."""
    items = wrap(["a", "<b>"])
    assert items.html_list() == "<ol>\n<li>a</li>\n<li>&lt;b&gt;</li>\n</ol>\n"
    assert items.html_list("ul") == "<ul>\n<li>a</li>\n<li>&lt;b&gt;</li>\n</ul>\n"
    assert items.html_list("") == "<li>a</li>\n<li>&lt;b&gt;</li>\n"
    assert items.html_list("table") == (
        "<table>\n<tr><th>value</th></tr>\n<tr><td>a</td></tr>\n<tr><td>&lt;b&gt;</td></tr>\n</table>\n"
    )
    assert wrap({"x": "1"}).html_list("ul") == "<ul>\n<li>1</li>\n</ul>\n"

def test_html_list_options(wrap):
    """Test list type validation and shape checks."""
    with pytest.raises(InvalidOptionError):
        wrap([]).html_list("dl")
    assert wrap([]).html_list() == ""
    with pytest.raises(ShapeMismatchError):
        wrap("abc").html_list()

def test_dump_and_implode(wrap):
    """Test debug output and joining."""
    assert wrap({"a": "<"}).dump() == "<pre>{&#34;a&#34;: &#34;&lt;&#34;}</pre>"
    assert wrap(["<a>", "b"]).implode() == "&lt;a&gt;, b"
    assert wrap(["<a>", "b"], EscapeMode.RAW).implode("|") == "<a>|b"

def test_input_hidden(wrap):
    """Test hidden inputs."""
    token = wrap("<v>", name="token")
    assert token.input_hidden() == '<input type="hidden" name="token" value="&lt;v&gt;">'
    assert token.input_hidden("csrf") == '<input type="hidden" name="csrf" value="&lt;v&gt;">'

def test_input(wrap):
    """Test text inputs and their defaults."""
    user = wrap("ann", name="user")
    assert user.input() == '<input name="user" value="ann" class="form-control">'
    assert user.input(label="Name") == (
        '<label for="user">Name</label>'
        '<input name="user" value="ann" class="form-control" placeholder="Name" id="user">'
    )
    assert user.input(data_toggle="x", class_="big") == '<input data-toggle="x" class="big" name="user" value="ann">'
    assert user.input(type="email", required=True) == (
        '<input type="email" required name="user" value="ann" class="form-control">'
    )

def test_date_input(wrap):
    """Test date inputs."""
    born = wrap(datetime.date(2024, 5, 17), name="born")
    assert born.input(type="date") == '<input type="date" name="born" value="2024-05-17" class="form-control">'
    assert wrap("", name="born").input(type="date") == (
        '<input type="date" name="born" value="0000-00-00" class="form-control">'
    )

def test_checkbox(wrap):
    """Test checkboxes."""
    assert wrap(True, name="agree").box() == '<label><input type="checkbox" name="agree" checked> agree</label>'
    assert wrap(0, name="agree").box() == '<label><input type="checkbox" name="agree"> agree</label>'
    assert wrap(True, name="agree").box(label="") == '<input type="checkbox" name="agree" checked>'

def test_radio(wrap):
    """Test radio buttons compare form values loosely."""
    choice = wrap("1", name="choice")
    assert choice.box(type="radio", value=1, label="One") == (
        '<label><input type="radio" value="1" name="choice" checked> One</label>'
    )
    assert choice.box(type="radio", value=2, label="Two") == (
        '<label><input type="radio" value="2" name="choice"> Two</label>'
    )

def test_textarea(wrap):
    """Test textareas."""
    assert wrap("<t>", name="bio").textarea() == '<textarea name="bio" class="form-control">&lt;t&gt;</textarea>'

def test_select(wrap):
    """Test selects over mappings and sequences."""
    assert wrap(2, name="size").select({1: "S", 2: "M"}) == (
        '<select name="size"><option value="1">S</option><option value="2" selected>M</option></select>'
    )
    assert wrap("b", name="x").select(wrap(["a", "<b>"])) == (
        '<select name="x"><option value="a">a</option><option value="&lt;b&gt;">&lt;b&gt;</option></select>'
    )
    assert wrap("b", name="x").select(["a", "b"], value="a") == (
        '<select name="x"><option value="a" selected>a</option><option value="b">b</option></select>'
    )

def test_attribute_names():
    """Test keyword to attribute name conversion."""
    assert attribute_name("class_") == "class"
    assert attribute_name("data_toggle") == "data-toggle"
    assert attribute_name("ariaLabel") == "aria-label"
    assert attribute_name("id") == "id"

def test_html_attributes():
    """Test boolean and escaped attributes."""
    assert html_attributes({"disabled": True, "hidden": False, "title": None, "alt": "<x>"}) == ' disabled alt="&lt;x&gt;"'
