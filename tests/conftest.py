"""Pytest configuration and fixtures."""
import logging
import textwrap

import pytest
from jinja2 import DictLoader

from safeplate.config import EngineConfiguration
from safeplate.engine import Engine
from safeplate.templates.resolver import TemplateResolver
from safeplate.variables import EscapedValue, EscapeMode

TEMPLATES = {
    # escaping
    "hello.py": 'echo("<p>", hobbys, "</p>")',
    "hello_raw.py": 'echo("<p>", hobbys.raw, "</p>")',
    "note.txt.py": "echo(hobbys)",
    "both.py": 'echo("html:", hobbys)',
    "both.txt.py": 'echo("raw:", hobbys)',
    "falsy.py": 'echo("yes" if count else "no", "/", "yes" if template.check(count) else "no")',
    "printing.py": 'print("hi", name)',
    "functions.py": textwrap.dedent("""\
        def shout(value):
            return value.upper()

        class Greeting:
            prefix = "Hello"

        echo(Greeting.prefix, " ", shout(name))
    """),
    "site.py": "echo(site)",
    "date.py": 'echo(when.strftime("%Y-%m-%d"))',
    "rows.py": "echo(people.html_table())",

    # extension chains
    "a.py": 'template.extends("b")\necho("A")',
    "b.py": 'template.extends("c")\necho("<b>", _contents.raw, "</b>")',
    "c.py": 'echo("<c>", _contents.raw, "</c>")',
    "child.py": 'template.extends("parent", {"x": 1})\necho("child body")',
    "parent.py": 'echo(x, ":", _contents)',
    "wrap.py": 'echo("[", _contents, "]")',
    "twice.py": 'template.extends("c")\ntemplate.extends("wrap")\necho("x")',
    "hijack.py": 'template.extends("wrap", {"_contents": "hijacked"})\necho("real")',
    "escaped_child.py": 'template.extends("wrap")\necho("<i>")',
    "self_extend.py": 'template.extends("self_extend")',

    # includes
    "page.py": textwrap.dedent("""\
        template.include("partial", {"label": "inner"})
        echo("|", "label" in globals())
    """),
    "partial.py": "echo(label)",
    "caller.py": 'echo("<"); template.include("shows_user"); echo(">")',
    "shows_user.py": "echo(user)",
    "loop.py": 'template.include("loop")',
    "broken.py": 'echo("partial output")\nraise ValueError("boom")',
    "outer.py": textwrap.dedent("""\
        echo("before|")
        try:
            template.include("broken")
        except ValueError:
            echo("recovered|")
        echo("after")
    """),

    # return values
    "returns.py": 'template.return_value = {"status": 200}\necho("ok")',
    "returns_extended.py": 'template.extends("wrap")\ntemplate.return_value = 7\necho("y")',
}

@pytest.fixture
def templates():
    """Template sources keyed by file name."""
    return dict(TEMPLATES)

@pytest.fixture
def resolver(templates):
    """Resolver over in-memory templates."""
    return TemplateResolver(DictLoader(templates))

@pytest.fixture
def engine(resolver, tmp_path):
    """Engine over in-memory templates."""
    return Engine(resolver=resolver, config={"template_dirs": [str(tmp_path)]})

@pytest.fixture
def template_dir(tmp_path):
    """Directory with a layout, a page and a plaintext template."""
    root = tmp_path / "templates"
    (root / "mail").mkdir(parents=True)
    (root / "layout.py").write_text('echo("<main>", _contents.raw, "</main>")', encoding="utf-8")
    (root / "index.py").write_text('template.extends("layout")\necho("<h1>", title, "</h1>")', encoding="utf-8")
    (root / "mail" / "welcome.txt.py").write_text('echo("Dear ", name, ",")', encoding="utf-8")
    return root

@pytest.fixture
def dir_engine(template_dir):
    """Engine over a template directory."""
    return Engine(template_dir)

@pytest.fixture
def config(tmp_path):
    """Create a test configuration."""
    return EngineConfiguration(template_dirs=[str(tmp_path)], max_depth=8, log_level="DEBUG")

@pytest.fixture
def wrap():
    """Wrap a value in HTML mode, or in the given mode."""
    def _wrap(value, mode=EscapeMode.HTML, name="value", engine=None):
        return EscapedValue.create(name, value, mode, engine)
    return _wrap

@pytest.fixture
def restore_logging():
    """Restore root logging after a test that configures it."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)
