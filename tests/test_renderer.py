"""
Tests for xstack.renderer
=========================

Tests for Jinja2 rendering of template files and output naming.

Test Organization
-----------------
- TestOutputName: Tests for suffix stripping and dotfiles
- TestRendering: Tests for variables, conditionals and helpers
- TestRenderErrors: Tests for malformed templates
- TestRenderTo: Tests for writing rendered files
"""

from pathlib import Path

import pytest

from xstack.errors import RenderError
from xstack.renderer import DEFAULT_TESTS, Renderer, output_name


@pytest.fixture
def templates(tmp_path: Path) -> Path:
    """Directory for ad-hoc templates."""
    root = tmp_path / "tpl"
    root.mkdir()
    return root


def write(root: Path, name: str, content: str) -> str:
    (root / name).write_text(content)
    return name


# =============================================================================
# Output Name Tests
# =============================================================================

class TestOutputName:
    """Tests for output_name."""

    @pytest.mark.parametrize(
        ("template", "expected"),
        [
            ("server.ts.j2", "server.ts"),
            ("user.model.js.j2", "user.model.js"),
            ("gitignore.j2", ".gitignore"),
            ("prettierrc.j2", ".prettierrc"),
            ("env.example.j2", ".env.example"),
            ("README.md", "README.md"),
            ("notes.j2.txt", "notes.j2.txt"),
        ],
    )
    def test_output_names(self, template: str, expected: str) -> None:
        """The marker suffix is stripped and dotfiles regain their dot."""
        assert output_name(template) == expected

    def test_only_trailing_suffix_removed(self) -> None:
        """A double suffix loses only the last marker."""
        assert output_name("weird.j2.j2") == "weird.j2"


# =============================================================================
# Rendering Tests
# =============================================================================

class TestRendering:
    """Tests for Renderer.render."""

    def test_interpolation(self, templates: Path, make_config) -> None:
        """Variables from the flags are substituted."""
        name = write(templates, "a.j2", "name={{ project_name }} db={{ database }}")
        renderer = Renderer(templates)

        assert renderer.render(name, make_config().flags) == "name=demo db=PostgreSQL"

    def test_boolean_conditionals(self, templates: Path, make_config) -> None:
        """Flag conditionals select blocks; block tags leave no blank lines."""
        name = write(
            templates,
            "a.j2",
            "start\n{% if use_jwt %}\njwt\n{% else %}\nno-jwt\n{% endif %}\nend\n",
        )
        renderer = Renderer(templates)

        assert renderer.render(name, make_config().flags) == "start\nno-jwt\nend\n"
        assert (
            renderer.render(name, make_config(other_tools=["JWT"]).flags)
            == "start\njwt\nend\n"
        )

    def test_equality_conditional(self, templates: Path, make_config) -> None:
        """Values can be compared with the eq test."""
        name = write(
            templates, "a.j2", '{% if database is eq("MongoDB") %}mongo{% else %}pg{% endif %}'
        )
        renderer = Renderer(templates)

        assert renderer.render(name, make_config(database="MongoDB").flags) == "mongo"
        assert renderer.render(name, make_config().flags) == "pg"

    def test_membership_conditional(self, templates: Path, make_config) -> None:
        """The containing test checks set-valued fields."""
        name = write(
            templates,
            "a.j2",
            '{% if other_tools is containing("Bcrypt") %}hash{% else %}plain{% endif %}',
        )
        renderer = Renderer(templates)

        assert renderer.render(name, make_config(other_tools=["Bcrypt"]).flags) == "hash"
        assert renderer.render(name, make_config(other_tools=["JWT"]).flags) == "plain"

    def test_case_filters(self, templates: Path, make_config) -> None:
        """Default filters are available."""
        name = write(templates, "a.j2", "{{ project_name | snake_case }} {{ project_name | pascal_case }}")
        renderer = Renderer(templates)

        assert renderer.render(name, make_config(name="my-api").flags) == "my_api MyApi"

    def test_rendering_is_idempotent(self, templates: Path, make_config) -> None:
        """Rendering twice gives identical output."""
        name = write(templates, "a.j2", "{% for t in other_tools %}{{ t }},{% endfor %}")
        flags = make_config(other_tools=["Multer", "JWT"]).flags
        renderer = Renderer(templates)

        first = renderer.render(name, flags)
        second = renderer.render(name, flags)

        assert first == second == "Multer,JWT,"

    def test_helpers_are_per_renderer(self, templates: Path, make_config) -> None:
        """Helpers given to one renderer never leak into another."""
        name = write(templates, "a.j2", "{% if project_name is shouting %}!{% endif %}ok")
        custom = Renderer(
            templates, tests={**DEFAULT_TESTS, "shouting": lambda v: v.isupper()}
        )
        plain = Renderer(templates)

        assert custom.render(name, make_config().flags) == "ok"
        with pytest.raises(RenderError):
            plain.render(name, make_config().flags)

    def test_trailing_newline_kept(self, templates: Path, make_config) -> None:
        """Files keep their final newline."""
        name = write(templates, "a.j2", "line\n")
        assert Renderer(templates).render(name, make_config().flags) == "line\n"


# =============================================================================
# Render Error Tests
# =============================================================================

class TestRenderErrors:
    """Tests for malformed templates."""

    def test_syntax_error(self, templates: Path, make_config) -> None:
        """Broken block syntax raises RenderError naming the template."""
        name = write(templates, "broken.ts.j2", "{% if use_jwt %}never closed")

        with pytest.raises(RenderError, match="broken.ts.j2"):
            Renderer(templates).render(name, make_config().flags)

    def test_undefined_variable(self, templates: Path, make_config) -> None:
        """Unknown variables are errors, not empty strings."""
        name = write(templates, "a.j2", "{{ not_a_flag }}")

        with pytest.raises(RenderError, match="not_a_flag"):
            Renderer(templates).render(name, make_config().flags)

    def test_missing_template(self, templates: Path, make_config) -> None:
        """A missing template raises RenderError."""
        with pytest.raises(RenderError):
            Renderer(templates).render("nope.j2", make_config().flags)

    @pytest.mark.parametrize(
        "content",
        [b"{{ 1 + 'a' }}", b"{{ project_name | int // 0 }}", b"caf\xe9 \xff\n"],
        ids=["type-error", "zero-division", "not-utf8"],
    )
    def test_runtime_failures_become_render_error(
        self, templates: Path, make_config, content: bytes
    ) -> None:
        """Failures while loading or evaluating a template are RenderError too."""
        (templates / "bad.ts.j2").write_bytes(content)

        with pytest.raises(RenderError, match="bad.ts.j2"):
            Renderer(templates).render("bad.ts.j2", make_config().flags)

    def test_failing_helper_becomes_render_error(self, templates: Path, make_config) -> None:
        """A custom filter that raises is reported against the template."""
        def explode(value):
            raise ValueError(f"cannot handle {value}")

        name = write(templates, "a.j2", "{{ project_name | explode }}")
        renderer = Renderer(templates, filters={"explode": explode})

        with pytest.raises(RenderError, match="cannot handle demo"):
            renderer.render(name, make_config().flags)

    def test_render_error_requires_cleanup(self) -> None:
        """Render failures are fatal and clean up."""
        assert RenderError("x", "y").cleanup_required is True


# =============================================================================
# render_to Tests
# =============================================================================

class TestRenderTo:
    """Tests for Renderer.render_to."""

    def test_writes_stripped_name(self, templates: Path, tmp_path: Path, make_config) -> None:
        """The output file drops the marker suffix."""
        (templates / "src").mkdir()
        write(templates / "src", "server.js.j2", "// {{ project_name }}\n")
        out = tmp_path / "out"
        out.mkdir()

        written = Renderer(templates).render_to("src/server.js.j2", out, make_config().flags)

        assert written == out / "server.js"
        assert written.read_text() == "// demo\n"

    def test_writes_dotfile(self, templates: Path, tmp_path: Path, make_config) -> None:
        """Dotfile templates are written with a leading dot."""
        write(templates, "gitignore.j2", "node_modules/\n")
        out = tmp_path / "out"
        out.mkdir()

        written = Renderer(templates).render_to("gitignore.j2", out, make_config().flags)

        assert written.name == ".gitignore"
