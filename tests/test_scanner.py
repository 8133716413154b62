"""
Tests for project loading and translator-call scanning.

Tests cover:
- Project discovery (excluded folders, catalog folder, broken files)
- Translator function resolution and the name-only fallback
- Canonical keys and parameters of found calls
- Static parameter types
- Import aliases and module attribute calls
- Notes and explicit keys from comments
- Call sites that fail are skipped without stopping the scan
"""

import sys
from pathlib import Path

import pytest

from conftest import I18N_MODULE
from tagstrings.errors import ConfigurationError
from tagstrings.models import UNKNOWN, NamedType, ScanContext, TemplateRecord
from tagstrings.scan.scanner import TemplateScanner, find_translator, resolve_target, scan_project
from tagstrings.source.project import SourceProject, module_name


def scan(root, **kwargs) -> ScanContext:
    return scan_project(SourceProject.load(root, **kwargs))


def scan_views(make_project, views: str) -> ScanContext:
    root = make_project({
        "app/__init__.py": "",
        "app/i18n.py": I18N_MODULE,
        "app/views.py": views,
    })
    return scan(root)


class TestSourceProject:
    """Discovery and parsing of project files."""

    def test_missing_root(self, tmp_path):
        with pytest.raises(ConfigurationError, match="should be a project folder"):
            SourceProject.load(tmp_path / "nope")

    def test_excluded_and_output_folders(self, make_project):
        root = make_project({
            "app.py": "x = 1\n",
            "venv/lib.py": "x = 1\n",
            "i18n/de.py": "translations = {}\n",
        })
        project = SourceProject.load(root, output_dir=root / "i18n")
        assert [f.relpath for f in project.files] == ["app.py"]
        assert [f.relpath for f in project.catalog_files] == ["i18n/de.py"]

    def test_unparsable_file_is_skipped(self, make_project):
        root = make_project({"good.py": "x = 1\n", "bad.py": "def (:\n"})
        project = SourceProject.load(root)
        assert [f.relpath for f in project.files] == ["good.py"]
        assert [p.name for p in project.skipped] == ["bad.py"]

    @pytest.mark.parametrize("relative, expected", [
        ("app/views.py", ("app.views", False)),
        ("app/__init__.py", ("app", True)),
        ("src/app/views.py", ("app.views", False)),
        ("main.py", ("main", False)),
    ])
    def test_module_name(self, relative, expected):
        assert module_name(Path(relative)) == expected

    def test_resolve_follows_reexports(self, make_project):
        root = make_project({
            "app/__init__.py": "from app.i18n import i\n",
            "app/i18n.py": I18N_MODULE,
        })
        project = SourceProject.load(root)
        assert project.resolve("app.i") == "app.i18n.i"


class TestTranslatorResolution:
    """Finding the designated translator function."""

    def test_documented_function(self, sample_project):
        target = find_translator(SourceProject.load(sample_project))
        assert target.name == "i"
        assert target.module == "app.i18n"
        assert target.return_type == NamedType("str")
        assert not target.is_fallback

    def test_fallback_warns(self, make_project):
        root = make_project({"main.py": 'print(i("Hello"))\n'})
        target, warning = resolve_target(SourceProject.load(root))
        assert target.is_fallback
        assert "Unable to find the translator function" in warning

    def test_fallback_matches_any_i(self, make_project):
        root = make_project({
            "main.py": 'import tr\nprint(i("Hello"))\nprint(tr.i("Bye"))\n',
        })
        ctx = scan(root)
        assert ctx.table.keys() == ["Hello", "Bye"]
        assert ctx.warnings

    def test_other_function_named_i_is_ignored(self, make_project):
        root = make_project({
            "app/__init__.py": "",
            "app/i18n.py": I18N_MODULE,
            "app/other.py": 'def i(text):\n    return text\n\n\ni("Ignored")\n',
            "app/views.py": 'from app.i18n import i\n\ni("Kept")\n',
        })
        ctx = scan(root)
        assert ctx.table.keys() == ["Kept"]
        assert not ctx.warnings

    def test_translator_in_catalog_folder(self, make_project):
        root = make_project({
            "i18n/__init__.py": I18N_MODULE,
            "i18n/de.py": 'translations = {"Old": lambda: "Alt"}\n',
            "app/__init__.py": "",
            "app/other.py": 'def i(text):\n    return text\n\n\ni("Not a translator call")\n',
            "app/views.py": 'from i18n import i\n\ni("Kept")\n',
        })
        project = SourceProject.load(root, output_dir=root / "i18n")
        assert find_translator(project).module == "i18n"

        ctx = scan_project(project)
        assert ctx.table.keys() == ["Kept"]
        assert not ctx.warnings
        assert ctx.files_scanned == 3


class TestTemplates:
    """Keys and parameters of translator calls."""

    def test_sample_project(self, sample_project):
        ctx = scan(sample_project)
        assert ctx.table.frozen
        assert ctx.table.keys() == ["Hello", "Total: ${0}"]

        hello = ctx.table.get("Hello")
        assert hello.literal == "Hello"
        assert hello.params == []

        total = ctx.table.get("Total: ${0}")
        assert total.literal == "Total: ${count}"
        assert [p.signature() for p in total.params] == ["count: int"]
        assert total.locations == ["app/views.py:9"]

    def test_renaming_a_variable_keeps_the_key(self, make_project):
        ctx = scan_views(make_project, '''
            from app.i18n import i

            def a(count: int):
                return i(f"Total: {count}")

            def b(n: int):
                return i(f"Total: {n}")
        ''')
        assert ctx.table.keys() == ["Total: ${0}"]
        assert len(ctx.table.get("Total: ${0}").locations) == 2

    def test_trailing_whitespace_gives_distinct_keys(self, make_project):
        ctx = scan_views(make_project, '''
            from app.i18n import i

            i("Hello")
            i("Hello ")
        ''')
        assert ctx.table.keys() == ["Hello", "Hello "]

    def test_expression_slot_gets_positional_name(self, make_project):
        ctx = scan_views(make_project, '''
            from app.i18n import i

            def show(items: list):
                return i(f"{len(items)} items")
        ''')
        record = ctx.table.get("${0} items")
        assert record.literal == "${p0} items"
        assert record.params[0].type == NamedType("int")

    def test_unresolvable_expression_uses_translator_return_type(self, make_project):
        ctx = scan_views(make_project, '''
            from app.i18n import i

            def show(user):
                return i(f"Hi {user.name}")
        ''')
        assert ctx.table.get("Hi ${0}").params[0].type == NamedType("str")

    def test_unknown_identifier_type(self, make_project):
        ctx = scan_views(make_project, '''
            from app.i18n import i

            def show(name):
                return i(f"Hi {name}")
        ''')
        param = ctx.table.get("Hi ${0}").params[0]
        assert param.type is UNKNOWN
        assert param.signature() == "name: Any"

    def test_repeated_identifier_gets_unique_names(self, make_project):
        ctx = scan_views(make_project, '''
            from app.i18n import i

            def show(a: int):
                return i(f"{a} and {a}")
        ''')
        assert ctx.table.get("${0} and ${1}").param_names == ["a", "p1"]

    def test_module_level_types(self, make_project):
        ctx = scan_views(make_project, '''
            from app.i18n import i

            limit = 10
            ratio: float = 0.5
            i(f"Limit {limit} at {ratio}")
        ''')
        params = ctx.table.get("Limit ${0} at ${1}").params
        assert [p.signature() for p in params] == ["limit: int", "ratio: float"]

    def test_non_template_arguments_are_ignored(self, make_project):
        ctx = scan_views(make_project, '''
            from app.i18n import i

            def show(name):
                i(name)
                i("a", "b")
                i()
        ''')
        assert len(ctx.table) == 0

    def test_aliases_and_module_attributes(self, make_project):
        ctx = scan_views(make_project, '''
            from app import i18n
            from app.i18n import i as tr
            import app.i18n as messages

            tr("Aliased")
            i18n.i("Via module")
            messages.i("Via import")
        ''')
        assert ctx.table.keys() == ["Aliased", "Via module", "Via import"]

    def test_relative_import(self, make_project):
        ctx = scan_views(make_project, '''
            from .i18n import i

            i("Relative")
        ''')
        assert ctx.table.keys() == ["Relative"]

    def test_fstring_without_slots_is_literal(self, make_project):
        ctx = scan_views(make_project, '''
            from app.i18n import i

            i(f"Plain")
        ''')
        assert ctx.table.get("Plain").params == []

    @pytest.mark.skipif(sys.version_info < (3, 14), reason="template strings need Python 3.14")
    def test_template_string(self, make_project):
        ctx = scan_views(make_project, '''
            from app.i18n import i

            def show(count: int):
                return i(t"Total: {count}")
        ''')
        assert ctx.table.get("Total: ${0}").literal == "Total: ${count}"


class TestNotes:
    """Comments become notes and explicit keys."""

    def test_trailing_comment(self, sample_project):
        record = scan(sample_project).table.get("Total: ${0}")
        assert record.notes == {TemplateRecord.FULL_NOTE: "shown under the cart"}

    def test_explicit_key(self, make_project):
        ctx = scan_views(make_project, '''
            from app.i18n import i

            i("Welcome back")  # @welcome shown on login
        ''')
        record = ctx.table.get("welcome")
        assert record.canonical_key == "Welcome back"
        assert record.notes[TemplateRecord.FULL_NOTE] == "shown on login"

    def test_comment_inside_call(self, make_project):
        ctx = scan_views(make_project, '''
            from app.i18n import i

            i(  # page title
                "Dashboard"
            )
        ''')
        assert ctx.table.get("Dashboard").notes[TemplateRecord.FULL_NOTE] == "page title"

    @pytest.mark.skipif(sys.version_info < (3, 12), reason="comments inside f-strings need Python 3.12")
    def test_parameter_comment(self, make_project):
        ctx = scan_views(make_project, '''
            from app.i18n import i

            def show(count: int):
                return i(f"""Total: {
                    count  # number of items
                }""")
        ''')
        record = ctx.table.get("Total: ${0}")
        assert record.notes == {"count": "number of items"}

    def test_first_note_wins_for_repeated_strings(self, make_project):
        ctx = scan_views(make_project, '''
            from app.i18n import i

            i("Save")  # button
            i("Save")  # menu entry
        ''')
        assert ctx.table.get("Save").notes[TemplateRecord.FULL_NOTE] == "button"

    def test_trailing_comment_goes_to_last_call_on_the_line(self, make_project):
        ctx = scan_views(make_project, '''
            from app.i18n import i

            print(i("Yes"), i("No"))  # answer buttons
        ''')
        assert ctx.table.get("Yes").notes == {}
        assert ctx.table.get("No").notes[TemplateRecord.FULL_NOTE] == "answer buttons"


class TestFailures:
    """A call site that cannot be handled is skipped, not fatal."""

    def test_failing_call_site_is_skipped(self, sample_project, monkeypatch):
        def broken(self, call, template):
            raise RuntimeError("cannot build record")

        monkeypatch.setattr(TemplateScanner, "_slot_record", broken)
        ctx = scan(sample_project)
        assert ctx.table.keys() == ["Hello"]
        assert ctx.nodes_skipped == 1
        assert ctx.calls_found == 1
