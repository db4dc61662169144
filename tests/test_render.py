"""
Tests for repometa/render.py rendering functions.

These tests verify that render functions handle empty data and show
the values that matter in each table.
"""
import pytest

from repometa import render


class TestRenderTable:
    """Tests for render_table function."""

    def test_empty_rows_shows_message(self, capsys):
        """Empty rows should show 'No data' message."""
        render.render_table(["Col1", "Col2"], [])
        captured = capsys.readouterr()
        assert "No data to display" in captured.out

    def test_none_values_render_blank(self, capsys):
        render.render_table(["Name", "Value"], [["test", None]])
        captured = capsys.readouterr()
        assert "test" in captured.out
        assert "None" not in captured.out


class TestRenderLocation:

    def test_bare_location(self, capsys):
        render.render_location_table({
            'git_directory': '/r.git',
            'common_directory': '/r.git',
            'working_directory': None,
        })
        captured = capsys.readouterr()
        assert "/r.git" in captured.out
        assert "(none)" in captured.out


class TestRenderSourceRoots:

    def test_roots_and_warnings(self, capsys):
        roots = [
            {'path': '/a/', 'revision_id': 'abcdef0123456789' * 2 + 'abcdef01', 'repository_url': None},
            {'path': '/a/x/', 'revision_id': '1234567890ab' + '0' * 28,
             'repository_url': 'https://e.com/x', 'nested_root': 'x/'},
        ]
        warnings = [{'kind': 'SubmoduleWithoutCommit', 'message': 'no commit', 'subject': 'y'}]
        render.render_source_roots_table(roots, warnings)
        captured = capsys.readouterr()
        assert "abcdef012345" in captured.out
        assert "1234567890ab" in captured.out
        assert "unknown" in captured.out
        assert "SubmoduleWithoutCommit" in captured.out
        assert "[y]" in captured.out

    def test_no_roots(self, capsys):
        render.render_source_roots_table([], [])
        assert "No source roots found" in capsys.readouterr().out


class TestRenderSubmodules:

    def test_submodule_without_commit(self, capsys):
        render.render_submodules_table([
            {'name': 'lib', 'path': 'lib', 'url': 'u', 'head_commit_sha': None},
        ])
        captured = capsys.readouterr()
        assert "lib" in captured.out
        assert "no commit" in captured.out

    @pytest.mark.parametrize("func, message", [
        (render.render_submodules_table, "No submodules found"),
        (render.render_classification_table, "No files given"),
    ])
    def test_empty(self, capsys, func, message):
        func([])
        assert message in capsys.readouterr().out


class TestRenderClassification:

    def test_outside_file(self, capsys):
        render.render_classification_table([
            {'path': '/a/f.c', 'repository': '/a'},
            {'path': '/b/g.c', 'repository': None},
        ])
        captured = capsys.readouterr()
        assert "/a/f.c" in captured.out
        assert "(outside)" in captured.out


class TestBracketedValues:
    """Brackets in paths and URLs are shown literally."""

    def test_location(self, capsys):
        render.render_location_table({
            'git_directory': '/t/[dev]/a/.git',
            'common_directory': '/t/[dev]/a/.git',
            'working_directory': '/t/[dev]/a',
        })
        assert '/t/[dev]/a' in capsys.readouterr().out

    def test_source_roots(self, capsys):
        render.render_source_roots_table([
            {'path': '/[b]/', 'revision_id': 'a' * 40, 'repository_url': 'https://e.com/[u]', 'nested_root': '[n]/'},
        ], [])
        out = capsys.readouterr().out
        assert '/[b]/' in out
        assert '[n]/' in out

    def test_submodules(self, capsys):
        render.render_submodules_table([
            {'name': '[x]', 'path': '[p]', 'url': 'u', 'head_commit_sha': 'c' * 40},
        ])
        out = capsys.readouterr().out
        assert '[x]' in out
        assert '[p]' in out

    def test_classification(self, capsys):
        render.render_classification_table([{'path': '/[r]/f.c', 'repository': '/[r]'}])
        assert '/[r]/f.c' in capsys.readouterr().out

    def test_generic_table(self, capsys):
        render.render_table(["Repository"], [["/[dev]/a"]])
        assert '/[dev]/a' in capsys.readouterr().out
