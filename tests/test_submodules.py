"""Tests for the submodule manifest index."""

import pytest

from repometa.domain import DiagnosticKind, RepositoryLocation
from repometa.infra import GitEnvironment, GitRepository, parse_config_text
from repometa.infra.submodules import enumerate_submodule_config, read_submodules

SHA_ROOT = "a" * 40
SHA_SUB = "b" * 40


def make_git_dir(git_dir, sha=None, head="ref: refs/heads/main\n"):
    (git_dir / "refs" / "heads").mkdir(parents=True)
    (git_dir / "HEAD").write_text(head)
    if sha:
        (git_dir / "refs" / "heads" / "main").write_text(sha + "\n")
    return git_dir


def add_submodule(work, path, sha=SHA_SUB, legacy=False):
    """Check out a submodule at work/path with metadata in .git/modules."""
    checkout = work / path
    checkout.mkdir(parents=True, exist_ok=True)
    if legacy:
        return make_git_dir(checkout / ".git", sha)
    module = make_git_dir(work / ".git" / "modules" / path, sha)
    (checkout / ".git").write_text(f"gitdir: {module}\n")
    return module


class TestEnumerateSubmoduleConfig:

    def test_blocks_for_same_name_merge_by_key(self):
        config = parse_config_text(
            '[submodule "s"]\n\tpath = s2\n\turl = A\n'
            '[submodule "s"]\n\turl = B\n'
        )
        entries = list(enumerate_submodule_config(config))
        assert len(entries) == 1
        assert (entries[0].name, entries[0].path, entries[0].url) == ("s", "s2", "B")

    def test_first_seen_order(self):
        config = parse_config_text(
            '[submodule "z"]\npath = z\n'
            '[submodule "a"]\npath = a\n'
            '[submodule "z"]\nurl = u\n'
        )
        assert [e.name for e in enumerate_submodule_config(config)] == ["z", "a"]

    def test_other_sections_ignored(self):
        config = parse_config_text('[core]\npath = x\n[Submodule "s"]\npath = s\n[other "s"]\nurl = u\n')
        entries = list(enumerate_submodule_config(config))
        assert [(e.name, e.path, e.url) for e in entries] == [("s", "s", None)]

    def test_missing_fields_are_none(self):
        entries = list(enumerate_submodule_config(parse_config_text('[submodule "s"]\nbranch = main\n')))
        assert entries[0].path is None
        assert entries[0].url is None


class TestReadSubmodules:

    @pytest.fixture
    def work(self, tmp_path):
        make_git_dir(tmp_path / ".git", SHA_ROOT)
        return tmp_path

    def read(self, work, manifest):
        return read_submodules(str(work), parse_config_text(manifest))

    def test_accepted_submodule(self, work):
        module = add_submodule(work, "libs/x")
        submodules, diagnostics = self.read(work, '[submodule "x"]\npath = libs/x\nurl = https://example.com/x.git\n')

        assert diagnostics == []
        assert len(submodules) == 1
        sub = submodules[0]
        assert sub.name == "x"
        assert sub.path == "libs/x"
        assert sub.url == "https://example.com/x.git"
        assert sub.working_directory == str(work / "libs" / "x")
        assert sub.git_directory == str(module)
        assert sub.common_directory == str(module)
        assert sub.head_commit_sha == SHA_SUB
        assert sub.location == RepositoryLocation(str(module), str(module), str(work / "libs" / "x"))

    def test_legacy_layout(self, work):
        git_dir = add_submodule(work, "old", legacy=True)
        submodules, diagnostics = self.read(work, '[submodule "old"]\npath = old\nurl = ../old.git\n')
        assert diagnostics == []
        assert submodules[0].git_directory == str(git_dir)

    def test_submodule_without_commit_is_accepted(self, work):
        add_submodule(work, "empty", sha=None)
        submodules, diagnostics = self.read(work, '[submodule "empty"]\npath = empty\nurl = ../e.git\n')
        assert diagnostics == []
        assert submodules[0].head_commit_sha is None

    @pytest.mark.parametrize("path_line", ["path = \"  \"\n", "path =\n", ""])
    def test_blank_or_missing_path(self, work, path_line):
        submodules, diagnostics = self.read(work, f'[submodule "bad"]\n{path_line}url = https://example.com/x\n')
        assert submodules == []
        assert len(diagnostics) == 1
        assert diagnostics[0].kind == DiagnosticKind.INVALID_SUBMODULE_PATH
        assert diagnostics[0].subject == "bad"
        assert "bad" in diagnostics[0].message

    @pytest.mark.parametrize("url_line", ["url = \"   \"\n", "", "url = http://[::1\n"])
    def test_blank_missing_or_invalid_url(self, work, url_line):
        add_submodule(work, "s")
        submodules, diagnostics = self.read(work, f'[submodule "s"]\npath = s\n{url_line}')
        assert submodules == []
        assert [d.kind for d in diagnostics] == [DiagnosticKind.INVALID_SUBMODULE_URL]

    def test_git_directory_unavailable(self, work):
        (work / "notcloned").mkdir()
        submodules, diagnostics = self.read(work, '[submodule "n"]\npath = notcloned\nurl = ../n.git\n')
        assert submodules == []
        assert [d.kind for d in diagnostics] == [DiagnosticKind.SUBMODULE_GIT_DIR_UNAVAILABLE]

    def test_malformed_indirection_file(self, work):
        (work / "broken").mkdir()
        (work / "broken" / ".git").write_text("garbage")
        submodules, diagnostics = self.read(work, '[submodule "b"]\npath = broken\nurl = ../b.git\n')
        assert submodules == []
        assert [d.kind for d in diagnostics] == [DiagnosticKind.SUBMODULE_GIT_DIR_UNAVAILABLE]

    def test_malformed_head(self, work):
        module = add_submodule(work, "h")
        (module / "HEAD").write_text("nonsense\n")
        submodules, diagnostics = self.read(work, '[submodule "h"]\npath = h\nurl = ../h.git\n')
        assert submodules == []
        assert [d.kind for d in diagnostics] == [DiagnosticKind.INVALID_SUBMODULE_HEAD]

    def test_rejections_do_not_stop_other_entries(self, work):
        add_submodule(work, "good1")
        add_submodule(work, "good2")
        manifest = (
            '[submodule "good1"]\npath = good1\nurl = ../g1.git\n'
            '[submodule "nopath"]\nurl = ../x.git\n'
            '[submodule "good2"]\npath = good2\nurl = ../g2.git\n'
            '[submodule "nourl"]\npath = good2\n'
        )
        submodules, diagnostics = self.read(work, manifest)
        assert [s.name for s in submodules] == ["good1", "good2"]
        assert [d.subject for d in diagnostics] == ["nopath", "nourl"]

    def test_no_manifest(self, work):
        assert read_submodules(str(work), None) == ([], [])


class TestRepositorySubmodules:

    def test_reads_gitmodules_from_working_directory(self, tmp_path):
        make_git_dir(tmp_path / ".git", SHA_ROOT)
        add_submodule(tmp_path, "x")
        (tmp_path / ".gitmodules").write_text(
            '[submodule "x"]\n\tpath = x\n\turl = https://example.com/x.git\n'
            '[submodule "y"]\n\tpath = \n\turl = https://example.com/y.git\n'
        )
        location = RepositoryLocation(str(tmp_path / ".git"), str(tmp_path / ".git"), str(tmp_path))
        repo = GitRepository.open(location, GitEnvironment())

        assert [s.name for s in repo.get_submodules()] == ["x"]
        assert [d.kind for d in repo.get_submodule_diagnostics()] == [DiagnosticKind.INVALID_SUBMODULE_PATH]
        assert repo.read_submodule_config().get_value("submodule", "url", subsection="x") == "https://example.com/x.git"

    def test_without_gitmodules(self, tmp_path):
        make_git_dir(tmp_path / ".git", SHA_ROOT)
        location = RepositoryLocation(str(tmp_path / ".git"), str(tmp_path / ".git"), str(tmp_path))
        repo = GitRepository.open(location, GitEnvironment())

        assert repo.read_submodule_config() is None
        assert repo.get_submodules() == []
        assert repo.get_submodule_diagnostics() == []
