"""Tests for opening repositories."""

import threading

import pytest

from repometa.domain import RepositoryLocation
from repometa.errors import (
    MalformedReferenceError,
    MissingWorkingDirectoryError,
    RepositoryNotFoundError,
    UnsupportedRepositoryFormatError,
)
from repometa.infra import GitEnvironment, GitRepository, check_repository_format, parse_config_text

SHA = "1111111111111111111111111111111111111111"

LOCAL = GitEnvironment()


def make_repository(work, config="", sha=SHA):
    git_dir = work / ".git"
    (git_dir / "refs" / "heads").mkdir(parents=True)
    (git_dir / "HEAD").write_text("ref: refs/heads/main\n")
    (git_dir / "config").write_text(config)
    if sha:
        (git_dir / "refs" / "heads" / "main").write_text(sha + "\n")
    return git_dir


def location_of(work):
    return RepositoryLocation(str(work / ".git"), str(work / ".git"), str(work))


class TestRepositoryFormat:

    def test_no_version_is_zero(self):
        check_repository_format(parse_config_text(""))

    def test_version_zero_ignores_extensions(self):
        check_repository_format(parse_config_text(
            "[core]\nrepositoryformatversion = 0\n[extensions]\nobjectformat = sha256\n"
        ))

    def test_version_one_with_known_extensions(self):
        check_repository_format(parse_config_text(
            "[core]\nrepositoryformatversion = 1\n"
            "[extensions]\nnoop = 1\npreciousObjects = true\npartialClone = origin\nworktreeConfig = true\n"
        ))

    def test_version_one_with_unknown_extension(self):
        with pytest.raises(UnsupportedRepositoryFormatError) as exc_info:
            check_repository_format(parse_config_text(
                "[core]\nrepositoryformatversion = 1\n[extensions]\nobjectformat = sha256\n"
            ))
        assert "objectformat" in str(exc_info.value)

    @pytest.mark.parametrize("version", ["2", "10"])
    def test_future_versions(self, version):
        with pytest.raises(UnsupportedRepositoryFormatError):
            check_repository_format(parse_config_text(f"[core]\nrepositoryformatversion = {version}\n"))

    def test_unparsable_version_is_zero(self):
        check_repository_format(parse_config_text(
            "[core]\nrepositoryformatversion = banana\n[extensions]\nunknown = 1\n"
        ))

    def test_version_with_size_suffix(self):
        with pytest.raises(UnsupportedRepositoryFormatError):
            check_repository_format(parse_config_text("[core]\nrepositoryformatversion = 1k\n"))

    def test_last_value_wins(self):
        with pytest.raises(UnsupportedRepositoryFormatError):
            check_repository_format(parse_config_text(
                "[core]\nrepositoryformatversion = 0\n[core]\nrepositoryformatversion = 2\n"
            ))

    def test_open_aborts_on_unsupported_format(self, tmp_path):
        make_repository(tmp_path, config="[core]\nrepositoryformatversion = 2\n")
        with pytest.raises(UnsupportedRepositoryFormatError):
            GitRepository.open(location_of(tmp_path), LOCAL)


class TestOpen:

    def test_open(self, tmp_path):
        git_dir = make_repository(tmp_path)
        repo = GitRepository.open(location_of(tmp_path), LOCAL)

        assert repo.git_directory == str(git_dir)
        assert repo.common_directory == str(git_dir)
        assert repo.working_directory == str(tmp_path)
        assert not repo.is_bare
        assert repo.location == location_of(tmp_path)
        assert repo.get_head_commit_sha() == SHA

    def test_open_path(self, tmp_path):
        make_repository(tmp_path)
        (tmp_path / "src").mkdir()
        repo = GitRepository.open_path(str(tmp_path / "src"), LOCAL)
        assert repo.working_directory == str(tmp_path)

    def test_open_path_not_found(self, tmp_path):
        with pytest.raises(RepositoryNotFoundError):
            GitRepository.open_path(str(tmp_path), LOCAL)

    def test_core_worktree_overrides_working_directory(self, tmp_path):
        make_repository(tmp_path / "repo", config="[core]\nworktree = ../../checkout\n")
        repo = GitRepository.open(location_of(tmp_path / "repo"), LOCAL)
        assert repo.working_directory == str(tmp_path / "checkout")

    def test_core_worktree_absolute(self, tmp_path):
        make_repository(tmp_path / "repo", config=f"[core]\nworktree = {tmp_path / 'w'}\n")
        repo = GitRepository.open(location_of(tmp_path / "repo"), LOCAL)
        assert repo.working_directory == str(tmp_path / "w")

    def test_empty_repository_has_no_head_commit(self, tmp_path):
        make_repository(tmp_path, sha=None)
        repo = GitRepository.open(location_of(tmp_path), LOCAL)
        assert repo.get_head_commit_sha() is None

    def test_malformed_head_raises_on_access(self, tmp_path):
        git_dir = make_repository(tmp_path)
        (git_dir / "HEAD").write_text("ref:refs/heads/main\n")
        repo = GitRepository.open(location_of(tmp_path), LOCAL)
        with pytest.raises(MalformedReferenceError):
            repo.get_head_commit_sha()

    def test_head_is_memoized(self, tmp_path):
        git_dir = make_repository(tmp_path)
        repo = GitRepository.open(location_of(tmp_path), LOCAL)
        assert repo.get_head_commit_sha() == SHA

        (git_dir / "refs" / "heads" / "main").write_text("2" * 40)
        assert repo.get_head_commit_sha() == SHA

    def test_head_is_resolved_once_under_concurrency(self, tmp_path):
        make_repository(tmp_path)
        repo = GitRepository.open(location_of(tmp_path), LOCAL)
        results = []

        def read_head():
            results.append(repo.get_head_commit_sha())

        threads = [threading.Thread(target=read_head) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert results == [SHA] * 8

    def test_remote_names(self, tmp_path):
        make_repository(tmp_path, config=(
            '[remote "upstream"]\nurl = https://example.com/u.git\n'
            '[remote "nourl"]\nfetch = +refs/heads/*:refs/remotes/nourl/*\n'
            '[remote "origin"]\nurl = https://example.com/o.git\n'
        ))
        repo = GitRepository.open(location_of(tmp_path), LOCAL)
        assert repo.remote_names() == ["upstream", "origin"]
        assert repo.get_remote_url("origin") == "https://example.com/o.git"
        assert repo.get_remote_url("missing") is None


class TestBareRepository:

    def test_submodules_require_working_directory(self, tmp_path):
        bare = tmp_path / "bare.git"
        (bare / "refs" / "heads").mkdir(parents=True)
        (bare / "HEAD").write_text("ref: refs/heads/main\n")
        repo = GitRepository.open(RepositoryLocation(str(bare), str(bare)), LOCAL)

        assert repo.is_bare
        assert repo.get_head_commit_sha() is None
        with pytest.raises(MissingWorkingDirectoryError):
            repo.get_submodules()
        with pytest.raises(MissingWorkingDirectoryError):
            repo.read_submodule_config()
