"""Integration tests for the vnext command line."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import httpx
import pytest
from click.testing import CliRunner

from vnext import __version__
from vnext.cli.app import main
from vnext.core.changelog import FALLBACK_CHANGELOG
from vnext.github import GitHubClient
from vnext.logging import configure_logging

if TYPE_CHECKING:
    from collections.abc import Callable

    import git
    from click.testing import Result


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    # The runner's streams are closed once invoke() returns.
    configure_logging()


@pytest.fixture
def runner(monkeypatch: pytest.MonkeyPatch) -> CliRunner:
    for name in ("VNEXT_PARSER", "VNEXT_MAJOR_TYPES", "VNEXT_MINOR_TYPES", "VNEXT_NOOP_TYPES"):
        monkeypatch.delenv(name, raising=False)
    return CliRunner()


@pytest.fixture
def released_repo(git_repo: git.Repo, make_commit: Callable[[str], str]) -> git.Repo:
    """Repository tagged v0.1.0 followed by two fixes."""
    make_commit("feat: initial")
    git_repo.create_tag("v0.1.0")
    make_commit("fix: 1")
    make_commit("fix: 2")
    return git_repo


def invoke(runner: CliRunner, repo_path: str | Path, *args: str, **kwargs) -> Result:
    return runner.invoke(main, ["--path", str(repo_path), *args], **kwargs)


class TestFallback:
    """Behaviour outside a usable repository."""

    def test_no_repository(self, runner: CliRunner, tmp_path: Path):
        """Outside a repository the version is 0.0.0 and the exit code 0."""
        result = invoke(runner, tmp_path)

        assert result.exit_code == 0
        assert result.stdout == "0.0.0\n"

    def test_no_repository_changelog(self, runner: CliRunner, tmp_path: Path):
        """The changelog fallback is printed in changelog mode."""
        result = invoke(runner, tmp_path, "--changelog")

        assert result.exit_code == 0
        assert result.stdout == FALLBACK_CHANGELOG + "\n"

    def test_no_commits(self, runner: CliRunner, git_repo: git.Repo):
        """A repository without commits behaves like no repository."""
        result = invoke(runner, git_repo.working_tree_dir)

        assert result.exit_code == 0
        assert result.stdout == "0.0.0\n"


class TestVersionOutput:
    """Tests for the default and --current output."""

    def test_next_version(self, runner: CliRunner, released_repo: git.Repo):
        """Two fixes after v0.1.0 give 0.1.1."""
        result = invoke(runner, released_repo.working_tree_dir)

        assert result.exit_code == 0
        assert result.stdout == "0.1.1\n"

    def test_current_version(self, runner: CliRunner, released_repo: git.Repo):
        """--current prints the last released version."""
        result = invoke(runner, released_repo.working_tree_dir, "--current")
        assert result.stdout == "0.1.0\n"

    def test_untagged_single_feature(
        self,
        runner: CliRunner,
        git_repo: git.Repo,
        make_commit: Callable[[str], str],
    ):
        """A lone feature commit in an untagged repository gives 0.1.0."""
        make_commit("feat: initial")

        result = invoke(runner, git_repo.working_tree_dir)

        assert result.stdout == "0.1.0\n"

    def test_version_flag(self, runner: CliRunner):
        """--version prints the tool version."""
        result = runner.invoke(main, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.stdout


class TestClassificationOptions:
    """Tests for the type list and parser options."""

    def test_minor_types_option(self, runner: CliRunner, released_repo: git.Repo):
        """--minor-types changes what counts as a feature."""
        result = invoke(runner, released_repo.working_tree_dir, "--minor-types", "feat,fix")
        assert result.stdout == "0.2.0\n"

    def test_noop_types_env(self, runner: CliRunner, released_repo: git.Repo):
        """VNEXT_NOOP_TYPES is read from the environment."""
        result = invoke(
            runner,
            released_repo.working_tree_dir,
            env={"VNEXT_NOOP_TYPES": "chore, fix"},
        )
        assert result.stdout == "0.1.0\n"

    def test_custom_parser(
        self,
        runner: CliRunner,
        git_repo: git.Repo,
        make_commit: Callable[[str], str],
    ):
        """A custom type pattern drives classification."""
        make_commit("[feat] initial")
        git_repo.create_tag("v1.0.0")
        make_commit("[feat] something new")

        result = invoke(
            runner,
            git_repo.working_tree_dir,
            "--parser",
            "custom",
            "--type-pattern",
            r"^\[(\w+)\]",
        )

        assert result.stdout == "1.1.0\n"

    def test_invalid_pattern_falls_back(self, runner: CliRunner, released_repo: git.Repo):
        """A broken pattern does not abort the run."""
        result = invoke(
            runner,
            released_repo.working_tree_dir,
            "--parser",
            "custom",
            "--type-pattern",
            "(unclosed",
        )

        assert result.exit_code == 0
        assert result.stdout == "0.1.1\n"

    def test_config_from_pyproject(self, runner: CliRunner, released_repo: git.Repo):
        """[tool.vnext] in the project's pyproject.toml is honoured."""
        root = released_repo.working_tree_dir
        (Path(root) / "pyproject.toml").write_text('[tool.vnext.commits]\ntypes_minor = ["fix"]\n')

        result = invoke(runner, root)

        assert result.stdout == "0.2.0\n"

    def test_invalid_config(self, runner: CliRunner, released_repo: git.Repo):
        """A malformed configuration section exits 1."""
        root = released_repo.working_tree_dir
        (Path(root) / "pyproject.toml").write_text("[tool.vnext]\nunknown = 1\n")

        result = invoke(runner, root)

        assert result.exit_code == 1
        assert result.stdout == ""
        assert "Error loading config" in result.stderr


class TestChangelogOutput:
    """Tests for --changelog."""

    def test_patch_changelog(self, runner: CliRunner, released_repo: git.Repo):
        """Release notes list the fixes oldest first."""
        result = invoke(runner, released_repo.working_tree_dir, "--changelog")

        assert result.exit_code == 0
        assert result.stdout == "### What's changed in v0.1.1\n\n* fix: 1\n\n* fix: 2\n"

    def test_breaking_changelog(
        self,
        runner: CliRunner,
        git_repo: git.Repo,
        make_commit: Callable[[str], str],
    ):
        """A breaking footer makes a major release with the body shown."""
        make_commit("fix: earlier")
        git_repo.create_tag("v0.1.1")
        make_commit("feat: add new feature\n\nBREAKING CHANGE: This removes the old API")

        result = invoke(runner, git_repo.working_tree_dir, "--changelog")

        assert result.stdout == (
            "### What's changed in v1.0.0\n\n"
            "* feat: add new feature\n\n"
            "  BREAKING CHANGE: This removes the old API\n"
        )

    def test_header_scaling_toggle(
        self,
        runner: CliRunner,
        git_repo: git.Repo,
        make_commit: Callable[[str], str],
    ):
        """--no-header-scaling keeps body headings unchanged."""
        make_commit("feat: x\n\n# Title")

        scaled = invoke(runner, git_repo.working_tree_dir, "--changelog")
        unscaled = invoke(runner, git_repo.working_tree_dir, "--changelog", "--no-header-scaling")

        assert "\n  #### Title\n" in scaled.stdout
        assert "\n  # Title\n" in unscaled.stdout

    def test_markup_is_not_interpreted(
        self,
        runner: CliRunner,
        git_repo: git.Repo,
        make_commit: Callable[[str], str],
    ):
        """Commit text that looks like console markup is printed verbatim."""
        make_commit("fix: escape [bold]tags[/bold] :smile:")

        result = invoke(runner, git_repo.working_tree_dir, "--changelog")

        assert "* fix: escape [bold]tags[/bold] :smile:\n" in result.stdout

    def test_compare_link_without_github_lookup(
        self,
        runner: CliRunner,
        released_repo: git.Repo,
    ):
        """GitHub repositories get a compare link; --no-github skips the API."""
        released_repo.create_remote("origin", "https://github.com/acme/widget.git")

        result = invoke(runner, released_repo.working_tree_dir, "--changelog", "--no-github")

        assert result.stdout.endswith(
            "* fix: 2\n\n"
            "See full diff: [v0.1.0...v0.1.1]"
            "(https://github.com/acme/widget/compare/v0.1.0...v0.1.1)\n"
        )


class TestGitHubEnrichment:
    """Tests for author lookup during changelog rendering."""

    @pytest.fixture
    def github_repo(self, released_repo: git.Repo) -> git.Repo:
        released_repo.create_remote("origin", "git@github.com:acme/widget.git")
        return released_repo

    def use_transport(self, monkeypatch: pytest.MonkeyPatch, handler) -> None:
        transport = httpx.MockTransport(handler)
        monkeypatch.setattr(
            GitHubClient,
            "from_config",
            classmethod(lambda cls, config: cls(config.api_url, transport=transport)),
        )

    def test_authors_attached(
        self,
        runner: CliRunner,
        github_repo: git.Repo,
        monkeypatch: pytest.MonkeyPatch,
    ):
        """Entries are credited to their GitHub users."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json={
                    "commit": {"author": {"name": "Mona", "email": "mona@example.com"}},
                    "author": {"login": "octocat"},
                },
            )

        self.use_transport(monkeypatch, handler)

        result = invoke(runner, github_repo.working_tree_dir, "--changelog")

        assert "* fix: 1 (by @octocat)\n\n* fix: 2 (by @octocat)\n" in result.stdout

    def test_lookup_failure_is_not_fatal(
        self,
        runner: CliRunner,
        github_repo: git.Repo,
        monkeypatch: pytest.MonkeyPatch,
    ):
        """When GitHub is unreachable the changelog has no authors."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("no network", request=request)

        self.use_transport(monkeypatch, handler)

        result = invoke(runner, github_repo.working_tree_dir, "--changelog")

        assert result.exit_code == 0
        assert "* fix: 1\n\n* fix: 2\n" in result.stdout
        assert "could not fetch commit authors" in result.stderr

    def test_not_used_for_version_output(
        self,
        runner: CliRunner,
        github_repo: git.Repo,
        monkeypatch: pytest.MonkeyPatch,
    ):
        """The plain version never touches the network."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("unexpected request")

        self.use_transport(monkeypatch, handler)

        result = invoke(runner, github_repo.working_tree_dir)

        assert result.stdout == "0.1.1\n"
