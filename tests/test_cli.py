"""Tests for the freighter-cmd CLI."""

import pytest
from conftest import FakeRuntimeClient
from typer.testing import CliRunner

from freighter_cmd import cli
from freighter_cmd.context import initialize

runner = CliRunner()


@pytest.fixture
def fake_initialize(monkeypatch):
    """Route the CLI through a FakeRuntimeClient."""
    state = {"client": FakeRuntimeClient(stdout=b"hello")}

    def _initialize(config, provision=True, force_pull=False):
        return initialize(config, client=state["client"], provision=provision, force_pull=force_pull)

    monkeypatch.setattr(cli, "initialize", _initialize)
    return state


class TestRunCommand:
    """Tests for `freighter-cmd run`."""

    def test_prints_stdout(self, fake_initialize):
        result = runner.invoke(cli.app, ["run", "greet", "--skip-pull"])
        assert result.exit_code == 0
        assert result.stdout == "hello"

    def test_passes_arguments(self, fake_initialize):
        """Test arguments after -- reach the script verbatim."""
        result = runner.invoke(cli.app, ["run", "greet", "--skip-pull", "--", "--loud", "bob"])
        assert result.exit_code == 0
        client = fake_initialize["client"]
        assert client.calls[0][1][1] == ["bash", "/root/commands/greet.sh", "--loud", "bob"]

    def test_command_failure_exit_code(self, fake_initialize):
        """Test stderr output exits with status 1 and is echoed."""
        fake_initialize["client"] = FakeRuntimeClient(stderr=b"boom")
        result = runner.invoke(cli.app, ["run", "explode", "--skip-pull"])
        assert result.exit_code == cli.EXIT_COMMAND_FAILED
        assert "boom" in result.output

    def test_option_override(self, fake_initialize):
        result = runner.invoke(
            cli.app, ["run", "greet", "--skip-pull", "-o", "ContainerTag=v2"]
        )
        assert result.exit_code == 0
        assert fake_initialize["client"].calls[0][1][0] == "freighterio/cmd:v2"

    def test_invalid_option(self, fake_initialize):
        result = runner.invoke(cli.app, ["run", "greet", "-o", "broken"])
        assert result.exit_code == cli.EXIT_RUNTIME_ERROR


class TestPullCommand:
    """Tests for `freighter-cmd pull`."""

    def test_pull(self, fake_initialize):
        result = runner.invoke(cli.app, ["pull", "--force"])
        assert result.exit_code == 0
        assert fake_initialize["client"].count("pull_image") == 1

    def test_pull_failure(self, fake_initialize):
        fake_initialize["client"].pull_records = [{"error": "denied"}]
        result = runner.invoke(cli.app, ["pull"])
        assert result.exit_code == cli.EXIT_RUNTIME_ERROR


class TestConfigCommands:
    """Tests for show-config and init-config."""

    def test_show_config(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("ContainerRepository: acme/cmd\n", encoding="utf-8")
        result = runner.invoke(cli.app, ["show-config", "--config", str(path)])
        assert result.exit_code == 0
        assert "acme/cmd:latest" in result.stdout

    def test_init_config(self, tmp_path):
        path = tmp_path / "freighter-cmd.yaml"
        result = runner.invoke(cli.app, ["init-config", "--output", str(path)])
        assert result.exit_code == 0
        assert "container_repository: freighterio/cmd" in path.read_text(encoding="utf-8")
