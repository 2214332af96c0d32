from click.testing import CliRunner

import multitest.cli as cli
from multitest.utils.errors import CommandError, VersionRunError


def _invoke(args, tmp_path):
    runner = CliRunner()
    with runner.isolated_filesystem(temp_dir=tmp_path):
        return runner.invoke(cli.main, args)


def test_cli_builds_config(monkeypatch, tmp_path, gopath):
    """Verify options are merged into the RunConfig handed to the pipeline."""
    captured = {}

    def fake_run_matrix(cfg, *, runner):
        captured["cfg"] = cfg
        captured["runner"] = runner

    monkeypatch.setattr(cli, "run_matrix", fake_run_matrix)
    result = _invoke(
        [
            "--pkg", "github.com/acme/widget",
            "--tags", "1.7,1.8",
            "--tags", "latest",
            "--cmd", "go test ./...",
            "--root", str(gopath),
            "--name", "myorg/golang",
        ],
        tmp_path,
    )

    assert result.exit_code == 0, result.output
    cfg = captured["cfg"]
    assert cfg.tags == ("1.7", "1.8", "latest")
    assert cfg.command == "go test ./..."
    assert cfg.image == "myorg/golang"
    assert cfg.root == gopath
    assert "All 3 version(s) passed" in result.output


def test_cli_requires_pkg(monkeypatch, tmp_path):
    """Verify a missing --pkg exits non-zero before running anything."""
    called = []
    monkeypatch.setattr(cli, "run_matrix", lambda cfg, *, runner: called.append(cfg))
    result = _invoke([], tmp_path)
    assert result.exit_code == 1
    assert "pkg flag must be set" in result.output
    assert called == []


def test_cli_reports_failing_version(monkeypatch, tmp_path, gopath):
    """Verify a failing tag is named in the error and the exit status is 1."""

    def failing(cfg, *, runner):
        raise VersionRunError("1.8", "build", CommandError(["docker", "build"], 1))

    monkeypatch.setattr(cli, "run_matrix", failing)
    result = _invoke(["--pkg", "github.com/acme/widget", "--root", str(gopath)], tmp_path)
    assert result.exit_code == 1
    assert "version '1.8': build failed" in result.output


def test_cli_output_file_is_closed(monkeypatch, tmp_path, gopath):
    """Verify --file opens the sink once and closes it after the run."""
    sinks = []

    def fake_run_matrix(cfg, *, runner):
        sinks.append(runner.sink)
        runner.sink.write("container output\n")

    monkeypatch.setattr(cli, "run_matrix", fake_run_matrix)
    log = tmp_path / "docker.log"
    result = _invoke(["--pkg", "x", "--root", str(gopath), "--file", str(log)], tmp_path)

    assert result.exit_code == 0, result.output
    assert sinks[0].stream.closed
    assert log.read_text() == "container output\n"


def test_cli_blank_tags(monkeypatch, tmp_path):
    """Verify ``--tags ''`` is rejected."""
    monkeypatch.setattr(cli, "run_matrix", lambda cfg, *, runner: None)
    result = _invoke(["--pkg", "x", "--tags", ""], tmp_path)
    assert result.exit_code == 1
    assert "blank version tag" in result.output


def test_cli_version():
    """Verify --version prints the package version."""
    result = CliRunner().invoke(cli.main, ["--version"])
    assert result.exit_code == 0
    assert cli.__version__ in result.output
