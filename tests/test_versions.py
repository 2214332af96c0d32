import pytest

from multitest.pipelines.versions import (
    DescriptorFile,
    image_name,
    render_descriptor,
    run_all,
)
from multitest.utils.errors import CommandError, ConfigError, VersionRunError

PKG = "src/github.com/acme/widget"


@pytest.fixture
def descriptor(tmp_path):
    d = DescriptorFile(tmp_path)
    yield d
    d.close()


def _cycle(name, descriptor, context):
    return [
        ["docker", "build", "-f", str(descriptor.path), "-t", name, str(context)],
        ["docker", "run", "--rm", name],
        ["docker", "rmi", "-f", name],
    ]


def test_render_descriptor_format():
    """Verify the three-line Dockerfile is interpolated verbatim."""
    text = render_descriptor("golang", "1.8", PKG, "go test -v ./... | tee out")
    assert text == (
        "FROM golang:1.8\n"
        f"COPY {PKG} {PKG}\n"
        f"RUN cd {PKG} && go test -v ./... | tee out"
    )


def test_rerender_replaces_previous_content(descriptor):
    """Verify a short render after a long one leaves no trailing bytes."""
    descriptor.render("golang", "1.7", PKG, "go test -v -race -count=1 ./...")
    first_path = descriptor.path
    descriptor.render("golang", "1.8", "src/x", "go test")

    assert descriptor.path == first_path
    assert descriptor.path.read_bytes() == b"FROM golang:1.8\nCOPY src/x src/x\nRUN cd src/x && go test"


def test_image_names_do_not_collide():
    """Verify per-tag artifact names embed the tag verbatim."""
    a = image_name("golang", "1.7")
    b = image_name("golang", "1.8")
    assert a == "multi-test:golang-1.7"
    assert b == "multi-test:golang-1.8"
    assert a != b


def test_run_all_runs_every_tag(tmp_path, descriptor, recorder):
    """Verify N tags produce N build/run/remove cycles in order."""
    runner = recorder()
    run_all(["1.7", "1.8", "latest"], PKG, "go test -v", "golang",
            runner=runner, descriptor=descriptor, context=tmp_path)

    expected = []
    for tag in ("1.7", "1.8", "latest"):
        expected += _cycle(f"multi-test:golang-{tag}", descriptor, tmp_path)
    assert runner.calls == expected


def test_run_all_descriptor_matches_tag_at_build_time(tmp_path, descriptor, recorder):
    """Verify each build sees the descriptor rendered for its own tag."""
    seen = []

    def snapshot(argv):
        if argv[1] == "build":
            seen.append(descriptor.read().splitlines()[0])

    run_all(["1.7", "1.8"], PKG, "go test", "golang",
            runner=recorder(on_call=snapshot), descriptor=descriptor, context=tmp_path)
    assert seen == ["FROM golang:1.7", "FROM golang:1.8"]


def test_run_all_keeps_duplicates(tmp_path, descriptor, recorder):
    """Verify duplicate tags are processed as given."""
    runner = recorder()
    run_all(["1.8", "1.8"], PKG, "go test", "golang",
            runner=runner, descriptor=descriptor, context=tmp_path)
    assert len(runner.calls) == 6


def test_run_all_stops_at_first_failing_build(tmp_path, descriptor, recorder):
    """Verify a failing build for 1.8 leaves exactly one completed cycle."""
    runner = recorder(fail_on=lambda argv: argv[1] == "build" and argv[-2].endswith("-1.8"))

    with pytest.raises(VersionRunError) as err:
        run_all(["1.7", "1.8", "1.9"], PKG, "go test", "golang",
                runner=runner, descriptor=descriptor, context=tmp_path)

    assert err.value.tag == "1.8"
    assert err.value.step == "build"
    assert isinstance(err.value.__cause__, CommandError)
    assert "1.8" in str(err.value)
    assert runner.calls[:3] == _cycle("multi-test:golang-1.7", descriptor, tmp_path)
    assert len(runner.calls) == 4


def test_failed_run_skips_image_removal(tmp_path, descriptor, recorder):
    """Verify a failing test run aborts before ``rmi`` (the image is left behind)."""
    runner = recorder(fail_on=lambda argv: argv[1] == "run")

    with pytest.raises(VersionRunError) as err:
        run_all(["1.7"], PKG, "go test", "golang",
                runner=runner, descriptor=descriptor, context=tmp_path)

    assert err.value.step == "run"
    assert [c[1] for c in runner.calls] == ["build", "run"]


def test_run_all_rejects_empty_versions(tmp_path, descriptor, recorder):
    """Verify an empty tag list fails before any command or render."""
    runner = recorder()
    with pytest.raises(ConfigError):
        run_all([], PKG, "go test", "golang",
                runner=runner, descriptor=descriptor, context=tmp_path)
    assert runner.calls == []
    assert descriptor.read() == ""


def test_custom_engine_and_label(tmp_path, descriptor, recorder):
    """Verify the engine executable and artifact label are configurable."""
    runner = recorder()
    run_all(["3.12"], "src/app", "pytest", "python",
            runner=runner, descriptor=descriptor, context=tmp_path,
            engine="podman", label="ci")
    assert runner.calls[1] == ["podman", "run", "--rm", "ci:python-3.12"]
