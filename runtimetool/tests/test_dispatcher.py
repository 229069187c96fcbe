import pytest

from common.errors import ExecutionError, ResolutionError, ToolValidationError
from runtimetool.dispatcher import EXIT_NOT_EXECUTABLE, EXIT_NOT_FOUND, EXIT_TIMEOUT, execute
from workspace.models import ToolEntry, WorkspaceDescriptor


@pytest.fixture
def descriptor(tmp_path):
    return WorkspaceDescriptor(source_path=tmp_path / "nimsforest.workspace")


def binary(path, name="t"):
    return ToolEntry(name=name, mode="binary", path=str(path), version="1")


def test_execute_passes_command_and_args(descriptor, make_script, capfd):
    script = make_script("echoer", 'echo "cmd=$1"; shift; echo "args=$*"')
    assert execute(binary(script), descriptor, "greet", ["--loud", "world"]) == 0
    out, _ = capfd.readouterr()
    assert out == "cmd=greet\nargs=--loud world\n"


def test_execute_inherits_stderr(descriptor, make_script, capfd):
    script = make_script("warner", 'echo "careful" >&2')
    execute(binary(script), descriptor, "x")
    _, err = capfd.readouterr()
    assert "careful" in err


@pytest.mark.parametrize("code", [1, 3, 42])
def test_execute_propagates_exit_code(descriptor, make_script, code):
    script = make_script("failer", f"exit {code}")
    with pytest.raises(ExecutionError) as exc_info:
        execute(binary(script), descriptor, "fail")
    assert exc_info.value.exit_code == code


def test_execute_signal_exit_code(descriptor, make_script):
    script = make_script("killed", "kill -TERM $$")
    with pytest.raises(ExecutionError) as exc_info:
        execute(binary(script), descriptor, "x")
    assert exc_info.value.exit_code == 128 + 15


def test_execute_clone_tool(tmp_path, descriptor, make_script, capfd):
    make_script("tools/work/bin/work", 'echo "work $1"')
    entry = ToolEntry(name="work", mode="clone", path="./tools/work", version="1")
    execute(entry, descriptor, "build")
    assert capfd.readouterr().out == "work build\n"


def test_execute_validates_first(tmp_path, descriptor, make_script):
    with pytest.raises(ToolValidationError):
        execute(binary(tmp_path / "missing"), descriptor, "x")
    script = make_script("plain", "exit 0", executable=False)
    with pytest.raises(ToolValidationError, match="not executable"):
        execute(binary(script), descriptor, "x")


def test_execute_unspawnable_interpreter(tmp_path, descriptor):
    script = tmp_path / "broken"
    script.write_text("#!/nonexistent/interpreter\n")
    script.chmod(0o755)
    with pytest.raises(ExecutionError) as exc_info:
        execute(binary(script), descriptor, "x")
    assert exc_info.value.exit_code == EXIT_NOT_FOUND


def test_execute_directory_is_not_executable(tmp_path, descriptor):
    (tmp_path / "tools" / "src-only").mkdir(parents=True)
    entry = ToolEntry(name="src-only", mode="clone", path="tools/src-only", version="1")
    with pytest.raises(ExecutionError) as exc_info:
        execute(entry, descriptor, "x")
    assert exc_info.value.exit_code == EXIT_NOT_EXECUTABLE


def test_execute_timeout(descriptor, make_script):
    script = make_script("slow", "exec sleep 5")
    with pytest.raises(ExecutionError, match="timed out") as exc_info:
        execute(binary(script), descriptor, "x", timeout=0.2)
    assert exc_info.value.exit_code == EXIT_TIMEOUT


def test_execute_unsupported_mode(descriptor):
    entry = ToolEntry.model_construct(name="t", mode="docker", path="/x", version="1")
    with pytest.raises(ResolutionError):
        execute(entry, descriptor, "x")
