import pathlib
import pytest

FIXTURES_DIR = pathlib.Path(__file__).parent / "fixtures"

def pytest_generate_tests(metafunc):
    if "backtrace_fixture_path" in metafunc.fixturenames:
        # fixture backtrace_fixture_path: every backtrace block sample in tests/fixtures, as pathlib.Path objects
        paths = sorted(FIXTURES_DIR.glob("panic*.txt"))
        metafunc.parametrize("backtrace_fixture_path", paths, ids=lambda p: p.name)

@pytest.fixture(scope="session")
def panic_text() -> str:
    return (FIXTURES_DIR / "panic.txt").read_text(encoding="utf-8")

@pytest.fixture(scope="session")
def panic_prefixed_text() -> str:
    return (FIXTURES_DIR / "panic_prefixed.txt").read_text(encoding="utf-8")

@pytest.fixture(scope="function")
def mock_user_home(tmp_path_factory, monkeypatch) -> pathlib.Path:
    result = tmp_path_factory.mktemp("mock_user_home")
    monkeypatch.setenv("HOME", str(result))
    def mock_home_func():
        return result
    monkeypatch.setattr(pathlib.Path, "home", mock_home_func)
    return result

@pytest.fixture(scope="function")
def tmp_xdg_config_home(tmp_path_factory, monkeypatch) -> pathlib.Path:
    result = tmp_path_factory.mktemp("tmp_xdg_config_home")
    monkeypatch.setenv("XDG_CONFIG_HOME", str(result))
    return result

@pytest.fixture(scope="function")
def no_user_config(mock_user_home: pathlib.Path, monkeypatch) -> pathlib.Path:
    # clear XDG_CONFIG_HOME, set up empty mocked user home directory
    monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
    return mock_user_home
