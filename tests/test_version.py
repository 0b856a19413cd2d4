import tomllib
from pathlib import Path

import userguides


def _project_version() -> str:
    pyproject = Path(__file__).resolve().parents[1] / "pyproject.toml"
    with pyproject.open("rb") as handle:
        return tomllib.load(handle)["project"]["version"]


def test_package_version_matches_pyproject() -> None:
    assert userguides.__version__ == _project_version()


def test_cli_version_flag(capsys) -> None:
    import userguides.main as main

    try:
        main.run(["--version"])
        raise AssertionError("Expected SystemExit from --version.")
    except SystemExit as exc:
        assert exc.code == 0
    assert capsys.readouterr().out.strip() == f"userguides {userguides.__version__}"
