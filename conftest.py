"""File for tests."""

from collections.abc import Iterator
from pathlib import Path
from typing import Any

import yaml

DEFAULT_PATTERN = "golden/*.yaml"


def pytest_configure(config: Any) -> None:
    """Configure the tests."""
    config.addinivalue_line(
        "markers",
        "golden_test(pattern): parameterize test with YAML files matching pattern",
    )


def _iter_marker_patterns(node: Any) -> Iterator[str]:
    """Yield pattern strings from golden_test markers on `node`."""
    for m in node.iter_markers(name="golden_test"):
        yield m.args[0] if m.args else DEFAULT_PATTERN


def _load_record(p: Path) -> dict[str, Any]:
    try:
        with p.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        data = {"__yaml_load_error__": str(e)}
    if not isinstance(data, dict):
        data = {"__yaml_load_error__": "record is not a mapping"}
    data.setdefault("__path__", str(p))
    data.setdefault("__name__", p.name)
    return data


def pytest_generate_tests(metafunc: Any) -> None:
    """Generate tests (parametrization) from YAML golden files."""
    if "golden" not in metafunc.fixturenames:
        return

    patterns: list[str] = list(_iter_marker_patterns(metafunc.definition)) or [DEFAULT_PATTERN]
    root = Path(metafunc.config.rootpath)

    files: list[Path] = []
    for pat in patterns:
        files.extend(sorted(root.glob(pat)))

    metafunc.parametrize("golden", [_load_record(p) for p in files], ids=[p.name for p in files])
