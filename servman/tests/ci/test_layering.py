from __future__ import annotations

from pathlib import Path

import pytest


PACKAGE_ROOT = Path(__file__).resolve().parents[2]
PROJECT_ROOT = PACKAGE_ROOT.parent
EXCLUDED_DIRS = {
    PACKAGE_ROOT / "tests",
}


def _is_within(path: Path, target: Path) -> bool:
    try:
        path.relative_to(target)
        return True
    except ValueError:
        return False


def iter_python_files(*relative: str) -> list[Path]:
    root = PACKAGE_ROOT.joinpath(*relative)
    return [
        file_path
        for file_path in root.rglob("*.py")
        if not any(_is_within(file_path, excluded) for excluded in EXCLUDED_DIRS)
    ]


def find_imports(needle: str, files: list[Path]) -> list[str]:
    matches: list[str] = []
    for file_path in files:
        for line_no, line in enumerate(file_path.read_text(encoding="utf-8").splitlines(), start=1):
            stripped = line.strip()
            if not stripped.startswith(("import ", "from ")):
                continue
            module = stripped.split()[1].lstrip(".")
            if needle in module.split("."):
                rel_path = file_path.relative_to(PROJECT_ROOT)
                matches.append(f"{rel_path}:{line_no}: {stripped}")
    return matches


@pytest.mark.parametrize(
    "needle",
    ["requests", "adapters", "usecases", "viewmodels", "app"],
)
def test_domain_stays_free_of_outer_layers(needle: str) -> None:
    matches = find_imports(needle, iter_python_files("domain"))
    assert not matches, f"Domain imports '{needle}':\n" + "\n".join(matches)


@pytest.mark.parametrize("needle", ["requests", "adapters", "app"])
def test_viewmodels_do_no_io(needle: str) -> None:
    matches = find_imports(needle, iter_python_files("viewmodels"))
    assert not matches, f"Viewmodels import '{needle}':\n" + "\n".join(matches)


def test_only_adapters_talk_http() -> None:
    files = [
        file_path
        for file_path in iter_python_files()
        if not _is_within(file_path, PACKAGE_ROOT / "adapters")
    ]
    matches = find_imports("requests", files)
    assert not matches, "HTTP client used outside adapters:\n" + "\n".join(matches)
