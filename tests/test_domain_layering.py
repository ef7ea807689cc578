from __future__ import annotations

import ast
from pathlib import Path

import pytest

import approvalbot.domain

DOMAIN_ROOT = Path(approvalbot.domain.__file__).parent
DOMAIN_MODULES = sorted(DOMAIN_ROOT.rglob("*.py"))


def _imported_modules(path: Path) -> set[str]:
    tree = ast.parse(path.read_text(encoding="utf-8"))
    names: set[str] = set()
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            names.update(alias.name for alias in node.names)
        elif isinstance(node, ast.ImportFrom) and node.module and node.level == 0:
            names.add(node.module)
    return names


@pytest.mark.parametrize("path", DOMAIN_MODULES, ids=lambda p: str(p.relative_to(DOMAIN_ROOT)))
def test_domain_does_not_depend_on_outer_layers(path: Path) -> None:
    outer = ("approvalbot.infrastructure", "approvalbot.services", "approvalbot.api", "approvalbot.app")

    offending = {name for name in _imported_modules(path) if name.startswith(outer)}

    assert offending == set()
