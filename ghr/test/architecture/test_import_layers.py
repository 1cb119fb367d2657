from __future__ import annotations

import pytest

from ghr.test.architecture._gate import require_arch_checks_enabled
from ghr.test.architecture._utils import (
    ghr_root,
    iter_python_files,
    matches_prefix,
    parse_imports,
)

# Modules a layer must never import.
FORBIDDEN: dict[str, tuple[str, ...]] = {
    "core": ("ghr.cli", "ghr.services", "ghr.forge", "ghr.output", "ghr.git", "ghr.platform"),
    "platform": ("ghr.cli", "ghr.services", "ghr.forge", "ghr.output", "ghr.git"),
    "git": ("ghr.cli", "ghr.services", "ghr.forge", "ghr.output"),
    "forge": ("ghr.cli", "ghr.services"),
    "output": ("ghr.cli",),
    "services": ("ghr.cli",),
}


@pytest.mark.parametrize("layer", sorted(FORBIDDEN))
def test_layer_does_not_import_upward(layer: str) -> None:
    require_arch_checks_enabled()

    root = ghr_root()
    offenders: list[str] = []
    for file_path in iter_python_files(root / layer):
        rel = file_path.relative_to(root)
        for item in parse_imports(file_path):
            if any(matches_prefix(item.module, prefix) for prefix in FORBIDDEN[layer]):
                offenders.append(f"{rel}:{item.line}: forbidden import '{item.module}'")

    assert not offenders, f"{layer} dependency violations:\n" + "\n".join(offenders)
