from __future__ import annotations

import ast

from ghr.test.architecture._gate import require_arch_checks_enabled
from ghr.test.architecture._utils import ghr_root, is_test_file, iter_python_files, read_tree


def _direct_subprocess_calls(tree: ast.AST) -> list[int]:
    lines: list[int] = []
    for node in ast.walk(tree):
        if not isinstance(node, ast.Call):
            continue
        func = node.func
        if not isinstance(func, ast.Attribute):
            continue
        if func.attr not in {"run", "check_output", "Popen"}:
            continue
        if isinstance(func.value, ast.Name) and func.value.id == "subprocess":
            lines.append(node.lineno)
    return lines


def test_subprocess_is_only_called_from_platform_process() -> None:
    require_arch_checks_enabled()

    root = ghr_root()
    offenders: list[str] = []
    for file_path in iter_python_files(root):
        if is_test_file(file_path):
            continue
        rel = file_path.relative_to(root)
        if rel.as_posix() == "platform/process.py":
            continue
        for line in _direct_subprocess_calls(read_tree(file_path)):
            offenders.append(f"{rel}:{line}: direct subprocess call outside platform/process.py")

    assert not offenders, "Subprocess policy violations:\n" + "\n".join(offenders)
