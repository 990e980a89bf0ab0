"""Every third-party package imported by channel_chat is a declared dependency."""
from __future__ import annotations

import ast
import re
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
PACKAGE = ROOT / "channel_chat"

# import name -> distribution name
DISTRIBUTIONS = {
    "yaml": "pyyaml",
    "dotenv": "python-dotenv",
    "youtube_transcript_api": "youtube-transcript-api",
}


def imported_top_levels() -> set[str]:
    names = set()
    for path in PACKAGE.rglob("*.py"):
        tree = ast.parse(path.read_text(), filename=str(path))
        for node in ast.walk(tree):
            if isinstance(node, ast.Import):
                names.update(alias.name.split(".")[0] for alias in node.names)
            elif isinstance(node, ast.ImportFrom) and node.level == 0 and node.module:
                names.add(node.module.split(".")[0])
    return names


def declared_dependencies() -> set[str]:
    text = (ROOT / "pyproject.toml").read_text()
    block = re.search(r"^dependencies = \[(.*?)^\]", text, re.S | re.M).group(1)
    return {re.split(r"[<>=!~\[ ]", req, 1)[0].lower()
            for req in re.findall(r'"([^"]+)"', block)}


def test_third_party_imports_are_declared():
    stdlib = set(sys.stdlib_module_names) | {"__future__"}
    third_party = {name for name in imported_top_levels()
                   if name not in stdlib and name != "channel_chat"}
    declared = declared_dependencies()
    missing = sorted(DISTRIBUTIONS.get(name, name) for name in third_party
                     if DISTRIBUTIONS.get(name, name) not in declared)
    assert missing == []


def test_werkzeug_declared():
    assert "werkzeug" in declared_dependencies()
