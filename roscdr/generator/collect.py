"""Collect interface files from directories and git repositories."""

import subprocess
import tempfile
from pathlib import Path

from .config import ConfigError, InputSource
from .parser import parse_interface_file
from .types import InterfaceFile, InterfacePackage

INTERFACE_KINDS = ("msg", "srv")


def collect_files(path: str | Path) -> list[InterfaceFile]:
    """Find every ``.msg`` then every ``.srv`` file below ``path``."""
    root = Path(path)
    if not root.is_dir():
        raise FileNotFoundError(f"interface directory not found: {root}")

    files: list[InterfaceFile] = []
    for kind in INTERFACE_KINDS:
        for file_path in sorted(root.glob(f"**/*.{kind}")):
            files.append(
                InterfaceFile(
                    kind=kind,
                    name=file_path.stem,
                    content=file_path.read_text(encoding="utf-8"),
                )
            )
    return files


def collect_files_from_git(url: str, tag: str, path: str) -> list[InterfaceFile]:
    """Clone ``url`` at ``tag`` into a scratch directory and collect below ``path``."""
    with tempfile.TemporaryDirectory() as tmp:
        repo = Path(tmp) / "repo"
        subprocess.run(["git", "clone", "--quiet", url, str(repo)], check=True, capture_output=True)
        subprocess.run(["git", "checkout", "--quiet", tag], cwd=repo, check=True, capture_output=True)
        return collect_files(repo / path)


def load_package(source: InputSource) -> InterfacePackage:
    """Collect and parse every definition of one configured input."""
    if source.type == "git":
        if not source.url or not source.tag:
            raise ConfigError(f"input {source.name!r}: git sources need 'url' and 'tag'")
        files = collect_files_from_git(source.url, source.tag, source.path)
    else:
        files = collect_files(source.path)

    return InterfacePackage(
        name=source.name,
        definitions=[parse_interface_file(file) for file in files],
    )
