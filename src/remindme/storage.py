"""Markdown I/O for persistent state files.

Each item is one ``.md`` file: YAML frontmatter holding the fields, the
markdown body holding the human text. Filenames are slugs of the body; the
``id`` in the frontmatter is the real key.
"""

import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Any

import yaml

from remindme.config import DATA_DIR as DATA_DIR

STATE_DIR = DATA_DIR / "state"

log = logging.getLogger(__name__)

_FRONTMATTER = re.compile(r"\A---\n(.*?)\n---\n?(.*)\Z", re.DOTALL)


def _slugify(text: str, max_len: int = 50) -> str:
    """Convert text to a filesystem-safe slug."""
    slug = text.lower()
    slug = re.sub(r"[^a-z0-9]+", "-", slug)
    slug = slug.strip("-")
    if len(slug) > max_len:
        slug = slug[:max_len].rstrip("-")
    return slug or "item"


def dump_md(meta: dict[str, Any], body: str) -> str:
    """Build YAML frontmatter + markdown body."""
    front = yaml.safe_dump(meta, sort_keys=False, allow_unicode=True).rstrip("\n")
    return f"---\n{front}\n---\n{body}\n"


def load_md(text: str) -> tuple[dict[str, Any], str]:
    """Split a markdown file into its frontmatter mapping and stripped body."""
    match = _FRONTMATTER.match(text.replace("\r\n", "\n"))
    if match is None:
        raise ValueError("Missing YAML frontmatter delimiters")
    data = yaml.safe_load(match.group(1))
    if not isinstance(data, dict):
        raise ValueError("YAML frontmatter is not a mapping")
    if "id" not in data:
        raise ValueError("YAML frontmatter has no id")
    return data, match.group(2).strip()


def _read_id(filepath: Path) -> str | None:
    try:
        data, _ = load_md(filepath.read_text())
    except (OSError, ValueError, yaml.YAMLError):
        return None
    return str(data["id"])


def read_md_dir(dir_path: Path) -> list[tuple[Path, dict[str, Any], str]]:
    """Read all .md files in a directory. Corrupt files are skipped."""
    if not dir_path.is_dir():
        return []
    result: list[tuple[Path, dict[str, Any], str]] = []
    for filepath in sorted(dir_path.glob("*.md")):
        try:
            meta, body = load_md(filepath.read_text())
        except (ValueError, yaml.YAMLError, UnicodeDecodeError):
            log.warning("Skipping corrupt file: %s", filepath)
            continue
        result.append((filepath, meta, body))
    return result


def _atomic_write(target: Path, content: str) -> None:
    fd, tmp = tempfile.mkstemp(dir=target.parent, suffix=".tmp")
    try:
        os.write(fd, content.encode())
    finally:
        os.close(fd)
    os.replace(tmp, target)


def write_md(dir_path: Path, meta: dict[str, Any], body: str) -> Path:
    """Write one item as a slug-named .md file and return its path.

    An existing file with the same id is overwritten in place; a file holding a
    different id bumps the slug suffix. Identical content is not rewritten.
    """
    dir_path.mkdir(parents=True, exist_ok=True)
    item_id = str(meta["id"])
    slug = _slugify(body)
    target = dir_path / f"{slug}.md"

    counter = 2
    while target.exists():
        if _read_id(target) == item_id:
            break
        target = dir_path / f"{slug}-{counter}.md"
        counter += 1

    content = dump_md(meta, body)
    if target.exists() and target.read_text() == content:
        return target
    _atomic_write(target, content)
    return target


def set_aside(filepath: Path) -> Path:
    """Rename an unusable state file to ``<name>.bad`` so later syncs leave it alone."""
    target = filepath.with_name(f"{filepath.name}.bad")
    counter = 2
    while target.exists():
        target = filepath.with_name(f"{filepath.name}.bad{counter}")
        counter += 1
    filepath.rename(target)
    log.warning("Set aside unreadable file %s as %s", filepath, target.name)
    return target


def sync_md_dir(dir_path: Path, items: list[tuple[dict[str, Any], str]]) -> None:
    """Make dir_path hold exactly the given items.

    Files of other ids are removed; files whose id cannot be read are set aside,
    never deleted.
    """
    dir_path.mkdir(parents=True, exist_ok=True)
    keep = {str(meta["id"]) for meta, _ in items}
    # Drop stale files first so renamed items can reclaim their slugs
    for filepath in dir_path.glob("*.md"):
        item_id = _read_id(filepath)
        if item_id is None:
            set_aside(filepath)
        elif item_id not in keep:
            filepath.unlink()
    written = {write_md(dir_path, meta, body) for meta, body in items}
    for filepath in dir_path.glob("*.md"):
        if filepath not in written and _read_id(filepath) is not None:
            filepath.unlink()
