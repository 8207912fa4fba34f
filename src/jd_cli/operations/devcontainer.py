"""Devcontainer template resolution and post-apply fixups."""

import re
from pathlib import Path

DEFAULT_TEMPLATE = "nodejs-postgres"
TEMPLATE_SHORTCUTS = {
    "nodejs-postgres": "ghcr.io/starburst997/devcontainer/templates/nodejs-postgres",
}

_JSON_NAME = re.compile(r'"name"(\s*):(\s*)"\$\{localWorkspaceFolderBasename\}"')
_COMPOSE_NAME = re.compile(r"name:(\s*)\$\{localWorkspaceFolderBasename\}")


def resolve_template(template: str, registry: str) -> tuple[str, str]:
    """Map a shortcut, bare name or full ID to ``(template_id, kind)``.

    ``kind`` is ``shortcut``, ``registry`` or ``custom``.
    """
    if template in TEMPLATE_SHORTCUTS:
        return TEMPLATE_SHORTCUTS[template], "shortcut"
    if "/" not in template:
        return f"{registry.rstrip('/')}/{template}", "registry"
    return template, "custom"


def replace_name_placeholders(devcontainer_dir: Path, name: str) -> list[Path]:
    """Put ``name`` in place of the workspace basename placeholder.

    Only the ``name`` entries of ``devcontainer.json`` and
    ``docker-compose.yml`` are rewritten; returns the files changed.
    """
    changed = []
    targets = (
        (
            devcontainer_dir / "devcontainer.json",
            _JSON_NAME,
            lambda m: f'"name"{m.group(1)}:{m.group(2)}"{name}"',
        ),
        (
            devcontainer_dir / "docker-compose.yml",
            _COMPOSE_NAME,
            lambda m: f"name:{m.group(1)}{name}",
        ),
    )
    for path, pattern, replacement in targets:
        if not path.is_file():
            continue
        text = path.read_text()
        updated = pattern.sub(replacement, text)
        if updated != text:
            path.write_text(updated)
            changed.append(path)
    return changed
