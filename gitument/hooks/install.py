"""Hook installer: write, back up, restore and remove gitument's git hooks.

Behavior:
- Existing foreign hooks are copied to `.git/hooks/gitument-backup/` first
- Nothing is written unless every hook slot is free or `force` is set
- Uninstall removes only marked scripts, restores the backups and removes
  the workflow config
"""

from __future__ import annotations

import shutil
from pathlib import Path

from gitument.config import remove_config, write_default_config
from gitument.errors import HookAlreadyInstalled, NotARepository
from gitument.hooks.vcs import Git, VersionControl
from gitument.logging import get_logger

log = get_logger(__name__)

HOOK_MARKER = "# gitument hook"
BACKUP_DIRNAME = "gitument-backup"

HOOK_SCRIPTS: dict[str, str] = {
    "pre-commit": f'#!/bin/sh\n{HOOK_MARKER}: pre-commit\ngitument process-pre-commit "$(pwd)"\n',
    "post-merge": f'#!/bin/sh\n{HOOK_MARKER}: post-merge\ngitument process-post-merge "$(pwd)"\n',
}
HOOK_NAMES = tuple(HOOK_SCRIPTS)


def hooks_dir(root: Path) -> Path:
    return root / ".git" / "hooks"


def _is_ours(path: Path) -> bool:
    try:
        return HOOK_MARKER in path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return False


def _backup_existing(hooks: Path) -> list[Path]:
    backup_dir = hooks / BACKUP_DIRNAME
    saved: list[Path] = []
    for name in HOOK_NAMES:
        hook = hooks / name
        # re-running init must not replace a real backup with our own script
        if not hook.exists() or _is_ours(hook):
            continue
        backup_dir.mkdir(parents=True, exist_ok=True)
        shutil.copy2(hook, backup_dir / name)
        saved.append(backup_dir / name)
    return saved


def _restore_backups(hooks: Path) -> list[Path]:
    backup_dir = hooks / BACKUP_DIRNAME
    if not backup_dir.exists():
        return []
    restored: list[Path] = []
    for name in HOOK_NAMES:
        backup = backup_dir / name
        # an occupied slot holds a foreign hook; its backup stays
        if backup.exists() and not (hooks / name).exists():
            shutil.copy2(backup, hooks / name)
            backup.unlink()
            restored.append(hooks / name)
    if not any(backup_dir.iterdir()):
        backup_dir.rmdir()
    return restored


def install_hooks(root: Path, force: bool = False, vcs: VersionControl | None = None) -> list[Path]:
    """Install the pre-commit and post-merge hooks into *root*'s repository."""
    vcs = vcs or Git(root)
    if not vcs.is_repository():
        raise NotARepository(f"Not a git repository: {root}", root)

    hooks = hooks_dir(root)
    hooks.mkdir(parents=True, exist_ok=True)
    _backup_existing(hooks)

    existing = [hooks / name for name in HOOK_NAMES if (hooks / name).exists()]
    if existing and not force:
        raise HookAlreadyInstalled(
            f"Hook already exists: {existing[0]} (use --force to overwrite)", existing[0]
        )

    installed: list[Path] = []
    for name, body in HOOK_SCRIPTS.items():
        hook = hooks / name
        hook.write_text(body, encoding="utf-8")
        hook.chmod(0o755)
        installed.append(hook)

    if write_default_config(root) is not None:
        log.info("wrote default workflow config", extra={"path": root})
    log.info("installed %d hooks", len(installed), extra={"path": hooks})
    return installed


def uninstall_hooks(root: Path) -> list[Path]:
    """Remove gitument's own hooks, restore backed-up hooks and drop the config file.

    Hook scripts without the gitument marker are left in place.
    """
    hooks = hooks_dir(root)
    removed: list[Path] = []
    for name in HOOK_NAMES:
        hook = hooks / name
        if hook.exists() and _is_ours(hook):
            hook.unlink()
            removed.append(hook)

    _restore_backups(hooks)
    remove_config(root)
    log.info("removed %d hooks", len(removed), extra={"path": hooks})
    return removed
