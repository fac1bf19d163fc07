"""Lookup of installed skins by folder name.

Skins live one per folder under two roots: the read-only skins shipped with
the app and the user's skins folder. A folder's name is its skin id.
"""

from __future__ import annotations

import logging
from pathlib import Path

from nowplaying.errors import SkinError
from nowplaying.skins.loader import describe_skin
from nowplaying.skins.models import SkinSummary

logger = logging.getLogger(__name__)

MAX_SKIN_FOLDERS = 512


class SkinRegistry:
    """Index of the skins a user can pick, keyed by skin id.

    ``reload`` scans the shipped root first and the user root second, so a
    user folder named like a shipped skin replaces it in the picker. Folders
    starting with a dot are ignored. Problems found while scanning never
    raise; they are collected for ``load_errors`` and the folder is left out.
    """

    def __init__(self, builtin_root: Path, user_root: Path) -> None:
        self._builtin_root = builtin_root
        self._user_root = user_root
        self._skins: dict[str, SkinSummary] = {}
        self._load_errors: list[str] = []

    @property
    def builtin_root(self) -> Path:
        return self._builtin_root

    @property
    def user_root(self) -> Path:
        return self._user_root

    def set_user_root(self, path: Path) -> None:
        """Point at another user skins folder; takes effect on ``reload``."""
        self._user_root = path

    def reload(self) -> None:
        self._skins = {}
        self._load_errors = []
        self._index_root(self._builtin_root, is_builtin=True)
        self._index_root(self._user_root, is_builtin=False)
        logger.debug("Indexed %d skins (%d problems)", len(self._skins), len(self._load_errors))

    def list_skins(self) -> list[SkinSummary]:
        """Shipped skins first, then user skins, each by display name."""
        return sorted(
            self._skins.values(),
            key=lambda skin: (not skin.is_builtin, skin.display_name.lower()),
        )

    def get_skin(self, skin_id: str) -> SkinSummary | None:
        return self._skins.get(skin_id)

    def load_errors(self) -> list[str]:
        return list(self._load_errors)

    def _index_root(self, root: Path, *, is_builtin: bool) -> None:
        for skin_dir in self._skin_folders(root):
            try:
                summary = describe_skin(skin_dir, is_builtin=is_builtin)
            except SkinError as exc:
                self._load_errors.append(f"Skin folder {skin_dir.name!r} was not loaded: {exc}")
                continue

            shadowed = self._skins.get(summary.skin_id)
            if shadowed is not None and shadowed.is_builtin and not is_builtin:
                self._load_errors.append(
                    f"User skin {summary.skin_id!r} replaces the shipped skin with the same folder name."
                )
            self._skins[summary.skin_id] = summary

    def _skin_folders(self, root: Path) -> list[Path]:
        if not root.exists():
            return []
        try:
            folders = sorted(
                path for path in root.iterdir() if path.is_dir() and not path.name.startswith(".")
            )
        except OSError as exc:
            self._load_errors.append(f"Could not read skins folder {root}: {exc}")
            return []

        usable: list[Path] = []
        for folder in folders:
            if folder.is_symlink():
                self._load_errors.append(f"Skin folder {folder.name!r} is a symlink and was skipped.")
                continue
            usable.append(folder)
        if len(usable) > MAX_SKIN_FOLDERS:
            self._load_errors.append(
                f"Skins folder {root} holds {len(usable)} skins; "
                f"only the first {MAX_SKIN_FOLDERS} by name are listed."
            )
            usable = usable[:MAX_SKIN_FOLDERS]
        return usable
