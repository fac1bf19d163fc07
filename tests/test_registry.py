"""Tests for skin discovery across builtin and user roots."""

from pathlib import Path

from nowplaying.runtime_paths import builtin_skins_root
from nowplaying.skins import registry as registry_module
from nowplaying.skins.registry import SkinRegistry


def _write_skin(root: Path, name: str, display_name: str | None = None) -> Path:
    skin_dir = root / name
    skin_dir.mkdir(parents=True)
    meta = '[meta]\nengine = "1"\n'
    if display_name:
        meta += f'display_name = "{display_name}"\n'
    (skin_dir / "theme.toml").write_text(meta, encoding="utf-8")
    return skin_dir


def test_shipped_builtin_skins_are_listed(tmp_path):
    registry = SkinRegistry(builtin_skins_root(), tmp_path / "user")
    registry.reload()

    classic = registry.get_skin("classic")
    assert classic is not None
    assert classic.is_builtin
    assert classic.display_name == "Classic"
    assert registry.load_errors() == []


def test_builtins_sort_before_user_skins(tmp_path):
    builtin_root = tmp_path / "builtin"
    user_root = tmp_path / "user"
    _write_skin(builtin_root, "zeta", "Zeta")
    _write_skin(user_root, "alpha", "Alpha")
    _write_skin(user_root, "beta", "beta")

    registry = SkinRegistry(builtin_root, user_root)
    registry.reload()

    assert [summary.skin_id for summary in registry.list_skins()] == ["zeta", "alpha", "beta"]


def test_user_skin_overrides_builtin(tmp_path):
    builtin_root = tmp_path / "builtin"
    user_root = tmp_path / "user"
    _write_skin(builtin_root, "classic", "Classic")
    _write_skin(user_root, "classic", "My Classic")

    registry = SkinRegistry(builtin_root, user_root)
    registry.reload()

    summary = registry.get_skin("classic")
    assert summary.display_name == "My Classic"
    assert summary.is_builtin is False
    assert any("replaces the shipped skin" in message for message in registry.load_errors())


def test_non_skin_folders_are_reported(tmp_path):
    user_root = tmp_path / "user"
    (user_root / "empty").mkdir(parents=True)
    (user_root / "stray.toml").write_text("", encoding="utf-8")

    registry = SkinRegistry(tmp_path / "missing", user_root)
    registry.reload()

    assert registry.list_skins() == []
    assert len(registry.load_errors()) == 1


def test_symlinked_skin_folders_are_skipped(tmp_path):
    user_root = tmp_path / "user"
    real = _write_skin(tmp_path / "elsewhere", "real")
    user_root.mkdir()
    (user_root / "linked").symlink_to(real, target_is_directory=True)

    registry = SkinRegistry(tmp_path / "missing", user_root)
    registry.reload()

    assert registry.get_skin("linked") is None
    assert any("symlink" in message for message in registry.load_errors())


def test_set_user_root_takes_effect_on_reload(tmp_path):
    first = tmp_path / "first"
    second = tmp_path / "second"
    _write_skin(first, "one")
    _write_skin(second, "two")

    registry = SkinRegistry(tmp_path / "missing", first)
    registry.reload()
    registry.set_user_root(second)
    registry.reload()

    assert registry.user_root == second
    assert [summary.skin_id for summary in registry.list_skins()] == ["two"]


def test_unusable_folder_error_names_the_folder(tmp_path):
    user_root = tmp_path / "user"
    (user_root / "half-done").mkdir(parents=True)

    registry = SkinRegistry(tmp_path / "missing", user_root)
    registry.reload()

    (message,) = registry.load_errors()
    assert "'half-done'" in message


def test_dot_folders_are_ignored(tmp_path):
    user_root = tmp_path / "user"
    _write_skin(user_root, ".git")
    _write_skin(user_root, "visible")

    registry = SkinRegistry(tmp_path / "missing", user_root)
    registry.reload()

    assert [summary.skin_id for summary in registry.list_skins()] == ["visible"]
    assert registry.load_errors() == []


def test_folder_cap_keeps_first_folders_by_name(tmp_path, monkeypatch):
    monkeypatch.setattr(registry_module, "MAX_SKIN_FOLDERS", 2)
    user_root = tmp_path / "user"
    for name in ("c", "a", "b"):
        _write_skin(user_root, name)

    registry = SkinRegistry(tmp_path / "missing", user_root)
    registry.reload()

    assert [summary.skin_id for summary in registry.list_skins()] == ["a", "b"]
    assert any("only the first 2" in message for message in registry.load_errors())
