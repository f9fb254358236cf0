from pathlib import Path

from stipple.setup_directories import setup_output_directories


def test_setup_output_directories_creates_all(tmp_path):
    dirs = setup_output_directories(tmp_path)

    assert set(dirs.keys()) == {"base", "renders", "animations", "logs"}

    for path in dirs.values():
        assert isinstance(path, Path)
        assert path.exists()
        assert path.is_dir()


def test_setup_output_directories_is_idempotent(tmp_path):
    dirs1 = setup_output_directories(tmp_path)
    dirs2 = setup_output_directories(tmp_path)

    assert dirs1 == dirs2


def test_base_is_resolved(tmp_path):
    dirs = setup_output_directories(tmp_path / "nested" / ".." / "out")

    assert dirs["base"] == (tmp_path / "out").resolve()
    assert dirs["renders"].parent == dirs["base"]


def test_default_base_is_cwd_output(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    dirs = setup_output_directories()

    assert dirs["base"] == (tmp_path / "output").resolve()
