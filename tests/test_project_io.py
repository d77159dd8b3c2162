import pytest

from scratchast.errors import InvalidProjectFormat, MissingProjectDescriptor, UnreadableArchive
from scratchast.project_io import load_sb3, read_archive
from tests._builders import project_bytes, stage, target, zip_bytes


def test_load_splits_project_and_resources(tmp_path) -> None:
    path = tmp_path / "ok.sb3"
    path.write_bytes(zip_bytes({
        "project.json": project_bytes(stage(), target("Cat")),
        "83a9787d4cb6f3b7632b4ddfebf74367.wav": b"RIFF....",
    }))
    loaded = load_sb3(str(path))
    assert [t.name for t in loaded.project.targets] == ["Stage", "Cat"]
    assert loaded.resources == {"83a9787d4cb6f3b7632b4ddfebf74367.wav": b"RIFF...."}


def test_missing_descriptor(tmp_path) -> None:
    path = tmp_path / "empty.sb3"
    path.write_bytes(zip_bytes({"image.png": b"\x89PNG"}))
    with pytest.raises(MissingProjectDescriptor) as exc_info:
        load_sb3(str(path))
    assert "project.json" in str(exc_info.value)


def test_not_a_zip(tmp_path) -> None:
    path = tmp_path / "broken.sb3"
    path.write_bytes(b"this is not a zip archive")
    with pytest.raises(UnreadableArchive):
        load_sb3(str(path))


def test_nonexistent_path(tmp_path) -> None:
    with pytest.raises(UnreadableArchive) as exc_info:
        load_sb3(str(tmp_path / "nope.sb3"))
    assert "nope.sb3" in str(exc_info.value)


def test_bad_descriptor_inside_good_zip(tmp_path) -> None:
    path = tmp_path / "bad.sb3"
    path.write_bytes(zip_bytes({"project.json": b"[1, 2"}))
    with pytest.raises(InvalidProjectFormat):
        load_sb3(str(path))


def test_read_archive_from_memory() -> None:
    loaded = read_archive({"project.json": project_bytes(stage())})
    assert loaded.resources == {}
    assert loaded.project.targets[0].is_stage
