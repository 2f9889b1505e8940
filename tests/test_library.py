import dataclasses
import os

import pytest

from instafilter.infrastructure.library import LibraryError, PhotoLibrary


def test_list_is_empty_before_anything_is_saved(settings):
    assert PhotoLibrary(settings=settings).list() == []


def test_save_writes_png_into_library_dir(settings, photo):
    library = PhotoLibrary(settings=settings)

    name = library.save(photo)

    assert name.startswith("instafilter-")
    assert name.endswith(".png")
    assert (library.directory / name).is_file()


def test_save_uses_configured_jpeg_format(settings, photo):
    library = PhotoLibrary(settings=dataclasses.replace(settings, save_format="jpeg"))

    name = library.save(photo)

    assert name.endswith(".jpg")
    assert library.load(name).format == "JPEG"


def test_unsupported_save_format_is_rejected(settings):
    with pytest.raises(ValueError):
        PhotoLibrary(settings=dataclasses.replace(settings, save_format="GIF"))


def test_list_returns_newest_first(settings, photo):
    library = PhotoLibrary(settings=settings)
    older = library.save(photo)
    newer = library.save(photo)
    os.utime(library.directory / older, (1_000_000, 1_000_000))
    os.utime(library.directory / newer, (2_000_000, 2_000_000))

    assert library.list() == [newer, older]


def test_load_round_trips_saved_picture(settings, photo):
    library = PhotoLibrary(settings=settings)
    name = library.save(photo)

    loaded = library.load(name)

    assert loaded.size == photo.size


@pytest.mark.parametrize("name", ["../secret.png", "nested/pic.png", ".hidden.png", "", "missing.png"])
def test_path_for_rejects_unsafe_or_missing_names(settings, photo, name):
    library = PhotoLibrary(settings=settings)
    library.save(photo)

    with pytest.raises(LibraryError):
        library.path_for(name)


def test_save_reports_unwritable_library(tmp_path, settings, photo):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    library = PhotoLibrary(blocker / "library", settings=settings)

    with pytest.raises(LibraryError):
        library.save(photo)


def test_load_reports_corrupt_files(settings, photo):
    library = PhotoLibrary(settings=settings)
    library.directory.mkdir(parents=True)
    (library.directory / "broken.png").write_bytes(b"nope")

    with pytest.raises(LibraryError):
        library.load("broken.png")


def test_relative_library_dir_is_resolved_against_cwd(monkeypatch, tmp_path, settings, photo):
    monkeypatch.chdir(tmp_path)
    library = PhotoLibrary("library", settings=settings)

    name = library.save(photo)
    monkeypatch.chdir(tmp_path.parent)

    assert library.directory.is_absolute()
    assert library.directory == (tmp_path / "library").resolve()
    assert library.path_for(name).is_file()
