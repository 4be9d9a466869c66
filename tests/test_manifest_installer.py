"""Unit tests for install_manifest."""
import errno
import os
import zipfile
from unittest.mock import MagicMock

from conftest import RANGE_STAT_HASH, build_manifest_db
import manifest_installer
from manifest_db import ManifestDb, ManifestSettings
from manifest_installer import installed_version, install_manifest
from models import Manifest

CONTENT_PATH = "/common/destiny2_content/sqlite/en/world_sql_content_abc.content"


def _client_serving(zip_source, manifest=None):
    """MagicMock Destiny2Client whose download_file copies ``zip_source``."""
    client = MagicMock()
    client.get_manifest.return_value = manifest or Manifest(version="1.2.3", mobileWorldContentPaths={"en": CONTENT_PATH})

    def download(relative_path, destination):
        with open(zip_source, "rb") as src, open(destination, "wb") as dst:
            dst.write(src.read())
        return True

    client.download_file.side_effect = download
    return client


def test_install_manifest_extracts_content(tmp_path):
    """The largest .content member becomes the manifest database."""
    content = build_manifest_db(str(tmp_path / "world_sql_content_abc.content"))
    archive = tmp_path / "download.zip"
    with zipfile.ZipFile(archive, "w") as zf:
        zf.write(content, arcname="world_sql_content_abc.content")
        zf.writestr("readme.txt", "not a database")
    db_dir = tmp_path / "db"
    db_dir.mkdir()
    db_path = str(db_dir / "manifest.content")

    client = _client_serving(str(archive))
    assert install_manifest(client, db_path) is True
    client.download_file.assert_called_once()
    assert client.download_file.call_args[0][0] == CONTENT_PATH
    assert sorted(os.listdir(db_dir)) == ["manifest.content", "manifest.content.version"]
    assert installed_version(db_path) == "1.2.3"

    db = ManifestDb(ManifestSettings(db_path=db_path))
    try:
        assert db.load_stat(RANGE_STAT_HASH).name == "Range"
    finally:
        db.close()


def test_install_manifest_without_manifest(tmp_path):
    """A failed index call installs nothing."""
    client = MagicMock()
    client.get_manifest.return_value = None
    assert install_manifest(client, str(tmp_path / "manifest.content")) is False
    client.download_file.assert_not_called()


def test_install_manifest_unknown_language(tmp_path):
    """Languages missing from the index are reported, not guessed."""
    client = _client_serving(str(tmp_path / "unused.zip"))
    assert install_manifest(client, str(tmp_path / "manifest.content"), language="fr") is False
    client.download_file.assert_not_called()


def test_install_manifest_download_failure(tmp_path):
    """A failed download leaves no files behind."""
    client = MagicMock()
    client.get_manifest.return_value = Manifest(version="1", mobileWorldContentPaths={"en": CONTENT_PATH})
    client.download_file.return_value = False
    assert install_manifest(client, str(tmp_path / "manifest.content")) is False
    assert os.listdir(tmp_path) == []


def test_install_manifest_bad_archive(tmp_path):
    """Archives without a .content member or that are not ZIPs are rejected."""
    archive = tmp_path / "empty.zip"
    with zipfile.ZipFile(archive, "w") as zf:
        zf.writestr("readme.txt", "nothing here")
    db_path = str(tmp_path / "manifest.content")
    assert install_manifest(_client_serving(str(archive)), db_path) is False
    assert not os.path.exists(db_path)

    garbage = tmp_path / "garbage.zip"
    garbage.write_bytes(b"not a zip")
    assert install_manifest(_client_serving(str(garbage)), db_path) is False
    assert not os.path.exists(db_path)


def _content_archive(tmp_path):
    content = build_manifest_db(str(tmp_path / "world_sql_content_abc.content"))
    archive = tmp_path / "download.zip"
    with zipfile.ZipFile(archive, "w") as zf:
        zf.write(content, arcname="world_sql_content_abc.content")
    return archive


def test_install_manifest_skips_current_version(tmp_path):
    """An installed database with the index's version is not downloaded again."""
    archive = _content_archive(tmp_path)
    db_path = str(tmp_path / "manifest.content")
    assert install_manifest(_client_serving(str(archive)), db_path) is True

    client = _client_serving(str(archive))
    assert install_manifest(client, db_path) is True
    client.download_file.assert_not_called()

    newer = _client_serving(str(archive), Manifest(version="1.2.4", mobileWorldContentPaths={"en": CONTENT_PATH}))
    assert install_manifest(newer, db_path) is True
    newer.download_file.assert_called_once()
    assert installed_version(db_path) == "1.2.4"


def test_install_manifest_missing_directory(tmp_path):
    """A destination directory that does not exist is reported, not raised."""
    client = _client_serving(str(tmp_path / "unused.zip"))
    assert install_manifest(client, str(tmp_path / "nope" / "manifest.content")) is False
    client.download_file.assert_not_called()


def test_install_manifest_write_failure_leaves_no_partial(tmp_path, monkeypatch):
    """A failing move into place reports False and cleans up the partial file."""
    archive = _content_archive(tmp_path)
    db_dir = tmp_path / "db"
    db_dir.mkdir()
    db_path = str(db_dir / "manifest.content")

    def no_space(src, dst):
        raise OSError(errno.ENOSPC, "No space left on device")

    monkeypatch.setattr(manifest_installer.os, "replace", no_space)
    assert install_manifest(_client_serving(str(archive)), db_path) is False
    assert os.listdir(db_dir) == []
