# pylint: disable=line-too-long
"""
Download and install the Destiny 2 world content database for ManifestDb.

The manifest index points at a zipped SQLite file per language; this module fetches it through
Destiny2Client.download_file and extracts the .content member into place. The installed content
version is recorded next to the database so an unchanged manifest is not downloaded again.
"""
import logging
import os
import tempfile
import zipfile
import zlib
from typing import Optional

from destiny2_client import Destiny2Client

logger = logging.getLogger(__name__)


def version_path(db_path: str) -> str:
    """Sidecar file holding the content version installed at ``db_path``."""
    return db_path + ".version"


def installed_version(db_path: str) -> Optional[str]:
    """Return the content version installed at ``db_path``, or None if unknown."""
    if not os.path.exists(db_path):
        return None
    try:
        with open(version_path(db_path), "r", encoding="utf-8") as f:
            return f.read().strip() or None
    except OSError:
        return None


def install_manifest(client: Destiny2Client, db_path: str, language: str = "en") -> bool:
    """
    Ensure the manifest database at ``db_path`` matches the current content version.

    Skips the download when the database exists and its recorded version equals the
    version in the manifest index. Every failure is logged and reported as False.

    Args:
        client (Destiny2Client): API client used for the manifest index and the download.
        db_path (str): Where the extracted SQLite database is written.
        language (str): Key into mobileWorldContentPaths.

    Returns:
        bool: True if the database is installed and current, False otherwise.
    """
    manifest = client.get_manifest()
    if manifest is None:
        logger.error("Manifest index fetch failed.")
        return False
    content_path = manifest.mobileWorldContentPaths.get(language)
    if not content_path:
        logger.error("Manifest index missing SQLite path for language %s.", language)
        return False
    if manifest.version and installed_version(db_path) == manifest.version:
        logger.info("Manifest version %s already installed at %s", manifest.version, db_path)
        return True
    target_dir = os.path.dirname(os.path.abspath(db_path))
    zip_path = None
    try:
        with tempfile.NamedTemporaryFile(delete=False, suffix=".zip", dir=target_dir) as tmp_file:
            zip_path = tmp_file.name
        if not client.download_file(content_path, zip_path):
            logger.error("Manifest download failed: %s", content_path)
            return False
        return _extract_content(zip_path, db_path, manifest.version)
    except OSError as e:
        logger.error("Manifest install into %s failed: %s", db_path, e)
        return False
    finally:
        if zip_path and os.path.exists(zip_path):
            os.remove(zip_path)


def _extract_content(zip_path: str, db_path: str, version: str) -> bool:
    """Extract the largest .content member of the archive to ``db_path`` and record its version."""
    tmp_db = db_path + ".partial"
    try:
        with zipfile.ZipFile(zip_path, "r") as zf:
            manifest_files = [info for info in zf.infolist() if info.filename.endswith(".content")]
            if not manifest_files:
                logger.error("No .content file found in manifest ZIP.")
                return False
            manifest_info = max(manifest_files, key=lambda info: info.file_size)
            with zf.open(manifest_info.filename, "r") as src, open(tmp_db, "wb") as sqlite_file:
                while True:
                    block = src.read(1024 * 1024)
                    if not block:
                        break
                    sqlite_file.write(block)
        os.replace(tmp_db, db_path)
        with open(version_path(db_path), "w", encoding="utf-8") as f:
            f.write(version)
    except (OSError, zipfile.BadZipFile, zlib.error) as e:
        logger.error("Manifest extraction to %s failed: %s", db_path, e)
        return False
    finally:
        if os.path.exists(tmp_db):
            os.remove(tmp_db)
    logger.info("Installed manifest version %s at %s", version, db_path)
    return True
