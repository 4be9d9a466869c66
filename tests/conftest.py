"""Shared fixtures for the Destiny 2 client and manifest tests."""
import json
import sqlite3
from contextlib import closing
from unittest.mock import MagicMock

import pytest

# Unsigned hashes on both sides of 2**31
WARLOCK_HASH = 2271682572
AUTO_RIFLE_CATEGORY_HASH = 5
WEAPON_CATEGORY_HASH = 1
ARMOR_CATEGORY_HASH = 20
RANGE_STAT_HASH = 1240592695
HANDLING_STAT_HASH = 943549884
KINETIC_BUCKET_HASH = 1498876634
AUTO_RIFLE_HASH = 3824106094
HELMET_HASH = 123456
SOCKET_TYPE_HASH = 2218962841
SOCKET_CATEGORY_HASH = 4241085061


def _signed(h):
    return h - 2**32 if h >= 2**31 else h


MANIFEST_ROWS = {
    "DestinyClassDefinition": [
        {"hash": WARLOCK_HASH, "classType": 2, "displayProperties": {"name": "Warlock"}},
    ],
    "DestinyInventoryItemDefinition": [
        {"hash": AUTO_RIFLE_HASH, "displayProperties": {"name": "Gnawing Hunger"},
         "itemTypeDisplayName": "Auto Rifle", "itemCategoryHashes": [WEAPON_CATEGORY_HASH, AUTO_RIFLE_CATEGORY_HASH],
         "inventory": {"bucketTypeHash": KINETIC_BUCKET_HASH, "tierTypeName": "Legendary"},
         "stats": {"stats": {str(RANGE_STAT_HASH): {"statHash": RANGE_STAT_HASH, "value": 46}}}},
        {"hash": HELMET_HASH, "displayProperties": {"name": "Wing Contender Helm"},
         "itemTypeDisplayName": "Helmet", "itemCategoryHashes": [ARMOR_CATEGORY_HASH]},
        {"hash": 777, "displayProperties": {"name": "Uncategorized Token"}},
    ],
    "DestinyInventoryBucketDefinition": [
        {"hash": KINETIC_BUCKET_HASH, "displayProperties": {"name": "Kinetic Weapons"}, "itemCount": 10},
    ],
    "DestinyItemCategoryDefinition": [
        {"hash": WEAPON_CATEGORY_HASH, "displayProperties": {"name": "Weapon"}},
        {"hash": AUTO_RIFLE_CATEGORY_HASH, "displayProperties": {"name": "Auto Rifle"}},
        {"hash": ARMOR_CATEGORY_HASH, "displayProperties": {"name": "Armor"}},
    ],
    "DestinySocketTypeDefinition": [
        {"hash": SOCKET_TYPE_HASH, "socketCategoryHash": SOCKET_CATEGORY_HASH,
         "plugWhitelist": [{"categoryHash": 7906839, "categoryIdentifier": "frames"}]},
    ],
    "DestinySocketCategoryDefinition": [
        {"hash": SOCKET_CATEGORY_HASH, "displayProperties": {"name": "WEAPON PERKS"}},
    ],
    "DestinyStatDefinition": [
        {"hash": RANGE_STAT_HASH, "displayProperties": {"name": "Range"}},
        {"hash": HANDLING_STAT_HASH, "displayProperties": {"name": "Handling"}},
    ],
}


def build_manifest_db(path, rows=None):
    """Write a manifest-shaped SQLite file with id/json tables."""
    rows = MANIFEST_ROWS if rows is None else rows
    with closing(sqlite3.connect(path)) as conn:
        for table_name, definitions in rows.items():
            conn.execute(f"CREATE TABLE {table_name} (id INTEGER PRIMARY KEY NOT NULL, json BLOB)")
            conn.executemany(
                f"INSERT INTO {table_name} (id, json) VALUES (?, ?)",
                [(_signed(d["hash"]), json.dumps(d)) for d in definitions],
            )
        conn.commit()
    return path


@pytest.fixture
def manifest_db_path(tmp_path):
    """Path of a freshly built manifest database."""
    return str(build_manifest_db(str(tmp_path / "world_sql_content.content")))


@pytest.fixture
def manifest_db(manifest_db_path):
    """ManifestDb opened on the test manifest database."""
    from manifest_db import ManifestDb, ManifestSettings  # pylint: disable=import-outside-toplevel
    db = ManifestDb(ManifestSettings(db_path=manifest_db_path))
    yield db
    db.close()


def make_response(payload=None, status_code=200, text=None):
    """Build a MagicMock standing in for requests.Response."""
    response = MagicMock()
    response.status_code = status_code
    response.text = text if text is not None else json.dumps(payload)
    response.content = response.text.encode("utf-8")
    response.ok = 200 <= status_code < 300
    if not response.ok:
        import requests  # pylint: disable=import-outside-toplevel
        response.raise_for_status.side_effect = requests.HTTPError(f"{status_code} Client Error")
    return response


def envelope(response=None, error_code=1, error_status="Success"):
    """Bungie API envelope around ``response``."""
    return {
        "Response": response,
        "ErrorCode": error_code,
        "ThrottleSeconds": 0,
        "ErrorStatus": error_status,
        "Message": "Ok" if error_code == 1 else "Something went wrong",
        "MessageData": {},
    }


@pytest.fixture
def session():
    """MagicMock standing in for requests.Session."""
    return MagicMock()
