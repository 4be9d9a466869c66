"""
Module containing constants for the Destiny 2 API client and manifest lookup.
"""

import os
from enum import IntEnum

# Bungie API configuration constants
BUNGIE_BASE_URL = os.getenv("BUNGIE_BASE_URL", "https://www.bungie.net")
API_KEY = os.getenv("BUNGIE_API_KEY")
REQUEST_TIMEOUT = 10  # seconds
DOWNLOAD_CHUNK_SIZE = 64 * 1024

# Envelope ErrorCode value meaning "Success"
BUNGIE_SUCCESS_CODE = 1

# Local manifest database configuration constants
MANIFEST_DB_PATH = os.getenv("DESTINY2_MANIFEST_DB_PATH", "/tmp/manifest.content")
DESERIALIZATION_DEBUGGING = os.getenv("DESTINY2_DESERIALIZATION_DEBUG", "false").lower() in {"1", "true", "yes"}

# SQLite caps bound parameters per statement; keep IN (...) batches well below it
SQL_BATCH_SIZE = 400


class BungieMembershipType(IntEnum):
    """Platform a Destiny membership lives on."""
    ALL = -1
    NONE = 0
    TIGER_XBOX = 1
    TIGER_PSN = 2
    TIGER_STEAM = 3
    TIGER_BLIZZARD = 4
    TIGER_STADIA = 5
    TIGER_EGS = 6
    TIGER_DEMON = 10
    BUNGIE_NEXT = 254


class DestinyComponentType(IntEnum):
    """Optional response sections for profile, character and item queries."""
    NONE = 0
    PROFILES = 100
    VENDOR_RECEIPTS = 101
    PROFILE_INVENTORIES = 102
    PROFILE_CURRENCIES = 103
    PROFILE_PROGRESSION = 104
    PLATFORM_SILVER = 105
    CHARACTERS = 200
    CHARACTER_INVENTORIES = 201
    CHARACTER_PROGRESSIONS = 202
    CHARACTER_RENDER_DATA = 203
    CHARACTER_ACTIVITIES = 204
    CHARACTER_EQUIPMENT = 205
    ITEM_INSTANCES = 300
    ITEM_OBJECTIVES = 301
    ITEM_PERKS = 302
    ITEM_RENDER_DATA = 303
    ITEM_STATS = 304
    ITEM_SOCKETS = 305
    ITEM_TALENT_GRIDS = 306
    ITEM_COMMON_DATA = 307
    ITEM_PLUG_STATES = 308
    ITEM_PLUG_OBJECTIVES = 309
    ITEM_REUSABLE_PLUGS = 310
    VENDORS = 400
    VENDOR_CATEGORIES = 401
    VENDOR_SALES = 402
    KIOSKS = 500
    CURRENCY_LOOKUPS = 600
    PRESENTATION_NODES = 700
    COLLECTIBLES = 800
    RECORDS = 900
    TRANSITORY = 1000
    METRICS = 1100
    STRING_VARIABLES = 1200


# Maps classType integer values to user-friendly class names
CLASS_TYPE_MAP = {
    0: "Titan",
    1: "Hunter",
    2: "Warlock"
}
