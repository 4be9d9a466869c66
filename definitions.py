# pylint: disable=line-too-long, invalid-name
"""
Pydantic models for Destiny 2 manifest definitions.

Each definition kind lives in exactly one manifest table; DEFINITION_TABLES maps the model
to that table so ManifestDb can run one generic keyed lookup for every kind.
Only the fields the application reads are declared; everything else in the JSON column is ignored.
"""
from typing import Dict, List, Optional, Type

from pydantic import BaseModel

from constants import CLASS_TYPE_MAP


class DestinyDisplayPropertiesDefinition(BaseModel):
    """Name, description and icon shared by most definitions."""
    name: str = ""
    description: str = ""
    icon: Optional[str] = None
    hasIcon: bool = False


class DestinyDefinition(BaseModel):
    """
    Fields every manifest definition carries.

    Attributes:
        hash (int): Unsigned 32-bit content hash.
        index (int): Position of the row in the content build.
        redacted (bool): True when Bungie withholds the definition's content.
    """
    hash: int = 0
    index: int = 0
    redacted: bool = False
    blacklisted: bool = False
    displayProperties: DestinyDisplayPropertiesDefinition = DestinyDisplayPropertiesDefinition()

    @property
    def name(self) -> str:
        return self.displayProperties.name


# --- Classes ---
class DestinyClassDefinition(DestinyDefinition):
    """Titan, Hunter or Warlock."""
    classType: int = 3
    genderedClassNamesByGenderHash: Dict[str, str] = {}

    @property
    def class_name(self) -> str:
        return self.displayProperties.name or CLASS_TYPE_MAP.get(self.classType, str(self.classType))


# --- Inventory items ---
class DestinyInventoryBlockDefinition(BaseModel):
    bucketTypeHash: int = 0
    recoveryBucketTypeHash: int = 0
    tierTypeHash: int = 0
    tierTypeName: Optional[str] = None
    isInstanceItem: bool = False
    maxStackSize: int = 0


class DestinyEquippingBlockDefinition(BaseModel):
    equipmentSlotTypeHash: int = 0
    uniqueLabel: Optional[str] = None
    ammoType: int = 0


class DestinyInventoryItemStatDefinition(BaseModel):
    statHash: int
    value: int = 0
    minimum: int = 0
    maximum: int = 0


class DestinyItemStatBlockDefinition(BaseModel):
    statGroupHash: Optional[int] = None
    stats: Dict[str, DestinyInventoryItemStatDefinition] = {}
    primaryBaseStatHash: int = 0


class DestinyItemSocketEntryDefinition(BaseModel):
    socketTypeHash: int = 0
    singleInitialItemHash: int = 0
    reusablePlugSetHash: Optional[int] = None
    randomizedPlugSetHash: Optional[int] = None
    defaultVisible: bool = True


class DestinyItemSocketCategoryDefinition(BaseModel):
    socketCategoryHash: int
    socketIndexes: List[int] = []


class DestinyItemSocketBlockDefinition(BaseModel):
    detail: str = ""
    socketEntries: List[DestinyItemSocketEntryDefinition] = []
    socketCategories: List[DestinyItemSocketCategoryDefinition] = []


class DestinyItemPlugDefinition(BaseModel):
    plugCategoryIdentifier: str = ""
    plugCategoryHash: int = 0
    uiPlugLabel: str = ""


class DestinyInventoryItemDefinition(DestinyDefinition):
    """
    Weapons, armor, mods, plugs and every other inventory item.

    Attributes:
        itemCategoryHashes (List[int]): DestinyItemCategoryDefinition hashes the item belongs to.
        inventory (DestinyInventoryBlockDefinition): Bucket and tier information.
        sockets (Optional[DestinyItemSocketBlockDefinition]): Socket layout, if the item has sockets.
        plug (Optional[DestinyItemPlugDefinition]): Present when the item can be socketed into another item.
    """
    itemTypeDisplayName: str = ""
    itemTypeAndTierDisplayName: str = ""
    itemType: int = 0
    itemSubType: int = 0
    classType: int = 3
    equippable: bool = False
    nonTransferrable: bool = False
    itemCategoryHashes: List[int] = []
    inventory: DestinyInventoryBlockDefinition = DestinyInventoryBlockDefinition()
    equippingBlock: Optional[DestinyEquippingBlockDefinition] = None
    stats: Optional[DestinyItemStatBlockDefinition] = None
    sockets: Optional[DestinyItemSocketBlockDefinition] = None
    plug: Optional[DestinyItemPlugDefinition] = None
    defaultDamageTypeHash: Optional[int] = None
    screenshot: Optional[str] = None


# --- Buckets and categories ---
class DestinyInventoryBucketDefinition(DestinyDefinition):
    """An inventory slot such as Kinetic Weapons, Helmet or the Vault."""
    scope: int = 0
    category: int = 0
    bucketOrder: int = 0
    itemCount: int = 0
    location: int = 0
    hasTransferDestination: bool = False
    enabled: bool = False
    fifo: bool = False


class DestinyItemCategoryDefinition(DestinyDefinition):
    """A grouping of items, e.g. Weapon, Auto Rifle, Helmets."""
    visible: bool = False
    deprecated: bool = False
    shortTitle: str = ""
    itemTypeRegex: Optional[str] = None
    grantDestinyItemType: int = 0
    grantDestinySubType: int = 0
    grantDestinyClass: int = 3
    parentCategoryHashes: List[int] = []
    groupedCategoryHashes: List[int] = []


# --- Sockets ---
class DestinyPlugWhitelistEntryDefinition(BaseModel):
    categoryHash: int
    categoryIdentifier: str = ""


class DestinySocketTypeDefinition(DestinyDefinition):
    """Rules for which plugs a socket accepts."""
    socketCategoryHash: int = 0
    visibility: int = 0
    alwaysRandomizeSockets: bool = False
    isPreviewEnabled: bool = False
    hideDuplicateReusablePlugs: bool = False
    plugWhitelist: List[DestinyPlugWhitelistEntryDefinition] = []


class DestinySocketCategoryDefinition(DestinyDefinition):
    """A group of sockets shown together, e.g. WEAPON PERKS or ARMOR MODS."""
    uiCategoryStyle: int = 0
    categoryStyle: int = 0


# --- Stats ---
class DestinyStatDefinition(DestinyDefinition):
    """A stat such as Range, Mobility or Discipline."""
    aggregationType: int = 0
    hasComputedBlock: bool = False
    statCategory: int = 0
    interpolate: bool = False


# Definition model -> manifest table holding its rows
DEFINITION_TABLES: Dict[Type[DestinyDefinition], str] = {
    DestinyClassDefinition: "DESTINYCLASSDEFINITION",
    DestinyInventoryItemDefinition: "DESTINYINVENTORYITEMDEFINITION",
    DestinyInventoryBucketDefinition: "DESTINYINVENTORYBUCKETDEFINITION",
    DestinyItemCategoryDefinition: "DESTINYITEMCATEGORYDEFINITION",
    DestinySocketTypeDefinition: "DESTINYSOCKETTYPEDEFINITION",
    DestinySocketCategoryDefinition: "DESTINYSOCKETCATEGORYDEFINITION",
    DestinyStatDefinition: "DESTINYSTATDEFINITION",
}


def table_for(definition_type: Type[DestinyDefinition]) -> str:
    """Return the manifest table name for a definition model."""
    try:
        return DEFINITION_TABLES[definition_type]
    except KeyError as exc:
        raise ValueError(f"No manifest table registered for {definition_type.__name__}") from exc
