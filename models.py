# pylint: disable=line-too-long, invalid-name
"""
Models for the Destiny 2 platform API.

This module defines Pydantic models for request bodies and response payloads exchanged with Bungie.net.
Includes:
- ResponseEnvelope: the ErrorCode/ErrorStatus/Response wrapper every call returns.
- Manifest: location metadata for the current content database.
- Profile, character and item response shapes (component sections are kept as raw dicts).
- EquipItemRequest, EquipItemsRequest: explicit bodies for the two equip actions.
- DestinyEquipItemResult, DestinyEquipItemResponse: per-item equip outcomes.
- ApiResult: explicit success / transport error / API error result of a call.
"""
from dataclasses import dataclass
from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict

from constants import BUNGIE_SUCCESS_CODE

T = TypeVar("T")


# --- Envelope ---
class ResponseEnvelope(BaseModel):
    """
    Pydantic model for the wrapper around every Bungie API response.

    Attributes:
        ErrorCode (int): PlatformErrorCodes value; 1 means success.
        ErrorStatus (str): Symbolic name of the error code.
        Message (str): Human readable message.
        Response (Any): Payload; only trustworthy when ErrorCode is 1.
    """
    ErrorCode: int
    ErrorStatus: str = ""
    Message: str = ""
    ThrottleSeconds: int = 0
    Response: Any = None

    @property
    def is_success(self) -> bool:
        """True when the envelope carries a usable payload."""
        return self.ErrorCode == BUNGIE_SUCCESS_CODE


# --- Manifest ---
class Manifest(BaseModel):
    """
    Pydantic model for the Destiny2/Manifest payload.

    Attributes:
        version (str): Content version identifier.
        mobileWorldContentPaths (Dict[str, str]): Language -> relative path of the zipped SQLite content.
        jsonWorldContentPaths (Dict[str, str]): Language -> relative path of the JSON content.
    """
    model_config = ConfigDict(extra="allow")

    version: str = ""
    mobileAssetContentPath: Optional[str] = None
    mobileGearAssetDataBases: List[Dict[str, Any]] = []
    mobileWorldContentPaths: Dict[str, str] = {}
    jsonWorldContentPaths: Dict[str, str] = {}
    mobileClanBannerDatabasePath: Optional[str] = None
    mobileGearCDN: Dict[str, str] = {}
    iconImagePyramidInfo: List[Dict[str, Any]] = []


# --- Profiles ---
class UserInfoCard(BaseModel):
    """Pydantic model for a membership summary on a given platform."""
    model_config = ConfigDict(extra="allow")

    membershipId: int = 0
    membershipType: int = 0
    displayName: str = ""
    bungieGlobalDisplayName: Optional[str] = None
    bungieGlobalDisplayNameCode: Optional[int] = None
    crossSaveOverride: int = 0
    applicableMembershipTypes: List[int] = []
    isPublic: bool = False
    iconPath: Optional[str] = None


class DestinyProfileUserInfoCard(UserInfoCard):
    """Pydantic model for a Destiny profile linked to a Bungie.net account."""
    dateLastPlayed: Optional[str] = None
    isOverridden: bool = False
    isCrossSavePrimary: bool = False


class DestinyLinkedProfilesResponse(BaseModel):
    """
    Pydantic model for the LinkedProfiles payload.

    Attributes:
        profiles (List[DestinyProfileUserInfoCard]): Destiny profiles linked to the account.
        bnetMembership (Optional[UserInfoCard]): The Bungie.net membership itself.
        profilesWithErrors (List[Dict[str, Any]]): Profiles that could not be loaded.
    """
    model_config = ConfigDict(extra="allow")

    profiles: List[DestinyProfileUserInfoCard] = []
    bnetMembership: Optional[UserInfoCard] = None
    profilesWithErrors: List[Dict[str, Any]] = []


class DestinyProfileResponse(BaseModel):
    """
    Pydantic model for the GetProfile payload.

    Only the component sections requested through ``components`` are present;
    each is kept as the raw ``{"data": ..., "privacy": ...}`` dict.
    """
    model_config = ConfigDict(extra="allow")

    responseMintedTimestamp: Optional[str] = None
    profile: Optional[Dict[str, Any]] = None
    profileInventory: Optional[Dict[str, Any]] = None
    profileCurrencies: Optional[Dict[str, Any]] = None
    profileProgression: Optional[Dict[str, Any]] = None
    characters: Optional[Dict[str, Any]] = None
    characterInventories: Optional[Dict[str, Any]] = None
    characterProgressions: Optional[Dict[str, Any]] = None
    characterActivities: Optional[Dict[str, Any]] = None
    characterEquipment: Optional[Dict[str, Any]] = None
    itemComponents: Optional[Dict[str, Any]] = None


class DestinyCharacterResponse(BaseModel):
    """Pydantic model for the GetCharacter payload (raw component sections)."""
    model_config = ConfigDict(extra="allow")

    character: Optional[Dict[str, Any]] = None
    inventory: Optional[Dict[str, Any]] = None
    equipment: Optional[Dict[str, Any]] = None
    progressions: Optional[Dict[str, Any]] = None
    activities: Optional[Dict[str, Any]] = None
    renderData: Optional[Dict[str, Any]] = None
    itemComponents: Optional[Dict[str, Any]] = None


class DestinyItemResponse(BaseModel):
    """Pydantic model for the GetItem payload (raw component sections)."""
    model_config = ConfigDict(extra="allow")

    characterId: Optional[int] = None
    item: Optional[Dict[str, Any]] = None
    instance: Optional[Dict[str, Any]] = None
    objectives: Optional[Dict[str, Any]] = None
    perks: Optional[Dict[str, Any]] = None
    renderData: Optional[Dict[str, Any]] = None
    stats: Optional[Dict[str, Any]] = None
    sockets: Optional[Dict[str, Any]] = None
    reusablePlugs: Optional[Dict[str, Any]] = None
    plugObjectives: Optional[Dict[str, Any]] = None


# --- Equip actions ---
class EquipItemRequest(BaseModel):
    """Body of Destiny2/Actions/Items/EquipItem."""
    itemId: int
    characterId: int
    membershipType: int


class EquipItemsRequest(BaseModel):
    """Body of Destiny2/Actions/Items/EquipItems."""
    itemIds: List[int]
    characterId: int
    membershipType: int


class DestinyEquipItemResult(BaseModel):
    """
    Outcome of equipping a single item.

    Attributes:
        itemInstanceId (int): Instance ID of the item the result refers to.
        equipStatus (int): PlatformErrorCodes value for this item; 1 means equipped.
    """
    itemInstanceId: int
    equipStatus: int


class DestinyEquipItemResponse(BaseModel):
    """EquipItems payload; results keep the order of the requested item IDs."""
    equipResults: List[DestinyEquipItemResult] = []


# --- Call results ---
@dataclass
class ApiResult(Generic[T]):
    """
    Result of a single Bungie API call.

    Exactly one of three shapes:
        - success: ``error_kind`` is None and ``value`` holds the payload
        - transport error: ``error_kind == "transport"``, ``detail`` holds the exception text
        - API error: ``error_kind == "api"``, ``error_code``/``error_status`` come from the envelope
    """
    value: Optional[T] = None
    error_kind: Optional[str] = None
    error_code: Optional[int] = None
    error_status: str = ""
    detail: str = ""

    TRANSPORT = "transport"
    API = "api"

    @property
    def ok(self) -> bool:
        return self.error_kind is None

    def value_or(self, default: T) -> T:
        """Return the payload on success, otherwise ``default``."""
        if self.ok and self.value is not None:
            return self.value
        return default

    @classmethod
    def success(cls, value: T) -> "ApiResult[T]":
        return cls(value=value, error_code=BUNGIE_SUCCESS_CODE, error_status="Success")

    @classmethod
    def transport_error(cls, detail: str) -> "ApiResult[T]":
        return cls(error_kind=cls.TRANSPORT, detail=detail)

    @classmethod
    def api_error(cls, error_code: int, error_status: str, detail: str = "") -> "ApiResult[T]":
        return cls(error_kind=cls.API, error_code=error_code, error_status=error_status, detail=detail)
