# pylint: disable=line-too-long
"""
Destiny2Client: typed access to the Bungie.net Destiny 2 platform API.

Responsibilities:
- Build ``{base_url}/Platform/{method}/`` URLs with a ``components`` query
- Attach per-request Authorization (Bearer) and X-API-Key headers
- Unwrap the ErrorCode/ErrorStatus/Response envelope into an ApiResult
- Degrade transport and API failures to a logged default value
- Stream manifest content files to disk
"""
import json
import logging
import os
import tempfile
from typing import Any, List, Optional, Sequence

import requests
from pydantic import TypeAdapter, ValidationError

from constants import (API_KEY, BUNGIE_BASE_URL, DESERIALIZATION_DEBUGGING,
                       DOWNLOAD_CHUNK_SIZE, REQUEST_TIMEOUT,
                       BungieMembershipType, DestinyComponentType)
from helpers import build_components_query, build_platform_url
from models import (ApiResult, DestinyCharacterResponse,
                    DestinyEquipItemResponse, DestinyEquipItemResult,
                    DestinyItemResponse, DestinyLinkedProfilesResponse,
                    DestinyProfileResponse, EquipItemRequest,
                    EquipItemsRequest, Manifest, ResponseEnvelope)


class Destiny2Client:
    """
    Client for the Destiny 2 endpoints of the Bungie.net platform API.

    Every request is built with its own headers, so one client can serve calls
    for different access tokens without them leaking into each other. The
    underlying requests.Session is only shared for connection pooling.
    """

    def __init__(
        self,
        base_url: str = BUNGIE_BASE_URL,
        api_key: Optional[str] = API_KEY,
        session: Optional[requests.Session] = None,
        timeout: float = REQUEST_TIMEOUT,
        logger: Optional[logging.Logger] = None,
        json_trace: Optional[logging.Logger] = None,
        deserialization_debugging: bool = DESERIALIZATION_DEBUGGING,
    ):
        """
        Initialize Destiny2Client with configuration and collaborators.

        Args:
            base_url (str): Bungie.net host; the Platform path is appended per call.
            api_key (str): Bungie application API key, sent as X-API-Key when set.
            session (requests.Session): HTTP session to issue requests through.
            timeout (float): Default request timeout in seconds.
            logger (logging.Logger): Logger for call and failure messages.
            json_trace (logging.Logger): Trace collector for deserialization diagnostics.
            deserialization_debugging (bool): Attach the trace collector from the start.
        """
        self._base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.session = session or requests.Session()
        self.timeout = timeout
        self.logger = logger or logging.getLogger("destiny2")
        self._json_trace = json_trace or logging.getLogger("destiny2.json")
        self._trace_writer: Optional[logging.Logger] = None
        self.deserialization_debugging = deserialization_debugging

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def deserialization_debugging(self) -> bool:
        """True while payloads and deserialization errors are written to the trace collector."""
        return self._trace_writer is not None

    @deserialization_debugging.setter
    def deserialization_debugging(self, value: bool) -> None:
        self._trace_writer = self._json_trace if value else None

    # --- Public API ---

    def get_manifest(self, timeout: Optional[float] = None) -> Optional[Manifest]:
        """
        Fetch the manifest index describing where the current content databases live.

        Returns:
            Manifest | None: Manifest metadata, or None if the call failed.
        """
        return self.call("GET", "Destiny2/Manifest", Manifest, timeout=timeout).value_or(None)

    def get_linked_profiles(
        self,
        access_token: Optional[str],
        membership_id: int,
        membership_type: BungieMembershipType = BungieMembershipType.BUNGIE_NEXT,
        timeout: Optional[float] = None,
    ) -> Optional[DestinyLinkedProfilesResponse]:
        """
        Fetch the Destiny profiles linked to a membership.

        Args:
            access_token (str): OAuth access token, or None for an anonymous call.
            membership_id (int): Bungie.net or Destiny membership ID.
            membership_type (BungieMembershipType): Platform of ``membership_id``.

        Returns:
            DestinyLinkedProfilesResponse | None: Linked profiles, or None if the call failed.
        """
        return self.call(
            "GET",
            f"Destiny2/{int(membership_type)}/Profile/{membership_id}/LinkedProfiles",
            DestinyLinkedProfilesResponse,
            access_token=access_token,
            timeout=timeout,
        ).value_or(None)

    def get_profile(
        self,
        access_token: Optional[str],
        membership_type: BungieMembershipType,
        membership_id: int,
        *components: DestinyComponentType,
        timeout: Optional[float] = None,
    ) -> Optional[DestinyProfileResponse]:
        """
        Fetch a Destiny profile with the requested components.

        With no components, only the Profiles (100) component is requested.

        Returns:
            DestinyProfileResponse | None: Profile sections, or None if the call failed.
        """
        if not components:
            components = (DestinyComponentType.PROFILES,)
        return self.call(
            "GET",
            f"Destiny2/{int(membership_type)}/Profile/{membership_id}",
            DestinyProfileResponse,
            access_token=access_token,
            query_items=[build_components_query(components)],
            timeout=timeout,
        ).value_or(None)

    def get_character_info(
        self,
        access_token: Optional[str],
        membership_type: BungieMembershipType,
        membership_id: int,
        character_id: int,
        *components: DestinyComponentType,
        timeout: Optional[float] = None,
    ) -> Optional[DestinyCharacterResponse]:
        """
        Fetch a single character with the requested components.

        Returns:
            DestinyCharacterResponse | None: Character sections, or None if the call failed.
        """
        return self.call(
            "GET",
            f"Destiny2/{int(membership_type)}/Profile/{membership_id}/Character/{character_id}",
            DestinyCharacterResponse,
            access_token=access_token,
            query_items=self._components_query(components),
            timeout=timeout,
        ).value_or(None)

    def get_item(
        self,
        access_token: Optional[str],
        membership_type: BungieMembershipType,
        membership_id: int,
        item_instance_id: int,
        *components: DestinyComponentType,
        timeout: Optional[float] = None,
    ) -> Optional[DestinyItemResponse]:
        """
        Fetch a single item instance with the requested components.

        Returns:
            DestinyItemResponse | None: Item sections, or None if the call failed.
        """
        return self.call(
            "GET",
            f"Destiny2/{int(membership_type)}/Profile/{membership_id}/Item/{item_instance_id}",
            DestinyItemResponse,
            access_token=access_token,
            query_items=self._components_query(components),
            timeout=timeout,
        ).value_or(None)

    def equip_item(
        self,
        access_token: Optional[str],
        membership_type: BungieMembershipType,
        character_id: int,
        item_instance_id: int,
        timeout: Optional[float] = None,
    ) -> int:
        """
        Equip one item on a character.

        Returns:
            int: Status returned by the API, or 0 if the call failed.
        """
        body = EquipItemRequest(itemId=item_instance_id, characterId=character_id, membershipType=int(membership_type))
        return self.call(
            "POST", "Destiny2/Actions/Items/EquipItem", int,
            access_token=access_token, body=body, timeout=timeout,
        ).value_or(0)

    def equip_items(
        self,
        access_token: Optional[str],
        membership_type: BungieMembershipType,
        character_id: int,
        item_instance_ids: Sequence[int],
        timeout: Optional[float] = None,
    ) -> List[DestinyEquipItemResult]:
        """
        Equip several items on a character in one call.

        Returns:
            List[DestinyEquipItemResult]: Per-item outcomes in request order, or an empty list if the call failed.
        """
        body = EquipItemsRequest(itemIds=list(item_instance_ids), characterId=character_id, membershipType=int(membership_type))
        response = self.call(
            "POST", "Destiny2/Actions/Items/EquipItems", DestinyEquipItemResponse,
            access_token=access_token, body=body, timeout=timeout,
        ).value_or(None)
        if response is None:
            return []
        return list(response.equipResults)

    def download_file(self, relative_path: str, destination: str, timeout: Optional[float] = None) -> bool:
        """
        Stream a file relative to the base URL to a local path.

        The content is written to a temporary file next to ``destination`` and moved into
        place only once the whole body has been copied, so a failed download never leaves
        a partial file behind and never clobbers an existing one.

        Args:
            relative_path (str): Path relative to the base URL, e.g. a mobileWorldContentPaths entry.
            destination (str): Local file path; overwritten on success.

        Returns:
            bool: True if the file was written, False otherwise.
        """
        url = f"{self._base_url}/{relative_path.lstrip('/')}"
        target_dir = os.path.dirname(os.path.abspath(destination))
        tmp_path = None
        try:
            with self.session.get(url, headers=self._headers(None), stream=True,
                                  timeout=timeout or self.timeout) as response:
                response.raise_for_status()
                with tempfile.NamedTemporaryFile(delete=False, mode="wb", dir=target_dir) as tmp_file:
                    tmp_path = tmp_file.name
                    for chunk in response.iter_content(chunk_size=DOWNLOAD_CHUNK_SIZE):
                        if chunk:
                            tmp_file.write(chunk)
            os.replace(tmp_path, destination)
            tmp_path = None
            return True
        except (requests.RequestException, OSError) as e:
            self.logger.error("Error downloading %s: %s", relative_path, e)
            return False
        finally:
            if tmp_path and os.path.exists(tmp_path):
                os.remove(tmp_path)

    # --- Request plumbing ---

    def call(
        self,
        http_method: str,
        api_method: str,
        result_type: Any,
        access_token: Optional[str] = None,
        body: Optional[Any] = None,
        query_items: Optional[Sequence[tuple[str, str]]] = None,
        timeout: Optional[float] = None,
    ) -> ApiResult:
        """
        Issue one platform API request and decode its envelope.

        Args:
            http_method (str): "GET" or "POST".
            api_method (str): Method path below /Platform/.
            result_type: Type the envelope's Response is validated into.
            access_token (str, optional): Sent as a Bearer token when given.
            body (pydantic.BaseModel, optional): JSON body for POST calls.
            query_items (Sequence[tuple[str, str]], optional): Query name/value pairs.
            timeout (float, optional): Overrides the client timeout for this call.

        Returns:
            ApiResult: Success with the typed payload, or a transport / API error.

        Raises:
            pydantic.ValidationError: If the envelope or payload cannot be deserialized.
        """
        url = build_platform_url(self._base_url, api_method, query_items)
        self.logger.info("Calling %s", url)
        payload = body.model_dump() if body is not None else None
        try:
            response = self.session.request(
                http_method,
                url,
                headers=self._headers(access_token),
                json=payload,
                timeout=timeout or self.timeout,
            )
            response.raise_for_status()
            raw = response.content
        except requests.RequestException as e:
            self.logger.error("Error calling %s: %s", api_method, e)
            return ApiResult.transport_error(str(e))

        envelope = self._deserialize(raw, ResponseEnvelope)
        if not envelope.is_success:
            self.logger.warning("Error Code: %s; Error Status: %s", envelope.ErrorCode, envelope.ErrorStatus)
            return ApiResult.api_error(envelope.ErrorCode, envelope.ErrorStatus, envelope.Message)
        return ApiResult.success(self._validate_payload(envelope.Response, result_type))

    def _headers(self, access_token: Optional[str]) -> dict:
        headers = {}
        if self.api_key:
            headers["X-API-Key"] = self.api_key
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        return headers

    @staticmethod
    def _components_query(components: Sequence[DestinyComponentType]) -> list[tuple[str, str]]:
        return [build_components_query(components)] if components else []

    def _deserialize(self, raw: bytes, model):
        if self._trace_writer:
            self._trace_writer.debug("Deserializing %s: %s", model.__name__, raw)
        try:
            return model.model_validate_json(raw)
        except ValidationError as e:
            if self._trace_writer:
                self._trace_writer.error("Failed to deserialize %s: %s", model.__name__, e)
            raise

    def _validate_payload(self, payload: Any, result_type: Any) -> Any:
        try:
            return TypeAdapter(result_type).validate_python(payload)
        except ValidationError as e:
            if self._trace_writer:
                self._trace_writer.error(
                    "Failed to deserialize Response as %s: %s; payload=%s",
                    getattr(result_type, "__name__", result_type), e, json.dumps(payload),
                )
            raise
