"""Reality data entity.

A RealityData holds the metadata of a dataset registered in the Reality Data
Service (point cloud, mesh, tileset...) and gives access to its files. The
files live in blob storage behind a signed container URL; the entity obtains
that URL through its client and caches it per access mode (see container.py).
"""

from __future__ import annotations

import copy
from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr
from pydantic.alias_generators import to_camel

from .blob_url import compose_blob_url
from .container import ContainerUrlResolver
from .errors import InvalidStateError
from .types import AccessMode, Acquisition, Extent

if TYPE_CHECKING:
    from .client import RealityDataAccessClient


class RealityData(BaseModel):
    """Reality data metadata plus cached blob access.

    Instances returned by RealityDataAccessClient are already attached to
    that client. Instances built by hand must be attached before requesting
    blob URLs.

    Attributes:
        id: Reality data identifier (GUID); None until created on the service
        display_name: Name shown to users
        dataset: Dataset name, free text
        group: Group identifier, free text
        data_center_location: Azure region holding the data, e.g. "East US"
        description: Free text description
        root_document: Path of the root file inside the container, e.g. "tileset.json"
        acquisition: Capture dates and acquirer
        size: Size in kilobytes
        authoring: Whether the data is being authored (not yet finalized)
        classification: "Terrain", "Imagery", "Pinned", "Model" or "Undefined"
        type: Data format, e.g. "3MX", "Cesium3DTiles", "LAS"
        extent: Geographic bounding box
        access_control: Access control mode reported by the service
        modified_date_time: Last modification time
        last_accessed_date_time: Last access time
        created_date_time: Creation time
        owner_id: Identifier of the owning user
        project_id: Project used for access permissions; not sent in the body
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    id: Optional[str] = None
    display_name: Optional[str] = None
    dataset: Optional[str] = None
    group: Optional[str] = None
    data_center_location: Optional[str] = None
    description: Optional[str] = None
    root_document: Optional[str] = None
    acquisition: Optional[Acquisition] = None
    size: Optional[int] = None
    authoring: Optional[bool] = None
    classification: Optional[str] = None
    type: Optional[str] = None
    extent: Optional[Extent] = None
    access_control: Optional[str] = None
    modified_date_time: Optional[datetime] = None
    last_accessed_date_time: Optional[datetime] = None
    created_date_time: Optional[datetime] = None
    owner_id: Optional[str] = None

    project_id: Optional[str] = Field(default=None, exclude=True)

    _client: Any = PrivateAttr(default=None)
    _resolver: ContainerUrlResolver = PrivateAttr(default_factory=ContainerUrlResolver)

    @classmethod
    def from_api(
        cls,
        data: Dict[str, Any],
        client: Optional["RealityDataAccessClient"] = None,
        project_id: Optional[str] = None,
    ) -> "RealityData":
        """Build from the ``realityData`` object of an API response."""
        reality_data = cls.model_validate(data)
        reality_data.project_id = project_id
        if client is not None:
            reality_data.attach(client)
        return reality_data

    def to_api(self) -> Dict[str, Any]:
        """Serialize to the camelCase body expected by create and modify."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def __eq__(self, other: Any) -> bool:
        """Equal when metadata and project match; client and cache are ignored."""
        if not isinstance(other, RealityData):
            return NotImplemented
        return self.model_dump() == other.model_dump() and self.project_id == other.project_id

    def __copy__(self) -> "RealityData":
        # model_copy() shares private attributes by reference
        copied = super().__copy__()
        copied._resolver = copy.copy(self._resolver)
        return copied

    def __getstate__(self) -> Dict[Any, Any]:
        # Unpickled instances come back detached, with an empty cache
        state = super().__getstate__()
        private = dict(state.get("__pydantic_private__") or {})
        private["_client"] = None
        state["__pydantic_private__"] = private
        return state

    @property
    def client(self) -> Optional["RealityDataAccessClient"]:
        return self._client

    def attach(self, client: "RealityDataAccessClient", project_id: Optional[str] = None) -> "RealityData":
        """Bind the client used to obtain container URLs.

        The container cache is kept; URLs already cached remain valid.
        """
        self._client = client
        if project_id is not None:
            self.project_id = project_id
        return self

    def get_blob_url(
        self,
        access_token: str,
        blob_path: Optional[str] = None,
        write_access: bool = False,
        now: Optional[datetime] = None,
    ) -> str:
        """Get the URL of a blob of this reality data.

        Args:
            access_token: Token used if the container URL must be (re)fetched
            blob_path: Path of the blob inside the container; None returns the
                container URL itself
            write_access: Request a write-enabled URL instead of read-only
            now: Evaluation instant, defaults to the client's clock

        Returns:
            Signed URL usable directly against blob storage

        Raises:
            InvalidStateError: If id or client is missing
            ContainerResolutionError: If the container URL request fails
        """
        container_url = self.get_container_url(access_token, write_access=write_access, now=now)
        return compose_blob_url(container_url, blob_path)

    def get_container_url(
        self,
        access_token: str,
        write_access: bool = False,
        now: Optional[datetime] = None,
    ) -> str:
        """Get the signed container URL, from cache while it is fresh."""
        if not self.id:
            raise InvalidStateError("reality data id is not set")
        if self._client is None:
            raise InvalidStateError(
                f"reality data {self.id} is not attached to a RealityDataAccessClient"
            )
        if now is None:
            now = self._client.clock()
        return self._resolver.resolve(
            self._client,
            access_token,
            self.id,
            self.project_id,
            mode=AccessMode.from_write_access(write_access),
            now=now,
        )


__all__ = ["RealityData"]
