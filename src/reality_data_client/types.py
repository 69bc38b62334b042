"""Core value types shared by the client and the reality data entity."""

import enum
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class AccessMode(enum.Enum):
    """Blob container permission.

    The value is the permission string sent to the container endpoint.
    """
    READ = "Read"
    WRITE = "Write"

    @classmethod
    def from_write_access(cls, write_access: bool) -> "AccessMode":
        return cls.WRITE if write_access else cls.READ


class _WireModel(BaseModel):
    """Base for models exchanged with the API in camelCase."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class Point(_WireModel):
    """Geographic point in degrees.

    Values reported by the service are taken as-is; ranges are only checked
    on query criteria.
    """

    latitude: float
    longitude: float


class Extent(_WireModel):
    """Geographic bounding box of a reality data."""

    south_west: Point
    north_east: Point

    def to_query_value(self) -> str:
        """Format as the ``extent`` query parameter: swLon,swLat,neLon,neLat."""
        return ",".join(
            str(v) for v in (
                self.south_west.longitude,
                self.south_west.latitude,
                self.north_east.longitude,
                self.north_east.latitude,
            )
        )


class Acquisition(_WireModel):
    """When and by whom the data was captured."""

    start_date_time: datetime
    end_date_time: Optional[datetime] = None
    acquirer: Optional[str] = None


__all__ = [
    "AccessMode",
    "Point",
    "Extent",
    "Acquisition",
]
