"""Client for the Reality Data Service REST API.

RealityDataAccessClient lists, fetches, creates, modifies and deletes reality
data registered against projects, and implements the ContainerFetcher port
used by RealityData to obtain signed blob container URLs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from urllib.parse import parse_qs, urlsplit

import httpx

from .auth import authorization_header
from .config import RealityDataClientOptions
from .container import Clock, redact_url, utc_now
from .errors import ApiRequestError, ContainerResolutionError, InvalidStateError
from .reality_data import RealityData
from .types import AccessMode, Extent
from .version import CLIENT_VERSION

log = logging.getLogger(__name__)

# Service-side cap on $top
MAX_TOP = 500


@dataclass(frozen=True)
class RealityDataQueryCriteria:
    """Criteria for listing reality data.

    Attributes:
        top: Maximum number of results per page (1..500)
        continuation_token: Token from a previous response to fetch the next page
        extent: Only return reality data intersecting this extent
    """
    top: Optional[int] = None
    continuation_token: Optional[str] = None
    extent: Optional[Extent] = None

    def __post_init__(self):
        if self.top is not None and not 1 <= self.top <= MAX_TOP:
            raise ValueError(f"top must be between 1 and {MAX_TOP}, got {self.top}")
        if self.extent is not None:
            for point in (self.extent.south_west, self.extent.north_east):
                if not -90.0 <= point.latitude <= 90.0:
                    raise ValueError(f"latitude must be within [-90, 90], got {point.latitude}")
                if not -180.0 <= point.longitude <= 180.0:
                    raise ValueError(f"longitude must be within [-180, 180], got {point.longitude}")


@dataclass(frozen=True)
class RealityDataResponse:
    """One page of reality data.

    continuation_token is None on the last page.
    """
    reality_datas: List[RealityData] = field(default_factory=list)
    continuation_token: Optional[str] = None


@dataclass(frozen=True)
class Project:
    """Project associated with a reality data."""
    id: str
    project_details_link: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Project":
        link = ((data.get("_links") or {}).get("self") or {}).get("href")
        return cls(id=data["id"], project_details_link=link)


def _error_message(response: httpx.Response) -> str:
    """Extract the human-readable message of an API error response."""
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return error["message"]
        if body.get("message"):
            return body["message"]
    return response.text or response.reason_phrase


def _continuation_token(body: Dict[str, Any]) -> Optional[str]:
    """Pull the continuationToken query parameter out of ``_links.next.href``."""
    next_href = ((body.get("_links") or {}).get("next") or {}).get("href")
    if not next_href:
        return None
    values = parse_qs(urlsplit(next_href).query).get("continuationToken")
    return values[0] if values else None


class RealityDataAccessClient:
    """Client wrapper to the Reality Data Service.

    Args:
        options: Endpoint and version; defaults target production
        http_client: Pre-configured httpx client; when omitted the client
            creates and owns one
        clock: Source of "now" for container URL freshness
    """

    def __init__(
        self,
        options: Optional[RealityDataClientOptions] = None,
        http_client: Optional[httpx.Client] = None,
        clock: Optional[Clock] = None,
    ):
        self.options = options or RealityDataClientOptions()
        self.base_url = self.options.resolved_base_url()
        self.clock = clock or utc_now
        self._owns_http = http_client is None
        self._http = http_client or httpx.Client(timeout=self.options.timeout)

    def close(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> "RealityDataAccessClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __deepcopy__(self, memo) -> "RealityDataAccessClient":
        # Deep copies of attached entities keep using this connection pool
        return self

    # Request plumbing

    def _headers(self, access_token: str, return_representation: bool = False) -> Dict[str, str]:
        headers = {
            "Authorization": authorization_header(access_token),
            "Content-Type": "application/json",
            "User-Agent": f"RealityData Client (Python) v{CLIENT_VERSION}",
            "Accept": self.options.accept_media_type,
        }
        if return_representation:
            headers["Prefer"] = "return=representation"
        return headers

    def _send(
        self,
        method: str,
        url: str,
        access_token: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
        return_representation: bool = False,
    ) -> httpx.Response:
        """Issue a request; raise ApiRequestError on transport failure or non-2xx."""
        log.debug("%s %s", method, url)
        try:
            response = self._http.request(
                method,
                url,
                params=params,
                json=json,
                headers=self._headers(access_token, return_representation),
            )
        except httpx.HTTPError as exc:
            raise ApiRequestError(None, str(exc)) from exc
        if not response.is_success:
            raise ApiRequestError(response.status_code, _error_message(response))
        return response

    @staticmethod
    def _json(response: httpx.Response) -> Dict[str, Any]:
        try:
            body = response.json()
        except ValueError as exc:
            raise ApiRequestError(response.status_code, "API returned a non-JSON response") from exc
        if not isinstance(body, dict):
            raise ApiRequestError(response.status_code, "API returned an unexpected response")
        return body

    @staticmethod
    def _reality_data_body(response: httpx.Response, body: Dict[str, Any]) -> Dict[str, Any]:
        data = body.get("realityData")
        if not isinstance(data, dict):
            raise ApiRequestError(response.status_code, "API returned an unexpected response")
        return data

    # Metadata operations

    def get_reality_data_url(self, project_id: Optional[str], reality_data_id: str) -> str:
        """URL of a reality data's details.

        Args:
            project_id: Project identifier, may be None
            reality_data_id: Reality data identifier

        Returns:
            ``{base}/{id}?projectId={project}`` or ``{base}/{id}/`` without project
        """
        if project_id:
            return f"{self.base_url}/{reality_data_id}?projectId={project_id}"
        return f"{self.base_url}/{reality_data_id}/"

    def get_reality_data(
        self,
        access_token: str,
        project_id: Optional[str],
        reality_data_id: str,
    ) -> RealityData:
        """Get a reality data with all of its properties.

        Args:
            access_token: Token authorizing the request
            project_id: Project used for access permissions, may be None
            reality_data_id: Reality data identifier

        Returns:
            RealityData attached to this client

        Raises:
            ApiRequestError: If the request fails
        """
        response = self._send("GET", self.get_reality_data_url(project_id, reality_data_id), access_token)
        data = self._reality_data_body(response, self._json(response))
        return RealityData.from_api(data, client=self, project_id=project_id)

    def get_reality_datas(
        self,
        access_token: str,
        project_id: Optional[str],
        criteria: Optional[RealityDataQueryCriteria] = None,
    ) -> RealityDataResponse:
        """List one page of reality data, optionally filtered.

        Pass the returned continuation_token in a new criteria to get the
        next page.
        """
        criteria = criteria or RealityDataQueryCriteria()
        params: Dict[str, Any] = {}
        if project_id:
            params["projectId"] = project_id
        if criteria.top is not None:
            params["$top"] = criteria.top
        if criteria.continuation_token:
            params["continuationToken"] = criteria.continuation_token
        if criteria.extent is not None:
            params["extent"] = criteria.extent.to_query_value()

        response = self._send("GET", f"{self.base_url}/", access_token, params=params)
        body = self._json(response)
        items = body.get("realityData") or []
        reality_datas = [RealityData.from_api(item, client=self, project_id=project_id) for item in items]
        return RealityDataResponse(
            reality_datas=reality_datas,
            continuation_token=_continuation_token(body),
        )

    def create_reality_data(
        self,
        access_token: str,
        project_id: Optional[str],
        reality_data: RealityData,
    ) -> RealityData:
        """Register a new reality data and return it as stored by the service."""
        payload: Dict[str, Any] = {"realityData": reality_data.to_api()}
        if project_id:
            payload["projectId"] = project_id
        response = self._send(
            "POST",
            f"{self.base_url}/",
            access_token,
            json=payload,
            return_representation=True,
        )
        data = self._reality_data_body(response, self._json(response))
        created = RealityData.from_api(data, client=self, project_id=project_id)
        log.info("Created reality data %s", created.id)
        return created

    def modify_reality_data(
        self,
        access_token: str,
        project_id: Optional[str],
        reality_data: RealityData,
    ) -> RealityData:
        """Update the properties of an existing reality data.

        Raises:
            InvalidStateError: If reality_data has no id
            ApiRequestError: If the request fails
        """
        if not reality_data.id:
            raise InvalidStateError("reality data id is not set")
        body = reality_data.to_api()
        body.pop("id", None)
        response = self._send(
            "PATCH",
            f"{self.base_url}/{reality_data.id}",
            access_token,
            json={"realityData": body},
            return_representation=True,
        )
        data = self._reality_data_body(response, self._json(response))
        return RealityData.from_api(data, client=self, project_id=project_id)

    def delete_reality_data(self, access_token: str, reality_data_id: str) -> bool:
        """Delete a reality data and its files. Returns True on 204."""
        response = self._send("DELETE", f"{self.base_url}/{reality_data_id}", access_token)
        log.info("Deleted reality data %s", reality_data_id)
        return response.status_code == 204

    def get_reality_data_projects(self, access_token: str, reality_data_id: str) -> List[Project]:
        """List the projects a reality data is associated with."""
        response = self._send("GET", f"{self.base_url}/{reality_data_id}/projects", access_token)
        body = self._json(response)
        return [Project.from_api(item) for item in body.get("projects") or []]

    # ContainerFetcher port

    def fetch_container_url(
        self,
        access_token: str,
        reality_data_id: str,
        project_id: Optional[str],
        mode: AccessMode,
    ) -> str:
        """Request a new signed container URL for a reality data.

        Raises:
            ContainerResolutionError: On non-success status, transport failure,
                or a response without an absolute ``container._links.containerUrl.href``
        """
        params: Dict[str, Any] = {}
        if project_id:
            params["projectId"] = project_id
        params["permissions"] = mode.value
        url = f"{self.base_url}/{reality_data_id}/container/"

        try:
            response = self._send("GET", url, access_token, params=params)
            body = self._json(response)
        except ApiRequestError as exc:
            log.warning(
                "Container request failed for %s (%s): status=%s",
                reality_data_id, mode.value, exc.status_code,
            )
            raise ContainerResolutionError(reality_data_id, mode, exc.status_code, exc.message) from exc

        try:
            href = body["container"]["_links"]["containerUrl"]["href"]
        except (KeyError, TypeError):
            href = None
        parts = urlsplit(href) if isinstance(href, str) else None
        if parts is None or not parts.scheme or not parts.netloc:
            log.warning("Container response for %s (%s) has no container URL", reality_data_id, mode.value)
            raise ContainerResolutionError(
                reality_data_id, mode, response.status_code, "API returned an unexpected response"
            )

        log.debug("Obtained %s container %s", mode.value, redact_url(href))
        return href


__all__ = [
    "RealityDataAccessClient",
    "RealityDataQueryCriteria",
    "RealityDataResponse",
    "Project",
    "MAX_TOP",
]
