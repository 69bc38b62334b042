"""Port definitions between the blob URL cache and the API client.

The container cache never talks HTTP itself. It drives whatever implements
ContainerFetcher, which keeps the freshness logic testable without a network.
"""

from typing import Optional, Protocol

from .types import AccessMode


class ContainerFetcher(Protocol):
    """Secondary port - how the resolver obtains a signed container URL.

    RealityDataAccessClient is the production implementation.
    """

    def fetch_container_url(
        self,
        access_token: str,
        reality_data_id: str,
        project_id: Optional[str],
        mode: AccessMode,
    ) -> str:
        """Request a new signed container URL.

        Args:
            access_token: Token used to authorize the request
            reality_data_id: Reality data identifier
            project_id: Owning project, or None to rely on the token's scope
            mode: Permission requested for the container

        Returns:
            Absolute container URL whose query string is the access signature

        Raises:
            ContainerResolutionError: On bad status, transport failure or
                a response missing the container link
        """
        ...


__all__ = ["ContainerFetcher"]
