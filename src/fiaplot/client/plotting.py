"""Async HTTP client for the FIA plotting service."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx
import numpy as np

from fiaplot import logger
from fiaplot.discovery.models import EntityMetadata
from fiaplot.exceptions import DataFetchError, MetadataFetchError, PathEnumerationError

from .auth import AuthSession
from .endpoints import PLOTTING_SERVICE, Endpoints, get_endpoints
from .payloads import EntityPayload

DEFAULT_TIMEOUT = 30.0


class PlottingServiceClient:
    """
    Client for the plotting service's HDF5 endpoints.

    Implements the ``MetadataFetchClient`` protocol used by discovery and
    the data lookups the presentation layer needs once a dataset is chosen.
    Requests rejected with 403 wait on the :class:`AuthSession` and are
    retried after a successful token refresh.

    Example:
        >>> async with PlottingServiceClient("https://plotting.example") as client:
        ...     paths = await client.list_paths("/archive/run.nxs")
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        endpoints: Endpoints = PLOTTING_SERVICE,
        auth_session: Optional[AuthSession] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        max_auth_retries: int = 1,
    ) -> None:
        self.base_url = base_url
        self.endpoints = endpoints
        self.auth_session = auth_session or AuthSession()
        self.max_auth_retries = max_auth_retries
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )
        logger.debug(f"Initialized PlottingServiceClient for {base_url} (timeout={timeout}s)")

    @classmethod
    def from_settings(cls, settings, **kwargs: Any) -> "PlottingServiceClient":
        """Build a client from :class:`fiaplot.config.PlottingSettings`."""
        kwargs.setdefault(
            "auth_session",
            AuthSession(settings.auth_token, dev_mode=settings.dev_mode),
        )
        return cls(
            settings.plotting_api_url,
            timeout=settings.timeout,
            endpoints=get_endpoints(settings.api_style),
            **kwargs,
        )

    async def __aenter__(self) -> "PlottingServiceClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get(self, route: str, params: Optional[Dict[str, Any]] = None) -> Any:
        attempts = 0
        while True:
            response = await self._client.get(
                route,
                params=params,
                headers=self.auth_session.authorization_header(),
            )
            if response.status_code == 403 and attempts < self.max_auth_retries:
                attempts += 1
                error = httpx.HTTPStatusError(
                    f"403 Forbidden for {response.request.url}",
                    request=response.request,
                    response=response,
                )
                await self.auth_session.wait_for_refresh(error)
                continue
            response.raise_for_status()
            return response.json()

    async def list_paths(self, file: str) -> List[str]:
        """Return every searchable path in ``file``."""
        try:
            paths = await self._get(self.endpoints.paths, {"file": file})
        except (httpx.HTTPError, ValueError) as exc:
            logger.error(f"Error fetching paths for {file}: {exc}")
            raise PathEnumerationError(
                f"Failed to fetch paths for {file}",
                context={"file": file, "original_error": repr(exc)},
            ) from exc

        if not isinstance(paths, list) or not all(isinstance(path, str) for path in paths):
            logger.error(f"Unexpected path listing for {file}: {type(paths).__name__}")
            raise PathEnumerationError(
                f"Path listing for {file} is not a list of strings",
                context={"file": file},
            )
        return paths

    async def get_entity_metadata(self, file: str, path: str = "/") -> EntityMetadata:
        """Return metadata for the entity at ``path`` in ``file``."""
        try:
            payload = await self._get(self.endpoints.meta, {"file": file, "path": path})
            return EntityPayload.model_validate(payload).to_metadata(path)
        except (httpx.HTTPError, ValueError, TypeError) as exc:
            # pydantic.ValidationError is a ValueError
            logger.debug(f"Error fetching metadata for {file}:{path}: {exc}")
            raise MetadataFetchError(
                f"Failed to fetch metadata for {path}",
                context={"file": file, "path": path, "original_error": repr(exc)},
            ) from exc

    async def fetch_attributes(self, file: str, path: str) -> Dict[str, Any]:
        """Return the attribute values of ``path``; errors give an empty mapping."""
        try:
            attributes = await self._get(self.endpoints.attributes, {"file": file, "path": path})
        except (httpx.HTTPError, ValueError) as exc:
            logger.error(f"Error fetching attributes for {file}:{path}: {exc}")
            return {}
        if not isinstance(attributes, dict):
            logger.error(f"Unexpected attributes payload for {file}:{path}: {type(attributes).__name__}")
            return {}
        return attributes

    async def _fetch_series(self, file: str, path: str, selection: Optional[int], what: str) -> np.ndarray:
        params: Dict[str, Any] = {"file": file, "path": path}
        if selection is not None:
            params["selection"] = str(selection)
        try:
            values = await self._get(self.endpoints.data, params)
        except (httpx.HTTPError, ValueError) as exc:
            logger.error(f"Error fetching {what} for file {file}: {exc}")
            raise DataFetchError(
                f"Failed to fetch {what} for {path}",
                context={"file": file, "path": path, "selection": selection, "original_error": repr(exc)},
            ) from exc

        try:
            array = np.asarray(values, dtype=float)
        except (TypeError, ValueError) as exc:
            raise DataFetchError(
                f"Response for {path} is not a numeric series",
                error_code="DATA_002",
                context={"file": file, "path": path},
            ) from exc
        return array.ravel()

    async def fetch_data_1d(self, file: str, path: str, selection: Optional[int] = None) -> np.ndarray:
        """
        Fetch a 1D series for line plots.

        Args:
            file: Full path of the file on the service
            path: Dataset path inside the file
            selection: Row index when slicing a 2D dataset; omit for 1D datasets
        """
        return await self._fetch_series(file, path, selection, "1D data")

    async def fetch_error_data(self, file: str, error_path: str, selection: Optional[int] = None) -> np.ndarray:
        """Fetch the error series drawn as error bars."""
        return await self._fetch_series(file, error_path, selection, "error data")

    async def fetch_file_path(self, filename: str, instrument_name: str, experiment_number: int) -> str:
        """Resolve the full path of ``filename`` for an instrument and experiment."""
        route = self.endpoints.find_file_route(instrument_name, experiment_number)
        try:
            full_path = await self._get(route, {"filename": filename})
        except (httpx.HTTPError, ValueError) as exc:
            logger.error(f"Error fetching file path for {filename}: {exc}")
            raise DataFetchError(
                f"Failed to resolve file path for {filename}",
                context={
                    "filename": filename,
                    "instrument": instrument_name,
                    "experiment_number": experiment_number,
                    "original_error": repr(exc),
                },
            ) from exc
        if not isinstance(full_path, str):
            raise DataFetchError(
                f"File path for {filename} is not a string",
                error_code="DATA_002",
                context={"filename": filename},
            )
        return full_path


__all__ = ["DEFAULT_TIMEOUT", "PlottingServiceClient"]
