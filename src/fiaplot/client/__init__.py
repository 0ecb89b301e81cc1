"""HTTP access to the FIA plotting service."""

from fiaplot.client.auth import AuthSession, AuthState
from fiaplot.client.endpoints import H5GROVE, PLOTTING_SERVICE, Endpoints, get_endpoints
from fiaplot.client.payloads import AttributePayload, EntityPayload
from fiaplot.client.plotting import DEFAULT_TIMEOUT, PlottingServiceClient

__all__ = [
    "AttributePayload",
    "AuthSession",
    "AuthState",
    "DEFAULT_TIMEOUT",
    "EntityPayload",
    "Endpoints",
    "H5GROVE",
    "PLOTTING_SERVICE",
    "PlottingServiceClient",
    "get_endpoints",
]
