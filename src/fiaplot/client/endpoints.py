"""Route tables for the two layouts the plotting service is deployed with."""

from __future__ import annotations

from dataclasses import dataclass

FIND_FILE_ROUTE = "/find_file/instrument/{instrument}/experiment_number/{experiment_number}"


@dataclass(frozen=True)
class Endpoints:
    meta: str
    paths: str
    attributes: str
    data: str
    find_file: str = FIND_FILE_ROUTE

    def find_file_route(self, instrument: str, experiment_number: int) -> str:
        return self.find_file.format(instrument=instrument, experiment_number=experiment_number)


PLOTTING_SERVICE = Endpoints(meta="/meta/", paths="/paths/", attributes="/attr/", data="/data/")

H5GROVE = Endpoints(meta="/h5grove/meta", paths="/h5grove/paths", attributes="/h5grove/attr", data="/data")

_STYLES = {"plotting": PLOTTING_SERVICE, "h5grove": H5GROVE}


def get_endpoints(style: str) -> Endpoints:
    try:
        return _STYLES[style]
    except KeyError:
        raise ValueError(f"Unknown API style '{style}'. Must be one of: {', '.join(_STYLES)}") from None


__all__ = ["Endpoints", "PLOTTING_SERVICE", "H5GROVE", "get_endpoints"]
