from __future__ import annotations

import logging
from typing import List, Optional

import requests
from requests import RequestException

from poi_browser.config import (
    DEFAULT_GEOCODER_URL,
    DEFAULT_TIMEOUT_S,
    DEFAULT_USER_AGENT,
    SEARCH_LIMIT,
    SEARCH_MIN_CHARS,
)
from poi_browser.models import AddressSuggestion, Coordinate


logger = logging.getLogger(__name__)


class GeocodingError(Exception):
    """The lookup service could not be reached or answered with garbage."""


def _coerce_float(value: object) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _feature_coordinate(feature: object) -> Coordinate | None:
    if not isinstance(feature, dict):
        return None
    geometry = feature.get("geometry")
    if not isinstance(geometry, dict):
        return None
    coordinates = geometry.get("coordinates")
    if not isinstance(coordinates, (list, tuple)) or len(coordinates) < 2:
        return None

    # GeoJSON order is [lon, lat].
    lon = _coerce_float(coordinates[0])
    lat = _coerce_float(coordinates[1])
    if lat is None or lon is None:
        return None
    coord = Coordinate(lat, lon)
    if not coord.is_finite():
        return None
    return coord


def _query_features(
    query: str,
    session: requests.Session,
    user_agent: str,
    limit: int,
    timeout_s: float,
    url: str,
) -> list:
    params = {"q": query, "limit": limit}
    headers = {"User-Agent": user_agent}

    try:
        resp = session.get(url, params=params, headers=headers, timeout=timeout_s)
        resp.raise_for_status()
        data = resp.json()
    except RequestException as exc:
        raise GeocodingError(f"Lookup failed for {query!r}: {exc}") from exc
    except ValueError as exc:
        raise GeocodingError(f"Lookup for {query!r} returned invalid JSON") from exc

    if not isinstance(data, dict) or not isinstance(data.get("features"), list):
        raise GeocodingError(f"Lookup for {query!r} returned no feature collection")
    return data["features"]


def fetch_coordinates(
    address: str,
    session: requests.Session,
    user_agent: str = DEFAULT_USER_AGENT,
    timeout_s: float = DEFAULT_TIMEOUT_S,
    url: str = DEFAULT_GEOCODER_URL,
) -> Optional[Coordinate]:
    features = _query_features(
        query=address,
        session=session,
        user_agent=user_agent,
        limit=1,
        timeout_s=timeout_s,
        url=url,
    )
    if not features:
        logger.info("No coordinates found for address: %s", address)
        return None

    coord = _feature_coordinate(features[0])
    if coord is None:
        raise GeocodingError(f"First match for {address!r} has no usable geometry")
    return coord


def search_addresses(
    query: str,
    session: requests.Session,
    user_agent: str = DEFAULT_USER_AGENT,
    limit: int = SEARCH_LIMIT,
    timeout_s: float = DEFAULT_TIMEOUT_S,
    url: str = DEFAULT_GEOCODER_URL,
) -> List[AddressSuggestion]:
    if len(query.strip()) < SEARCH_MIN_CHARS:
        return []

    features = _query_features(
        query=query,
        session=session,
        user_agent=user_agent,
        limit=limit,
        timeout_s=timeout_s,
        url=url,
    )

    suggestions: List[AddressSuggestion] = []
    for feature in features:
        coord = _feature_coordinate(feature)
        if coord is None:
            continue
        props = feature.get("properties") or {}
        label = props.get("label") or query
        suggestions.append(AddressSuggestion(label=str(label), position=coord))
    return suggestions
