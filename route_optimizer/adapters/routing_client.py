from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from urllib.parse import urljoin

import logging

import requests


@dataclass(frozen=True)
class RoutingAPIContract:
  """Describes the HTTP endpoints exposed by the route optimizer."""

  base_url: str
  api_prefix: str = "/api"

  def url(self, endpoint: str) -> str:
    path = f"{self.api_prefix.rstrip('/')}/{endpoint.lstrip('/')}"
    return urljoin(self.base_url, path)


class RoutingClientError(RuntimeError):
  """Transport failure or a payload the server did not answer with JSON."""


class RoutingClient:
  """Thin wrapper over the route optimizer HTTP API, mirroring the web front end."""

  def __init__(
    self,
    api_contract: RoutingAPIContract,
    *,
    session: Optional[requests.Session] = None,
    logger: Optional[logging.Logger] = None,
    request_timeout_s: float = 5.0,
  ) -> None:
    self._api_contract = api_contract
    self._http_session = session or requests.Session()
    self._logger = logger or logging.getLogger(__name__)
    self._request_timeout_s = request_timeout_s

  def health(self) -> Dict[str, Any]:
    return self._request("GET", "health")

  def junctions(self) -> List[Dict[str, Any]]:
    return list(self._request("GET", "junctions").get("junctions", []))

  def search_junctions(self, name: str, limit: Optional[int] = None) -> List[Dict[str, Any]]:
    params: Dict[str, Any] = {"name": name}
    if limit is not None:
      params["limit"] = limit
    return list(self._request("GET", "junctions/search", params=params).get("junctions", []))

  def find_path(self, source: int, destination: int) -> Dict[str, Any]:
    """Returns the raw envelope; check ``success`` before reading ``path``."""
    return self._request("POST", "path", json={"source": source, "destination": destination})

  def update_traffic(self, from_id: int, to_id: int, multiplier: float) -> Dict[str, Any]:
    return self._request("POST", "traffic", json={"from": from_id, "to": to_id, "multiplier": multiplier})

  def reset_traffic(self) -> Dict[str, Any]:
    return self._request("POST", "traffic/reset")

  def close(self) -> None:
    self._http_session.close()

  def _request(self, method: str, endpoint: str, **kwargs: Any) -> Dict[str, Any]:
    url = self._api_contract.url(endpoint)
    try:
      response = self._http_session.request(
        method,
        url,
        headers={"accept": "application/json"},
        timeout=self._request_timeout_s,
        **kwargs,
      )
    except requests.RequestException as exc:
      self._logger.exception("%s %s failed", method, url)
      raise RoutingClientError(f"{method} {url} failed: {exc}") from exc

    try:
      payload = response.json()
    except ValueError as exc:
      raise RoutingClientError(f"{method} {url} returned non-JSON status {response.status_code}") from exc

    # Failure envelopes come back with 4xx/5xx; surface them as data, not errors.
    if not isinstance(payload, dict):
      raise RoutingClientError(f"{method} {url} returned an unexpected payload")
    if response.status_code >= 400 and "success" not in payload:
      raise RoutingClientError(f"{method} {url} failed with status {response.status_code}")
    return payload
