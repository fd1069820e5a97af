"""Road network documents and the built-in demo network."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, ValidationError

from route_optimizer.core.errors import InvalidTopology
from route_optimizer.models.network import Junction, Road

logger = logging.getLogger(__name__)


class JunctionRecord(BaseModel):
    """Schema for one entry of ``junctions.json``."""

    id: int = Field(description="Stable junction identifier")
    name: str = Field(description="Display name")
    lat: float = Field(description="Latitude in degrees")
    lng: float = Field(description="Longitude in degrees")


class RoadRecord(BaseModel):
    """Schema for one entry of ``roads.json``. Weights are validated by the graph store."""

    from_id: int = Field(alias="from")
    to_id: int = Field(alias="to")
    distance: float = Field(description="Road length (km)")
    base_time: float = Field(description="Free-flow travel time (minutes)")
    directed: bool = Field(default=False, description="One-way road from 'from' to 'to'")
    multiplier: float = Field(default=1.0, description="Initial traffic multiplier")


class JunctionsDocument(BaseModel):
    junctions: List[JunctionRecord]


class RoadsDocument(BaseModel):
    roads: List[RoadRecord]


# Lahore demo network: (id, name, lat, lng)
DEFAULT_JUNCTIONS: Tuple[Tuple[int, str, float, float], ...] = (
    (1, "Liberty Chowk", 31.5096, 74.3442),
    (2, "Kalma Chowk", 31.5204, 74.3587),
    (3, "Mall Road", 31.5656, 74.3242),
    (4, "Jail Road", 31.5497, 74.3436),
    (5, "Township", 31.4697, 74.3973),
    (6, "Gulberg Main", 31.5203, 74.3587),
    (7, "Ferozepur Road", 31.4343, 74.2963),
    (8, "Model Town", 31.4843, 74.3154),
)

# (from, to, distance km, base time min); all two-way
DEFAULT_ROADS: Tuple[Tuple[int, int, float, float], ...] = (
    (1, 2, 3.5, 8.0),
    (2, 3, 5.2, 12.0),
    (1, 4, 2.1, 5.0),
    (4, 5, 8.3, 18.0),
    (2, 5, 6.7, 15.0),
    (2, 6, 1.2, 3.0),
    (6, 8, 4.5, 10.0),
    (7, 5, 7.8, 16.0),
)


def default_network() -> Tuple[List[Junction], List[Road]]:
    junctions = [Junction(id=i, name=name, lat=lat, lng=lng) for i, name, lat, lng in DEFAULT_JUNCTIONS]
    roads = [Road(from_id=a, to_id=b, base_time=t, distance=d) for a, b, d, t in DEFAULT_ROADS]
    return junctions, roads


def parse_network(junctions_payload: Any, roads_payload: Any) -> Tuple[List[Junction], List[Road]]:
    try:
        junctions_doc = JunctionsDocument.model_validate(junctions_payload)
        roads_doc = RoadsDocument.model_validate(roads_payload)
    except ValidationError as exc:
        raise InvalidTopology(f"Malformed network document: {exc.error_count()} error(s)") from exc

    junctions = [Junction(id=r.id, name=r.name, lat=r.lat, lng=r.lng) for r in junctions_doc.junctions]
    roads = [
        Road(
            from_id=r.from_id,
            to_id=r.to_id,
            base_time=r.base_time,
            distance=r.distance,
            directed=r.directed,
            multiplier=r.multiplier,
        )
        for r in roads_doc.roads
    ]
    return junctions, roads


def load_network(
    junctions_path: Optional[str] = None,
    roads_path: Optional[str] = None,
) -> Tuple[List[Junction], List[Road]]:
    """Read ``junctions.json`` / ``roads.json``, or return the demo network when unset."""

    if junctions_path is None and roads_path is None:
        logger.info("No network files configured; using built-in demo network")
        return default_network()
    if junctions_path is None or roads_path is None:
        raise InvalidTopology("Both junctions and roads files are required")

    junctions, roads = parse_network(_read_json(junctions_path), _read_json(roads_path))
    logger.info("Read %d junctions from %s and %d roads from %s", len(junctions), junctions_path, len(roads), roads_path)
    return junctions, roads


def dump_network(junctions: List[Junction], roads: List[Road]) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """Inverse of ``parse_network``: documents ready for ``json.dump``."""

    return (
        {"junctions": [junction.to_dict() for junction in junctions]},
        {"roads": [road.to_dict() for road in roads]},
    )


def _read_json(path: str) -> Any:
    try:
        with Path(path).open("r", encoding="utf-8") as handle:
            return json.load(handle)
    except FileNotFoundError:
        raise InvalidTopology(f"Network file not found: {path}") from None
    except json.JSONDecodeError as exc:
        raise InvalidTopology(f"Network file {path} is not valid JSON: {exc.msg}") from exc
