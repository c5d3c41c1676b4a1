"""JSON export and import of planned path documents."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Sequence

import yaml

from .core.config import PlannerConfig, config_from_dict
from .core.types import PathPoint, PlanMetrics, PlanResult, Waypoint

logger = logging.getLogger(__name__)

DOCUMENT_VERSION = "2.0"
DOCUMENT_TYPE = "holonomic_optimal_path"
DEFAULT_IMPORT_NAME = "Imported Path"


class MalformedImportError(ValueError):
    """The document could not be parsed into waypoints and config."""


@dataclass
class PathDocument:
    name: str
    waypoints: list[Waypoint]
    config: PlannerConfig
    path: list[PathPoint] = field(default_factory=list)
    metrics: PlanMetrics | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


def default_export_filename(name: str) -> str:
    stem = re.sub(r"\s+", "_", name)
    return f"{stem}_optimal.json"


def build_document(
    name: str,
    waypoints: Sequence[Waypoint],
    cfg: PlannerConfig,
    plan: PlanResult | None = None,
    created: datetime | None = None,
) -> dict[str, Any]:
    created = created or datetime.now(timezone.utc)
    return {
        "name": name,
        "waypoints": [wp.to_dict() for wp in waypoints],
        "path": [] if plan is None else [p.to_dict() for p in plan.path],
        "config": cfg.to_dict(),
        "metrics": None if plan is None or plan.metrics is None else plan.metrics.to_dict(),
        "metadata": {
            "created": created.isoformat(),
            "version": DOCUMENT_VERSION,
            "type": DOCUMENT_TYPE,
        },
    }


def document_to_json(doc: dict[str, Any]) -> str:
    return json.dumps(doc, indent=2)


def export_document(
    path: Path | str,
    name: str,
    waypoints: Sequence[Waypoint],
    cfg: PlannerConfig,
    plan: PlanResult | None = None,
) -> Path:
    """Write the document to ``path``; a directory gets the default file name."""
    path = Path(path)
    if path.is_dir():
        path = path / default_export_filename(name)
    path.write_text(document_to_json(build_document(name, waypoints, cfg, plan)), encoding="utf-8")
    logger.info(f"Exported path document to: {path}")
    return path


def parse_document(data: Any) -> PathDocument:
    """Validate an already-decoded document."""
    if not isinstance(data, dict):
        raise MalformedImportError("Document must be a JSON object.")

    raw_waypoints = data.get("waypoints") or []
    if not isinstance(raw_waypoints, list):
        raise MalformedImportError("'waypoints' must be a list.")
    raw_config = data.get("config") or {}
    if not isinstance(raw_config, dict):
        raise MalformedImportError("'config' must be an object.")
    raw_path = data.get("path") or []
    if not isinstance(raw_path, list):
        raise MalformedImportError("'path' must be a list.")

    try:
        config = config_from_dict(raw_config)
        default_radius = config.waypoint.default_radius
        waypoints = [Waypoint.from_dict(item, default_radius) for item in raw_waypoints]
        path = [PathPoint.from_dict(item) for item in raw_path]
        raw_metrics = data.get("metrics")
        metrics = None if raw_metrics is None else PlanMetrics(**{k: float(v) for k, v in raw_metrics.items()})
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise MalformedImportError(f"Invalid path document: {exc}") from exc

    return PathDocument(
        name=str(data.get("name") or DEFAULT_IMPORT_NAME),
        waypoints=waypoints,
        config=config,
        path=path,
        metrics=metrics,
        metadata=dict(data.get("metadata") or {}),
    )


def document_from_json(text: str) -> PathDocument:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedImportError(f"Invalid JSON: {exc}") from exc
    return parse_document(data)


def load_document(path: Path | str) -> PathDocument:
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise MalformedImportError(f"Cannot read {path}: {exc}") from exc
    doc = document_from_json(text)
    logger.info(f"Imported '{doc.name}' with {len(doc.waypoints)} waypoints from {path}")
    return doc


def load_waypoint_file(path: Path | str) -> PathDocument:
    """Load waypoints from YAML (a list, or a mapping with ``waypoints``) or an exported JSON document.

    JSON documents parse as YAML, so one loader covers both.
    """
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as exc:
        raise MalformedImportError(f"Cannot read {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise MalformedImportError(f"Invalid waypoint file {path}: {exc}") from exc

    if isinstance(data, list):
        data = {"name": path.stem, "waypoints": data}
    return parse_document(data)
