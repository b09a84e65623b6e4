# assetstore/definitions.py
"""
YAML asset definitions.

A definition file lists assets to register:

    submitter: alice
    assets:
      - group: Basic Shapes
        category: Squares
        name: Red Square
        width: 1024
        height: 1024
        minter: alice
        parts:
          - color: "#FF0000"
            path: "M0 0 L1024 0 L1024 1024 L0 1024 Z"
          - body: "4d10184c0000"     # already packed, hex

Each part gives either a textual `path` (packed with encode_path) or a
hex `body`.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

import yaml

from .codec import encode_path
from .errors import DefinitionError
from .registry import AssetInfo, PartInfo

logger = logging.getLogger(__name__)


def _parse_part(data: Dict[str, Any], where: str) -> PartInfo:
    color = data.get("color") or ""
    if "path" in data:
        body = encode_path(str(data["path"]))
    elif "body" in data:
        try:
            body = bytes.fromhex(str(data["body"]))
        except ValueError as e:
            raise DefinitionError(f"{where}: invalid hex body: {e}") from e
    else:
        raise DefinitionError(f"{where}: part needs 'path' or 'body'")
    return PartInfo(body=body, color=str(color))


def _parse_asset(data: Dict[str, Any], index: int) -> AssetInfo:
    where = f"asset {index}"
    if not isinstance(data, dict):
        raise DefinitionError(f"{where}: expected a mapping")
    missing = [key for key in ("group", "category", "name") if key not in data]
    if missing:
        raise DefinitionError(f"{where}: missing {', '.join(missing)}")

    parts = [
        _parse_part(part, f"{where} part {i}")
        for i, part in enumerate(data.get("parts") or [])
    ]
    return AssetInfo(
        group=str(data["group"]),
        category=str(data["category"]),
        name=str(data["name"]),
        parts=parts,
        width=int(data.get("width", 1024)),
        height=int(data.get("height", 1024)),
        minter=str(data.get("minter") or ""),
        soulbound=data.get("soulbound"),
    )


@dataclass
class AssetDefinitions:
    """Parsed definition file."""
    submitter: str
    assets: List[AssetInfo] = field(default_factory=list)

    @classmethod
    def from_yaml(cls, yaml_content: str) -> "AssetDefinitions":
        """Parse definitions from a YAML string."""
        try:
            data = yaml.safe_load(yaml_content)
        except yaml.YAMLError as e:
            raise DefinitionError(f"Invalid YAML: {e}") from e
        if not isinstance(data, dict):
            raise DefinitionError("Definition file must be a mapping")

        assets = [
            _parse_asset(asset_data, i)
            for i, asset_data in enumerate(data.get("assets") or [])
        ]
        logger.debug(f"Parsed {len(assets)} asset definitions")
        return cls(submitter=str(data.get("submitter") or ""), assets=assets)

    @classmethod
    def from_file(cls, path: Path) -> "AssetDefinitions":
        """Load definitions from a YAML file."""
        with open(path, "r") as f:
            return cls.from_yaml(f.read())
