# assetstore/registry/schema.py
"""
Data structures for the asset registry.

Stored records (Part, Asset) are frozen: once registered they never change.
Input records (PartInfo, AssetInfo) describe what a caller wants to register.
"""

import base64
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from ..errors import AssetStoreError


@dataclass(frozen=True)
class Part:
    """
    One colored path fragment.

    Attributes:
        part_id: 1-based id from the counter shared by all assets
        body: Packed path geometry (see assetstore.codec)
        color: Fill color, empty for the renderer's default
    """
    part_id: int
    body: bytes
    color: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "part_id": self.part_id,
            "body": base64.b64encode(self.body).decode("ascii"),
            "color": self.color,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Part":
        return cls(
            part_id=data["part_id"],
            body=base64.b64decode(data["body"]),
            color=data.get("color", ""),
        )


@dataclass(frozen=True)
class Asset:
    """
    A registered asset.

    Attributes:
        asset_id: Dense 1-based id
        group_id: Id in the global group table
        category_id: Id in the group's own category table
        width: Declared drawing width
        height: Declared drawing height
        name: Asset name, unique within its group/category
        minter: Free-text credit
        soulbound: Opaque address, passed through untouched
        part_ids: Part ids in z-order
    """
    asset_id: int
    group_id: int
    category_id: int
    width: int
    height: int
    name: str
    minter: str = ""
    soulbound: Optional[str] = None
    part_ids: Tuple[int, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "asset_id": self.asset_id,
            "group_id": self.group_id,
            "category_id": self.category_id,
            "width": self.width,
            "height": self.height,
            "name": self.name,
            "minter": self.minter,
            "part_ids": list(self.part_ids),
        }
        if self.soulbound:
            data["soulbound"] = self.soulbound
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Asset":
        return cls(
            asset_id=data["asset_id"],
            group_id=data["group_id"],
            category_id=data["category_id"],
            width=data["width"],
            height=data["height"],
            name=data["name"],
            minter=data.get("minter", ""),
            soulbound=data.get("soulbound"),
            part_ids=tuple(data.get("part_ids", [])),
        )


@dataclass
class PartInfo:
    """A part to register: packed body plus optional color."""
    body: bytes
    color: str = ""


@dataclass
class AssetInfo:
    """
    An asset definition submitted for registration.

    Parts are rendered in list order (first part at the bottom).
    """
    group: str
    category: str
    name: str
    parts: List[PartInfo] = field(default_factory=list)
    width: int = 1024
    height: int = 1024
    minter: str = ""
    soulbound: Optional[str] = None

    def describe(self) -> str:
        return f"{self.group}/{self.category}/{self.name}"


@dataclass(frozen=True)
class AssetAttributes:
    """Resolved, human-readable attributes of an asset."""
    asset_id: int
    name: str
    group: str
    category: str
    width: int
    height: int
    minter: str
    soulbound: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "asset_id": self.asset_id,
            "name": self.name,
            "group": self.group,
            "category": self.category,
            "width": self.width,
            "height": self.height,
            "minter": self.minter,
            "soulbound": self.soulbound,
        }


@dataclass(frozen=True)
class RegistrationEvent:
    """Notification delivered to subscribers after a registration commits."""
    asset_id: int
    submitter: str


@dataclass
class BatchResult:
    """Outcome of one item in a batch registration."""
    index: int
    asset_id: Optional[int] = None
    error: Optional[AssetStoreError] = None

    @property
    def ok(self) -> bool:
        return self.error is None
