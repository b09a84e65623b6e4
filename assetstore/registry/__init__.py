# assetstore/registry/__init__.py
"""
Asset registry.

The registry stores assets (ordered lists of colored path parts) under a
group/category/name hierarchy. Entries are permanent: they can be hidden
from public reads, never changed or removed.

Example:
    registry = AssetRegistry()
    asset_id = registry.register(
        AssetInfo("Shapes", "Squares", "Red", parts=[PartInfo(body, "#FF0000")]),
        submitter="owner",
    )
    registry.asset_id_by_name("Shapes", "Squares", "Red")  # == asset_id
"""

from .registry import AssetRegistry
from .schema import (
    Asset,
    AssetAttributes,
    AssetInfo,
    BatchResult,
    Part,
    PartInfo,
    RegistrationEvent,
)

__all__ = [
    "AssetRegistry",
    "Asset",
    "AssetAttributes",
    "AssetInfo",
    "BatchResult",
    "Part",
    "PartInfo",
    "RegistrationEvent",
]
