# assetstore - Append-only registry of vector-graphic assets
#
# Assets are small drawings made of colored path parts, filed under
# group/category/name. Registered assets are permanent; path geometry is
# stored in a packed 12-bit format and decoded to SVG path text on render.
#
# Core concepts:
# - StringInterner: Dense ids for group and category names
# - AssetRegistry: Asset and part tables plus lookup indices
# - decode_path: Packed path bytes -> SVG path text
# - RenderComposer: SVG fragments and documents for assets

from .errors import (
    AssetStoreError,
    ValidationError,
    DuplicateError,
    NotFoundError,
    OutOfRangeError,
    AccessDenied,
    AssetDisabledError,
    MalformedInput,
    DefinitionError,
)
from .validator import Validator, CharsetValidator
from .interner import StringInterner
from .access import AccessControl
from .codec import decode_path, encode_path
from .registry import (
    AssetRegistry,
    Asset,
    AssetAttributes,
    AssetInfo,
    BatchResult,
    Part,
    PartInfo,
    RegistrationEvent,
)
from .render import RenderComposer
from .definitions import AssetDefinitions

__all__ = [
    # Errors
    "AssetStoreError",
    "ValidationError",
    "DuplicateError",
    "NotFoundError",
    "OutOfRangeError",
    "AccessDenied",
    "AssetDisabledError",
    "MalformedInput",
    "DefinitionError",
    # Core
    "Validator",
    "CharsetValidator",
    "StringInterner",
    "AccessControl",
    "decode_path",
    "encode_path",
    "AssetRegistry",
    "Asset",
    "AssetAttributes",
    "AssetInfo",
    "BatchResult",
    "Part",
    "PartInfo",
    "RegistrationEvent",
    "RenderComposer",
    "AssetDefinitions",
]

__version__ = "0.1.0"
