# assetstore/errors.py
"""
Error types raised by the asset store.

Every failure is detected where the operation runs and propagates to the
caller unchanged. The builtin base classes let callers that only care about
the broad category (ValueError, LookupError, ...) catch them as usual.
"""


class AssetStoreError(Exception):
    """Base class for all asset store errors."""


class ValidationError(AssetStoreError, ValueError):
    """A string failed the character-set policy."""


class DuplicateError(AssetStoreError, ValueError):
    """The (group, category, name) triple is already registered."""


class NotFoundError(AssetStoreError, LookupError):
    """An id or name references an entity that does not exist."""


class OutOfRangeError(NotFoundError, IndexError):
    """An index is at or beyond the current count."""


class AccessDenied(AssetStoreError, PermissionError):
    """The caller is not allowed to perform the operation."""


class AssetDisabledError(AccessDenied):
    """The asset has been disabled by an administrator."""


class MalformedInput(AssetStoreError, ValueError):
    """Packed path data violates the codec's preconditions."""


class DefinitionError(AssetStoreError, ValueError):
    """An asset definition file is missing fields or badly formed."""
