# assetstore/registry/registry.py
"""
Append-only asset registry.

The registry owns the Part and Asset tables and every lookup index built
from them:

    groups            global name table
    categories        one name table per group
    category assets   (group, category) -> [asset ids in registration order]
    names             (group, category, name) -> asset id

Registration is all-or-nothing: every check runs before the first write,
so a rejected asset leaves the registry exactly as it was. Registered
assets and parts are never modified; administrators can only hide an
asset from public reads.
"""

import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Set, Tuple

from ..access import AccessControl
from ..errors import (
    AssetDisabledError,
    DuplicateError,
    NotFoundError,
    OutOfRangeError,
    ValidationError,
)
from ..interner import StringInterner
from ..validator import CharsetValidator, Validator
from .schema import (
    Asset,
    AssetAttributes,
    AssetInfo,
    BatchResult,
    Part,
    RegistrationEvent,
)

logger = logging.getLogger(__name__)

Subscriber = Callable[[RegistrationEvent], None]


class AssetRegistry:
    """
    The asset registry.

    Structure (when persisted):
        store_dir/
            registry.json     # Parts, assets, name tables, disabled ids

    Usage:
        registry = AssetRegistry()
        asset_id = registry.register(
            AssetInfo("Shapes", "Squares", "Red", parts=[PartInfo(body, "#F00")]),
            submitter="owner",
        )
    """

    def __init__(
        self,
        store_dir: Optional[Path | str] = None,
        validator: Optional[Validator] = None,
        access: Optional[AccessControl] = None,
        owner: str = "owner",
    ):
        """
        Initialize the registry.

        Args:
            store_dir: Directory for registry.json (None keeps everything in memory)
            validator: Validator for names and colors (default CharsetValidator)
            access: Allow-list for registration (default: only the owner)
            owner: Owner used when no access control is given
        """
        self.store_dir = Path(store_dir) if store_dir is not None else None
        self.validator = validator or CharsetValidator()
        self.access = access if access is not None else AccessControl(owner=owner)
        self._subscribers: List[Subscriber] = []

        self._parts: List[Part] = []
        self._assets: List[Asset] = []
        self._disabled: Set[int] = set()
        self._groups = StringInterner("group")
        self._categories: Dict[int, StringInterner] = {}
        self._category_assets: Dict[Tuple[int, int], List[int]] = {}
        self._names: Dict[Tuple[int, int, str], int] = {}

        if self.store_dir is not None:
            self.store_dir.mkdir(parents=True, exist_ok=True)
            self._load()

    @property
    def owner(self) -> str:
        return self.access.owner

    # -- persistence -------------------------------------------------------

    def _index_path(self) -> Path:
        return self.store_dir / "registry.json"

    def _load(self):
        """Load registry from disk and rebuild the lookup indices."""
        index_path = self._index_path()
        if not index_path.exists():
            return
        try:
            with open(index_path) as f:
                data = json.load(f)
            self._groups = StringInterner.from_list(data.get("groups", []), "group")
            self._categories = {
                int(group_id): StringInterner.from_list(names, "category")
                for group_id, names in data.get("categories", {}).items()
            }
            self._parts = [Part.from_dict(p) for p in data.get("parts", [])]
            self._assets = [Asset.from_dict(a) for a in data.get("assets", [])]
            self._disabled = set(data.get("disabled", []))
        except (json.JSONDecodeError, KeyError, ValueError) as e:
            logger.warning(f"Failed to load registry from {index_path}: {e}")
            raise

        for asset in self._assets:
            self._index(asset)
        logger.debug(f"Loaded {len(self._assets)} assets, {len(self._parts)} parts")

    def _save(self):
        """Save registry to disk."""
        if self.store_dir is None:
            return
        with open(self._index_path(), "w") as f:
            json.dump(self.to_dict(), f, indent=2)
        logger.debug(f"Saved registry ({len(self._assets)} assets)")

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the primary tables and name tables."""
        return {
            "version": "1.0",
            "groups": self._groups.to_list(),
            "categories": {
                str(group_id): names.to_list()
                for group_id, names in sorted(self._categories.items())
            },
            "parts": [p.to_dict() for p in self._parts],
            "assets": [a.to_dict() for a in self._assets],
            "disabled": sorted(self._disabled),
        }

    def snapshot(self) -> Dict[str, Any]:
        """Full state, including derived indices, for comparisons."""
        data = self.to_dict()
        data["category_assets"] = {
            f"{g}:{c}": list(ids) for (g, c), ids in sorted(self._category_assets.items())
        }
        data["names"] = {
            f"{g}:{c}:{name}": asset_id
            for (g, c, name), asset_id in sorted(self._names.items())
        }
        return data

    # -- registration ------------------------------------------------------

    def subscribe(self, callback: Subscriber) -> None:
        """Receive a RegistrationEvent after every committed registration."""
        self._subscribers.append(callback)

    def unsubscribe(self, callback: Subscriber) -> None:
        self._subscribers.remove(callback)

    def _notify(self, event: RegistrationEvent) -> None:
        for callback in list(self._subscribers):
            callback(event)

    def register(self, asset_info: AssetInfo, submitter: str) -> int:
        """
        Register a new asset.

        Args:
            asset_info: The asset definition
            submitter: Who is registering (checked against the allow-list)

        Returns:
            The new asset id

        Raises:
            AccessDenied: submitter is not allowed to register
            ValidationError: a name or color fails the validator
            DuplicateError: group/category/name is already registered
        """
        self.access.require_allowed(submitter)
        asset_id = self._register(asset_info, submitter)
        self._save()
        self._notify(RegistrationEvent(asset_id=asset_id, submitter=submitter))
        return asset_id

    def register_batch(
        self, asset_infos: Iterable[AssetInfo], submitter: str
    ) -> List[BatchResult]:
        """
        Register several assets.

        Each item is atomic on its own, the batch is not: a rejected item is
        reported in its BatchResult, earlier items stay registered and later
        items are still attempted. If an unexpected error stops the batch,
        the items committed so far are still saved and announced before it
        propagates.
        """
        self.access.require_allowed(submitter)

        results: List[BatchResult] = []
        events: List[RegistrationEvent] = []
        try:
            for index, info in enumerate(asset_infos):
                try:
                    asset_id = self._register(info, submitter)
                except (ValidationError, DuplicateError) as e:
                    logger.warning(f"Batch item {index} ({info.describe()}) rejected: {e}")
                    results.append(BatchResult(index=index, error=e))
                    continue
                results.append(BatchResult(index=index, asset_id=asset_id))
                events.append(RegistrationEvent(asset_id=asset_id, submitter=submitter))
        finally:
            if events:
                self._save()
            for event in events:
                self._notify(event)
        return results

    def _register(self, info: AssetInfo, submitter: str) -> int:
        self._check(info)
        return self._commit(info, submitter)

    def _check(self, info: AssetInfo) -> None:
        """Run every check for a registration. Never writes."""
        for field_name in ("group", "category", "name"):
            if not isinstance(getattr(info, field_name), str):
                raise ValidationError(f"Asset {field_name} must be a string")
        for part in info.parts:
            if not isinstance(part.body, (bytes, bytearray, memoryview)):
                raise ValidationError(
                    f"Part body must be bytes, not {type(part.body).__name__}"
                )
            if not isinstance(part.color, str) or not self.validator.validate_str(part.color):
                raise ValidationError(f"Invalid part color: {part.color!r}")
        if not self.validator.validate_str(info.name):
            raise ValidationError(f"Invalid asset name: {info.name!r}")
        for size in (info.width, info.height):
            if not isinstance(size, int) or isinstance(size, bool):
                raise ValidationError(f"Invalid size: {info.width!r}x{info.height!r}")
        if info.width < 0 or info.height < 0:
            raise ValidationError(f"Invalid size: {info.width}x{info.height}")

        if self._lookup(info.group, info.category, info.name):
            raise DuplicateError(f"Asset already registered: {info.describe()}")

        self._groups.check(info.group, self.validator)
        categories = self._categories.get(self._groups.get_id(info.group))
        if categories is None:
            categories = StringInterner("category")
        categories.check(info.category, self.validator)

    def _commit(self, info: AssetInfo, submitter: str) -> int:
        """Write a checked registration to every table and index."""
        first_part_id = len(self._parts) + 1
        parts = [
            Part(part_id=first_part_id + i, body=bytes(p.body), color=p.color)
            for i, p in enumerate(info.parts)
        ]
        part_ids = [part.part_id for part in parts]
        self._parts.extend(parts)

        group_id, _ = self._groups.intern_or_create(info.group, self.validator)
        categories = self._categories.setdefault(group_id, StringInterner("category"))
        category_id, _ = categories.intern_or_create(info.category, self.validator)

        asset = Asset(
            asset_id=len(self._assets) + 1,
            group_id=group_id,
            category_id=category_id,
            width=info.width,
            height=info.height,
            name=info.name,
            minter=info.minter,
            soulbound=info.soulbound,
            part_ids=tuple(part_ids),
        )
        self._assets.append(asset)
        self._index(asset)

        logger.info(
            f"Registered asset {asset.asset_id} {info.describe()} "
            f"({len(part_ids)} parts) for {submitter}"
        )
        return asset.asset_id

    def _index(self, asset: Asset) -> None:
        key = (asset.group_id, asset.category_id)
        self._category_assets.setdefault(key, []).append(asset.asset_id)
        self._names[(asset.group_id, asset.category_id, asset.name)] = asset.asset_id

    def _lookup(self, group: str, category: str, name: str) -> int:
        """Asset id for a triple, or 0."""
        key = self._category_key(group, category)
        if key is None:
            return 0
        return self._names.get((key[0], key[1], name), 0)

    def _category_key(self, group: str, category: str) -> Optional[Tuple[int, int]]:
        group_id = self._groups.get_id(group)
        if not group_id:
            return None
        category_id = self._categories[group_id].get_id(category)
        if not category_id:
            return None
        return group_id, category_id

    # -- administration ----------------------------------------------------

    def set_disabled(self, caller: str, asset_id: int, disabled: bool) -> None:
        """Hide or show an asset on public reads (owner only)."""
        self.access.require_owner(caller)
        self.get_raw_asset(asset_id)
        if disabled:
            self._disabled.add(asset_id)
        else:
            self._disabled.discard(asset_id)
        self._save()
        logger.info(f"Asset {asset_id} {'disabled' if disabled else 'enabled'} by {caller}")

    def is_disabled(self, asset_id: int) -> bool:
        return asset_id in self._disabled

    def get_raw_asset(self, asset_id: int) -> Asset:
        """Get an asset record, ignoring the disabled flag."""
        if asset_id < 1 or asset_id > len(self._assets):
            raise NotFoundError(f"Asset not found: {asset_id}")
        return self._assets[asset_id - 1]

    def get_raw_part(self, part_id: int) -> Part:
        """Get a part record, ignoring the disabled flag of its asset."""
        if part_id < 1 or part_id > len(self._parts):
            raise NotFoundError(f"Part not found: {part_id}")
        return self._parts[part_id - 1]

    # -- public reads ------------------------------------------------------

    def get_asset(self, asset_id: int) -> Asset:
        """Get an enabled asset."""
        asset = self.get_raw_asset(asset_id)
        if asset_id in self._disabled:
            raise AssetDisabledError(f"Asset {asset_id} is disabled")
        return asset

    def get_parts(self, asset_id: int) -> List[Part]:
        """Get an enabled asset's parts in z-order."""
        asset = self.get_asset(asset_id)
        return [self._parts[part_id - 1] for part_id in asset.part_ids]

    def get_attributes(self, asset_id: int) -> AssetAttributes:
        asset = self.get_asset(asset_id)
        group = self._groups.name_of(asset.group_id)
        return AssetAttributes(
            asset_id=asset.asset_id,
            name=asset.name,
            group=group,
            category=self._categories[asset.group_id].name_of(asset.category_id),
            width=asset.width,
            height=asset.height,
            minter=asset.minter,
            soulbound=asset.soulbound,
        )

    def describe(self, asset_id: int) -> str:
        """Get "group/category/name" for an enabled asset."""
        attrs = self.get_attributes(asset_id)
        return f"{attrs.group}/{attrs.category}/{attrs.name}"

    # -- index queries -----------------------------------------------------

    def group_count(self) -> int:
        return self._groups.count()

    def group_name_at(self, index: int) -> str:
        return self._groups.name_at(index)

    def category_count(self, group: str) -> int:
        """Number of categories in a group (0 for an unknown group)."""
        group_id = self._groups.get_id(group)
        if not group_id:
            return 0
        return self._categories[group_id].count()

    def category_name_at(self, group: str, index: int) -> str:
        group_id = self._groups.get_id(group)
        if not group_id:
            raise OutOfRangeError(f"Category index {index} out of range in {group!r} (count 0)")
        return self._categories[group_id].name_at(index)

    def asset_count_in_category(self, group: str, category: str) -> int:
        key = self._category_key(group, category)
        if key is None:
            return 0
        return len(self._category_assets[key])

    def asset_id_at(self, group: str, category: str, index: int) -> int:
        """Asset id at a position in registration order within a category."""
        key = self._category_key(group, category)
        asset_ids = self._category_assets[key] if key is not None else []
        if index < 0 or index >= len(asset_ids):
            raise OutOfRangeError(
                f"Asset index {index} out of range in {group}/{category} "
                f"(count {len(asset_ids)})"
            )
        return asset_ids[index]

    def asset_id_by_name(self, group: str, category: str, name: str) -> int:
        asset_id = self._lookup(group, category, name)
        if not asset_id:
            raise NotFoundError(f"Asset not found: {group}/{category}/{name}")
        return asset_id

    def asset_count(self) -> int:
        return len(self._assets)

    def part_count(self) -> int:
        return len(self._parts)

    def __contains__(self, asset_id: int) -> bool:
        return 1 <= asset_id <= len(self._assets)

    def __len__(self) -> int:
        return len(self._assets)
