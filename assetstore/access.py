# assetstore/access.py
"""
Allow-list access control for registration.

Rules:
- The owner may always register and is the only administrator
- Other submitters must be on the allow-list
- The bypass switch opens registration to everyone
"""

import json
import logging
from pathlib import Path
from typing import Optional, Set

from .errors import AccessDenied

logger = logging.getLogger(__name__)


class AccessControl:
    """
    Allow-list with a global bypass switch.

    Structure (when persisted):
        store_dir/
            access.json     # owner, bypass flag, allowed submitters
    """

    def __init__(
        self,
        owner: str = "owner",
        store_dir: Optional[Path | str] = None,
        bypass: bool = False,
    ):
        self.owner = owner
        self.store_dir = Path(store_dir) if store_dir is not None else None
        self.bypass = bypass
        self._allowed: Set[str] = set()
        if self.store_dir is not None:
            self.store_dir.mkdir(parents=True, exist_ok=True)
            if self._index_path().exists():
                self._load()
            else:
                self._save()

    def _index_path(self) -> Path:
        return self.store_dir / "access.json"

    def _load(self):
        """Load allow-list from disk."""
        with open(self._index_path()) as f:
            data = json.load(f)
        self.owner = data.get("owner", self.owner)
        self.bypass = data.get("bypass", False)
        self._allowed = set(data.get("allowed", []))
        logger.debug(f"Loaded allow-list with {len(self._allowed)} entries")

    def _save(self):
        """Save allow-list to disk."""
        if self.store_dir is None:
            return
        data = {
            "version": "1.0",
            "owner": self.owner,
            "bypass": self.bypass,
            "allowed": sorted(self._allowed),
        }
        with open(self._index_path(), "w") as f:
            json.dump(data, f, indent=2)

    def is_owner(self, caller: str) -> bool:
        return caller == self.owner

    def require_owner(self, caller: str) -> None:
        if not self.is_owner(caller):
            raise AccessDenied(f"{caller!r} is not the owner")

    def is_allowed(self, submitter: str) -> bool:
        """Check if a submitter may register assets."""
        return self.bypass or self.is_owner(submitter) or submitter in self._allowed

    def require_allowed(self, submitter: str) -> None:
        if not self.is_allowed(submitter):
            raise AccessDenied(f"{submitter!r} is not on the allow-list")

    def set_allowed(self, caller: str, submitter: str, allowed: bool) -> None:
        """Add or remove a submitter (owner only)."""
        self.require_owner(caller)
        if allowed:
            self._allowed.add(submitter)
        else:
            self._allowed.discard(submitter)
        self._save()
        logger.info(f"Allow-list: {submitter} {'added' if allowed else 'removed'}")

    def set_bypass(self, caller: str, bypass: bool) -> None:
        """Open or close registration to everyone (owner only)."""
        self.require_owner(caller)
        self.bypass = bypass
        self._save()
        logger.info(f"Allow-list bypass {'enabled' if bypass else 'disabled'}")

    def list_allowed(self) -> list[str]:
        return sorted(self._allowed)
