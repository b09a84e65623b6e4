# assetstore/provenance/receipt.py
"""
Registration receipts.

A receipt records that a registrar saw an asset registered: which asset,
who submitted it, where it lives in the hierarchy and a digest of its
parts. Receipts are kept in an append-only log.
"""

import hashlib
import json
import logging
import time
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from ..registry import AssetRegistry, Part, RegistrationEvent
from .registrar import Registrar
from .signatures import sign_receipt

logger = logging.getLogger(__name__)


def parts_digest(parts: List[Part]) -> str:
    """SHA3-256 over every part's color and body, in z-order."""
    hasher = hashlib.sha3_256()
    for part in parts:
        hasher.update(part.color.encode("utf-8"))
        hasher.update(b"\x00")
        hasher.update(len(part.body).to_bytes(4, "big"))
        hasher.update(part.body)
    return hasher.hexdigest()


@dataclass
class RegistrationReceipt:
    """
    Attestation of one registration.

    Attributes:
        receipt_id: Unique identifier
        asset_id: The registered asset
        submitter: Who submitted it
        description: "group/category/name"
        parts_digest: SHA3-256 of the asset's parts
        issued: ISO timestamp
        signature: Registrar signature (added after signing)
    """
    receipt_id: str
    asset_id: int
    submitter: str
    description: str
    parts_digest: str
    issued: str = field(default_factory=lambda: time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()))
    signature: Optional[Dict[str, Any]] = None

    def to_document(self) -> Dict[str, Any]:
        """The signed content (everything but the signature)."""
        return {
            "receipt_id": self.receipt_id,
            "asset_id": self.asset_id,
            "submitter": self.submitter,
            "description": self.description,
            "parts_digest": self.parts_digest,
            "issued": self.issued,
        }

    def to_dict(self) -> Dict[str, Any]:
        data = self.to_document()
        data["signature"] = self.signature
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RegistrationReceipt":
        return cls(
            receipt_id=data["receipt_id"],
            asset_id=data["asset_id"],
            submitter=data["submitter"],
            description=data["description"],
            parts_digest=data["parts_digest"],
            issued=data.get("issued", ""),
            signature=data.get("signature"),
        )

    @classmethod
    def for_event(cls, registry: AssetRegistry, event: RegistrationEvent) -> "RegistrationReceipt":
        """Build an unsigned receipt for a freshly registered asset."""
        return cls(
            receipt_id=str(uuid.uuid4()),
            asset_id=event.asset_id,
            submitter=event.submitter,
            description=registry.describe(event.asset_id),
            parts_digest=parts_digest(registry.get_parts(event.asset_id)),
        )


class ReceiptLog:
    """
    Append-only receipt storage.

    Structure:
        store_dir/
            receipts.json
    """

    def __init__(self, store_dir: Path | str):
        self.store_dir = Path(store_dir)
        self.store_dir.mkdir(parents=True, exist_ok=True)
        self._receipts: List[RegistrationReceipt] = []
        self._load()

    def _log_path(self) -> Path:
        return self.store_dir / "receipts.json"

    def _load(self):
        """Load receipts from disk."""
        log_path = self._log_path()
        if log_path.exists():
            with open(log_path) as f:
                data = json.load(f)
            self._receipts = [
                RegistrationReceipt.from_dict(r) for r in data.get("receipts", [])
            ]

    def _save(self):
        """Save receipts to disk."""
        data = {
            "version": "1.0",
            "receipts": [r.to_dict() for r in self._receipts],
        }
        with open(self._log_path(), "w") as f:
            json.dump(data, f, indent=2)

    def add(self, receipt: RegistrationReceipt) -> None:
        """Append a receipt to the log."""
        self._receipts.append(receipt)
        self._save()

    def observer(
        self, registry: AssetRegistry, registrar: Registrar
    ) -> Callable[[RegistrationEvent], None]:
        """
        Create a registry subscriber that signs and logs every registration.

        Usage:
            registry.subscribe(log.observer(registry, registrar))
        """
        def on_registered(event: RegistrationEvent) -> None:
            receipt = sign_receipt(RegistrationReceipt.for_event(registry, event), registrar)
            self.add(receipt)
            logger.debug(f"Receipt {receipt.receipt_id} for asset {event.asset_id}")
        return on_registered

    def get(self, receipt_id: str) -> Optional[RegistrationReceipt]:
        for r in self._receipts:
            if r.receipt_id == receipt_id:
                return r
        return None

    def find_by_asset(self, asset_id: int) -> List[RegistrationReceipt]:
        return [r for r in self._receipts if r.asset_id == asset_id]

    def find_by_submitter(self, submitter: str) -> List[RegistrationReceipt]:
        return [r for r in self._receipts if r.submitter == submitter]

    def list(self) -> List[RegistrationReceipt]:
        return list(self._receipts)

    def __len__(self) -> int:
        return len(self._receipts)
