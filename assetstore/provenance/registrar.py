# assetstore/provenance/registrar.py
"""
Registrar identities.

A Registrar is the party that attests registrations:
- A name
- An RSA key pair for signing receipts
"""

import json
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa


def _generate_keypair() -> tuple[bytes, bytes]:
    """Generate RSA key pair for signing."""
    private_key = rsa.generate_private_key(
        public_exponent=65537,
        key_size=2048,
    )
    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    public_pem = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return private_pem, public_pem


@dataclass
class Registrar:
    """
    A signing identity.

    Attributes:
        name: Unique registrar name
        public_key: PEM-encoded public key
        private_key: PEM-encoded private key (kept secret)
        created_at: Timestamp of creation
    """
    name: str
    public_key: bytes
    private_key: bytes
    created_at: float = field(default_factory=time.time)

    @property
    def key_id(self) -> str:
        """Identifier recorded in receipt signatures."""
        return f"registrar:{self.name}#main-key"

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for storage."""
        return {
            "name": self.name,
            "public_key": self.public_key.decode("utf-8"),
            "private_key": self.private_key.decode("utf-8"),
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Registrar":
        """Deserialize from storage."""
        return cls(
            name=data["name"],
            public_key=data["public_key"].encode("utf-8"),
            private_key=data["private_key"].encode("utf-8"),
            created_at=data.get("created_at", time.time()),
        )

    @classmethod
    def create(cls, name: str) -> "Registrar":
        """Create a new registrar with generated keys."""
        private_pem, public_pem = _generate_keypair()
        return cls(name=name, public_key=public_pem, private_key=private_pem)


class RegistrarStore:
    """
    Persistent storage for registrars.

    Structure:
        store_dir/
            registrars.json   # Index of all registrars with their keys
    """

    def __init__(self, store_dir: Path | str):
        self.store_dir = Path(store_dir)
        self.store_dir.mkdir(parents=True, exist_ok=True)
        self._registrars: Dict[str, Registrar] = {}
        self._load()

    def _index_path(self) -> Path:
        return self.store_dir / "registrars.json"

    def _load(self):
        """Load registrars from disk."""
        index_path = self._index_path()
        if index_path.exists():
            with open(index_path) as f:
                data = json.load(f)
            self._registrars = {
                name: Registrar.from_dict(registrar_data)
                for name, registrar_data in data.get("registrars", {}).items()
            }

    def _save(self):
        """Save registrars to disk."""
        data = {
            "version": "1.0",
            "registrars": {
                name: registrar.to_dict()
                for name, registrar in self._registrars.items()
            },
        }
        with open(self._index_path(), "w") as f:
            json.dump(data, f, indent=2)

    def create(self, name: str) -> Registrar:
        """Create and store a new registrar."""
        if name in self._registrars:
            raise ValueError(f"Registrar {name} already exists")

        registrar = Registrar.create(name)
        self._registrars[name] = registrar
        self._save()
        return registrar

    def get(self, name: str) -> Optional[Registrar]:
        return self._registrars.get(name)

    def get_or_create(self, name: str) -> Registrar:
        return self.get(name) or self.create(name)

    def __contains__(self, name: str) -> bool:
        return name in self._registrars

    def __len__(self) -> int:
        return len(self._registrars)
