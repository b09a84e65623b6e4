# assetstore/provenance/signatures.py
"""
Receipt signatures.

RSA-SHA256 (PKCS#1 v1.5) over the canonical JSON of the receipt document
and the signature options.
"""

import base64
import hashlib
import json
import time
from typing import TYPE_CHECKING, Any, Dict

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding

from .registrar import Registrar

if TYPE_CHECKING:
    from .receipt import RegistrationReceipt

SIGNATURE_TYPE = "RsaSignature2017"


def _canonicalize(data: Dict[str, Any]) -> str:
    """Sorted keys, no whitespace."""
    return json.dumps(data, sort_keys=True, separators=(",", ":"))


def _hash_sha256(data: str) -> bytes:
    return hashlib.sha256(data.encode()).digest()


def _signed_bytes(receipt: "RegistrationReceipt", options: Dict[str, Any]) -> bytes:
    return _hash_sha256(_canonicalize(options)) + _hash_sha256(_canonicalize(receipt.to_document()))


def sign_receipt(receipt: "RegistrationReceipt", registrar: Registrar) -> "RegistrationReceipt":
    """
    Sign a receipt with the registrar's private key.

    Returns:
        The same receipt with its signature attached
    """
    private_key = serialization.load_pem_private_key(
        registrar.private_key,
        password=None,
    )

    options = {
        "type": SIGNATURE_TYPE,
        "creator": registrar.key_id,
        "created": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
    }
    signature_bytes = private_key.sign(
        _signed_bytes(receipt, options),
        padding.PKCS1v15(),
        hashes.SHA256(),
    )

    receipt.signature = dict(
        options,
        signatureValue=base64.b64encode(signature_bytes).decode("utf-8"),
    )
    return receipt


def verify_signature(receipt: "RegistrationReceipt", public_key_pem: bytes) -> bool:
    """Check a receipt's signature against a PEM public key."""
    if not receipt.signature:
        return False

    try:
        public_key = serialization.load_pem_public_key(public_key_pem)
        options = {
            "type": receipt.signature["type"],
            "creator": receipt.signature["creator"],
            "created": receipt.signature["created"],
        }
        signature_bytes = base64.b64decode(receipt.signature["signatureValue"])
        public_key.verify(
            signature_bytes,
            _signed_bytes(receipt, options),
            padding.PKCS1v15(),
            hashes.SHA256(),
        )
        return True

    except (InvalidSignature, KeyError, ValueError):
        return False


def verify_receipt(receipt: "RegistrationReceipt", registrar: Registrar) -> bool:
    """Check that a receipt was signed by this registrar."""
    if not receipt.signature:
        return False
    if receipt.signature.get("creator") != registrar.key_id:
        return False
    return verify_signature(receipt, registrar.public_key)
