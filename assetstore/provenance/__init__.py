# assetstore/provenance/__init__.py
"""
Signed registration receipts.

Core concepts:
- Registrar: An identity with an RSA key pair
- RegistrationReceipt: A record of one registration
- ReceiptLog: Append-only receipt storage that can subscribe to a registry
"""

from .registrar import Registrar, RegistrarStore
from .receipt import RegistrationReceipt, ReceiptLog, parts_digest
from .signatures import sign_receipt, verify_signature, verify_receipt

__all__ = [
    "Registrar",
    "RegistrarStore",
    "RegistrationReceipt",
    "ReceiptLog",
    "parts_digest",
    "sign_receipt",
    "verify_signature",
    "verify_receipt",
]
