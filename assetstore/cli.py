#!/usr/bin/env python3
"""
Asset store CLI

Command-line interface for a local asset store directory:
  assetstore register  - Register assets from a YAML definition file
  assetstore groups    - List groups
  assetstore categories - List categories in a group
  assetstore assets    - List assets in a category
  assetstore show      - Show asset attributes
  assetstore render    - Write an asset as an SVG document
  assetstore decode    - Decode packed path bytes
  assetstore disable / enable - Toggle asset visibility (owner only)
  assetstore allow     - Edit the allow-list (owner only)
  assetstore bypass    - Open or close registration (owner only)
  assetstore receipts  - List and verify registration receipts

Usage:
  assetstore [--store-dir DIR] [--as CALLER] register <definitions.yaml> [--sign NAME]
  assetstore render <asset_id> [-o out.svg] [--fragment]
  assetstore decode <hex> [--loose]
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Tuple

from .access import AccessControl
from .codec import decode_path
from .errors import AssetStoreError
from .registry import AssetRegistry

DEFAULT_STORE_DIR = "./assetstore_data"


def open_store(args) -> Tuple[AccessControl, AssetRegistry]:
    """Open the access list and registry in the store directory."""
    store_dir = Path(args.store_dir)
    access = AccessControl(owner=args.owner, store_dir=store_dir)
    registry = AssetRegistry(store_dir=store_dir, access=access)
    return access, registry


def cmd_register(args):
    """Register assets from a definition file."""
    from .definitions import AssetDefinitions

    definitions = AssetDefinitions.from_file(Path(args.definitions))
    submitter = args.submitter or definitions.submitter or args.caller
    _, registry = open_store(args)

    if args.sign:
        from .provenance import ReceiptLog, RegistrarStore

        store_dir = Path(args.store_dir)
        registrar = RegistrarStore(store_dir / "registrars").get_or_create(args.sign)
        receipts = ReceiptLog(store_dir / "receipts")
        registry.subscribe(receipts.observer(registry, registrar))

    print(f"Registering {len(definitions.assets)} assets as {submitter}...")
    results = registry.register_batch(definitions.assets, submitter)

    failed = 0
    for result in results:
        info = definitions.assets[result.index]
        if result.ok:
            print(f"  [OK] {result.asset_id}: {info.describe()}")
        else:
            print(f"  [FAILED] {info.describe()}: {result.error}")
            failed += 1

    print(f"\nRegistered: {len(results) - failed}")
    print(f"Failed: {failed}")
    if failed:
        sys.exit(1)


def cmd_groups(args):
    """List groups."""
    _, registry = open_store(args)
    for index in range(registry.group_count()):
        group = registry.group_name_at(index)
        print(f"{group} ({registry.category_count(group)} categories)")


def cmd_categories(args):
    """List categories in a group."""
    _, registry = open_store(args)
    for index in range(registry.category_count(args.group)):
        category = registry.category_name_at(args.group, index)
        count = registry.asset_count_in_category(args.group, category)
        print(f"{category} ({count} assets)")


def cmd_assets(args):
    """List assets in a category."""
    _, registry = open_store(args)
    for index in range(registry.asset_count_in_category(args.group, args.category)):
        asset_id = registry.asset_id_at(args.group, args.category, index)
        asset = registry.get_raw_asset(asset_id)
        flag = " [DISABLED]" if registry.is_disabled(asset_id) else ""
        print(f"{asset_id}: {asset.name}{flag}")


def cmd_show(args):
    """Show an asset's attributes."""
    _, registry = open_store(args)
    if args.raw:
        asset = registry.get_raw_asset(args.asset_id)
        for key, value in asset.to_dict().items():
            print(f"{key}: {value}")
        print(f"disabled: {registry.is_disabled(args.asset_id)}")
        return

    # minter and soulbound are free text and never validated
    attrs = registry.get_attributes(args.asset_id)
    for key, value in attrs.to_dict().items():
        if key in ("minter", "soulbound") and value:
            value = registry.validator.sanitize_for_embedding(str(value)).decode("utf-8")
        print(f"{key}: {value}")


def cmd_render(args):
    """Render an asset as SVG."""
    from .render import RenderComposer

    _, registry = open_store(args)
    composer = RenderComposer(registry)
    if args.fragment:
        svg = composer.compose_part(args.asset_id)
    else:
        svg = composer.compose_document(args.asset_id)

    if args.output:
        Path(args.output).write_text(svg)
        print(f"SVG saved to: {args.output}")
    else:
        sys.stdout.write(svg)


def cmd_decode(args):
    """Decode hex-encoded packed path bytes."""
    try:
        body = bytes.fromhex(args.body)
    except ValueError as e:
        print(f"Error: invalid hex: {e}")
        sys.exit(1)
    print(decode_path(body, strict=not args.loose))


def cmd_set_disabled(args):
    """Disable or enable an asset."""
    _, registry = open_store(args)
    disabled = args.command == "disable"
    registry.set_disabled(args.caller, args.asset_id, disabled)
    print(f"Asset {args.asset_id} {'disabled' if disabled else 'enabled'}")


def cmd_allow(args):
    """Add or remove a submitter on the allow-list."""
    access, _ = open_store(args)
    access.set_allowed(args.caller, args.submitter, not args.remove)
    print(f"{args.submitter} {'removed from' if args.remove else 'added to'} allow-list")


def cmd_bypass(args):
    """Toggle the allow-list bypass."""
    access, _ = open_store(args)
    access.set_bypass(args.caller, args.state == "on")
    print(f"Allow-list bypass: {args.state}")


def cmd_receipts(args):
    """List receipts for an asset and verify their signatures."""
    from .provenance import ReceiptLog, RegistrarStore, verify_receipt

    store_dir = Path(args.store_dir)
    receipts = ReceiptLog(store_dir / "receipts")
    registrars = RegistrarStore(store_dir / "registrars")

    found = receipts.find_by_asset(args.asset_id)
    if not found:
        print(f"No receipts for asset {args.asset_id}")
        return

    for receipt in found:
        creator = (receipt.signature or {}).get("creator", "")
        name = creator.split(":", 1)[-1].split("#", 1)[0]
        registrar = registrars.get(name)
        verified = registrar is not None and verify_receipt(receipt, registrar)
        status = "VERIFIED" if verified else "UNVERIFIED"
        print(f"[{status}] {receipt.receipt_id}: {receipt.description} "
              f"by {receipt.submitter} at {receipt.issued}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="assetstore",
        description="Asset store - append-only registry of vector assets",
    )
    parser.add_argument("--store-dir", default=DEFAULT_STORE_DIR,
                        help=f"Store directory (default: {DEFAULT_STORE_DIR})")
    parser.add_argument("--as", dest="caller", default="owner",
                        help="Caller identity for administrative commands")
    parser.add_argument("--owner", default="owner",
                        help="Owner for a new store directory")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    register_parser = subparsers.add_parser("register", help="Register assets from YAML")
    register_parser.add_argument("definitions", help="Definition YAML file")
    register_parser.add_argument("--submitter", help="Override the file's submitter")
    register_parser.add_argument("--sign", metavar="NAME",
                                 help="Sign receipts with this registrar (created if new)")

    subparsers.add_parser("groups", help="List groups")

    categories_parser = subparsers.add_parser("categories", help="List categories in a group")
    categories_parser.add_argument("group")

    assets_parser = subparsers.add_parser("assets", help="List assets in a category")
    assets_parser.add_argument("group")
    assets_parser.add_argument("category")

    show_parser = subparsers.add_parser("show", help="Show asset attributes")
    show_parser.add_argument("asset_id", type=int)
    show_parser.add_argument("--raw", action="store_true",
                             help="Show the stored record, even if disabled")

    render_parser = subparsers.add_parser("render", help="Render an asset as SVG")
    render_parser.add_argument("asset_id", type=int)
    render_parser.add_argument("-o", "--output", help="Output file (default: stdout)")
    render_parser.add_argument("--fragment", action="store_true",
                               help="Only the <g> fragment, no document")

    decode_parser = subparsers.add_parser("decode", help="Decode packed path bytes")
    decode_parser.add_argument("body", help="Packed body as hex")
    decode_parser.add_argument("--loose", action="store_true",
                               help="Only require an even length")

    for name in ("disable", "enable"):
        toggle_parser = subparsers.add_parser(name, help=f"{name.capitalize()} an asset")
        toggle_parser.add_argument("asset_id", type=int)

    allow_parser = subparsers.add_parser("allow", help="Edit the allow-list")
    allow_parser.add_argument("submitter")
    allow_parser.add_argument("--remove", action="store_true")

    bypass_parser = subparsers.add_parser("bypass", help="Toggle the allow-list bypass")
    bypass_parser.add_argument("state", choices=["on", "off"])

    receipts_parser = subparsers.add_parser("receipts", help="List receipts for an asset")
    receipts_parser.add_argument("asset_id", type=int)

    return parser


COMMANDS = {
    "register": cmd_register,
    "groups": cmd_groups,
    "categories": cmd_categories,
    "assets": cmd_assets,
    "show": cmd_show,
    "render": cmd_render,
    "decode": cmd_decode,
    "disable": cmd_set_disabled,
    "enable": cmd_set_disabled,
    "allow": cmd_allow,
    "bypass": cmd_bypass,
    "receipts": cmd_receipts,
}


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    command = COMMANDS.get(args.command)
    if command is None:
        parser.print_help()
        sys.exit(1)

    try:
        command(args)
    except AssetStoreError as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
