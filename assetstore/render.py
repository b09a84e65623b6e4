# assetstore/render.py
"""
SVG output for registered assets.

An asset renders as a <g> element holding one <path> per part, in z-order.
Documents wrap that group in <defs> and draw it with <use>, so the same
fragment can be reused by composite documents.
"""

import logging
from typing import Callable, Optional

from .codec import decode_path
from .registry import AssetRegistry

logger = logging.getLogger(__name__)

SVG_NS = "http://www.w3.org/2000/svg"


class RenderComposer:
    """
    Builds SVG fragments and documents from the registry.

    Only enabled assets are rendered; disabled or missing assets raise the
    registry's lookup error.
    """

    def __init__(
        self,
        registry: AssetRegistry,
        decoder: Callable[[bytes], str] = decode_path,
    ):
        self.registry = registry
        self._decode = decoder

    @staticmethod
    def default_tag(asset_id: int) -> str:
        return f"asset{asset_id}"

    def compose_part(self, asset_id: int, tag: Optional[str] = None) -> str:
        """
        Render an asset as an SVG group.

        Args:
            asset_id: Asset to render
            tag: Element id for the group (default "asset<id>")

        Returns:
            The <g> element, one line per path
        """
        tag = tag or self.default_tag(asset_id)
        description = self.registry.describe(asset_id)
        parts = self.registry.get_parts(asset_id)

        lines = [f' <g id="{tag}" desc="{description}">\n']
        for part in parts:
            fill = f' fill="{part.color}"' if part.color else ""
            lines.append(f'  <path d="{self._decode(part.body)}"{fill} />\n')
        lines.append(" </g>\n")

        logger.debug(f"Rendered asset {asset_id} ({len(parts)} parts)")
        return "".join(lines)

    def compose_document(self, asset_id: int) -> str:
        """Render an asset as a standalone SVG document sized to the asset."""
        asset = self.registry.get_asset(asset_id)
        tag = self.default_tag(asset_id)
        return (
            f'<svg viewBox="0 0 {asset.width} {asset.height}" xmlns="{SVG_NS}">\n'
            "<defs>\n"
            f"{self.compose_part(asset_id, tag)}"
            "</defs>\n"
            f'<use href="#{tag}" />\n'
            "</svg>\n"
        )
