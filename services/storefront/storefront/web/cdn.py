"""
HTML helpers that point static assets at a content delivery network.

Image URLs get the configured images prefix; product images can be moved to a
dedicated host; script and style bundles expand to the list of URLs configured
for them. With nothing configured every helper renders the path it was given.
"""
from typing import Dict, List
from urllib.parse import urlsplit, urlunsplit

from markupsafe import Markup, escape
from pydantic import BaseModel

from storefront.core.config import settings
from storefront.core.errors import require_text


class ContentDeliveryNetworkConfiguration(BaseModel):
    images: str = ""
    product_images: str = ""
    scripts: Dict[str, List[str]] = {}
    styles: Dict[str, List[str]] = {}

    @classmethod
    def from_settings(cls) -> "ContentDeliveryNetworkConfiguration | None":
        if not (settings.CDN_IMAGES or settings.CDN_PRODUCT_IMAGES or settings.CDN_SCRIPTS or settings.CDN_STYLES):
            return None
        return cls(
            images=settings.CDN_IMAGES,
            product_images=settings.CDN_PRODUCT_IMAGES,
            scripts=settings.CDN_SCRIPTS,
            styles=settings.CDN_STYLES,
        )


class ContentDeliveryNetwork:
    def __init__(self, configuration: ContentDeliveryNetworkConfiguration | None = None):
        self.configuration = configuration

    def cdn_source(self, src: str) -> str:
        cfg = self.configuration
        if cfg is None or not cfg.images.strip():
            return src
        return f"{cfg.images}/{src}"

    def product_cdn_source(self, src: str) -> str:
        cfg = self.configuration
        if cfg is None or not cfg.product_images.strip():
            return self.cdn_source(src)

        # bare names like "product_1.jpg" parse as a host with an empty path
        parts = urlsplit(src if "://" in src else f"http://{src}")
        if parts.path not in ("", "/"):
            return urlunsplit((parts.scheme, cfg.product_images, parts.path, parts.query, parts.fragment))
        return self.cdn_source(src)

    def _img(self, src: str, alt: str | None) -> Markup:
        attrs = f'src="{escape(src)}"'
        if alt is not None and alt.strip():
            attrs += f' alt="{escape(alt)}"'
        return Markup(f"<img {attrs} />")

    def image(self, src: str, alt: str | None = None) -> Markup:
        require_text("src", src)
        return self._img(self.cdn_source(src), alt)

    def product_image(self, src: str, alt: str | None = None) -> Markup:
        require_text("src", src)
        return self._img(self.product_cdn_source(src), alt)

    def image_background(self, src: str) -> Markup:
        return Markup(f"style = \"background-image: url('{escape(self.cdn_source(src))}')\"")

    def _bundle(self, bundles: Dict[str, List[str]] | None, content_path: str) -> List[str]:
        if bundles is None:
            return [content_path]
        return bundles.get(content_path) or [content_path]

    def script(self, content_path: str) -> Markup:
        require_text("content_path", content_path)
        paths = self._bundle(self.configuration.scripts if self.configuration else None, content_path)
        return Markup("".join(
            f'<script type="text/javascript" src="{escape(path)}"></script>\n' for path in paths
        ))

    def styles(self, content_path: str) -> Markup:
        require_text("content_path", content_path)
        paths = self._bundle(self.configuration.styles if self.configuration else None, content_path)
        return Markup("".join(
            f'<link rel="stylesheet" href="{escape(path)}" />\n' for path in paths
        ))

    def template_globals(self) -> dict:
        return {
            "image": self.image,
            "product_image": self.product_image,
            "image_background": self.image_background,
            "script": self.script,
            "styles": self.styles,
        }
