"""Upload product images to the media library and attach them to a product."""

import logging
from typing import List, Optional, Sequence

from catalog_sync.core.exceptions import ImageFault
from catalog_sync.core.reporting import SyncReporter
from catalog_sync.models.product_models import Product, ProductImage, ProductUpdate

logger = logging.getLogger(__name__)


class ImageAttachmentWorkflow:
    """
    Three-step attachment of the source images of one product:

    1. upload each image to the media host
    2. bind each uploaded media item to the product post
    3. update the product with the collected image references

    A failing image is reported and left out; the rest continue. Uploaded
    media are never deleted, so re-running the workflow uploads everything
    again.
    """

    def __init__(self, media_client, catalog_client, reporter: SyncReporter):
        self.media_client = media_client
        self.catalog_client = catalog_client
        self.reporter = reporter

    def attach(self, product: Product, images: Sequence[bytes]) -> Optional[Product]:
        """
        Attach ``images`` to ``product``.

        Args:
            product: Server-confirmed product with a remote ID
            images: Raw image data in display order

        Returns:
            The product as confirmed by the server after the image update,
            or None when no image could be attached
        """
        if product.remote_id is None or not product.sku:
            self.reporter.fault(ImageFault(
                "Cannot attach images to a product without ID or SKU",
                {"sku": product.sku, "remote_id": product.remote_id},
            ))
            return None
        if not images:
            self.reporter.warning(f"No images to attach to {product.sku}", sku=product.sku)
            return None

        collected: List[ProductImage] = []
        for position, data in enumerate(images):
            context = {"sku": product.sku, "remote_id": product.remote_id, "image": position}
            try:
                media = self.media_client.upload_image(product.sku, data)
            except Exception as e:
                self.reporter.fault(ImageFault(f"Image upload failed for {product.sku}: {e}", context))
                continue

            context["media_id"] = media.id
            try:
                self.media_client.bind_image(media.id, product.remote_id)
            except Exception as e:
                self.reporter.fault(ImageFault(
                    f"Binding image {media.id} to product {product.remote_id} failed: {e}",
                    context,
                ))
                continue

            collected.append(ProductImage(id=media.id, src=media.source_url))

        if not collected:
            self.reporter.warning(f"No image could be attached to {product.sku}", sku=product.sku)
            return None

        update = ProductUpdate(remote_id=product.remote_id, images=collected)
        try:
            confirmed = self.catalog_client.update_product(update)
        except Exception as e:
            self.reporter.fault(ImageFault(
                f"Updating images of product {product.remote_id} failed: {e}",
                {"sku": product.sku, "remote_id": product.remote_id},
            ))
            return None

        if not confirmed.images:
            self.reporter.fault(ImageFault(
                f"Product {product.remote_id} was updated but returned no images",
                {"sku": product.sku, "remote_id": product.remote_id},
            ))
            return None

        self.reporter.info(
            f"Attached {len(confirmed.images)} images to {product.sku}",
            sku=product.sku, remote_id=product.remote_id,
        )
        return confirmed
