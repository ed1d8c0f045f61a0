"""Factories for the remote store clients."""

from woocommerce import API

from catalog_sync.core.config import Settings, settings
from catalog_sync.core.reporting import SyncReporter
from catalog_sync.services.woocommerce.client import WooCommerceCatalogClient
from catalog_sync.services.woocommerce.media import WordPressMediaClient


class WooCommerceClientFactory:
    """Factory class for creating WooCommerce API clients."""

    @staticmethod
    def from_credentials(url: str, consumer_key: str, consumer_secret: str) -> API:
        """
        Create a WooCommerce API client from individual credentials.

        Args:
            url: WooCommerce store URL
            consumer_key: WooCommerce consumer key
            consumer_secret: WooCommerce consumer secret

        Returns:
            API: Configured WooCommerce API client
        """
        return API(
            url=url,
            consumer_key=consumer_key,
            consumer_secret=consumer_secret,
            wp_api=True,
            version=settings.wc_api_version,
            timeout=settings.wc_request_timeout,
            verify_ssl=settings.wc_verify_ssl
        )

    @staticmethod
    def from_settings(config: Settings = settings) -> API:
        return API(
            url=config.wc_base_url,
            consumer_key=config.wc_consumer_key,
            consumer_secret=config.wc_consumer_secret,
            wp_api=True,
            version=config.wc_api_version,
            timeout=config.wc_request_timeout,
            verify_ssl=config.wc_verify_ssl
        )

    @staticmethod
    def catalog_client(reporter: SyncReporter, config: Settings = settings) -> WooCommerceCatalogClient:
        """Catalog client bound to the store configured in ``config``."""
        return WooCommerceCatalogClient(
            WooCommerceClientFactory.from_settings(config),
            reporter,
            page_size=config.wc_page_size,
        )


class MediaClientFactory:
    """Factory class for the WordPress media client."""

    @staticmethod
    def from_settings(config: Settings = settings) -> WordPressMediaClient:
        return WordPressMediaClient(
            media_url=config.media_endpoint,
            username=config.wp_username,
            app_password=config.wp_app_password,
            auth_header=config.wp_auth_header,
            cookie=config.wp_cookie,
            timeout=config.wp_request_timeout,
            verify_ssl=config.wc_verify_ssl,
        )
