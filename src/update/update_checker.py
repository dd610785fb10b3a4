"""
Self-update checker for the Cloudflare Image field.

Release metadata is fetched from a JSON endpoint and the raw body is cached
for 30 minutes. The host calls into the checker at three points:

1. When it builds its list of available updates. (update)
2. When it shows the "view details" dialog for this plugin. (info)
3. After an upgrade finishes, to drop the cached metadata. (purge)
"""

from packaging import version
from typing import Optional
import requests
import logging
import json

from config import Config
from exceptions import UnavailableError
from model import ReleaseMetadata, UpdateOffer
from utils.http_client import get_http_session

logger = logging.getLogger(__name__)


class UpdateChecker:
    HEADERS = {'Accept': 'application/json'}

    def __init__(self, cache, session=None, plugin_slug=Config.PLUGIN_SLUG, current_version=Config.VERSION,
                 cache_allowed=Config.UPDATE_CACHE_ALLOWED, host_version=Config.HOST_VERSION,
                 runtime_version=Config.RUNTIME_VERSION, endpoint=Config.UPDATE_ENDPOINT):
        self.cache = cache
        self.session = session
        self.plugin_slug = plugin_slug
        self.version = current_version
        self.cache_key = Config.UPDATE_CACHE_KEY
        self.cache_allowed = cache_allowed
        self.host_version = host_version
        self.runtime_version = runtime_version
        self.endpoint = endpoint

    def request(self) -> Optional[ReleaseMetadata]:
        """Return the remote release metadata, or None when it is unavailable."""
        body = self.cache.get(self.cache_key)

        if body is None or not self.cache_allowed:
            try:
                body = self._fetch()
            except UnavailableError as e:
                logger.warning(f"Release metadata unavailable: {e}")
                return None
            self.cache.set(self.cache_key, body, ttl=Config.UPDATE_CACHE_TTL)
        else:
            logger.debug("Using cached release metadata")

        try:
            return ReleaseMetadata.from_dict(json.loads(body))
        except (ValueError, UnavailableError) as e:
            logger.error(f"Invalid release metadata from {self.endpoint}: {e}")
            return None

    def check_for_update(self) -> Optional[UpdateOffer]:
        remote = self.request()
        if remote is None:
            return None

        runtime_version = self.runtime_version or Config.RUNTIME_VERSION
        try:
            compatible = (
                version.parse(self.version) < version.parse(remote.version)
                and version.parse(remote.requires) <= version.parse(self.host_version)
                and version.parse(runtime_version) >= version.parse(remote.requires_php)
            )
        except version.InvalidVersion as e:
            logger.error(f"Unparseable version in release metadata: {e}")
            return None

        if not compatible:
            logger.debug(f"No compatible update: installed {self.version}, remote {remote.version}")
            return None

        logger.info(f"Update available: {self.version} -> {remote.version}")
        return UpdateOffer(
            slug=self.plugin_slug,
            plugin=self.plugin_slug,
            new_version=remote.version,
            tested=remote.tested,
            package=remote.download_url,
        )

    def update(self, transient):
        """Add this plugin to the host's update transient when a newer version fits."""
        if not transient or not transient.get("checked"):
            return transient

        offer = self.check_for_update()
        if offer:
            transient.setdefault("response", {})[offer.plugin] = offer.to_dict()
        return transient

    def info(self, result, action, args):
        """Answer the host's plugin information request for this plugin only."""
        if action != "plugin_information":
            return result

        if self.plugin_slug != (args or {}).get("slug"):
            return result

        remote = self.request()
        if remote is None:
            return result

        info = {
            "name": remote.name,
            "slug": remote.slug,
            "version": remote.version,
            "tested": remote.tested,
            "requires": remote.requires,
            "author": remote.author,
            "download_link": remote.download_url,
            "trunk": remote.download_url,
            "requires_php": remote.requires_php,
            "last_updated": remote.last_updated,
            "sections": dict(remote.sections),
        }
        if remote.banners:
            info["banners"] = dict(remote.banners)
        return info

    def purge(self, options):
        """Drop cached metadata after a plugin update completes."""
        if (
            self.cache_allowed
            and options.get("action") == "update"
            and options.get("type") == "plugin"
            and self._matches_plugin(options.get("plugins"))
        ):
            logger.info("Purging cached release metadata")
            self.cache.delete(self.cache_key)

    def _matches_plugin(self, plugins):
        # no list means the upgrade was not scoped to particular plugins
        if not plugins:
            return True
        if not isinstance(plugins, (list, tuple)):
            return False
        return self.plugin_slug in plugins

    def _fetch(self):
        session = self.session or get_http_session()
        try:
            response = session.get(self.endpoint, timeout=Config.UPDATE_TIMEOUT, headers=self.HEADERS)
        except requests.exceptions.RequestException as e:
            raise UnavailableError(f"Request to {self.endpoint} failed: {e}")

        if response.status_code != 200:
            raise UnavailableError(f"Unexpected status {response.status_code} from {self.endpoint}")
        if not response.text:
            raise UnavailableError(f"Empty response from {self.endpoint}")

        return response.text
