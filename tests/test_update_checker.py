import json

import pytest
import requests

from conftest import make_response
from model import ReleaseMetadata
from exceptions import UnavailableError
from update.update_checker import UpdateChecker

SLUG = "cloudflare-image-meta/cloudflare-image-meta.py"


def release_body(**overrides):
    data = {
        "name": "Cloudflare Image",
        "slug": "cloudflare-image-meta",
        "version": "2.0.1",
        "requires": "6.0",
        "requires_php": "8.0",
        "tested": "6.6",
        "author": "Devhuset AS",
        "download_url": "https://plugins.devhuset.dev/cloudflare-image-meta.zip",
        "last_updated": "2024-10-01 12:00:00",
        "sections": {
            "description": "Cloudflare Images field",
            "installation": "Upload and activate",
            "changelog": "2.0.1: variants",
        },
    }
    data.update(overrides)
    return json.dumps(data)


def make_checker(cache, session, **kwargs):
    params = dict(plugin_slug=SLUG, current_version="1.0.0", cache_allowed=True,
                  host_version="6.5", runtime_version="8.2")
    params.update(kwargs)
    return UpdateChecker(cache, session=session, **params)


class TestRequest:

    def test_fetches_with_timeout_and_accept_header(self, cache, session):
        session.get.return_value = make_response(text=release_body())
        remote = make_checker(cache, session).request()

        assert remote.version == "2.0.1"
        _, kwargs = session.get.call_args
        assert kwargs["timeout"] == 10
        assert kwargs["headers"] == {"Accept": "application/json"}

    def test_second_fetch_within_ttl_uses_cache(self, cache, clock, session):
        session.get.return_value = make_response(text=release_body())
        checker = make_checker(cache, session)

        first = checker.request()
        clock.advance(29 * 60)
        second = checker.request()

        assert session.get.call_count == 1
        assert first == second

    def test_fetch_after_ttl_hits_network_once(self, cache, clock, session):
        session.get.return_value = make_response(text=release_body())
        checker = make_checker(cache, session)

        checker.request()
        clock.advance(30 * 60)
        checker.request()

        assert session.get.call_count == 2

    def test_cache_not_allowed_always_fetches(self, cache, session):
        session.get.return_value = make_response(text=release_body())
        checker = make_checker(cache, session, cache_allowed=False)

        checker.request()
        checker.request()

        assert session.get.call_count == 2

    def test_raw_body_is_cached(self, cache, session):
        body = release_body()
        session.get.return_value = make_response(text=body)
        make_checker(cache, session).request()

        assert cache.get("cf_image_upd") == body

    @pytest.mark.parametrize(
        "response",
        [
            make_response(status_code=500, text=release_body()),
            make_response(status_code=200, text=""),
        ]
    )
    def test_failed_fetch_is_unavailable_and_not_cached(self, cache, session, response):
        session.get.return_value = response

        assert make_checker(cache, session).request() is None
        assert cache.get("cf_image_upd") is None

    def test_transport_error_is_unavailable(self, cache, session):
        session.get.side_effect = requests.exceptions.ConnectionError("refused")
        assert make_checker(cache, session).request() is None

    def test_failure_leaves_previous_cache_untouched(self, cache, session):
        checker = make_checker(cache, session, cache_allowed=False)
        session.get.return_value = make_response(text=release_body())
        checker.request()

        session.get.return_value = make_response(status_code=503)
        assert checker.request() is None
        assert cache.get("cf_image_upd") == release_body()

    @pytest.mark.parametrize(
        "body",
        [
            "not json",
            "[]",
            json.dumps({"version": "2.0.0"}),
            release_body(sections={"description": "only"}),
            release_body(version=2),
        ]
    )
    def test_malformed_payload_is_unavailable(self, cache, session, body):
        session.get.return_value = make_response(text=body)
        assert make_checker(cache, session).request() is None


class TestCheckForUpdate:

    def test_newer_compatible_version(self, cache, session):
        session.get.return_value = make_response(text=release_body())
        offer = make_checker(cache, session).check_for_update()

        assert offer.new_version == "2.0.1"
        assert offer.package == "https://plugins.devhuset.dev/cloudflare-image-meta.zip"
        assert offer.tested == "6.6"
        assert offer.slug == SLUG

    def test_same_version_is_no_update(self, cache, session):
        session.get.return_value = make_response(text=release_body(version="1.0.0"))
        assert make_checker(cache, session).check_for_update() is None

    def test_host_too_old(self, cache, session):
        session.get.return_value = make_response(text=release_body(requires="6.6"))
        assert make_checker(cache, session).check_for_update() is None

    def test_runtime_too_old(self, cache, session):
        session.get.return_value = make_response(text=release_body(requires_php="8.3"))
        assert make_checker(cache, session).check_for_update() is None

    def test_requirements_met_exactly(self, cache, session):
        session.get.return_value = make_response(text=release_body(requires="6.5", requires_php="8.2"))
        assert make_checker(cache, session).check_for_update() is not None

    def test_default_runtime_meets_release_requirement(self, cache, session):
        session.get.return_value = make_response(text=release_body(requires_php="8.0"))
        checker = UpdateChecker(cache, session=session, plugin_slug=SLUG, current_version="1.0.0")
        assert checker.check_for_update() is not None

    def test_unparseable_version_is_no_update(self, cache, session):
        session.get.return_value = make_response(text=release_body(version="latest"))
        assert make_checker(cache, session).check_for_update() is None

    def test_unavailable_is_no_update(self, cache, session):
        session.get.return_value = make_response(status_code=404)
        assert make_checker(cache, session).check_for_update() is None


class TestHostHooks:

    def test_update_skips_unchecked_transient(self, cache, session):
        transient = {"checked": {}}
        assert make_checker(cache, session).update(transient) == {"checked": {}}
        session.get.assert_not_called()

    def test_update_adds_offer(self, cache, session):
        session.get.return_value = make_response(text=release_body())
        transient = make_checker(cache, session).update({"checked": {SLUG: "1.0.0"}})

        assert transient["response"][SLUG]["new_version"] == "2.0.1"
        assert transient["response"][SLUG]["plugin"] == SLUG

    def test_info_ignores_other_actions_and_slugs(self, cache, session):
        checker = make_checker(cache, session)
        assert checker.info("original", "query_plugins", {"slug": SLUG}) == "original"
        assert checker.info("original", "plugin_information", {"slug": "other"}) == "original"
        session.get.assert_not_called()

    def test_info_returns_plugin_information(self, cache, session):
        session.get.return_value = make_response(
            text=release_body(banners={"low": "low.png", "high": "high.png"}))
        info = make_checker(cache, session).info(None, "plugin_information", {"slug": SLUG})

        assert info["download_link"] == info["trunk"] == "https://plugins.devhuset.dev/cloudflare-image-meta.zip"
        assert info["requires_php"] == "8.0"
        assert info["sections"]["changelog"] == "2.0.1: variants"
        assert info["banners"] == {"low": "low.png", "high": "high.png"}

    def test_info_without_banners(self, cache, session):
        session.get.return_value = make_response(text=release_body())
        info = make_checker(cache, session).info(None, "plugin_information", {"slug": SLUG})
        assert "banners" not in info

    def test_purge_forces_refetch_within_ttl(self, cache, session):
        session.get.return_value = make_response(text=release_body())
        checker = make_checker(cache, session)

        checker.request()
        checker.purge({"action": "update", "type": "plugin", "plugins": [SLUG]})
        checker.request()

        assert session.get.call_count == 2

    @pytest.mark.parametrize(
        "options",
        [
            {"action": "install", "type": "plugin"},
            {"action": "update", "type": "theme"},
            {"action": "update", "type": "plugin", "plugins": ["other/other.py"]},
            {"action": "update", "type": "plugin", "plugins": SLUG},
        ]
    )
    def test_purge_ignores_unrelated_upgrades(self, cache, session, options):
        session.get.return_value = make_response(text=release_body())
        checker = make_checker(cache, session)

        checker.request()
        checker.purge(options)

        assert cache.get("cf_image_upd") is not None

    def test_purge_without_plugin_list(self, cache, session):
        session.get.return_value = make_response(text=release_body())
        checker = make_checker(cache, session)

        checker.request()
        checker.purge({"action": "update", "type": "plugin", "plugins": None})

        assert cache.get("cf_image_upd") is None

    def test_purge_is_noop_without_cache(self, cache, session):
        cache.set("cf_image_upd", release_body())
        make_checker(cache, session, cache_allowed=False).purge({"action": "update", "type": "plugin"})
        assert cache.get("cf_image_upd") is not None


class TestReleaseMetadata:

    def test_rejects_non_object(self):
        with pytest.raises(UnavailableError):
            ReleaseMetadata.from_dict(["not", "an", "object"])

    def test_banners_are_optional(self):
        remote = ReleaseMetadata.from_dict(json.loads(release_body()))
        assert remote.banners is None
