from http.client import IncompleteRead
from unittest.mock import MagicMock, patch
from urllib.error import URLError

from django.test import SimpleTestCase, TestCase
from django.test.utils import override_settings
from django.urls import reverse

from core.plugins import BasePlugin, registry
from gadgets.base import BaseGadget
from gadgets.models import GadgetInstance
from gadgets.views import resolve_proxy_uri


def _proxy_url(path):
    return reverse("gadgets:ajax_proxy", kwargs={"path": path})


def _upstream_response(body=b'{"items": []}', content_type="application/json"):
    response = MagicMock()
    response.read.return_value = body
    response.headers = {"Content-Type": content_type}
    cm = MagicMock()
    cm.__enter__.return_value = response
    return cm


class ResolveProxyUriTests(SimpleTestCase):
    def test_back_references_expanded(self):
        proxy_map = {r"^flickr/(.*)$": r"https://api.flickr.com/services/feeds/\1"}
        self.assertEqual(
            resolve_proxy_uri(proxy_map, "flickr/photos_public.gne"),
            "https://api.flickr.com/services/feeds/photos_public.gne",
        )

    def test_first_match_wins(self):
        proxy_map = {
            r"^a/(.*)$": r"https://one.example/\1",
            r"^a/b$": "https://two.example/",
        }
        self.assertEqual(resolve_proxy_uri(proxy_map, "a/b"), "https://one.example/b")

    def test_no_match(self):
        self.assertIsNone(resolve_proxy_uri({r"^flickr/": "https://x"}, "other/path"))

    def test_invalid_pattern_skipped(self):
        proxy_map = {"(": "https://bad", r"^ok$": "https://good"}
        with self.assertLogs("gadgets.views", level="WARNING"):
            self.assertEqual(resolve_proxy_uri(proxy_map, "ok"), "https://good")


class AjaxProxyViewTests(TestCase):
    def setUp(self):
        GadgetInstance.objects.create(gadget_type="flickr", area="sidebar")

    @patch("gadgets.views.urlopen")
    def test_proxies_matching_request(self, mock_urlopen):
        mock_urlopen.return_value = _upstream_response()

        response = self.client.get(_proxy_url("flickr/photos_public.gne") + "?id=1&format=json")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response["Content-Type"], "application/json")
        self.assertEqual(response.content, b'{"items": []}')
        upstream = mock_urlopen.call_args[0][0]
        self.assertEqual(
            upstream.full_url,
            "https://api.flickr.com/services/feeds/photos_public.gne?id=1&format=json",
        )

    @override_settings(GADGET_AJAX_PROXY_TIMEOUT=3)
    @patch("gadgets.views.urlopen")
    def test_uses_configured_timeout(self, mock_urlopen):
        mock_urlopen.return_value = _upstream_response()
        self.client.get(_proxy_url("flickr/photos_public.gne"))
        self.assertEqual(mock_urlopen.call_args[1]["timeout"], 3)

    @patch("gadgets.views.urlopen")
    def test_unmapped_path_is_404(self, mock_urlopen):
        response = self.client.get(_proxy_url("twitter/statuses"))
        self.assertEqual(response.status_code, 404)
        mock_urlopen.assert_not_called()

    @patch("gadgets.views.urlopen")
    def test_inactive_gadget_mappings_ignored(self, mock_urlopen):
        GadgetInstance.objects.update(is_active=False)
        response = self.client.get(_proxy_url("flickr/photos_public.gne"))
        self.assertEqual(response.status_code, 404)

    @patch("gadgets.views.urlopen", side_effect=URLError("unreachable"))
    def test_upstream_failure_is_502(self, _mock_urlopen):
        with self.assertLogs("gadgets.views", level="ERROR"):
            response = self.client.get(_proxy_url("flickr/photos_public.gne"))
        self.assertEqual(response.status_code, 502)

    def test_post_not_allowed(self):
        response = self.client.post(_proxy_url("flickr/photos_public.gne"))
        self.assertEqual(response.status_code, 405)

    @patch("gadgets.views.urlopen")
    def test_body_read_failure_is_502(self, mock_urlopen):
        cm = _upstream_response()
        cm.__enter__.return_value.read.side_effect = IncompleteRead(b"partial")
        mock_urlopen.return_value = cm
        with self.assertLogs("gadgets.views", level="ERROR"):
            response = self.client.get(_proxy_url("flickr/photos_public.gne"))
        self.assertEqual(response.status_code, 502)


class WildcardGadget(BaseGadget):
    slug = "wildcard-proxy"

    def define(self):
        self.define_ajax_proxy_mapping("flickr.com/*", "https://proxy.example/\\1")


class RelativeTargetGadget(BaseGadget):
    slug = "relative-proxy"

    def define(self):
        self.define_ajax_proxy_mapping(r"^local/(.*)$", r"not-a-url/\1")


class BrokenProxyGadget(BaseGadget):
    slug = "broken-proxy"

    def define(self):
        self.define_ajax_proxy_mapping(r"^flickr/(.*)$", r"https://elsewhere.example/\1")
        self.define_setting("x", "X", "bogus")


class ProxyTestPlugin(BasePlugin):
    name = "proxy-tests"

    def get_gadget_types(self):
        return [WildcardGadget, RelativeTargetGadget, BrokenProxyGadget]


class AjaxProxyMappingErrorTests(TestCase):
    def setUp(self):
        registry.register(ProxyTestPlugin())
        self.addCleanup(registry.unregister, ProxyTestPlugin.name)

    def test_target_with_missing_group_is_skipped(self):
        proxy_map = {"flickr.com/*": "https://proxy.example/\\1"}
        with self.assertLogs("gadgets.views", level="WARNING"):
            self.assertIsNone(resolve_proxy_uri(proxy_map, "flickr.com/photos"))

    def test_later_pattern_used_when_target_invalid(self):
        proxy_map = {
            "flickr.com/*": "https://proxy.example/\\1",
            r"^flickr\.com/(.*)$": r"https://api.flickr.com/\1",
        }
        with self.assertLogs("gadgets.views", level="WARNING"):
            self.assertEqual(
                resolve_proxy_uri(proxy_map, "flickr.com/photos"),
                "https://api.flickr.com/photos",
            )

    @patch("gadgets.views.urlopen")
    def test_view_with_missing_group_target_is_404(self, mock_urlopen):
        GadgetInstance.objects.create(gadget_type="wildcard-proxy")
        with self.assertLogs("gadgets.views", level="WARNING"):
            response = self.client.get(_proxy_url("flickr.com/photos"))
        self.assertEqual(response.status_code, 404)
        mock_urlopen.assert_not_called()

    def test_malformed_target_uri_is_502(self):
        GadgetInstance.objects.create(gadget_type="relative-proxy")
        with self.assertLogs("gadgets.views", level="ERROR"):
            response = self.client.get(_proxy_url("local/feed"))
        self.assertEqual(response.status_code, 502)

    @patch("gadgets.views.urlopen")
    def test_gadget_failing_to_define_is_skipped(self, mock_urlopen):
        mock_urlopen.return_value = _upstream_response()
        GadgetInstance.objects.create(gadget_type="broken-proxy")
        GadgetInstance.objects.create(gadget_type="flickr")
        with self.assertLogs("gadgets.factory", level="ERROR"):
            response = self.client.get(_proxy_url("flickr/photos_public.gne"))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            mock_urlopen.call_args[0][0].full_url,
            "https://api.flickr.com/services/feeds/photos_public.gne",
        )
