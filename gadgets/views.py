import logging
import re
from http.client import HTTPException
from urllib.request import Request, urlopen

from django.conf import settings
from django.http import Http404, HttpResponse
from django.views.decorators.http import require_GET

from .base import GadgetContext
from .factory import build_gadgets
from .models import GadgetInstance

logger = logging.getLogger(__name__)

DEFAULT_PROXY_TIMEOUT = 10


def _collect_proxy_map(context: GadgetContext) -> dict[str, str]:
    proxy_map: dict[str, str] = {}
    for gadget in build_gadgets(context, GadgetInstance.objects.filter(is_active=True)):
        for pattern, target in gadget.get_ajax_proxy_map().items():
            proxy_map.setdefault(pattern, target)
    return proxy_map


def resolve_proxy_uri(proxy_map: dict[str, str], path: str) -> str | None:
    """Return the destination URI for ``path`` from the first usable matching pattern.

    Patterns that do not compile, and targets that refer to groups the
    pattern does not capture, are logged and skipped.
    """
    for pattern, target in proxy_map.items():
        try:
            match = re.match(pattern, path)
        except re.error:
            logger.warning("Invalid AJAX proxy pattern %r", pattern)
            continue
        if not match:
            continue
        try:
            return match.expand(target)
        except re.error as exc:
            logger.warning("Invalid AJAX proxy target %r for pattern %r: %s", target, pattern, exc)
    return None


@require_GET
def ajax_proxy(request, path: str):
    proxy_map = _collect_proxy_map(GadgetContext(request=request))
    uri = resolve_proxy_uri(proxy_map, path)
    if uri is None:
        raise Http404("No AJAX proxy mapping for this path.")

    query = request.META.get("QUERY_STRING", "")
    if query:
        uri = f"{uri}{'&' if '?' in uri else '?'}{query}"

    timeout = getattr(settings, "GADGET_AJAX_PROXY_TIMEOUT", DEFAULT_PROXY_TIMEOUT)
    try:
        upstream = Request(uri, headers={"User-Agent": "gadgets-ajax-proxy"})
        with urlopen(upstream, timeout=timeout) as response:
            body = response.read()
            content_type = response.headers.get("Content-Type", "application/octet-stream")
    except (OSError, HTTPException, ValueError) as exc:
        # OSError covers HTTPError, URLError and timeouts
        logger.error("AJAX proxy request to %s failed: %s", uri, exc)
        return HttpResponse("Upstream request failed.", status=502, content_type="text/plain")

    return HttpResponse(body, content_type=content_type)
