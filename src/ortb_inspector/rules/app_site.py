# Author: Green Mountain Systems AI Inc.
# Donated to IAB Tech Lab

"""App and site distribution channel rules."""

from urllib.parse import urlsplit

from ..models.validation import Rule, RuleSet, Severity
from .helpers import (
    DOMAIN_RE,
    get_in,
    has_macro,
    is_flag,
    is_http_url,
    is_non_empty_str,
    is_str_list,
    obj,
    optional,
    with_field,
    with_object,
)


def _no_macros(ctx, section: str, fields: tuple[str, ...]) -> bool:
    return not any(has_macro(get_in(ctx.root, section, field)) for field in fields)


def _domain_matches_page(ctx) -> bool:
    site = obj(ctx, "site")
    domain, page = site.get("domain"), site.get("page")
    if not (is_non_empty_str(domain) and is_http_url(page)):
        return True
    try:
        host = (urlsplit(page).hostname or "").lower()
    except ValueError:
        return False
    domain = domain.lower()
    return host == domain or host.endswith("." + domain)


APP_RULES = RuleSet(
    name="app",
    description="Checks on the App object of in-app requests.",
    rules=(
        Rule(
            id="App-001",
            description="app.id is missing (recommended).",
            severity=Severity.WARNING,
            path="BidRequest.app.id",
            spec_ref="§3.2.14",
            applies=with_object("app"),
            check=lambda ctx: is_non_empty_str(get_in(ctx.root, "app", "id")),
        ),
        Rule(
            id="App-002",
            description="app.bundle is missing; buyers identify apps by bundle.",
            severity=Severity.WARNING,
            path="BidRequest.app.bundle",
            spec_ref="§3.2.14",
            applies=with_object("app"),
            check=lambda ctx: is_non_empty_str(get_in(ctx.root, "app", "bundle")),
        ),
        Rule(
            id="App-003",
            description="app.storeurl is missing (recommended for app-ads.txt checks).",
            severity=Severity.INFO,
            path="BidRequest.app.storeurl",
            spec_ref="§3.2.14",
            applies=with_object("app"),
            check=lambda ctx: is_non_empty_str(get_in(ctx.root, "app", "storeurl")),
        ),
        Rule(
            id="App-004",
            description="app.storeurl is not an http(s) URL.",
            severity=Severity.ERROR,
            path="BidRequest.app.storeurl",
            spec_ref="§3.2.14",
            applies=with_field("app", "storeurl"),
            check=lambda ctx: is_http_url(get_in(ctx.root, "app", "storeurl")),
        ),
        Rule(
            id="App-005",
            description="app.publisher.id is missing.",
            severity=Severity.WARNING,
            path="BidRequest.app.publisher.id",
            spec_ref="§3.2.15",
            applies=with_object("app"),
            check=lambda ctx: is_non_empty_str(get_in(ctx.root, "app", "publisher", "id")),
        ),
        Rule(
            id="App-006",
            description="app.paid and app.privacypolicy must be 0 or 1.",
            severity=Severity.ERROR,
            path="BidRequest.app",
            spec_ref="§3.2.14",
            applies=with_object("app"),
            check=lambda ctx: optional(get_in(ctx.root, "app", "paid"), is_flag)
            and optional(get_in(ctx.root, "app", "privacypolicy"), is_flag),
        ),
        Rule(
            id="App-007",
            description="app.cat must be an array of strings.",
            severity=Severity.ERROR,
            path="BidRequest.app.cat",
            spec_ref="§3.2.14",
            applies=with_field("app", "cat"),
            check=lambda ctx: is_str_list(get_in(ctx.root, "app", "cat")),
        ),
        Rule(
            id="App-008",
            description="app.bundle, app.storeurl or app.name contains an unresolved macro.",
            severity=Severity.ERROR,
            path="BidRequest.app",
            applies=with_object("app"),
            check=lambda ctx: _no_macros(ctx, "app", ("bundle", "storeurl", "name")),
        ),
    ),
)


SITE_RULES = RuleSet(
    name="site",
    description="Checks on the Site object of web requests.",
    rules=(
        Rule(
            id="Site-001",
            description="site.id is missing (recommended).",
            severity=Severity.WARNING,
            path="BidRequest.site.id",
            spec_ref="§3.2.13",
            applies=with_object("site"),
            check=lambda ctx: is_non_empty_str(get_in(ctx.root, "site", "id")),
        ),
        Rule(
            id="Site-002",
            description="site.page is missing; buyers rely on the page URL for brand safety.",
            severity=Severity.WARNING,
            path="BidRequest.site.page",
            spec_ref="§3.2.13",
            applies=with_object("site"),
            check=lambda ctx: is_non_empty_str(get_in(ctx.root, "site", "page")),
        ),
        Rule(
            id="Site-003",
            description="site.page is not an http(s) URL.",
            severity=Severity.ERROR,
            path="BidRequest.site.page",
            spec_ref="§3.2.13",
            applies=with_field("site", "page"),
            check=lambda ctx: is_http_url(get_in(ctx.root, "site", "page")),
        ),
        Rule(
            id="Site-004",
            description="site.publisher.id is missing.",
            severity=Severity.WARNING,
            path="BidRequest.site.publisher.id",
            spec_ref="§3.2.15",
            applies=with_object("site"),
            check=lambda ctx: is_non_empty_str(get_in(ctx.root, "site", "publisher", "id")),
        ),
        Rule(
            id="Site-005",
            description="site.mobile and site.privacypolicy must be 0 or 1.",
            severity=Severity.ERROR,
            path="BidRequest.site",
            spec_ref="§3.2.13",
            applies=with_object("site"),
            check=lambda ctx: optional(get_in(ctx.root, "site", "mobile"), is_flag)
            and optional(get_in(ctx.root, "site", "privacypolicy"), is_flag),
        ),
        Rule(
            id="Site-006",
            description="site.page, site.domain or site.ref contains an unresolved macro.",
            severity=Severity.ERROR,
            path="BidRequest.site",
            applies=with_object("site"),
            check=lambda ctx: _no_macros(ctx, "site", ("page", "domain", "ref")),
        ),
        Rule(
            id="Site-007",
            description="site.domain is not a valid domain name.",
            severity=Severity.WARNING,
            path="BidRequest.site.domain",
            spec_ref="§3.2.13",
            applies=with_field("site", "domain"),
            check=lambda ctx: isinstance(get_in(ctx.root, "site", "domain"), str)
            and DOMAIN_RE.match(ctx.root["site"]["domain"]) is not None,
        ),
        Rule(
            id="Site-008",
            description="site.domain does not match the host of site.page.",
            severity=Severity.INFO,
            path="BidRequest.site.domain",
            applies=with_object("site"),
            check=_domain_matches_page,
        ),
    ),
)
