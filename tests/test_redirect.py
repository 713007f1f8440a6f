"""Tests for roost.security.urls: redirect target sanitizing."""

import pytest

from roost.security.urls import DEFAULT_UNSAFE_PATHS, redirect_target, sanitize_path


class TestScenarios:
    def test_plain_path_passes(self) -> None:
        assert sanitize_path("/dashboard") == "/dashboard"

    def test_external_host_uses_fallback(self) -> None:
        assert sanitize_path("https://evil.com", fallback="/home") == "/home"

    def test_extra_unsafe_path(self) -> None:
        assert sanitize_path("/custom", fallback="/home", unsafe_paths=["/custom"]) == "/home"

    def test_extra_safe_scheme(self) -> None:
        assert sanitize_path("ftp://localhost/", safe_schemes=["ftp"]) == "ftp://localhost/"

    def test_subdomain_of_allowed_host_is_rejected(self) -> None:
        assert sanitize_path("http://localhost.evil.com") == "/"

    def test_triple_slash(self) -> None:
        assert sanitize_path("///danger") == "/"

    def test_pure_query_string(self) -> None:
        assert sanitize_path("?admin=true") == "?admin=true"


class TestUnsafePaths:
    @pytest.mark.parametrize("path", sorted(DEFAULT_UNSAFE_PATHS))
    def test_default_unsafe_paths(self, path: str) -> None:
        assert sanitize_path(path) == "/"

    def test_unsafe_path_with_query(self) -> None:
        assert sanitize_path("/sign-in?next=/x") == "/"

    def test_unsafe_path_with_fragment(self) -> None:
        assert sanitize_path("/sign-out#top") == "/"

    def test_exact_match_only(self) -> None:
        assert sanitize_path("/sign-in-custom") == "/sign-in-custom"
        assert sanitize_path("/auth/callback") == "/auth/callback"

    def test_auth_with_fallback(self) -> None:
        assert sanitize_path("/auth", fallback="/home") == "/home"

    def test_extras_add_to_defaults(self) -> None:
        assert sanitize_path("/sign-in", unsafe_paths=["/custom"]) == "/"


class TestRelativeReferences:
    def test_current_directory(self) -> None:
        assert sanitize_path("./dashboard") == "./dashboard"

    def test_parent_directory(self) -> None:
        assert sanitize_path("../profile") == "../profile"

    def test_trailing_slash(self) -> None:
        assert sanitize_path("/dashboard/") == "/dashboard/"

    def test_query_and_fragment_are_kept(self) -> None:
        assert sanitize_path("/a/b?c=1#d") == "/a/b?c=1#d"

    def test_root(self) -> None:
        assert sanitize_path("/") == "/"


class TestSchemesAndHosts:
    def test_localhost_allowed(self) -> None:
        assert sanitize_path("http://localhost") == "http://localhost"

    def test_loopback_with_port_allowed(self) -> None:
        assert sanitize_path("https://127.0.0.1:4000/x") == "https://127.0.0.1:4000/x"

    def test_uppercase_scheme_is_normalized_for_the_check(self) -> None:
        assert sanitize_path("HTTP://evil.com") == "/"
        assert sanitize_path("HTTP://localhost/x") == "HTTP://localhost/x"

    def test_host_match_is_case_sensitive(self) -> None:
        assert sanitize_path("http://LOCALHOST/") == "/"

    def test_disallowed_schemes(self) -> None:
        assert sanitize_path("ftp://localhost") == "/"
        assert sanitize_path("irc://localhost") == "/"
        assert sanitize_path("javascript:alert(1)") == "/"

    def test_extra_safe_host(self) -> None:
        assert sanitize_path("https://app.example.com/x", safe_hosts=["app.example.com"]) == (
            "https://app.example.com/x"
        )

    def test_userinfo_does_not_hide_host(self) -> None:
        assert sanitize_path("http://localhost@evil.com/") == "/"
        assert sanitize_path("http://user@localhost/") == "http://user@localhost/"

    def test_empty_authority_is_rejected(self) -> None:
        assert sanitize_path("http:///evil.com") == "/"


class TestProtocolRelative:
    def test_double_slash(self) -> None:
        assert sanitize_path("//example.com") == "/"

    def test_double_slash_allowed_host(self) -> None:
        assert sanitize_path("//localhost/x") == "/"

    def test_tab_inside_slashes(self) -> None:
        assert sanitize_path("/\t/evil.com") == "/"


class TestTotality:
    def test_none(self) -> None:
        assert sanitize_path(None) == "/"

    def test_non_string(self) -> None:
        assert sanitize_path(42, fallback="/home") == "/home"

    def test_unparseable(self) -> None:
        assert sanitize_path("http://[::1", fallback="/home") == "/home"

    def test_empty_string_passes_through(self) -> None:
        assert sanitize_path("") == ""

    def test_none_in_extra_schemes(self) -> None:
        assert sanitize_path("ftp://localhost/", safe_schemes=[None, "FTP"]) == "ftp://localhost/"
        assert sanitize_path("gopher://localhost/", safe_schemes=[None]) == "/"

    def test_none_in_extra_hosts(self) -> None:
        assert sanitize_path("/orders", safe_hosts=[None, "app.example"]) == "/orders"

    def test_none_option_collections(self) -> None:
        options = {"unsafe_paths": None, "safe_schemes": None, "safe_hosts": None}
        assert sanitize_path("/orders", **options) == "/orders"
        assert sanitize_path("/sign-in", fallback="/home", **options) == "/home"


class TestStrict:
    def test_backslash_passes_by_default(self) -> None:
        assert sanitize_path("/\\evil.com") == "/\\evil.com"

    def test_backslash_rejected(self) -> None:
        assert sanitize_path("/\\evil.com", strict=True) == "/"
        assert sanitize_path("\\\\evil.com", fallback="/home", strict=True) == "/home"

    def test_scheme_without_authority_rejected(self) -> None:
        assert sanitize_path("https:evil.com") == "https:evil.com"
        assert sanitize_path("https:evil.com", strict=True) == "/"

    def test_ordinary_targets_still_pass(self) -> None:
        assert sanitize_path("/dashboard?tab=1", strict=True) == "/dashboard?tab=1"
        assert sanitize_path("http://localhost/x", strict=True) == "http://localhost/x"
        assert sanitize_path("../profile", strict=True) == "../profile"


@pytest.mark.parametrize(
    "candidate",
    [
        "/dashboard",
        "https://evil.com",
        "/sign-in",
        "///danger",
        "?admin=true",
        "http://localhost.evil.com",
        "../profile",
        None,
    ],
)
def test_idempotent(candidate: object) -> None:
    once = sanitize_path(candidate, fallback="/home")
    assert sanitize_path(once, fallback="/home") == once


class TestRedirectTarget:
    def test_absent_parameter(self) -> None:
        assert redirect_target({}, "next") is None

    def test_present_parameter_is_sanitized(self) -> None:
        assert redirect_target({"next": "https://evil.com"}, "next") == "/"

    def test_safe_parameter(self) -> None:
        assert redirect_target({"return_to": "/orders"}, "return_to") == "/orders"

    def test_multi_valued_uses_first(self) -> None:
        assert redirect_target({"next": ["/a", "/b"]}, "next") == "/a"

    def test_options_are_forwarded(self) -> None:
        assert redirect_target({"next": "//x"}, "next", fallback="/home") == "/home"
