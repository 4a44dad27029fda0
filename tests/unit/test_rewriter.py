"""Tests for the remote source rewrite pass."""

from __future__ import annotations

from bccache.core.rewriter import local_source_url, rewrite

REGISTRY = {
    "lib": "https://cdn.example/lib/",
    "std": "https://deno.land/std/",
}


class TestRewrite:
    def test_disabled_is_identity(self):
        code = "import a from 'https://cdn.example/lib/a.js';"
        assert rewrite(code, False, REGISTRY, "/cache") == code

    def test_replaces_every_occurrence(self):
        code = (
            "import a from 'https://cdn.example/lib/a.js';\n"
            "import b from 'https://cdn.example/lib/b.js';\n"
        )
        out = rewrite(code, True, REGISTRY, "/cache")
        assert "https://cdn.example/lib/" not in out
        assert out.count("/cache/lib/") == 2
        assert "import a from '/cache/lib/a.js';" in out

    def test_multiple_handles(self):
        code = "'https://cdn.example/lib/a.js' 'https://deno.land/std/fs/mod.ts'"
        out = rewrite(code, True, REGISTRY, "http://localhost:8000/cache")
        assert out == (
            "'http://localhost:8000/cache/lib/a.js' "
            "'http://localhost:8000/cache/std/fs/mod.ts'"
        )

    def test_no_canonicalization(self):
        code = "import a from 'https://cdn.example/lib' + '/a.js';"
        assert rewrite(code, True, REGISTRY, "/cache") == code
        upper = "import a from 'HTTPS://CDN.EXAMPLE/LIB/a.js';"
        assert rewrite(upper, True, REGISTRY, "/cache") == upper

    def test_empty_registry(self):
        assert rewrite("x", True, {}, "/cache") == "x"

    def test_empty_base_url_skipped(self):
        assert rewrite("abc", True, {"x": ""}, "/cache") == "abc"

    def test_local_source_url(self):
        assert local_source_url("/cache", "lib") == "/cache/lib/"
