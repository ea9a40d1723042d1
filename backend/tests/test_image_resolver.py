"""
KK's Cafe Backend - Image Resolver Unit Tests
==============================================

What:  Tests for the pure image-list merge rules used by create and update.

What we test:
    ✅ urlImages parsing: JSON array, single URL, blank, junk entries
    ✅ Create ordering: uploads first, URLs after
    ✅ Update ordering: kept, uploads, URLs
    ✅ Fallback safety net when nothing is supplied
    ✅ Explicit empty keptExistingImages clears the list
    ✅ image always mirrors images[0]
"""

from kkcafe.services.image_resolver import (
    parse_json_image_list,
    parse_url_images,
    resolve_create_images,
    resolve_update_images,
)


class TestParseUrlImages:

    def test_json_array(self):
        assert parse_url_images('["http://x/a.png", "http://x/b.png"]') == [
            "http://x/a.png",
            "http://x/b.png",
        ]

    def test_single_url_when_not_json(self):
        assert parse_url_images("http://x/img.png") == ["http://x/img.png"]

    def test_single_url_is_trimmed(self):
        assert parse_url_images("  http://x/img.png \n") == ["http://x/img.png"]

    def test_absent(self):
        assert parse_url_images(None) == []

    def test_blank(self):
        assert parse_url_images("   ") == []

    def test_empty_json_array(self):
        assert parse_url_images("[]") == []

    def test_non_string_and_blank_entries_dropped(self):
        assert parse_url_images('["http://x/a.png", 3, null, "", "  "]') == ["http://x/a.png"]

    def test_json_scalar_treated_as_raw_value(self):
        """A JSON value that is not an array falls back to the raw string."""
        assert parse_url_images("42") == ["42"]


class TestParseJsonImageList:

    def test_absent_is_none(self):
        assert parse_json_image_list(None) is None

    def test_malformed_is_none(self):
        assert parse_json_image_list("[not json") is None

    def test_object_is_none(self):
        assert parse_json_image_list('{"a": 1}') is None

    def test_empty_array_is_empty_list(self):
        assert parse_json_image_list("[]") == []


class TestResolveCreate:

    def test_uploads_then_urls(self):
        result = resolve_create_images(
            ["/uploads/a.png", "/uploads/b.png"],
            '["http://x/c.png"]',
        )
        assert result.images == ["/uploads/a.png", "/uploads/b.png", "http://x/c.png"]
        assert result.image == "/uploads/a.png"

    def test_url_only(self):
        result = resolve_create_images([], '["http://x/img.png"]')
        assert result.images == ["http://x/img.png"]
        assert result.image == "http://x/img.png"

    def test_nothing_supplied(self):
        result = resolve_create_images([], None)
        assert result.images == []
        assert result.image == ""


class TestResolveUpdate:

    previous = ["/uploads/old-1.png", "/uploads/old-2.png"]

    def test_kept_only(self):
        result = resolve_update_images([], None, '["/uploads/a.png"]', self.previous)
        assert result.images == ["/uploads/a.png"]
        assert result.image == "/uploads/a.png"

    def test_kept_then_uploads_then_urls(self):
        result = resolve_update_images(
            ["/uploads/new.png"],
            "http://x/u.png",
            '["/uploads/old-2.png"]',
            self.previous,
        )
        assert result.images == ["/uploads/old-2.png", "/uploads/new.png", "http://x/u.png"]

    def test_uploads_are_appended_not_replacing(self):
        result = resolve_update_images(["/uploads/new.png"], None, None, self.previous)
        assert result.images == ["/uploads/new.png"]

    def test_nothing_supplied_keeps_previous(self):
        result = resolve_update_images([], None, None, self.previous)
        assert result.images == self.previous
        assert result.image == "/uploads/old-1.png"

    def test_malformed_kept_counts_as_absent(self):
        result = resolve_update_images([], None, "[broken", self.previous)
        assert result.images == self.previous

    def test_explicit_empty_kept_clears(self):
        result = resolve_update_images([], None, "[]", self.previous)
        assert result.images == []
        assert result.image == ""

    def test_blank_url_images_is_no_statement(self):
        result = resolve_update_images([], "", None, self.previous)
        assert result.images == self.previous

    def test_previous_list_is_copied(self):
        previous = ["/uploads/a.png"]
        result = resolve_update_images([], None, None, previous)
        result.images.append("/uploads/b.png")
        assert previous == ["/uploads/a.png"]
