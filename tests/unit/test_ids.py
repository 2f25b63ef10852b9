"""Tests for item IDs and label URLs (inventory_kernel/domain/ids.py)."""

import re

import pytest

from inventory_kernel.domain.ids import (
    DEFAULT_ID_PREFIX,
    extract_item_id,
    generate_item_id,
    make_id_factory,
    public_item_url,
)


class TestGenerateItemId:
    def test_format(self):
        assert re.fullmatch(r"JRS-[0-9A-F]{8}", generate_item_id())

    def test_custom_prefix(self):
        assert generate_item_id("TST-").startswith("TST-")

    def test_factory_uses_prefix(self):
        factory = make_id_factory("ABC-")
        assert factory().startswith("ABC-")

    def test_ids_differ(self):
        ids = {generate_item_id() for _ in range(200)}
        assert len(ids) == 200


class TestPublicItemUrl:
    def test_deterministic(self):
        url = public_item_url("http://localhost:4568", "JRS-1A2B3C4D")
        assert url == "http://localhost:4568/items/JRS-1A2B3C4D"
        assert url == public_item_url("http://localhost:4568", "JRS-1A2B3C4D")

    def test_trailing_slash_on_base(self):
        assert public_item_url("http://x/", "JRS-1") == "http://x/items/JRS-1"

    def test_id_is_quoted(self):
        assert public_item_url("http://x", "a/b c") == "http://x/items/a%2Fb%20c"


class TestExtractItemId:
    @pytest.mark.parametrize(
        "scanned, expected",
        [
            ("JRS-1A2B3C4D", "JRS-1A2B3C4D"),
            ("  jrs-1a2b3c4d ", "JRS-1A2B3C4D"),
            ("http://localhost:4568/items/JRS-1A2B3C4D", "JRS-1A2B3C4D"),
            ("http://host/items/JRS-1A2B3C4D?src=qr", "JRS-1A2B3C4D"),
            ("http://host/items/JRS-1A2B3C4D/edit", "JRS-1A2B3C4D"),
            ("http://host/jerseys/JRS-00000001#top", "JRS-00000001"),
            ("", None),
            (None, None),
            ("http://host/items/", None),
        ],
    )
    def test_values(self, scanned, expected):
        assert extract_item_id(scanned) == expected

    def test_round_trip_with_public_url(self):
        item_id = f"{DEFAULT_ID_PREFIX}DEADBEEF"
        assert extract_item_id(public_item_url("http://h:4568", item_id)) == item_id
