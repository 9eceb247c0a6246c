import json

import pytest

from wcart_migrator.models.mapping import FieldMapping
from wcart_migrator.models.record import CachedRecord
from wcart_migrator.services.mapper import FieldMapper, get_nested_value


@pytest.mark.unit
class TestGetNestedValue:
    """Test dot-path resolution."""

    def test_top_level_and_nested_keys(self) -> None:
        record = {"a": {"b": {"c": 5}}, "x": "y"}
        assert get_nested_value(record, "x") == "y"
        assert get_nested_value(record, "a.b.c") == 5
        assert get_nested_value(record, "a.b") == {"c": 5}

    def test_missing_paths_give_none(self) -> None:
        record = {"a": {"b": None}, "s": "text"}
        assert get_nested_value(record, "missing") is None
        assert get_nested_value(record, "a.missing.deeper") is None
        assert get_nested_value(record, "a.b.c") is None
        assert get_nested_value(record, "s.length") is None
        assert get_nested_value(record, "") is None

    def test_list_indexes(self) -> None:
        record = {"variants": [{"sku": "A"}, {"sku": "B"}]}
        assert get_nested_value(record, "variants.1.sku") == "B"
        assert get_nested_value(record, "variants.5.sku") is None
        assert get_nested_value(record, "variants.first") is None

    def test_falsy_leaf_values_are_kept(self) -> None:
        record = {"qty": 0, "note": "", "taxable": False}
        assert get_nested_value(record, "qty") == 0
        assert get_nested_value(record, "note") == ""
        assert get_nested_value(record, "taxable") is False


@pytest.mark.unit
class TestFieldMapper:
    """Test record mapping."""

    def test_maps_and_transforms_fields(self, product_mappings) -> None:
        record = {
            "id": 1,
            "title": "  Blue Shirt ",
            "vendor": "acme",
            "variants": [{"sku": "BS-1", "price": "19.99"}],
        }
        result = FieldMapper().map_record(record, product_mappings)
        assert result == {
            "product_name": "Blue Shirt",
            "brand": "ACME",
            "sku": "BS-1",
            "price": "19.99",
        }

    def test_unmapped_fields_are_dropped(self) -> None:
        record = {"title": "Shirt", "secret": "x", "tags": "a,b"}
        result = FieldMapper().map_record(record, [FieldMapping("title", "name")])
        assert result == {"name": "Shirt"}

    def test_missing_source_field_maps_to_none(self) -> None:
        result = FieldMapper().map_record({}, [FieldMapping("body_html", "description", "trim")])
        assert result == {"description": None}

    def test_empty_mapping_set_gives_empty_record(self) -> None:
        assert FieldMapper().map_record({"title": "Shirt"}, []) == {}

    def test_later_mapping_wins_for_same_destination(self) -> None:
        mappings = [FieldMapping("title", "name"), FieldMapping("handle", "name")]
        result = FieldMapper().map_record({"title": "Shirt", "handle": "shirt"}, mappings)
        assert result == {"name": "shirt"}

    def test_output_follows_mapping_order(self) -> None:
        mappings = [FieldMapping("b", "second"), FieldMapping("a", "first")]
        result = FieldMapper().map_record({"a": 1, "b": 2}, mappings)
        assert list(result) == ["second", "first"]

    def test_mapping_is_deterministic(self, product_mappings) -> None:
        record = {"title": "Hat", "vendor": "Acme", "variants": [{"sku": "H", "price": "5"}]}
        mapper = FieldMapper()
        first = json.dumps(mapper.map_record(record, product_mappings))
        for _ in range(5):
            assert json.dumps(mapper.map_record(record, product_mappings)) == first

    def test_source_record_is_not_modified(self, product_mappings) -> None:
        record = {"title": " Hat ", "vendor": "acme", "variants": [{"sku": "H"}]}
        snapshot = json.dumps(record, sort_keys=True)
        FieldMapper().map_record(record, product_mappings)
        assert json.dumps(record, sort_keys=True) == snapshot

    def test_preview_pairs_source_and_destination(self) -> None:
        cached = [
            CachedRecord("products", "1", json.dumps({"id": 1, "title": "Hat"})),
            CachedRecord("products", "2", json.dumps({"id": 2, "title": "Cap"})),
        ]
        previews = FieldMapper().preview(cached, [FieldMapping("title", "product_name", "uppercase")])
        assert previews == [
            {"item_id": "1", "source": {"id": 1, "title": "Hat"}, "destination": {"product_name": "HAT"}},
            {"item_id": "2", "source": {"id": 2, "title": "Cap"}, "destination": {"product_name": "CAP"}},
        ]
