"""Tests for the JSON inventory snapshot codec."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from dealer_mcp.data import codec
from dealer_mcp.data.vehicle import Variant

ACQUIRED_MS = 1_709_294_400_000  # 2024-03-01T12:00:00Z


def _entry(**overrides):
    entry = {
        "vehicle_id": "V-1",
        "vehicle_manufacturer": "Honda",
        "vehicle_model": "CR-V",
        "acquisition_date": ACQUIRED_MS,
        "price": 28500.0,
        "dealership_id": "485",
    }
    entry.update(overrides)
    return entry


def _document(*entries):
    return {"car_inventory": list(entries)}


# ── Variant inference ──────────────────────────────────────────


class TestVariantInference:
    @pytest.mark.parametrize(
        ("model", "expected"),
        [
            ("CR-V", Variant.SUV),
            ("Explorer XLT", Variant.SUV),
            ("Model 3", Variant.SEDAN),
            ("Silverado 1500", Variant.PICKUP),
            ("GR Supra", Variant.SPORTS_CAR),
            ("Mystery", Variant.SUV),
        ],
    )
    def test_model_name_lookup(self, model, expected):
        assert codec.resolve_variant({"vehicle_model": model}) is expected

    def test_discriminator_wins_over_model(self):
        entry = {"vehicle_type": "sedan", "vehicle_model": "Silverado"}
        assert codec.resolve_variant(entry) is Variant.SEDAN

    def test_unknown_discriminator_falls_back_to_model(self):
        entry = {"vehicle_type": "hovercraft", "vehicle_model": "Supra"}
        assert codec.resolve_variant(entry) is Variant.SPORTS_CAR


# ── Decode ─────────────────────────────────────────────────────


class TestDecode:
    def test_decodes_fields(self):
        vehicles = codec.decode_inventory(_document(_entry()))
        assert len(vehicles) == 1
        vehicle = vehicles[0]
        assert vehicle.id == "V-1"
        assert vehicle.manufacturer == "Honda"
        assert vehicle.model == "CR-V"
        assert vehicle.price == 28500.0
        assert vehicle.dealer_id == "485"
        assert vehicle.acquisition_date == datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)
        assert not vehicle.rented

    def test_malformed_entry_is_skipped(self):
        payload = _document(
            _entry(vehicle_id="good"),
            _entry(vehicle_id="no-price", price=None),
            _entry(vehicle_id="bad-price", price="cheap"),
            {"vehicle_model": "Explorer"},
            "not-an-object",
            _entry(vehicle_id="also-good", vehicle_model="Model 3"),
        )
        vehicles = codec.decode_inventory(payload)
        assert [v.id for v in vehicles] == ["good", "also-good"]

    def test_missing_inventory_key(self):
        assert codec.decode_inventory({"other": []}) == []

    def test_non_object_document(self):
        assert codec.decode_inventory([1, 2, 3]) == []

    def test_unknown_keys_go_to_metadata(self):
        vehicles = codec.decode_inventory(
            _document(_entry(dealer_name="Wacky Bob's", color="red"))
        )
        assert vehicles[0].metadata == {"dealer_name": "Wacky Bob's", "color": "red"}
        assert vehicles[0].dealer_name == "Wacky Bob's"

    def test_rented_entry_keeps_window(self):
        vehicles = codec.decode_inventory(
            _document(
                _entry(
                    is_rented=True,
                    rental_start_date=ACQUIRED_MS,
                    rental_end_date=ACQUIRED_MS + 86_400_000,
                )
            )
        )
        assert vehicles[0].rented
        assert vehicles[0].rental_end - vehicles[0].rental_start == (
            datetime(2024, 3, 2, tzinfo=timezone.utc) - datetime(2024, 3, 1, tzinfo=timezone.utc)
        )

    def test_rented_without_window_is_skipped(self):
        assert codec.decode_inventory(_document(_entry(is_rented=True))) == []

    def test_rented_sports_car_is_skipped(self):
        entry = _entry(
            vehicle_model="Supra",
            is_rented=True,
            rental_start_date=ACQUIRED_MS,
            rental_end_date=ACQUIRED_MS + 1000,
        )
        assert codec.decode_inventory(_document(entry)) == []

    def test_invalid_json_text(self):
        assert codec.loads("{not json") == []

    def test_non_finite_prices_are_skipped(self):
        text = (
            '{"car_inventory": ['
            '{"vehicle_id": "nan", "vehicle_manufacturer": "Honda", "vehicle_model": "CR-V",'
            ' "acquisition_date": 1709294400000, "price": NaN, "dealership_id": "485"},'
            '{"vehicle_id": "inf", "vehicle_manufacturer": "Honda", "vehicle_model": "CR-V",'
            ' "acquisition_date": 1709294400000, "price": Infinity, "dealership_id": "485"},'
            '{"vehicle_id": "ok", "vehicle_manufacturer": "Honda", "vehicle_model": "CR-V",'
            ' "acquisition_date": 1709294400000, "price": 1.0, "dealership_id": "485"}'
            "]}"
        )
        assert [v.id for v in codec.loads(text)] == ["ok"]

    def test_empty_make_and_zero_price_load(self):
        vehicles = codec.decode_inventory(_document(_entry(vehicle_manufacturer="", price=0)))
        assert vehicles[0].manufacturer == ""
        assert vehicles[0].price == 0.0

    @pytest.mark.parametrize("field", ["vehicle_manufacturer", "vehicle_model"])
    def test_non_string_text_fields_are_skipped(self, field):
        assert codec.decode_inventory(_document(_entry(**{field: 42}))) == []
        assert codec.decode_inventory(_document(_entry(**{field: None}))) == []


class TestReadInventory:
    def test_missing_file_is_empty(self, tmp_path: Path):
        assert codec.read_inventory(tmp_path / "absent.json") == []

    def test_directory_path_is_empty(self, tmp_path: Path):
        assert codec.read_inventory(tmp_path) == []

    def test_reads_file(self, tmp_path: Path):
        path = tmp_path / "inventory.json"
        path.write_text(json.dumps(_document(_entry())), encoding="utf-8")
        assert [v.id for v in codec.read_inventory(path)] == ["V-1"]


# ── Encode ─────────────────────────────────────────────────────


class TestEncode:
    def test_entry_layout(self, vehicle_factory):
        entry = codec.vehicle_to_entry(vehicle_factory("A"))
        assert entry == {
            "vehicle_id": "A",
            "vehicle_type": "suv",
            "vehicle_manufacturer": "Honda",
            "vehicle_model": "CR-V",
            "acquisition_date": ACQUIRED_MS,
            "price": 28_500.0,
            "dealership_id": "485",
            "is_rented": False,
        }

    def test_rental_dates_only_while_rented(self, vehicle_factory):
        vehicle = vehicle_factory("A")
        vehicle.rent(
            datetime(2024, 4, 1, tzinfo=timezone.utc),
            datetime(2024, 4, 2, tzinfo=timezone.utc),
        )
        entry = codec.vehicle_to_entry(vehicle)
        assert entry["is_rented"] is True
        assert entry["rental_end_date"] - entry["rental_start_date"] == 86_400_000

    def test_duplicate_ids_last_wins(self, vehicle_factory):
        document = codec.encode_inventory([
            vehicle_factory("A", price=1000.0),
            vehicle_factory("B"),
            vehicle_factory("A", price=2000.0),
        ])
        entries = document["car_inventory"]
        assert len(entries) == 2
        by_id = {e["vehicle_id"]: e for e in entries}
        assert by_id["A"]["price"] == 2000.0

    def test_metadata_cannot_clobber_fields(self, vehicle_factory):
        vehicle = vehicle_factory("A", metadata={"vehicle_id": "spoof", "note": "x"})
        entry = codec.vehicle_to_entry(vehicle)
        assert entry["vehicle_id"] == "A"
        assert entry["note"] == "x"


class TestWriteInventory:
    def test_write_replaces_previous_content(self, tmp_path: Path, vehicle_factory):
        path = tmp_path / "inventory.json"
        assert codec.write_inventory([vehicle_factory("A"), vehicle_factory("B")], path)
        assert codec.write_inventory([vehicle_factory("C")], path)
        assert [v.id for v in codec.read_inventory(path)] == ["C"]

    def test_write_creates_parent_dirs(self, tmp_path: Path, vehicle_factory):
        path = tmp_path / "nested" / "dir" / "inventory.json"
        assert codec.write_inventory([vehicle_factory("A")], path)
        assert path.exists()

    def test_write_failure_returns_false(self, tmp_path: Path, vehicle_factory):
        assert not codec.write_inventory([vehicle_factory("A")], tmp_path)

    def test_empty_snapshot(self, tmp_path: Path):
        path = tmp_path / "empty.json"
        assert codec.write_inventory([], path)
        assert json.loads(path.read_text()) == {"car_inventory": []}


class TestRoundTrip:
    def test_round_trip_preserves_core_fields(self, vehicle_factory):
        originals = [
            vehicle_factory("A", model="CR-V", price=28_500.10),
            vehicle_factory("B", variant=Variant.SEDAN, manufacturer="Tesla", model="Model 3",
                            price=41_990.0),
            vehicle_factory("C", variant=Variant.PICKUP, manufacturer="Ford", model="F-150",
                            price=42_000.0, metadata={"dealer_name": "Wacky Bob's"}),
            vehicle_factory("D", variant=Variant.SPORTS_CAR, manufacturer="Porsche",
                            model="911", price=68_000.0),
        ]
        decoded = codec.loads(codec.dumps(originals))
        assert {v.id for v in decoded} == {"A", "B", "C", "D"}
        by_id = {v.id: v for v in decoded}
        for original in originals:
            restored = by_id[original.id]
            assert restored.manufacturer == original.manufacturer
            assert restored.model == original.model
            assert restored.price == pytest.approx(original.price)
            assert restored.variant is original.variant
            assert restored.metadata == original.metadata
