# tests/test_registry.py
"""Tests for the asset registry."""

import copy
import dataclasses
import tempfile
from pathlib import Path

import pytest

from assetstore.access import AccessControl
from assetstore.errors import (
    AccessDenied,
    AssetDisabledError,
    DuplicateError,
    NotFoundError,
    OutOfRangeError,
    ValidationError,
)
from assetstore.registry import AssetInfo, AssetRegistry, PartInfo, RegistrationEvent
from assetstore.validator import CharsetValidator


BODY = bytes([0x4D, 0x10, 0x18, 0x4C, 0x00, 0x00])


def make_info(group="Shapes", category="Squares", name="Red", colors=("#FF0000",), **kwargs):
    """Build an AssetInfo with one part per color."""
    parts = [PartInfo(body=BODY, color=color) for color in colors]
    return AssetInfo(group=group, category=category, name=name, parts=parts, **kwargs)


@pytest.fixture
def store_dir():
    """Create temporary store directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def registry():
    """In-memory registry owned by 'owner'."""
    return AssetRegistry(owner="owner")


class TestRegister:
    """Test single registration."""

    def test_register_returns_dense_ids(self, registry):
        assert registry.register(make_info(name="A"), "owner") == 1
        assert registry.register(make_info(name="B"), "owner") == 2
        assert registry.asset_count() == 2

    def test_register_stores_fields(self, registry):
        asset_id = registry.register(
            make_info(width=32, height=16, minter="alice", soulbound="0xabc"), "owner"
        )
        asset = registry.get_asset(asset_id)
        assert asset.name == "Red"
        assert asset.width == 32
        assert asset.height == 16
        assert asset.minter == "alice"
        assert asset.soulbound == "0xabc"
        assert asset.group_id == 1
        assert asset.category_id == 1

    def test_part_ids_shared_across_assets(self, registry):
        first = registry.register(make_info(name="A", colors=("#000", "#111")), "owner")
        second = registry.register(make_info(name="B", colors=("#222", "", "#444")), "owner")
        assert registry.get_asset(first).part_ids == (1, 2)
        assert registry.get_asset(second).part_ids == (3, 4, 5)
        assert registry.part_count() == 5

    def test_part_order_preserved(self, registry):
        asset_id = registry.register(make_info(colors=("#333", "#111", "#222")), "owner")
        assert [p.color for p in registry.get_parts(asset_id)] == ["#333", "#111", "#222"]

    def test_category_ids_scoped_per_group(self, registry):
        a = registry.register(make_info(group="G1", category="X", name="a"), "owner")
        b = registry.register(make_info(group="G1", category="Y", name="b"), "owner")
        c = registry.register(make_info(group="G2", category="Y", name="c"), "owner")
        assert registry.get_asset(a).category_id == 1
        assert registry.get_asset(b).category_id == 2
        assert registry.get_asset(c).category_id == 1
        assert registry.get_asset(c).group_id == 2

    def test_same_name_in_other_category_allowed(self, registry):
        registry.register(make_info(category="Squares"), "owner")
        registry.register(make_info(category="Circles"), "owner")
        assert registry.asset_count() == 2

    def test_events_delivered(self, registry):
        events = []
        registry.subscribe(events.append)
        asset_id = registry.register(make_info(), "owner")
        assert events == [RegistrationEvent(asset_id=asset_id, submitter="owner")]

    def test_unsubscribe(self, registry):
        events = []
        registry.subscribe(events.append)
        registry.unsubscribe(events.append)
        registry.register(make_info(), "owner")
        assert events == []


class TestAtomicity:
    """Rejected registrations leave the registry unchanged."""

    def test_duplicate_rejected(self, registry):
        registry.register(make_info(), "owner")
        before = copy.deepcopy(registry.snapshot())

        with pytest.raises(DuplicateError):
            registry.register(make_info(colors=("#00FF00", "#0000FF")), "owner")

        assert registry.snapshot() == before

    def test_invalid_color_rejected(self, registry):
        registry.register(make_info(name="ok"), "owner")
        before = copy.deepcopy(registry.snapshot())

        with pytest.raises(ValidationError):
            registry.register(make_info(group="New", colors=("#FFF", "red;")), "owner")

        assert registry.snapshot() == before

    def test_invalid_name_rejected(self, registry):
        before = copy.deepcopy(registry.snapshot())
        with pytest.raises(ValidationError):
            registry.register(make_info(name="<script>"), "owner")
        assert registry.snapshot() == before

    def test_invalid_group_rejected(self, registry):
        before = copy.deepcopy(registry.snapshot())
        with pytest.raises(ValidationError):
            registry.register(make_info(group="a/b"), "owner")
        assert registry.snapshot() == before
        assert registry.part_count() == 0

    def test_invalid_category_in_new_group_rejected(self, registry):
        registry.register(make_info(), "owner")
        before = copy.deepcopy(registry.snapshot())
        with pytest.raises(ValidationError):
            registry.register(make_info(group="Fresh", category='"quoted"'), "owner")
        assert registry.snapshot() == before
        assert registry.group_count() == 1

    def test_invalid_category_in_existing_group_rejected(self, registry):
        registry.register(make_info(), "owner")
        before = copy.deepcopy(registry.snapshot())
        with pytest.raises(ValidationError):
            registry.register(make_info(category="bad\n"), "owner")
        assert registry.snapshot() == before

    def test_negative_size_rejected(self, registry):
        with pytest.raises(ValidationError):
            registry.register(make_info(width=-1), "owner")
        assert registry.asset_count() == 0

    def test_no_event_on_failure(self, registry):
        events = []
        registry.subscribe(events.append)
        with pytest.raises(ValidationError):
            registry.register(make_info(name="<bad>"), "owner")
        assert events == []

    def test_non_bytes_body_rejected(self, registry):
        """A bad body after a good one leaves no orphan parts behind."""
        registry.register(make_info(name="ok"), "owner")
        before = copy.deepcopy(registry.snapshot())

        info = AssetInfo(
            group="G", category="C", name="N",
            parts=[PartInfo(body=BODY, color="#000"), PartInfo(body="abc", color="#111")],
        )
        with pytest.raises(ValidationError):
            registry.register(info, "owner")

        assert registry.snapshot() == before
        assert registry.part_count() == 1

    def test_non_integer_size_rejected(self, registry):
        before = copy.deepcopy(registry.snapshot())
        with pytest.raises(ValidationError):
            registry.register(make_info(width="10"), "owner")
        with pytest.raises(ValidationError):
            registry.register(make_info(height=None), "owner")
        assert registry.snapshot() == before

    def test_non_string_name_rejected(self, registry):
        before = copy.deepcopy(registry.snapshot())
        with pytest.raises(ValidationError):
            registry.register(make_info(group=7), "owner")
        assert registry.snapshot() == before


class TestImmutability:
    """Registered records cannot be changed."""

    def test_asset_is_frozen(self, registry):
        asset = registry.get_asset(registry.register(make_info(), "owner"))
        with pytest.raises(dataclasses.FrozenInstanceError):
            asset.name = "Other"

    def test_part_is_frozen(self, registry):
        registry.register(make_info(), "owner")
        part = registry.get_raw_part(1)
        with pytest.raises(dataclasses.FrozenInstanceError):
            part.color = "#000"

    def test_input_changes_do_not_leak(self, registry):
        info = make_info()
        asset_id = registry.register(info, "owner")
        info.parts.append(PartInfo(body=BODY, color="#123"))
        info.name = "Changed"
        assert registry.get_asset(asset_id).name == "Red"
        assert len(registry.get_parts(asset_id)) == 1

    def test_disable_keeps_content(self, registry):
        asset_id = registry.register(make_info(), "owner")
        before = registry.get_raw_asset(asset_id)
        registry.set_disabled("owner", asset_id, True)
        assert registry.get_raw_asset(asset_id) == before


class TestBatch:
    """Batch registration is atomic per item, not per batch."""

    def test_middle_failure_keeps_others(self, registry):
        infos = [
            make_info(name="first"),
            make_info(name="second", colors=("not;valid",)),
            make_info(name="third"),
        ]
        results = registry.register_batch(infos, "owner")

        assert [r.ok for r in results] == [True, False, True]
        assert results[0].asset_id == 1
        assert results[1].asset_id is None
        assert isinstance(results[1].error, ValidationError)
        assert results[2].asset_id == 2

        assert registry.asset_id_by_name("Shapes", "Squares", "first") == 1
        assert registry.asset_id_by_name("Shapes", "Squares", "third") == 2
        with pytest.raises(NotFoundError):
            registry.asset_id_by_name("Shapes", "Squares", "second")
        assert registry.part_count() == 2

    def test_third_item_independent_of_second(self, registry):
        """The third item gets the same id it would get without the bad second item."""
        alone = AssetRegistry()
        alone.register_batch([make_info(name="first"), make_info(name="third")], "owner")

        registry.register_batch(
            [make_info(name="first"), make_info(name="bad/name"), make_info(name="third")],
            "owner",
        )
        assert registry.snapshot() == alone.snapshot()

    def test_duplicate_inside_batch(self, registry):
        results = registry.register_batch([make_info(), make_info()], "owner")
        assert results[0].ok
        assert isinstance(results[1].error, DuplicateError)
        assert registry.asset_count() == 1

    def test_events_only_for_successes(self, registry):
        events = []
        registry.subscribe(events.append)
        registry.register_batch([make_info(name="a"), make_info(name="<b>")], "owner")
        assert [e.asset_id for e in events] == [1]

    def test_access_checked_for_whole_batch(self, registry):
        with pytest.raises(AccessDenied):
            registry.register_batch([make_info()], "stranger")
        assert registry.asset_count() == 0

    def test_non_integer_size_is_item_error(self, registry):
        results = registry.register_batch(
            [make_info(name="a"), make_info(name="b", width="10"), make_info(name="c")],
            "owner",
        )
        assert [r.ok for r in results] == [True, False, True]
        assert isinstance(results[1].error, ValidationError)

    def test_unexpected_error_keeps_committed_items(self, store_dir):
        """Items committed before an unexpected error are saved and announced."""

        class ExplodingValidator(CharsetValidator):
            def validate(self, data: bytes) -> bool:
                if data == b"boom":
                    raise RuntimeError("validator failure")
                return super().validate(data)

        registry = AssetRegistry(store_dir=store_dir, validator=ExplodingValidator())
        events = []
        registry.subscribe(events.append)

        with pytest.raises(RuntimeError):
            registry.register_batch([make_info(name="a"), make_info(name="boom")], "owner")

        assert [e.asset_id for e in events] == [1]
        assert AssetRegistry(store_dir=store_dir).asset_count() == 1


class TestQueries:
    """Test index queries and bounds checking."""

    @pytest.fixture
    def populated(self, registry):
        registry.register(make_info(group="Shapes", category="Squares", name="Red"), "owner")
        registry.register(make_info(group="Shapes", category="Squares", name="Blue"), "owner")
        registry.register(make_info(group="Shapes", category="Circles", name="Red"), "owner")
        registry.register(make_info(group="Icons", category="Arrows", name="Up"), "owner")
        return registry

    def test_groups(self, populated):
        assert populated.group_count() == 2
        assert populated.group_name_at(0) == "Shapes"
        assert populated.group_name_at(1) == "Icons"
        with pytest.raises(OutOfRangeError):
            populated.group_name_at(2)

    def test_categories(self, populated):
        assert populated.category_count("Shapes") == 2
        assert populated.category_name_at("Shapes", 0) == "Squares"
        assert populated.category_name_at("Shapes", 1) == "Circles"
        with pytest.raises(OutOfRangeError):
            populated.category_name_at("Shapes", 2)

    def test_unknown_group_has_no_categories(self, populated):
        assert populated.category_count("Nope") == 0
        with pytest.raises(OutOfRangeError):
            populated.category_name_at("Nope", 0)

    def test_assets_in_category(self, populated):
        assert populated.asset_count_in_category("Shapes", "Squares") == 2
        assert populated.asset_id_at("Shapes", "Squares", 0) == 1
        assert populated.asset_id_at("Shapes", "Squares", 1) == 2
        with pytest.raises(OutOfRangeError):
            populated.asset_id_at("Shapes", "Squares", 2)

    def test_unknown_category_has_no_assets(self, populated):
        assert populated.asset_count_in_category("Shapes", "Triangles") == 0
        assert populated.asset_count_in_category("Nope", "Squares") == 0
        with pytest.raises(OutOfRangeError):
            populated.asset_id_at("Shapes", "Triangles", 0)

    def test_negative_index_rejected(self, populated):
        with pytest.raises(OutOfRangeError):
            populated.group_name_at(-1)
        with pytest.raises(OutOfRangeError):
            populated.asset_id_at("Shapes", "Squares", -1)

    def test_lookup_by_name(self, populated):
        assert populated.asset_id_by_name("Shapes", "Circles", "Red") == 3
        assert populated.asset_id_by_name("Icons", "Arrows", "Up") == 4
        with pytest.raises(NotFoundError):
            populated.asset_id_by_name("Icons", "Arrows", "Down")

    def test_attributes(self, populated):
        attrs = populated.get_attributes(3)
        assert attrs.group == "Shapes"
        assert attrs.category == "Circles"
        assert attrs.name == "Red"
        assert attrs.width == 1024
        assert populated.describe(4) == "Icons/Arrows/Up"

    def test_unknown_asset(self, populated):
        with pytest.raises(NotFoundError):
            populated.get_asset(0)
        with pytest.raises(NotFoundError):
            populated.get_asset(5)
        with pytest.raises(NotFoundError):
            populated.get_raw_part(99)

    def test_contains_and_len(self, populated):
        assert 4 in populated
        assert 5 not in populated
        assert len(populated) == 4

    def test_queries_do_not_change_state(self, populated):
        before = copy.deepcopy(populated.snapshot())
        populated.group_count()
        populated.category_count("Nope")
        populated.asset_count_in_category("Shapes", "Squares")
        populated.get_attributes(1)
        assert populated.snapshot() == before


class TestVisibility:
    """Test disabling assets."""

    def test_disabled_hidden_from_public_reads(self, registry):
        asset_id = registry.register(make_info(), "owner")
        registry.set_disabled("owner", asset_id, True)

        assert registry.is_disabled(asset_id)
        with pytest.raises(AssetDisabledError):
            registry.get_asset(asset_id)
        with pytest.raises(AssetDisabledError):
            registry.get_parts(asset_id)
        with pytest.raises(AssetDisabledError):
            registry.get_attributes(asset_id)

    def test_raw_reads_bypass_flag(self, registry):
        asset_id = registry.register(make_info(), "owner")
        registry.set_disabled("owner", asset_id, True)
        assert registry.get_raw_asset(asset_id).name == "Red"
        assert registry.get_raw_part(1).body == BODY

    def test_disabled_still_indexed(self, registry):
        asset_id = registry.register(make_info(), "owner")
        registry.set_disabled("owner", asset_id, True)
        assert registry.asset_id_by_name("Shapes", "Squares", "Red") == asset_id
        with pytest.raises(DuplicateError):
            registry.register(make_info(), "owner")

    def test_enable_again(self, registry):
        asset_id = registry.register(make_info(), "owner")
        registry.set_disabled("owner", asset_id, True)
        registry.set_disabled("owner", asset_id, False)
        assert registry.get_asset(asset_id).name == "Red"

    def test_only_owner_may_disable(self, registry):
        asset_id = registry.register(make_info(), "owner")
        with pytest.raises(AccessDenied):
            registry.set_disabled("mallory", asset_id, True)
        assert not registry.is_disabled(asset_id)

    def test_disable_unknown(self, registry):
        with pytest.raises(NotFoundError):
            registry.set_disabled("owner", 1, True)


class TestAccess:
    """Test allow-list gating of registration."""

    def test_stranger_denied(self, registry):
        with pytest.raises(AccessDenied):
            registry.register(make_info(), "stranger")
        assert registry.asset_count() == 0

    def test_allowed_submitter(self, registry):
        registry.access.set_allowed("owner", "alice", True)
        assert registry.register(make_info(), "alice") == 1

    def test_bypass(self, registry):
        registry.access.set_bypass("owner", True)
        assert registry.register(make_info(), "anyone") == 1

    def test_shared_access_control(self):
        access = AccessControl(owner="admin", bypass=True)
        registry = AssetRegistry(access=access)
        assert registry.owner == "admin"
        registry.register(make_info(), "bob")
        with pytest.raises(AccessDenied):
            registry.set_disabled("bob", 1, True)


class TestPersistence:
    """Test saving and loading the registry."""

    def test_reload(self, store_dir):
        registry = AssetRegistry(store_dir=store_dir)
        registry.register(make_info(group="G1", category="C1", name="a"), "owner")
        registry.register(make_info(group="G2", category="C1", name="b", soulbound="0x1"), "owner")
        registry.register(make_info(group="G1", category="C2", name="c", colors=("", "#FFF")), "owner")
        registry.set_disabled("owner", 2, True)

        reloaded = AssetRegistry(store_dir=store_dir)
        assert reloaded.snapshot() == registry.snapshot()
        assert reloaded.is_disabled(2)
        assert reloaded.get_raw_part(4).body == BODY
        assert reloaded.get_raw_asset(2).soulbound == "0x1"

    def test_reload_continues_counters(self, store_dir):
        registry = AssetRegistry(store_dir=store_dir)
        registry.register(make_info(name="a"), "owner")

        reloaded = AssetRegistry(store_dir=store_dir)
        assert reloaded.register(make_info(name="b"), "owner") == 2
        assert reloaded.get_asset(2).part_ids == (2,)
        assert reloaded.asset_id_at("Shapes", "Squares", 1) == 2

    def test_failed_registration_not_saved(self, store_dir):
        registry = AssetRegistry(store_dir=store_dir)
        registry.register(make_info(), "owner")
        saved = (store_dir / "registry.json").read_text()

        with pytest.raises(DuplicateError):
            registry.register(make_info(), "owner")
        assert (store_dir / "registry.json").read_text() == saved

    def test_corrupt_file_raises(self, store_dir):
        (store_dir / "registry.json").write_text("{not json")
        with pytest.raises(ValueError):
            AssetRegistry(store_dir=store_dir)
