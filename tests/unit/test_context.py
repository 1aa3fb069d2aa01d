# Author: Green Mountain Systems AI Inc.
# Donated to IAB Tech Lab

"""Unit tests for validation context building."""

import pytest
from pydantic import ValidationError

from ortb_inspector.engines.context_builder import build_context, detect_ctv, detect_inventory_types
from ortb_inspector.models.validation import InventoryType, PartnerProfile


class TestInventoryDetection:
    """Tests for inventory type detection."""

    def test_detection_order_is_fixed(self):
        """Test that types are ordered banner, video, audio, native, dooh."""
        root = {
            "id": "r",
            "imp": [
                {"id": "1", "native": {"request": "{}"}, "qty": {"multiplier": 1}},
                {"id": "2", "audio": {}},
                {"id": "3", "video": {}},
                {"id": "4", "banner": {}},
            ],
        }

        assert detect_inventory_types(root) == (
            InventoryType.BANNER,
            InventoryType.VIDEO,
            InventoryType.AUDIO,
            InventoryType.NATIVE,
            InventoryType.DOOH,
        )

    def test_qty_marks_dooh(self):
        """Test that imp.qty identifies DOOH inventory."""
        root = {"id": "r", "imp": [{"id": "1", "banner": {}, "qty": {"multiplier": 2.5}}]}
        assert detect_inventory_types(root) == (InventoryType.BANNER, InventoryType.DOOH)

    def test_types_are_not_duplicated(self):
        """Test that repeated media across impressions yields one tag."""
        root = {"id": "r", "imp": [{"id": "1", "video": {}}, {"id": "2", "video": {}}]}
        assert detect_inventory_types(root) == (InventoryType.VIDEO,)

    @pytest.mark.parametrize(
        "root",
        [None, {"id": "r", "imp": []}, {"id": "r", "imp": ["x", 3, None]}, {"imp": "bad"}],
    )
    def test_no_inventory(self, root):
        """Test that missing or malformed impressions yield no types."""
        assert detect_inventory_types(root) == ()


class TestCtvDetection:
    """Tests for CTV detection."""

    @pytest.mark.parametrize("device_type", [3, 7])
    def test_ctv_device_types(self, device_type):
        """Test that Connected TV and Set Top Box are CTV."""
        assert detect_ctv({"device": {"devicetype": device_type}}) is True

    @pytest.mark.parametrize("device_type", [1, 2, 4, 5, 6, 8, "3", True, None])
    def test_other_device_types(self, device_type):
        """Test that other codes and non-integer values are not CTV."""
        assert detect_ctv({"device": {"devicetype": device_type}}) is False

    def test_missing_device(self):
        """Test that requests without a device are not CTV."""
        assert detect_ctv({"id": "r", "imp": []}) is False
        assert detect_ctv(None) is False


class TestBuildContext:
    """Tests for build_context."""

    def test_force_ctv(self, site_request):
        """Test that force_ctv overrides device detection."""
        assert build_context(site_request).is_ctv is False
        assert build_context(site_request, force_ctv=True).is_ctv is True

    def test_auto_ctv(self, ctv_request):
        """Test that CTV is detected from the device type."""
        context = build_context(ctv_request)

        assert context.is_ctv is True
        assert context.has_inventory(InventoryType.VIDEO)
        assert not context.has_inventory(InventoryType.BANNER)

    def test_root_is_shared_not_copied(self, site_request):
        """Test that rules see the located request object itself."""
        context = build_context(site_request, partner_profile=PartnerProfile.EQ)

        assert context.root is site_request
        assert context.partner_profile == PartnerProfile.EQ

    def test_context_is_read_only(self, site_request):
        """Test that rules cannot mutate the context."""
        context = build_context(site_request)

        with pytest.raises(ValidationError):
            context.is_ctv = True

    def test_missing_root(self):
        """Test the context built when no request was located."""
        context = build_context(None, force_ctv=True)

        assert context.has_root is False
        assert context.inventory_types == ()
        assert context.is_ctv is True
