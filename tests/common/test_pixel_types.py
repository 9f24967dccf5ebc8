"""
Tests for common.base pixel-space models.
"""

from common.base import PixelPoint, PixelQuad, PixelRect


class TestPixelRect:
    """Tests for PixelRect."""

    def test_edges_and_area(self):
        rect = PixelRect(left=10, top=20, width=30, height=40)

        assert rect.right == 40
        assert rect.bottom == 60
        assert rect.area_pixels == 1200
        assert not rect.is_empty

    def test_negative_size_is_empty(self):
        rect = PixelRect(left=0, top=0, width=-5, height=10)

        assert rect.is_empty
        assert rect.area_pixels == 0

    def test_clamp_pulls_anchor_inside(self):
        rect = PixelRect(left=-20, top=900, width=100, height=50)

        clamped = rect.clamp(1000, 800)

        # Bottom edge 950 > 0 but top 900 >= 800: vertical axis collapses
        assert clamped.left == 0
        assert clamped.top == 799
        assert clamped.width == 100
        assert clamped.height == 0

    def test_to_dict(self):
        assert PixelRect(left=1, top=2, width=3, height=4).to_dict() == {
            "left": 1,
            "top": 2,
            "width": 3,
            "height": 4,
        }


class TestPixelQuad:
    """Tests for PixelQuad."""

    def test_corner_order(self):
        quad = PixelQuad(
            top_left=PixelPoint(x=0, y=0),
            top_right=PixelPoint(x=10, y=0),
            bottom_right=PixelPoint(x=10, y=5),
            bottom_left=PixelPoint(x=0, y=5),
        )

        assert [p.as_tuple() for p in quad.corners] == [(0, 0), (10, 0), (10, 5), (0, 5)]
