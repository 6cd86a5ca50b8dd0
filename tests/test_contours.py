"""Tests for contour extraction."""

import cv2
import numpy as np


class TestExtractContours:
    """Tests for the extract_contours function."""

    def test_empty_skeleton(self, default_config):
        """No skeleton pixels, no contours."""
        from tracepage.strokes.contours import extract_contours

        kept, found = extract_contours(np.zeros((40, 40), dtype=np.uint8), default_config)

        assert kept == []
        assert found == 0

    def test_bar_skeleton_single_contour(self, bar_mask, default_config):
        """The skeleton of a bar is one connected trace without holes."""
        from tracepage.strokes.contours import extract_contours
        from tracepage.strokes.skeletonize import skeletonize

        skeleton, _ = skeletonize(bar_mask, default_config)
        kept, found = extract_contours(skeleton, default_config)

        assert found == 1
        assert len(kept) == 1
        assert kept[0].parent is None
        assert kept[0].is_hole is False

    def test_short_traces_dropped(self, default_config):
        """Traces shorter than the minimum arc length are noise."""
        from tracepage.strokes.contours import extract_contours

        skeleton = np.zeros((50, 150), dtype=np.uint8)
        skeleton[10, 10:111] = 255
        skeleton[30, 10:16] = 255

        kept, found = extract_contours(skeleton, default_config)

        assert found == 2
        assert len(kept) == 1
        assert kept[0].arc_length == 100.0
        assert kept[0].perimeter == 200.0

    def test_chain_approximation(self, default_config):
        """A straight run is stored by its end points only."""
        from tracepage.strokes.contours import extract_contours

        skeleton = np.zeros((50, 150), dtype=np.uint8)
        skeleton[10, 10:111] = 255

        kept, _ = extract_contours(skeleton, default_config)

        assert sorted(map(tuple, kept[0].points)) == [(10, 10), (110, 10)]

    def test_ring_hierarchy(self, default_config):
        """A closed loop gives an outer contour and a hole inside it."""
        from tracepage.strokes.contours import extract_contours

        skeleton = np.zeros((80, 80), dtype=np.uint8)
        cv2.rectangle(skeleton, (10, 10), (60, 60), 255, 1)

        kept, found = extract_contours(skeleton, default_config)

        assert found == 2
        assert len(kept) == 2
        holes = [c for c in kept if c.is_hole]
        assert len(holes) == 1
        assert holes[0].parent is not None
        assert kept[holes[0].parent].is_hole is False
        assert [c.index for c in kept] == [0, 1]

    def test_min_length_configurable(self, default_config):
        """Raising the threshold filters longer traces too."""
        from tracepage.strokes.contours import extract_contours

        skeleton = np.zeros((50, 150), dtype=np.uint8)
        skeleton[10, 10:111] = 255

        default_config.contours.min_arc_length = 150
        kept, found = extract_contours(skeleton, default_config)

        assert found == 1
        assert kept == []

    def test_contour_points_and_lengths(self, default_config):
        """A straight run compresses to its two end points."""
        from tracepage.strokes.contours import extract_contours

        skeleton = np.zeros((50, 150), dtype=np.uint8)
        skeleton[10, 10:111] = 255

        kept, _ = extract_contours(skeleton, default_config)

        assert kept[0].points == [[10, 10], [110, 10]]
        assert kept[0].arc_length == 100.0
        assert kept[0].perimeter == 200.0
