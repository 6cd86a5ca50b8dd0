"""Tests for dotted outline rendering."""

import numpy as np
import pytest


class TestDashStyle:
    """Tests for the stroke style derived from the page width."""

    def test_scenario_width(self, default_config):
        """A 3333px page strokes 10px dots every 25px."""
        from tracepage.models import DashStyle

        style = DashStyle.for_width(3333, default_config.dash)

        assert style.stroke_width == 10
        assert style.gap_length == 25.0
        assert style.pattern == [0.0, 25.0]
        assert style.line_cap == "round"
        assert style.line_join == "round"

    def test_minimum_stroke_width(self, default_config):
        """Narrow pages still get 4px dots."""
        from tracepage.models import DashStyle

        style = DashStyle.for_width(500, default_config.dash)

        assert style.stroke_width == 4
        assert style.gap_length == 10.0

    def test_style_is_frozen(self, default_config):
        """DashStyle cannot be changed after construction."""
        from pydantic import ValidationError
        from tracepage.models import DashStyle

        style = DashStyle.for_width(2000, default_config.dash)

        with pytest.raises(ValidationError):
            style.stroke_width = 99


class TestDotPositions:
    """Tests for dot placement along a path."""

    def test_straight_segment(self):
        """Dots at 0, gap, 2*gap ... including the end when it lands exactly."""
        from tracepage.render.dashed import dot_positions

        dots = dot_positions([[0, 0], [100, 0]], 25)

        assert dots[:, 0].tolist() == [0, 25, 50, 75, 100]
        assert np.all(dots[:, 1] == 0)

    def test_pattern_continues_through_vertex(self):
        """Arc length carries over from one segment to the next."""
        from tracepage.render.dashed import dot_positions

        dots = dot_positions([[0, 0], [10, 0], [10, 30]], 25)

        assert dots.tolist() == [[0.0, 0.0], [10.0, 15.0]]

    def test_zero_length_path(self):
        """A path that never moves gets a single dot."""
        from tracepage.render.dashed import dot_positions

        dots = dot_positions([[5, 5], [5, 5]], 25)

        assert dots.tolist() == [[5.0, 5.0]]

    def test_repeated_points_skipped(self):
        """Duplicate vertices do not shift the pattern."""
        from tracepage.render.dashed import dot_positions

        dots = dot_positions([[0, 0], [20, 0], [20, 0], [40, 0]], 10)

        assert dots[:, 0].tolist() == [0, 10, 20, 30, 40]


class TestRenderDashed:
    """Tests for the render_dashed function."""

    def test_no_polylines_gives_white_page(self, default_config):
        """Nothing to draw leaves a plain white page."""
        from tracepage.render.dashed import render_dashed

        page, _ = render_dashed([], 300, 200, default_config)

        assert page.shape == (200, 300, 3)
        assert page.dtype == np.uint8
        assert np.all(page == 255)

    def test_dots_are_drawn(self, default_config):
        """Dots land on the pattern positions with white between them."""
        from tracepage.models import Polyline
        from tracepage.render.dashed import render_dashed

        polyline = Polyline(contour_index=0, points=[[50, 100], [350, 100]])
        page, style = render_dashed([polyline], 400, 200, default_config)

        assert style.stroke_width == 4
        assert style.gap_length == 10.0
        for x in (50, 60, 200, 350):
            assert page[100, x, 0] < 100
        assert page[100, 55, 0] > 200
        assert np.all(page[10, 10] == 255)
        assert np.all(page[100, 360:] == 255)

    def test_degenerate_polyline_ignored(self, default_config):
        """Single-point polylines are never stroked."""
        from tracepage.models import Polyline
        from tracepage.render.dashed import render_dashed

        polyline = Polyline(contour_index=0, points=[[50, 50]])
        page, _ = render_dashed([polyline], 100, 100, default_config)

        assert np.all(page == 255)

    def test_zero_area(self, default_config):
        """A zero-area canvas is a no-op."""
        from tracepage.render.dashed import render_dashed

        page, _ = render_dashed([], 0, 0, default_config)

        assert page.size == 0

    def test_page_is_opaque_rgb(self, default_config):
        """The alpha channel is flattened away."""
        from tracepage.models import Polyline
        from tracepage.render.dashed import render_dashed

        polyline = Polyline(contour_index=0, points=[[10, 10], [90, 90]])
        page, _ = render_dashed([polyline], 100, 100, default_config)

        assert page.shape == (100, 100, 3)


class TestParseColor:
    """Tests for stroke colour parsing."""

    def test_named(self):
        from tracepage.render.dashed import parse_color

        assert parse_color("black") == (0, 0, 0)

    def test_hex(self):
        from tracepage.render.dashed import parse_color

        assert parse_color("#ff8000") == (255, 128, 0)

    def test_unknown(self):
        from tracepage.render.dashed import parse_color

        with pytest.raises(ValueError):
            parse_color("chartreuse-ish")
