"""Tests for configuration loading."""

import os


class TestLoadConfig:
    """Tests for load_config and save_default_config."""

    def test_defaults(self):
        """Defaults match the standard tracing page constants."""
        from tracepage.config import load_config

        config = load_config()

        assert config.raster.target_min_dim == 2000
        assert config.binarization.blur_kernel == 3
        assert config.binarization.adaptive_block_size == 21
        assert config.binarization.adaptive_c == 5
        assert config.binarization.dilate_kernel == 3
        assert config.binarization.close_kernel == 3
        assert config.skeleton.kernel == 3
        assert config.contours.min_arc_length == 20
        assert config.simplify.epsilon_factor == 0.003
        assert config.dash.width_factor == 0.003
        assert config.dash.min_stroke_width == 4
        assert config.dash.gap_ratio == 2.5

    def test_missing_file_uses_defaults(self, temp_dir):
        from tracepage.config import PipelineConfig, load_config

        config = load_config(os.path.join(temp_dir, "absent.yaml"))

        assert config == PipelineConfig()

    def test_yaml_override(self, temp_dir):
        """Known keys override defaults, unknown keys are ignored."""
        from tracepage.config import load_config

        path = os.path.join(temp_dir, "config.yaml")
        with open(path, "w", encoding="utf-8") as f:
            f.write(
                "binarization:\n"
                "  adaptive_c: 9\n"
                "  not_a_key: 1\n"
                "dash:\n"
                "  gap_ratio: 3.0\n"
                "unknown_section:\n"
                "  x: 1\n"
            )

        config = load_config(path)

        assert config.binarization.adaptive_c == 9
        assert config.binarization.adaptive_block_size == 21
        assert not hasattr(config.binarization, "not_a_key")
        assert config.dash.gap_ratio == 3.0

    def test_empty_file(self, temp_dir):
        from tracepage.config import PipelineConfig, load_config

        path = os.path.join(temp_dir, "empty.yaml")
        open(path, "w").close()

        assert load_config(path) == PipelineConfig()

    def test_save_default_config(self, temp_dir):
        """The written defaults load back as the defaults."""
        from tracepage.config import PipelineConfig, load_config, save_default_config

        path = os.path.join(temp_dir, "defaults.yaml")
        save_default_config(path)

        assert os.path.exists(path)
        assert load_config(path) == PipelineConfig()
