"""
HMD preset loading tests.
"""

import pytest
import sys
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.core.exceptions import ConfigurationError, PresetLoadError
from src.optics.config import OpticalConfig
from src.presets import HMDPreset, PresetLoader
from src.viewport.compositor import Anchor, DisplayMode, PIPConfig


class TestPresetLoader:
    """Bundled presets and built-in fallbacks."""

    def setup_method(self):
        self.loader = PresetLoader()

    def test_list_presets(self):
        names = self.loader.list_presets()
        assert names == sorted(names)
        assert {'cardboard_clone', 'cardboard_v2', 'wide_viewer'} <= set(names)

    def test_load_cardboard_v2(self):
        preset = self.loader.load('cardboard_v2')
        assert preset.name == 'cardboard_v2'
        assert preset.optics.f == 0.040
        assert preset.optics.ipd == 0.064
        assert preset.optics.dist_lens2display == 0.039
        assert preset.display_mode is DisplayMode.SIMULATION

    def test_load_wide_viewer(self):
        preset = self.loader.load('wide_viewer')
        assert preset.optics.far_from_near == 3.0
        assert preset.pip.anchor is Anchor.BOTTOM_RIGHT
        assert preset.pip.scale_with_display
        assert preset.animation.frequency == 0.2
        assert preset.lens_diameter == 0.040

    def test_load_is_cached(self):
        assert self.loader.load('cardboard_clone') is self.loader.load('cardboard_clone')

    def test_unknown_preset(self):
        with pytest.raises(PresetLoadError) as exc_info:
            self.loader.load('no_such_viewer')
        assert exc_info.value.preset_name == 'no_such_viewer'
        assert 'cardboard_v2' in str(exc_info.value)

    def test_bundled_presets_validate(self):
        for name in self.loader.list_presets():
            assert PresetLoader.validate(self.loader.load(name)) == [], name

    def test_builtin_fallback_without_directory(self, temp_output_dir):
        loader = PresetLoader(temp_output_dir / 'missing')
        assert loader.list_presets() == ['cardboard_clone', 'cardboard_v2']
        preset = loader.load('cardboard_clone')
        assert preset.optics == OpticalConfig()

    def test_yaml_overrides_builtin(self, temp_output_dir):
        (temp_output_dir / 'cardboard_v2.yaml').write_text(
            "name: cardboard_v2\noptics:\n  ipd: 0.060\n", encoding='utf-8')
        preset = PresetLoader(temp_output_dir).load('cardboard_v2')
        assert preset.optics.ipd == 0.060


class TestLoadFromFile:
    """Malformed files surface as PresetLoadError."""

    def test_name_defaults_to_file_stem(self, temp_output_dir):
        path = temp_output_dir / 'my_viewer.yaml'
        path.write_text("optics:\n  f: 0.05\n  distLens2Display: 0.04\n", encoding='utf-8')
        preset = PresetLoader().load_from_file(path)
        assert preset.name == 'my_viewer'
        assert preset.optics.f == 0.05

    def test_missing_file(self, temp_output_dir):
        with pytest.raises(PresetLoadError):
            PresetLoader().load_from_file(temp_output_dir / 'absent.yaml')

    def test_invalid_yaml(self, temp_output_dir):
        path = temp_output_dir / 'broken.yaml'
        path.write_text("optics: [unclosed\n", encoding='utf-8')
        with pytest.raises(PresetLoadError):
            PresetLoader().load_from_file(path)

    def test_not_a_mapping(self, temp_output_dir):
        path = temp_output_dir / 'list.yaml'
        path.write_text("- 1\n- 2\n", encoding='utf-8')
        with pytest.raises(PresetLoadError):
            PresetLoader().load_from_file(path)

    def test_unknown_optics_key(self, temp_output_dir):
        path = temp_output_dir / 'typo.yaml'
        path.write_text("optics:\n  focal: 0.05\n", encoding='utf-8')
        with pytest.raises(PresetLoadError, match="focal"):
            PresetLoader().load_from_file(path)

    def test_bad_anchor(self, temp_output_dir):
        path = temp_output_dir / 'anchor.yaml'
        path.write_text("pip:\n  anchor: middle\n", encoding='utf-8')
        with pytest.raises(PresetLoadError):
            PresetLoader().load_from_file(path)

    def test_load_error_is_configuration_error(self, temp_output_dir):
        with pytest.raises(ConfigurationError):
            PresetLoader().load_from_file(temp_output_dir / 'absent.yaml')


class TestValidate:
    """Issue reporting without raising."""

    def test_real_image_regime_reported(self):
        preset = HMDPreset(name='bad', optics=OpticalConfig(f=0.03, dist_lens2display=0.04))
        issues = PresetLoader.validate(preset)
        assert len(issues) == 1
        assert 'upright virtual image' in issues[0]

    def test_pip_fractions(self):
        preset = HMDPreset(name='bad', pip=PIPConfig(base_width_fraction=0.0, max_width_fraction=0.6))
        issues = PresetLoader.validate(preset)
        assert any('base_width_fraction' in issue for issue in issues)
        assert any('side by side' in issue for issue in issues)

    def test_missing_name_and_lens(self):
        issues = PresetLoader.validate(HMDPreset(name='', lens_diameter=0.0))
        assert "Preset must have a name" in issues
        assert "lens_diameter must be positive" in issues

    def test_from_dict_requires_mapping(self):
        with pytest.raises(ConfigurationError):
            HMDPreset.from_dict(None)
