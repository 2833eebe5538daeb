"""
Preset Loader - Load and validate HMD preset YAML files.

A preset bundles the optical configuration, the initial headset pose, the
picture-in-picture policy and the scripted motion for one viewer model.
Presets are read-only inputs; nothing is written back.
"""

import yaml
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List

from ..core.animation import AnimationConfig
from ..core.exceptions import ConfigurationError, PresetLoadError
from ..optics.config import OpticalConfig
from ..rig.eye_rig import DEFAULT_LENS_DIAMETER
from ..rig.pose import HMDPose
from ..viewport.compositor import DisplayMode, PIPConfig


@dataclass
class HMDPreset:
    """Complete preset definition."""
    name: str
    description: str = ""
    optics: OpticalConfig = field(default_factory=OpticalConfig)
    pose: HMDPose = field(default_factory=HMDPose)
    pip: PIPConfig = field(default_factory=PIPConfig)
    animation: AnimationConfig = field(default_factory=AnimationConfig)
    display_mode: DisplayMode = DisplayMode.SIMULATION
    lens_diameter: float = DEFAULT_LENS_DIAMETER
    notes: str = ""

    @classmethod
    def from_dict(cls, data: Dict) -> 'HMDPreset':
        """Create from dictionary (YAML parsed)."""
        if not isinstance(data, dict):
            raise ConfigurationError("Preset must be a mapping")
        return cls(
            name=data.get('name', 'unnamed'),
            description=data.get('description', ''),
            optics=OpticalConfig.from_dict(data.get('optics', {})),
            pose=HMDPose.from_dict(data.get('pose', {})),
            pip=PIPConfig.from_dict(data.get('pip', {})),
            animation=AnimationConfig.from_dict(data.get('animation', {})),
            display_mode=DisplayMode(data.get('display_mode', DisplayMode.SIMULATION.value)),
            lens_diameter=float(data.get('lens_diameter', DEFAULT_LENS_DIAMETER)),
            notes=data.get('notes', ""),
        )


class PresetLoader:
    """Load presets from YAML files."""

    DEFAULT_PRESETS_DIR = Path(__file__).parent.parent.parent / 'config' / 'presets'

    # Built-in presets (fallback if no YAML)
    BUILTIN_PRESETS = {
        'cardboard_clone': {
            'name': 'cardboard_clone',
            'description': 'Cardboard-style viewer with a longer focal length lens',
            'optics': {
                'f': 0.043, 'ipd': 0.065, 'eyeRelief': 0.018,
                'distLens2Display': 0.042, 'displayWidth': 0.12096,
                'displayHeight': 0.068, 'farFromNear': 1.5,
            },
        },
        'cardboard_v2': {
            'name': 'cardboard_v2',
            'description': 'Google Cardboard 2.0 viewer',
            'optics': {
                'f': 0.040, 'ipd': 0.064, 'eyeRelief': 0.018,
                'distLens2Display': 0.039, 'displayWidth': 0.12096,
                'displayHeight': 0.06803, 'farFromNear': 1.5,
            },
        },
    }

    def __init__(self, presets_dir: Path = None):
        self.presets_dir = Path(presets_dir) if presets_dir else self.DEFAULT_PRESETS_DIR
        self._cache: Dict[str, HMDPreset] = {}

    def list_presets(self) -> List[str]:
        """List available preset names."""
        presets = list(self.BUILTIN_PRESETS.keys())

        if self.presets_dir.exists():
            for f in self.presets_dir.glob('*.yaml'):
                if f.stem not in presets:
                    presets.append(f.stem)

        return sorted(presets)

    def load(self, name: str) -> HMDPreset:
        """Load preset by name; YAML files take precedence over built-ins."""
        if name in self._cache:
            return self._cache[name]

        yaml_path = self.presets_dir / f'{name}.yaml'
        if yaml_path.exists():
            preset = self.load_from_file(yaml_path)
        elif name in self.BUILTIN_PRESETS:
            preset = HMDPreset.from_dict(self.BUILTIN_PRESETS[name])
        else:
            raise PresetLoadError(name, f"Available presets: {self.list_presets()}")

        self._cache[name] = preset
        return preset

    def load_from_file(self, path: Path) -> HMDPreset:
        """Load preset from specific file."""
        path = Path(path)
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as exc:
            raise PresetLoadError(path.stem, str(exc)) from exc
        try:
            preset = HMDPreset.from_dict(data)
        except (ConfigurationError, ValueError, TypeError) as exc:
            raise PresetLoadError(path.stem, str(exc)) from exc
        if not data.get('name'):
            preset.name = path.stem
        return preset

    @staticmethod
    def validate(preset: HMDPreset) -> List[str]:
        """Validate preset, return list of issues."""
        issues = []

        if not preset.name:
            issues.append("Preset must have a name")

        try:
            preset.optics.validate()
        except ConfigurationError as exc:
            issues.append(str(exc))

        pip = preset.pip
        for label, value in (("base_width_fraction", pip.base_width_fraction),
                             ("max_width_fraction", pip.max_width_fraction),
                             ("max_height_fraction", pip.max_height_fraction)):
            if not 0 < value <= 1:
                issues.append(f"pip.{label} must be in (0, 1]")
        if pip.max_width_fraction > 0.5:
            issues.append("pip.max_width_fraction must not exceed 0.5 (two viewports side by side)")

        if preset.lens_diameter <= 0:
            issues.append("lens_diameter must be positive")

        return issues


__all__ = ['HMDPreset', 'PresetLoader']
