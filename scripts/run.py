"""
CLI Entrypoint for the HMD optics simulator

Runs the controller headless: applies parameter edits, advances the scripted
motion and prints the derived optics, eye poses and viewport layout.

Usage:
    python -m scripts.run --preset cardboard_v2
    python -m scripts.run --set ipd=0.064 --set f=0.045 --frames 120 --json
    python -m scripts.run --mode vr --canvas 800x600
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional, Tuple

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.core.exceptions import HMDSimError, ConfigurationError
from src.hmd import HMDController, OpticalState
from src.optics.config import ParameterId
from src.presets import PresetLoader
from src.utils.logging import setup_logging, get_logger


logger = get_logger("cli")


def parse_canvas(text: str) -> Tuple[int, int]:
    """'1920x1080' -> (1920, 1080)"""
    try:
        width, height = (int(part) for part in text.lower().split('x'))
    except ValueError:
        raise argparse.ArgumentTypeError(f"Canvas must look like WIDTHxHEIGHT, got '{text}'")
    if width <= 0 or height <= 0:
        raise argparse.ArgumentTypeError(f"Canvas must have a positive size, got '{text}'")
    return width, height


def parse_assignment(text: str) -> Tuple[str, float]:
    """'ipd=0.064' -> ('ipd', 0.064)"""
    name, sep, value = text.partition('=')
    if not sep or not name.strip():
        raise argparse.ArgumentTypeError(f"Edits must look like NAME=VALUE, got '{text}'")
    try:
        return name.strip(), float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Value of '{name.strip()}' is not a number: '{value}'")


class HeadlessRunner:
    """Drives one controller for a fixed number of frames."""

    def __init__(self, controller: HMDController, edits: List[Tuple[str, float]] = None,
                 frames: int = 60, dt: float = 1.0 / 60.0):
        self.controller = controller
        self.edits = edits or []
        self.frames = frames
        self.dt = dt
        self.rejected: List[Dict] = []
        self.updates = 0

        controller.on_values_updated.add(self._on_update)

    def _on_update(self, state: OpticalState):
        self.updates += 1

    def apply_edits(self):
        """Apply edits in order; rejected edits are reported and skipped."""
        for name, value in self.edits:
            try:
                self.controller.set_parameter(name, value)
            except ConfigurationError as exc:
                logger.warning(f"Edit {name}={value} rejected: {exc}")
                self.rejected.append({'param': name, 'value': value, 'error': str(exc)})

    def run(self) -> OpticalState:
        self.apply_edits()
        for _ in range(self.frames):
            self.controller.tick(self.dt)
        return self.controller.snapshot()

    def report(self) -> Dict:
        state = self.controller.snapshot()
        report = state.to_dict()
        report['pose'] = self.controller.pose.to_dict()
        report['viewport']['pip_enabled'] = self.controller.pip_enabled
        report['frames'] = self.frames
        report['updates'] = self.updates
        report['rejected'] = self.rejected
        return report


def print_text_report(report: Dict, out=None):
    out = out or sys.stdout
    params = report['params']
    calc = report['calculated']
    view = report['viewport']

    print(f"\n{'='*50}", file=out)
    print("HMD Optics Simulator", file=out)
    print(f"{'='*50}", file=out)
    print("Parameters:", file=out)
    for key, value in params.items():
        print(f"  {key:<18} {value:.5f}", file=out)
    print("Calculated:", file=out)
    for key, value in calc.items():
        print(f"  {key:<18} {value:.5f}", file=out)
    print("Eyes:", file=out)
    eyes = report['eyes']
    print(f"  left  {_fmt_vec(eyes['eyePosL'])}", file=out)
    print(f"  right {_fmt_vec(eyes['eyePosR'])}", file=out)
    print(f"Viewport ({view['mode']}, canvas {view['canvas_size'][0]}x{view['canvas_size'][1]}):",
          file=out)
    for side in ('l', 'r'):
        px = view[f'pixels_{side}']
        print(f"  {side.upper()}: x={px['x']:.1f} y={px['y']:.1f} "
              f"w={px['width']:.1f} h={px['height']:.1f}", file=out)
    if report['rejected']:
        print("Rejected edits:", file=out)
        for item in report['rejected']:
            print(f"  {item['param']}={item['value']}: {item['error']}", file=out)
    print(f"{'='*50}\n", file=out)


def _fmt_vec(values) -> str:
    return "(" + ", ".join(f"{v:+.4f}" for v in values) + ")"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Stereoscopic HMD optics simulator (headless)')
    parser.add_argument('--preset', '-p', type=str, default='cardboard_clone',
                        help='Preset name')
    parser.add_argument('--presets-dir', type=str, default=None,
                        help='Directory with preset YAML files')
    parser.add_argument('--set', dest='edits', action='append', type=parse_assignment,
                        default=[], metavar='NAME=VALUE',
                        help=f"Parameter edit, repeatable ({', '.join(p.value for p in ParameterId)})")
    parser.add_argument('--frames', '-n', type=int, default=60,
                        help='Animation frames to run')
    parser.add_argument('--dt', type=float, default=1.0 / 60.0,
                        help='Frame time (seconds)')
    parser.add_argument('--mode', '-m', choices=['simulation', 'vr'], default=None,
                        help='Display mode (defaults to the preset)')
    parser.add_argument('--canvas', type=parse_canvas, default=(1920, 1080),
                        help='Canvas size WIDTHxHEIGHT')
    parser.add_argument('--user-control', action='store_true',
                        help='Hold the preset pose instead of animating')
    parser.add_argument('--no-pip', action='store_true',
                        help='Switch off eye-camera rendering in the PIP viewports')
    parser.add_argument('--json', action='store_true',
                        help='Print the final state as JSON')
    parser.add_argument('--list-presets', action='store_true',
                        help='List available presets and exit')
    parser.add_argument('--log-level', default='WARNING',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'])
    parser.add_argument('--log-file', type=str, default=None)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    setup_logging(level=getattr(logging, args.log_level), log_file=args.log_file,
                  stream=sys.stderr)

    loader = PresetLoader(args.presets_dir)
    if args.list_presets:
        for name in loader.list_presets():
            print(name)
        return 0

    if args.frames < 0:
        print("❌ --frames must not be negative", file=sys.stderr)
        return 2

    try:
        preset = loader.load(args.preset)
        overrides = {'canvas_size': args.canvas}
        if args.mode:
            overrides['display_mode'] = args.mode
        controller = HMDController.from_preset(preset, **overrides)
        if args.user_control:
            controller.set_user_control(True)
        if args.no_pip:
            controller.set_pip_enabled(False)

        runner = HeadlessRunner(controller, args.edits, frames=args.frames, dt=args.dt)
        runner.run()
    except (HMDSimError, ValueError) as exc:
        print(f"❌ {exc}", file=sys.stderr)
        return 1

    report = runner.report()
    report['preset'] = preset.name
    if args.json:
        print(json.dumps(report, indent=2))
    else:
        print_text_report(report)
    return 0


if __name__ == '__main__':
    sys.exit(main())
