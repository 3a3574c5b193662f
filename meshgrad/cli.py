"""Command line interface for meshgrad."""
import argparse
import logging
import sys
from pathlib import Path

from meshgrad.mood import clamp_mood, mood_description, mood_label
from meshgrad.pipeline import MeshGradientPipeline
from meshgrad.types import MeshConfig, VectorizationError


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        prog='meshgrad',
        description='Convert raster images to layered mesh gradient SVG'
    )

    parser.add_argument(
        'input',
        type=str,
        help='Input image path'
    )

    parser.add_argument(
        '-o', '--output',
        type=str,
        help='Output SVG path (default: input.svg)'
    )

    parser.add_argument(
        '--mood',
        type=float,
        default=50.0,
        help='Gradient mood from 0 (Structured) to 100 (Organic) (default: 50)'
    )

    parser.add_argument(
        '--seed',
        type=int,
        default=None,
        help='Random seed for a reproducible mesh (default: new mesh every run)'
    )

    parser.add_argument(
        '--scale',
        type=float,
        default=1.0,
        help='Resize factor applied before sampling (default: 1.0)'
    )

    parser.add_argument(
        '--blur',
        type=float,
        default=1.2,
        help='Gaussian blur sigma applied before sampling, 0 to disable (default: 1.2)'
    )

    parser.add_argument(
        '--no-smooth',
        action='store_true',
        help='Skip resize and blur preprocessing'
    )

    parser.add_argument(
        '--save-stages',
        type=str,
        default=None,
        help='Directory to save pipeline stage debug images'
    )

    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable debug logging'
    )

    return parser


def main(args=None):
    """Main entry point."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    logging.basicConfig(
        level=logging.DEBUG if parsed_args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s'
    )

    input_path = Path(parsed_args.input)
    if not input_path.exists():
        print(f"Error: Input file not found: {input_path}", file=sys.stderr)
        return 1

    if parsed_args.output:
        output_path = Path(parsed_args.output)
    else:
        output_path = input_path.with_suffix('.svg')

    if parsed_args.scale <= 0:
        print(f"Error: --scale must be positive, got {parsed_args.scale}", file=sys.stderr)
        return 1

    mood = clamp_mood(parsed_args.mood)
    config = MeshConfig(
        seed=parsed_args.seed,
        smooth_input=not parsed_args.no_smooth,
        input_scale=parsed_args.scale,
        blur_sigma=parsed_args.blur,
    )

    if parsed_args.save_stages:
        config.save_stages = Path(parsed_args.save_stages)
        print(f"Debug stages will be saved to: {config.save_stages}")

    print(f"Mood: {mood:g} - {mood_label(mood)} ({mood_description(mood)})")

    try:
        pipeline = MeshGradientPipeline(config)
        pipeline.process(input_path, output_path, mood=mood)
        return 0
    except (VectorizationError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
