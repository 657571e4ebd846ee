"""Command line interface for primvec."""
import argparse
import logging
import sys
from pathlib import Path

from primvec.config import PrimitiveConfig
from primvec.pipeline import PrimitivePipeline
from primvec.types import VectorizationError


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        prog='primvec',
        description='Approximate a raster image with primitive shapes and export SVG'
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
        '--png',
        type=str,
        default=None,
        help='Also save the composed raster as PNG'
    )

    parser.add_argument(
        '--steps',
        type=int,
        default=50,
        help='Number of shapes to try adding (default: 50)'
    )

    parser.add_argument(
        '--shapes',
        type=int,
        default=200,
        help='Random candidates sampled per step (default: 200)'
    )

    parser.add_argument(
        '--mutations',
        type=int,
        default=30,
        help='Failed mutations in a row before refinement stops (default: 30)'
    )

    parser.add_argument(
        '--alpha',
        type=float,
        default=0.5,
        help='Shape opacity (default: 0.5)'
    )

    parser.add_argument(
        '--no-mutate-alpha',
        action='store_true',
        help='Keep shape opacity fixed during refinement'
    )

    parser.add_argument(
        '--compute-size',
        type=int,
        default=256,
        help='Longest side of the working raster (default: 256)'
    )

    parser.add_argument(
        '--view-size',
        type=int,
        default=512,
        help='Longest side of the exported image (default: 512)'
    )

    parser.add_argument(
        '--fill',
        type=str,
        default='auto',
        help="Background color, or 'auto' for the image's mean color (default: auto)"
    )

    parser.add_argument(
        '--shape-types',
        type=str,
        default='triangle,rectangle,ellipse',
        help='Comma-separated shape types (default: triangle,rectangle,ellipse)'
    )

    parser.add_argument(
        '--workers',
        type=int,
        default=-1,
        help='Worker threads for candidate sampling, -1 = auto (default: -1)'
    )

    parser.add_argument(
        '--seed',
        type=int,
        default=None,
        help='Random seed for reproducible runs'
    )

    parser.add_argument(
        '--validate',
        action='store_true',
        help='Validate output quality'
    )

    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Log refinement details'
    )

    return parser


def main(args=None):
    """Main entry point."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    logging.basicConfig(
        level=logging.DEBUG if parsed_args.verbose else logging.INFO,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )

    # Resolve input path
    input_path = Path(parsed_args.input)
    if not input_path.exists():
        print(f"Error: Input file not found: {input_path}", file=sys.stderr)
        return 1

    # Determine output path
    if parsed_args.output:
        output_path = Path(parsed_args.output)
    else:
        output_path = input_path.with_suffix('.svg')

    try:
        config = PrimitiveConfig(
            steps=parsed_args.steps,
            shapes=parsed_args.shapes,
            mutations=parsed_args.mutations,
            alpha=parsed_args.alpha,
            mutate_alpha=not parsed_args.no_mutate_alpha,
            compute_size=parsed_args.compute_size,
            view_size=parsed_args.view_size,
            fill=parsed_args.fill,
            shape_types=[s for s in parsed_args.shape_types.split(',') if s.strip()],
            workers=parsed_args.workers,
            seed=parsed_args.seed,
        )

        pipeline = PrimitivePipeline(config)
        pipeline.process(input_path, output_path, raster_path=parsed_args.png)
        print(f"Saved SVG with {len(pipeline.steps)} shapes to {output_path}")

        # Validate if requested
        if parsed_args.validate:
            print("\nValidating output...")
            results = pipeline.validate()

            print(f"\nValidation Results:")
            print(f"  Distance: {results['distance']:.6f}")
            print(f"  SSIM: {results['ssim']:.3f} {'✓' if results['ssim_pass'] else '✗'}")
            print(f"  Overall: {'PASS' if results['overall_pass'] else 'FAIL'}")

            return 0 if results['overall_pass'] else 1

        return 0

    except (VectorizationError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
