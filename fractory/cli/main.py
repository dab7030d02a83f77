"""
Command-line interface for fractal generation.

This module provides the ``fractory`` command for rendering single images,
the bundled example scenes and Mandelbrot zoom frame sequences.
"""

import logging
import sys
import time
from pathlib import Path
from typing import Tuple

import click

from .. import __version__
from ..api import FractalRenderer, RenderConfig, get_example, list_examples, write_zoom_frames
from ..core.fractal_types import FractalRegistry, MANDELBROT_BOUNDS
from ..io.config import ConfigManager
from ..rendering.coloring import list_colour_maps
from ..tools.zoom import plan_zoom_frames

logger = logging.getLogger(__name__)


def parse_floats(text: str, count: int, what: str) -> Tuple[float, ...]:
    """Parse ``count`` comma-separated floats, e.g. ``"-2,0.47,-1.12,1.12"``."""
    try:
        values = tuple(float(x.strip()) for x in text.split(','))
    except ValueError:
        raise click.BadParameter(f"Invalid {what}: {text!r}") from None
    if len(values) != count:
        raise click.BadParameter(f"{what} needs {count} comma-separated numbers, got {len(values)}")
    return values


def _fail(ctx, e: Exception) -> None:
    click.echo(f"Error: {e}", err=True)
    if ctx.obj.get('verbose'):
        import traceback
        traceback.print_exc()
    sys.exit(1)


@click.group(invoke_without_command=True)
@click.option('--version', is_flag=True, help='Show version information')
@click.option('--config', type=click.Path(exists=True), help='Configuration file path')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.option('--quiet', '-q', is_flag=True, help='Suppress most output')
@click.pass_context
def main(ctx, version, config, verbose, quiet):
    """
    fractory - escape-time and Newton fractal renderer.

    Render Mandelbrot, Burning Ship and Newton basin images, or whole
    Mandelbrot zoom sequences, to PNG, TIFF or JPEG files.
    """
    if quiet:
        logging.basicConfig(level=logging.ERROR)
    elif verbose:
        logging.basicConfig(level=logging.DEBUG,
                            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    else:
        logging.basicConfig(level=logging.INFO,
                            format='%(levelname)s: %(message)s')

    if version:
        click.echo(f"fractory v{__version__}")
        click.echo(f"Python: {sys.version}")
        if ctx.invoked_subcommand is None:
            sys.exit(0)

    ctx.ensure_object(dict)
    ctx.obj['config_file'] = config
    ctx.obj['verbose'] = verbose


def _load_config(ctx):
    manager = ConfigManager()
    return manager, manager.load_config(ctx.obj.get('config_file'))


@main.command()
@click.argument('fractal_type', type=click.Choice(['mandelbrot', 'burning_ship', 'newton']))
@click.argument('output', type=click.Path())
@click.option('--width', '-w', type=int, help='Image width')
@click.option('--height', '-h', type=int, help='Image height')
@click.option('--bounds', type=str, help='Plane bounds: "xmin,xmax,ymin,ymax"')
@click.option('--max-iter', type=int, help='Maximum iterations')
@click.option('--threshold', type=float, help='Escape threshold on |z|^2')
@click.option('--colour-map', type=click.Choice(list_colour_maps()), help='Colour map')
@click.option('--processes', type=int, help='Render in parallel with this many processes')
@click.pass_context
def render(ctx, fractal_type, output, width, height, bounds, max_iter, threshold, colour_map, processes):
    """
    Render a single fractal image.

    FRACTAL_TYPE: Type of fractal (mandelbrot, burning_ship, newton)
    OUTPUT: Output image file path
    """
    try:
        manager, config = _load_config(ctx)
        render_config, fractal = manager.create_fractal(
            config,
            fractal=fractal_type,
            width=width,
            height=height,
            bounds=parse_floats(bounds, 4, 'bounds') if bounds else None,
            max_iterations=max_iter,
            escape_threshold=threshold,
            colour_map=colour_map,
            parallel=True if processes else None,
            num_processes=processes,
        )
        renderer = FractalRenderer(render_config)

        click.echo(f"Rendering {fractal_type} fractal...")
        start_time = time.time()
        renderer.render(fractal, output_path=Path(output))
        click.echo(f"Render complete: {time.time() - start_time:.2f}s")
        click.echo(f"Saved: {output}")

    except Exception as e:
        _fail(ctx, e)


@main.command()
@click.argument('name', type=click.Choice(list_examples()))
@click.argument('output', type=click.Path())
@click.option('--width', '-w', type=int, help='Override image width')
@click.option('--height', '-h', type=int, help='Override image height')
@click.pass_context
def example(ctx, name, output, width, height):
    """
    Render one of the bundled example scenes.

    NAME: Example scene
    OUTPUT: Output image file path
    """
    try:
        preset = get_example(name)
        preset_width, preset_height = preset.resolution
        config = RenderConfig(
            width=width or preset_width,
            height=height or preset_height,
            bounds=preset.bounds,
            fractal=FractalRegistry.name_of(preset.fractal),
        )
        renderer = FractalRenderer(config)

        click.echo(f"Rendering example '{name}' at {config.width}x{config.height}...")
        renderer.render(preset.fractal, preset.bounds, Path(output))
        click.echo(f"Saved: {output}")

    except Exception as e:
        _fail(ctx, e)


@main.command()
@click.argument('output_dir', type=click.Path())
@click.option('--center', type=str, help='Zoom centre point "real,imag"')
@click.option('--max-iterations', type=int, help='Iterations at the end of the reveal phase')
@click.option('--max-zoom', type=float, help='Zoom factor approached by the last frame')
@click.option('--frames', type=int, help='Number of frames in the zoom phase')
@click.option('--width', '-w', type=int, help='Frame width')
@click.option('--height', '-h', type=int, help='Frame height')
@click.option('--processes', type=int, help='Render in parallel with this many processes')
@click.option('--dry-run', is_flag=True, help='Show the frame plan without rendering')
@click.pass_context
def zoom(ctx, output_dir, center, max_iterations, max_zoom, frames, width, height, processes, dry_run):
    """
    Generate a numbered Mandelbrot zoom frame sequence.

    OUTPUT_DIR: Directory that receives frame_<n>.png files
    """
    try:
        manager, config = _load_config(ctx)
        zoom_settings = config['zoom']
        centre = parse_floats(center, 2, 'center') if center else tuple(zoom_settings['centre'])

        plan = plan_zoom_frames(
            centre,
            max_iterations or zoom_settings['max_iterations'],
            max_zoom or zoom_settings['max_zoom'],
            frames if frames is not None else zoom_settings['frames'],
            MANDELBROT_BOUNDS,
        )

        click.echo(f"Zoom sequence: {len(plan)} frames around {centre}")
        if dry_run:
            for frame in plan:
                click.echo(f"{frame.filename}: zoom={frame.zoom:.4f} "
                           f"iterations={frame.spec.max_iterations} bounds={frame.viewport.as_tuple()}")
            return

        render_config = manager.create_render_config(
            config,
            width=width,
            height=height,
            parallel=True if processes else None,
            num_processes=processes,
        )
        renderer = FractalRenderer(render_config)

        def progress_callback(done, total, frame):
            click.echo(f"frame {frame.index}/{total}")

        write_zoom_frames(plan, Path(output_dir), renderer, progress_callback)
        click.echo(f"Animation frames saved to: {output_dir}")

    except Exception as e:
        _fail(ctx, e)


@main.command(name='list')
def list_command():
    """List available fractals, colour maps and example scenes."""
    click.echo("Fractals:")
    for name, description in FractalRegistry.list_fractals().items():
        click.echo(f"  {name}: {description}")
    click.echo("Colour maps:")
    for name in list_colour_maps():
        click.echo(f"  {name}")
    click.echo("Examples:")
    for name in list_examples():
        click.echo(f"  {name}")


if __name__ == '__main__':
    main()
