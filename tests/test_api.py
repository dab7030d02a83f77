import numpy as np
import pytest
from PIL import Image

from fractory.api import (
    FractalRenderer,
    RenderConfig,
    get_example,
    list_examples,
    write_zoom_frames,
)
from fractory.core.fractal_types import (
    ColourMapKind,
    MandelbrotParameters,
    NewtonParameters,
)
from fractory.rendering.image_output import ImageExporter
from fractory.rendering.renderer import render
from fractory.tools.zoom import plan_zoom_frames


class TestRenderConfig:
    def test_defaults_validate(self):
        RenderConfig().validate()

    @pytest.mark.parametrize('overrides', [
        {'width': 0},
        {'height': -1},
        {'bounds': (1.0, 0.0, 0.0, 1.0)},
        {'bounds': (0.0, 1.0, 0.0)},
        {'max_iterations': 0},
        {'escape_threshold': 0.0},
        {'colour_map': 'plasma'},
        {'fractal': 'julia'},
        {'band_height': 0},
    ])
    def test_invalid(self, overrides):
        with pytest.raises(ValueError):
            RenderConfig(**overrides).validate()

    def test_build_newton_ignores_escape_options(self):
        config = RenderConfig(fractal='newton', max_iterations=9, escape_threshold=100.0)
        assert config.build_fractal() == NewtonParameters(9)

    def test_from_dict_ignores_unknown_keys(self):
        config = RenderConfig.from_dict({'width': 5, 'bounds': [0, 1, 0, 1], 'tile_size': 64})
        assert config.width == 5
        assert config.bounds == (0, 1, 0, 1)


class TestFractalRenderer:
    def test_render_configured_fractal(self):
        config = RenderConfig(width=16, height=12, colour_map='grayscale', max_iterations=30)
        grid = FractalRenderer(config).render()
        expected = render(config.bounds, (16, 12), MandelbrotParameters(30, 4.0, ColourMapKind.GRAYSCALE))
        assert np.array_equal(grid, expected)

    def test_render_explicit_fractal_and_bounds(self):
        renderer = FractalRenderer(RenderConfig(width=8, height=8))
        grid = renderer.render(NewtonParameters(15), (-2.0, 2.0, -2.0, 2.0))
        assert np.array_equal(grid, render((-2.0, 2.0, -2.0, 2.0), (8, 8), NewtonParameters(15)))

    def test_saves_with_metadata(self, tmp_path):
        renderer = FractalRenderer(RenderConfig(width=10, height=6, fractal='burning_ship'))
        path = tmp_path / 'ship.png'
        grid = renderer.render(output_path=path)

        with Image.open(path) as img:
            assert np.array_equal(np.asarray(img), grid)
        metadata = ImageExporter().extract_metadata_from_image(path)
        assert metadata.fractal_type == 'burning_ship'
        assert metadata.resolution == (10, 6)
        assert metadata.fractal_parameters['max_iterations'] == 200

    def test_saves_without_metadata(self, tmp_path):
        renderer = FractalRenderer(RenderConfig(width=4, height=4, save_metadata=False))
        path = tmp_path / 'plain.png'
        renderer.render(output_path=path)
        assert ImageExporter().extract_metadata_from_image(path) is None

    def test_parallel_matches_sequential(self):
        sequential = FractalRenderer(RenderConfig(width=12, height=10, max_iterations=40))
        parallel = FractalRenderer(RenderConfig(width=12, height=10, max_iterations=40,
                                                parallel=True, num_processes=2, band_height=4))
        assert np.array_equal(sequential.render(), parallel.render())


def test_write_zoom_frames(tmp_path):
    frames = plan_zoom_frames((-0.77568377, 0.13646737), 3, 50.0, 2)
    renderer = FractalRenderer(RenderConfig(width=6, height=6))
    progress = []

    paths = write_zoom_frames(frames, tmp_path / 'frames', renderer,
                              lambda done, total, frame: progress.append((done, total, frame.index)))

    assert [p.name for p in paths] == ['frame_1.png', 'frame_2.png', 'frame_3.png', 'frame_4.png']
    assert all(p.exists() for p in paths)
    assert progress == [(1, 4, 1), (2, 4, 2), (3, 4, 3), (4, 4, 4)]

    with Image.open(paths[-1]) as img:
        expected = render(frames[-1].viewport, (6, 6), frames[-1].spec)
        assert np.array_equal(np.asarray(img), expected)


class TestExamples:
    def test_names(self):
        assert list_examples() == ['burning_ship', 'mandelbrot', 'mandelbrot_zoomed', 'newton']

    def test_zoomed_example(self):
        preset = get_example('mandelbrot_zoomed')
        x_min, x_max, y_min, y_max = preset.bounds
        assert x_max - x_min == pytest.approx(2 * 1.235 / 1200)
        assert preset.fractal == MandelbrotParameters(500, 4.0, ColourMapKind.TRCM)

    def test_unknown(self):
        with pytest.raises(ValueError, match='Available'):
            get_example('julia')
