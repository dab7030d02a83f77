import numpy as np
import pytest

from fractory.acceleration.multiprocessing import (
    BandSpec,
    ParallelRenderer,
    assemble_bands,
    create_band_grid,
    process_band,
)
from fractory.core.math_functions import ComplexPlane, Viewport, evaluate
from fractory.rendering.renderer import render, render_rows

REGION = (-2.0, 0.47, -1.12, 1.12)


def test_grid_shape_and_dtype(any_spec):
    grid = render(REGION, (12, 9), any_spec)
    assert grid.shape == (9, 12, 3)
    assert grid.dtype == np.uint8


def test_pixels_match_evaluator(any_spec):
    width, height = 10, 6
    grid = render(REGION, (width, height), any_spec)
    plane = ComplexPlane(Viewport(*REGION), width, height)
    for py in range(height):
        for px in range(width):
            expected = evaluate(any_spec, plane.pixel_to_plane(px, py))
            assert tuple(grid[py, px]) == expected


def test_burning_ship_grid_matches_evaluator_near_the_ship(trcm_burning_ship):
    region = (-1.8, -1.7, -0.09, 0.01)
    grid = render(region, (16, 12), trcm_burning_ship)
    plane = ComplexPlane(Viewport(*region), 16, 12)
    for py in range(12):
        for px in range(16):
            assert tuple(grid[py, px]) == evaluate(trcm_burning_ship, plane.pixel_to_plane(px, py))


def test_top_left_pixel_samples_region_corner(trcm_burning_ship):
    grid = render((0.3, 0.9, -0.4, 0.2), (5, 5), trcm_burning_ship)
    assert tuple(grid[0, 0]) == evaluate(trcm_burning_ship, (0.3, -0.4))


def test_region_inside_set_is_black(gray_mandelbrot):
    grid = render((-0.1, 0.1, -0.1, 0.1), (8, 8), gray_mandelbrot)
    assert (grid == 0).all()


def test_deterministic(any_spec):
    first = render(REGION, (16, 16), any_spec)
    second = render(Viewport(*REGION), (16, 16), any_spec)
    assert first.tobytes() == second.tobytes()


def test_invalid_region(gray_mandelbrot):
    with pytest.raises(ValueError):
        render((1.0, -1.0, 0.0, 1.0), (4, 4), gray_mandelbrot)


def test_render_rows_band(newton):
    plane = ComplexPlane(Viewport(-2.0, 2.0, -2.0, 2.0), 7, 9)
    full = render_rows(plane, newton, 0, 9)
    band = render_rows(plane, newton, 3, 5)
    assert band.shape == (2, 7, 3)
    assert np.array_equal(band, full[3:5])


def test_render_rows_escape_time_band(trcm_burning_ship):
    plane = ComplexPlane(Viewport(*REGION), 7, 9)
    full = render_rows(plane, trcm_burning_ship, 0, 9)
    band = render_rows(plane, trcm_burning_ship, 4, 7)
    assert band.shape == (3, 7, 3)
    assert band.dtype == np.uint8
    assert np.array_equal(band, full[4:7])


class TestBands:
    def test_grid_covers_every_row(self):
        bands = create_band_grid(10, 4)
        assert [(b.row_start, b.row_end) for b in bands] == [(0, 4), (4, 8), (8, 10)]
        assert [b.height for b in bands] == [4, 4, 2]

    def test_rejects_empty_bands(self):
        with pytest.raises(ValueError):
            create_band_grid(10, 0)

    def test_assemble_out_of_order(self, gray_mandelbrot):
        plane = ComplexPlane(Viewport(*REGION), 6, 5)
        results = [process_band((plane, gray_mandelbrot, band)) for band in create_band_grid(5, 2)]
        grid = assemble_bands(list(reversed(results)), 6, 5)
        assert np.array_equal(grid, render(REGION, (6, 5), gray_mandelbrot))

    def test_process_band(self, newton):
        plane = ComplexPlane(Viewport(-2.0, 2.0, -2.0, 2.0), 4, 4)
        result = process_band((plane, newton, BandSpec(1, 2, 4)))
        assert result.band_id == 1
        assert result.row_start == 2
        assert result.pixels.shape == (2, 4, 3)


def test_parallel_matches_sequential(any_spec):
    parallel = ParallelRenderer(num_processes=2, band_height=3)
    expected = render(REGION, (9, 8), any_spec)
    assert np.array_equal(parallel.render(REGION, (9, 8), any_spec), expected)
