import dataclasses

import pytest

from fractory.core.fractal_types import (
    EXAMPLE_PRESETS,
    BurningShipParameters,
    ColourMapKind,
    FractalRegistry,
    MandelbrotParameters,
    NewtonParameters,
)


class TestParameters:
    @pytest.mark.parametrize('iterations', [0, -5, 2.5, True])
    def test_invalid_iterations(self, iterations):
        with pytest.raises(ValueError):
            MandelbrotParameters(iterations, 4.0)
        with pytest.raises(ValueError):
            NewtonParameters(iterations)

    @pytest.mark.parametrize('threshold', [0.0, -1.0, 'big'])
    def test_invalid_threshold(self, threshold):
        with pytest.raises(ValueError):
            BurningShipParameters(10, threshold)

    def test_colour_map_by_name(self):
        spec = MandelbrotParameters(10, 4.0, 'GrayScale')
        assert spec.colour_map is ColourMapKind.GRAYSCALE

    def test_unknown_colour_map(self):
        with pytest.raises(ValueError, match='Available'):
            MandelbrotParameters(10, 4.0, 'viridis')

    def test_immutable(self):
        spec = NewtonParameters(15)
        with pytest.raises(dataclasses.FrozenInstanceError):
            spec.max_iterations = 3

    def test_variants_are_distinct(self):
        assert MandelbrotParameters(10, 4.0) != BurningShipParameters(10, 4.0)

    def test_to_dict(self):
        assert MandelbrotParameters(10, 2.0, ColourMapKind.TRCM).to_dict() == {
            'max_iterations': 10,
            'escape_threshold': 2.0,
            'colour_map': 'trcm',
        }

    def test_from_dict(self):
        spec = BurningShipParameters.from_dict({'max_iterations': 30, 'colour_map': 'grayscale'})
        assert spec == BurningShipParameters(30, 4.0, ColourMapKind.GRAYSCALE)
        assert NewtonParameters.from_dict({}) == NewtonParameters(15)

    def test_from_dict_reverses_to_dict(self):
        spec = MandelbrotParameters(40, 2.5, ColourMapKind.GRAYSCALE)
        assert MandelbrotParameters.from_dict(spec.to_dict()) == spec


class TestRegistry:
    def test_create(self):
        spec = FractalRegistry.create_fractal('burning_ship', max_iterations=30)
        assert spec == BurningShipParameters(30, 4.0, ColourMapKind.TRCM)

    def test_unknown_name(self):
        with pytest.raises(ValueError, match='mandelbrot'):
            FractalRegistry.create_fractal('julia')

    def test_unknown_parameter(self):
        with pytest.raises(ValueError):
            FractalRegistry.create_fractal('newton', escape_threshold=4.0)

    def test_name_of(self):
        assert FractalRegistry.name_of(NewtonParameters(3)) == 'newton'
        with pytest.raises(TypeError):
            FractalRegistry.name_of('newton')

    def test_dict_description(self):
        spec = MandelbrotParameters(64, 9.0, ColourMapKind.GRAYSCALE)
        data = FractalRegistry.to_dict(spec)
        assert data['type'] == 'mandelbrot'
        assert FractalRegistry.from_dict(data) == spec

    def test_dict_without_type(self):
        with pytest.raises(ValueError):
            FractalRegistry.from_dict({'max_iterations': 3})

    def test_list_fractals(self):
        assert set(FractalRegistry.list_fractals()) == {'mandelbrot', 'burning_ship', 'newton'}


def test_example_presets():
    assert EXAMPLE_PRESETS['mandelbrot'].fractal.colour_map is ColourMapKind.GRAYSCALE
    assert EXAMPLE_PRESETS['burning_ship'].bounds == (-1.8, -1.7, -0.09, 0.01)
    assert EXAMPLE_PRESETS['newton'].fractal == NewtonParameters(15)
