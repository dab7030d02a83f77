import pytest

from fractory.core.fractal_types import (
    BurningShipParameters,
    ColourMapKind,
    MandelbrotParameters,
    NewtonParameters,
)
from fractory.rendering.image_output import ImageExporter


@pytest.fixture
def gray_mandelbrot():
    return MandelbrotParameters(100, 4.0, ColourMapKind.GRAYSCALE)


@pytest.fixture
def trcm_burning_ship():
    return BurningShipParameters(50, 4.0, ColourMapKind.TRCM)


@pytest.fixture
def newton():
    return NewtonParameters(15)


@pytest.fixture(params=['mandelbrot', 'burning_ship', 'newton'])
def any_spec(request, gray_mandelbrot, trcm_burning_ship, newton):
    return {
        'mandelbrot': gray_mandelbrot,
        'burning_ship': trcm_burning_ship,
        'newton': newton,
    }[request.param]


@pytest.fixture
def exporter():
    return ImageExporter()
