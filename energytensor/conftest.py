import pytest

from energytensor.processing.synthetic_datasets import generate_polynomial_image, generate_ring_image


@pytest.fixture
def energytensor_polynomial_image(request):
    return generate_polynomial_image(**request.param)


@pytest.fixture
def energytensor_ring_image(request):
    return generate_ring_image(**request.param)
