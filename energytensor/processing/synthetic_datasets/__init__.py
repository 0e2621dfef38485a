from energytensor.processing.synthetic_datasets.synthetic_images import generate_polynomial_image, generate_ring_image
