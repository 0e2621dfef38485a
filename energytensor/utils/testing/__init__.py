from energytensor.utils.testing.testing import cupy_only, execute_both_backends
