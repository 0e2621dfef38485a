from energytensor.utils.backends.backend import Backend, dispatch_data_to_backend
from energytensor.utils.backends.best_backend import BestBackend
from energytensor.utils.backends.cupy_backend import CupyBackend, is_cupy_available
from energytensor.utils.backends.numpy_backend import NumpyBackend
