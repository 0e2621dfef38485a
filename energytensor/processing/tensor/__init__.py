from energytensor.processing.tensor.tensor_utils import tensor_eigen_representation, tensor_to_edge_corner, tensor_trace
