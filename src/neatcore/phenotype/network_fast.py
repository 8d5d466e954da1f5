"""
NEAT Fast Network Module

This module implements a high-performance neural network for NEAT optimized for
batch inference. It evaluates networks exactly as NetworkStandard does (topological
order for acyclic networks, synchronous relaxation for recurrent ones), but on
numpy arrays holding a whole batch of input samples.

Classes:
    NetworkFast: High-performance neural network using NumPy arrays
"""

import numpy as np
from typing import TYPE_CHECKING

from neatcore.errors import ShapeMismatch
if TYPE_CHECKING:
    from neatcore.genotype import Genome
from neatcore.phenotype.network_base import NetworkBase

class NetworkFast(NetworkBase):
    """
    High-performance batch-processing implementation of a NEAT neural network.

    Optimized for batch inference using vectorized computation.
    Automatically handles both batched and non-batched inputs.

    Public Methods:
        forward_pass(inputs): Process batch through network
                             Input:  (batch_size, num_inputs) or (num_inputs,) auto-reshaped to (1, num_inputs)
                             Output: (batch_size, num_outputs)
    """

    def __init__(self, genome: 'Genome'):
        """
        Initialize optimized network from genome.

        Builds the weight matrix and the index arrays used during the forward pass.

        Parameters:
            genome: The Genome encoding the network structure
        """
        # Initialize base class (sets _input_ids, _bias_ids, _output_ids, _sorted_nodes)
        super().__init__(genome)

        # Get number of nodes
        num_nodes = len(genome.node_genes)
        self._num_nodes = num_nodes

        # Create "node ID => array index" mapping
        sorted_node_ids = sorted(genome.node_genes.keys())
        self._node_id_to_idx = {node_id: idx for idx, node_id in enumerate(sorted_node_ids)}

        # Build weight matrix (adjacency matrix representation)
        # weights[i, j] = weight of connection from node i to node j
        weights = np.zeros((num_nodes, num_nodes), dtype=np.float64)
        for conn in genome.conn_genes.values():
            if conn.enabled:
                from_idx = self._node_id_to_idx[conn.node_in]
                to_idx   = self._node_id_to_idx[conn.node_out]
                weights[from_idx, to_idx] = conn.weight
        self.weights = weights

        # Convert input/bias/output IDs to indices
        self._input_indices  = np.array([self._node_id_to_idx[node_id] for node_id in self._input_ids] , dtype=np.int64)
        self._bias_indices   = np.array([self._node_id_to_idx[node_id] for node_id in self._bias_ids]  , dtype=np.int64)
        self._output_indices = np.array([self._node_id_to_idx[node_id] for node_id in self._output_ids], dtype=np.int64)

        # Indices of the nodes computed from their incoming connections
        source_ids = set(self._input_ids) | set(self._bias_ids)
        self._computed_indices = np.array([self._node_id_to_idx[node_id] for node_id in sorted_node_ids
                                           if node_id not in source_ids], dtype=np.int64)

        # Pre-compute incoming connections for the nodes computed in topological order:
        # for each node, the array of source indices and corresponding weights
        self._incoming: list[tuple[int, np.ndarray, np.ndarray]] = []
        for node_id in self._sorted_nodes:
            if node_id in source_ids:
                continue
            node_idx = self._node_id_to_idx[node_id]
            sources  = np.flatnonzero(weights[:, node_idx])
            self._incoming.append((node_idx, sources, weights[sources, node_idx]))

    def forward_pass(self, inputs) -> np.ndarray:
        """
        Perform forward pass through the network using batch operations.

        This method supports both batched (2D) and non-batched (1D) inputs.
        Non-batched inputs are automatically converted to batch size 1.

        Parameters:
            inputs: Input values as numpy array or list
                    Shape: (batch_size, num_inputs) or (num_inputs,)

        Returns:
            Output values as numpy array
            Shape: (batch_size, num_outputs)

        Raises:
            ShapeMismatch: if the number of inputs differs from the number of input nodes
        """
        inputs = np.asarray(inputs, dtype=np.float64)

        # Ensure inputs are 2D (batched). If 1D, convert to batch of size 1
        if inputs.ndim == 1:
            inputs = inputs.reshape(1, -1)
        elif inputs.ndim != 2:
            raise ShapeMismatch(f"Input must be 1D or 2D array, got {inputs.ndim}D")

        # Validate input size
        expected_inputs = len(self._input_indices)
        actual_inputs   = inputs.shape[1]
        if actual_inputs != expected_inputs:
            raise ShapeMismatch(f"Expected {expected_inputs} inputs, got {actual_inputs}")

        # Set input and bias node values; everything else starts at zero
        node_values = np.zeros((inputs.shape[0], self._num_nodes), dtype=np.float64)
        node_values[:, self._input_indices] = inputs
        node_values[:, self._bias_indices]  = 1.0

        if self.is_recurrent:
            node_values = self._relax(node_values)
        else:
            # Propagate through hidden and output nodes in topological order
            for node_idx, sources, weights in self._incoming:
                node_values[:, node_idx] = self._activation(node_values[:, sources] @ weights)

        # Extract output values using advanced indexing
        return node_values[:, self._output_indices]

    def _relax(self, node_values: np.ndarray) -> np.ndarray:
        computed = self._computed_indices
        for _ in range(self._max_relax_steps):

            # All computed nodes are updated from the previous pass's values
            updated = node_values.copy()
            updated[:, computed] = self._activation(node_values @ self.weights[:, computed])

            change      = np.max(np.abs(updated - node_values), initial=0.0)
            node_values = updated
            if change <= self._relax_tolerance:
                break
        return node_values

    def __repr__(self):
        """Short representation for debugging."""
        return (f"NetworkFast(nodes={self._num_nodes}, "
                f"hidden={self.number_nodes_hidden}, "
                f"connections={self.number_connections_enabled}/{self.number_connections})")
