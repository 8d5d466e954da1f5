"""
NEAT Network Base Module

This module defines the abstract base class for the NEAT neural network implementations.
It provides a common interface and shared functionality for the different network backends
(object-oriented and numpy vectorized).

Classes:
    NetworkBase: Abstract base class defining the network interface
"""

from abc         import ABC, abstractmethod
from collections import deque, defaultdict
from typing      import Any, Callable, TYPE_CHECKING
import graphviz  # type: ignore

from neatcore.activations        import activations, activation_codes
from neatcore.genotype.node_gene import NodeType

if TYPE_CHECKING:
    from neatcore.genotype import Genome

class NetworkBase(ABC):
    """
    Abstract base class for NEAT neural network implementations.

    This class defines the common interface that all network implementations
    must follow, regardless of their internal representation (object-oriented,
    numpy arrays, etc.).

    A network is evaluated in one of two ways, depending on the enabled connections
    of its genome:
      + feed-forward: if they form a DAG, each node is computed once, in topological order
      + relaxation:   if they contain a cycle, all nodes are recomputed synchronously from
                      the values of the previous pass, starting from zero, until no value
                      changes by more than 'relax_tolerance' or 'max_relax_steps' passes
                      have been made. This approximates the fixed point of the recurrent
                      dynamics; it does not solve for it.

    The base class provides:
        - Common initialization
        - Topological sort algorithm (which also detects cycles)
        - Standard network introspection properties
        - Network visualization

    Public Properties (available to all subclasses):
        is_recurrent:               Whether the enabled connections contain a cycle
        number_nodes:               Total number of nodes in the network
        number_nodes_hidden:        Number of hidden nodes in the network
        number_connections:         Total number of connections in the network
        number_connections_enabled: Number of enabled connections in the network

    Public Methods (must be implemented by subclasses):
        forward_pass(inputs): Process inputs through the network and return outputs
    """

    def __init__(self, genome: 'Genome'):
        """
        Initialize common network attributes from genome.

        Parameters:
            genome: The Genome encoding the network structure
        """
        config = genome.config

        self._genome       = genome
        self._input_ids    = sorted(gene.id for gene in genome.input_nodes)
        self._bias_ids     = sorted(gene.id for gene in genome.bias_nodes)
        self._output_ids   = sorted(gene.id for gene in genome.output_nodes)
        self._sorted_nodes = self._topological_sort(genome)

        self._activation_name: str      = config.activation
        self._activation     : Callable = activations[config.activation]
        self._max_relax_steps: int      = config.max_relax_steps
        self._relax_tolerance: float    = config.relax_tolerance

    @property
    def is_recurrent(self) -> bool:
        """Whether the enabled connections contain a cycle (nodes on or after it can't be sorted)."""
        return len(self._sorted_nodes) < len(self._genome.node_genes)

    @property
    def number_nodes(self) -> int:
        """Total number of nodes in the network."""
        return len(self._genome.node_genes)

    @property
    def number_nodes_hidden(self) -> int:
        """Number of hidden nodes in the network."""
        return len(self._genome.node_genes) - len(self._input_ids) - len(self._bias_ids) - len(self._output_ids)

    @property
    def number_connections(self) -> int:
        """Total number of connections in the network."""
        return len(self._genome.conn_genes)

    @property
    def number_connections_enabled(self) -> int:
        """Number of enabled connections in the network."""
        return sum(1 for conn in self._genome.conn_genes.values() if conn.enabled)

    @abstractmethod
    def forward_pass(self, inputs: Any) -> Any:
        """
        Perform a complete forward pass through the network.

        Parameters:
            inputs: Network inputs (implementation-specific type)

        Returns:
            Network outputs (implementation-specific type)
        """
        pass

    @staticmethod
    def _topological_sort(genome: 'Genome') -> list[int]:
        """
        Perform topological sort using Kahn's algorithm.

        Sorts the network nodes in topological order, ensuring that all
        dependencies (incoming enabled connections) are processed before each node.
        If the enabled connections contain a cycle, the nodes on the cycle (and
        those downstream of it) are missing from the result.

        Parameters:
            genome: The Genome containing node and connection genes

        Returns:
            List of node IDs in topological order
        """
        # Get all node IDs from the genome
        node_ids = sorted(genome.node_genes.keys())

        # Build adjacency list for efficiency
        adjacency = defaultdict(list)
        in_degree = {node_id: 0 for node_id in node_ids}

        # Build graph from enabled connections only
        for conn in genome.conn_genes.values():
            if conn.enabled:
                adjacency[conn.node_in].append(conn.node_out)
                in_degree[conn.node_out] += 1

        # Start with nodes that have no incoming edges
        queue = deque([node_id for node_id, degree in in_degree.items() if degree == 0])
        result = []

        while queue:
            node_id = queue.popleft()
            result.append(node_id)

            # Process all outgoing edges
            for neighbor in adjacency[node_id]:
                in_degree[neighbor] -= 1
                if in_degree[neighbor] == 0:
                    queue.append(neighbor)

        return result

    def visualize(self, view: bool = True) -> graphviz.Digraph:
        """
        Visualize the network using Graphviz.

        This method works for all network implementations by accessing
        the genome directly rather than implementation-specific structures.
        Disabled connections are drawn in light gray, recurrent ones dashed.
        The graph is titled with the 3-letter code of the activation function.

        Parameters:
            view: If True, automatically open the visualization after rendering

        Returns:
            graphviz.Digraph object representing the network
        """
        dot = graphviz.Digraph()
        dot.attr(rankdir='LR')  # Left to right layout
        dot.attr('graph', labelloc='t', label=activation_codes[self._activation_name])

        # Define node colors and shapes
        common     = {'color': 'black', 'style': 'filled', 'shape': 'circle', 'penwidth': '0.5',
                      'fontsize': '5', 'width': '0.5', 'height': '0.5', 'fixedsize': 'true'}
        node_attrs = {
            NodeType.INPUT : {'fillcolor': 'lightgrey', **common},
            NodeType.BIAS  : {'fillcolor': 'khaki'    , **common},
            NodeType.HIDDEN: {'fillcolor': 'lightblue', **common},
            NodeType.OUTPUT: {'fillcolor': 'white'    , **common}
        }

        def add_nodes(cluster, node_ids):
            for node_id in node_ids:
                node_gene = self._genome.node_genes[node_id]
                attrs = node_attrs[node_gene.type].copy()
                attrs['label'] = f"{node_gene.type.value}{node_id}"
                cluster.node(str(node_id), **attrs)

        # Create subgraphs for better layout
        with dot.subgraph(name='cluster_input') as input_cluster:
            input_cluster.attr(rank='source', label='Inputs', style='invisible')
            add_nodes(input_cluster, self._input_ids + self._bias_ids)

        # Add hidden nodes if any
        hidden_ids = sorted(node.id for node in self._genome.hidden_nodes)
        if hidden_ids:
            with dot.subgraph(name='cluster_hidden') as hidden_cluster:
                hidden_cluster.attr(rank='same', label='Hidden', style='invisible')
                add_nodes(hidden_cluster, hidden_ids)

        with dot.subgraph(name='cluster_output') as output_cluster:
            output_cluster.attr(rank='sink', label='Outputs', style='invisible')
            add_nodes(output_cluster, self._output_ids)

        # Add edges with weights (both enabled and disabled)
        for conn in self._genome.conn_genes.values():
            edge_attrs = {
                'label'     : f"i={conn.innovation},w={conn.weight:.2f}",
                'fontsize'  : '5',
                'penwidth'  : '0.5',
                'arrowsize' : '0.5',
                'labelfloat': 'false',
                'color'     : 'black' if conn.enabled else 'lightgray'
            }
            if conn.recurrent:
                edge_attrs['style'] = 'dashed'

            dot.edge(str(conn.node_in), str(conn.node_out), **edge_attrs)

        if view:
            dot.view(cleanup=True)

        return dot
