"""
NEAT Standard Network Module

This module implements the phenotype representation for the NEAT algorithm.
It provides classes for expressing a genome as an executable neural network.
This is a 'standard' implementation of the Neural Network, using an Object
Oriented approach to representing Nodes, Connections and the Network.

Classes:
    Connection:      A weighted connection between two neurons
    Neuron:          A computational node applying the activation function
    NetworkStandard: A (possibly recurrent) neural network from a genome
"""

from typing import Callable, Optional, Sequence, TYPE_CHECKING

from neatcore.errors             import ShapeMismatch
from neatcore.genotype.node_gene import NodeType  # Needed at runtime

if TYPE_CHECKING:
    from neatcore.genotype import ConnectionGene, Genome, NodeGene

from neatcore.phenotype.network_base import NetworkBase

class Connection:
    """
    A weighted connection between two neurons in a neural network.

    This class represents the phenotype manifestation of a ConnectionGene.
    Each connection wraps a ConnectionGene and provides read-only access to its properties.

    Public Properties:
        nodeID_in:  ID of the source neuron
        nodeID_out: ID of the destination neuron
        enabled:    Whether this connection is active in the network
        weight:     Weight multiplier applied to the transmitted signal
        innovation: Global innovation number identifying this connection
    """

    def __init__(self, gene: "ConnectionGene"):
        """
        Parameters:
            gene: the gene encoding the Connection
        """
        self._gene: "ConnectionGene" = gene

    @property
    def nodeID_in(self) -> int:
        """The ID of the node/neuron representing the connection start."""
        return self._gene.node_in

    @property
    def nodeID_out(self) -> int:
        """The ID of the node/neuron representing the connection end."""
        return self._gene.node_out

    @property
    def enabled(self) -> bool:
        """Whether the connection is enabled."""
        return self._gene.enabled

    @property
    def weight(self) -> float:
        """The weight associated with this connection."""
        return self._gene.weight

    @property
    def innovation(self):
        """The globally unique ID associated with this connection."""
        return self._gene.innovation

    def __repr__(self):
        return (f"Connection(gene={self._gene})")

class Neuron:
    """
    A computational node (neuron) in a neural network.

    This class represents the phenotype manifestation of a NodeGene. Each neuron
    wraps a NodeGene and holds the value it accumulates during a forward pass;
    the gene itself is never modified by evaluating the network.

    Input neurons simply pass through their input unchanged, bias neurons always
    output 1.0. Hidden and output neurons compute their output as:
        activation(weighted_input)

    Public Attributes:
        output: The computed output value (None until calculated)

    Public Properties:
        id:         Globally unique ID for this neuron
        type:       Neuron type (INPUT, BIAS, HIDDEN or OUTPUT)
        activation: Activation function applied to the weighted input

    Public Methods:
        calculate_output(input_data): Compute and store the neuron's output value
    """

    def __init__(self, gene: "NodeGene", activation: Callable[[float], float]):
        """
        Parameters:
            gene:       the gene encoding the Node/Neuron
            activation: the activation function of hidden and output neurons
        """
        self._gene      : "NodeGene"                = gene
        self._activation: Callable[[float], float] = activation

        # the output of the calculation performed by the Neuron
        self.output: Optional[float] = None

    @property
    def id(self) -> int:
        """The globally unique ID associated with this Node/Neuron."""
        return self._gene.id

    @property
    def type(self) -> NodeType:
        """The Node/Neuron type: INPUT, BIAS, HIDDEN, OUTPUT"""
        return self._gene.type

    @property
    def activation(self) -> Callable[[float], float]:
        """The Neuron activation function, used to calculate: output = activation(weighted_input)"""
        return self._activation

    def calculate_output(self, input_data: float) -> None:
        """
        Calculate the output of this node/neuron.
        The result is saved internally in 'self.output'.

        Parameters:
            input_data: the network input (for an INPUT neuron), or the weighted
                        sum of the incoming enabled connections (otherwise)
        """
        # an input node always outputs its input, un-modified
        if self.type == NodeType.INPUT:
            self.output = input_data
        elif self.type == NodeType.BIAS:
            self.output = 1.0
        else:
            self.output = float(self.activation(input_data))

    def __str__(self):
        return f"Neuron({self.id:+03d}, NodeType.{self.type.name:6s}, {self.output})"

    def __repr__(self):
        return (f"Neuron(gene={self._gene})")

class NetworkStandard(NetworkBase):
    """
    Object-oriented implementation of a NEAT neural network.

    This class implements NetworkBase using an object-oriented approach with
    explicit Neuron and Connection objects.

    Unlike array-based implementations (such as NetworkFast), this NetworkStandard uses:
    - Individual Neuron objects for each node (maintaining mutable state)
    - Individual Connection objects for each connection
    - Explicit iteration through neurons

    This object-based approach is well-suited for:
    - Single-input evaluation (one input at a time)
    - Network visualization and inspection
    - Debugging

    If you want a faster network (especially if input data is available in batches) use NetworkFast.

    Every forward pass starts from a clean state, so evaluating the same inputs
    twice always gives the same outputs, for recurrent networks too.

    Public Methods:
        forward_pass(inputs): Process inputs through the network and return outputs
    """

    def __init__(self, genome: "Genome"):
        """
        Parameters:
            genome: the Genome encoding the network
        """
        # Initialize common base class attributes
        super().__init__(genome)

        # Create nodes/neurons objects from node genes
        self._neurons: dict[int, Neuron] = {}
        for gene in genome.node_genes.values():
            self._neurons[gene.id] = Neuron(gene, self._activation)

        # Create network connections objects from connection genes
        self._connections: dict[int, Connection] = {}
        for gene in genome.conn_genes.values():
            self._connections[gene.innovation] = Connection(gene)

        # For each neuron, build list of incoming enabled connections
        self._incoming_connections: dict[int, list[Connection]] = {}   # neuron ID => [Connection instance]
        for conn in self._connections.values():
            if conn.enabled:
                self._incoming_connections.setdefault(conn.nodeID_out, []).append(conn)

        # Neurons computed from their incoming connections
        self._computed_ids = [neuron.id for neuron in self._neurons.values() if not neuron.type.is_source]

    def forward_pass(self, inputs: Sequence[float]) -> list[float]:
        """
        Perform a complete forward pass through the network.

        Parameters:
            inputs: the network inputs (as many as input neurons)

        Returns:
            the results of passing the inputs through the network (as many as output neurons)

        Raises:
            ShapeMismatch: if the number of inputs differs from the number of input neurons
        """
        # The number of inputs must match the number of input neurons
        if len(inputs) != len(self._input_ids):
            raise ShapeMismatch(f"Expected {len(self._input_ids)} inputs, got {len(inputs)}")

        # Reset the output of all neurons
        for neuron in self._neurons.values():
            neuron.output = None

        # Set input and bias values
        for i, input_id in enumerate(self._input_ids):
            self._neurons[input_id].calculate_output(inputs[i])
        for bias_id in self._bias_ids:
            self._neurons[bias_id].calculate_output(1.0)

        if self.is_recurrent:
            self._relax()
        else:
            self._propagate()

        # Get output values
        return [self._neurons[ID].output for ID in self._output_ids]

    def _weighted_input(self, node_id: int, values: dict[int, float]) -> float:
        conns_in = self._incoming_connections.get(node_id, [])
        return sum(c.weight * values[c.nodeID_in] for c in conns_in)

    def _propagate(self) -> None:
        """Propagate values through the network, in topological order."""
        values = {}
        for node_id in self._sorted_nodes:
            neuron = self._neurons[node_id]
            if not neuron.type.is_source:   # input and bias neurons are already set
                neuron.calculate_output(self._weighted_input(node_id, values))
            values[node_id] = neuron.output

    def _relax(self) -> None:
        """
        Synchronously recompute all neurons from the previous pass's values,
        starting with every hidden and output neuron at zero.
        """
        for node_id in self._computed_ids:
            self._neurons[node_id].output = 0.0

        for _ in range(self._max_relax_steps):
            previous = {node_id: neuron.output for node_id, neuron in self._neurons.items()}
            for node_id in self._computed_ids:
                self._neurons[node_id].calculate_output(self._weighted_input(node_id, previous))

            # Stop as soon as the network has settled
            change = max((abs(self._neurons[node_id].output - previous[node_id]) for node_id in self._computed_ids),
                         default=0.0)
            if change <= self._relax_tolerance:
                break

    def __str__(self):
        neurons_str     = "\n".join([f"  {neuron}" for neuron in self._neurons.values()])
        connections_str = "\n".join([f"  {conn}" for conn in self._connections.values()])
        return f"{neurons_str},\n\n{connections_str}"
