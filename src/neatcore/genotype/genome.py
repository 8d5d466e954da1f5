"""
NEAT Genome Module

This module implements the Genome class for the NEAT
(NeuroEvolution of Augmenting Topologies) algorithm.

Classes:
    Genome: Complete genome representing a neural network structure
"""

import copy
import random
from neatcore.errors                        import InvalidTopology
from neatcore.run.config                    import Config
from neatcore.genotype                      import mutation
from neatcore.genotype.connection_gene      import ConnectionGene
from neatcore.genotype.crossover            import crossover
from neatcore.genotype.innovation_registry  import InnovationRegistry
from neatcore.genotype.node_gene            import NodeType, NodeGene

class Genome:
    """
    A NEAT genome representing a neural network as a collection of node and connection genes.

    In the NEAT (NeuroEvolution of Augmenting Topologies) algorithm, a genome encodes
    the structure and parameters of a neural network at the genotype level. It consists of:
    - Node genes: describe network nodes (input, bias, hidden, output)
    - Connection genes: describe weighted connections between nodes, each with a unique
      innovation number for tracking historical markings during crossover

    A minimal genome contains only input (and bias) and output nodes with no connections.
    Via mutation operations, genomes can grow by adding nodes and connections, forming
    increasingly complex network topologies. Unless the configuration allows recurrent
    connections, the network is kept acyclic (considering both enabled and disabled
    connections, so that re-enabling a connection can never create a cycle).

    Node numbering convention:
        - Input nodes:  [0, num_inputs)
        - Bias node:    num_inputs (only if 'use_bias' is set)
        - Output nodes: [num_inputs + num_bias, num_inputs + num_bias + num_outputs)
        - Hidden nodes: [num_inputs + num_bias + num_outputs, ...)

    Attributes:
        node_genes: Dictionary mapping node IDs to NodeGene objects
        conn_genes: Dictionary mapping innovation numbers to ConnectionGene objects

    Public Properties:
        config:              The configuration shared by the genomes of a run
        input_nodes:         List of all input node genes
        bias_nodes:          List of all bias node genes (zero or one)
        output_nodes:        List of all output node genes
        hidden_nodes:        List of all hidden node genes
        enabled_connections: List of all enabled connection genes

    Public Methods:
        add_node(split_connection, registry):          Split a connection with a new node
        add_connection(source, target, weight, registry): Add a connection between existing nodes
        mutate_weights(rate, power):                   Perturb or replace the connection weights
        toggle_connection_enabled():                   Flip the enabled flag of a random connection
        mutate(registry):                              Apply all possible mutation operations stochastically
        clone():                                       Create an independent copy of this genome
        spawn_child(registry):                         Create a mutated copy of this genome
        crossover(other, fitness_self, fitness_other): Create offspring by crossing this genome with another
        distance(other):                               Calculate genetic distance to another genome
        activate(inputs):                              Evaluate the network encoded by this genome
        to_dict():                                     Convert genome to dictionary representation

    Class Methods:
        create(input_count, output_count, use_bias): Create a genome with its initial connections
        from_dict(genome_dict):                      Create a genome from a dictionary description

    Static Methods:
        show_aligned(genome1, genome2): Print two genomes with aligned genes for comparison
    """

    def __init__(self, config: Config):
        """
        Initialize a minimal Genome.

        A minimal genome is defined as a genome that describes the smallest possible network:
        a network consisting of only input, bias and output nodes (whose number never changes
        and is retrieved from the Config object) and having no connections.

        Parameters:
            config: Stores configuration parameters
        """
        self._config = config

        self.node_genes: dict[int, NodeGene]       = {}  # node ID => node gene
        self.conn_genes: dict[int, ConnectionGene] = {}  # innovation number => connection gene

        # Initialize input nodes
        # By convention, input nodes are numbered: [0, NUMBER INPUT NODES)
        for node_id in range(config.num_inputs):
            self.node_genes[node_id] = NodeGene(node_id, NodeType.INPUT)

        # Initialize the bias node, which comes right after the input nodes
        if config.use_bias:
            node_id = config.num_inputs
            self.node_genes[node_id] = NodeGene(node_id, NodeType.BIAS)

        # Initialize output nodes
        first_output = config.num_inputs + config.num_bias
        for node_id in range(first_output, first_output + config.num_outputs):
            self.node_genes[node_id] = NodeGene(node_id, NodeType.OUTPUT)

    @classmethod
    def create(cls,
               input_count : int,
               output_count: int,
               use_bias    : bool = False,
               config      : Config | None = None,
               registry    : InnovationRegistry | None = None,
               rng=None) -> 'Genome':
        """
        Create a genome with the given number of input and output nodes.

        The initial connections are set up according to 'config.initial_cxn_policy':
          "none"          - no connections are initially present
          "one-input"     - one random input node is connected to all outputs nodes
          "partial"       - a fraction of all possible connections are instantiated randomly
          "full"          - connect all input (and bias) nodes to all output nodes
          "random-subset" - each output is connected to a random, non-empty subset of inputs

        Parameters:
            input_count:  number of input nodes
            output_count: number of output nodes
            use_bias:     whether the genome has a bias node
            config:       the run's configuration (defaults are used if not specified);
                          if its network shape differs, a copy with the requested shape is used
            registry:     the run's innovation registry (needed by every policy except "none")
            rng:          source of randomness (the 'random' module if not specified)

        Returns:
            A new Genome object

        Raises:
            ValueError: If the shape is invalid or a registry is needed but missing
        """
        rng = rng if rng is not None else random

        shape = (input_count, output_count, use_bias)
        if config is None:
            config = Config()
        if (config.num_inputs, config.num_outputs, config.use_bias) != shape:
            config = copy.copy(config)
            config.num_inputs, config.num_outputs, config.use_bias = shape
            config.validate()

        genome = cls(config)

        # Hidden nodes created later must not reuse the IDs of the fixed nodes
        if registry is not None:
            registry.observe(genome)

        policy = config.initial_cxn_policy
        if policy == "none":
            return genome
        if registry is None:
            raise ValueError(f"An innovation registry is needed by the '{policy}' connection policy")

        input_ids  = [node.id for node in genome.input_nodes]
        output_ids = [node.id for node in genome.output_nodes]
        source_ids = input_ids + [node.id for node in genome.bias_nodes]

        if policy == "one-input":
            pairs = []
            if input_ids:
                input_id = rng.choice(input_ids)
                pairs = [(input_id, output_id) for output_id in output_ids]

        elif policy == "partial":
            all_pairs = [(source_id, output_id) for source_id in source_ids for output_id in output_ids]
            num_conns = int(len(all_pairs) * config.initial_cxn_fraction)
            pairs     = rng.sample(all_pairs, num_conns)

        elif policy == "full":
            pairs = [(source_id, output_id) for source_id in source_ids for output_id in output_ids]

        else:   # "random-subset"
            pairs = []
            if input_ids:
                for output_id in output_ids:
                    subset = rng.sample(input_ids, rng.randint(1, len(input_ids)))
                    pairs += [(input_id, output_id) for input_id in sorted(subset)]

        for source_id, output_id in pairs:
            genome.add_connection(source_id, output_id, mutation.random_weight(genome, rng), registry)

        return genome

    @classmethod
    def from_dict(cls, genome_dict: dict, config: Config | None = None) -> 'Genome':
        """
        Create a Genome from a dictionary description.

        This method allows programmatic creation of genomes with specific structures,
        as well as restoring genomes saved with 'to_dict'. It does not consult any
        innovation registry: use 'InnovationRegistry.observe' to make a registry aware
        of the restored genome before mutating it.

        Dictionary format:
            {
                "nodes": [
                    {"id": 0, "type": "input"},
                    {"id": 1, "type": "input"},
                    {"id": 2, "type": "bias"},
                    {"id": 3, "type": "output"},
                    {"id": 4, "type": "hidden"}
                ],
                "connections": [
                    {"innovation": 0, "from": 0, "to": 4, "weight":  0.5, "enabled": true, "recurrent": false},
                    {"innovation": 1, "from": 1, "to": 4, "weight": -0.3, "enabled": true, "recurrent": false},
                    {"innovation": 2, "from": 4, "to": 3, "weight":  1.5, "enabled": true, "recurrent": false}
                ]
            }

        The "enabled" and "recurrent" fields are optional (default: true and false).
        The "innovation" field is optional too: connections without one are numbered
        after the largest innovation number found in the description, in list order.

        Parameters:
            genome_dict: Dictionary describing the genome structure
            config:      the run's configuration (defaults are used if not specified);
                         if its network shape differs from the description, a copy
                         with the described shape is used

        Returns:
            A new Genome object with the specified structure

        Raises:
            InvalidTopology: If the structure is invalid (wrong node numbering, cycles, etc.)
            KeyError:        If required fields are missing from the dictionary
        """
        # Parse nodes data
        type_names = {node_type.name.lower(): node_type for node_type in NodeType}
        nodes_data = genome_dict["nodes"]
        for node_data in nodes_data:
            if node_data["type"] not in type_names:
                raise InvalidTopology(f"Unknown node type '{node_data['type']}' for node {node_data['id']}")

        ids_by_type = {node_type: sorted(n["id"] for n in nodes_data if n["type"] == node_type.name.lower())
                       for node_type in NodeType}
        num_inputs  = len(ids_by_type[NodeType.INPUT])
        num_outputs = len(ids_by_type[NodeType.OUTPUT])
        use_bias    = len(ids_by_type[NodeType.BIAS]) > 0

        shape = (num_inputs, num_outputs, use_bias)
        if config is None:
            config = Config()
        if (config.num_inputs, config.num_outputs, config.use_bias) != shape:
            config = copy.copy(config)
            config.num_inputs, config.num_outputs, config.use_bias = shape

        # Validate node numbering convention
        cls._validate_node_numbering(ids_by_type, config)

        # Create genome holding the input, bias and output nodes, then add the hidden ones
        genome = cls(config)
        split_of = {}
        for node_data in nodes_data:
            if "split" not in node_data:
                continue
            if node_data["type"] != "hidden":
                raise InvalidTopology(f"Only hidden nodes come from a split, not node {node_data['id']}")
            if node_data["split"] in split_of.values():
                raise InvalidTopology(f"Two nodes come from the split of connection {node_data['split']}")
            split_of[node_data["id"]] = node_data["split"]
        for node_id in ids_by_type[NodeType.HIDDEN]:
            genome.node_genes[node_id] = NodeGene(node_id, NodeType.HIDDEN, split_of.get(node_id))

        # Add connections and validate the network
        connections_data = genome_dict.get("connections", [])
        next_innovation  = 1 + max((c["innovation"] for c in connections_data if "innovation" in c), default=-1)
        for conn_data in connections_data:
            node_in  = conn_data["from"]
            node_out = conn_data["to"]
            weight   = conn_data["weight"]
            enabled  = conn_data.get("enabled", True)

            if "innovation" in conn_data:
                innovation = conn_data["innovation"]
            else:
                innovation = next_innovation
                next_innovation += 1

            # Validate that nodes exist
            if node_in not in genome.node_genes:
                raise InvalidTopology(f"Connection references non-existent source node: {node_in}")
            if node_out not in genome.node_genes:
                raise InvalidTopology(f"Connection references non-existent destination node: {node_out}")
            if genome.node_genes[node_out].type.is_source:
                raise InvalidTopology(f"Connection cannot end at {genome.node_genes[node_out].type.name} node {node_out}")
            if genome.node_genes[node_in].type == NodeType.OUTPUT and not config.allow_recurrent:
                raise InvalidTopology(f"Connection cannot start at OUTPUT node {node_in}")

            # Validate uniqueness
            if innovation in genome.conn_genes:
                raise InvalidTopology(f"Duplicate innovation number: {innovation}")
            if genome.find_connection(node_in, node_out) is not None:
                raise InvalidTopology(f"Duplicate connection from {node_in} to {node_out}")

            # Validate that connection wouldn't create a cycle
            creates_cycle = genome.would_create_cycle(node_in, node_out)
            if creates_cycle and not config.allow_recurrent:
                raise InvalidTopology(f"Connection from {node_in} to {node_out} would create a cycle")

            recurrent = conn_data.get("recurrent", creates_cycle)
            genome.conn_genes[innovation] = ConnectionGene(node_in, node_out, weight, innovation, enabled, recurrent)

        return genome

    def to_dict(self) -> dict:
        """
        Convert the genome to a dictionary representation.

        This is the inverse operation of from_dict(), producing
        a dictionary that can be used to reconstruct the genome.
        The dictionary holds only primitive values (ints, floats,
        bools, strings) inside lists and dicts.

        Returns:
            Dictionary with the following structure:
            {
                "nodes": [
                    {"id": 0, "type": "input"},
                    {"id": 1, "type": "output"},
                    {"id": 2, "type": "hidden"}
                ],
                "connections": [
                    {"innovation": 0, "from": 0, "to": 2, "weight": 0.5, "enabled": true, "recurrent": false},
                    {"innovation": 3, "from": 2, "to": 1, "weight": 1.5, "enabled": true, "recurrent": false}
                ]
            }
            Nodes are sorted by ID, connections by innovation number.
        """
        nodes = []
        for node in sorted(self.node_genes.values(), key=lambda n: n.id):
            node_data = {"id": node.id, "type": node.type.name.lower()}
            if node.split_of is not None:
                node_data["split"] = node.split_of
            nodes.append(node_data)

        connections = []
        for conn in sorted(self.conn_genes.values(), key=lambda c: c.innovation):
            connections.append({
                "innovation": conn.innovation,
                "from"      : conn.node_in,
                "to"        : conn.node_out,
                "weight"    : conn.weight,
                "enabled"   : conn.enabled,
                "recurrent" : conn.recurrent
            })

        return {
            "nodes"      : nodes,
            "connections": connections
        }

    @staticmethod
    def _validate_node_numbering(ids_by_type: dict[NodeType, list[int]], config: Config) -> None:
        """
        Validate that nodes follow the NEAT numbering convention.

        Raises:
            InvalidTopology: If node numbering doesn't follow the convention
        """
        # Check input nodes are numbered [0, num_inputs)
        expected = list(range(config.num_inputs))
        if ids_by_type[NodeType.INPUT] != expected:
            raise InvalidTopology(f"Input nodes must be numbered {expected}, got {ids_by_type[NodeType.INPUT]}")

        # Check there is at most one bias node, numbered right after the inputs
        expected = [config.num_inputs] if config.use_bias else []
        if ids_by_type[NodeType.BIAS] != expected:
            raise InvalidTopology(f"Bias node must be numbered {expected}, got {ids_by_type[NodeType.BIAS]}")

        # Check output nodes come next
        first_output = config.num_inputs + config.num_bias
        expected = list(range(first_output, first_output + config.num_outputs))
        if ids_by_type[NodeType.OUTPUT] != expected:
            raise InvalidTopology(f"Output nodes must be numbered {expected}, got {ids_by_type[NodeType.OUTPUT]}")

        # Check hidden nodes are numbered >= first_hidden_id
        hidden_ids = ids_by_type[NodeType.HIDDEN]
        for hid in hidden_ids:
            if hid < config.first_hidden_id:
                raise InvalidTopology(f"Hidden node {hid} has ID below minimum {config.first_hidden_id}")

        # Check for duplicate node IDs
        if len(hidden_ids) != len(set(hidden_ids)):
            raise InvalidTopology("Duplicate node IDs found in node list")

    @property
    def config(self) -> Config:
        return self._config

    @property
    def input_nodes(self) -> list[NodeGene]:
        return [node for node in self.node_genes.values() if node.type == NodeType.INPUT]

    @property
    def bias_nodes(self) -> list[NodeGene]:
        return [node for node in self.node_genes.values() if node.type == NodeType.BIAS]

    @property
    def output_nodes(self) -> list[NodeGene]:
        return [node for node in self.node_genes.values() if node.type == NodeType.OUTPUT]

    @property
    def hidden_nodes(self) -> list[NodeGene]:
        return [node for node in self.node_genes.values() if node.type == NodeType.HIDDEN]

    @property
    def enabled_connections(self) -> list[ConnectionGene]:
        return [conn for conn in self.conn_genes.values() if conn.enabled]

    # ----------------
    # Operators

    def add_node(self, split_connection: ConnectionGene, registry: InnovationRegistry) -> NodeGene:
        """Split 'split_connection' with a new hidden node (see 'mutation.add_node')."""
        return mutation.add_node(self, split_connection, registry)

    def add_connection(self, source: int, target: int, weight: float, registry: InnovationRegistry) -> ConnectionGene:
        """Connect node 'source' to node 'target' (see 'mutation.add_connection')."""
        return mutation.add_connection(self, source, target, weight, registry)

    def mutate_weights(self, rate: float, power: float, rng=None) -> None:
        mutation.mutate_weights(self, rate, power, rng)

    def toggle_connection_enabled(self, rng=None) -> ConnectionGene:
        return mutation.toggle_connection_enabled(self, rng)

    def mutate(self, registry: InnovationRegistry, rng=None) -> None:
        """Apply to the genome all possible mutation operations (see 'mutation.mutate')."""
        mutation.mutate(self, registry, rng)

    def clone(self) -> 'Genome':
        """
        Create a copy of this genome.
        The copy shares the configuration, but owns copies of all genes.
        """
        cloned = Genome.__new__(type(self))
        cloned._config    = self._config
        cloned.node_genes = {nid  : copy.copy(node) for nid, node in self.node_genes.items()}
        cloned.conn_genes = {innov: copy.copy(conn) for innov, conn in self.conn_genes.items()}
        return cloned

    def spawn_child(self, registry: InnovationRegistry, rng=None) -> 'Genome':
        """
        Asexual reproduction: create a mutated copy of this genome.
        The genome itself is left unchanged.
        """
        child = self.clone()
        child.mutate(registry, rng)
        return child

    def crossover(self, other: 'Genome', fitness_self: float, fitness_other: float, rng=None) -> 'Genome':
        """Create offspring by crossing this genome with another (see 'crossover.crossover')."""
        return crossover(self, other, fitness_self, fitness_other, rng)

    def distance(self, other: 'Genome') -> float:
        """Calculate the compatibility distance between this genome and another."""
        # Import here to avoid circular import
        from neatcore.pool.speciation import distance
        return distance(self, other, self._config)

    def activate(self, inputs) -> list[float]:
        """Evaluate the network encoded by this genome on one input vector."""
        # Import here to avoid circular import
        from neatcore.phenotype import activate
        return activate(self, inputs)

    # ----------------
    # Graph queries

    def find_connection(self, source: int, target: int) -> ConnectionGene | None:
        """
        Return the connection from 'source' to 'target' (enabled or not),
        or None if the two nodes are not directly connected.
        """
        for conn in self.conn_genes.values():
            if conn.node_in == source and conn.node_out == target:
                return conn
        return None

    def would_create_cycle(self, from_node: int, to_node: int) -> bool:
        """
        Check if adding a connection from_node -> to_node would create a cycle.
        Uses DFS to check if there's already a path from 'to_node' back to 'from_node'.
        Considers ALL connections (both enabled and disabled).

        Parameters:
            from_node: proposed start of the new connection
            to_node:   proposed end   of the new connections

        Returns:
            whether adding the new connection would create a cycle in the network
        """
        # A self-loop is a cycle.
        if from_node == to_node:
            return True

        successors: dict[int, list[int]] = {}
        for conn_gene in self.conn_genes.values():
            successors.setdefault(conn_gene.node_in, []).append(conn_gene.node_out)

        # If we can reach 'from_node' starting at 'to_node', then adding a
        # connection 'from_node' -> 'to_node' would create a network cycle
        visited = set()
        stack   = [to_node]

        while stack:

            current = stack.pop()
            if current == from_node:
                return True   # found path 'to_node' -> 'from_node', would create cycle
            if current in visited:
                continue
            visited.add(current)
            stack.extend(successors.get(current, []))

        return False

    def has_cycle(self, enabled_only: bool = True) -> bool:
        """
        Whether the network contains a directed cycle (self-loops included).

        Parameters:
            enabled_only: if True, only enabled connections are considered
        """
        conns = self.enabled_connections if enabled_only else list(self.conn_genes.values())

        # Kahn's algorithm: the graph is acyclic iff every node can be removed
        in_degree  = {node_id: 0 for node_id in self.node_genes}
        successors = {node_id: [] for node_id in self.node_genes}
        for conn in conns:
            in_degree[conn.node_out] += 1
            successors[conn.node_in].append(conn.node_out)

        queue   = [node_id for node_id, degree in in_degree.items() if degree == 0]
        removed = 0
        while queue:
            node_id  = queue.pop()
            removed += 1
            for succ in successors[node_id]:
                in_degree[succ] -= 1
                if in_degree[succ] == 0:
                    queue.append(succ)

        return removed < len(self.node_genes)

    def reachable_outputs(self) -> set[int]:
        """
        Return the IDs of the output nodes which can be reached from
        an input (or bias) node following enabled connections.
        """
        successors: dict[int, list[int]] = {}
        for conn in self.enabled_connections:
            successors.setdefault(conn.node_in, []).append(conn.node_out)

        visited = set()
        stack   = [node.id for node in self.node_genes.values() if node.type.is_source]
        while stack:
            current = stack.pop()
            if current in visited:
                continue
            visited.add(current)
            stack.extend(successors.get(current, []))

        return {node.id for node in self.output_nodes if node.id in visited}

    def __str__(self):
        node_genes_str  = ''.join(str(node) for node in self.input_nodes)
        node_genes_str += ''.join(str(node) for node in self.bias_nodes)
        node_genes_str += ''.join(str(node) for node in self.hidden_nodes)
        node_genes_str += ''.join(str(node) for node in self.output_nodes)
        conn_genes_str  = ''.join(str(conn) for conn in self.conn_genes.values())
        return f"Nodes: {node_genes_str}\nConns: {conn_genes_str}"

    @staticmethod
    def show_aligned(genome1: 'Genome', genome2: 'Genome') -> None:
        """
        Print two genomes aligning the node and connection genes.
        """

        # Align nodes by ID
        node_ids_all = sorted(set(genome1.node_genes.keys()) | set(genome2.node_genes.keys()))
        node_str1 = ""
        node_str2 = ""
        for node_id in node_ids_all:
            node1 = str(genome1.node_genes[node_id]) if node_id in genome1.node_genes else ""
            node2 = str(genome2.node_genes[node_id]) if node_id in genome2.node_genes else ""
            width = max(len(node1), len(node2))
            node_str1 += node1.ljust(width)
            node_str2 += node2.ljust(width)

        # Print aligned nodes
        print(f"Nodes:\n{node_str1}\n{node_str2}\n")

        # Align connections by innovation number
        innovs_all = sorted(set(genome1.conn_genes.keys()) | set(genome2.conn_genes.keys()))
        conn_str1 = ""
        conn_str2 = ""
        for innov in innovs_all:
            conn1 = str(genome1.conn_genes[innov]) if innov in genome1.conn_genes else ""
            conn2 = str(genome2.conn_genes[innov]) if innov in genome2.conn_genes else ""
            width = max(len(conn1), len(conn2))
            conn_str1 += conn1.ljust(width)
            conn_str2 += conn2.ljust(width)

        # Print aligned connections
        print(f"Connections:\n{conn_str1}\n{conn_str2}\n")
