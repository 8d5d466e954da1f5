"""
NEAT Innovation Registry Module

This module implements the InnovationRegistry class for the
NEAT (NeuroEvolution of Augmenting Topologies) algorithm.

Classes:
    ConnectionInnovation: Descriptor of "a new connection between node A and node B"
    SplitInnovation:      Descriptor of "a node inserted by splitting connection X"
    SplitRecord:          What a split was assigned: new node ID plus two innovation numbers
    InnovationRegistry:   Run-wide tracker for innovation numbers and node IDs
"""

import threading
from typing import NamedTuple, TYPE_CHECKING, overload

from loguru import logger

from neatcore.errors import RegistryConflict
if TYPE_CHECKING:
    from neatcore.genotype.connection_gene import ConnectionGene
    from neatcore.genotype.genome import Genome
    from neatcore.run.config import Config

class ConnectionInnovation(NamedTuple):
    """A new connection from 'node_in' to 'node_out'."""
    node_in : int
    node_out: int

class SplitInnovation(NamedTuple):
    """
    A new node inserted by splitting the connection with innovation number 'innovation'.
    The endpoints of the split connection travel with the descriptor; they are
    determined by 'innovation' and are checked against the registry.
    """
    innovation: int
    node_in   : int
    node_out  : int

class SplitRecord(NamedTuple):
    """
    The identifiers assigned to a split.

    innovation_in  is for the connection from the 'from' node of the split connection to the new node
    innovation_out is for the connection from the new node to the 'to' node of the split connection
    """
    node_id       : int
    innovation_in : int
    innovation_out: int

class InnovationRegistry:
    """
    Tracks structural changes across all genomes of an evolutionary run.
    Ensures the same structural change gets the same innovation number
    (for connections) and the same ID (for nodes), whichever genome it
    happens in.

    One registry is created at the start of a run and handed to every
    operation that introduces structure. It only grows: entries are never
    removed and counters never go back.

    All methods are safe to call from several threads at once. Concurrent
    requests for the same descriptor see a single winner, and requests for
    different descriptors never share an identifier.

    Public Properties:
        next_innovation: The innovation number the next new connection will receive
        next_node_id:    The node ID the next split will receive

    Public Methods:
        get_or_assign(descriptor):                Look up or allocate the identifiers of a structural change
        get_innovation_number(node_in, node_out): Shortcut for connection descriptors
        get_split_ids(conn_to_split):             Shortcut for split descriptors
        observe(genome):                          Fold an existing genome into the registry
    """

    def __init__(self, first_node_id: int, first_innovation: int = 0):
        """
        Parameters:
            first_node_id:    ID given to the first node created by a split
                              (one past the last input/bias/output node)
            first_innovation: innovation number given to the first connection
        """
        self._lock = threading.RLock()

        self._next_innovation: int = first_innovation
        self._next_node_id   : int = first_node_id

        # For each connection ever created, map its endpoints to its innovation number, and back
        self._innovation_numbers: dict[ConnectionInnovation, int] = {}
        self._connections       : dict[int, ConnectionInnovation] = {}

        # For each connection ever split, what node was created and
        # what innovation numbers were assigned to the new connections.
        self._split_ids: dict[int, SplitRecord] = {}   # split innovation number -> record

    @classmethod
    def for_config(cls, config: 'Config') -> 'InnovationRegistry':
        """
        Create an empty registry for genomes shaped as described by 'config'.
        """
        return cls(first_node_id=config.first_hidden_id)

    @property
    def next_innovation(self) -> int:
        with self._lock:
            return self._next_innovation

    @property
    def next_node_id(self) -> int:
        with self._lock:
            return self._next_node_id

    def __len__(self) -> int:
        """Number of connections registered so far."""
        with self._lock:
            return len(self._innovation_numbers)

    @overload
    def get_or_assign(self, descriptor: ConnectionInnovation) -> int: ...
    @overload
    def get_or_assign(self, descriptor: SplitInnovation) -> SplitRecord: ...

    def get_or_assign(self, descriptor):
        """
        Return the identifiers previously assigned to 'descriptor', or assign new ones.

        Parameters:
            descriptor: a ConnectionInnovation or a SplitInnovation

        Returns:
            the innovation number (for a ConnectionInnovation) or
            the SplitRecord (for a SplitInnovation)

        Raises:
            RegistryConflict: if a split descriptor contradicts the registered connections
        """
        if isinstance(descriptor, ConnectionInnovation):
            with self._lock:
                return self._assign_connection(descriptor)
        if isinstance(descriptor, SplitInnovation):
            with self._lock:
                return self._assign_split(descriptor)
        raise TypeError(f"Unknown innovation descriptor: {descriptor!r}")

    def get_innovation_number(self, node_in: int, node_out: int) -> int:
        """
        Get innovation number for a connection, identified by its endpoints.
        Returns existing innovation number if this connection was created
        before, otherwise assigns a new innovation number.

        Parameters:
            node_in:  node ID for the 'from' end of the connection
            node_out: node ID for the 'to'   end of the connection

        Returns:
            connection ID (a.k.a. innovation number)
        """
        return self.get_or_assign(ConnectionInnovation(node_in, node_out))

    def get_split_ids(self, conn_to_split: 'ConnectionGene') -> SplitRecord:
        """
        Get node ID and innovation numbers for splitting a connection.
        If this exact connection has been split before, returns the same
        values, otherwise creates new ones.

        Parameters:
            conn_to_split: the connection being split

        Returns:
            the SplitRecord (new_node_id, innovation_in, innovation_out)
        """
        return self.get_or_assign(SplitInnovation(conn_to_split.innovation,
                                                  conn_to_split.node_in,
                                                  conn_to_split.node_out))

    def observe(self, genome: 'Genome') -> None:
        """
        Record the structure of a genome built outside this registry (for
        example one restored from its plain-data form), so that later mutations
        never reuse its innovation numbers or node IDs.

        Hidden nodes which know the split that created them are recorded as
        the outcome of that split: splitting the same connection in another
        genome then yields the same node and the same two connections.

        Raises:
            RegistryConflict: if the genome binds a connection or an innovation
                              number differently from what is already registered
        """
        with self._lock:
            for conn in genome.conn_genes.values():
                key = ConnectionInnovation(conn.node_in, conn.node_out)
                self._bind(key, conn.innovation)
                self._next_innovation = max(self._next_innovation, conn.innovation + 1)

            if genome.node_genes:
                self._next_node_id = max(self._next_node_id, max(genome.node_genes) + 1)

            for node in genome.node_genes.values():
                if node.split_of is not None:
                    self._bind_split(node.split_of, node.id)

    def _bind(self, key: ConnectionInnovation, innovation: int) -> None:
        """Bind 'key' to 'innovation', checking both directions of the mapping."""
        registered_innov = self._innovation_numbers.get(key)
        if registered_innov is not None and registered_innov != innovation:
            raise RegistryConflict(f"connection {tuple(key)} is registered as innovation "
                                   f"{registered_innov}, not {innovation}")
        registered_key = self._connections.get(innovation)
        if registered_key is not None and registered_key != key:
            raise RegistryConflict(f"innovation {innovation} is registered for connection "
                                   f"{tuple(registered_key)}, not {tuple(key)}")
        self._innovation_numbers[key] = innovation
        self._connections[innovation] = key

    def _bind_split(self, innovation: int, node_id: int) -> None:
        """Record that splitting connection 'innovation' created node 'node_id'."""
        split_key = self._connections.get(innovation)
        if split_key is None:
            logger.debug("Node {} comes from the split of unknown innovation {}, not recorded", node_id, innovation)
            return

        # Both new connections of the split must be known to rebuild its record
        innov1 = self._innovation_numbers.get(ConnectionInnovation(split_key.node_in, node_id))
        innov2 = self._innovation_numbers.get(ConnectionInnovation(node_id, split_key.node_out))
        if innov1 is None or innov2 is None:
            logger.debug("Connections of node {} unknown, split of innovation {} not recorded", node_id, innovation)
            return

        record = SplitRecord(node_id, innov1, innov2)

        registered = self._split_ids.get(innovation)
        if registered is not None and registered != record:
            raise RegistryConflict(f"split of innovation {innovation} is registered as node "
                                   f"{registered.node_id}, not {node_id}")
        self._split_ids[innovation] = record

    def _assign_connection(self, key: ConnectionInnovation) -> int:
        innovation = self._innovation_numbers.get(key)

        # This is a new connection
        if innovation is None:
            innovation = self._next_innovation
            self._bind(key, innovation)
            self._next_innovation += 1
            logger.debug("Innovation {} assigned to connection {} -> {}", innovation, key.node_in, key.node_out)

        return innovation

    def _assign_split(self, key: SplitInnovation) -> SplitRecord:
        self._bind(ConnectionInnovation(key.node_in, key.node_out), key.innovation)
        self._next_innovation = max(self._next_innovation, key.innovation + 1)

        record = self._split_ids.get(key.innovation)

        # This connection hasn't been split before
        if record is None:

            # Generate the ID for the new node
            new_node_id = self._next_node_id
            self._next_node_id += 1

            # First new connection: original_in -> new_node
            innov1 = self._assign_connection(ConnectionInnovation(key.node_in, new_node_id))

            # Second new connection: new_node -> original_out
            innov2 = self._assign_connection(ConnectionInnovation(new_node_id, key.node_out))

            record = SplitRecord(new_node_id, innov1, innov2)
            self._split_ids[key.innovation] = record
            logger.debug("Node {} assigned to split of innovation {}", new_node_id, key.innovation)

        return record
