import configparser
import os
from neatcore.activations import activations

class Config:

    # Allowed values for the enumerated options
    INITIAL_CXN_POLICIES    = ("none", "one-input", "partial", "full", "random-subset")
    MATCHING_WEIGHT_POLICIES = ("random", "average")
    CROSSOVER_TIE_POLICIES  = ("random", "first", "mixed")

    def __init__(self, config_file: str | None = None):
        """
        Initialize Config by parsing an INI file, or create a Config holding default values.

        Parameters:
            config_file: Path to the INI configuration file.
                         If None, creates a Config with defaults, for manual attribute setting.
        """

        # Default config for testing/manual setup
        if config_file is None:

            # Network shape and population initialization
            self.num_inputs           = 2
            self.num_outputs          = 1
            self.use_bias             = False
            self.population_size      = 100
            self.initial_cxn_policy   = "none"
            self.initial_cxn_fraction = None

            # Compatibility distance and speciation
            self.compatibility_threshold      = 3.0
            self.distance_excess_coeff        = 1.0
            self.distance_disjoint_coeff      = 1.0
            self.distance_weight_coeff        = 0.4
            self.distance_normalize_threshold = 20

            # Connection weights
            self.weight_init_mean    = 0.0
            self.weight_init_stdev   = 1.0
            self.min_weight          = -30.0
            self.max_weight          = 30.0
            self.weight_mutate_rate  = 0.8
            self.weight_mutate_power = 0.5
            self.weight_replace_prob = 0.1

            # Network evaluation
            self.allow_recurrent = False
            self.max_relax_steps = 10
            self.relax_tolerance = 1e-6
            self.activation      = "sigmoid"

            # Crossover
            self.disabled_gene_inherit_prob = 0.75
            self.matching_weight_policy     = "random"
            self.crossover_tie_policy       = "random"

            # Structural mutations
            self.mutation_passes               = 1
            self.node_add_probability          = 0.03
            self.connection_add_probability    = 0.05
            self.connection_toggle_probability = 0.01
            self.keep_outputs_reachable        = False
            self.max_add_attempts              = 20

            self.validate()
            return

        if not os.path.exists(config_file):
            raise FileNotFoundError(f"Configuration file '{config_file}' not found")

        parser = configparser.ConfigParser()
        parser.read(config_file)

        # Sentinel for missing default values
        _NO_DEFAULT = object()

        # Helper function to safely parse values
        def get_value(section, key, value_type, default=_NO_DEFAULT):
            try:
                raw_value = parser.get(section, key)
                if raw_value.lower() == 'none':
                    return None
                if value_type == int:
                    return parser.getint(section, key)
                elif value_type == float:
                    return parser.getfloat(section, key)
                elif value_type == bool:
                    return parser.getboolean(section, key)
                elif value_type == str:
                    return raw_value.strip()
            except (configparser.NoSectionError, configparser.NoOptionError):
                if default is not _NO_DEFAULT:
                    return default
                raise

        # [POPULATION_INIT]

        # The number of input nodes, through which the network receives inputs.
        self.num_inputs = get_value('POPULATION_INIT', 'num_inputs', int)

        # The number of output nodes, to which the network delivers outputs.
        self.num_outputs = get_value('POPULATION_INIT', 'num_outputs', int)

        # Whether genomes carry a bias node (a node always emitting 1.0).
        self.use_bias = get_value('POPULATION_INIT', 'use_bias', bool, default=False)

        # The number of genomes in each generation (used by the external driver).
        self.population_size = get_value('POPULATION_INIT', 'population_size', int, default=100)

        # Specifies the initial connectivity of newly-created genomes.
        # Allowed values:
        #   "none"          - no connections are initially present
        #   "one-input"     - one random input node is connected to all outputs nodes
        #   "partial"       - a fraction of all possible connections are instantiated randomly
        #   "full"          - connect all input (and bias) nodes to all output nodes
        #   "random-subset" - each output is connected to a random, non-empty subset of inputs
        self.initial_cxn_policy = get_value('POPULATION_INIT', 'initial_cxn_policy', str, default="none")

        # The fraction of connections to instantiate (only applicable
        # if the initial connection policy is "partial").
        # Use "None" if not applicable.
        self.initial_cxn_fraction = get_value('POPULATION_INIT', 'initial_cxn_fraction', float, default=None)

        # [SPECIATION]

        # Genomes whose compatibility distance is less than this
        # threshold are considered to be in the same species.
        self.compatibility_threshold = get_value('SPECIATION', 'compatibility_threshold', float)

        # The coefficients (c1, c2, c3) for the excess gene count, the disjoint gene
        # count and the mean weight difference of matching genes.
        self.distance_excess_coeff   = get_value('SPECIATION', 'distance_excess_coeff'  , float)
        self.distance_disjoint_coeff = get_value('SPECIATION', 'distance_disjoint_coeff', float)
        self.distance_weight_coeff   = get_value('SPECIATION', 'distance_weight_coeff'  , float)

        # When the larger genome has fewer connection genes than this,
        # the excess/disjoint counts are not normalized by its size.
        self.distance_normalize_threshold = get_value('SPECIATION', 'distance_normalize_threshold', int, default=20)

        # [CONNECTION]

        # The mean and standard deviation of the normal distribution
        # used to initialize the 'weight' parameter for new connections.
        self.weight_init_mean  = get_value('CONNECTION', 'weight_init_mean' , float, default=0.0)
        self.weight_init_stdev = get_value('CONNECTION', 'weight_init_stdev', float, default=1.0)

        # The minimum and maximum allowed 'weight' values.
        # Weights outside this range will be clamped to this range.
        self.min_weight = get_value('CONNECTION', 'min_weight', float)
        self.max_weight = get_value('CONNECTION', 'max_weight', float)

        # The per-connection probability that mutation perturbs the weight, and the
        # bound of the uniform perturbation.
        self.weight_mutate_rate  = get_value('CONNECTION', 'weight_mutate_rate' , float)
        self.weight_mutate_power = get_value('CONNECTION', 'weight_mutate_power', float)

        # The probability that a weight which was not perturbed is replaced
        # with a newly chosen random value (as if it were a new connection).
        self.weight_replace_prob = get_value('CONNECTION', 'weight_replace_prob', float, default=0.1)

        # [NETWORK]

        # Whether connections are allowed to close cycles.
        self.allow_recurrent = get_value('NETWORK', 'allow_recurrent', bool, default=False)

        # The maximum number of synchronous relaxation passes used to evaluate
        # cyclic networks, and the largest change at which relaxation stops early.
        self.max_relax_steps = get_value('NETWORK', 'max_relax_steps', int, default=10)
        self.relax_tolerance = get_value('NETWORK', 'relax_tolerance', float, default=1e-6)

        # Activation function of hidden and output nodes (see 'basic_activations.py').
        self.activation = get_value('NETWORK', 'activation', str, default="sigmoid")

        # [CROSSOVER]

        # The probability that a matching gene disabled in either parent is disabled in the child.
        self.disabled_gene_inherit_prob = get_value('CROSSOVER', 'disabled_gene_inherit_prob', float, default=0.75)

        # How the weight of a matching gene is inherited.
        # Allowed values:
        #   "random"  - from either parent, with equal probability
        #   "average" - the mean of the two parents' weights
        self.matching_weight_policy = get_value('CROSSOVER', 'matching_weight_policy', str, default="random")

        # Where disjoint and excess genes come from when both parents are equally fit.
        # Allowed values:
        #   "random" - from one parent, drawn at random
        #   "first"  - from the first parent
        #   "mixed"  - from both parents
        self.crossover_tie_policy = get_value('CROSSOVER', 'crossover_tie_policy', str, default="random")

        # [STRUCTURAL_MUTATIONS]

        # How many times the structural mutations are attempted per call to 'mutate'.
        self.mutation_passes = get_value('STRUCTURAL_MUTATIONS', 'mutation_passes', int, default=1)

        # The probability that mutation will add a new node (splitting an
        # existing connection, the enabled status of which will be set to False).
        self.node_add_probability = get_value('STRUCTURAL_MUTATIONS', 'node_add_probability', float)

        # The probability that mutation will add a connection between existing nodes.
        self.connection_add_probability = get_value('STRUCTURAL_MUTATIONS', 'connection_add_probability', float)

        # The probability that mutation will flip the enabled status of a connection.
        self.connection_toggle_probability = get_value('STRUCTURAL_MUTATIONS', 'connection_toggle_probability', float)

        # If 'True', a connection may not be disabled when doing so leaves an
        # output node unreachable from every input node.
        self.keep_outputs_reachable = get_value('STRUCTURAL_MUTATIONS', 'keep_outputs_reachable', bool, default=False)

        # How many random node pairs are tried before giving up on adding a connection.
        self.max_add_attempts = get_value('STRUCTURAL_MUTATIONS', 'max_add_attempts', int, default=20)

        self.validate()

    @property
    def num_bias(self) -> int:
        """Number of bias nodes (0 or 1)."""
        return 1 if self.use_bias else 0

    @property
    def first_hidden_id(self) -> int:
        """The smallest ID a hidden node can have."""
        return self.num_inputs + self.num_bias + self.num_outputs

    def validate(self) -> None:
        """
        Check the enumerated options and the numeric ranges.

        Raises:
            ValueError: If any value is not allowed
        """
        if self.activation not in activations:
            raise ValueError(f"Invalid activation function '{self.activation}'")
        if self.initial_cxn_policy not in self.INITIAL_CXN_POLICIES:
            raise ValueError(f"Invalid initial connection policy '{self.initial_cxn_policy}'")
        if self.initial_cxn_policy == "partial":
            if self.initial_cxn_fraction is None or not 0.0 <= self.initial_cxn_fraction <= 1.0:
                raise ValueError("'initial_cxn_fraction' must be in [0, 1] for the 'partial' policy")
        if self.matching_weight_policy not in self.MATCHING_WEIGHT_POLICIES:
            raise ValueError(f"Invalid matching weight policy '{self.matching_weight_policy}'")
        if self.crossover_tie_policy not in self.CROSSOVER_TIE_POLICIES:
            raise ValueError(f"Invalid crossover tie policy '{self.crossover_tie_policy}'")
        if self.num_inputs < 0 or self.num_outputs < 0:
            raise ValueError("The number of inputs and outputs cannot be negative")
        if self.max_relax_steps < 1:
            raise ValueError("'max_relax_steps' must be at least 1")
        if self.min_weight > self.max_weight:
            raise ValueError("'min_weight' cannot exceed 'max_weight'")
