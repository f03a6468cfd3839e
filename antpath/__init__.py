from .errors import AntPathError, ConfigurationError, DegenerateInputError
from .colony import ColonyConfig, ColonyResult, ColonyState, AntColonyOptimizer, aco
from .travel import sample, travel
from .paths import edges, edge_distances, path_cost
from .experiments import run_parameter_sweep, run_repeated_trials
