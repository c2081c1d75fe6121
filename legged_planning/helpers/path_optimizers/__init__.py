"""Path representation and dynamic shortcut optimization."""

from .contact_node import ContactNode
from .path_vector import CONTINUITY_TOLERANCE, LinearPath, Path, PathVector, SubchainPath, path_length
from .planner_interface import PathOptimizer, PathProjector, PathValidator, Problem, SteeringMethod
from .random_shortcut_dynamic import PATH_OPTIMIZERS, DynamicShortcutOptimizer, create_path_optimizer
from .steering import SteerFunction

__all__ = [
    'ContactNode',
    'CONTINUITY_TOLERANCE',
    'LinearPath',
    'Path',
    'PathVector',
    'SubchainPath',
    'path_length',
    'PathOptimizer',
    'PathProjector',
    'PathValidator',
    'Problem',
    'SteeringMethod',
    'PATH_OPTIMIZERS',
    'DynamicShortcutOptimizer',
    'create_path_optimizer',
    'SteerFunction',
]
