from .loader import DefinitionLoader, LoadResult
from .params import ParamDefinition, build_params_tree, to_wire, transform, validate
from .poster import EventPoster

__all__ = [
    "DefinitionLoader",
    "EventPoster",
    "LoadResult",
    "ParamDefinition",
    "build_params_tree",
    "to_wire",
    "transform",
    "validate",
]
