from .connection_supervisor import ConnectionSupervisor
from .console_renderer import render_map
from .map_reconstructor import MapReconstructor
from .path_tracer import shortest_delta, trace_path

__all__ = [
    "ConnectionSupervisor",
    "MapReconstructor",
    "render_map",
    "shortest_delta",
    "trace_path",
]
