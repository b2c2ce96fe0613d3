
# Plain dataclasses shared by the core, the services and the API layer.
from .base import Edge, GraphInput, DirectedSaving, Route
