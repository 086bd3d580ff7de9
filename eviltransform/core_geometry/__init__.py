"""### Convert the vertices of serialized geometries. ###"""

from .core_geometry_errors import ErrorKind, GeometryTransformError
from .core_geometry_engine import OgrGeometryEngine, Vertex
from .core_geometry_context import EngineOptions, EngineContext, get_engine_context
from .core_geometry_transform import (
    OwnedBuffer,
    GeometryPointTransformer,
    read_spatial_reference_id,
    transform_geometry,
    release,
)
