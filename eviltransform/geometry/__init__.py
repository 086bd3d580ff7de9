"""### Transform serialized geometries between projections. ###"""

from .eviltransform import eviltransform, reproject_geometry
