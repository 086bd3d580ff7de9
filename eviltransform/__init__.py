"""
# Geometries between WGS-84, GCJ-02 and BD-09

Eviltransform converts the coordinates of serialized geometries between the three coordinate systems used in and around mainland China:

* **WGS-84**: the global GPS system. (EPSG:4326)
* **GCJ-02**: the national system, an obfuscated offset of WGS-84. (SRID 990001)
* **BD-09**: a further vendor offset of GCJ-02. (SRID 990002)

Geometries are read and written as PostGIS EWKB. Points, lines, polygons and all their multi- and collection forms are supported, with or without Z and M.
Outside mainland China every conversion is the identity.

**Dependencies** </br>
`gdal` (https://gdal.org/) </br>
`numba` (https://numba.pydata.org/) </br>

**Installation** </br>
Using pip:
```
pip install gdal
pip install eviltransform
```

**Quickstart**

### Convert the vertices of a geometry
```python
import eviltransform as et

out = et.transform_geometry(ewkb, et.ConversionMode.WGS_TO_GCJ, et.SRID_GCJ02)

et.read_spatial_reference_id(out.data)
>>> 990001

et.release(out)
```

### Transform between any projections
```python
import eviltransform as et

bd09 = et.eviltransform(ewkb_in_utm, "BD09")
mercator = et.eviltransform(bd09.data, "EPSG:3857")
```

### Convert arrays of coordinates
```python
import numpy as np
import eviltransform as et

lnglats = np.array([[116.404, 39.915], [-120.0, 30.0]])

et.convert_coordinates(lnglats, et.ConversionMode.WGS_TO_GCJ)
>>> array([[ 116.41024449,   39.91640428],
>>>        [-120.        ,   30.        ]])
```
"""
from osgeo import gdal, ogr, osr

gdal.UseExceptions()
ogr.UseExceptions()
osr.UseExceptions()

from .utils import *
from .core_coords import *
from .core_geometry import *
from .geometry import *

__version__ = "0.1.0"
