from __future__ import annotations
import ctypes
import warnings
import numpy
import numpy.typing
from typing import Optional, List, Any, Union
from .abstract import kitti_pointcloud_abstract, kitti_source_abstract, kitti_sink_abstract

__all__ = [
    'KITTI_POINT_SIZE',
    'KittiError',
    'KittiNotFoundError',
    'KittiWriteError',
    'KittiInvalidDestinationError',
    'KittiMalformedInputError',
    'KittiTruncationWarning',

    'kitti_pointcloud_abstract',
    'kitti_source_abstract',
    'kitti_sink_abstract',
    'kitti_pointcloud',

    'kitti_point',
    'kitti_point_array',
    'kitti_point_tuple',
    'kitti_point_numpy_dtype',

    'kitti_get_version',
    'kitti_decode',
    'kitti_read',
    'kitti_write',
    'kitti_from_points',
    'kitti_from_numpy_matrix',
]

class KittiError(RuntimeError):
    pass

class KittiNotFoundError(KittiError):
    """Input pointcloud file does not exist or cannot be read"""
    pass

class KittiWriteError(KittiError):
    """Output file cannot be created or written"""
    pass

class KittiInvalidDestinationError(KittiError):
    """Output directory was requested but the destination is an existing file"""
    pass

class KittiMalformedInputError(KittiError):
    """Input size is not a whole number of points (only raised in strict mode)"""
    pass

class KittiTruncationWarning(UserWarning):
    """Trailing bytes after the last complete point were ignored"""
    pass

#
# C/Python kitti_point structure. KITTI velodyne scans are written on little-endian hosts,
# so the layout is fixed to little-endian IEEE-754 floats regardless of the machine we run on.
#
class kitti_point(ctypes.LittleEndianStructure):
    """Point in a KITTI scan. Fields are x,y,z (float coordinates) and intensity (float reflectance)"""
    _fields_ = [
        ("x", ctypes.c_float),
        ("y", ctypes.c_float),
        ("z", ctypes.c_float),
        ("intensity", ctypes.c_float),
    ]

    def __eq__(self, other : Any) -> bool:
        if not isinstance(other, kitti_point):
            return False
        for fld in self._fields_:
            if getattr(self, fld[0]) != getattr(other, fld[0]):
                return False
        return True

    def __ne__(self, other : Any) -> bool:
        return not self.__eq__(other)

    def __repr__(self) -> str:
        return f"kitti_point({self.x}, {self.y}, {self.z}, {self.intensity})"

    def as_tuple(self) -> kitti_point_tuple:
        return (self.x, self.y, self.z, self.intensity)

KITTI_POINT_SIZE = ctypes.sizeof(kitti_point)
assert KITTI_POINT_SIZE == 16

# Pythonic representation of a kitti_point
kitti_point_tuple = tuple[float, float, float, float]
# Numpy dtype definition of a kitti_point
kitti_point_numpy_dtype = numpy.dtype([('x', '<f4'), ('y', '<f4'), ('z', '<f4'), ('intensity', '<f4')])

kitti_point_array_value_type = Union[None, bytearray, bytes, ctypes.Array[kitti_point], List[kitti_point_tuple]]
kitti_point_numpy_array_value_type = numpy.typing.NDArray[Any]
kitti_point_numpy_matrix_value_type = numpy.typing.NDArray[numpy.floating]

def kitti_point_array(*, count : Optional[int]=None, values : Any=()) -> ctypes.Array[kitti_point]:
    """Create an array of kitti_point elements. `count` can be specified, or `values` can be raw bytes or a list of tuples (x, y, z, intensity), or both"""
    if count == None:
        if isinstance(values, (bytes, bytearray)):
            count = len(values) // KITTI_POINT_SIZE
        else:
            count = len(values)
    allocator = kitti_point * count
    if isinstance(values, bytearray):
        return allocator.from_buffer(values)
    elif isinstance(values, bytes):
        return allocator.from_buffer_copy(values)
    if not isinstance(values, tuple):
        values = tuple(values)
    return allocator(*values)

class kitti_pointcloud(kitti_pointcloud_abstract):
    """Pointcloud decoded from a KITTI scan.

    The point data is held as immutable bytes in KITTI layout. All accessors return
    copies or read-only views, so a pointcloud never changes after it has been created.
    """

    _bytes : Optional[bytes]
    _input_size : int

    def __init__(self, data : bytes=b'', input_size : Optional[int]=None):
        if len(data) % KITTI_POINT_SIZE != 0:
            raise KittiError(f"kitti_pointcloud: data length {len(data)} is not a multiple of {KITTI_POINT_SIZE}")
        self._bytes = bytes(data)
        if input_size == None:
            input_size = len(data)
        self._input_size = input_size

    def _as_bytes(self) -> bytes:
        if self._bytes == None:
            raise KittiError("kitti_pointcloud: pointcloud has been freed")
        return self._bytes

    def free(self) -> None:
        """Release the point data"""
        self._bytes = None

    def count(self) -> int:
        """Get the number of points in the pointcloud"""
        return len(self._as_bytes()) // KITTI_POINT_SIZE

    def __len__(self) -> int:
        return self.count()

    def input_size(self) -> int:
        """Number of bytes in the input this pointcloud was decoded from (including any ignored trailing bytes)"""
        return self._input_size

    def get_bytes(self) -> bytes:
        """Get the pointcloud data in KITTI binary layout"""
        return self._as_bytes()

    def get_points(self) -> ctypes.Array[kitti_point]:
        """Get a copy of the pointcloud data as a kitti_point_array"""
        return kitti_point_array(values=self._as_bytes())

    def get_tuples(self) -> List[kitti_point_tuple]:
        """Get the pointcloud data as a list of (x, y, z, intensity) tuples"""
        return [p.as_tuple() for p in self.get_points()]

    def get_numpy_array(self) -> kitti_point_numpy_array_value_type:
        """Return the pointcloud data as a (read-only) numpy array of records"""
        data = self._as_bytes()
        if not data:
            return numpy.zeros(0, kitti_point_numpy_dtype)
        return numpy.frombuffer(data, dtype=kitti_point_numpy_dtype)

    def get_numpy_matrix(self, onlyGeometry : bool=False) -> kitti_point_numpy_matrix_value_type:
        """Return the pointcloud as a numpy matrix of floats, shape Nx4, columns x, y, z, intensity.
        If onlyGeometry is True only the first three columns will be returned.
        """
        np_points = self.get_numpy_array()
        nColumn = 3 if onlyGeometry else 4
        np_shape = (np_points.shape[0], nColumn)
        np_matrix = numpy.zeros(np_shape, numpy.float32)
        np_matrix[..., 0] = np_points['x']
        np_matrix[..., 1] = np_points['y']
        np_matrix[..., 2] = np_points['z']
        if not onlyGeometry:
            np_matrix[..., 3] = np_points['intensity']
        return np_matrix

    def get_o3d_pointcloud(self) -> Any:
        """Returns an Open3D PointCloud representing this pointcloud. Intensity (clipped to 0..1) becomes a grey color."""
        import open3d
        np_matrix = self.get_numpy_matrix()
        points = np_matrix[:,0:3].astype(numpy.float64)
        grey = numpy.clip(np_matrix[:,3], 0.0, 1.0).astype(numpy.float64)
        colors = numpy.stack([grey, grey, grey], axis=-1)
        o3d_pc = open3d.geometry.PointCloud()
        o3d_pc.points = open3d.utility.Vector3dVector(points)
        o3d_pc.colors = open3d.utility.Vector3dVector(colors)
        return o3d_pc

def kitti_get_version() -> str:
    """Return version information"""
    from importlib.metadata import version, PackageNotFoundError
    try:
        return version("kitti2pcd")
    except PackageNotFoundError:
        return "unknown"

def kitti_decode(data : Union[bytes, bytearray, memoryview], strict : bool=False, filename : Optional[str]=None) -> kitti_pointcloud:
    """Decode KITTI binary data into a pointcloud.

    Every 16 bytes are one point. Bytes after the last complete point are ignored with a
    KittiTruncationWarning, or cause a KittiMalformedInputError if `strict` is True.
    Point values are not checked: NaN and infinities are kept as-is.
    """
    nBytes = len(data)
    nPoints = nBytes // KITTI_POINT_SIZE
    nUsed = nPoints * KITTI_POINT_SIZE
    if nUsed != nBytes:
        what = f"'{filename}'" if filename else "input"
        msg = f"{what}: size {nBytes} is not a multiple of {KITTI_POINT_SIZE}, {nBytes - nUsed} trailing bytes ignored"
        if strict:
            raise KittiMalformedInputError(msg)
        warnings.warn(msg, KittiTruncationWarning, stacklevel=2)
    return kitti_pointcloud(bytes(data[:nUsed]), input_size=nBytes)

def kitti_read(filename : str, strict : bool=False) -> kitti_pointcloud:
    """Read pointcloud from a KITTI .bin file"""
    try:
        with open(filename, 'rb') as fp:
            data = fp.read()
    except OSError as e:
        raise KittiNotFoundError(f"Point cloud file '{filename}' not found or unreadable: {e.strerror or e}") from e
    return kitti_decode(data, strict=strict, filename=filename)

def kitti_write(filename : str, pointcloud : kitti_pointcloud_abstract) -> int:
    """Write a pointcloud to a KITTI .bin file. Returns number of points written."""
    data = pointcloud.get_bytes()
    try:
        with open(filename, 'wb') as fp:
            fp.write(data)
    except OSError as e:
        raise KittiWriteError(f"Could not write output file '{filename}': {e.strerror or e}") from e
    return len(data) // KITTI_POINT_SIZE

def kitti_from_points(points : kitti_point_array_value_type) -> kitti_pointcloud:
    """Create a pointcloud from either `kitti_point_array` or a list or tuple of (x, y, z, intensity) values"""
    if points is None:
        points = []
    if not isinstance(points, ctypes.Array):
        points = kitti_point_array(values=points)
    return kitti_pointcloud(bytes(points))

def kitti_from_numpy_matrix(np_points_matrix : kitti_point_numpy_matrix_value_type) -> kitti_pointcloud:
    """Create a pointcloud from a numpy matrix with shape Nx4 (x, y, z, intensity)"""
    count = np_points_matrix.shape[0]
    assert np_points_matrix.shape == (count, 4)
    assert np_points_matrix.dtype in (numpy.float32, numpy.float64)
    np_points = numpy.zeros(count, kitti_point_numpy_dtype)
    np_points['x'] = np_points_matrix[:,0]
    np_points['y'] = np_points_matrix[:,1]
    np_points['z'] = np_points_matrix[:,2]
    np_points['intensity'] = np_points_matrix[:,3]
    return kitti_pointcloud(np_points.tobytes())
