import io
import numpy
from typing import TextIO
from .util import KittiWriteError, kitti_pointcloud_abstract, kitti_pointcloud, kitti_read

__all__ = [
    'PCD_HEADER_TEMPLATE',
    'PCD_NUMBER_FORMAT',
    'pcd_header',
    'pcd_encode',
    'pcd_write',
    'kitti_convert',
]

#
# ASCII PCD v.7 header for x/y/z/intensity float points. Downstream point cloud tools parse this,
# so it must stay byte-for-byte identical.
#
PCD_HEADER_TEMPLATE = (
    "# .PCD v.7 - Point Cloud Data file format\n"
    "VERSION .7\n"
    "FIELDS x y z intensity\n"
    "SIZE 4 4 4 4\n"
    "TYPE F F F F\n"
    "COUNT 1 1 1 1\n"
    "WIDTH {npoints}\n"
    "HEIGHT 1\n"
    "POINTS {npoints}\n"
    "DATA ASCII\n"
)

# General format with 6 significant digits, the same as C++ iostreams with setprecision(6)
PCD_NUMBER_FORMAT = "%g"

def pcd_header(npoints : int) -> str:
    """Return the PCD header for a pointcloud with npoints points"""
    return PCD_HEADER_TEMPLATE.format(npoints=npoints)

def _pcd_write_stream(fp : TextIO, pointcloud : kitti_pointcloud_abstract) -> int:
    if not isinstance(pointcloud, kitti_pointcloud):
        pointcloud = kitti_pointcloud(pointcloud.get_bytes())
    np_matrix = pointcloud.get_numpy_matrix()
    npoints = np_matrix.shape[0]
    fp.write(pcd_header(npoints))
    numpy.savetxt(fp, np_matrix, fmt=PCD_NUMBER_FORMAT, delimiter=" ", newline="\n")
    return npoints

def pcd_encode(pointcloud : kitti_pointcloud_abstract) -> str:
    """Return the ASCII PCD representation of a pointcloud"""
    buffer = io.StringIO()
    _pcd_write_stream(buffer, pointcloud)
    return buffer.getvalue()

def pcd_write(filename : str, pointcloud : kitti_pointcloud_abstract) -> int:
    """Write a pointcloud to an ASCII .pcd file, replacing any existing file. Returns number of points written.

    If writing fails halfway the partial file is left in place.
    """
    try:
        with open(filename, 'w', newline='\n', encoding='ascii') as fp:
            return _pcd_write_stream(fp, pointcloud)
    except OSError as e:
        raise KittiWriteError(f"Could not open output file '{filename}': {e.strerror or e}") from e

def kitti_convert(source : str, destination : str, strict : bool=False) -> int:
    """Convert a KITTI .bin file to an ASCII .pcd file. Returns number of points converted."""
    pc = kitti_read(source, strict=strict)
    try:
        return pcd_write(destination, pc)
    finally:
        pc.free()
