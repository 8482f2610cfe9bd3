import os
import warnings
from typing import List, Optional, Tuple
from .util import KittiError, KittiNotFoundError, KittiInvalidDestinationError, kitti_pointcloud, kitti_read
from .abstract import kitti_source_abstract

__all__ = [
    'MODE_FILE',
    'MODE_DIRECTORY',
    'classify_source',
    'prepare_destination',
    'pcd_filename_for',
    'kitti_playback',
]

MODE_FILE = 'file'
MODE_DIRECTORY = 'directory'

def classify_source(path : str) -> str:
    """Return MODE_FILE if path is a regular file, MODE_DIRECTORY if it is a directory"""
    if not os.path.exists(path):
        raise KittiNotFoundError(f"Source '{path}' does not exist")
    if os.path.isfile(path):
        return MODE_FILE
    if os.path.isdir(path):
        return MODE_DIRECTORY
    raise KittiError(f"Source '{path}' is neither a file nor a directory")

def prepare_destination(path : str) -> None:
    """Ensure path is a directory, creating it (and its parents) if needed"""
    if os.path.exists(path) and not os.path.isdir(path):
        raise KittiInvalidDestinationError(f"Destination '{path}' is a file, but a directory is required")
    os.makedirs(path, exist_ok=True)

def pcd_filename_for(source : str, destdir : str) -> str:
    """Return the .pcd pathname in destdir for KITTI file source (same name, extension replaced)"""
    stem = os.path.splitext(os.path.basename(source))[0]
    return os.path.join(destdir, stem + '.pcd')

class _Filesource(kitti_source_abstract):
    def __init__(self, filenames : List[str], strict : bool=False):
        self.filenames = list(filenames)
        self.strict = strict

    def free(self) -> None:
        self.filenames = []

    def eof(self) -> bool:
        return not self.filenames

    def available(self, wait : bool=False) -> bool:
        return not not self.filenames

    def get(self) -> Optional[Tuple[str, kitti_pointcloud]]:
        """Return next (filename, pointcloud). The filename is consumed even if reading it raises KittiError."""
        if not self.filenames:
            return None
        fn = self.filenames.pop(0)
        return fn, kitti_read(fn, strict=self.strict)

    def remaining(self) -> List[str]:
        return list(self.filenames)

def kitti_playback(dir_or_files : str | List[str], strict : bool=False) -> _Filesource:
    """Return kitti_source-like object that reads KITTI files from a directory (in name order) or a list of filenames"""
    if isinstance(dir_or_files, str):
        dirname = dir_or_files
        try:
            entries = sorted(os.listdir(dirname))
        except OSError as e:
            raise KittiNotFoundError(f"Cannot list directory '{dirname}': {e.strerror or e}") from e
        filenames = []
        for entry in entries:
            path = os.path.join(dirname, entry)
            if not os.path.isfile(path):
                warnings.warn(f"'{path}': not a regular file, skipped")
                continue
            filenames.append(path)
        dir_or_files = filenames
    return _Filesource(dir_or_files, strict=strict)
