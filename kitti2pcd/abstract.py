from abc import ABC, abstractmethod
from typing import Optional, Tuple

class kitti_pointcloud_abstract(ABC):
    
    @abstractmethod
    def free(self) -> None:
        """Release the point data held by this pointcloud"""
        ...
        
    @abstractmethod
    def count(self) -> int:
        """Get the number of points in the pointcloud"""
        ...

    @abstractmethod
    def input_size(self) -> int:
        """Number of bytes this pointcloud was decoded from"""
        ...

    @abstractmethod
    def get_bytes(self) -> bytes:
        """Get the pointcloud data in KITTI binary layout (16 bytes per point)"""
        ...
        
    
class kitti_source_abstract(ABC):
    @abstractmethod
    def free(self) -> None:
        """Forget about any pointclouds not yet returned"""
        ...
        
    @abstractmethod
    def eof(self) -> bool:
        """Return True if no more pointclouds will be forthcoming"""
        ...
        
    @abstractmethod
    def available(self, wait : bool) -> bool:
        """Return True if a pointcloud is currently available. The wait parameter signals the source may wait a while."""
        ...

    @abstractmethod
    def get(self) -> Optional[Tuple[str, kitti_pointcloud_abstract]]:
        """Get the next (filename, pointcloud) pair from this source. Returns None if no more pointclouds are forthcoming"""
        ...

class kitti_sink_abstract(ABC):

    @abstractmethod
    def feed(self, filename : str, pc : kitti_pointcloud_abstract) -> bool:
        """Consume the pointcloud that was read from filename. Returns False if it could not be consumed."""
        ...
