from .util import *
from .pcd import *
