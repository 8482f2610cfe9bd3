import os
from setuptools import setup

def get_version():
    KITTI2PCD_VERSION="1.0+unknown"
    if 'KITTI2PCD_VERSION' in os.environ:
        KITTI2PCD_VERSION=os.environ['KITTI2PCD_VERSION']
    return KITTI2PCD_VERSION

setup(
    version=get_version(),
)
