import sys
from .scripts import kitti2pcd_convert

def main():
    sys.exit(kitti2pcd_convert.main())
    
if __name__ == '__main__':
    main()
