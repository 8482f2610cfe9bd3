import sys
import kitti2pcd

def main():
    if len(sys.argv) != 2:
        print(f"Usage: {sys.argv[0]} file.bin", file=sys.stderr)
        print("Read a KITTI pointcloud from a file and show it in a window (needs open3d)", file=sys.stderr)
       
        sys.exit(2)
    
    filename = sys.argv[1]
    pc = kitti2pcd.kitti_read(filename)
    print(f"{filename}: {pc.count()} points")
    o3d_pc = pc.get_o3d_pointcloud()
    pc.free()

    import open3d.visualization
    open3d.visualization.draw_geometries([o3d_pc], window_name=filename)

if __name__ == '__main__':
    main()
