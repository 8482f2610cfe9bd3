import sys
import numpy
import kitti2pcd

def main():
    if len(sys.argv) != 4:
        print(f"Usage: {sys.argv[0]} count npoints directory", file=sys.stderr)
        print("Creates COUNT random KITTI pointclouds of NPOINTS points and stores the .bin files in the given directory")
        sys.exit(2)
    count = int(sys.argv[1])
    npoints = int(sys.argv[2])
    directory = sys.argv[3]

    rng = numpy.random.default_rng()
    for i in range(count):
        matrix = rng.uniform(-50, 50, size=(npoints, 4)).astype(numpy.float32)
        matrix[:, 3] = rng.uniform(0, 1, size=npoints)
        pc = kitti2pcd.kitti_from_numpy_matrix(matrix)
        kitti2pcd.kitti_write(f"{directory}/{i:06d}.bin", pc)
        pc.free()

if __name__ == '__main__':
    main()
