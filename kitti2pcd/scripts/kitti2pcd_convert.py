"""
Convert KITTI LiDAR binary point clouds to ASCII PCD format. Converts a single file, or every file in a directory.
"""
import sys

from .. import KittiError, KittiNotFoundError, KittiInvalidDestinationError, pcd_write
from ..abstract import kitti_sink_abstract, kitti_source_abstract, kitti_pointcloud_abstract
from ..playback import MODE_FILE, MODE_DIRECTORY, classify_source, prepare_destination, pcd_filename_for, kitti_playback
from ._scriptsupport import *

class PcdFileWriter(kitti_sink_abstract):
    """Writes each pointcloud fed to it as a .pcd file.
    In MODE_FILE the output is the destination itself, in MODE_DIRECTORY it is a file in the destination directory
    named after the input file.
    A file that cannot be read or written is reported and counted, and the writer continues with the next one.
    """

    def __init__(self, destination : str, mode : str, verbose : int=0):
        self.destination = destination
        self.mode = mode
        self.verbose = verbose
        self.count = 0
        self.error_count = 0
        self.written = []

    def output_filename(self, filename : str) -> str:
        if self.mode == MODE_FILE:
            return self.destination
        return pcd_filename_for(filename, self.destination)

    def feed(self, filename : str, pc : kitti_pointcloud_abstract) -> bool:
        print(f"File '{filename}' contains {pc.input_size()} bytes and {pc.count()} points")
        outfilename = self.output_filename(filename)
        try:
            npoints = pcd_write(outfilename, pc)
        except KittiError as e:
            print(f"writer: error: {e}", file=sys.stderr)
            self.error_count += 1
            return False
        finally:
            pc.free()
        print(f"Wrote {npoints} points to '{outfilename}'")
        self.count += 1
        self.written.append(outfilename)
        return True

    def run(self, source : kitti_source_abstract) -> bool:
        """Convert everything source produces, in order. Returns True if all files were converted."""
        while not source.eof():
            try:
                item = source.get()
            except KittiError as e:
                print(f"reader: error: {e}", file=sys.stderr)
                self.error_count += 1
                continue
            if item == None:
                break
            filename, pc = item
            self.feed(filename, pc)
        if self.verbose:
            print(f"writer: stopped")
        return self.error_count == 0

    def statistics(self) -> None:
        print(f"writer: converted={self.count}, failed={self.error_count}")

def main() -> int:
    SetupStackDumper()
    assert __doc__ is not None
    parser = ArgumentParser(description=__doc__.strip())
    parser.add_argument("--strict", action="store_true", help="Fail a file whose size is not a multiple of 16 bytes (default: ignore trailing bytes with a warning)")
    parser.add_argument("input", nargs="?", help="KITTI binary pointcloud file (.bin) or directory of those")
    parser.add_argument("output", nargs="?", help="Output filename (.pcd) for a single input file, output directory for an input directory")
    args = parser.parse_args()
    beginOfRun(args, parser)
    if not args.input or not args.output:
        parser.print_usage(sys.stderr)
        print(f"{parser.prog}: input and output arguments are required", file=sys.stderr)
        return 2
    try:
        mode = classify_source(args.input)
    except KittiError as e:
        print(f"{parser.prog}: {e}", file=sys.stderr)
        return 2
    try:
        if mode == MODE_DIRECTORY:
            prepare_destination(args.output)
            source = kitti_playback(args.input, strict=args.strict)
        else:
            source = kitti_playback([args.input], strict=args.strict)
    except KittiInvalidDestinationError as e:
        print(f"{parser.prog}: {e}", file=sys.stderr)
        return 2
    except (KittiNotFoundError, OSError) as e:
        print(f"{parser.prog}: {e}", file=sys.stderr)
        return 1
    if args.verbose:
        print(f"{parser.prog}: {mode} mode, {args.input} -> {args.output}")
    writer = PcdFileWriter(args.output, mode, verbose=args.verbose)
    ok = writer.run(source)
    source.free()
    if args.verbose:
        writer.statistics()
    endOfRun(args)
    if not ok:
        return 1
    return 0

if __name__ == '__main__':
    sts = main()
    sys.exit(sts)
