import sys
import os
import signal
import argparse
import traceback

from .. import kitti_get_version

__all__ = [
    "SetupStackDumper",
    "ArgumentParser",
    "beginOfRun",
    "endOfRun"
]

def _dump_app_stacks(*args) -> None:
    """Print stack traces for all threads."""
    print(f"{sys.argv[0]}: QUIT received, dumping all stacks, {len(sys._current_frames())} threads:", file=sys.stderr)
    for threadId, stack in list(sys._current_frames().items()):
        print("\nThreadID:", threadId, file=sys.stderr)
        traceback.print_stack(stack, file=sys.stderr)
        print(file=sys.stderr)


def SetupStackDumper() -> None:
    """Install signal handler so `kill --QUIT` will dump all thread stacks, for debugging."""
    if hasattr(signal, 'SIGQUIT'):
        signal.signal(signal.SIGQUIT, _dump_app_stacks)

def ArgumentParser(*args, **kwargs) -> argparse.ArgumentParser:
    """Return an argparse parser with the options common to all kitti2pcd scripts.
    -h/--help is an ordinary flag here: beginOfRun() prints the help text and exits with status 1.
    """
    kwargs['add_help'] = False
    parser = argparse.ArgumentParser(*args, **kwargs)
    parser.add_argument("-h", "--help", action="store_true", help="Show this help message and exit")
    parser.add_argument("--version", action="store_true", help="Print version and exit")
    parser.add_argument("--verbose", action="count", default=0, help="Print information about each file while it is processed. Double for even more verbosity.")
    parser.add_argument("--pausefordebug", action="store_true", help="Pause at begin and end of run (to allow attaching debugger or profiler)")
    return parser

def beginOfRun(args : argparse.Namespace, parser : argparse.ArgumentParser) -> None:
    """Handle --help and --version, optionally pause execution"""
    if args.help:
        parser.print_help()
        sys.exit(1)
    if args.version:
        print(kitti_get_version())
        sys.exit(0)
    if args.pausefordebug:
        answer=None
        while answer != 'Y':
            print(f"{sys.argv[0]}: starting, pid={os.getpid()}. Press Y to continue -", flush=True)
            answer = sys.stdin.readline()
            answer = answer.strip()
        print(f"{sys.argv[0]}: started.")

def endOfRun(args : argparse.Namespace) -> None:
    """Optionally pause execution"""
    if args.pausefordebug:
        answer=None
        while answer != 'Y':
            print(f"{sys.argv[0]}: stopping, pid={os.getpid()}. Press Y to continue -", flush=True)
            answer = sys.stdin.readline()
            answer = answer.strip()
        print(f"{sys.argv[0]}: stopped.")
