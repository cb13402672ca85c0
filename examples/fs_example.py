"""Read a file through ReadableStreamMap and print it.
   To run: python examples/fs_example.py [path]
"""

import sys

import reactivex.operators as ops

from eventrx import ReadableStreamMap, fromEvents
from eventrx.streams import ReadStream

path = sys.argv[1] if len(sys.argv) > 1 else __file__
stream = ReadStream(path, encoding="utf-8")

fromEvents(ReadableStreamMap, stream).pipe(
    ops.reduce(lambda acc, curr: acc + curr)
).subscribe(
    print,
    lambda e: print("Uh oh!", e),
    lambda: print("All Done!"),
)

stream.read()
