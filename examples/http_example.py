"""Fetch a page with ClientRequest, using RequestMap then ResponseMap.
   The (emitter, map) argument order works as well as (map, emitter).
   To run: python examples/http_example.py [url]
"""

import sys

import reactivex.operators as ops

from eventrx import RequestMap, ResponseMap, fromEvents
from eventrx.streams import ClientRequest

url = sys.argv[1] if len(sys.argv) > 1 else "http://example.com/"
req = ClientRequest(url, timeout=10)

fromEvents(req, RequestMap).pipe(
    ops.do_action(lambda res: res.setEncoding("utf8")),
    ops.flat_map(lambda res: fromEvents(res, ResponseMap)),
    ops.reduce(lambda body, data: body + data, ""),
).subscribe(
    print,
    print,
    lambda: print("All done!"),
)

req.end()
