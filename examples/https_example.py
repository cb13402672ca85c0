"""Fetch a page over https with ClientRequest, using RequestMap then ResponseMap.
   To run: python examples/https_example.py [url]
"""

import sys

import reactivex.operators as ops

from eventrx import RequestMap, ResponseMap, fromEvents
from eventrx.streams import ClientRequest

url = sys.argv[1] if len(sys.argv) > 1 else "https://example.com/"
req = ClientRequest(url, timeout=10)

fromEvents(RequestMap, req).pipe(
    ops.do_action(lambda res: res.setEncoding("utf8")),
    ops.flat_map(lambda res: fromEvents(ResponseMap, res)),
    ops.reduce(lambda body, data: body + data, ""),
).subscribe(
    print,
    print,
    lambda: print("All done!"),
)

req.end()
