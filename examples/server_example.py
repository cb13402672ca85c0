"""An HTTP server driven by ServerMap: GET says hello, POST echoes the body.
   To run: python examples/server_example.py
   Then: curl localhost:8080 ; curl -d hi localhost:8080
"""

import reactivex.operators as ops

from eventrx import ResponseMap, ServerMap, fromEvents
from eventrx.streams import HttpServer

server = HttpServer()
obs = fromEvents(ServerMap, server)


def parser(req):
    """The whole request body as one string"""
    req.setEncoding("utf-8")
    return fromEvents(ResponseMap, req).pipe(ops.reduce(lambda body, data: body + data, ""))


def onNext(ctx):
    print("Got a request", ctx["request"].method)


def onError(e):
    print("Uh oh!", e)


def onComplete():
    print("Server is closed")


post = obs.pipe(
    ops.filter(lambda ctx: ctx["request"].method == "POST"),
    ops.flat_map(lambda ctx: parser(ctx["request"]).pipe(ops.map(lambda body: dict(ctx, body=body)))),
    ops.do_action(lambda ctx: ctx["response"].end(ctx["body"] if ctx["body"] else "No Data!")),
)

get = obs.pipe(
    ops.filter(lambda ctx: ctx["request"].method == "GET"),
    ops.do_action(lambda ctx: ctx["response"].end("Hello World")),
)

post.subscribe(onNext, onError, onComplete)
get.subscribe(onNext, onError, onComplete)

server.listen(8080, "localhost")
try:
    server.serveForever()
except KeyboardInterrupt:
    server.close()
