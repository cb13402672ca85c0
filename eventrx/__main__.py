""" Main eventrx command line
"""

import argparse
import logging
import sys
from typing import Any, List, Optional

import reactivex.operators as ops
from tabulate import tabulate

from eventrx import er_config
from eventrx.event_map import STANDARD_MAPS, ReadableStreamMap, RequestMap, ResponseMap, ServerMap
from eventrx.from_events import fromEvents
from eventrx.streams import ClientRequest, HttpServer, ReadStream
from eventrx.util import mapRow, our_exit, stripnl
from eventrx.version import get_active_version


def showMaps() -> str:
    """Print the standard event maps as a table, and return the table"""
    rows = [mapRow(m) for m in STANDARD_MAPS.values()]
    table = tabulate(rows, headers=["Map", "Items", "Errors", "Completes", "Projector"])
    print(table)
    return table


def _collect(observable) -> List[Any]:
    """Subscribe to observable, remembering what it delivered.

    Returns a list that fills in as the observable runs: ("next", value),
    ("error", error) or ("complete", None) tuples.
    """
    seen: List[Any] = []
    observable.subscribe(
        lambda v: seen.append(("next", v)),
        lambda e: seen.append(("error", e)),
        lambda: seen.append(("complete", None)),
    )
    return seen


def _report(seen: List[Any]) -> None:
    for kind, value in seen:
        if kind == "next":
            print(value, end="" if str(value).endswith("\n") else "\n")
        elif kind == "error":
            our_exit(f"Error: {stripnl(value)}", 1)


def catFile(path: str, encoding: str = "utf-8") -> None:
    """Read a file through ReadableStreamMap and print its contents"""
    stream = ReadStream(path, encoding=encoding)
    seen = _collect(fromEvents(ReadableStreamMap, stream).pipe(ops.reduce(lambda acc, chunk: acc + chunk, "")))
    stream.read()
    _report(seen)


def getUrl(url: str, timeout: Optional[float] = None) -> None:
    """Fetch url through RequestMap and ResponseMap and print the body"""
    req = ClientRequest(url, timeout=timeout)
    body = fromEvents(RequestMap, req).pipe(
        ops.do_action(lambda res: res.setEncoding("utf-8")),
        ops.flat_map(lambda res: fromEvents(ResponseMap, res)),
        ops.reduce(lambda acc, data: acc + data, ""),
    )
    seen = _collect(body)
    req.end()
    _report(seen)


def _readBody(request):
    """Observable of the whole body of request, as text"""
    request.setEncoding("utf-8")
    return fromEvents(ResponseMap, request).pipe(ops.reduce(lambda acc, data: acc + data, ""))


def serve(host: str = "localhost", port: int = 8080) -> HttpServer:
    """Run an echo server: POST bodies are sent back, GET says hello"""
    server = HttpServer()
    contexts = fromEvents(ServerMap, server)

    def onError(e):
        logging.error(f"Server error: {e}")

    def onClose():
        logging.info("Server is closed")

    def posted(ctx):
        return _readBody(ctx["request"]).pipe(ops.map(lambda body: dict(ctx, body=body)))

    contexts.pipe(
        ops.filter(lambda ctx: ctx["request"].method == "POST"),
        ops.flat_map(posted),
        ops.do_action(lambda ctx: ctx["response"].end(ctx["body"] or "No Data!")),
    ).subscribe(lambda ctx: logging.info(f"Got a request POST {ctx['request'].url}"), onError, onClose)

    contexts.pipe(
        ops.filter(lambda ctx: ctx["request"].method == "GET"),
        ops.do_action(lambda ctx: ctx["response"].end("Hello World")),
    ).subscribe(lambda ctx: logging.info(f"Got a request GET {ctx['request'].url}"), onError, onClose)

    server.listen(port, host)
    if not server.address:
        our_exit(f"Error: could not listen on {host}:{port}", 1)
    logging.info(f"Listening on http://{server.address[0]}:{server.address[1]}/")
    try:
        server.serveForever()
    except KeyboardInterrupt:
        logging.info("Exiting due to keyboard interrupt")
    finally:
        server.close()
    return server


def common() -> None:
    """Shared code for all of our command line wrappers."""
    args = er_config.args
    parser = er_config.parser
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(levelname)s file:%(filename)s %(funcName)s line:%(lineno)s %(message)s",
    )

    if not args.command:
        parser.print_help(sys.stderr)
        our_exit("", 1)
    elif args.command == "maps":
        showMaps()
    elif args.command == "cat":
        catFile(args.path, encoding=args.encoding)
    elif args.command == "get":
        getUrl(args.url, timeout=args.timeout)
    elif args.command == "serve":
        serve(args.host, args.port)


def initParser(argv: Optional[List[str]] = None) -> None:
    """Initialize the command line argument parsing."""
    parser = er_config.parser

    helpGroup = parser.add_argument_group("Help")
    helpGroup.add_argument("-h", "--help", action="help", help="show this help message and exit")
    helpGroup.add_argument("--version", action="version", version=f"{get_active_version()}")

    parser.add_argument("--debug", help="Show debug log messages", action="store_true")

    subparsers = parser.add_subparsers(dest="command", title="Commands")
    subparsers.add_parser("maps", help="List the standard event maps")

    catParser = subparsers.add_parser("cat", help="Print a file, read through ReadableStreamMap")
    catParser.add_argument("path", help="The file to read")
    catParser.add_argument("--encoding", help="Text encoding of the file (default: utf-8)", default="utf-8")

    getParser = subparsers.add_parser("get", help="Print the body of a URL, fetched through RequestMap/ResponseMap")
    getParser.add_argument("url", help="The URL to fetch (http or https)")
    getParser.add_argument("--timeout", help="Seconds to wait for the server", type=float, default=None)

    serveParser = subparsers.add_parser("serve", help="Run an echo HTTP server driven by ServerMap")
    serveParser.add_argument("--host", help="Address to listen on (default: localhost)", default="localhost")
    serveParser.add_argument("--port", help="Port to listen on (default: 8080)", type=int, default=8080)

    args = parser.parse_args(argv)
    er_config.args = args
    er_config.parser = parser


def main(argv: Optional[List[str]] = None) -> None:
    """Perform command line eventrx operations"""
    parser = argparse.ArgumentParser(
        prog="eventrx",
        add_help=False,
        description="Observables from event emitters",
    )
    er_config.parser = parser
    initParser(argv)
    common()


if __name__ == "__main__":
    main()
