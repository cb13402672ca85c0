"""Event emitting wrappers for files, HTTP clients and HTTP servers.

These follow the event vocabularies of the standard event maps:

- ReadStream: ReadableStreamMap
- ClientRequest: RequestMap, yielding IncomingMessage objects
- IncomingMessage: ResponseMap
- HttpServer: ServerMap, yielding (IncomingMessage, ServerResponse) pairs

Everything runs synchronously on the caller's thread.
"""

import codecs
import logging
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Dict, List, Optional, Tuple, Union

import requests

from eventrx.emitter import EventEmitter

DEFAULT_CHUNK_SIZE = 64 * 1024


class ReadStream(EventEmitter):
    """Read a file in chunks, emitting data, end and close.

    Any OSError, or a decoding error in text mode, is emitted on "error",
    followed by "close".
    """

    def __init__(self, path_or_file, encoding: Optional[str] = None, chunkSize: int = DEFAULT_CHUNK_SIZE) -> None:
        super().__init__()
        self.path_or_file = path_or_file
        self.encoding = encoding
        self.chunkSize = chunkSize
        self.bytesRead = 0
        self.destroyed = False

    def _open(self):
        if isinstance(self.path_or_file, (str, bytes)) or hasattr(self.path_or_file, "__fspath__"):
            if self.encoding:
                return open(self.path_or_file, "r", encoding=self.encoding)  # pylint: disable=consider-using-with
            return open(self.path_or_file, "rb")  # pylint: disable=consider-using-with
        return self.path_or_file

    def read(self) -> None:
        """Read the whole file, emitting a data event per chunk"""
        if self.destroyed:
            return
        f = None
        try:
            f = self._open()
            while not self.destroyed:
                chunk = f.read(self.chunkSize)
                if not chunk:
                    break
                self.bytesRead += len(chunk)
                self.emit("data", chunk)
            if not self.destroyed:
                logging.debug(f"ReadStream read {self.bytesRead} bytes")
                self.emit("end")
        except (OSError, UnicodeError) as ex:
            logging.debug(f"ReadStream failed: {ex}")
            self.emit("error", ex)
        finally:
            # we only close files we opened ourselves
            if f is not None and f is not self.path_or_file:
                f.close()
            self.destroyed = True
            self.emit("close")

    def destroy(self) -> None:
        """Stop reading after the current chunk"""
        self.destroyed = True


class IncomingMessage(EventEmitter):
    """An HTTP message being received: a client's response or a server's request.

    Properties:

    statusCode (client side only)
    method, url
    headers
    """

    def __init__(self, body, headers=None, statusCode: Optional[int] = None, method: Optional[str] = None,
                 url: Optional[str] = None, chunkSize: int = DEFAULT_CHUNK_SIZE) -> None:
        super().__init__()
        self._body = body
        self.headers: Dict[str, str] = dict(headers or {})
        self.statusCode = statusCode
        self.method = method
        self.url = url
        self.chunkSize = chunkSize
        self.encoding: Optional[str] = None
        self.complete = False

    def setEncoding(self, encoding: str) -> "IncomingMessage":
        """Emit data chunks decoded with encoding instead of as bytes"""
        self.encoding = encoding
        return self

    def _chunks(self):
        if isinstance(self._body, requests.Response):
            yield from self._body.iter_content(chunk_size=self.chunkSize)
        elif isinstance(self._body, (bytes, bytearray)):
            for i in range(0, len(self._body), self.chunkSize):
                yield bytes(self._body[i:i + self.chunkSize])
        else:
            while True:
                chunk = self._body.read(self.chunkSize)
                if not chunk:
                    break
                yield chunk

    def resume(self) -> None:
        """Emit the body as data events, then end and close"""
        if self.complete:
            return
        # an incremental decoder holds back multi-byte sequences split across chunks
        decoder = codecs.getincrementaldecoder(self.encoding)("replace") if self.encoding else None
        try:
            for chunk in self._chunks():
                data = decoder.decode(chunk) if decoder else chunk
                if data:
                    self.emit("data", data)
            if decoder:
                tail = decoder.decode(b"", final=True)
                if tail:
                    self.emit("data", tail)
            self.complete = True
            self.emit("end")
        except (requests.RequestException, OSError) as ex:
            logging.debug(f"IncomingMessage failed: {ex}")
            self.emit("error", ex)
        finally:
            if isinstance(self._body, requests.Response):
                self._body.close()
            self.emit("close")


class ClientRequest(EventEmitter):
    """An outgoing HTTP request made with requests.

    Nothing is sent until end() is called.  The response is emitted on
    "response" as an IncomingMessage whose body is then read, after which the
    request emits "close".
    """

    def __init__(self, url: str, method: str = "GET", headers=None, timeout: Optional[float] = None,
                 session: Optional[requests.Session] = None) -> None:
        super().__init__()
        self.url = url
        self.method = method.upper()
        self.headers: Dict[str, str] = dict(headers or {})
        self.timeout = timeout
        self.session = session or requests.Session()
        self._body: List[bytes] = []
        self.finished = False
        self.aborted = False

    def setHeader(self, name: str, value: str) -> None:
        """Set a request header"""
        self.headers[name] = value

    def write(self, data: Union[str, bytes]) -> None:
        """Add data to the request body"""
        self._body.append(data.encode("utf-8") if isinstance(data, str) else data)

    def end(self, data: Union[str, bytes, None] = None) -> None:
        """Send the request and read the response"""
        if self.finished or self.aborted:
            return
        if data:
            self.write(data)
        self.finished = True
        body = b"".join(self._body) or None
        logging.debug(f"{self.method} {self.url}")
        try:
            resp = self.session.request(self.method, self.url, headers=self.headers, data=body,
                                        timeout=self.timeout, stream=True)
        except requests.RequestException as ex:
            logging.debug(f"request failed: {ex}")
            self.emit("error", ex)
            self.emit("close")
            return
        message = IncomingMessage(resp, headers=resp.headers, statusCode=resp.status_code,
                                  method=self.method, url=resp.url)
        self.emit("response", message)
        message.resume()
        self.emit("close")

    def abort(self) -> None:
        """Abandon the request before it is sent"""
        if self.aborted or self.finished:
            return
        self.aborted = True
        self.emit("abort")
        self.emit("close")


class ServerResponse(EventEmitter):
    """The response half of a request handled by HttpServer.

    Headers and body are buffered until end(), which sends everything and
    emits "finish".
    """

    def __init__(self, handler: BaseHTTPRequestHandler) -> None:
        super().__init__()
        self._handler = handler
        self.statusCode = 200
        self.headers: Dict[str, str] = {}
        self._body: List[bytes] = []
        self.finished = False

    def setHeader(self, name: str, value: str) -> None:
        """Set a response header"""
        self.headers[name] = value

    def writeHead(self, statusCode: int, headers=None) -> "ServerResponse":
        """Set the status code and, optionally, some headers"""
        self.statusCode = statusCode
        self.headers.update(headers or {})
        return self

    def write(self, data: Union[str, bytes]) -> None:
        """Add data to the response body"""
        self._body.append(data.encode("utf-8") if isinstance(data, str) else data)

    def end(self, data: Union[str, bytes, None] = None) -> None:
        """Send the response; later calls do nothing"""
        if self.finished:
            return
        if data:
            self.write(data)
        self.finished = True
        body = b"".join(self._body)
        h = self._handler
        h.send_response(self.statusCode)
        for name, value in self.headers.items():
            h.send_header(name, value)
        if "content-length" not in (name.lower() for name in self.headers):
            h.send_header("Content-Length", str(len(body)))
        h.end_headers()
        if body and h.command != "HEAD":
            h.wfile.write(body)
        self.emit("finish")


class _Server(HTTPServer):
    """HTTPServer that logs handler failures instead of printing them"""

    def handle_error(self, request, client_address):
        logging.exception(f"Error while handling request from {client_address}")


class HttpServer(EventEmitter):
    """A single threaded HTTP server emitting "request" for every request.

    Listeners get (IncomingMessage, ServerResponse).  The request body is
    emitted on the IncomingMessage right after the "request" event, and a
    response that no listener ended is ended with an empty body.
    """

    POLL_INTERVAL = 0.5

    def __init__(self) -> None:
        super().__init__()
        self._httpd: Optional[_Server] = None
        self.closed = False

    def listen(self, port: int = 0, host: str = "localhost") -> "HttpServer":
        """Bind to host:port (0 picks a free port) and emit "listening"

        A failure to bind is emitted on "error".
        """
        try:
            self._httpd = _Server((host, port), _handlerClass(self))
        except OSError as ex:
            logging.debug(f"listen on {host}:{port} failed: {ex}")
            self.emit("error", ex)
            return self
        self._httpd.timeout = self.POLL_INTERVAL
        self.closed = False
        logging.debug(f"listening on {self.address}")
        self.emit("listening")
        return self

    @property
    def address(self) -> Optional[Tuple[str, int]]:
        """The (host, port) we are bound to"""
        if self._httpd is None:
            return None
        return self._httpd.server_address[:2]

    def handleRequest(self) -> None:
        """Wait for (at most POLL_INTERVAL) and handle a single request"""
        if self._httpd is not None and not self.closed:
            self._httpd.handle_request()

    def serveForever(self) -> None:
        """Handle requests until close() is called"""
        while self._httpd is not None and not self.closed:
            self._httpd.handle_request()

    def close(self) -> None:
        """Stop accepting connections and emit "close" """
        if self.closed or self._httpd is None:
            return
        self.closed = True
        self._httpd.server_close()
        logging.debug("server closed")
        self.emit("close")

    def _onRequest(self, request: IncomingMessage, response: ServerResponse) -> None:
        logging.debug(f"request {request.method} {request.url}")
        self.emit("request", request, response)
        request.resume()
        if not response.finished:
            response.end()


def _handlerClass(server: HttpServer):
    """Make a request handler class bound to server"""

    class Handler(BaseHTTPRequestHandler):
        """Turns each request into a "request" event on server"""

        def _dispatch(self):
            length = int(self.headers.get("Content-Length") or 0)
            body = self.rfile.read(length) if length else b""
            request = IncomingMessage(body, headers=self.headers.items(), method=self.command, url=self.path)
            server._onRequest(request, ServerResponse(self))  # pylint: disable=protected-access

        do_GET = do_POST = do_PUT = do_PATCH = do_DELETE = do_HEAD = do_OPTIONS = _dispatch

        def log_message(self, format, *args):  # pylint: disable=redefined-builtin
            logging.debug(f"{self.address_string()} {format % args}")

    return Handler
