"""eventrx unit tests for streams.py"""

import io
import threading
from unittest.mock import MagicMock

import pytest
import reactivex.operators as ops
import requests

from eventrx.event_map import ReadableStreamMap, RequestMap, ResponseMap, ServerMap
from eventrx.from_events import fromEvents
from eventrx.streams import ClientRequest, HttpServer, IncomingMessage, ReadStream, ServerResponse


def _fakeSession(chunks, status=200):
    """A requests session whose request() returns a streaming response"""
    resp = MagicMock(spec=requests.Response)
    resp.iter_content.return_value = chunks
    resp.status_code = status
    resp.headers = {"Content-Type": "text/plain"}
    resp.url = "http://example.com/"
    session = MagicMock()
    session.request.return_value = resp
    return session, resp


@pytest.mark.unitslow
def test_ReadStream_text(tmp_path, recorder):
    """A text file arrives chunk by chunk, then completes"""
    path = tmp_path / "example.txt"
    path.write_text("hello world", encoding="utf-8")
    stream = ReadStream(path, encoding="utf-8", chunkSize=4)
    recorder.subscribeTo(fromEvents(ReadableStreamMap, stream))
    stream.read()
    assert recorder.items == ["hell", "o wo", "rld"]
    assert recorder.events[-1] == ("complete", None)
    assert stream.bytesRead == 11


@pytest.mark.unitslow
def test_ReadStream_reduce(tmp_path):
    """The usual way to read a whole file"""
    path = tmp_path / "example.bin"
    path.write_bytes(b"\x00\x01\x02\x03\x04")
    stream = ReadStream(str(path), chunkSize=2)
    result = []
    fromEvents(ReadableStreamMap, stream).pipe(ops.reduce(lambda acc, chunk: acc + chunk, b"")).subscribe(
        result.append
    )
    stream.read()
    assert result == [b"\x00\x01\x02\x03\x04"]


@pytest.mark.unit
def test_ReadStream_missing_file(tmp_path, recorder):
    """Opening failures are emitted on error, and close still follows"""
    stream = ReadStream(tmp_path / "nope.txt")
    onClose = MagicMock()
    stream.on("close", onClose)
    recorder.subscribeTo(fromEvents(ReadableStreamMap, stream))
    stream.read()
    assert len(recorder.events) == 1
    kind, error = recorder.events[0]
    assert kind == "error"
    assert isinstance(error, FileNotFoundError)
    onClose.assert_called_once_with()


@pytest.mark.unit
def test_ReadStream_invalid_text(tmp_path, recorder):
    """Bytes that don't decode are an error, not the end of the file"""
    path = tmp_path / "binary.dat"
    path.write_bytes(b"ok\xff\xfe")
    stream = ReadStream(path, encoding="utf-8")
    onClose = MagicMock()
    stream.on("close", onClose)
    recorder.subscribeTo(fromEvents(ReadableStreamMap, stream))
    stream.read()
    assert len(recorder.events) == 1
    kind, error = recorder.events[0]
    assert kind == "error"
    assert isinstance(error, UnicodeDecodeError)
    onClose.assert_called_once_with()


@pytest.mark.unit
def test_ReadStream_file_object_left_open(recorder):
    """File objects we were given are not closed for the caller"""
    f = io.BytesIO(b"abc")
    stream = ReadStream(f, chunkSize=2)
    recorder.subscribeTo(fromEvents(ReadableStreamMap, stream))
    stream.read()
    assert recorder.items == [b"ab", b"c"]
    assert not f.closed


@pytest.mark.unit
def test_ReadStream_destroy():
    """destroy() stops reading without an end event"""
    stream = ReadStream(io.BytesIO(b"abcdef"), chunkSize=2)
    seen = []
    stream.on("data", lambda chunk: (seen.append(chunk), stream.destroy()))
    onEnd, onClose = MagicMock(), MagicMock()
    stream.on("end", onEnd)
    stream.on("close", onClose)
    stream.read()
    assert seen == [b"ab"]
    onEnd.assert_not_called()
    onClose.assert_called_once_with()


@pytest.mark.unit
def test_IncomingMessage_decodes_split_characters():
    """Multi-byte characters split across chunks are decoded whole"""
    msg = IncomingMessage("héllo wörld".encode("utf-8"), chunkSize=2).setEncoding("utf-8")
    result = []
    fromEvents(ResponseMap, msg).pipe(ops.reduce(lambda acc, data: acc + data, "")).subscribe(result.append)
    msg.resume()
    assert result == ["héllo wörld"]
    assert msg.complete


@pytest.mark.unit
def test_IncomingMessage_empty_body(recorder):
    """An empty body is just end"""
    msg = IncomingMessage(b"")
    recorder.subscribeTo(fromEvents(ResponseMap, msg))
    msg.resume()
    assert recorder.events == [("complete", None)]


@pytest.mark.unit
def test_ServerResponse_content_length_any_case():
    """A Content-Length set by the caller is not sent a second time"""
    handler = MagicMock()
    handler.command = "GET"
    res = ServerResponse(handler)
    res.setHeader("content-length", "5")
    res.end("hello")
    lengths = [c.args for c in handler.send_header.call_args_list if c.args[0].lower() == "content-length"]
    assert lengths == [("content-length", "5")]
    handler.wfile.write.assert_called_once_with(b"hello")


@pytest.mark.unit
def test_ServerResponse_adds_content_length():
    """Without one, Content-Length is worked out from the body"""
    handler = MagicMock()
    handler.command = "GET"
    res = ServerResponse(handler)
    res.writeHead(404, {"X-Test": "yes"})
    res.end(b"gone")
    handler.send_response.assert_called_once_with(404)
    handler.send_header.assert_any_call("Content-Length", "4")
    assert handler.send_header.call_count == 2
    handler.end_headers.assert_called_once_with()


@pytest.mark.unit
def test_ClientRequest_response_body():
    """request -> response -> body, the way an HTTP client is used"""
    session, resp = _fakeSession([b"hel", b"lo"])
    req = ClientRequest("http://example.com/", session=session)
    statuses, bodies, done = [], [], []
    fromEvents(RequestMap, req).pipe(
        ops.do_action(lambda res: statuses.append(res.statusCode)),
        ops.do_action(lambda res: res.setEncoding("utf-8")),
        ops.flat_map(lambda res: fromEvents(ResponseMap, res)),
        ops.reduce(lambda acc, data: acc + data, ""),
    ).subscribe(bodies.append, on_completed=lambda: done.append(True))
    req.end()
    assert statuses == [200]
    assert bodies == ["hello"]
    assert done == [True]
    session.request.assert_called_once_with(
        "GET", "http://example.com/", headers={}, data=None, timeout=None, stream=True
    )
    resp.close.assert_called_once_with()


@pytest.mark.unit
def test_ClientRequest_body_and_headers():
    """write() and end(data) make up the request body"""
    session, _ = _fakeSession([])
    req = ClientRequest("http://example.com/", method="post", session=session, timeout=3)
    req.setHeader("Content-Type", "text/plain")
    req.write("ping ")
    req.end(b"pong")
    req.end()
    session.request.assert_called_once_with(
        "POST", "http://example.com/", headers={"Content-Type": "text/plain"}, data=b"ping pong",
        timeout=3, stream=True
    )


@pytest.mark.unit
def test_ClientRequest_transport_error(recorder):
    """requests exceptions are emitted on error"""
    session = MagicMock()
    failure = requests.ConnectionError("refused")
    session.request.side_effect = failure
    req = ClientRequest("http://localhost:1/", session=session)
    recorder.subscribeTo(fromEvents(RequestMap, req))
    req.end()
    assert recorder.events == [("error", failure)]


@pytest.mark.unit
def test_ClientRequest_abort(recorder):
    """abort() completes a RequestMap observable and nothing is sent"""
    session = MagicMock()
    req = ClientRequest("http://example.com/", session=session)
    recorder.subscribeTo(fromEvents(RequestMap, req))
    req.abort()
    req.end()
    assert recorder.events == [("complete", None)]
    session.request.assert_not_called()


def _client(session, method, url, data, results):
    try:
        results.append(session.request(method, url, data=data, timeout=5))
    except requests.RequestException as ex:
        results.append(ex)


def _roundTrip(server, method, data=None):
    """Make one request against server from a thread, handling it here"""
    session = requests.Session()
    session.trust_env = False  # no proxies for loopback
    host, port = server.address
    results = []
    t = threading.Thread(target=_client, args=(session, method, f"http://{host}:{port}/path", data, results))
    t.start()
    for _ in range(40):
        if not t.is_alive():
            break
        server.handleRequest()
    t.join(5)
    assert len(results) == 1
    return results[0]


@pytest.mark.unitslow
def test_HttpServer_request_response(recorder):
    """Requests arrive as {"request", "response"} items, close completes"""
    server = HttpServer().listen(0, "127.0.0.1")
    bodies = []

    def handle(ctx):
        ctx["request"].setEncoding("utf-8")
        fromEvents(ResponseMap, ctx["request"]).pipe(ops.reduce(lambda acc, d: acc + d, "")).subscribe(
            bodies.append
        )
        ctx["response"].writeHead(201, {"X-Test": "yes"})

    contexts = fromEvents(ServerMap, server)
    contexts.subscribe(handle)
    recorder.subscribeTo(contexts)
    try:
        resp = _roundTrip(server, "POST", data=b"ping")
    finally:
        server.close()
    assert resp.status_code == 201
    assert resp.headers["X-Test"] == "yes"
    assert bodies == ["ping"]
    ctx = recorder.items[0]
    assert ctx["request"].method == "POST"
    assert ctx["request"].url == "/path"
    assert ctx["response"].finished
    assert recorder.events[-1] == ("complete", None)
    assert server.listenerCount("request") == 0


@pytest.mark.unitslow
def test_HttpServer_ends_unanswered_requests():
    """A response nobody ended goes out empty"""
    server = HttpServer().listen(0, "127.0.0.1")
    fromEvents(ServerMap, server).subscribe(lambda ctx: None)
    try:
        resp = _roundTrip(server, "GET")
    finally:
        server.close()
    assert resp.status_code == 200
    assert resp.content == b""


@pytest.mark.unit
def test_HttpServer_listen_failure(recorder):
    """A port that can't be bound is emitted on error"""
    first = HttpServer().listen(0, "127.0.0.1")
    try:
        host, port = first.address
        second = HttpServer()
        recorder.subscribeTo(fromEvents(ServerMap, second))
        second.listen(port, host)
        assert second.address is None
        kind, error = recorder.events[0]
        assert kind == "error"
        assert isinstance(error, OSError)
    finally:
        first.close()


@pytest.mark.unit
def test_HttpServer_close_once():
    """close() emits close a single time"""
    server = HttpServer().listen(0, "127.0.0.1")
    onClose = MagicMock()
    server.on("close", onClose)
    server.close()
    server.close()
    onClose.assert_called_once_with()
