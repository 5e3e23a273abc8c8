"""WSGI application exposing the metrics endpoint and a landing page."""

from __future__ import annotations

from typing import Any, Callable, Iterable, List
from wsgiref.simple_server import WSGIRequestHandler, make_server

from prometheus_client import CollectorRegistry, make_wsgi_app
from prometheus_client.exposition import ThreadingWSGIServer

from .logging_config import get_logger

logger = get_logger("server")

LANDING_PAGE = """<html>
<head><title>CMC Exporter</title></head>
<body>
<h1>CMC Exporter</h1>
<p><a href='{metrics_path}'>Metrics</a></p>
</body>
</html>
"""

WSGIApp = Callable[[dict, Callable[..., Any]], Iterable[bytes]]


def create_app(registry: CollectorRegistry, telemetry_path: str = "/metrics") -> WSGIApp:
    """Route the telemetry path to the registry and ``/`` to the landing page."""
    metrics_app = make_wsgi_app(registry)
    landing = LANDING_PAGE.format(metrics_path=telemetry_path).encode("utf-8")

    def app(environ: dict, start_response: Callable[..., Any]) -> List[bytes]:
        path = environ.get("PATH_INFO") or "/"
        if path == telemetry_path:
            return metrics_app(environ, start_response)
        if path == "/":
            start_response("200 OK", [("Content-Type", "text/html; charset=utf-8")])
            return [landing]
        start_response("404 Not Found", [("Content-Type", "text/plain; charset=utf-8")])
        return [b"Not Found\n"]

    return app


class _LoggingRequestHandler(WSGIRequestHandler):
    def log_message(self, format: str, *args: Any) -> None:
        logger.debug("%s - %s", self.address_string(), format % args)


def serve(app: WSGIApp, host: str, port: int) -> None:
    """Serve ``app`` until interrupted."""
    httpd = make_server(
        host,
        port,
        app,
        server_class=ThreadingWSGIServer,
        handler_class=_LoggingRequestHandler,
    )
    logger.info("Listening on address %s:%s", host, port)
    try:
        httpd.serve_forever()
    finally:
        httpd.server_close()
