"""Flask-based preview server for SSI campaign pages."""

import argparse
import errno
import os
import socket
from pathlib import Path
from typing import List, Optional, Sequence

from flask import Flask, Response, render_template
from werkzeug.security import safe_join
from werkzeug.serving import BaseWSGIServer, make_server
import structlog

from . import config
from .diagnostics import DiagnosticCollector, DiagnosticKind, log_diagnostic
from .expander import IncludeExpander
from .resolver import PrefixRule, VirtualPathResolver

logger = structlog.get_logger(__name__)

HTML_CONTENT_TYPE = "text/html; charset=utf-8"


class PortInUseError(OSError):
    """Raised when the preview port is already bound by another process."""

    def __init__(self, host: str, port: int) -> None:
        super().__init__(errno.EADDRINUSE, f"Port {port} is already in use on {host}")
        self.host = host
        self.port = port


class PreviewServer:
    """Serves a campaign checkout with SSI includes expanded.

    HTML and .ssi documents go through the include expander before being
    sent; every other file is returned byte for byte.
    """

    def __init__(
        self,
        host: str = config.HOST,
        port: int = config.PORT,
        content_root: Optional[Path] = None,
        rules: Optional[Sequence[PrefixRule]] = None,
    ) -> None:
        """Initialize the preview server.

        Args:
            host: Host to bind the web server to
            port: Port to bind the web server to
            content_root: Directory served at '/', defaults to the configured root
            rules: Prefix rules for SSI resolution, defaults to the built-in table
        """
        self.host = host
        self.port = port
        self.content_root = Path(content_root or config.CONTENT_ROOT).resolve()

        if rules is None:
            rules = config.build_prefix_rules(self.content_root)
        self.resolver = VirtualPathResolver(rules)

        self.app = Flask(__name__, template_folder=str(config.TEMPLATES_DIR))
        self._server: Optional[BaseWSGIServer] = None

        self._setup_routes()

    def _setup_routes(self) -> None:
        """Setup Flask routes."""

        @self.app.route('/')
        def index() -> str:
            """Landing page linking the campaign previews."""
            logger.info("Request", path="/")
            return render_template(
                'index.html',
                app_name=config.APP_NAME,
                port=self.port,
                campaigns=config.CAMPAIGNS,
            )

        @self.app.route('/<path:request_path>')
        def serve_file(request_path: str) -> Response:
            """Serve a file from the content root."""
            return self._serve("/" + request_path)

        @self.app.after_request
        def disable_caching(response: Response) -> Response:
            response.headers.update(config.NO_CACHE_HEADERS)
            return response

    def _serve(self, pathname: str) -> Response:
        """Map a request path onto the content root and build the response.

        Args:
            pathname: Request path, starting with '/'

        Returns:
            The file response, or a 403/404/500 error page
        """
        pathname = config.PAGE_ALIASES.get(pathname, pathname)
        logger.info("Request", path=pathname)

        file_path = safe_join(str(self.content_root), pathname.lstrip("/"))
        if file_path is None or not os.path.exists(file_path):
            logger.info("File not found", path=pathname, file=file_path)
            return _error_page(404, "Not Found", "File not found")

        if os.path.isdir(file_path):
            logger.info("Directory access rejected", path=pathname)
            return _error_page(403, "Forbidden", "Directory listing is disabled")

        try:
            content = Path(file_path).read_bytes()
        except OSError as e:
            logger.error("Error reading file", file=file_path, error=str(e))
            return _error_page(500, "Internal Server Error", "Failed to read the file")

        ext = os.path.splitext(file_path)[1].lower()
        content_type = config.MIME_TYPES.get(ext, config.DEFAULT_MIME_TYPE)

        if ext not in config.SSI_EXTENSIONS:
            logger.info("Static file served", path=pathname, content_type=content_type)
            return Response(content, status=200, content_type=content_type)

        logger.info("Processing SSI", path=pathname)
        body, collector = self.render_document(
            content.decode("utf-8", errors="replace"), Path(file_path).parent
        )
        included = len(collector.of_kind(DiagnosticKind.INCLUDED))
        logger.info(
            "Response sent",
            path=pathname,
            included=included,
            unresolved=len(collector.diagnostics) - included,
        )
        return Response(body, status=200, content_type=f"{content_type}; charset=utf-8")

    def render_document(self, text: str, directory: Path) -> tuple[str, DiagnosticCollector]:
        """Expand a top-level document loaded from ``directory``.

        Returns:
            The expanded text and the diagnostics collected on the way
        """
        collector = DiagnosticCollector(forward=log_diagnostic)
        expander = IncludeExpander(self.resolver, on_diagnostic=collector)
        return expander.expand(text, directory, 0), collector

    def run(self, debug: bool = False) -> None:
        """Start the web server and block until it stops.

        Args:
            debug: Whether to run Flask in debug mode

        Raises:
            PortInUseError: If the port is already taken
        """
        self._ensure_port_free()
        self.app.debug = debug
        self._server = make_server(self.host, self.port, self.app, threaded=True)

        logger.info("Starting preview server", host=self.host, port=self.port, root=str(self.content_root))
        self._print_banner()

        try:
            self._server.serve_forever()
        finally:
            self.cleanup()

    def cleanup(self) -> None:
        """Cleanup resources."""
        if self._server is not None:
            self._server.server_close()
            self._server = None
            logger.info("Preview server stopped")

    def _ensure_port_free(self) -> None:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as probe:
            probe.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            try:
                probe.bind((self.host, self.port))
            except OSError as e:
                if e.errno == errno.EADDRINUSE:
                    raise PortInUseError(self.host, self.port) from e
                raise

    def _print_banner(self) -> None:
        base_url = f"http://{self.host}:{self.port}"
        separator = "=" * 59
        print(f"\n{separator}")
        print(f"{config.APP_NAME} started")
        print(separator)
        print(f"Server running at: {base_url}/")
        print(f"Content root: {self.content_root}\n")
        print("Available pages:")
        for label, url, _ in config.CAMPAIGNS:
            print(f"   - {label}: {base_url}{url}")
        print("\nSSI includes:")
        for rule in self.resolver.rules:
            print(f"   - {rule.virtual_prefix} -> {rule.physical_base}")
        print("\nEdit files and reload the browser to see changes.")
        print("Stop the server with Ctrl+C.")
        print("Note: pages load external resources, an internet connection is required.")
        print(f"{separator}\n")


def _error_page(status: int, title: str, message: str) -> Response:
    body = f"<h1>{status} {title}</h1><p>{message}</p>"
    return Response(body, status=status, content_type=HTML_CONTENT_TYPE)


def create_app(
    content_root: Optional[Path] = None, rules: Optional[Sequence[PrefixRule]] = None
) -> Flask:
    """Factory function to create Flask app."""
    return PreviewServer(content_root=content_root, rules=rules).app


def main(argv: Optional[List[str]] = None) -> int:
    """Run the preview server from the command line.

    Returns:
        Process exit status
    """
    parser = argparse.ArgumentParser(description=f"{config.APP_NAME} {config.APP_VERSION}")
    parser.add_argument("--host", default=config.HOST, help="Host to bind to")
    parser.add_argument("--port", type=int, default=config.PORT, help="Port to bind to")
    parser.add_argument(
        "--root", type=Path, default=config.CONTENT_ROOT, help="Directory holding 9SS/ and 12SS/"
    )
    parser.add_argument("--debug", action="store_true", help="Run in debug mode")

    args = parser.parse_args(argv)

    if not args.root.is_dir():
        logger.error("Content root not found", root=str(args.root))
        return 1

    server = PreviewServer(host=args.host, port=args.port, content_root=args.root)
    try:
        server.run(debug=args.debug)
    except PortInUseError as e:
        logger.error("Port already in use", host=e.host, port=e.port)
        print("How to fix:")
        print("   - Stop the server that is already running")
        print(f"   - Or pick another port, e.g. --port {e.port + 1}")
        return 1
    except KeyboardInterrupt:
        print("\nShutting down...")
    return 0
