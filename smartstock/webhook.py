# Webhook server - Dialogflow fulfillment over plain http.server
# POST /, /webhook or /df with a Dialogflow request; replies {"fulfillmentText": ...}

import json
import logging
from http.server import BaseHTTPRequestHandler, HTTPServer

from .models import Query

logger = logging.getLogger(__name__)

WEBHOOK_PATHS = ('/', '/webhook', '/df')
ERROR_TEXT = "Something went wrong while checking stock."
BAD_REQUEST_TEXT = "Sorry, I couldn't read that request."


def make_handler(router):
    """Request handler class bound to `router`."""

    class Handler(BaseHTTPRequestHandler):

        def _send(self, status: int, body: bytes, content_type: str):
            self.send_response(status)
            self.send_header('Content-type', content_type)
            self.send_header('Content-Length', str(len(body)))
            self.end_headers()
            self.wfile.write(body)

        def _send_json(self, status: int, payload):
            self._send(status, json.dumps(payload).encode(), 'application/json')

        def _send_text(self, status: int, text: str):
            self._send(status, text.encode(), 'text/plain; charset=utf-8')

        def do_GET(self):
            path = self.path.split('?', 1)[0]
            if path == '/':
                self._send_text(200, "SmartStockAI webhook is running.")
            elif path in WEBHOOK_PATHS:
                self._send_text(405, "This endpoint expects POST from Dialogflow. Try a POST request.")
            else:
                self.send_error(404)

        def do_POST(self):
            path = self.path.split('?', 1)[0]
            if path not in WEBHOOK_PATHS:
                self.send_error(404)
                return

            try:
                length = int(self.headers.get('Content-Length') or 0)
                payload = json.loads(self.rfile.read(length) or b'{}')
            except ValueError as e:
                logger.warning(f"Malformed webhook body: {e}")
                self._send_json(400, {'fulfillmentText': BAD_REQUEST_TEXT})
                return

            try:
                text = router.handle(Query.from_webhook(payload))
            except Exception:
                logger.exception("Webhook handling failed")
                text = ERROR_TEXT
            self._send_json(200, {'fulfillmentText': text})

        def log_message(self, format, *args):
            logger.debug("%s - %s", self.address_string(), format % args)

    return Handler


def make_server(router, host: str = '', port: int = 8080) -> HTTPServer:
    return HTTPServer((host, port), make_handler(router))
