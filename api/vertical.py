"""Vercel serverless function: vertical single-layer depth table."""

import json
import logging
import sys
from pathlib import Path
from http.server import BaseHTTPRequestHandler

sys.path.insert(0, str(Path(__file__).parent.parent))

from embedment.loads import DesignFactors, build_load_cases
from embedment.pile import PileGeometry
from embedment.soil import build_soil_layers
from embedment.tables import vertical_records
from embedment.vertical import vertical_table

logger = logging.getLogger(__name__)


class handler(BaseHTTPRequestHandler):
    def do_POST(self):
        content_length = int(self.headers.get("Content-Length", 0))
        body = json.loads(self.rfile.read(content_length))

        try:
            table = vertical_table(
                layers=build_soil_layers(body.get("layers")),
                loads=build_load_cases(body.get("loads")),
                factors=DesignFactors.from_dict(body.get("factors")),
                pile=PileGeometry.from_dict(body.get("pile")),
            )

            # Always 200; ok=false is shown by the client
            response = {
                "ok": table.ok,
                "message": table.message,
                "excluded_layers": table.excluded_layers,
                "rows": vertical_records(table),
                "protocol": table.protocol,
            }

            self.send_response(200)
            self.send_header("Content-Type", "application/json")
            self.end_headers()
            self.wfile.write(json.dumps(response).encode())

        except Exception as e:
            logger.exception("Vertical calculation failed")
            self.send_response(500)
            self.send_header("Content-Type", "application/json")
            self.end_headers()
            self.wfile.write(json.dumps({"error": str(e)}).encode())
