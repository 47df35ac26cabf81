"""Vercel serverless function: horizontal (Vogt 1988) depth table."""

import json
import logging
import sys
from pathlib import Path
from http.server import BaseHTTPRequestHandler

# Add project root so we can import the shared embedment/ package
sys.path.insert(0, str(Path(__file__).parent.parent))

from embedment.config import SolverSettings
from embedment.horizontal import horizontal_table
from embedment.loads import DesignFactors, build_load_cases
from embedment.pile import PileGeometry
from embedment.soil import build_soil_layers
from embedment.tables import horizontal_records

logger = logging.getLogger(__name__)


class handler(BaseHTTPRequestHandler):
    def do_POST(self):
        content_length = int(self.headers.get("Content-Length", 0))
        body = json.loads(self.rfile.read(content_length))

        try:
            table = horizontal_table(
                layers=build_soil_layers(body.get("layers")),
                loads=build_load_cases(body.get("loads")),
                factors=DesignFactors.from_dict(body.get("factors")),
                pile=PileGeometry.from_dict(body.get("pile")),
                settings=SolverSettings.from_dict(body.get("settings")),
            )

            response = {
                "ok": table.ok,
                "message": table.message,
                "rows": horizontal_records(table),
                "protocol": table.protocol,
            }

            self.send_response(200)
            self.send_header("Content-Type", "application/json")
            self.end_headers()
            self.wfile.write(json.dumps(response).encode())

        except Exception as e:
            logger.exception("Horizontal calculation failed")
            self.send_response(500)
            self.send_header("Content-Type", "application/json")
            self.end_headers()
            self.wfile.write(json.dumps({"error": str(e)}).encode())
