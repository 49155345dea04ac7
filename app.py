"""
Sheet Structure — detection API.

Upload an exported finance workbook and get back which tab plays which role,
with column maps, warnings and near-miss hints.
"""

from __future__ import annotations

import hashlib
import logging
import tempfile
from pathlib import Path

from flask import Flask, request
from werkzeug.utils import secure_filename

from sheet_structure import __version__
from sheet_structure.config import DetectorConfig
from sheet_structure.detector import TabDetector
from sheet_structure.errors import DetectionError
from sheet_structure.excel_client import WorkbookClient

# -------------------------------------------------------
# App Setup
# -------------------------------------------------------

app = Flask(__name__)

app.config["MAX_CONTENT_LENGTH"] = 16 * 1024 * 1024
app.config["UPLOAD_FOLDER"] = Path(tempfile.gettempdir())

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {"xlsx", "xlsm"}

# -------------------------------------------------------
# Detector Setup
# -------------------------------------------------------

detector = TabDetector(config=DetectorConfig(log_level=logging.INFO))


def allowed_file(filename: str) -> bool:
    return "." in filename and filename.rsplit(".", 1)[1].lower() in ALLOWED_EXTENSIONS


# -------------------------------------------------------
# API
# -------------------------------------------------------

@app.route("/api/detect", methods=["POST"])
def api_detect():

    if "file" not in request.files:
        return {"success": False, "error": "No file uploaded"}, 400

    file = request.files["file"]

    if file.filename == "":
        return {"success": False, "error": "No file selected"}, 400

    if not allowed_file(file.filename):
        return {
            "success": False,
            "error": f"Invalid file type. Allowed: {', '.join(sorted(ALLOWED_EXTENSIONS))}",
        }, 400

    payload = file.read()
    # Same bytes, same structure: the content hash doubles as the cache key
    spreadsheet_id = hashlib.sha256(payload).hexdigest()
    filepath = app.config["UPLOAD_FOLDER"] / f"{spreadsheet_id[:16]}-{secure_filename(file.filename)}"

    try:
        filepath.write_bytes(payload)
        metadata = detector.detect(spreadsheet_id, WorkbookClient(filepath))
        return {"success": True, "metadata": metadata.to_dict()}, 200

    except DetectionError as e:
        logger.warning("Detection failed for %s: %s", file.filename, e)
        return {"success": False, "error": str(e)}, 422

    except Exception as e:
        logger.exception("API Error")
        return {"success": False, "error": str(e)}, 500

    finally:
        filepath.unlink(missing_ok=True)


@app.route("/")
def home():
    return {
        "status": "sheet-structure server running",
        "message": "Use /api/health to check server status",
        "endpoints": ["/api/detect", "/api/health"],
    }


@app.route("/api/health", methods=["GET"])
def api_health():
    """Health check endpoint."""
    return {
        "status": "online",
        "version": __version__,
        "api": "/api/detect",
        "methods": ["POST"],
        "signatures": detector.registry.names(),
    }, 200


if __name__ == "__main__":
    print("=" * 60)
    print("sheet-structure server running")
    print("http://localhost:5000")
    print("=" * 60)

    app.run(host="0.0.0.0", port=5000, debug=True)
