from flask import Flask, request, jsonify
from flask_cors import CORS
from rent_engine import LedgerProcessor
from rent_engine.values import current_date, current_period
import json
import os
import logging

# Configure logging
logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO"))
logger = logging.getLogger(__name__)

app = Flask(__name__)

# Enable CORS for all routes (dashboard frontend calls the API from another origin)
CORS(app)

# Initialize the ledger processor
processor = LedgerProcessor()


def with_clock_defaults(input_data):
    """The engine never reads the clock; fill reference period and issue date here."""
    data = dict(input_data)
    if not data.get("reference_period"):
        data["reference_period"] = current_period()
    if not data.get("issue_date"):
        data["issue_date"] = current_date()
    return data


@app.route("/api", methods=["GET"])
def api_info():
    """API information endpoint"""
    return jsonify({
        "status": "ok",
        "message": "Rent Ledger API",
        "version": "1.0",
        "endpoints": {
            "saldo": "/saldo [POST]",
            "escalation": "/escalation [POST]",
            "property": "/property [POST]",
            "health": "/health [GET]"
        }
    }), 200


@app.route("/health", methods=["GET"])
def health():
    """Health check for monitoring"""
    return jsonify({"status": "healthy"}), 200


def _run(handler, label):
    try:
        # Get input data
        raw_body = request.get_data(as_text=True)
        try:
            input_data = json.loads(raw_body) if raw_body else None
        except json.JSONDecodeError as e:
            logger.error(f"JSON parse error: {str(e)}")
            return jsonify({
                "error": f"Invalid JSON: {str(e)}",
                "status": "failed"
            }), 400

        if not input_data:
            return jsonify({
                "error": "No input data provided",
                "status": "failed"
            }), 400

        logger.info(f"Processing {label} request")

        result = handler(with_clock_defaults(input_data))

        logger.info(f"{label} processed successfully")

        return jsonify(result), 200

    except (ValueError, KeyError, TypeError) as e:
        # Validation errors from engine (missing fields, invalid values)
        logger.error(f"Validation error: {str(e)}")
        return jsonify({
            "error": str(e),
            "status": "validation_failed"
        }), 400

    except Exception as e:
        # Unexpected errors
        logger.error(f"Processing error: {str(e)}", exc_info=True)
        return jsonify({
            "error": "An unexpected error occurred during processing",
            "status": "failed"
        }), 500


@app.route("/saldo", methods=["POST"])
def saldo():
    """Compute the saldo of one tenancy"""
    return _run(processor.process_from_dict, "saldo")


@app.route("/escalation", methods=["POST"])
def escalation():
    """Decide the next arrears notice for one tenancy"""
    return _run(processor.escalate_from_dict, "escalation")


@app.route("/property", methods=["POST"])
def property_dashboard():
    """Saldos, member payments and arrears list for a whole property"""
    return _run(processor.process_property_from_dict, "property")


if __name__ == "__main__":
    port = int(os.environ.get("PORT", 8080))
    app.run(host="0.0.0.0", port=port, debug=False)
