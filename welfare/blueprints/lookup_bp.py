"""
Lookup Blueprint — read-only reference values.

  GET /api/lookup/<table>        all values of a lookup table
  GET /api/lookup/<table>/<id>   a single value
"""

import logging

from flask import Blueprint, jsonify

from welfare.services import lookup_service

logger = logging.getLogger(__name__)

lookup_bp = Blueprint("lookup", __name__, url_prefix="/api/lookup")


@lookup_bp.route("/<string:table>", methods=["GET"])
def list_values(table):
    values = lookup_service.list_values(table)
    logger.debug("Lookup %s returned %d rows", table, len(values))
    return jsonify([v.to_dict() for v in values]), 200


@lookup_bp.route("/<string:table>/<int:value_id>", methods=["GET"])
def get_value(table, value_id):
    return jsonify(lookup_service.get_value(table, value_id).to_dict()), 200
