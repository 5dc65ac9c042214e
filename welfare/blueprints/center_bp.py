"""
Center Detail Blueprint — organisation (tenant) management.

  GET    /api/centerDetail        any authenticated user
  GET    /api/centerDetail/<id>   any authenticated user
  POST   /api/centerDetail        App Admin
  PUT    /api/centerDetail/<id>   App Admin
  DELETE /api/centerDetail/<id>   App Admin
"""

from flask import Blueprint, jsonify

from welfare.blueprints import current_principal, json_body
from welfare.middleware.route_guard import roles_allowed
from welfare.services import center_service
from welfare.services.rbac_matrix import Role

center_bp = Blueprint("center_detail", __name__, url_prefix="/api/centerDetail")


def _username():
    principal = current_principal()
    return principal.username if principal else None


@center_bp.route("", methods=["GET"])
def list_centers():
    return jsonify([c.to_dict() for c in center_service.list_centers()]), 200


@center_bp.route("/<int:center_id>", methods=["GET"])
def get_center(center_id):
    return jsonify(center_service.get_center(center_id).to_dict()), 200


@center_bp.route("", methods=["POST"])
@roles_allowed(Role.APP_ADMIN)
def create_center():
    center = center_service.create_center(json_body(), username=_username())
    return jsonify(center.to_dict()), 201


@center_bp.route("/<int:center_id>", methods=["PUT"])
@roles_allowed(Role.APP_ADMIN)
def update_center(center_id):
    center = center_service.update_center(center_id, json_body(), username=_username())
    return jsonify(center.to_dict()), 200


@center_bp.route("/<int:center_id>", methods=["DELETE"])
@roles_allowed(Role.APP_ADMIN)
def delete_center(center_id):
    center_service.delete_center(center_id)
    return jsonify({"message": "Deleted successfully"}), 200
