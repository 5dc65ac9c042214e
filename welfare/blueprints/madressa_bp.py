"""
Madressa Application Blueprint — tenant-scoped CRUD.

  GET    /api/madressaApplication                       ?relationship_id=
  GET    /api/madressaApplication/<id>
  GET    /api/madressaApplication/relationship/<rel_id>
  POST   /api/madressaApplication
  PUT    /api/madressaApplication/<id>
  DELETE /api/madressaApplication/<id>
"""

from flask import Blueprint, jsonify, request

from welfare.blueprints import current_context, current_principal, json_body
from welfare.services import madressa_service

madressa_bp = Blueprint("madressa_application", __name__, url_prefix="/api/madressaApplication")


@madressa_bp.route("", methods=["GET"])
def list_applications():
    relationship_id = request.args.get("relationship_id", type=int)
    apps = madressa_service.list_applications(current_context(), relationship_id=relationship_id)
    return jsonify([a.to_dict() for a in apps]), 200


@madressa_bp.route("/relationship/<int:relationship_id>", methods=["GET"])
def list_for_relationship(relationship_id):
    apps = madressa_service.list_applications(current_context(), relationship_id=relationship_id)
    return jsonify([a.to_dict() for a in apps]), 200


@madressa_bp.route("/<int:app_id>", methods=["GET"])
def get_application(app_id):
    return jsonify(madressa_service.get_application(current_context(), app_id).to_dict()), 200


@madressa_bp.route("", methods=["POST"])
def create_application():
    application = madressa_service.create_application(
        current_context(), current_principal(), json_body()
    )
    return jsonify(application.to_dict()), 201


@madressa_bp.route("/<int:app_id>", methods=["PUT"])
def update_application(app_id):
    application = madressa_service.update_application(
        current_context(), current_principal(), app_id, json_body()
    )
    return jsonify(application.to_dict()), 200


@madressa_bp.route("/<int:app_id>", methods=["DELETE"])
def delete_application(app_id):
    madressa_service.delete_application(current_context(), app_id)
    return jsonify({"message": "Deleted successfully"}), 200
