"""
Parent Questionnaire Blueprint.

  GET    /api/parent-questionnaire/reports                  App Admin, HQ, Org Admin
  GET    /api/parent-questionnaire/flags                    App Admin, HQ, Org Admin
  GET    /api/parent-questionnaire/madressah-app/<app_id>
  GET    /api/parent-questionnaire                          ?madressah_app_id=
  GET    /api/parent-questionnaire/<id>
  POST   /api/parent-questionnaire                          upsert per application
  PUT    /api/parent-questionnaire/<id>
  DELETE /api/parent-questionnaire/<id>

Writes never accept commitment_score, commitment_category, flag_level or
inconsistency_flags from the client; the service recomputes them.
"""

from flask import Blueprint, jsonify, request

from welfare.blueprints import current_context, current_principal, json_body
from welfare.middleware.route_guard import roles_allowed
from welfare.services import questionnaire_service as svc
from welfare.services.rbac_matrix import Role

parent_questionnaire_bp = Blueprint(
    "parent_questionnaire", __name__, url_prefix="/api/parent-questionnaire"
)


@parent_questionnaire_bp.route("/reports", methods=["GET"])
@roles_allowed(Role.APP_ADMIN, Role.HQ, Role.ORG_ADMIN)
def reports():
    return jsonify(svc.build_report(current_context())), 200


@parent_questionnaire_bp.route("/flags", methods=["GET"])
@roles_allowed(Role.APP_ADMIN, Role.HQ, Role.ORG_ADMIN)
def flags():
    return jsonify(svc.list_flagged(current_context())), 200


@parent_questionnaire_bp.route("/madressah-app/<int:app_id>", methods=["GET"])
def list_for_application(app_id):
    records = svc.list_for_application(current_context(), app_id)
    return jsonify([svc.serialize(r) for r in records]), 200


@parent_questionnaire_bp.route("", methods=["GET"])
def list_questionnaires():
    app_id = request.args.get("madressah_app_id", type=int)
    records = svc.list_questionnaires(current_context(), madressah_app_id=app_id)
    return jsonify([svc.serialize(r) for r in records]), 200


@parent_questionnaire_bp.route("/<int:questionnaire_id>", methods=["GET"])
def get_questionnaire(questionnaire_id):
    record = svc.get_questionnaire(current_context(), questionnaire_id)
    return jsonify(svc.serialize(record)), 200


@parent_questionnaire_bp.route("", methods=["POST"])
def save_questionnaire():
    record, created = svc.save_questionnaire(current_context(), current_principal(), json_body())
    return jsonify(svc.serialize(record)), 201 if created else 200


@parent_questionnaire_bp.route("/<int:questionnaire_id>", methods=["PUT"])
def update_questionnaire(questionnaire_id):
    record = svc.update_questionnaire(
        current_context(), current_principal(), questionnaire_id, json_body()
    )
    return jsonify(svc.serialize(record)), 200


@parent_questionnaire_bp.route("/<int:questionnaire_id>", methods=["DELETE"])
def delete_questionnaire(questionnaire_id):
    svc.delete_questionnaire(current_context(), questionnaire_id)
    return jsonify({"message": "Deleted successfully"}), 200
