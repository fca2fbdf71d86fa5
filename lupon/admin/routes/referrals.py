import logging
from flask import Blueprint, jsonify, request
from lupon.database.db import db
from lupon.database.models import Complaint, Referral
from lupon.shared.clock import app_now
from lupon.shared.search_utils import REFERRAL_STATUS_OPTIONS, SORT_OPTIONS
from .complaints import filtered_response

referrals_bp = Blueprint("referrals", __name__, url_prefix="/api/referrals")

logger = logging.getLogger(__name__)

REFERRAL_SEARCH_FIELDS = ["case_title", "referred_to", "complainant", "respondent", "witness"]


def serialize_referral(r):
    return {
        "id": r.id,
        "original_complaint_id": r.original_complaint_id,
        "case_title": r.case_title,
        "case_description": r.case_description,
        "nature_of_case": r.nature_of_case,
        "relief_sought": r.relief_sought,
        "complainant": r.complainant.to_party() if r.complainant else None,
        "respondent": r.respondent.to_party() if r.respondent else None,
        "witness": r.witness.to_party() if r.witness else None,
        "referred_to": r.referred_to,
        "referral_reason": r.referral_reason,
        "date_referred": r.date_referred.isoformat() if r.date_referred else None,
        "status": r.status,
    }


@referrals_bp.route("/", methods=["GET"])
def get_referrals():
    try:
        referrals = Referral.query.order_by(Referral.date_referred.desc()).all()
        rows = [serialize_referral(r) for r in referrals]
        return filtered_response(rows, REFERRAL_SEARCH_FIELDS, date_field="date_referred")

    except Exception as e:
        logger.exception("Error fetching referrals")
        return jsonify({"success": False, "error": str(e)}), 500


@referrals_bp.route("/filter-options", methods=["GET"])
def get_filter_options():
    return jsonify({
        "statusOptions": REFERRAL_STATUS_OPTIONS,
        "sortOptions": SORT_OPTIONS,
    })


# Move a case out of the Lupon process: /api/referrals/transfer/<complaint_id>
@referrals_bp.route("/transfer/<int:complaint_id>", methods=["POST"])
def transfer_complaint(complaint_id):
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    referred_to = (data.get("referred_to") or "").strip()
    if not referred_to:
        return jsonify({"success": False, "error": "Agency to refer to is required"}), 400

    complaint = db.session.get(Complaint, complaint_id)
    if not complaint:
        return jsonify({"success": False, "error": "Complaint not found"}), 404

    try:
        referral = Referral(
            original_complaint_id=complaint.id,
            case_title=complaint.case_title,
            case_description=complaint.case_description,
            nature_of_case=complaint.nature_of_case,
            relief_sought=complaint.relief_description,
            complainant_id=complaint.complainant_id,
            respondent_id=complaint.respondent_id,
            witness_id=complaint.witness_id,
            referred_to=referred_to,
            referral_reason=data.get("referral_reason"),
            date_referred=app_now(),
        )
        db.session.add(referral)
        db.session.delete(complaint)
        db.session.commit()

        logger.info("Complaint %s referred to %s", complaint_id, referred_to)
        return jsonify({
            "success": True,
            "message": "Complaint transferred to referrals successfully",
            "referralId": referral.id,
        })

    except Exception as e:
        db.session.rollback()
        logger.exception("Error transferring complaint %s", complaint_id)
        return jsonify({"success": False, "error": str(e)}), 500


@referrals_bp.route("/<int:referral_id>/status", methods=["PUT"])
def update_referral_status(referral_id):
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    status = data.get("status")
    if not status:
        return jsonify({"success": False, "error": "Status is required"}), 400

    referral = db.session.get(Referral, referral_id)
    if not referral:
        return jsonify({"success": False, "error": "Referral not found"}), 404

    try:
        referral.status = status
        db.session.commit()
        return jsonify({"success": True, "message": "Referral status updated successfully"})

    except Exception as e:
        db.session.rollback()
        logger.exception("Error updating referral %s", referral_id)
        return jsonify({"success": False, "error": str(e)}), 500
