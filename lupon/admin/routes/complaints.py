import logging
from flask import Blueprint, jsonify, request
from lupon.database.db import db
from lupon.database.models import Complaint, Resident
from lupon.scheduling.slots import parse_date
from lupon.shared.clock import app_now
from lupon.shared.search_utils import (
    COMPLAINT_STATUS_OPTIONS,
    SORT_OPTIONS,
    FilterOptions,
    apply_filters_and_sort,
)

complaints_bp = Blueprint("complaints", __name__, url_prefix="/api/complaints")

logger = logging.getLogger(__name__)

# Fields the search bar looks at on every case list
COMPLAINT_SEARCH_FIELDS = [
    "case_title",
    "nature_of_case",
    "complainant",
    "respondent",
    "witnesses",
]


def _iso(value):
    return value.isoformat() if value else None


def serialize_complaint(c):
    complainant = c.complainant.to_party() if c.complainant else None
    respondent = c.respondent.to_party() if c.respondent else None
    witness = c.witness.to_party() if c.witness else None

    return {
        "id": c.id,
        "case_title": c.case_title,
        "case_description": c.case_description,
        "nature_of_case": c.nature_of_case,
        "relief_description": c.relief_description,
        "status": c.status,
        "priority": c.priority,
        "date_filed": _iso(c.date_filed),
        "incident_date": _iso(c.incident_date),
        "incident_place": c.incident_place,
        "date_withdrawn": _iso(c.date_withdrawn),
        "complainant_id": c.complainant_id,
        "respondent_id": c.respondent_id,
        "witness_id": c.witness_id,
        # Object format for the complaints page
        "complainant": complainant,
        "respondent": respondent,
        "witness": witness,
        # Arrays for the pages that list several parties
        "complainants": [complainant] if complainant else [],
        "respondents": [respondent] if respondent else [],
        "witnesses": [witness] if witness else [],
        "complainant_name": complainant["name"] if complainant else None,
        "respondent_name": respondent["name"] if respondent else None,
        "witness_name": witness["name"] if witness else None,
    }


def filtered_response(rows, search_fields, date_field="date_filed"):
    """Run serialized rows through the search bar options in the query string"""
    options = FilterOptions.from_args(request.args)
    return jsonify(apply_filters_and_sort(rows, options, search_fields, date_field))


def next_case_id(year):
    """Year-based case number: 2026001, 2026002, ..."""
    last = Complaint.query.filter(
        Complaint.id >= year * 1000,
        Complaint.id < (year + 1) * 1000,
    ).order_by(Complaint.id.desc()).first()

    if not last:
        return year * 1000 + 1
    return last.id + 1


# Active cases (not pending, not withdrawn): /api/complaints/
@complaints_bp.route("/", methods=["GET"])
def get_complaints():
    try:
        complaints = Complaint.query.filter(
            Complaint.status.isnot(None),
            Complaint.status != "pending",
            Complaint.status != "withdrawn",
        ).order_by(Complaint.id.desc()).all()

        rows = [serialize_complaint(c) for c in complaints]
        return filtered_response(rows, COMPLAINT_SEARCH_FIELDS)

    except Exception as e:
        logger.exception("Error fetching complaints")
        return jsonify({"success": False, "error": str(e)}), 500


@complaints_bp.route("/pending", methods=["GET"])
def get_pending_cases():
    try:
        complaints = Complaint.query.filter_by(status="pending").order_by(Complaint.id.desc()).all()
        rows = [serialize_complaint(c) for c in complaints]
        return filtered_response(rows, COMPLAINT_SEARCH_FIELDS)

    except Exception as e:
        logger.exception("Error fetching pending cases")
        return jsonify({"success": False, "error": str(e)}), 500


@complaints_bp.route("/withdrawn", methods=["GET"])
def get_withdrawn_complaints():
    try:
        complaints = Complaint.query.filter_by(status="withdrawn").order_by(Complaint.id.desc()).all()
        rows = [serialize_complaint(c) for c in complaints]
        return filtered_response(rows, COMPLAINT_SEARCH_FIELDS, date_field="date_withdrawn")

    except Exception as e:
        logger.exception("Error fetching withdrawn complaints")
        return jsonify({"success": False, "error": str(e)}), 500


@complaints_bp.route("/filter-options", methods=["GET"])
def get_filter_options():
    return jsonify({
        "statusOptions": COMPLAINT_STATUS_OPTIONS,
        "sortOptions": SORT_OPTIONS,
    })


@complaints_bp.route("/", methods=["POST"])
def create_complaint():
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not data:
        return jsonify({"success": False, "error": "Request body is missing"}), 400

    case_title = (data.get("case_title") or "").strip()
    complainant_id = data.get("complainant_id")
    respondent_id = data.get("respondent_id")
    witness_id = data.get("witness_id") or None

    if not case_title:
        return jsonify({"success": False, "error": "Case title is required"}), 400
    if not complainant_id or not respondent_id:
        return jsonify({"success": False, "error": "Complainant and respondent are required"}), 400

    # No resident may appear twice in the same case
    if complainant_id == respondent_id:
        return jsonify({"success": False, "error": "Complainant and respondent cannot be the same person"}), 400
    if witness_id and witness_id == complainant_id:
        return jsonify({"success": False, "error": "Complainant and witness cannot be the same person"}), 400
    if witness_id and witness_id == respondent_id:
        return jsonify({"success": False, "error": "Respondent and witness cannot be the same person"}), 400

    for party_id in filter(None, [complainant_id, respondent_id, witness_id]):
        if db.session.get(Resident, party_id) is None:
            return jsonify({"success": False, "error": f"Resident #{party_id} not found"}), 400

    try:
        now = app_now()
        complaint = Complaint(
            id=next_case_id(now.year),
            case_title=case_title,
            case_description=data.get("case_description"),
            nature_of_case=data.get("nature_of_case"),
            relief_description=data.get("relief_description"),
            complainant_id=complainant_id,
            respondent_id=respondent_id,
            witness_id=witness_id,
            incident_date=parse_date(data.get("incident_date")),
            incident_place=data.get("incident_place"),
            # New cases wait on the pending-cases page until scheduled
            status="pending",
            date_filed=now,
        )
        db.session.add(complaint)
        db.session.commit()

        logger.info("Filed complaint %s: %s", complaint.id, complaint.case_title)
        return jsonify({"success": True, "complaint_id": complaint.id}), 201

    except Exception as e:
        db.session.rollback()
        logger.exception("Error filing complaint")
        return jsonify({"success": False, "error": str(e)}), 500


@complaints_bp.route("/<int:complaint_id>/withdraw", methods=["PUT"])
def withdraw_complaint(complaint_id):
    complaint = db.session.get(Complaint, complaint_id)
    if not complaint:
        return jsonify({"success": False, "error": "Complaint not found"}), 404

    try:
        complaint.status = "withdrawn"
        complaint.date_withdrawn = app_now()
        db.session.commit()
        return jsonify({"success": True})

    except Exception as e:
        db.session.rollback()
        logger.exception("Error withdrawing complaint %s", complaint_id)
        return jsonify({"success": False, "error": str(e)}), 500
