import logging
from flask import Blueprint, current_app, jsonify, request
from lupon.database.db import db
from lupon.database.models import Arbitration, Complaint, Conciliation, Mediation
from lupon.scheduling.slots import (
    BOOKING_MESSAGES,
    MISSING_FIELDS,
    PAST_TIME,
    ScheduleConflict,
    SlotInfo,
    canonical_time,
    check_schedule_conflicts,
    format_time_12h,
    is_time_slot_in_past,
    parse_date,
)
from lupon.shared.clock import app_now
from lupon.shared.search_utils import MEDIATION_STATUS_OPTIONS, SORT_OPTIONS
from .complaints import filtered_response

mediation_bp = Blueprint("mediation", __name__, url_prefix="/api/mediation")

logger = logging.getLogger(__name__)

MEDIATION_SEARCH_FIELDS = ["case_title", "complainant", "respondent", "witness"]


class BookingRequestError(Exception):
    def __init__(self, message, status=400):
        self.message = message
        self.status = status
        super().__init__(message)


def parse_booking_request(data):
    """Validate {complaint_id, date, time}; returns (complaint, date, "HH:MM")."""
    if not isinstance(data, dict):
        raise BookingRequestError(BOOKING_MESSAGES[MISSING_FIELDS])
    complaint_id = data.get("complaint_id")
    date_value = data.get("date")
    time_value = data.get("time")

    if not complaint_id or not date_value or not time_value:
        raise BookingRequestError(BOOKING_MESSAGES[MISSING_FIELDS])

    day = parse_date(date_value)
    if day is None:
        raise BookingRequestError(f"Invalid date: {date_value}")
    try:
        time_value = canonical_time(time_value)
        complaint_id = int(complaint_id)
    except (TypeError, ValueError):
        raise BookingRequestError("Invalid complaint or time")

    if is_time_slot_in_past(time_value, day, app_now()):
        raise BookingRequestError(BOOKING_MESSAGES[PAST_TIME])

    complaint = db.session.get(Complaint, complaint_id)
    if not complaint:
        raise BookingRequestError("Complaint not found", 404)
    return complaint, day, time_value


def booked_times_for(day):
    """Times taken on ``day`` by mediation, conciliation and arbitration (they share slots)"""
    mediation_times = [m.time for m in Mediation.query.filter_by(date=day, is_deleted=False).order_by(Mediation.time)]
    conciliation_times = [c.time for c in Conciliation.query.filter_by(date=day).order_by(Conciliation.time)]
    arbitration_times = [a.time for a in Arbitration.query.filter_by(date=day, is_deleted=False).order_by(Arbitration.time)]
    return mediation_times + conciliation_times + arbitration_times


def _party_name(resident):
    return {"id": resident.id, "name": resident.display_name} if resident else None


# Slot availability for one day: /api/mediation/available-slots/2026-10-19
@mediation_bp.route("/available-slots/<date_str>", methods=["GET"])
def get_available_slots(date_str):
    day = parse_date(date_str)
    if day is None:
        return jsonify({"success": False, "error": f"Invalid date: {date_str}"}), 400

    try:
        slot_info = SlotInfo.from_booked_times(booked_times_for(day), current_app.config["MAX_SLOTS_PER_DAY"])
        return jsonify({"success": True, "data": slot_info.to_dict()})

    except Exception as e:
        logger.exception("Error in get_available_slots")
        return jsonify({"success": False, "error": str(e)}), 500


@mediation_bp.route("/schedule", methods=["POST"])
def set_mediation_schedule():
    data = request.get_json(silent=True) or {}
    try:
        complaint, day, time_value = parse_booking_request(data)

        existing = Mediation.query.filter_by(date=day, is_deleted=False).all()
        own = [m for m in existing if m.complaint_id == complaint.id]
        check_schedule_conflicts(
            existing, time_value, current_app.config["MAX_SLOTS_PER_DAY"], ignore=own, label="mediation"
        )
    except BookingRequestError as e:
        return jsonify({"success": False, "error": e.message}), e.status
    except ScheduleConflict as e:
        return jsonify({"success": False, "error": e.message}), 400

    try:
        mediation = Mediation.query.filter_by(complaint_id=complaint.id, is_deleted=False).first()
        if mediation:
            mediation.date = day
            mediation.time = time_value
        else:
            db.session.add(Mediation(complaint_id=complaint.id, date=day, time=time_value))

        # A case moved back to mediation gives up its later hearing slots
        Conciliation.query.filter_by(complaint_id=complaint.id).delete()
        Arbitration.query.filter_by(complaint_id=complaint.id, is_deleted=False).update({"is_deleted": True})

        complaint.status = "Mediation"
        db.session.commit()

        logger.info("Mediation for complaint %s set on %s %s", complaint.id, day, time_value)
        return jsonify({"success": True})

    except Exception as e:
        db.session.rollback()
        logger.exception("Error in set_mediation_schedule")
        return jsonify({"success": False, "error": str(e)}), 500


# All scheduled mediations with case info: /api/mediation/
@mediation_bp.route("/", methods=["GET"])
def get_all_mediations():
    try:
        mediations = db.session.query(Mediation, Complaint).join(
            Complaint, Mediation.complaint_id == Complaint.id
        ).filter(
            Mediation.is_deleted.is_(False),
            Complaint.status == "Mediation",
        ).order_by(Mediation.date.desc(), Mediation.time).all()

        rows = []
        for mediation, complaint in mediations:
            rows.append({
                "id": mediation.id,
                "complaint_id": mediation.complaint_id,
                "date": mediation.date.isoformat(),
                "time": mediation.time,
                "display_time": format_time_12h(mediation.time),
                "created_at": mediation.created_at.isoformat() if mediation.created_at else None,
                "case_title": complaint.case_title,
                "status": complaint.status,
                "complainant": _party_name(complaint.complainant),
                "respondent": _party_name(complaint.respondent),
                "witness": _party_name(complaint.witness),
            })

        return filtered_response(rows, MEDIATION_SEARCH_FIELDS, date_field="date")

    except Exception as e:
        logger.exception("Error fetching mediations")
        return jsonify({"success": False, "error": str(e)}), 500


@mediation_bp.route("/filter-options", methods=["GET"])
def get_filter_options():
    return jsonify({
        "statusOptions": MEDIATION_STATUS_OPTIONS,
        "sortOptions": SORT_OPTIONS,
    })
