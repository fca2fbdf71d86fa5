import logging
from flask import Blueprint, current_app, jsonify, request
from lupon.database.db import db
from lupon.database.models import Conciliation, Mediation
from lupon.scheduling.slots import ScheduleConflict, check_schedule_conflicts
from .mediation import BookingRequestError, parse_booking_request

conciliation_bp = Blueprint("conciliation", __name__, url_prefix="/api/conciliation")

logger = logging.getLogger(__name__)


@conciliation_bp.route("/schedule", methods=["POST"])
def set_conciliation_schedule():
    data = request.get_json(silent=True) or {}
    try:
        complaint, day, time_value = parse_booking_request(data)

        # Mediation and conciliation share the daily limit
        mediations = Mediation.query.filter_by(date=day, is_deleted=False).all()
        conciliations = Conciliation.query.filter_by(date=day).all()
        own = [c for c in conciliations if c.complaint_id == complaint.id]
        check_schedule_conflicts(
            mediations + conciliations,
            time_value,
            current_app.config["MAX_SLOTS_PER_DAY"],
            ignore=own,
            label="mediation and conciliation",
        )
    except BookingRequestError as e:
        return jsonify({"success": False, "error": e.message}), e.status
    except ScheduleConflict as e:
        return jsonify({"success": False, "error": e.message}), 400

    try:
        conciliation = Conciliation.query.filter_by(complaint_id=complaint.id).first()
        if conciliation:
            conciliation.date = day
            conciliation.time = time_value
            conciliation.panel = data.get("panel")
        else:
            db.session.add(Conciliation(
                complaint_id=complaint.id, date=day, time=time_value, panel=data.get("panel")
            ))

        complaint.status = "Conciliation"
        db.session.commit()

        logger.info("Conciliation for complaint %s set on %s %s", complaint.id, day, time_value)
        return jsonify({"success": True})

    except Exception as e:
        db.session.rollback()
        logger.exception("Error in set_conciliation_schedule")
        return jsonify({"success": False, "error": str(e)}), 500
