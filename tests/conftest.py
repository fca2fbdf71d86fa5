from datetime import datetime

import pytest

from lupon.app import create_app
from lupon.database.db import db as _db
from lupon.database.models import Complaint, Resident

FIXED_NOW = datetime(2026, 10, 19, 14, 0)


@pytest.fixture
def app():
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite://",
        "MAX_SLOTS_PER_DAY": 4,
    })
    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def db(app):
    return _db


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def residents(db):
    people = [
        Resident(firstname="Juan", middlename="Santos", lastname="Dela Cruz", purok="Purok 1", barangay="San Isidro"),
        Resident(firstname="Maria", lastname="Reyes", purok="Purok 2", barangay="San Isidro"),
        Resident(firstname="Pedro", lastname="Bautista", purok="Purok 3", barangay="San Isidro"),
    ]
    db.session.add_all(people)
    db.session.commit()
    return people


@pytest.fixture
def make_complaint(db, residents):
    juan, maria, pedro = residents

    def _make(case_id, title, status="pending", date_filed=FIXED_NOW, witness=True):
        complaint = Complaint(
            id=case_id,
            case_title=title,
            nature_of_case="Civil",
            complainant_id=juan.id,
            respondent_id=maria.id,
            witness_id=pedro.id if witness else None,
            status=status,
            date_filed=date_filed,
        )
        db.session.add(complaint)
        db.session.commit()
        return complaint

    return _make
