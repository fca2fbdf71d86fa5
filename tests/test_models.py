from lupon.database.models import Resident


def test_resident_display_name_fallbacks(db):
    full = Resident(firstname="Juan", middlename="Santos", lastname="Dela Cruz")
    no_middle = Resident(firstname="Maria", lastname="Reyes")
    last_only = Resident(lastname="Bautista")
    first_only = Resident(firstname="Ana")
    nameless = Resident()
    db.session.add_all([full, no_middle, last_only, first_only, nameless])
    db.session.commit()

    assert full.display_name == "DELA CRUZ, JUAN SANTOS"
    assert no_middle.display_name == "REYES, MARIA"
    assert last_only.display_name == "BAUTISTA"
    assert first_only.display_name == "ANA"
    assert nameless.display_name == f"RESIDENT #{nameless.id}"
    assert full.to_party()["name"] == full.display_name


def test_home(client):
    assert client.get("/").get_json() == {"service": "lupon", "status": "ok"}
