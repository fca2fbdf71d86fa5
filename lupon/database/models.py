from .db import db

# -----------------------
# Residents (parties to a case)
# -----------------------
class Resident(db.Model):
    __tablename__ = "residents"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    firstname = db.Column(db.String(100))
    middlename = db.Column(db.String(100))
    lastname = db.Column(db.String(100))
    purok = db.Column(db.String(100))
    contact = db.Column(db.String(20))
    barangay = db.Column(db.String(150))

    @property
    def display_name(self):
        """LAST, FIRST MIDDLE in upper case, falling back to whatever name part exists"""
        if self.lastname and self.firstname:
            name = f"{self.lastname.upper()}, {self.firstname.upper()}"
            if self.middlename:
                name += f" {self.middlename.upper()}"
            return name
        if self.lastname:
            return self.lastname.upper()
        if self.firstname:
            return self.firstname.upper()
        return f"RESIDENT #{self.id}"

    def to_party(self):
        return {
            "id": self.id,
            "name": self.display_name,
            "display_name": self.display_name,
            "purok": self.purok,
            "contact": self.contact,
            "barangay": self.barangay,
        }

    def __repr__(self):
        return f"<Resident {self.id}>"

# -----------------------
# Complaints
# -----------------------
class Complaint(db.Model):
    __tablename__ = "complaints"

    # Year-based case number (2026001, 2026002, ...), assigned on filing
    id = db.Column(db.BigInteger, primary_key=True, autoincrement=False)
    case_title = db.Column(db.String(255), nullable=False)
    case_description = db.Column(db.Text)
    nature_of_case = db.Column(db.String(255))
    relief_description = db.Column(db.Text)
    complainant_id = db.Column(db.Integer, db.ForeignKey("residents.id"))
    respondent_id = db.Column(db.Integer, db.ForeignKey("residents.id"))
    witness_id = db.Column(db.Integer, db.ForeignKey("residents.id"))
    status = db.Column(db.String(50), default="pending")
    priority = db.Column(db.Integer)
    date_filed = db.Column(db.DateTime, server_default=db.func.now())
    incident_date = db.Column(db.Date)
    incident_place = db.Column(db.String(255))
    date_withdrawn = db.Column(db.DateTime)

    complainant = db.relationship("Resident", foreign_keys=[complainant_id])
    respondent = db.relationship("Resident", foreign_keys=[respondent_id])
    witness = db.relationship("Resident", foreign_keys=[witness_id])

    def __repr__(self):
        return f"<Complaint {self.id}>"

# -----------------------
# Hearing sessions
# -----------------------
class Mediation(db.Model):
    __tablename__ = "mediation"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    complaint_id = db.Column(db.BigInteger, nullable=False, index=True)
    date = db.Column(db.Date, nullable=False)
    time = db.Column(db.String(5), nullable=False)  # "HH:MM", 24h
    is_deleted = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime, server_default=db.func.now())


class Conciliation(db.Model):
    __tablename__ = "conciliation"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    complaint_id = db.Column(db.BigInteger, nullable=False, index=True)
    date = db.Column(db.Date, nullable=False)
    time = db.Column(db.String(5), nullable=False)
    panel = db.Column(db.JSON, nullable=True)  # names of the pangkat members
    created_at = db.Column(db.DateTime, server_default=db.func.now())


class Arbitration(db.Model):
    __tablename__ = "arbitration"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    complaint_id = db.Column(db.BigInteger, nullable=False, index=True)
    date = db.Column(db.Date, nullable=False)
    time = db.Column(db.String(5), nullable=False)
    is_deleted = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime, server_default=db.func.now())

# -----------------------
# Referrals to outside agencies
# -----------------------
class Referral(db.Model):
    __tablename__ = "referrals"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    original_complaint_id = db.Column(db.BigInteger, nullable=False)
    case_title = db.Column(db.String(255), nullable=False)
    case_description = db.Column(db.Text)
    nature_of_case = db.Column(db.String(255))
    relief_sought = db.Column(db.Text)
    complainant_id = db.Column(db.Integer, db.ForeignKey("residents.id"))
    respondent_id = db.Column(db.Integer, db.ForeignKey("residents.id"))
    witness_id = db.Column(db.Integer, db.ForeignKey("residents.id"))
    referred_to = db.Column(db.String(255), nullable=False)
    referral_reason = db.Column(db.Text)
    date_referred = db.Column(db.DateTime, server_default=db.func.now())
    status = db.Column(db.String(50), default="referred")

    complainant = db.relationship("Resident", foreign_keys=[complainant_id])
    respondent = db.relationship("Resident", foreign_keys=[respondent_id])
    witness = db.relationship("Resident", foreign_keys=[witness_id])

    def __repr__(self):
        return f"<Referral {self.id} -> {self.referred_to}>"
