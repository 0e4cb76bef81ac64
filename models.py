from flask_sqlalchemy import SQLAlchemy
from datetime import datetime

db = SQLAlchemy()


class ValidationError(Exception):
    """Raised when a document is missing one of its required fields."""


class Document:
    """Mixin for the three record types: required checks and JSON shape."""

    # (attribute, json name) pairs; json name is what clients send and receive
    FIELDS = ()
    REQUIRED = ()

    @classmethod
    def from_json(cls, data):
        return cls(**{attr: data.get(key) for attr, key in cls.FIELDS})

    def validate(self):
        names = dict(self.FIELDS)
        missing = [names[attr] for attr in self.REQUIRED
                   if getattr(self, attr) in (None, "")]
        if missing:
            raise ValidationError(
                f"{type(self).__name__} validation failed: "
                + ", ".join(f"{name} is required" for name in missing)
            )
        return self

    def to_dict(self):
        out = {"_id": self.id}
        for attr, key in self.FIELDS:
            value = getattr(self, attr)
            if isinstance(value, datetime):
                value = value.isoformat()
            out[key] = value
        return out


class Prescription(Document, db.Model):
    __tablename__ = "prescriptions"
    id = db.Column(db.Integer, primary_key=True)
    patient_name = db.Column(db.String(255), nullable=False)
    drug_name = db.Column(db.String(255), nullable=False)
    dosage = db.Column(db.String(255), nullable=False)

    FIELDS = (("patient_name", "patientName"), ("drug_name", "drugName"), ("dosage", "dosage"))
    REQUIRED = ("patient_name", "drug_name", "dosage")


class Appointment(Document, db.Model):
    __tablename__ = "appointments"
    id = db.Column(db.Integer, primary_key=True)
    patient_name = db.Column(db.String(255), nullable=False)
    doctor_name = db.Column(db.String(255), nullable=False)
    appointment_date = db.Column(db.DateTime, nullable=False, index=True)
    reason = db.Column(db.Text, nullable=True)  # optional

    FIELDS = (
        ("patient_name", "patientName"),
        ("doctor_name", "doctorName"),
        ("appointment_date", "appointmentDate"),
        ("reason", "reason"),
    )
    REQUIRED = ("patient_name", "doctor_name", "appointment_date")

    def replace(self, other):
        """Overwrite every field with ``other``'s, including an empty reason."""
        for attr, _ in self.FIELDS:
            setattr(self, attr, getattr(other, attr))
        return self


class User(Document, db.Model):
    __tablename__ = "users"
    id = db.Column(db.Integer, primary_key=True)
    full_name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(120), unique=True, nullable=False)
    username = db.Column(db.String(80), unique=True, nullable=False)
    password = db.Column(db.String(255), nullable=False)  # bcrypt hash
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    FIELDS = (
        ("full_name", "full_name"),
        ("email", "email"),
        ("username", "username"),
        ("password", "password"),
    )
    REQUIRED = ("full_name", "email", "username", "password")

    def to_dict(self):
        return {
            "_id": self.id,
            "full_name": self.full_name,
            "email": self.email,
            "username": self.username,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
