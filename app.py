from flask import Flask, Blueprint, request, jsonify, current_app
from flask_cors import CORS
from sqlalchemy import or_, text
from dateutil import parser
from dotenv import load_dotenv
from datetime import datetime, timezone
import bcrypt
import os

from models import db, Prescription, Appointment, User

load_dotenv()

BCRYPT_MAX_BYTES = 72

# ---------------- CONFIG ----------------
def default_database_url():
    """DATABASE_URL if set, otherwise a PostgreSQL URL built from the DB_* variables."""
    url = os.environ.get("DATABASE_URL")
    if url:
        return url
    return "postgresql+psycopg2://{user}:{password}@{host}:{port}/{name}?sslmode={sslmode}".format(
        user=os.environ.get("DB_USER", "postgres"),
        password=os.environ.get("DB_PASS", "postgres"),
        host=os.environ.get("DB_HOST", "127.0.0.1"),
        port=os.environ.get("DB_PORT", "5432"),
        name=os.environ.get("DB_NAME", "healthcare"),
        sslmode=os.environ.get("DB_SSLMODE", "prefer"),
    )


api = Blueprint("api", __name__, url_prefix="/api")
site = Blueprint("site", __name__)


# ---------------- HELPERS ----------------
def get_payload():
    return request.get_json(silent=True) or {}


def parse_id(value):
    """Integer id from a JSON int or digit string; None when no id was sent."""
    if value is None:
        return None
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str) and value.isdigit():
        return int(value)
    raise ValueError(f"Invalid id: {value!r}")


def password_bytes(password):
    # bcrypt only reads the first 72 bytes; newer releases raise instead of truncating
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def parse_date(value):
    """Parse an ISO 8601 string or epoch milliseconds into a naive UTC datetime.

    Empty stays None.
    """
    if value in (None, ""):
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc).replace(tzinfo=None)
    parsed = parser.isoparse(value)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def appointment_from_payload(data):
    fields = dict(data)
    fields["appointmentDate"] = parse_date(data.get("appointmentDate"))
    return Appointment.from_json(fields).validate()


# ---------------- HEALTH & ROOT ----------------
@site.route("/")
def home():
    return jsonify({"message": "Healthcare records API running ✅", "status": "healthy"})


@site.route("/health", methods=["GET"])
def health_check():
    """Health check endpoint"""
    try:
        db.session.execute(text("SELECT 1"))
        return jsonify({"status": "healthy", "database": "connected"})
    except Exception as e:
        db.session.rollback()
        current_app.logger.error("Database health check failed: %s", e)
        return jsonify({"status": "unhealthy", "database": "disconnected", "error": str(e)}), 500


# ---------------- PRESCRIPTIONS ----------------
@api.route("/viewAll", methods=["GET"])
def view_all_prescriptions():
    """List every prescription"""
    prescriptions = Prescription.query.order_by(Prescription.id).all()
    return jsonify([p.to_dict() for p in prescriptions])


@api.route("/addNew", methods=["POST"])
def add_prescription():
    """Create a prescription; failures come back as the status text"""
    try:
        prescription = Prescription.from_json(get_payload()).validate()
        db.session.add(prescription)
        db.session.commit()
        return jsonify({"status": "Prescription Saved Successfully"})
    except Exception as e:
        db.session.rollback()
        current_app.logger.error("Saving prescription failed: %s", e)
        return jsonify({"status": str(e)})


@api.route("/deleteUser", methods=["POST"])
def delete_prescription():
    """Delete a prescription by id"""
    try:
        prescription_id = parse_id(get_payload().get("id"))
        Prescription.query.filter_by(id=prescription_id).delete()
        db.session.commit()
        return jsonify({"status": "Prescription deleted successfully"})
    except Exception as e:
        db.session.rollback()
        current_app.logger.error("Deleting prescription failed: %s", e)
        return jsonify({"status": "Error deleting prescription"})


# ---------------- APPOINTMENTS ----------------
@api.route("/appointments", methods=["GET"])
def list_appointments():
    """List appointments, earliest first"""
    try:
        appointments = Appointment.query.order_by(
            Appointment.appointment_date.asc(), Appointment.id.asc()
        ).all()
        return jsonify([a.to_dict() for a in appointments])
    except Exception as e:
        current_app.logger.error("Fetching appointments failed: %s", e)
        return jsonify({"status": "Error fetching appointments", "error": str(e)}), 500


@api.route("/appointments/new", methods=["POST"])
def add_appointment():
    """Schedule an appointment"""
    try:
        appointment = appointment_from_payload(get_payload())
        db.session.add(appointment)
        db.session.commit()
        return jsonify({"status": "Appointment Scheduled Successfully"})
    except Exception as e:
        db.session.rollback()
        current_app.logger.error("Scheduling appointment failed: %s", e)
        return jsonify({"status": str(e)})


@api.route("/appointments/update", methods=["POST"])
def update_appointment():
    """Replace all four fields of an appointment.

    Omitted optional fields are cleared, not kept. An id that matches no
    appointment is not an error.
    """
    try:
        data = get_payload()
        incoming = appointment_from_payload(data)
        appointment_id = parse_id(data.get("id"))
        appointment = None
        if appointment_id is not None:
            appointment = db.session.get(Appointment, appointment_id)
        if appointment is not None:
            appointment.replace(incoming)
            db.session.commit()
        return jsonify({"status": "Appointment Updated Successfully"})
    except Exception as e:
        db.session.rollback()
        current_app.logger.error("Updating appointment failed: %s", e)
        return jsonify({"status": "Error updating appointment", "error": str(e)}), 500


@api.route("/deleteAppointment", methods=["POST"])
def delete_appointment():
    """Cancel an appointment"""
    appointment_id = parse_id(get_payload().get("id"))
    Appointment.query.filter_by(id=appointment_id).delete()
    db.session.commit()
    return jsonify({"status": "Appointment Canceled Successfully"})


# ---------------- AUTHENTICATION ----------------
@api.route("/register", methods=["POST"])
def register():
    """Register a new user"""
    try:
        user = User.from_json(get_payload()).validate()

        existing = User.query.filter(
            or_(User.email == user.email, User.username == user.username)
        ).first()
        if existing:
            return jsonify({"status": "User already exists. Check username or email."}), 400

        rounds = current_app.config["BCRYPT_ROUNDS"]
        user.password = bcrypt.hashpw(
            password_bytes(user.password), bcrypt.gensalt(rounds=rounds)
        ).decode("utf-8")
        db.session.add(user)
        db.session.commit()

        return jsonify({"status": "Registration successful!"}), 201

    except Exception as e:
        db.session.rollback()
        current_app.logger.error("Registration failed: %s", e)
        return jsonify({"status": "Server error during registration.", "error": str(e)}), 500


@api.route("/login", methods=["POST"])
def login():
    """Login with a username or email; no token is issued"""
    try:
        data = get_payload()
        identifier = data.get("identifier")
        password = data.get("password") or ""

        user = User.query.filter(
            or_(User.email == identifier, User.username == identifier)
        ).first()
        if not user:
            return jsonify({"status": "Invalid Credentials: User not found."}), 401

        if not bcrypt.checkpw(password_bytes(password), user.password.encode("utf-8")):
            return jsonify({"status": "Invalid Credentials: Password incorrect."}), 401

        return jsonify({
            "status": "Login successful!",
            "user": {"username": user.username, "full_name": user.full_name},
        })

    except Exception as e:
        current_app.logger.error("Login failed: %s", e)
        return jsonify({"status": "Server error during login.", "error": str(e)}), 500


# ---------------- ERROR HANDLING ----------------
@site.app_errorhandler(404)
def not_found(error):
    return jsonify({"error": "Endpoint not found"}), 404


@site.app_errorhandler(500)
def internal_error(error):
    return jsonify({"error": "Internal server error"}), 500


# ---------------- APPLICATION ----------------
def create_app(config=None):
    app = Flask(__name__)
    app.config.update(
        SQLALCHEMY_DATABASE_URI=default_database_url(),
        SQLALCHEMY_TRACK_MODIFICATIONS=False,
        BCRYPT_ROUNDS=int(os.environ.get("BCRYPT_ROUNDS", 10)),
    )
    if config:
        app.config.update(config)

    CORS(app, resources={r"/*": {"origins": "*"}}, send_wildcard=True)
    db.init_app(app)
    app.register_blueprint(site)
    app.register_blueprint(api)

    with app.app_context():
        db.create_all()

    return app


# ---------------- RUN APPLICATION ----------------
if __name__ == "__main__":
    app = create_app()
    app.logger.info("Starting healthcare records API")
    app.run(
        debug=os.environ.get("FLASK_DEBUG", "0") == "1",
        host="0.0.0.0",
        port=int(os.environ.get("PORT", 7000)),
    )
