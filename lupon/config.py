import os


class Config:
    # Database configuration
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "LUPON_DATABASE_URI", "mysql+pymysql://root@localhost:3306/lupon"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    SECRET_KEY = os.environ.get("LUPON_SECRET_KEY", "change-me")

    # Barangay hall runs on Philippine time
    TIMEZONE = os.environ.get("LUPON_TIMEZONE", "Asia/Manila")

    # Sessions (mediation + conciliation + arbitration) allowed per day
    MAX_SLOTS_PER_DAY = int(os.environ.get("LUPON_MAX_SLOTS_PER_DAY", "4"))

    # Used by the scheduling client when talking to a running backend
    API_BASE_URL = os.environ.get("LUPON_API_BASE_URL", "http://localhost:5000")

    LOG_LEVEL = os.environ.get("LUPON_LOG_LEVEL", "INFO")
