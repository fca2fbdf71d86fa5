import logging

from flask import Flask, jsonify

from lupon.config import Config
from lupon.database.db import db
from lupon.admin.routes import register_admin_blueprints


def create_app(test_config=None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if test_config:
        app.config.update(test_config)

    logging.basicConfig(
        level=app.config["LOG_LEVEL"],
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Initialize db with app
    db.init_app(app)

    register_admin_blueprints(app)

    @app.route("/")
    def home():
        return jsonify({"service": "lupon", "status": "ok"})

    return app


if __name__ == "__main__":
    app = create_app()
    app.run(debug=True)
