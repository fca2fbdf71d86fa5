from .complaints import complaints_bp
from .mediation import mediation_bp
from .conciliation import conciliation_bp
from .referrals import referrals_bp

def register_admin_blueprints(app):
    app.register_blueprint(complaints_bp)
    app.register_blueprint(mediation_bp)
    app.register_blueprint(conciliation_bp)
    app.register_blueprint(referrals_bp)
