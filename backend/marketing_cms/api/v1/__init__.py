from flask import Blueprint

# Create the versioned blueprint
v1_bp = Blueprint("v1", __name__)

# Import route modules so they register with v1_bp
from . import health
from . import public
from .cms import cms_bp
from .audit import audit_bp

v1_bp.register_blueprint(cms_bp, url_prefix="/cms")
v1_bp.register_blueprint(audit_bp, url_prefix="/audit-logs")
