# Routes package - registers all blueprints with the Flask app

def register_blueprints(app):
    """Register all route blueprints with the Flask app."""
    from .ogn import ogn_bp

    app.register_blueprint(ogn_bp)
