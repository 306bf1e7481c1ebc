# Routes package


def register_blueprints(app):
    """Attach every API blueprint to the app"""
    from app.api.auth import auth_bp
    from app.api.tours import tours_bp
    from app.api.bookings import bookings_bp
    from app.api.dependants import dependants_bp
    from app.api.profiles import profiles_bp
    from app.api.reviews import reviews_bp
    from app.api.admin import admin_bp

    for blueprint in (auth_bp, tours_bp, bookings_bp, dependants_bp, profiles_bp, reviews_bp, admin_bp):
        app.register_blueprint(blueprint)
