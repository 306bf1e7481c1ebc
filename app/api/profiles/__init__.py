"""
Saved dependant profiles
Traveler details a customer keeps on their account and copies into bookings
"""
from flask import Blueprint

profiles_bp = Blueprint('profiles', __name__, url_prefix='/api/user/dependants')

from . import routes
