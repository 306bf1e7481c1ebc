"""
Bookings API Blueprint
Checkout, the main applicant's visa application and documents, and the
booking's dependants
"""
from flask import Blueprint

bookings_bp = Blueprint('bookings', __name__, url_prefix='/api/bookings')

from . import checkout, applications, documents, dependants
