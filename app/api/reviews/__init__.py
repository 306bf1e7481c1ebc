"""
Tour reviews: public listing plus customer-owned create, edit and delete
"""
from flask import Blueprint

reviews_bp = Blueprint('reviews', __name__, url_prefix='/api/reviews')

from . import routes
