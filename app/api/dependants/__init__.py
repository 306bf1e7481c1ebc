"""
Dependants API Blueprint
A dependant's visa application and documents
"""
from flask import Blueprint

dependants_bp = Blueprint('dependants', __name__, url_prefix='/api/dependants')

from . import routes
