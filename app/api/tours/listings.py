from flask import request, current_app
from sqlalchemy import desc

from app.api.tours import tours_bp
from app.models import Tour
from app.extensions import db
from app.utils.api_response import APIResponse


@tours_bp.route('', methods=['GET'])
def get_tours():
    """
    List published tours

    Query Parameters:
        category: Filter by category
        packageType: Filter by package type (standard, umrah)
    """
    try:
        query = Tour.query.filter_by(status='published')

        category = request.args.get('category')
        if category:
            query = query.filter_by(category=category)

        package_type = request.args.get('packageType')
        if package_type:
            query = query.filter_by(package_type=package_type)

        tours = query.order_by(desc(Tour.created_at)).all()

        return APIResponse.success(
            data=[tour.to_dict() for tour in tours],
            message=f"Found {len(tours)} tour(s)"
        )

    except Exception as e:
        current_app.logger.error(f"List tours error: {str(e)}")
        return APIResponse.error(
            message="An error occurred while fetching tours",
            status_code=500
        )


@tours_bp.route('/<tour_id>', methods=['GET'])
def get_tour(tour_id):
    """Get a single published tour"""
    try:
        tour = db.session.get(Tour, tour_id)
        if not tour or tour.status != 'published':
            return APIResponse.not_found("Tour not found")

        return APIResponse.success(data=tour.to_dict())

    except Exception as e:
        current_app.logger.error(f"Get tour error: {str(e)}")
        return APIResponse.error(
            message="An error occurred while fetching the tour",
            status_code=500
        )
