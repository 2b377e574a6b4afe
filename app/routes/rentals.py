from flask import g
from flask_smorest import Blueprint

from app.schemas.rental import BookRentalRequestSchema, RentalOrderResponseSchema
from app.services import get_rental_service
from common.decorator.auth_decorators import login_required

rentals_blueprint = Blueprint(
    'rentals',
    __name__,
    url_prefix='/api/v1/rentals',
    description='대여 예약 API'
)


@rentals_blueprint.route('', methods=['POST'])
@login_required
@rentals_blueprint.arguments(BookRentalRequestSchema)
@rentals_blueprint.response(201, RentalOrderResponseSchema)
@rentals_blueprint.doc(security=[{"BearerAuth": []}])
def book_rental(data):
    return get_rental_service().book_rental(g.identity.email, data)


@rentals_blueprint.route('/me', methods=['GET'])
@login_required
@rentals_blueprint.response(200, RentalOrderResponseSchema(many=True))
@rentals_blueprint.doc(security=[{"BearerAuth": []}])
def get_my_rental_orders():
    return get_rental_service().get_rental_orders(g.identity.email)


@rentals_blueprint.route('/<string:order_id>', methods=['GET'])
@login_required
@rentals_blueprint.response(200, RentalOrderResponseSchema)
@rentals_blueprint.doc(security=[{"BearerAuth": []}])
def get_rental_order(order_id):
    return get_rental_service().get_rental_order(order_id, g.identity)
