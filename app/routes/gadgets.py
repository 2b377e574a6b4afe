from flask import g
from flask_smorest import Blueprint

from app.models.mongodb.gadget import Gadget
from app.schemas.gadget import GadgetCardSchema
from app.services import get_gadget_service
from common.decorator.auth_decorators import login_required, public_route

gadgets_blueprint = Blueprint(
    'gadgets',
    __name__,
    url_prefix='/api/v1/gadgets',
    description='가젯 카탈로그 API'
)


def _gadget_document(gadget: Gadget):
    doc = gadget.to_dict()
    doc['_id'] = str(gadget.id)
    return doc


@gadgets_blueprint.route('/featured', methods=['GET'])
@public_route
@gadgets_blueprint.response(200, GadgetCardSchema(many=True))
def get_featured_gadgets():
    return get_gadget_service().get_featured_gadgets()


@gadgets_blueprint.route('', methods=['GET'])
@public_route
@gadgets_blueprint.response(200, GadgetCardSchema(many=True))
def get_all_gadgets():
    return get_gadget_service().get_all_gadgets()


@gadgets_blueprint.route('/wishlist', methods=['GET'])
@login_required
@gadgets_blueprint.response(200)
@gadgets_blueprint.doc(security=[{"BearerAuth": []}])
def get_wishlist_gadgets():
    gadgets = get_gadget_service().get_wishlist_gadgets(g.identity.email)
    return [_gadget_document(gadget) for gadget in gadgets]


@gadgets_blueprint.route('/<string:gadget_id>', methods=['GET'])
@public_route
@gadgets_blueprint.response(200)
def get_gadget_details(gadget_id):
    return _gadget_document(get_gadget_service().get_gadget_details(gadget_id))
