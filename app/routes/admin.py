from flask import g
from flask_smorest import Blueprint

from app.schemas.message import SendMessageRequestSchema, MessageChainResponseSchema, MessageChainSummarySchema, \
    MessageChainListRequestSchema
from app.services import get_message_service
from common.decorator.auth_decorators import login_required, admin_required

admin_blueprint = Blueprint(
    'admin',
    __name__,
    url_prefix='/api/v1/admin',
    description='관리자 메시지 API'
)


@admin_blueprint.route('/message-chains', methods=['GET'])
@login_required
@admin_required
@admin_blueprint.arguments(MessageChainListRequestSchema, location='query')
@admin_blueprint.response(200, MessageChainSummarySchema(many=True))
@admin_blueprint.doc(security=[{"BearerAuth": []}])
def get_message_chains(args):
    return get_message_service().get_message_chains(only_unread=args.get('only_unread', False))


@admin_blueprint.route('/message-chains/<string:user_email>', methods=['GET'])
@login_required
@admin_required
@admin_blueprint.response(200, MessageChainResponseSchema)
@admin_blueprint.doc(security=[{"BearerAuth": []}])
def get_message_chain(user_email):
    return get_message_service().get_message_chain(user_email)


@admin_blueprint.route('/message-chains/<string:user_email>', methods=['POST'])
@login_required
@admin_required
@admin_blueprint.arguments(SendMessageRequestSchema)
@admin_blueprint.response(201, MessageChainResponseSchema)
@admin_blueprint.doc(security=[{"BearerAuth": []}])
def send_admin_message(data, user_email):
    return get_message_service().append_message(user_email, data['message'], g.identity)


@admin_blueprint.route('/message-chains/<string:user_email>/read', methods=['PATCH'])
@login_required
@admin_required
@admin_blueprint.response(200, MessageChainResponseSchema)
@admin_blueprint.doc(security=[{"BearerAuth": []}])
def mark_chain_read(user_email):
    return get_message_service().mark_read(user_email, g.identity)
